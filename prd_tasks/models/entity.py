"""
엔티티/관계 데이터 모델입니다.
엔티티 추출기가 요구사항 문서에서 뽑아낸 데이터 구조를 표현합니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    """엔티티 분류입니다."""

    MASTER = "master"            # 기준 정보 (고객, 상품)
    TRANSACTION = "transaction"  # 거래 정보 (주문)
    REFERENCE = "reference"      # 참조 정보
    LOOKUP = "lookup"            # 코드성 정보
    JUNCTION = "junction"        # 다대다 연결 테이블


class RelationshipKind(str, Enum):
    """관계 종류입니다."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    MANY_TO_MANY = "many-to-many"


class FieldConstraints(BaseModel):
    """필드 제약 조건."""

    primary_key: bool = Field(default=False, description="기본 키 여부")
    unique: bool = Field(default=False, description="유일 값 여부")
    nullable: bool = Field(default=True, description="NULL 허용 여부")
    indexed: bool = Field(default=False, description="인덱스 생성 여부")
    min_length: Optional[int] = Field(default=None, description="최소 길이")
    max_length: Optional[int] = Field(default=None, description="최대 길이")
    min_value: Optional[float] = Field(default=None, description="최소 값")
    max_value: Optional[float] = Field(default=None, description="최대 값")


class EntityField(BaseModel):
    """엔티티 필드 정의."""

    name: str = Field(..., description="필드 이름 (예: orderNo)")
    column_name: str = Field(..., description="컬럼 이름 (예: order_no)")
    data_type: str = Field(default="string", description="논리 데이터 타입 (string, integer, decimal ...)")
    constraints: FieldConstraints = Field(default_factory=FieldConstraints, description="제약 조건")
    enum_values: Optional[list[str]] = Field(default=None, description="enum 타입일 때 허용 값")
    default_value: Optional[str] = Field(default=None, description="기본값")
    description: str = Field(default="", description="필드 설명")


class Entity(BaseModel):
    """엔티티 정의."""

    name: str = Field(..., description="엔티티 이름 (예: Order)")
    table_name: str = Field(..., description="테이블 이름 (예: orders)")
    kind: EntityKind = Field(default=EntityKind.MASTER, description="엔티티 분류")
    description: str = Field(default="", description="엔티티 설명")
    fields: list[EntityField] = Field(default_factory=list, description="필드 목록 (선언 순서)")
    is_auditable: bool = Field(default=True, description="감사 컬럼(created_at 등) 추가 여부")
    is_soft_delete: bool = Field(default=False, description="소프트 삭제 컬럼 추가 여부")

    @property
    def primary_key_field(self) -> Optional[EntityField]:
        """기본 키 필드 (없으면 None)."""
        for f in self.fields:
            if f.constraints.primary_key:
                return f
        return None

    @property
    def primary_key_column(self) -> str:
        """기본 키 컬럼 이름. 선언된 기본 키가 없으면 "id"."""
        pk = self.primary_key_field
        return pk.column_name if pk else "id"

    def find_field(self, name: str) -> Optional[EntityField]:
        """필드 이름 또는 컬럼 이름으로 필드를 찾습니다."""
        for f in self.fields:
            if f.name == name or f.column_name == name:
                return f
        return None


class RelationshipEnd(BaseModel):
    """관계의 한쪽 끝 (엔티티 + 필드)."""

    entity: str = Field(..., description="엔티티 이름")
    field: str = Field(..., description="필드 이름")
    cardinality: Optional[str] = Field(default=None, description="카디널리티 (예: 1, N)")


class Relationship(BaseModel):
    """
    엔티티 간 관계입니다.
    JSON에서는 "from" / "to" 키를 사용합니다.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="관계 이름")
    kind: RelationshipKind = Field(default=RelationshipKind.MANY_TO_ONE, description="관계 종류")
    source: RelationshipEnd = Field(..., alias="from", description="출발 엔티티/필드 (FK를 가진 쪽)")
    target: RelationshipEnd = Field(..., alias="to", description="참조 대상 엔티티/필드")
