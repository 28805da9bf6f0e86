"""
구조화된 요구사항 문서 데이터 모델입니다.
마크다운 파서가 만들어 낸 기능 요구사항, 비즈니스 규칙, 화면 정의를 표현합니다.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .common import Priority


class BusinessRuleKind(str, Enum):
    """비즈니스 규칙 종류입니다."""

    VALIDATION = "validation"    # 입력값 검증
    CALCULATION = "calculation"  # 계산식
    CONSTRAINT = "constraint"    # 제약 조건
    WORKFLOW = "workflow"        # 상태 전이 규칙


class ScreenKind(str, Enum):
    """화면 종류입니다."""

    LIST = "list"
    FORM = "form"
    DETAIL = "detail"
    MODAL = "modal"
    DASHBOARD = "dashboard"
    REPORT = "report"


class BusinessRule(BaseModel):
    """
    비즈니스 규칙입니다.
    예: "BR-003 주문 수량은 1 이상이어야 한다"
    """

    id: str = Field(..., description="규칙 ID (예: BR-003)")
    name: str = Field(..., description="규칙 이름")
    kind: BusinessRuleKind = Field(default=BusinessRuleKind.VALIDATION, description="규칙 종류")
    description: str = Field(default="", description="규칙 설명")
    formula: Optional[str] = Field(default=None, description="계산식 또는 검증식")
    conditions: list[str] = Field(default_factory=list, description="적용 조건")
    error_message: Optional[str] = Field(default=None, description="위반 시 표시할 에러 메시지")
    related_entities: list[str] = Field(default_factory=list, description="관련 엔티티 이름")


class FieldMapping(BaseModel):
    """화면 필드와 엔티티 필드의 매핑입니다."""

    field_name: str = Field(..., description="화면 필드 이름")
    label: Optional[str] = Field(default=None, description="표시 라벨")
    data_type: str = Field(default="string", description="데이터 타입")
    entity_field: Optional[str] = Field(default=None, description="매핑된 엔티티 필드 (예: Order.orderNo)")
    required: bool = Field(default=False, description="필수 입력 여부")
    validation: Optional[str] = Field(default=None, description="필드 검증 규칙")


class ScreenAction(BaseModel):
    """화면에서 수행할 수 있는 동작 (버튼, 링크 등)."""

    name: str = Field(..., description="동작 이름 (예: Save)")
    kind: str = Field(default="button", description="동작 종류")
    target: Optional[str] = Field(default=None, description="이동 경로 또는 호출 대상")


class ScreenLayout(BaseModel):
    """화면 레이아웃 정보."""

    kind: str = Field(default="single-column", description="레이아웃 종류")
    sections: list[str] = Field(default_factory=list, description="섹션 이름 목록")


class Screen(BaseModel):
    """화면 정의."""

    id: str = Field(..., description="화면 ID (예: SCR-002)")
    name: str = Field(..., description="화면 이름")
    kind: ScreenKind = Field(default=ScreenKind.FORM, description="화면 종류")
    route: str = Field(..., description="라우트 경로 (예: /orders)")
    description: str = Field(default="", description="화면 설명")
    layout: ScreenLayout = Field(default_factory=ScreenLayout, description="레이아웃")
    field_mappings: list[FieldMapping] = Field(default_factory=list, description="필드 매핑")
    actions: list[ScreenAction] = Field(default_factory=list, description="화면 동작")


class WorkflowState(BaseModel):
    """워크플로우 상태."""

    name: str = Field(..., description="상태 이름")
    description: str = Field(default="", description="상태 설명")
    is_initial: bool = Field(default=False, description="시작 상태 여부")
    is_final: bool = Field(default=False, description="종료 상태 여부")


class WorkflowTransition(BaseModel):
    """워크플로우 상태 전이."""

    from_state: str = Field(..., description="출발 상태")
    to_state: str = Field(..., description="도착 상태")
    action: str = Field(..., description="전이를 일으키는 동작")
    condition: Optional[str] = Field(default=None, description="전이 조건")
    roles: list[str] = Field(default_factory=list, description="전이를 수행할 수 있는 역할")


class WorkflowDefinition(BaseModel):
    """워크플로우 정의 (상태 + 전이)."""

    name: str = Field(..., description="워크플로우 이름")
    states: list[WorkflowState] = Field(default_factory=list, description="상태 목록")
    transitions: list[WorkflowTransition] = Field(default_factory=list, description="전이 목록")


class FunctionalRequirement(BaseModel):
    """
    기능 요구사항입니다.
    해당 요구사항에 속한 비즈니스 규칙과 화면을 함께 가집니다.
    """

    id: str = Field(..., description="요구사항 ID (예: FR-001)")
    title: str = Field(..., description="요구사항 제목")
    description: str = Field(default="", description="상세 설명")
    priority: Priority = Field(default=Priority.SHOULD, description="우선순위 (MoSCoW)")
    access_roles: list[str] = Field(default_factory=list, description="접근 가능한 역할")
    involved_entities: list[str] = Field(default_factory=list, description="관련 엔티티 이름")
    is_workflow: bool = Field(default=False, description="워크플로우 요구사항 여부")
    workflow_definition: Optional[WorkflowDefinition] = Field(default=None, description="워크플로우 정의")
    business_rules: list[BusinessRule] = Field(default_factory=list, description="비즈니스 규칙")
    screens: list[Screen] = Field(default_factory=list, description="화면")


class StructuredRequirementDoc(BaseModel):
    """
    구조화된 요구사항 문서입니다.
    작업 컴파일러의 입력이며, 요구사항에 배정되지 못한 규칙/화면(orphan)도 보관합니다.
    """

    id: str = Field(..., description="문서 ID")
    project_name: str = Field(..., description="프로젝트 이름")
    module_name: Optional[str] = Field(default=None, description="모듈 이름")
    functional_requirements: list[FunctionalRequirement] = Field(
        default_factory=list, description="기능 요구사항 목록 (문서 순서)"
    )
    unassigned_business_rules: list[BusinessRule] = Field(
        default_factory=list, description="어느 요구사항에도 속하지 않은 비즈니스 규칙"
    )
    unassigned_screens: list[Screen] = Field(
        default_factory=list, description="어느 요구사항에도 속하지 않은 화면"
    )
