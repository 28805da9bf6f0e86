"""API 요청 모델."""

from typing import Optional
from pydantic import BaseModel, Field

from .entity import Entity, Relationship
from .requirement import StructuredRequirementDoc
from .task import GenerationOptions


class TaskGenerationRequest(BaseModel):
    """작업 생성 요청: 구조화된 문서 + 엔티티 + 관계 + 스키마 텍스트."""

    document: StructuredRequirementDoc = Field(..., description="구조화된 요구사항 문서")
    entities: list[Entity] = Field(default_factory=list, description="추출된 엔티티")
    relationships: list[Relationship] = Field(default_factory=list, description="엔티티 관계")
    schema_text: str = Field(default="", description="생성된 스키마 텍스트 (해석하지 않고 참조만 기록)")
    options: Optional[GenerationOptions] = Field(default=None, description="생성 옵션 (없으면 설정값 사용)")


class EnrichmentRequest(BaseModel):
    """작업 보강 요청."""

    concurrency_limit: Optional[int] = Field(default=None, ge=1, le=16, description="동시 보강 작업 수")
    preferred_stack: list[str] = Field(default_factory=list, description="선호 기술 스택 힌트")
