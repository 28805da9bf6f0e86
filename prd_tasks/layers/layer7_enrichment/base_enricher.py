"""보강기(enricher) 인터페이스와 보강 컨텍스트."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from prd_tasks.models import ProgrammableTask, TechnicalImplementation


class EnrichmentContext(BaseModel):
    """보강 요청에 함께 전달할 프로젝트 정보."""

    project_name: str = Field(..., description="프로젝트 이름")
    module_name: str = Field(default="core", description="모듈 이름")
    preferred_stack: list[str] = Field(default_factory=list, description="선호 기술 스택")


class BaseTaskEnricher(ABC):
    """
    작업 하나에 기술 구현 가이드를 붙이는 외부 협력자.

    구현체는 다음 예외 계약을 지켜야 합니다:
    - AuthenticationError: 인증 실패 (배치 전체 중단, 재시도 금지)
    - 그 외 예외: 해당 작업만 실패로 기록
    """

    @abstractmethod
    async def enrich(
        self,
        task: ProgrammableTask,
        context: EnrichmentContext,
    ) -> TechnicalImplementation:
        """작업의 기술 구현 가이드 생성."""
        pass
