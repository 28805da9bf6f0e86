"""Base template class for all task families.

이 모듈은 스키마, CRUD, 화면, 규칙, 조립 작업 템플릿들이 공통으로 사용하는
기본 기능을 제공하는 추상 베이스 클래스를 정의합니다.

주요 기능:
- 컨텍스트의 ID 발급기를 통한 작업 ID 생성
- 템플릿 메서드 패턴을 통한 일관된 생성 흐름
- 예기치 못한 예외를 GenerationError로 변환
- 로깅 표준화
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from prd_tasks.exceptions import GenerationError, TaskCompilerError
from prd_tasks.models import (
    Entity,
    ExecutionMode,
    Priority,
    ProgrammableTask,
    TaskSpecification,
    TaskType,
    TestCase,
    highest_priority,
)
from prd_tasks.layers.layer1_adapter import GenerationContext

logger = logging.getLogger(__name__)


class BaseTaskTemplate(ABC):
    """
    작업 템플릿 추상 베이스 클래스.

    Template Method 패턴으로 일관된 생성 흐름을 보장합니다:
    1. 시작 시간 기록
    2. _do_generate() 호출 (서브클래스 구현)
    3. 예외 변환 (TaskCompilerError는 그대로, 나머지는 GenerationError)
    4. 생성 개수와 소요 시간 로깅

    Attributes:
        _template_name: 로깅에 사용되는 템플릿 이름

    Example:
        class MyTemplate(BaseTaskTemplate):
            _template_name = "MyTemplate"

            def _do_generate(self, context, existing):
                return [self._new_task(context, ...)]
    """

    _template_name: str = "BaseTaskTemplate"

    def generate(
        self,
        context: GenerationContext,
        existing: list[ProgrammableTask],
    ) -> list[ProgrammableTask]:
        """
        작업 생성 템플릿 메서드.

        Args:
            context: 생성 컨텍스트
            existing: 앞선 패밀리에서 이미 생성된 작업 (의존성 조회용, 수정하지 않음)

        Returns:
            이 템플릿이 새로 만든 작업 목록

        Raises:
            GenerationError: 템플릿 실행 중 예기치 못한 예외
        """
        start_time = datetime.now()

        try:
            tasks = self._do_generate(context, existing)
        except TaskCompilerError:
            raise
        except Exception as e:
            logger.error(f"[{self._template_name}] 작업 생성 실패: {type(e).__name__}: {e}")
            raise GenerationError(
                f"{self._template_name} 작업 생성 중 오류가 발생했습니다: {e}",
                details={"template": self._template_name},
            ) from e

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.debug(f"[{self._template_name}] 작업 {len(tasks)}개 생성 ({elapsed:.3f}초)")
        return tasks

    @abstractmethod
    def _do_generate(
        self,
        context: GenerationContext,
        existing: list[ProgrammableTask],
    ) -> list[ProgrammableTask]:
        """
        실제 작업 생성 로직 (서브클래스에서 구현).

        Args:
            context: 생성 컨텍스트
            existing: 이미 생성된 작업

        Returns:
            생성된 작업 목록
        """
        pass

    def _new_task(
        self,
        context: GenerationContext,
        *,
        title: str,
        task_type: TaskType,
        specification: TaskSpecification,
        task_id: Optional[str] = None,
        **fields,
    ) -> ProgrammableTask:
        """
        작업 생성 공통 메서드.

        task_id가 없으면 컨텍스트의 발급기에서 새 ID를 받습니다.
        계층/복잡도는 분류 단계에서 채워집니다.
        """
        return ProgrammableTask(
            id=task_id or context.counter.next_id(),
            title=title,
            type=task_type,
            module=context.module_name,
            specification=specification,
            **fields,
        )

    @staticmethod
    def _tasks_of(existing: list[ProgrammableTask], *types: TaskType) -> list[ProgrammableTask]:
        """특정 유형의 기존 작업만 골라냅니다 (생성 순서 유지)."""
        return [t for t in existing if t.type in types]

    @staticmethod
    def _test_case(
        task_id: str,
        seq: int,
        name: str,
        kind: str = "unit",
        description: str = "",
        steps: Optional[list[str]] = None,
        expected_result: str = "",
    ) -> TestCase:
        return TestCase(
            id=f"{task_id}-TC{seq:02d}",
            name=name,
            kind=kind,
            description=description,
            steps=steps or [],
            expected_result=expected_result,
        )

    @staticmethod
    def _entity_priority(context: GenerationContext, entity: Entity) -> Priority:
        """엔티티를 다루는 요구사항 중 가장 높은 우선순위."""
        return highest_priority([fr.priority for fr in context.requirements_for_entity(entity.name)])

    @staticmethod
    def _entity_requirement_id(context: GenerationContext, entity: Entity) -> Optional[str]:
        frs = context.requirements_for_entity(entity.name)
        return frs[0].id if frs else None

    @staticmethod
    def _entity_roles(context: GenerationContext, entity: Entity) -> list[str]:
        roles: list[str] = []
        for fr in context.requirements_for_entity(entity.name):
            for role in fr.access_roles:
                if role not in roles:
                    roles.append(role)
        return roles

    @staticmethod
    def _provisioning_mode(context: GenerationContext) -> ExecutionMode:
        return ExecutionMode.SKIP if context.options.environment_provisioned else ExecutionMode.CODE_GENERATION
