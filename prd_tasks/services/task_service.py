"""
작업 생성/보강 서비스.

컴파일러의 호출자로서 다음을 담당합니다:
- GenerationError 발생 시 최소 생성기(스키마 + CRUD)로 대체
- 생성된 TaskSet 메모리 보관
- TaskSet별 단일 작성자 규칙 (보강 중에는 같은 TaskSet을 다시 쓰지 않음)
- 보강 실행과 취소
"""

import asyncio
import logging
from typing import Optional

from prd_tasks.config import Settings, get_settings
from prd_tasks.exceptions import (
    AuthenticationError,
    ConcurrentOperationError,
    GenerationError,
    TaskSetNotFoundError,
)
from prd_tasks.models import (
    EnrichmentRequest,
    GenerationOptions,
    TaskGenerationRequest,
    TaskSet,
)
from prd_tasks.layers.task_compiler import TaskCompiler
from prd_tasks.layers.layer6_summary import summarize
from prd_tasks.layers.layer7_enrichment import (
    BaseTaskEnricher,
    CancellationToken,
    ClaudeTaskEnricher,
    EnrichmentContext,
    EnrichmentProgress,
    run_enrichment,
)

logger = logging.getLogger(__name__)


class TaskService:
    """TaskSet 생성, 조회, 보강을 관리하는 서비스."""

    def __init__(
        self,
        compiler: Optional[TaskCompiler] = None,
        enricher: Optional[BaseTaskEnricher] = None,
        settings: Optional[Settings] = None,
    ):
        self._compiler = compiler or TaskCompiler()
        self._enricher = enricher
        self._settings = settings or get_settings()
        self._task_sets: dict[str, TaskSet] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._cancel_tokens: dict[str, CancellationToken] = {}

    @property
    def enricher(self) -> BaseTaskEnricher:
        if self._enricher is None:
            self._enricher = ClaudeTaskEnricher()
        return self._enricher

    def default_options(self) -> GenerationOptions:
        """설정값으로 생성 옵션 기본값을 만듭니다."""
        return GenerationOptions(
            expand_references=self._settings.expand_references,
            environment_provisioned=self._settings.environment_provisioned,
            orphan_policy=self._settings.orphan_policy,
        )

    def generate(self, request: TaskGenerationRequest) -> TaskSet:
        """
        TaskSet 생성.

        전체 컴파일이 GenerationError로 실패하면 최소 생성기 결과를 degraded로 표시해 반환합니다.
        MissingInputError, GraphConsistencyError는 그대로 전파합니다.
        """
        options = request.options or self.default_options()
        if options.module_name is None and not request.document.module_name:
            options = options.model_copy(update={"module_name": self._settings.default_module_name})

        try:
            task_set = self._compiler.compile(
                request.document,
                request.entities,
                request.relationships,
                request.schema_text,
                options,
            )
        except GenerationError as e:
            logger.warning(f"[TaskService] 전체 생성 실패, 최소 생성으로 대체: {e.message}")
            task_set = self._compiler.compile_minimal(
                request.document,
                request.entities,
                request.relationships,
                request.schema_text,
                options,
                reason=e.message,
            )

        lock = self._locks.get(task_set.id)
        if lock is not None and lock.locked():
            raise ConcurrentOperationError(
                "같은 TaskSet에 대한 보강이 진행 중입니다",
                details={"task_set_id": task_set.id},
            )

        self._task_sets[task_set.id] = task_set
        logger.info(f"[TaskService] TaskSet 저장: {task_set.id} (작업 {len(task_set.tasks)}개)")
        return task_set

    def get(self, task_set_id: str) -> TaskSet:
        task_set = self._task_sets.get(task_set_id)
        if task_set is None:
            raise TaskSetNotFoundError(
                "TaskSet을 찾을 수 없습니다", details={"task_set_id": task_set_id}
            )
        return task_set

    async def enrich(
        self,
        task_set_id: str,
        request: Optional[EnrichmentRequest] = None,
    ) -> TaskSet:
        """
        TaskSet 보강 (TaskSet당 한 번에 하나만).

        Raises:
            TaskSetNotFoundError: TaskSet 없음
            ConcurrentOperationError: 이미 보강 중
            AuthenticationError: 인증 실패 (메타데이터에 failed 기록 후 전파)
        """
        task_set = self.get(task_set_id)
        request = request or EnrichmentRequest()

        lock = self._locks.setdefault(task_set_id, asyncio.Lock())
        if lock.locked():
            raise ConcurrentOperationError(
                "같은 TaskSet에 대한 보강이 이미 진행 중입니다",
                details={"task_set_id": task_set_id},
            )

        try:
            async with lock:
                if not self._settings.enrichment_enabled:
                    metadata = task_set.metadata.model_copy(update={
                        "implementation_status": "skipped",
                        "implementation_skipped_reason": "enrichment disabled",
                    })
                    updated = task_set.model_copy(update={"metadata": metadata})
                    self._task_sets[task_set_id] = updated
                    logger.info(f"[TaskService] 보강 비활성화: {task_set_id}")
                    return updated

                token = CancellationToken()
                self._cancel_tokens[task_set_id] = token
                context = EnrichmentContext(
                    project_name=task_set.metadata.project_name,
                    module_name=task_set.metadata.module_name,
                    preferred_stack=request.preferred_stack,
                )

                def _on_progress(progress: EnrichmentProgress) -> None:
                    logger.info(
                        f"[TaskService] 보강 진행 {progress.completed}/{progress.total}: {progress.task_id}"
                    )

                try:
                    result = await run_enrichment(
                        task_set.tasks,
                        context,
                        self.enricher,
                        cancel_token=token,
                        on_progress=_on_progress,
                        concurrency_limit=request.concurrency_limit or self._settings.enrichment_concurrency,
                    )
                except AuthenticationError as e:
                    metadata = task_set.metadata.model_copy(update={
                        "implementation_status": "failed",
                        "implementation_skipped_reason": f"authentication failed: {e.message}",
                    })
                    self._task_sets[task_set_id] = task_set.model_copy(update={"metadata": metadata})
                    raise
                finally:
                    self._cancel_tokens.pop(task_set_id, None)

                summary = summarize(result.tasks, task_set.summary.critical_path)
                metadata = task_set.metadata.model_copy(update=result.metadata_updates)
                updated = task_set.model_copy(update={
                    "tasks": result.tasks,
                    "summary": summary,
                    "metadata": metadata,
                })
                self._task_sets[task_set_id] = updated
                return updated
        finally:
            # 끝난 보강의 잠금은 남기지 않음
            if self._locks.get(task_set_id) is lock and not lock.locked():
                del self._locks[task_set_id]

    def cancel_enrichment(self, task_set_id: str) -> bool:
        """진행 중인 보강을 취소합니다. 진행 중인 보강이 없으면 False."""
        self.get(task_set_id)
        token = self._cancel_tokens.get(task_set_id)
        if token is None:
            return False
        token.cancel("cancelled by user")
        logger.info(f"[TaskService] 보강 취소 요청: {task_set_id}")
        return True


# Singleton instance for dependency injection
_task_service: Optional[TaskService] = None


def get_task_service() -> TaskService:
    """Get or create task service singleton."""
    global _task_service
    if _task_service is None:
        _task_service = TaskService()
    return _task_service
