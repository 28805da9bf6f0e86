"""
Layer 7: 보강 실행기.

code-generation 작업마다 보강기를 호출해 기술 구현 가이드를 붙입니다.

동시성/취소 규칙:
- asyncio.Semaphore로 동시 실행 수 제한 (기본 3)
- 세마포어를 얻은 뒤, 보내기 직전에 취소 토큰 확인
- 진행 콜백은 작업이 끝날 때마다(성공/실패 모두) 호출
- 취소: 끝난 결과는 유지하고 나머지는 not_enriched, 예외 없음
- 작업별 실패: failed로 기록하고 계속 진행
- AuthenticationError: 대기 중이거나 진행 중인 나머지 작업을 즉시 취소하고 예외를 다시 발생
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, Field

from prd_tasks.exceptions import AuthenticationError
from prd_tasks.models import (
    EnrichmentFailure,
    EnrichmentStatus,
    ExecutionMode,
    ProgrammableTask,
    TechnicalImplementation,
)

from .base_enricher import BaseTaskEnricher, EnrichmentContext
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY_LIMIT = 3


@dataclass
class EnrichmentProgress:
    """진행 콜백에 전달되는 정보."""
    completed: int
    total: int
    task_id: str
    succeeded: bool


ProgressCallback = Callable[[EnrichmentProgress], Union[None, Awaitable[None]]]


class EnrichmentResult(BaseModel):
    """보강 결과: 갱신된 작업, 메타데이터 갱신값, 작업별 실패."""

    tasks: list[ProgrammableTask] = Field(default_factory=list)
    metadata_updates: dict[str, Any] = Field(default_factory=dict)
    failures: list[EnrichmentFailure] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def enriched_count(self) -> int:
        return sum(1 for t in self.tasks if t.enrichment_status == EnrichmentStatus.ENRICHED)


def is_enrichment_target(task: ProgrammableTask) -> bool:
    return task.execution_mode == ExecutionMode.CODE_GENERATION


async def run_enrichment(
    tasks: list[ProgrammableTask],
    context: EnrichmentContext,
    enricher: BaseTaskEnricher,
    cancel_token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressCallback] = None,
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
) -> EnrichmentResult:
    """
    작업 목록 보강.

    Args:
        tasks: 보강할 작업 목록 (수정하지 않음)
        context: 보강 컨텍스트
        enricher: 보강기
        cancel_token: 협조적 취소 토큰
        on_progress: 진행 콜백 (동기/비동기 모두 가능)
        concurrency_limit: 동시 실행 수

    Returns:
        EnrichmentResult

    Raises:
        AuthenticationError: 인증 실패 시 (details에 부분 결과 요약).
            이때 진행 중인 다른 호출은 취소되어 not_enriched로 남습니다.
    """
    if concurrency_limit < 1:
        raise ValueError("concurrency_limit must be >= 1")

    cancel_token = cancel_token or CancellationToken()
    targets = [t for t in tasks if is_enrichment_target(t)]
    total = len(targets)

    if not targets:
        logger.info("[Enrichment] 보강 대상 작업 없음")
        return EnrichmentResult(
            tasks=[_mark(t, EnrichmentStatus.SKIPPED) for t in tasks],
            metadata_updates={
                "implementation_status": "skipped",
                "implementation_skipped_reason": "no code-generation tasks",
            },
        )

    logger.info(f"[Enrichment] 보강 시작: {total}개 작업 (동시 {concurrency_limit}개)")
    start_time = datetime.now()

    semaphore = asyncio.Semaphore(concurrency_limit)
    implementations: dict[str, TechnicalImplementation] = {}
    failures: dict[str, str] = {}
    completed = 0
    auth_error: Optional[AuthenticationError] = None
    pending: list[asyncio.Task] = []

    async def _enrich_one(task: ProgrammableTask) -> None:
        nonlocal completed, auth_error

        async with semaphore:
            # 보내기 직전 확인
            if cancel_token.is_cancelled or auth_error is not None:
                return

            try:
                implementations[task.id] = await enricher.enrich(task, context)
                succeeded = True
            except AuthenticationError as e:
                logger.error(f"[Enrichment] 인증 실패로 배치 중단: {e.message}")
                if auth_error is None:
                    auth_error = e
                    # 진행 중인 호출도 결과를 기다리지 않고 취소
                    current = asyncio.current_task()
                    for other in pending:
                        if other is not current and not other.done():
                            other.cancel()
                return
            except Exception as e:
                logger.warning(f"[Enrichment] {task.id} 보강 실패: {type(e).__name__}: {e}")
                failures[task.id] = str(e) or type(e).__name__
                succeeded = False

            completed += 1
            if on_progress is not None:
                outcome = on_progress(EnrichmentProgress(completed, total, task.id, succeeded))
                if inspect.isawaitable(outcome):
                    await outcome

    pending.extend(asyncio.create_task(_enrich_one(t)) for t in targets)
    outcomes = await asyncio.gather(*pending, return_exceptions=True)
    # 취소된 작업(CancelledError)은 not_enriched로 남고, 그 밖의 예외는 그대로 전파
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            raise outcome

    updated = []
    for task in tasks:
        if task.id in implementations:
            spec = task.specification.model_copy(
                update={"technical_implementation": implementations[task.id]}
            )
            updated.append(task.model_copy(update={
                "specification": spec,
                "enrichment_status": EnrichmentStatus.ENRICHED,
                "enrichment_error": None,
            }))
        elif task.id in failures:
            updated.append(task.model_copy(update={
                "enrichment_status": EnrichmentStatus.FAILED,
                "enrichment_error": failures[task.id],
            }))
        elif is_enrichment_target(task):
            updated.append(_mark(task, EnrichmentStatus.NOT_ENRICHED))
        else:
            updated.append(_mark(task, EnrichmentStatus.SKIPPED))

    failure_records = [EnrichmentFailure(task_id=k, error=v) for k, v in failures.items()]
    elapsed = (datetime.now() - start_time).total_seconds()

    if auth_error is not None:
        raise AuthenticationError(
            auth_error.message,
            details={
                "enriched_task_ids": sorted(implementations),
                "failed_task_ids": sorted(failures),
                "total_targets": total,
            },
        )

    cancelled = cancel_token.is_cancelled and len(implementations) + len(failures) < total
    status = _implementation_status(len(implementations), len(failures), total, cancelled)

    metadata_updates: dict[str, Any] = {
        "implementation_status": status,
        "enrichment_failures": failure_records,
    }
    if cancelled:
        metadata_updates["implementation_skipped_reason"] = cancel_token.reason

    logger.info(
        f"[Enrichment] 보강 완료: 성공 {len(implementations)}개, 실패 {len(failures)}개, "
        f"미처리 {total - len(implementations) - len(failures)}개 ({elapsed:.1f}초, 상태={status})"
    )

    return EnrichmentResult(
        tasks=updated,
        metadata_updates=metadata_updates,
        failures=failure_records,
        cancelled=cancelled,
    )


def _mark(task: ProgrammableTask, status: EnrichmentStatus) -> ProgrammableTask:
    return task.model_copy(update={"enrichment_status": status})


def _implementation_status(enriched: int, failed: int, total: int, cancelled: bool) -> str:
    if cancelled:
        return "cancelled"
    if enriched == total:
        return "enriched"
    if enriched == 0 and failed > 0:
        return "failed"
    return "partial"
