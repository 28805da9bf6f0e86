"""Layer 6: TaskSet 요약 집계."""

from prd_tasks.models import (
    COMPLEXITY_ORDINAL,
    Complexity,
    EnrichmentStatus,
    Priority,
    ProgrammableTask,
    TaskSummary,
    TaskTier,
    TaskType,
)


def complexity_from_average(average: float) -> Complexity:
    """
    평균 복잡도 서열값을 전체 복잡도로 변환합니다.

    < 1.5 trivial, < 2.5 simple, < 3.5 moderate, < 4.5 complex, 그 외 very-complex
    """
    if average < 1.5:
        return Complexity.TRIVIAL
    if average < 2.5:
        return Complexity.SIMPLE
    if average < 3.5:
        return Complexity.MODERATE
    if average < 4.5:
        return Complexity.COMPLEX
    return Complexity.VERY_COMPLEX


def overall_complexity(tasks: list[ProgrammableTask]) -> Complexity:
    if not tasks:
        return Complexity.TRIVIAL
    total = sum(COMPLEXITY_ORDINAL[t.estimated_complexity] for t in tasks)
    return complexity_from_average(total / len(tasks))


def summarize(
    tasks: list[ProgrammableTask],
    critical_path: list[str] | None = None,
) -> TaskSummary:
    """
    작업 목록 요약.

    계층별 건수는 T1~T4를 모두 포함하고, 유형/우선순위별 건수는 등장한 값만 고정 순서로 담습니다.
    """
    tier_breakdown = {tier.value: 0 for tier in TaskTier}
    type_counts: dict[TaskType, int] = {}
    module_breakdown: dict[str, int] = {}
    priority_counts: dict[Priority, int] = {}

    for task in tasks:
        tier_breakdown[task.tier.value] += 1
        type_counts[task.type] = type_counts.get(task.type, 0) + 1
        module_breakdown[task.module] = module_breakdown.get(task.module, 0) + 1
        priority_counts[task.priority] = priority_counts.get(task.priority, 0) + 1

    return TaskSummary(
        total_tasks=len(tasks),
        tier_breakdown=tier_breakdown,
        type_breakdown={t.value: type_counts[t] for t in TaskType if t in type_counts},
        module_breakdown=module_breakdown,
        priority_breakdown={p.value: priority_counts[p] for p in Priority if p in priority_counts},
        overall_complexity=overall_complexity(tasks),
        critical_path=list(critical_path or []),
        enriched_tasks=sum(1 for t in tasks if t.enrichment_status == EnrichmentStatus.ENRICHED),
    )
