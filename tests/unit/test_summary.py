"""Unit tests for TaskSet summary aggregation (layer 6)."""

import pytest

from prd_tasks.layers.layer6_summary import complexity_from_average, overall_complexity, summarize
from prd_tasks.models import (
    Complexity,
    EnrichmentStatus,
    Priority,
    ProgrammableTask,
    TaskSpecification,
    TaskTier,
    TaskType,
)


def _task(task_id, task_type=TaskType.API_CRUD, tier=TaskTier.T2, complexity=Complexity.SIMPLE,
          priority=Priority.SHOULD, module="core", status=EnrichmentStatus.NOT_ENRICHED):
    return ProgrammableTask(
        id=task_id,
        title=task_id,
        type=task_type,
        tier=tier,
        module=module,
        priority=priority,
        estimated_complexity=complexity,
        enrichment_status=status,
        specification=TaskSpecification(objective="o"),
    )


class TestComplexityFromAverage:
    @pytest.mark.parametrize("average,expected", [
        (1.0, Complexity.TRIVIAL),
        (1.49, Complexity.TRIVIAL),
        (1.5, Complexity.SIMPLE),
        (2.6, Complexity.MODERATE),
        (3.5, Complexity.COMPLEX),
        (4.5, Complexity.VERY_COMPLEX),
    ])
    def test_thresholds(self, average, expected):
        assert complexity_from_average(average) == expected

    def test_empty_is_trivial(self):
        assert overall_complexity([]) == Complexity.TRIVIAL

    def test_average_of_tasks(self):
        tasks = [
            _task("A", complexity=Complexity.SIMPLE),
            _task("B", complexity=Complexity.MODERATE),
            _task("C", complexity=Complexity.COMPLEX),
        ]
        assert overall_complexity(tasks) == Complexity.MODERATE


class TestSummarize:
    def test_breakdowns(self):
        tasks = [
            _task("A", TaskType.DATABASE_MIGRATION, tier=TaskTier.T1, priority=Priority.MUST),
            _task("B", TaskType.API_CRUD, priority=Priority.COULD, module="sales"),
            _task("C", TaskType.API_CRUD, tier=TaskTier.T3, priority=Priority.MUST),
        ]

        summary = summarize(tasks, ["A", "B"])

        assert summary.total_tasks == 3
        assert summary.tier_breakdown == {"T1": 1, "T2": 1, "T3": 1, "T4": 0}
        assert summary.type_breakdown == {"database-migration": 1, "api-crud": 2}
        assert summary.module_breakdown == {"core": 2, "sales": 1}
        assert list(summary.priority_breakdown) == ["must", "could"]
        assert summary.critical_path == ["A", "B"]

    def test_empty(self):
        summary = summarize([])
        assert summary.total_tasks == 0
        assert summary.overall_complexity == Complexity.TRIVIAL
        assert summary.critical_path == []
        assert sum(summary.tier_breakdown.values()) == 0

    def test_enriched_tasks_counted(self):
        tasks = [
            _task("A", status=EnrichmentStatus.ENRICHED),
            _task("B", status=EnrichmentStatus.FAILED),
            _task("C", status=EnrichmentStatus.ENRICHED),
        ]
        assert summarize(tasks).enriched_tasks == 2

    def test_compiled_summary_consistent(self, compiled_task_set):
        summary = compiled_task_set.summary
        assert summary.total_tasks == len(compiled_task_set.tasks)
        assert sum(summary.tier_breakdown.values()) == summary.total_tasks
        assert sum(summary.type_breakdown.values()) == summary.total_tasks
        assert summary.enriched_tasks == 0
