"""Unit tests for dependency resolution and graph validation (layer 4)."""

import pytest

from prd_tasks.exceptions import GraphConsistencyError
from prd_tasks.layers.layer4_dependencies import (
    attach_dependents,
    calculate_critical_path,
    needs_migration_dependency,
    resolve_dependencies,
    topological_order,
    validate_graph,
)
from prd_tasks.models import Complexity, ProgrammableTask, TaskSpecification, TaskType


def _task(task_id, task_type=TaskType.API_CRUD, dependencies=None, entity=None,
          complexity=Complexity.SIMPLE):
    return ProgrammableTask(
        id=task_id,
        title=task_id,
        type=task_type,
        related_entity=entity,
        dependencies=dependencies or [],
        estimated_complexity=complexity,
        specification=TaskSpecification(objective="o"),
    )


# ---------------------------------------------------------------------------
# resolve_dependencies
# ---------------------------------------------------------------------------

class TestResolveDependencies:
    def test_family_filter(self):
        assert needs_migration_dependency(_task("A", TaskType.API_CRUD))
        assert needs_migration_dependency(_task("A", TaskType.UI_FORM))
        assert needs_migration_dependency(_task("A", TaskType.SERVICE_LAYER))
        assert not needs_migration_dependency(_task("A", TaskType.VALIDATION))
        assert not needs_migration_dependency(_task("A", TaskType.TEST))

    def test_adds_migration_case_insensitive(self):
        tasks = [
            _task("TASK-001", TaskType.DATABASE_MIGRATION, entity="Order"),
            _task("TASK-002", TaskType.API_CRUD, entity="order"),
        ]
        resolved = resolve_dependencies(tasks, {"Order": "TASK-001"})
        assert resolved[1].dependencies == ["TASK-001"]
        assert resolved[0].dependencies == []

    def test_no_duplicate_and_appended(self):
        tasks = [
            _task("TASK-001", TaskType.DATABASE_MIGRATION, entity="Order"),
            _task("TASK-002", TaskType.UI_LIST, entity="Order", dependencies=["TASK-001"]),
            _task("TASK-003", TaskType.UI_FORM, entity="Order", dependencies=["TASK-002"]),
        ]
        resolved = resolve_dependencies(tasks, {"Order": "TASK-001"})
        assert resolved[1].dependencies == ["TASK-001"]
        assert resolved[2].dependencies == ["TASK-002", "TASK-001"]

    def test_other_families_untouched(self):
        tasks = [
            _task("TASK-001", TaskType.DATABASE_MIGRATION, entity="Order"),
            _task("TASK-002", TaskType.TEST, entity="Order"),
            _task("TASK-003", TaskType.API_CRUD),
        ]
        resolved = resolve_dependencies(tasks, {"Order": "TASK-001"})
        assert resolved[1].dependencies == []
        assert resolved[2].dependencies == []


# ---------------------------------------------------------------------------
# validate_graph / topological_order
# ---------------------------------------------------------------------------

class TestValidateGraph:
    def test_valid_graph(self):
        tasks = [_task("A"), _task("B", dependencies=["A"]), _task("C", dependencies=["A", "B"])]
        validate_graph(tasks)
        assert topological_order(tasks) == ["A", "B", "C"]

    def test_missing_dependency(self):
        with pytest.raises(GraphConsistencyError) as exc_info:
            validate_graph([_task("A", dependencies=["GHOST"])])
        assert exc_info.value.details == {"task_id": "A", "missing": ["GHOST"]}

    def test_cycle(self):
        tasks = [_task("A", dependencies=["C"]), _task("B", dependencies=["A"]), _task("C", dependencies=["B"])]
        with pytest.raises(GraphConsistencyError) as exc_info:
            validate_graph(tasks)
        cycle = exc_info.value.details["cycle"]
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"A", "B", "C"}

    def test_self_dependency_is_a_cycle(self):
        with pytest.raises(GraphConsistencyError):
            validate_graph([_task("A", dependencies=["A"])])

    def test_duplicate_ids(self):
        with pytest.raises(GraphConsistencyError):
            validate_graph([_task("A"), _task("A")])


# ---------------------------------------------------------------------------
# attach_dependents / critical path
# ---------------------------------------------------------------------------

class TestDependents:
    def test_reverse_edges(self):
        tasks = attach_dependents([_task("A"), _task("B", dependencies=["A"]), _task("C", dependencies=["A"])])
        assert tasks[0].dependents == ["B", "C"]
        assert tasks[1].dependents == []


class TestCriticalPath:
    def test_empty(self):
        assert calculate_critical_path([]) == []

    def test_weighted_by_complexity(self):
        tasks = [
            _task("A"),
            _task("B", dependencies=["A"], complexity=Complexity.COMPLEX),
            _task("C"),
            _task("D", dependencies=["C"]),
        ]
        assert calculate_critical_path(tasks) == ["A", "B"]

    def test_tie_prefers_earlier_task(self):
        tasks = [_task("A"), _task("B"), _task("C", dependencies=["A", "B"])]
        assert calculate_critical_path(tasks) == ["A", "C"]

    def test_compiled_path_is_a_chain(self, compiled_task_set):
        path = compiled_task_set.summary.critical_path
        assert len(path) >= 2
        for prev_id, next_id in zip(path, path[1:]):
            assert prev_id in compiled_task_set.get_task(next_id).dependencies
