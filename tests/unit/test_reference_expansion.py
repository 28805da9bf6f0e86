"""Unit tests for reference expansion (layer 3)."""

import pytest

from prd_tasks.layers.layer1_adapter import build_context
from prd_tasks.layers.layer3_expansion import (
    ReferenceExpander,
    expand_references,
    find_references,
    is_bare_reference,
    render_rule,
)
from prd_tasks.models import GenerationOptions, ProgrammableTask, TaskSpecification, TaskType


@pytest.fixture
def context(sample_document, sample_entities):
    return build_context(sample_document, sample_entities)


def _task(requirements, references=None):
    task = ProgrammableTask(
        id="TASK-100",
        title="t",
        type=TaskType.API_CUSTOM,
        specification=TaskSpecification(objective="o", requirements=requirements),
    )
    return task.model_copy(update={"references": references or []})


class TestReferenceDetection:
    @pytest.mark.parametrize("line", ["BR-003", "See BR-003", "as per SCR-002.", "  refer to FR-001 "])
    def test_bare_references(self, line):
        assert is_bare_reference(line)

    @pytest.mark.parametrize("line", ["Quantity must follow BR-003", "[BR-003] rule text", ""])
    def test_not_bare(self, line):
        assert not is_bare_reference(line)

    def test_find_references_dedupes_in_order(self):
        assert find_references("SCR-002 then BR-001 and SCR-002") == ["SCR-002", "BR-001"]


class TestRenderRule:
    def test_full_fragment(self, quantity_rule):
        text = render_rule(quantity_rule)
        assert text.startswith("[BR-001] 주문 수량 검증 (validation): 주문 수량은 1 이상이어야 한다")
        assert "Formula: quantity >= 1" in text
        assert "(Error: 주문 수량은 1 이상이어야 합니다)" in text


class TestReferenceExpander:
    def test_bare_line_replaced_by_fragment(self, context):
        result = ReferenceExpander(context).expand_task(_task(["See BR-001"]))
        [line] = result.specification.requirements
        assert line.startswith("[BR-001]")

    def test_mixed_line_kept_and_fragment_appended(self, context):
        result = ReferenceExpander(context).expand_task(_task(["Render the form as per SCR-002 layout"]))
        lines = result.specification.requirements
        assert lines[0] == "Render the form as per SCR-002 layout"
        assert lines[1].startswith("[SCR-002] 주문 등록 (form, /orders/new)")

    def test_attached_references_inlined_once(self, context):
        result = ReferenceExpander(context).expand_task(_task(["See BR-001"], references=["BR-001", "FR-001"]))
        lines = result.specification.requirements
        assert sum(1 for line in lines if line.startswith("[BR-001]")) == 1
        assert lines[-1] == "[FR-001] 주문 등록: 고객은 주문을 등록할 수 있다"

    def test_unresolved_reference_marked_and_noted(self, context):
        """정의가 없는 참조 줄은 미해결 표시로 바뀌고 notes에 남는다."""
        result = ReferenceExpander(context).expand_task(_task(["See BR-999", "Validate input"]))
        assert result.specification.requirements == [
            "BR-999 (unresolved reference, no definition in the document)",
            "Validate input",
        ]
        assert result.notes == ["Unresolved references: BR-999"]

    def test_input_task_unchanged(self, context):
        task = _task(["See BR-001"])
        ReferenceExpander(context).expand_task(task)
        assert task.specification.requirements == ["See BR-001"]


class TestExpandReferences:
    def test_disabled_adds_pointers(self, sample_document, sample_entities):
        context = build_context(
            sample_document, sample_entities, options=GenerationOptions(expand_references=False)
        )
        [result] = expand_references([_task(["Validate input"], references=["BR-001"])], context)
        assert result.specification.requirements == ["Validate input", "See BR-001"]

    def test_compiled_tasks_have_no_bare_references(self, compiled_task_set):
        for task in compiled_task_set.tasks:
            assert not any(is_bare_reference(line) for line in task.specification.requirements), task.id

    def test_validation_task_carries_rule_fragment(self, compiled_task_set):
        validation = next(t for t in compiled_task_set.tasks if t.type == TaskType.VALIDATION)
        assert any(line.startswith("[BR-001]") for line in validation.specification.requirements)
