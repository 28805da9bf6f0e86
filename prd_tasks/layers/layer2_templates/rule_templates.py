"""비즈니스 규칙 작업 템플릿 (검증 규칙, 워크플로우)."""

from prd_tasks.models import (
    BusinessRule,
    BusinessRuleKind,
    FunctionalRequirement,
    ProgrammableTask,
    TaskSpecification,
    TaskType,
    ValidationPayload,
    WorkflowPayload,
    WorkflowStateSpec,
    WorkflowTransitionSpec,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext


def _migration_dependency(context: GenerationContext, fr: FunctionalRequirement) -> list[str]:
    """요구사항의 첫 번째 엔티티 마이그레이션 ID (없으면 빈 목록)."""
    entity = context.first_known_entity(fr)
    return [context.migration_ids[entity]] if entity else []


class ValidationRuleTemplate(BaseTaskTemplate):
    """validation 종류의 비즈니스 규칙마다 검증 작업을 만듭니다. 같은 규칙 ID는 한 번만."""

    _template_name = "ValidationRuleTemplate"

    def _do_generate(self, context, existing):
        tasks = []
        seen: set[str] = set()
        for fr in context.requirements:
            for rule in fr.business_rules:
                if rule.kind != BusinessRuleKind.VALIDATION or rule.id in seen:
                    continue
                seen.add(rule.id)
                tasks.append(self._build(context, fr, rule))
        return tasks

    def _build(self, context: GenerationContext, fr: FunctionalRequirement, rule: BusinessRule) -> ProgrammableTask:
        task_id = context.counter.next_id()
        error_message = rule.error_message or f"{rule.name} validation failed"

        payload = ValidationPayload(
            rule_id=rule.id,
            rule_kind=rule.kind.value,
            description=rule.description,
            formula=rule.formula,
            conditions=list(rule.conditions),
            error_message=error_message,
        )

        requirements = [f"Enforce validation rule {rule.id} ({rule.name}) on both client and server"]
        if rule.formula:
            requirements.append(f"Evaluate: {rule.formula}")
        requirements.append(f'Reject invalid input with the message "{error_message}"')

        spec = TaskSpecification(
            objective=f"Implement validation rule {rule.name}",
            context=f"Part of {fr.id} {fr.title}",
            requirements=requirements,
            payload=payload,
            edge_cases=[f"Boundary values for: {c}" for c in rule.conditions],
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"Validation: {rule.name}",
            task_type=TaskType.VALIDATION,
            specification=spec,
            priority=fr.priority,
            related_requirement=fr.id,
            related_entity=context.first_known_entity(fr),
            dependencies=_migration_dependency(context, fr),
            acceptance_criteria=[
                "Valid input is accepted",
                f'Invalid input is rejected with "{error_message}"',
            ],
            test_cases=[
                self._test_case(task_id, 1, f"{rule.id} accepts valid input"),
                self._test_case(task_id, 2, f"{rule.id} rejects invalid input",
                                expected_result=error_message),
            ],
            tags=["validation", rule.id],
            references=[rule.id],
        )


class WorkflowTemplate(BaseTaskTemplate):
    """워크플로우 정의가 있는 요구사항마다 상태 머신 작업을 만듭니다."""

    _template_name = "WorkflowTemplate"

    def _do_generate(self, context, existing):
        return [
            self._build(context, fr)
            for fr in context.requirements
            if fr.is_workflow and fr.workflow_definition is not None
        ]

    def _build(self, context: GenerationContext, fr: FunctionalRequirement) -> ProgrammableTask:
        workflow = fr.workflow_definition
        task_id = context.counter.next_id()

        states = []
        for state in workflow.states:
            transitions = [
                WorkflowTransitionSpec(
                    target_state=t.to_state,
                    action=t.action,
                    condition=t.condition,
                    roles=list(t.roles),
                )
                for t in workflow.transitions
                if t.from_state == state.name
            ]
            states.append(WorkflowStateSpec(name=state.name, description=state.description, transitions=transitions))

        initial = next((s.name for s in workflow.states if s.is_initial), None)
        if initial is None and workflow.states:
            initial = workflow.states[0].name
        final_states = [s.name for s in workflow.states if s.is_final]
        if not final_states:
            final_states = [s.name for s in states if not s.transitions]

        payload = WorkflowPayload(
            workflow_name=workflow.name,
            states=states,
            initial_state=initial,
            final_states=final_states,
        )

        requirements = [f"Implement the {workflow.name} state machine starting at {initial}"]
        for t in workflow.transitions:
            cond = f" when {t.condition}" if t.condition else ""
            requirements.append(f"{t.from_state} → {t.to_state} on {t.action}{cond}")
        requirements.append(f"Final states: {', '.join(final_states) or 'none'}")

        rule_refs = [r.id for r in fr.business_rules if r.kind == BusinessRuleKind.WORKFLOW]

        spec = TaskSpecification(
            objective=f"Implement workflow {workflow.name}",
            context=fr.description,
            requirements=requirements,
            payload=payload,
            edge_cases=[
                "Transitions not defined for the current state are rejected",
                "Concurrent transitions on the same record do not corrupt the state",
            ],
            security_notes=(
                ["Check the acting role for each transition"]
                if any(t.roles for t in workflow.transitions) else []
            ),
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"Workflow: {workflow.name}",
            task_type=TaskType.WORKFLOW,
            specification=spec,
            priority=fr.priority,
            related_requirement=fr.id,
            related_entity=context.first_known_entity(fr),
            dependencies=_migration_dependency(context, fr),
            acceptance_criteria=[
                f"New records start in {initial}",
                "Every defined transition moves the record to its target state",
                "Undefined transitions return an error and leave the state unchanged",
            ],
            test_cases=[
                self._test_case(task_id, i + 1, f"{t.from_state} → {t.to_state}", "unit")
                for i, t in enumerate(workflow.transitions)
            ],
            tags=["workflow", fr.id],
            references=[fr.id, *rule_refs],
        )
