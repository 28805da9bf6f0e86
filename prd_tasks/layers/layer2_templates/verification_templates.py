"""검증 작업 템플릿 (엔티티별 수동 테스트, 요구사항별 E2E 흐름)."""

import logging

from prd_tasks.models import (
    E2EPayload,
    Entity,
    ExecutionMode,
    FunctionalRequirement,
    ProgrammableTask,
    TaskSpecification,
    TaskType,
    TestPayload,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext

from .type_mapping import CRUD_OPERATIONS, api_base_path

logger = logging.getLogger(__name__)

# E2E 시나리오에 넣을 규칙 위반 케이스 최대 개수
MAX_VIOLATION_SCENARIOS = 2


class EntityTestTemplate(BaseTaskTemplate):
    """엔티티별 단위/통합/E2E 커버리지 작업 (수동 실행)."""

    _template_name = "EntityTestTemplate"

    def _do_generate(self, context, existing):
        crud = self._tasks_of(existing, TaskType.API_CRUD)
        return [self._build(context, entity, crud) for entity in context.entities]

    def _build(
        self,
        context: GenerationContext,
        entity: Entity,
        crud: list[ProgrammableTask],
    ) -> ProgrammableTask:
        task_id = context.counter.next_id()
        base = api_base_path(entity)

        payload = TestPayload(
            entity=entity.name,
            unit=[
                f"{entity.name}Service.{name} handles valid and invalid input"
                for name in ("create", "findById", "findAll", "update", "delete")
            ],
            integration=[
                f"{method} {base}{suffix} returns {status}"
                for _, method, suffix, status in CRUD_OPERATIONS
            ],
            e2e=[f"Create, list, update and delete a {entity.name} through the UI"],
        )

        spec = TaskSpecification(
            objective=f"Write tests covering {entity.name}",
            context=f"Coverage for the {entity.table_name} table, its API and service",
            requirements=[
                f"Unit tests: {len(payload.unit)} service methods",
                f"Integration tests: {len(payload.integration)} endpoints",
                "E2E: full lifecycle through the UI",
            ],
            payload=payload,
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"Tests for {entity.name}",
            task_type=TaskType.TEST,
            specification=spec,
            priority=self._entity_priority(context, entity),
            related_requirement=self._entity_requirement_id(context, entity),
            related_entity=entity.name,
            dependencies=[t.id for t in crud if t.related_entity == entity.name],
            acceptance_criteria=[
                "All listed unit and integration tests exist and pass",
                "Error responses (400/401/404) are covered",
            ],
            tags=["test", entity.name],
            execution_mode=ExecutionMode.MANUAL,
        )


class EndToEndFlowTemplate(BaseTaskTemplate):
    """
    요구사항별 E2E 흐름 작업 (수동 실행).

    화면이 참조하는 라우트 중 페이지 조립 작업이 없는 것이 있으면 생성하지 않습니다.
    화면이 없는 요구사항은 워크플로우 작업(있으면)에만 의존합니다.
    """

    _template_name = "EndToEndFlowTemplate"

    def _do_generate(self, context, existing):
        pages_by_route = {
            t.specification.payload.route: t.id
            for t in self._tasks_of(existing, TaskType.PAGE_COMPOSITION)
        }
        workflows = {
            t.related_requirement: t.id
            for t in self._tasks_of(existing, TaskType.WORKFLOW)
        }

        tasks = []
        for fr in context.requirements:
            routes = list(dict.fromkeys(s.route for s in fr.screens))
            missing = [r for r in routes if r not in pages_by_route]
            if missing:
                logger.warning(
                    f"[{self._template_name}] {fr.id} E2E 생략: 페이지 작업이 없는 라우트 {missing}"
                )
                continue
            dependencies = [pages_by_route[r] for r in routes]
            if fr.id in workflows:
                dependencies.append(workflows[fr.id])
            tasks.append(self._build(context, fr, dependencies))
        return tasks

    def _build(
        self,
        context: GenerationContext,
        fr: FunctionalRequirement,
        dependencies: list[str],
    ) -> ProgrammableTask:
        task_id = context.counter.next_id()
        screen_names = [f"{s.name} ({s.route})" for s in fr.screens]
        rules = fr.business_rules

        happy_path = f"Happy path: complete {fr.title}"
        if fr.screens:
            happy_path += f" through {' → '.join(s.name for s in fr.screens)}"
        scenarios = [happy_path]
        for rule in rules[:MAX_VIOLATION_SCENARIOS]:
            expected = rule.error_message or f"{rule.name} is rejected"
            scenarios.append(f"Violate {rule.id} ({rule.name}): expect \"{expected}\"")

        payload = E2EPayload(
            requirement_id=fr.id,
            screens=screen_names,
            rules_to_verify=[f"{r.id}: {r.name}" for r in rules],
            scenarios=scenarios,
        )

        spec = TaskSpecification(
            objective=f"Verify the end-to-end flow for {fr.title}",
            context=fr.description,
            requirements=[
                *([f"Walk through screens: {', '.join(screen_names)}"] if screen_names else []),
                *scenarios,
            ],
            payload=payload,
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"[USER MUST TEST] E2E flow: {fr.title}",
            task_type=TaskType.E2E_FLOW,
            specification=spec,
            priority=fr.priority,
            related_requirement=fr.id,
            dependencies=dependencies,
            acceptance_criteria=[f"Scenario passes: {s}" for s in scenarios],
            test_cases=[
                self._test_case(task_id, i + 1, s, "e2e") for i, s in enumerate(scenarios)
            ],
            tags=["e2e", fr.id],
            execution_mode=ExecutionMode.MANUAL,
            references=[r.id for r in rules],
        )
