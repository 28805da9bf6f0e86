"""화면(UI) 작업 템플릿 (라우트 기준 중복 제거된 화면당 1개)."""

from typing import Optional

from prd_tasks.models import (
    Priority,
    ProgrammableTask,
    Screen,
    TaskSpecification,
    TaskType,
    UIField,
    UIPayload,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext
from prd_tasks.utils import to_pascal

from .type_mapping import DEFAULT_ACTIONS, ui_type_for


class ScreenTemplate(BaseTaskTemplate):
    """화면 정의를 UI 작업으로 변환합니다. 필드와 동작은 그대로 복사하고, 동작이 없으면 기본 동작을 넣습니다."""

    _template_name = "ScreenTemplate"

    def _do_generate(self, context, existing):
        return [self._build(context, screen) for screen in context.screens]

    def _build(self, context: GenerationContext, screen: Screen) -> ProgrammableTask:
        task_type = ui_type_for(screen.kind)
        owner = context.owner_of_screen(screen.id)
        task_id = context.counter.next_id()

        fields = [
            UIField(
                name=fm.field_name,
                label=fm.label or fm.field_name,
                data_type=fm.data_type,
                required=fm.required,
                entity_field=fm.entity_field,
            )
            for fm in screen.field_mappings
        ]
        actions = [a.name for a in screen.actions] or list(DEFAULT_ACTIONS.get(task_type, []))

        payload = UIPayload(
            screen_id=screen.id,
            screen_name=screen.name,
            component_name=to_pascal(screen.name),
            route=screen.route,
            layout=screen.layout.kind,
            fields=fields,
            actions=actions,
        )

        requirements = [f"Build the {screen.name} screen ({screen.kind.value}) at route {screen.route}"]
        for f in fields:
            mark = " (required)" if f.required else ""
            source = f" ← {f.entity_field}" if f.entity_field else ""
            requirements.append(f"Field {f.label}: {f.data_type}{mark}{source}")
        requirements.append(f"Actions: {', '.join(actions)}")

        acceptance = [
            f"Screen renders at {screen.route}",
            f"All {len(fields)} fields are displayed with their labels",
            f"Actions available: {', '.join(actions)}",
        ]
        required = [f.label for f in fields if f.required]
        if required and task_type == TaskType.UI_FORM:
            acceptance.append(f"Submitting without {', '.join(required)} shows a validation message")

        security = []
        if owner and owner.access_roles:
            security.append(f"Only visible to roles: {', '.join(owner.access_roles)}")

        spec = TaskSpecification(
            objective=f"Implement the {screen.name} UI component",
            context=screen.description,
            requirements=requirements,
            payload=payload,
            edge_cases=["Show an empty state when there is no data", "Disable actions while a request is pending"],
            security_notes=security,
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"{screen.name} UI",
            task_type=task_type,
            specification=spec,
            priority=owner.priority if owner else Priority.SHOULD,
            related_requirement=owner.id if owner else None,
            related_entity=self._related_entity(context, screen),
            acceptance_criteria=acceptance,
            test_cases=[
                self._test_case(task_id, 1, f"{screen.name} renders", "unit",
                                expected_result="Component renders without errors"),
            ],
            tags=["ui", screen.kind.value, screen.id],
            references=[screen.id],
        )

    @staticmethod
    def _related_entity(context: GenerationContext, screen: Screen) -> Optional[str]:
        """필드 매핑의 엔티티 접두어(Order.orderNo → Order), 없으면 소속 요구사항의 첫 엔티티."""
        for fm in screen.field_mappings:
            if fm.entity_field and "." in fm.entity_field:
                prefix = fm.entity_field.split(".", 1)[0]
                if prefix in context.entity_index:
                    return prefix
        owner = context.owner_of_screen(screen.id)
        return context.first_known_entity(owner) if owner else None
