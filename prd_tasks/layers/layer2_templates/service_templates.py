"""서비스 레이어 작업 템플릿 (엔티티당 1개)."""

from prd_tasks.models import (
    Entity,
    ProgrammableTask,
    ServiceMethod,
    ServicePayload,
    TaskSpecification,
    TaskType,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext


class ServiceLayerTemplate(BaseTaskTemplate):
    """
    엔티티별 서비스 클래스 작업.

    다른 엔티티로 향하는 관계는 같은 계층의 서비스 의존성으로 payload에만 기록하고,
    작업 간 의존성(dependencies)으로는 만들지 않습니다.
    """

    _template_name = "ServiceLayerTemplate"

    def _do_generate(self, context, existing):
        return [self._build(context, entity) for entity in context.entities]

    def _build(self, context: GenerationContext, entity: Entity) -> ProgrammableTask:
        task_id = context.counter.next_id()
        name = entity.name
        unique_fields = [
            f.name for f in entity.fields
            if f.constraints.unique and not f.constraints.primary_key
        ]
        uniqueness = [f"Check {field} uniqueness before insert" for field in unique_fields]

        methods = [
            ServiceMethod(name="create", inputs=[f"Create{name}Input"], output=name, business_logic=uniqueness),
            ServiceMethod(name="findById", inputs=["id"], output=f"{name} | null"),
            ServiceMethod(name="findAll", inputs=["page", "limit", "sort", "order"], output=f"Paginated<{name}>"),
            ServiceMethod(name="update", inputs=["id", f"Update{name}Input"], output=name),
            ServiceMethod(
                name="delete",
                inputs=["id"],
                output="void",
                business_logic=["Mark as deleted instead of removing the row"] if entity.is_soft_delete else [],
            ),
        ]

        cross_services = []
        for rel in context.relationships:
            if rel.source.entity == name and rel.target.entity != name:
                service = f"{rel.target.entity}Service"
                if service not in cross_services:
                    cross_services.append(service)

        payload = ServicePayload(
            service_name=f"{name}Service",
            entity=name,
            methods=methods,
            dependencies=[f"{name}Repository", "Database connection"],
            cross_service_dependencies=cross_services,
        )

        requirements = [f"Implement {payload.service_name} with methods: {', '.join(m.name for m in methods)}"]
        requirements.extend(uniqueness)
        if cross_services:
            requirements.append(f"Collaborate with: {', '.join(cross_services)}")

        spec = TaskSpecification(
            objective=f"Implement the {name} service layer",
            context=f"Business logic between the {name} API handlers and the {entity.table_name} table",
            requirements=requirements,
            payload=payload,
            technical_notes=["Keep HTTP concerns out of the service; return domain objects or raise domain errors"],
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"{name} service layer",
            task_type=TaskType.SERVICE_LAYER,
            specification=spec,
            priority=self._entity_priority(context, entity),
            related_requirement=self._entity_requirement_id(context, entity),
            related_entity=name,
            acceptance_criteria=[
                "All five service methods are implemented and unit tested",
                *[f"Duplicate {field} is rejected by create" for field in unique_fields],
            ],
            test_cases=[
                self._test_case(task_id, i + 1, f"{payload.service_name}.{m.name}")
                for i, m in enumerate(methods)
            ],
            tags=["service", name],
        )
