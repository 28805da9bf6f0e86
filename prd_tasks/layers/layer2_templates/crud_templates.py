"""CRUD API 작업 템플릿 (엔티티당 5개: create, list, get, update, delete)."""

from prd_tasks.models import (
    ApiParam,
    ApiPayload,
    Entity,
    ProgrammableTask,
    TaskSpecification,
    TaskType,
)
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import GenerationContext

from .type_mapping import (
    CRUD_ERROR_CODES,
    CRUD_OPERATIONS,
    api_base_path,
    editable_fields,
    json_type_for,
)

LIST_QUERY_PARAMS = [
    ApiParam(name="page", type="number", description="1부터 시작하는 페이지 번호"),
    ApiParam(name="limit", type="number", description="페이지 크기"),
    ApiParam(name="sort", type="string", description="정렬 필드"),
    ApiParam(name="order", type="string", description="asc | desc"),
]

OPERATION_VERBS = {
    "create": "Create",
    "list": "List",
    "get": "Get",
    "update": "Update",
    "delete": "Delete",
}


class CrudApiTemplate(BaseTaskTemplate):
    """엔티티별 CRUD 엔드포인트 작업. 마이그레이션 의존성은 의존성 해석 단계에서 추가됩니다."""

    _template_name = "CrudApiTemplate"

    def _do_generate(self, context, existing):
        tasks = []
        for entity in context.entities:
            for operation, method, suffix, status in CRUD_OPERATIONS:
                tasks.append(self._build(context, entity, operation, method, suffix, status))
        return tasks

    def _build(
        self,
        context: GenerationContext,
        entity: Entity,
        operation: str,
        method: str,
        suffix: str,
        status: int,
    ) -> ProgrammableTask:
        path = f"{api_base_path(entity)}{suffix}"
        payload = self._payload(entity, operation, method, path, status)
        task_id = context.counter.next_id()
        roles = self._entity_roles(context, entity)

        requirements = [f"Implement {method} {path} ({operation} {entity.name})"]
        if payload.request_body:
            fields = ", ".join(
                f"{p.name}: {p.type}{'' if p.required else '?'}" for p in payload.request_body
            )
            requirements.append(f"Request body: {{ {fields} }}")
        if payload.query_params:
            requirements.append(
                "Query parameters: " + ", ".join(p.name for p in payload.query_params)
            )
        requirements.append(f"Respond with {status} on success")
        requirements.append(
            "Error responses: " + ", ".join(str(e.status) for e in payload.error_codes)
        )
        if operation == "delete" and entity.is_soft_delete:
            requirements.append("Perform a soft delete by setting deleted_at and deleted_by")

        acceptance = [
            f"{method} {path} returns {status} for a valid request",
            "Returns 401 when the caller is not authenticated",
        ]
        if operation in ("create", "update"):
            acceptance.append("Returns 400 when a required field is missing or invalid")
        if suffix:
            acceptance.append(f"Returns 404 when the {entity.name} does not exist")
        if operation == "list":
            acceptance.append("Supports page/limit pagination and sort/order")

        security = ["Require an authenticated caller"]
        if roles:
            security.append(f"Restrict access to roles: {', '.join(roles)}")

        spec = TaskSpecification(
            objective=f"{OPERATION_VERBS[operation]} {entity.name} via REST API",
            context=f"CRUD endpoint for table {entity.table_name}",
            requirements=requirements,
            payload=payload,
            edge_cases=self._edge_cases(entity, operation),
            security_notes=security,
        )

        return self._new_task(
            context,
            task_id=task_id,
            title=f"{OPERATION_VERBS[operation]} {entity.name} API",
            task_type=TaskType.API_CRUD,
            specification=spec,
            priority=self._entity_priority(context, entity),
            related_requirement=self._entity_requirement_id(context, entity),
            related_entity=entity.name,
            acceptance_criteria=acceptance,
            test_cases=[
                self._test_case(task_id, 1, f"{method} {path} success", "integration",
                                expected_result=f"HTTP {status}"),
                self._test_case(task_id, 2, f"{method} {path} without authentication", "integration",
                                expected_result="HTTP 401"),
            ],
            tags=["api", "crud", operation, entity.name],
        )

    @staticmethod
    def _payload(entity: Entity, operation: str, method: str, path: str, status: int) -> ApiPayload:
        pk = entity.primary_key_field
        pk_type = json_type_for(pk.data_type) if pk else "string"
        record_shape = {f.name: json_type_for(f.data_type) for f in entity.fields}

        path_params = []
        if path.endswith("/:id"):
            path_params = [ApiParam(name="id", type=pk_type, required=True, description=f"{entity.name} ID")]

        request_body = []
        if operation in ("create", "update"):
            request_body = [
                ApiParam(
                    name=f.name,
                    type=json_type_for(f.data_type),
                    required=not f.constraints.nullable,
                    description=f.description,
                )
                for f in editable_fields(entity)
            ]

        if operation == "list":
            response_shape = {"items": "array", "total": "number", "page": "number", "limit": "number"}
        elif operation == "delete":
            response_shape = {}
        else:
            response_shape = record_shape

        return ApiPayload(
            operation=operation,
            method=method,
            path=path,
            path_params=path_params,
            query_params=list(LIST_QUERY_PARAMS) if operation == "list" else [],
            request_body=request_body,
            response_shape=response_shape,
            success_status=status,
            error_codes=list(CRUD_ERROR_CODES),
        )

    @staticmethod
    def _edge_cases(entity: Entity, operation: str) -> list[str]:
        edge_cases = []
        if operation in ("create", "update"):
            for f in entity.fields:
                if f.constraints.unique and not f.constraints.primary_key:
                    edge_cases.append(f"Duplicate {f.name} must be rejected")
                if f.enum_values:
                    edge_cases.append(f"{f.name} must be one of: {', '.join(f.enum_values)}")
        if operation == "list":
            edge_cases.append("An empty table returns an empty items array with total 0")
        if operation == "delete":
            edge_cases.append("Deleting a row referenced by a foreign key must fail with a clear error")
        return edge_cases
