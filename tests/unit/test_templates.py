"""Unit tests for the task template families (layer 2).

Each template is run against a GenerationContext built from the shared
fixtures, with earlier families passed in as `existing` where needed.
"""

import pytest

from prd_tasks.exceptions import GenerationError
from prd_tasks.layers.base_template import BaseTaskTemplate
from prd_tasks.layers.layer1_adapter import build_context
from prd_tasks.layers.layer2_templates import (
    ApiClientTemplate,
    CrudApiTemplate,
    EndToEndFlowTemplate,
    EntityTestTemplate,
    EnvironmentSetupTemplate,
    NavigationTemplate,
    PageCompositionTemplate,
    RouteConfigTemplate,
    SchemaMigrationTemplate,
    ScreenTemplate,
    ServiceLayerTemplate,
    TaskTemplateEngine,
    TestSetupTemplate,
    ValidationRuleTemplate,
    WorkflowTemplate,
    sql_type_for,
)
from prd_tasks.models import (
    BusinessRule,
    ExecutionMode,
    FieldMapping,
    FunctionalRequirement,
    GenerationOptions,
    Priority,
    Screen,
    ScreenAction,
    ScreenKind,
    StructuredRequirementDoc,
    TaskType,
)


@pytest.fixture
def context(sample_document, sample_entities, sample_relationships):
    return build_context(sample_document, sample_entities, sample_relationships)


def _run(context, *templates):
    """템플릿을 순서대로 실행하고 전체 작업 목록을 반환합니다."""
    return TaskTemplateEngine(list(templates)).generate(context)


# ---------------------------------------------------------------------------
# Schema migration
# ---------------------------------------------------------------------------

class TestSchemaMigrationTemplate:
    def test_order_migration_criteria(self, order_entity):
        doc = StructuredRequirementDoc(id="PRD-A", project_name="p")
        context = build_context(doc, [order_entity])

        [task] = SchemaMigrationTemplate().generate(context, [])

        assert task.id == "TASK-001"
        assert task.type == TaskType.DATABASE_MIGRATION
        assert task.priority == Priority.MUST
        assert 'Table "orders" exists in the database' in task.acceptance_criteria
        assert not any("soft" in c.lower() or "deleted_at" in c for c in task.acceptance_criteria)
        assert "Migration can be rolled back cleanly" in task.acceptance_criteria

    def test_requirements_and_payload(self, context):
        task = SchemaMigrationTemplate().generate(context, [])[0]
        payload = task.specification.payload

        assert payload.table_name == "orders"
        assert payload.primary_key == "id"
        assert "order_no NOT NULL" in task.specification.requirements
        assert "quantity NOT NULL" in task.specification.requirements
        assert "order_no UNIQUE" in task.specification.requirements
        assert "Column id: INTEGER PRIMARY KEY" in task.specification.requirements
        assert payload.audit_columns == ["created_at", "created_by", "updated_at", "updated_by"]
        assert payload.soft_delete_columns == []
        assert [i.name for i in payload.indexes] == ["idx_orders_customer_id"]

    def test_foreign_key_from_relationship(self, context):
        payload = SchemaMigrationTemplate().generate(context, [])[0].specification.payload
        [fk] = payload.foreign_keys
        assert fk.column == "customer_id"
        assert fk.references_table == "customers"
        assert fk.references_column == "id"

    def test_soft_delete_entity(self, context):
        customer = SchemaMigrationTemplate().generate(context, [])[1]
        assert customer.specification.payload.soft_delete_columns == ["deleted_at", "deleted_by"]
        assert any("deleted_at" in c for c in customer.acceptance_criteria)

    def test_unknown_type_maps_to_varchar(self):
        assert sql_type_for("geometry") == "VARCHAR(255)"
        assert sql_type_for("Decimal") == "DECIMAL(18,2)"


# ---------------------------------------------------------------------------
# CRUD API
# ---------------------------------------------------------------------------

class TestCrudApiTemplate:
    def test_five_tasks_per_entity(self, context):
        tasks = CrudApiTemplate().generate(context, [])
        assert len(tasks) == 10
        assert [t.title for t in tasks[:5]] == [
            "Create Order API", "List Order API", "Get Order API", "Update Order API", "Delete Order API",
        ]
        assert tasks[0].id == "TASK-003"

    def test_list_has_pagination_params(self, context):
        list_task = CrudApiTemplate().generate(context, [])[1]
        payload = list_task.specification.payload
        assert payload.method == "GET"
        assert payload.path == "/api/orders"
        assert [p.name for p in payload.query_params] == ["page", "limit", "sort", "order"]

    def test_create_body_excludes_primary_key(self, context):
        create = CrudApiTemplate().generate(context, [])[0]
        body = {p.name: p.required for p in create.specification.payload.request_body}
        assert body == {"orderNo": True, "quantity": True, "customerId": False}
        assert create.specification.payload.success_status == 201

    def test_error_codes_and_roles(self, context):
        get_task = CrudApiTemplate().generate(context, [])[2]
        payload = get_task.specification.payload
        assert [e.status for e in payload.error_codes] == [400, 401, 404, 500]
        assert payload.path == "/api/orders/:id"
        assert "Restrict access to roles: customer, admin" in get_task.specification.security_notes
        assert get_task.priority == Priority.MUST


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------

class TestScreenTemplate:
    def test_form_without_actions_gets_default_actions(self, context):
        tasks = ScreenTemplate().generate(context, [])
        form = next(t for t in tasks if t.type == TaskType.UI_FORM)

        assert len(form.specification.payload.fields) == 2
        assert form.specification.payload.actions == ["Save", "Cancel"]

    def test_declared_actions_are_copied(self, order_entity):
        screen = Screen(
            id="SCR-001", name="order edit", kind=ScreenKind.FORM, route="/orders/edit",
            actions=[ScreenAction(name="Submit"), ScreenAction(name="Reset")],
        )
        doc = StructuredRequirementDoc(
            id="PRD-B", project_name="p",
            functional_requirements=[FunctionalRequirement(id="FR-001", title="t", screens=[screen])],
        )
        context = build_context(doc, [order_entity])

        [task] = ScreenTemplate().generate(context, [])

        assert task.specification.payload.actions == ["Submit", "Reset"]
        assert task.specification.payload.component_name == "OrderEdit"

    def test_ui_type_and_related_entity(self, context):
        tasks = ScreenTemplate().generate(context, [])
        assert [t.type for t in tasks] == [TaskType.UI_LIST, TaskType.UI_FORM, TaskType.UI_DETAIL]
        assert tasks[0].related_entity == "Order"
        # 필드 매핑이 없으면 소속 요구사항의 첫 엔티티
        assert tasks[2].related_entity == "Order"
        assert tasks[2].related_requirement == "FR-002"
        assert tasks[0].references == ["SCR-001"]

    def test_dashboard_maps_to_form(self, order_entity):
        screen = Screen(id="SCR-001", name="dash", kind=ScreenKind.DASHBOARD, route="/dash")
        doc = StructuredRequirementDoc(
            id="PRD-C", project_name="p",
            functional_requirements=[FunctionalRequirement(id="FR-001", title="t", screens=[screen])],
        )
        [task] = ScreenTemplate().generate(build_context(doc, [order_entity]), [])
        assert task.type == TaskType.UI_FORM


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------

class TestValidationRuleTemplate:
    def test_only_validation_rules(self, context):
        tasks = ValidationRuleTemplate().generate(context, [])
        assert len(tasks) == 1
        task = tasks[0]
        assert task.title == "Validation: 주문 수량 검증"
        assert task.dependencies == ["TASK-001"]
        assert task.specification.payload.error_message == "주문 수량은 1 이상이어야 합니다"

    def test_default_error_message_and_dedupe(self, order_entity):
        rule = BusinessRule(id="BR-001", name="Quantity")
        doc = StructuredRequirementDoc(
            id="PRD-D", project_name="p",
            functional_requirements=[
                FunctionalRequirement(id="FR-001", title="a", business_rules=[rule]),
                FunctionalRequirement(id="FR-002", title="b", business_rules=[rule]),
            ],
        )
        tasks = ValidationRuleTemplate().generate(build_context(doc, [order_entity]), [])
        assert len(tasks) == 1
        assert tasks[0].specification.payload.error_message == "Quantity validation failed"
        assert tasks[0].dependencies == []


class TestWorkflowTemplate:
    def test_states_and_transitions(self, context):
        [task] = WorkflowTemplate().generate(context, [])
        payload = task.specification.payload

        assert task.type == TaskType.WORKFLOW
        assert payload.initial_state == "PENDING"
        assert payload.final_states == ["APPROVED", "REJECTED"]
        pending = payload.states[0]
        assert [t.target_state for t in pending.transitions] == ["APPROVED", "REJECTED"]
        assert "PENDING → APPROVED on approve" in task.specification.requirements
        assert task.references == ["FR-002"]
        assert len(task.test_cases) == 2


# ---------------------------------------------------------------------------
# Verification and infrastructure
# ---------------------------------------------------------------------------

class TestEntityTestTemplate:
    def test_manual_and_depends_on_crud(self, context):
        tasks = _run(context, SchemaMigrationTemplate(), CrudApiTemplate(), EntityTestTemplate())
        order_test = next(t for t in tasks if t.type == TaskType.TEST and t.related_entity == "Order")

        assert order_test.execution_mode == ExecutionMode.MANUAL
        assert order_test.dependencies == ["TASK-003", "TASK-004", "TASK-005", "TASK-006", "TASK-007"]
        assert len(order_test.specification.payload.integration) == 5


class TestInfrastructureTemplates:
    def test_environment_not_provisioned(self, context):
        [task] = EnvironmentSetupTemplate().generate(context, [])
        assert task.title == "Environment setup"
        assert task.execution_mode == ExecutionMode.CODE_GENERATION

    def test_provisioned_marks_skip(self, sample_document, sample_entities):
        context = build_context(
            sample_document, sample_entities, options=GenerationOptions(environment_provisioned=True)
        )
        tasks = _run(context, EnvironmentSetupTemplate(), TestSetupTemplate())

        assert [t.title for t in tasks] == [
            "[ALREADY SCAFFOLDED] Environment setup",
            "[ALREADY SCAFFOLDED] Test setup",
        ]
        assert all(t.execution_mode == ExecutionMode.SKIP for t in tasks)
        assert tasks[1].dependencies == [tasks[0].id]


class TestServiceLayerTemplate:
    def test_methods_and_cross_services(self, context):
        order_service = ServiceLayerTemplate().generate(context, [])[0]
        payload = order_service.specification.payload

        assert payload.service_name == "OrderService"
        assert [m.name for m in payload.methods] == ["create", "findById", "findAll", "update", "delete"]
        assert payload.methods[0].business_logic == ["Check orderNo uniqueness before insert"]
        assert payload.dependencies == ["OrderRepository", "Database connection"]
        assert payload.cross_service_dependencies == ["CustomerService"]
        # 같은 계층 서비스 의존성은 작업 간 의존성으로 만들지 않음
        assert order_service.dependencies == []


# ---------------------------------------------------------------------------
# Frontend assembly
# ---------------------------------------------------------------------------

class TestAssemblyTemplates:
    def test_api_client_depends_on_services(self, context):
        tasks = _run(context, ServiceLayerTemplate(), ApiClientTemplate())
        client = tasks[-1]
        names = [c.name for c in client.specification.payload.calls]

        assert client.dependencies == [tasks[0].id, tasks[1].id]
        assert names[:5] == ["createOrder", "listOrders", "getOrder", "updateOrder", "deleteOrder"]

    def test_route_navigation_and_pages(self, context):
        tasks = _run(
            context, ScreenTemplate(), RouteConfigTemplate(), NavigationTemplate(), PageCompositionTemplate()
        )
        ui_ids = [t.id for t in tasks if t.type.value.startswith("ui-")]
        route_config = next(t for t in tasks if t.type == TaskType.ROUTE_CONFIG)
        navigation = next(t for t in tasks if t.type == TaskType.NAVIGATION)
        pages = [t for t in tasks if t.type == TaskType.PAGE_COMPOSITION]

        assert route_config.dependencies == ui_ids
        assert navigation.dependencies == [route_config.id]
        assert [i.path for i in navigation.specification.payload.items] == ["/orders", "/orders/new"]
        assert [p.specification.payload.page_name for p in pages] == [
            "OrdersPage", "OrdersNewPage", "OrdersIdPage",
        ]

    def test_no_screens_still_route_config_and_navigation(self, order_entity):
        """화면이 없어도 라우트 설정과 내비게이션 작업은 생성되고, 페이지 작업만 없다."""
        doc = StructuredRequirementDoc(id="PRD-E", project_name="p")
        context = build_context(doc, [order_entity])

        tasks = _run(context, RouteConfigTemplate(), NavigationTemplate(), PageCompositionTemplate())

        assert [t.type for t in tasks] == [TaskType.ROUTE_CONFIG, TaskType.NAVIGATION]
        route_config, navigation = tasks
        assert route_config.dependencies == []
        assert route_config.specification.payload.routes == []
        assert navigation.dependencies == [route_config.id]
        assert navigation.specification.payload.items == []


class TestEndToEndFlowTemplate:
    def test_flow_per_requirement(self, sample_document, sample_entities, sample_relationships):
        """화면이 없는 요구사항(FR-010)도 E2E 작업을 받고, 의존성은 비어 있다."""
        doc = sample_document.model_copy(update={
            "functional_requirements": [
                *sample_document.functional_requirements,
                FunctionalRequirement(id="FR-010", title="주문 알림", description="주문 상태 변경 시 알림을 보낸다"),
            ]
        })
        context = build_context(doc, sample_entities, sample_relationships)
        tasks = _run(
            context, ScreenTemplate(), WorkflowTemplate(), PageCompositionTemplate(), EndToEndFlowTemplate()
        )
        flows = [t for t in tasks if t.type == TaskType.E2E_FLOW]
        workflow = next(t for t in tasks if t.type == TaskType.WORKFLOW)
        pages = {t.specification.payload.route: t.id for t in tasks if t.type == TaskType.PAGE_COMPOSITION}

        assert [f.related_requirement for f in flows] == ["FR-001", "FR-002", "FR-010"]
        assert flows[0].title == "[USER MUST TEST] E2E flow: 주문 등록"
        assert flows[0].execution_mode == ExecutionMode.MANUAL
        assert flows[0].dependencies == [pages["/orders"], pages["/orders/new"]]
        assert flows[1].dependencies == [pages["/orders/:id"], workflow.id]

        screenless = flows[2]
        assert screenless.dependencies == []
        assert screenless.specification.payload.screens == []
        assert screenless.specification.payload.scenarios == ["Happy path: complete 주문 알림"]
        assert screenless.specification.requirements == ["Happy path: complete 주문 알림"]

    def test_scenarios_capped_at_two_violations(self, context):
        tasks = _run(context, ScreenTemplate(), PageCompositionTemplate(), EndToEndFlowTemplate())
        flow = next(t for t in tasks if t.type == TaskType.E2E_FLOW)
        scenarios = flow.specification.payload.scenarios

        assert len(scenarios) == 3
        assert scenarios[0].startswith("Happy path")
        assert flow.specification.payload.rules_to_verify == ["BR-001: 주문 수량 검증", "BR-002: 주문 금액 계산"]

    def test_skipped_without_page_tasks(self, context):
        assert EndToEndFlowTemplate().generate(context, []) == []


# ---------------------------------------------------------------------------
# Template error handling
# ---------------------------------------------------------------------------

class _BrokenTemplate(BaseTaskTemplate):
    _template_name = "BrokenTemplate"

    def _do_generate(self, context, existing):
        raise KeyError("missing")


class TestBaseTaskTemplate:
    def test_unexpected_error_wrapped(self, context):
        with pytest.raises(GenerationError) as exc_info:
            _BrokenTemplate().generate(context, [])
        assert exc_info.value.details == {"template": "BrokenTemplate"}

    def test_test_case_ids(self):
        case = BaseTaskTemplate._test_case("TASK-007", 3, "name")
        assert case.id == "TASK-007-TC03"
        assert case.kind == "unit"
