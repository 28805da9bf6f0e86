"""공유 pytest fixture 모음."""

import asyncio
import pytest
from datetime import datetime
from unittest.mock import AsyncMock

from prd_tasks.config import Settings
from prd_tasks.exceptions import AuthenticationError
from prd_tasks.models import (
    BusinessRule,
    BusinessRuleKind,
    Entity,
    EntityField,
    EntityKind,
    FieldConstraints,
    FieldMapping,
    FunctionalRequirement,
    Priority,
    ProgrammableTask,
    Relationship,
    RelationshipEnd,
    Screen,
    ScreenKind,
    StructuredRequirementDoc,
    TaskGenerationRequest,
    TechnicalImplementation,
    WorkflowDefinition,
    WorkflowState,
    WorkflowTransition,
)
from prd_tasks.layers.layer7_enrichment import BaseTaskEnricher, EnrichmentContext


class FakeEnricher(BaseTaskEnricher):
    """
    테스트용 보강기.

    fail_ids에 있는 작업은 RuntimeError, auth_fail_ids에 있는 작업은 AuthenticationError를 발생시킵니다.
    gate가 있으면 첫 호출에서 started를 set하고 gate가 열릴 때까지 기다립니다.
    """

    def __init__(self, fail_ids=(), auth_fail_ids=(), gate: asyncio.Event = None, delay: float = 0.0):
        self.fail_ids = set(fail_ids)
        self.auth_fail_ids = set(auth_fail_ids)
        self.gate = gate
        self.delay = delay
        self.started = asyncio.Event()
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0

    async def enrich(self, task: ProgrammableTask, context: EnrichmentContext) -> TechnicalImplementation:
        self.calls.append(task.id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            self.started.set()
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if task.id in self.auth_fail_ids:
                raise AuthenticationError("invalid api key")
            if task.id in self.fail_ids:
                raise RuntimeError(f"boom {task.id}")
            return TechnicalImplementation(stack=["FastAPI"], steps=[f"Implement {task.title}"])
        finally:
            self.active -= 1


@pytest.fixture
def fake_enricher():
    """항상 성공하는 FakeEnricher."""
    return FakeEnricher()


@pytest.fixture
def make_enricher():
    """FakeEnricher 생성 함수 (실패 ID, gate 등을 지정할 때 사용)."""
    return FakeEnricher


@pytest.fixture
def test_settings():
    """.env와 무관한 기본 Settings."""
    return Settings(_env_file=None)


@pytest.fixture
def mock_claude_client():
    """ClaudeClient mock fixture."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value="mocked response")
    client.complete_json = AsyncMock(return_value={"implementations": []})
    return client


@pytest.fixture
def fixed_time():
    return datetime(2024, 1, 1, 9, 0, 0)


@pytest.fixture
def order_entity():
    """필드 4개 (NOT NULL 2개, UNIQUE 1개), 감사 컬럼 O, 소프트 삭제 X."""
    return Entity(
        name="Order",
        table_name="orders",
        kind=EntityKind.TRANSACTION,
        description="고객 주문",
        fields=[
            EntityField(
                name="id", column_name="id", data_type="integer",
                constraints=FieldConstraints(primary_key=True, nullable=False),
            ),
            EntityField(
                name="orderNo", column_name="order_no", data_type="string",
                constraints=FieldConstraints(unique=True, nullable=False),
            ),
            EntityField(
                name="quantity", column_name="quantity", data_type="integer",
                constraints=FieldConstraints(nullable=False),
            ),
            EntityField(
                name="customerId", column_name="customer_id", data_type="integer",
                constraints=FieldConstraints(indexed=True),
            ),
        ],
        is_auditable=True,
        is_soft_delete=False,
    )


@pytest.fixture
def customer_entity():
    return Entity(
        name="Customer",
        table_name="customers",
        kind=EntityKind.MASTER,
        fields=[
            EntityField(
                name="id", column_name="id", data_type="integer",
                constraints=FieldConstraints(primary_key=True, nullable=False),
            ),
            EntityField(
                name="email", column_name="email", data_type="string",
                constraints=FieldConstraints(unique=True, nullable=False),
            ),
            EntityField(
                name="name", column_name="name", data_type="string",
                constraints=FieldConstraints(nullable=False),
            ),
        ],
        is_soft_delete=True,
    )


@pytest.fixture
def sample_entities(order_entity, customer_entity):
    """Order → TASK-001, Customer → TASK-002 순서로 마이그레이션 ID가 예약됩니다."""
    return [order_entity, customer_entity]


@pytest.fixture
def sample_relationships():
    return [
        Relationship(
            name="order_customer",
            source=RelationshipEnd(entity="Order", field="customerId"),
            target=RelationshipEnd(entity="Customer", field="id"),
        )
    ]


@pytest.fixture
def quantity_rule():
    return BusinessRule(
        id="BR-001",
        name="주문 수량 검증",
        kind=BusinessRuleKind.VALIDATION,
        description="주문 수량은 1 이상이어야 한다",
        formula="quantity >= 1",
        error_message="주문 수량은 1 이상이어야 합니다",
        related_entities=["Order"],
    )


@pytest.fixture
def sample_document(quantity_rule):
    """
    요구사항 2개, 화면 3개 (라우트 3개), validation 규칙 1개, 워크플로우 1개.

    전체 컴파일 결과 작업 수: 31개
    """
    return StructuredRequirementDoc(
        id="PRD-001",
        project_name="주문 관리 시스템",
        functional_requirements=[
            FunctionalRequirement(
                id="FR-001",
                title="주문 등록",
                description="고객은 주문을 등록할 수 있다",
                priority=Priority.MUST,
                access_roles=["customer"],
                involved_entities=["Order", "Customer"],
                business_rules=[
                    quantity_rule,
                    BusinessRule(
                        id="BR-002",
                        name="주문 금액 계산",
                        kind=BusinessRuleKind.CALCULATION,
                        description="금액 = 단가 x 수량",
                        formula="amount = price * quantity",
                    ),
                ],
                screens=[
                    Screen(
                        id="SCR-001",
                        name="주문 목록",
                        kind=ScreenKind.LIST,
                        route="/orders",
                        field_mappings=[
                            FieldMapping(field_name="orderNo", label="주문번호", entity_field="Order.orderNo"),
                        ],
                    ),
                    Screen(
                        id="SCR-002",
                        name="주문 등록",
                        kind=ScreenKind.FORM,
                        route="/orders/new",
                        field_mappings=[
                            FieldMapping(field_name="orderNo", label="주문번호",
                                         entity_field="Order.orderNo", required=True),
                            FieldMapping(field_name="quantity", label="수량", data_type="integer",
                                         entity_field="Order.quantity", required=True),
                        ],
                    ),
                ],
            ),
            FunctionalRequirement(
                id="FR-002",
                title="주문 승인",
                description="관리자는 주문을 승인하거나 반려한다",
                priority=Priority.SHOULD,
                access_roles=["admin"],
                involved_entities=["Order"],
                is_workflow=True,
                workflow_definition=WorkflowDefinition(
                    name="주문 승인 흐름",
                    states=[
                        WorkflowState(name="PENDING", is_initial=True),
                        WorkflowState(name="APPROVED", is_final=True),
                        WorkflowState(name="REJECTED", is_final=True),
                    ],
                    transitions=[
                        WorkflowTransition(from_state="PENDING", to_state="APPROVED",
                                           action="approve", roles=["admin"]),
                        WorkflowTransition(from_state="PENDING", to_state="REJECTED",
                                           action="reject", roles=["admin"]),
                    ],
                ),
                screens=[
                    Screen(id="SCR-003", name="주문 상세", kind=ScreenKind.DETAIL, route="/orders/:id"),
                ],
            ),
        ],
    )


@pytest.fixture
def generation_request(sample_document, sample_entities, sample_relationships):
    return TaskGenerationRequest(
        document=sample_document,
        entities=sample_entities,
        relationships=sample_relationships,
        schema_text="CREATE TABLE orders (...);",
    )


@pytest.fixture
def compiled_task_set(sample_document, sample_entities, sample_relationships, fixed_time):
    """샘플 입력을 전체 컴파일한 TaskSet."""
    from prd_tasks.layers.task_compiler import TaskCompiler
    return TaskCompiler().compile(
        sample_document, sample_entities, sample_relationships, generated_at=fixed_time
    )


@pytest.fixture
def async_client():
    """httpx AsyncClient fixture (FastAPI 테스트용)."""
    from httpx import AsyncClient, ASGITransport
    from prd_tasks.main import app

    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")
