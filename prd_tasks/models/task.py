"""
개발 작업(ProgrammableTask) 데이터 모델입니다.

작업별 상세 내용(payload)은 작업 유형에 따라 하나의 변형만 가질 수 있도록
`kind` 필드로 구분되는 tagged union으로 정의합니다.
"""

from collections import defaultdict
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator

from .common import Priority


class TaskType(str, Enum):
    """작업 유형 (고정 열거형)."""

    DATABASE_MIGRATION = "database-migration"
    API_CRUD = "api-crud"
    API_CUSTOM = "api-custom"
    UI_LIST = "ui-list"
    UI_FORM = "ui-form"
    UI_DETAIL = "ui-detail"
    UI_MODAL = "ui-modal"
    UI_DASHBOARD = "ui-dashboard"
    UI_REPORT = "ui-report"
    VALIDATION = "validation"
    BUSINESS_LOGIC = "business-logic"
    WORKFLOW = "workflow"
    INTEGRATION = "integration"
    TEST = "test"
    DOCUMENTATION = "documentation"
    ENVIRONMENT_SETUP = "environment-setup"
    SERVICE_LAYER = "service-layer"
    API_CLIENT = "api-client"
    E2E_FLOW = "e2e-flow"
    TEST_SETUP = "test-setup"
    PAGE_COMPOSITION = "page-composition"
    ROUTE_CONFIG = "route-config"
    NAVIGATION = "navigation"


class TaskTier(str, Enum):
    """실행 난이도 계층. T4는 보강 단계용으로 예약되어 있습니다."""

    T1 = "T1"  # 스키마/기계적 작업
    T2 = "T2"  # 일반 작업
    T3 = "T3"  # 워크플로우/E2E
    T4 = "T4"


class ExecutionMode(str, Enum):
    """작업 실행 방식."""

    CODE_GENERATION = "code-generation"
    MANUAL = "manual"
    SKIP = "skip"


class Complexity(str, Enum):
    """작업 복잡도."""

    TRIVIAL = "trivial"
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    VERY_COMPLEX = "very-complex"


COMPLEXITY_ORDINAL: dict[Complexity, int] = {
    Complexity.TRIVIAL: 1,
    Complexity.SIMPLE: 2,
    Complexity.MODERATE: 3,
    Complexity.COMPLEX: 4,
    Complexity.VERY_COMPLEX: 5,
}


class EnrichmentStatus(str, Enum):
    """작업별 기술 구현 보강 상태."""

    NOT_ENRICHED = "not_enriched"
    ENRICHED = "enriched"
    FAILED = "failed"
    SKIPPED = "skipped"


class TestCase(BaseModel):
    """작업에 딸린 테스트 케이스."""

    __test__ = False  # pytest 수집 대상 아님

    id: str = Field(..., description="테스트 케이스 ID")
    name: str = Field(..., description="테스트 이름")
    kind: Literal["unit", "integration", "e2e", "manual"] = Field(default="unit", description="테스트 종류")
    description: str = Field(default="", description="설명")
    steps: list[str] = Field(default_factory=list, description="수행 단계")
    expected_result: str = Field(default="", description="기대 결과")


# ---------------------------------------------------------------------------
# 작업 유형별 payload (tagged union)
# ---------------------------------------------------------------------------

class ColumnSpec(BaseModel):
    name: str
    sql_type: str
    nullable: bool = True
    unique: bool = False
    primary_key: bool = False
    default: Optional[str] = None


class IndexSpec(BaseModel):
    name: str
    columns: list[str]
    unique: bool = False


class ForeignKeySpec(BaseModel):
    column: str
    references_table: str
    references_column: str
    on_delete: str = "RESTRICT"
    on_update: str = "CASCADE"


class DatabasePayload(BaseModel):
    """스키마 마이그레이션 payload."""
    kind: Literal["database"] = "database"
    table_name: str
    columns: list[ColumnSpec] = Field(default_factory=list)
    primary_key: str = "id"
    indexes: list[IndexSpec] = Field(default_factory=list)
    foreign_keys: list[ForeignKeySpec] = Field(default_factory=list)
    audit_columns: list[str] = Field(default_factory=list)
    soft_delete_columns: list[str] = Field(default_factory=list)


class ApiParam(BaseModel):
    name: str
    type: str = "string"
    required: bool = False
    description: str = ""


class ApiErrorCode(BaseModel):
    status: int
    description: str


class ApiPayload(BaseModel):
    """CRUD API payload."""
    kind: Literal["api"] = "api"
    operation: Literal["create", "list", "get", "update", "delete"]
    method: str
    path: str
    path_params: list[ApiParam] = Field(default_factory=list)
    query_params: list[ApiParam] = Field(default_factory=list)
    request_body: list[ApiParam] = Field(default_factory=list)
    response_shape: dict[str, str] = Field(default_factory=dict)
    success_status: int = 200
    error_codes: list[ApiErrorCode] = Field(default_factory=list)


class ServiceMethod(BaseModel):
    name: str
    inputs: list[str] = Field(default_factory=list)
    output: str = ""
    business_logic: list[str] = Field(default_factory=list)


class ServicePayload(BaseModel):
    """서비스 레이어 payload. 다른 서비스 의존성은 작업 간 의존성이 아니라 여기에만 기록합니다."""
    kind: Literal["service"] = "service"
    service_name: str
    entity: str
    methods: list[ServiceMethod] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    cross_service_dependencies: list[str] = Field(default_factory=list)


class UIField(BaseModel):
    name: str
    label: str
    data_type: str = "string"
    required: bool = False
    entity_field: Optional[str] = None


class UIPayload(BaseModel):
    """화면 payload."""
    kind: Literal["ui"] = "ui"
    screen_id: str
    screen_name: str
    component_name: str
    route: str
    layout: str = "single-column"
    fields: list[UIField] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)


class ValidationPayload(BaseModel):
    """검증 규칙 payload."""
    kind: Literal["validation"] = "validation"
    rule_id: str
    rule_kind: str
    description: str = ""
    formula: Optional[str] = None
    conditions: list[str] = Field(default_factory=list)
    error_message: str = ""


class WorkflowTransitionSpec(BaseModel):
    target_state: str
    action: str
    condition: Optional[str] = None
    roles: list[str] = Field(default_factory=list)


class WorkflowStateSpec(BaseModel):
    name: str
    description: str = ""
    transitions: list[WorkflowTransitionSpec] = Field(default_factory=list)


class WorkflowPayload(BaseModel):
    """워크플로우 payload."""
    kind: Literal["workflow"] = "workflow"
    workflow_name: str
    states: list[WorkflowStateSpec] = Field(default_factory=list)
    initial_state: Optional[str] = None
    final_states: list[str] = Field(default_factory=list)


class TestPayload(BaseModel):
    """엔티티 테스트 payload."""
    __test__ = False

    kind: Literal["test"] = "test"
    entity: str
    unit: list[str] = Field(default_factory=list)
    integration: list[str] = Field(default_factory=list)
    e2e: list[str] = Field(default_factory=list)


class EnvironmentPayload(BaseModel):
    """환경/테스트 셋업 payload."""
    kind: Literal["environment"] = "environment"
    components: list[str] = Field(default_factory=list)
    dependency_versions: dict[str, str] = Field(default_factory=dict)
    verification_steps: list[str] = Field(default_factory=list)
    provisioned: bool = False


class ApiClientCall(BaseModel):
    name: str
    method: str
    path: str
    entity: str


class ApiClientPayload(BaseModel):
    """타입이 지정된 API 클라이언트 payload."""
    kind: Literal["api-client"] = "api-client"
    base_path: str = "/api"
    calls: list[ApiClientCall] = Field(default_factory=list)


class RouteSpec(BaseModel):
    path: str
    component: str
    screen_id: str


class RouteConfigPayload(BaseModel):
    kind: Literal["route-config"] = "route-config"
    routes: list[RouteSpec] = Field(default_factory=list)


class NavigationItem(BaseModel):
    label: str
    path: str


class NavigationPayload(BaseModel):
    kind: Literal["navigation"] = "navigation"
    items: list[NavigationItem] = Field(default_factory=list)


class PagePayload(BaseModel):
    """페이지 조립 payload."""
    kind: Literal["page"] = "page"
    route: str
    page_name: str
    ui_task_ids: list[str] = Field(default_factory=list)
    composition_steps: list[str] = Field(default_factory=list)


class E2EPayload(BaseModel):
    """E2E 흐름 payload."""
    kind: Literal["e2e"] = "e2e"
    requirement_id: str
    screens: list[str] = Field(default_factory=list)
    rules_to_verify: list[str] = Field(default_factory=list)
    scenarios: list[str] = Field(default_factory=list)


TaskPayload = Annotated[
    Union[
        DatabasePayload,
        ApiPayload,
        ServicePayload,
        UIPayload,
        ValidationPayload,
        WorkflowPayload,
        TestPayload,
        EnvironmentPayload,
        ApiClientPayload,
        RouteConfigPayload,
        NavigationPayload,
        PagePayload,
        E2EPayload,
    ],
    Field(discriminator="kind"),
]

# 작업 유형별로 허용되는 payload 종류
PAYLOAD_KIND_BY_TYPE: dict[TaskType, str] = {
    TaskType.DATABASE_MIGRATION: "database",
    TaskType.API_CRUD: "api",
    TaskType.API_CUSTOM: "api",
    TaskType.UI_LIST: "ui",
    TaskType.UI_FORM: "ui",
    TaskType.UI_DETAIL: "ui",
    TaskType.UI_MODAL: "ui",
    TaskType.UI_DASHBOARD: "ui",
    TaskType.UI_REPORT: "ui",
    TaskType.VALIDATION: "validation",
    TaskType.WORKFLOW: "workflow",
    TaskType.TEST: "test",
    TaskType.ENVIRONMENT_SETUP: "environment",
    TaskType.TEST_SETUP: "environment",
    TaskType.SERVICE_LAYER: "service",
    TaskType.API_CLIENT: "api-client",
    TaskType.ROUTE_CONFIG: "route-config",
    TaskType.NAVIGATION: "navigation",
    TaskType.PAGE_COMPOSITION: "page",
    TaskType.E2E_FLOW: "e2e",
}


class TechnicalImplementation(BaseModel):
    """보강 단계에서 AI가 추가하는 기술 구현 가이드."""

    stack: list[str] = Field(default_factory=list, description="기술 스택")
    libraries: list[str] = Field(default_factory=list, description="사용 라이브러리")
    infra: list[str] = Field(default_factory=list, description="인프라 요구사항")
    config: list[str] = Field(default_factory=list, description="설정 항목")
    steps: list[str] = Field(default_factory=list, description="구현 단계")
    code_examples: list[str] = Field(default_factory=list, description="코드 예시")
    estimated_effort_hours: Optional[float] = Field(default=None, description="예상 공수 (시간)")


class TaskSpecification(BaseModel):
    """작업 명세. 다른 문서를 보지 않고도 구현할 수 있도록 필요한 내용을 모두 담습니다."""

    objective: str = Field(..., description="작업 목표")
    context: str = Field(default="", description="배경 설명")
    requirements: list[str] = Field(default_factory=list, description="요구사항 (참조는 인라인으로 펼쳐짐)")
    payload: Optional[TaskPayload] = Field(default=None, description="작업 유형별 상세 내용")
    technical_notes: list[str] = Field(default_factory=list, description="기술 메모")
    edge_cases: list[str] = Field(default_factory=list, description="엣지 케이스")
    security_notes: list[str] = Field(default_factory=list, description="보안 고려사항")
    technical_implementation: Optional[TechnicalImplementation] = Field(
        default=None, description="보강 단계에서 추가된 기술 구현 가이드"
    )


class ProgrammableTask(BaseModel):
    """개발 작업 하나."""

    id: str = Field(..., description="작업 ID (TASK-001 형식, 생성 순서대로 증가)")
    title: str = Field(..., description="작업 제목")
    type: TaskType = Field(..., description="작업 유형")
    tier: TaskTier = Field(default=TaskTier.T2, description="실행 난이도 계층")
    module: str = Field(default="core", description="모듈 이름")
    priority: Priority = Field(default=Priority.SHOULD, description="우선순위")
    related_requirement: Optional[str] = Field(default=None, description="관련 기능 요구사항 ID")
    related_entity: Optional[str] = Field(default=None, description="관련 엔티티 이름")
    dependencies: list[str] = Field(default_factory=list, description="선행 작업 ID")
    dependents: list[str] = Field(default_factory=list, description="후행 작업 ID")
    specification: TaskSpecification
    acceptance_criteria: list[str] = Field(default_factory=list, description="인수 조건")
    test_cases: list[TestCase] = Field(default_factory=list, description="테스트 케이스")
    estimated_complexity: Complexity = Field(default=Complexity.MODERATE, description="예상 복잡도")
    tags: list[str] = Field(default_factory=list, description="태그")
    notes: list[str] = Field(default_factory=list, description="메모")
    execution_mode: ExecutionMode = Field(default=ExecutionMode.CODE_GENERATION, description="실행 방식")
    enrichment_status: EnrichmentStatus = Field(default=EnrichmentStatus.NOT_ENRICHED, description="보강 상태")
    enrichment_error: Optional[str] = Field(default=None, description="보강 실패 사유")

    # 템플릿이 첨부한 참조 ID (참조 확장 단계에서만 사용, 직렬화하지 않음)
    references: list[str] = Field(default_factory=list, exclude=True)

    @model_validator(mode="after")
    def _check_payload_kind(self) -> "ProgrammableTask":
        payload = self.specification.payload
        expected = PAYLOAD_KIND_BY_TYPE.get(self.type)
        if payload is not None and expected is not None and payload.kind != expected:
            raise ValueError(
                f"{self.type.value} 작업에는 '{expected}' payload만 허용됩니다 (입력: '{payload.kind}')"
            )
        return self


class TaskSummary(BaseModel):
    """TaskSet 요약."""

    total_tasks: int = Field(0, description="총 작업 수")
    tier_breakdown: dict[str, int] = Field(default_factory=dict, description="계층별 작업 수")
    type_breakdown: dict[str, int] = Field(default_factory=dict, description="유형별 작업 수")
    module_breakdown: dict[str, int] = Field(default_factory=dict, description="모듈별 작업 수")
    priority_breakdown: dict[str, int] = Field(default_factory=dict, description="우선순위별 작업 수")
    overall_complexity: Complexity = Field(default=Complexity.TRIVIAL, description="전체 복잡도")
    critical_path: list[str] = Field(default_factory=list, description="크리티컬 패스 작업 ID")
    enriched_tasks: int = Field(0, description="기술 구현이 보강된 작업 수")


class EnrichmentFailure(BaseModel):
    """작업별 보강 실패 기록."""

    task_id: str
    error: str


class TaskSetMetadata(BaseModel):
    """TaskSet 메타데이터."""

    generator_version: str = Field(default="1.0.0", description="생성기 버전")
    prd_id: str = Field(..., description="원본 요구사항 문서 ID")
    project_name: str = Field(..., description="프로젝트 이름")
    module_name: str = Field(..., description="모듈 이름")
    schema_ref: Optional[str] = Field(default=None, description="스키마 텍스트 해시 (sha256 앞 12자)")
    expand_references: bool = Field(default=True, description="참조 인라인 확장 여부")
    degraded: bool = Field(default=False, description="최소 생성기(스키마+CRUD)로 대체 생성되었는지 여부")
    degraded_reason: Optional[str] = Field(default=None, description="대체 생성 사유")
    implementation_status: str = Field(
        default="not_enriched",
        description="보강 상태 (not_enriched | enriched | partial | cancelled | failed | skipped)",
    )
    implementation_skipped_reason: Optional[str] = Field(default=None, description="보강 생략/실패 사유")
    enrichment_failures: list[EnrichmentFailure] = Field(default_factory=list, description="보강 실패 목록")


class TaskSet(BaseModel):
    """생성된 작업 목록 전체."""

    id: str = Field(..., description="TaskSet ID")
    generated_at: datetime = Field(default_factory=datetime.now, description="생성 시각")
    tasks: list[ProgrammableTask] = Field(default_factory=list, description="작업 목록 (생성 순서)")
    summary: TaskSummary = Field(default_factory=TaskSummary, description="요약")
    metadata: TaskSetMetadata

    def get_task(self, task_id: str) -> Optional[ProgrammableTask]:
        """ID로 작업을 찾습니다."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def to_markdown(self) -> str:
        """모듈별로 묶은 마크다운 문서 생성."""
        lines = []

        # 헤더
        lines.append(f"# {self.metadata.project_name} - 개발 작업 목록")
        lines.append("")
        lines.append(f"**TaskSet**: {self.id} | **원본 문서**: {self.metadata.prd_id}")
        lines.append(f"**생성일**: {self.generated_at.strftime('%Y-%m-%d %H:%M')}")
        if self.metadata.degraded:
            lines.append(f"**주의**: 최소 생성 모드 ({self.metadata.degraded_reason})")
        lines.append("")
        lines.append("---")
        lines.append("")

        # 1. 요약
        lines.append("## 1. 요약")
        lines.append("")
        lines.append("| 항목 | 값 |")
        lines.append("|------|-----|")
        lines.append(f"| 총 작업 | {self.summary.total_tasks}개 |")
        lines.append(f"| 전체 복잡도 | {self.summary.overall_complexity.value} |")
        for tier, count in self.summary.tier_breakdown.items():
            lines.append(f"| {tier} | {count}개 |")
        lines.append(f"| 보강 상태 | {self.metadata.implementation_status} |")
        lines.append("")

        if self.summary.critical_path:
            lines.append(f"**크리티컬 패스**: {' → '.join(self.summary.critical_path)}")
            lines.append("")

        # 2. 모듈별 작업
        lines.append("## 2. 작업 목록")
        lines.append("")

        by_module: dict[str, list[ProgrammableTask]] = defaultdict(list)
        for task in self.tasks:
            by_module[task.module].append(task)

        for module, tasks in by_module.items():
            lines.append(f"### 모듈: {module} ({len(tasks)}개)")
            lines.append("")
            for task in tasks:
                lines.extend(self._task_to_markdown(task))

        return "\n".join(lines)

    @staticmethod
    def _task_to_markdown(task: ProgrammableTask) -> list[str]:
        lines = [f"#### {task.id}: {task.title}", ""]
        lines.append(
            f"- **유형**: {task.type.value} | **계층**: {task.tier.value} | "
            f"**복잡도**: {task.estimated_complexity.value} | **실행**: {task.execution_mode.value}"
        )
        lines.append(f"- **우선순위**: {task.priority.value}")
        if task.related_requirement:
            lines.append(f"- **관련 요구사항**: {task.related_requirement}")
        if task.related_entity:
            lines.append(f"- **관련 엔티티**: {task.related_entity}")
        if task.dependencies:
            lines.append(f"- **선행 작업**: {', '.join(task.dependencies)}")
        lines.append("")
        lines.append(f"**목표**: {task.specification.objective}")
        lines.append("")

        if task.specification.requirements:
            lines.append("**요구사항**")
            for req in task.specification.requirements:
                lines.append(f"- {req}")
            lines.append("")

        if task.acceptance_criteria:
            lines.append("**인수 조건**")
            for criterion in task.acceptance_criteria:
                lines.append(f"- [ ] {criterion}")
            lines.append("")

        impl = task.specification.technical_implementation
        if impl:
            lines.append("**기술 구현**")
            if impl.stack:
                lines.append(f"- 스택: {', '.join(impl.stack)}")
            for step in impl.steps:
                lines.append(f"- {step}")
            lines.append("")

        return lines

    def to_json(self) -> str:
        """JSON 형식으로 변환."""
        return self.model_dump_json(indent=2)

    def to_yaml(self) -> str:
        """YAML 형식으로 변환."""
        data: dict[str, Any] = self.model_dump(mode="json")
        return yaml.safe_dump(
            data, default_flow_style=False, allow_unicode=True, sort_keys=False, width=120
        )


class GenerationOptions(BaseModel):
    """작업 생성 옵션."""

    expand_references: bool = Field(default=True, description="BR/SCR 참조를 인라인으로 펼칠지 여부")
    environment_provisioned: bool = Field(
        default=False, description="환경이 이미 구성됨 (환경/테스트 셋업 작업을 skip 처리)"
    )
    include_orchestration: bool = Field(
        default=True, description="환경/서비스/클라이언트/라우팅/페이지/E2E 작업 생성 여부"
    )
    module_name: Optional[str] = Field(default=None, description="모듈 이름 (없으면 문서의 모듈명)")
    orphan_policy: Literal["first-requirement", "placeholder"] = Field(
        default="first-requirement", description="소속 없는 규칙/화면 배정 정책"
    )
