"""
Layer 5: 계층(Tier) 및 복잡도 분류.

고정 테이블로 분류합니다.

계층:
- T1: 스키마, 폼이 아닌 UI, 환경 셋업, 문서화 (기계적 작업)
- T2: 일반 작업 (CRUD, 폼 UI, 검증, 테스트, 서비스, 조립)
- T3: 워크플로우, E2E, 외부 연동
- T4: 보강 단계용 예약

복잡도:
┌───────────────────────────────┬──────────┐
│ 작업 유형                      │ 복잡도    │
├───────────────────────────────┼──────────┤
│ 스키마, CRUD, 폼이 아닌 UI      │ simple   │
│ 검증 (계산식 없음), 환경 셋업    │ simple   │
│ 폼 UI, 검증 (계산식 있음)       │ moderate │
│ 테스트, 서비스, API 클라이언트   │ moderate │
│ 테스트 셋업, 페이지, 라우트, 메뉴 │ moderate │
│ 워크플로우, E2E                 │ complex  │
└───────────────────────────────┴──────────┘
"""

from prd_tasks.models import (
    Complexity,
    ProgrammableTask,
    TaskTier,
    TaskType,
    ValidationPayload,
)

TIER_TABLE: dict[TaskType, TaskTier] = {
    TaskType.DATABASE_MIGRATION: TaskTier.T1,
    TaskType.UI_LIST: TaskTier.T1,
    TaskType.UI_DETAIL: TaskTier.T1,
    TaskType.UI_MODAL: TaskTier.T1,
    TaskType.UI_DASHBOARD: TaskTier.T1,
    TaskType.UI_REPORT: TaskTier.T1,
    TaskType.ENVIRONMENT_SETUP: TaskTier.T1,
    TaskType.DOCUMENTATION: TaskTier.T1,
    TaskType.WORKFLOW: TaskTier.T3,
    TaskType.E2E_FLOW: TaskTier.T3,
    TaskType.INTEGRATION: TaskTier.T3,
}

COMPLEXITY_TABLE: dict[TaskType, Complexity] = {
    TaskType.DATABASE_MIGRATION: Complexity.SIMPLE,
    TaskType.API_CRUD: Complexity.SIMPLE,
    TaskType.API_CUSTOM: Complexity.MODERATE,
    TaskType.UI_LIST: Complexity.SIMPLE,
    TaskType.UI_FORM: Complexity.MODERATE,
    TaskType.UI_DETAIL: Complexity.SIMPLE,
    TaskType.UI_MODAL: Complexity.SIMPLE,
    TaskType.UI_DASHBOARD: Complexity.SIMPLE,
    TaskType.UI_REPORT: Complexity.SIMPLE,
    TaskType.BUSINESS_LOGIC: Complexity.MODERATE,
    TaskType.WORKFLOW: Complexity.COMPLEX,
    TaskType.INTEGRATION: Complexity.COMPLEX,
    TaskType.TEST: Complexity.MODERATE,
    TaskType.DOCUMENTATION: Complexity.TRIVIAL,
    TaskType.ENVIRONMENT_SETUP: Complexity.SIMPLE,
    TaskType.SERVICE_LAYER: Complexity.MODERATE,
    TaskType.API_CLIENT: Complexity.MODERATE,
    TaskType.E2E_FLOW: Complexity.COMPLEX,
    TaskType.TEST_SETUP: Complexity.MODERATE,
    TaskType.PAGE_COMPOSITION: Complexity.MODERATE,
    TaskType.ROUTE_CONFIG: Complexity.MODERATE,
    TaskType.NAVIGATION: Complexity.MODERATE,
}


def tier_for(task: ProgrammableTask) -> TaskTier:
    return TIER_TABLE.get(task.type, TaskTier.T2)


def complexity_for(task: ProgrammableTask) -> Complexity:
    if task.type == TaskType.VALIDATION:
        payload = task.specification.payload
        has_formula = isinstance(payload, ValidationPayload) and bool(payload.formula)
        return Complexity.MODERATE if has_formula else Complexity.SIMPLE
    return COMPLEXITY_TABLE.get(task.type, Complexity.MODERATE)


def classify_tasks(tasks: list[ProgrammableTask]) -> list[ProgrammableTask]:
    """모든 작업에 계층과 복잡도를 지정한 사본을 반환합니다."""
    return [
        t.model_copy(update={"tier": tier_for(t), "estimated_complexity": complexity_for(t)})
        for t in tasks
    ]
