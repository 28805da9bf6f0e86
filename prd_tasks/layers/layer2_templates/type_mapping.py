"""템플릿 공통 매핑 테이블 (SQL 타입, JSON 타입, 화면 유형, 기본 동작, CRUD 정의)."""

from prd_tasks.models import ApiErrorCode, Entity, EntityField, ScreenKind, TaskType
from prd_tasks.utils import to_kebab

# 논리 타입 → SQL 타입 (알 수 없는 타입은 VARCHAR(255))
SQL_TYPE_MAP: dict[str, str] = {
    "string": "VARCHAR(255)",
    "text": "TEXT",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "decimal": "DECIMAL(18,2)",
    "boolean": "BOOLEAN",
    "date": "DATE",
    "timestamp": "TIMESTAMPTZ",
    "uuid": "UUID",
    "json": "JSONB",
    "enum": "VARCHAR(50)",
}
DEFAULT_SQL_TYPE = "VARCHAR(255)"

# 논리 타입 → JSON 타입 (나머지는 string)
JSON_TYPE_MAP: dict[str, str] = {
    "integer": "number",
    "bigint": "number",
    "decimal": "number",
    "boolean": "boolean",
    "json": "object",
}

AUDIT_COLUMNS = ["created_at", "created_by", "updated_at", "updated_by"]
SOFT_DELETE_COLUMNS = ["deleted_at", "deleted_by"]

# 요청 본문에서 제외할 필드 (감사/소프트 삭제 컬럼)
NON_EDITABLE_FIELDS = {
    "createdAt", "createdBy", "updatedAt", "updatedBy", "deletedAt", "deletedBy",
    *AUDIT_COLUMNS, *SOFT_DELETE_COLUMNS,
}

# 화면 종류 → UI 작업 유형 (그 외는 ui-form)
UI_TYPE_BY_SCREEN_KIND: dict[ScreenKind, TaskType] = {
    ScreenKind.LIST: TaskType.UI_LIST,
    ScreenKind.FORM: TaskType.UI_FORM,
    ScreenKind.DETAIL: TaskType.UI_DETAIL,
    ScreenKind.MODAL: TaskType.UI_MODAL,
}

# 동작이 정의되지 않은 화면에 넣을 기본 동작
DEFAULT_ACTIONS: dict[TaskType, list[str]] = {
    TaskType.UI_FORM: ["Save", "Cancel"],
    TaskType.UI_LIST: ["Add New", "View"],
    TaskType.UI_DETAIL: ["Edit", "Back"],
    TaskType.UI_MODAL: ["Confirm", "Close"],
}

# (operation, method, 경로 접미사, 성공 코드)
CRUD_OPERATIONS: list[tuple[str, str, str, int]] = [
    ("create", "POST", "", 201),
    ("list", "GET", "", 200),
    ("get", "GET", "/:id", 200),
    ("update", "PUT", "/:id", 200),
    ("delete", "DELETE", "/:id", 204),
]

CRUD_ERROR_CODES: list[ApiErrorCode] = [
    ApiErrorCode(status=400, description="Bad Request - invalid input"),
    ApiErrorCode(status=401, description="Unauthorized - authentication required"),
    ApiErrorCode(status=404, description="Not Found - resource does not exist"),
    ApiErrorCode(status=500, description="Internal Server Error"),
]


def ui_type_for(kind: ScreenKind) -> TaskType:
    return UI_TYPE_BY_SCREEN_KIND.get(kind, TaskType.UI_FORM)


def sql_type_for(data_type: str) -> str:
    return SQL_TYPE_MAP.get(data_type.lower(), DEFAULT_SQL_TYPE)


def json_type_for(data_type: str) -> str:
    return JSON_TYPE_MAP.get(data_type.lower(), "string")


def editable_fields(entity: Entity) -> list[EntityField]:
    """기본 키와 감사/소프트 삭제 필드를 뺀 입력 가능 필드."""
    return [
        f for f in entity.fields
        if not f.constraints.primary_key
        and f.name not in NON_EDITABLE_FIELDS
        and f.column_name not in NON_EDITABLE_FIELDS
    ]


def api_base_path(entity: Entity) -> str:
    """/api/{kebab(table_name)}"""
    return f"/api/{to_kebab(entity.table_name)}"
