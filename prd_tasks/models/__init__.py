"""Data models for the requirement-to-task compiler."""

from .common import Priority, highest_priority
from .requirement import (
    BusinessRuleKind,
    ScreenKind,
    BusinessRule,
    FieldMapping,
    ScreenAction,
    ScreenLayout,
    Screen,
    WorkflowState,
    WorkflowTransition,
    WorkflowDefinition,
    FunctionalRequirement,
    StructuredRequirementDoc,
)
from .entity import (
    EntityKind,
    RelationshipKind,
    FieldConstraints,
    EntityField,
    Entity,
    RelationshipEnd,
    Relationship,
)
from .task import (
    TaskType,
    TaskTier,
    ExecutionMode,
    Complexity,
    COMPLEXITY_ORDINAL,
    EnrichmentStatus,
    TestCase,
    ColumnSpec,
    IndexSpec,
    ForeignKeySpec,
    DatabasePayload,
    ApiParam,
    ApiErrorCode,
    ApiPayload,
    ServiceMethod,
    ServicePayload,
    UIField,
    UIPayload,
    ValidationPayload,
    WorkflowTransitionSpec,
    WorkflowStateSpec,
    WorkflowPayload,
    TestPayload,
    EnvironmentPayload,
    ApiClientCall,
    ApiClientPayload,
    RouteSpec,
    RouteConfigPayload,
    NavigationItem,
    NavigationPayload,
    PagePayload,
    E2EPayload,
    TechnicalImplementation,
    TaskSpecification,
    ProgrammableTask,
    TaskSummary,
    EnrichmentFailure,
    TaskSetMetadata,
    TaskSet,
    GenerationOptions,
)
from .request import TaskGenerationRequest, EnrichmentRequest
from .error import ErrorResponse

__all__ = [
    # Common
    "Priority",
    "highest_priority",
    # Requirement document models
    "BusinessRuleKind",
    "ScreenKind",
    "BusinessRule",
    "FieldMapping",
    "ScreenAction",
    "ScreenLayout",
    "Screen",
    "WorkflowState",
    "WorkflowTransition",
    "WorkflowDefinition",
    "FunctionalRequirement",
    "StructuredRequirementDoc",
    # Entity models
    "EntityKind",
    "RelationshipKind",
    "FieldConstraints",
    "EntityField",
    "Entity",
    "RelationshipEnd",
    "Relationship",
    # Task models
    "TaskType",
    "TaskTier",
    "ExecutionMode",
    "Complexity",
    "COMPLEXITY_ORDINAL",
    "EnrichmentStatus",
    "TestCase",
    "ColumnSpec",
    "IndexSpec",
    "ForeignKeySpec",
    "DatabasePayload",
    "ApiParam",
    "ApiErrorCode",
    "ApiPayload",
    "ServiceMethod",
    "ServicePayload",
    "UIField",
    "UIPayload",
    "ValidationPayload",
    "WorkflowTransitionSpec",
    "WorkflowStateSpec",
    "WorkflowPayload",
    "TestPayload",
    "EnvironmentPayload",
    "ApiClientCall",
    "ApiClientPayload",
    "RouteSpec",
    "RouteConfigPayload",
    "NavigationItem",
    "NavigationPayload",
    "PagePayload",
    "E2EPayload",
    "TechnicalImplementation",
    "TaskSpecification",
    "ProgrammableTask",
    "TaskSummary",
    "EnrichmentFailure",
    "TaskSetMetadata",
    "TaskSet",
    "GenerationOptions",
    # Request / error models
    "TaskGenerationRequest",
    "EnrichmentRequest",
    "ErrorResponse",
]
