"""Layer 2: Task Template Engine - generation context to ordered task families."""

from .engine import (
    TaskTemplateEngine,
    default_templates,
    orchestration_templates,
    minimal_templates,
)
from .schema_templates import SchemaMigrationTemplate
from .crud_templates import CrudApiTemplate
from .screen_templates import ScreenTemplate
from .rule_templates import ValidationRuleTemplate, WorkflowTemplate
from .verification_templates import EntityTestTemplate, EndToEndFlowTemplate
from .infrastructure_templates import EnvironmentSetupTemplate, TestSetupTemplate
from .service_templates import ServiceLayerTemplate
from .assembly_templates import (
    ApiClientTemplate,
    RouteConfigTemplate,
    NavigationTemplate,
    PageCompositionTemplate,
)
from .type_mapping import sql_type_for, json_type_for, ui_type_for, editable_fields

__all__ = [
    "TaskTemplateEngine",
    "default_templates",
    "orchestration_templates",
    "minimal_templates",
    "SchemaMigrationTemplate",
    "CrudApiTemplate",
    "ScreenTemplate",
    "ValidationRuleTemplate",
    "WorkflowTemplate",
    "EntityTestTemplate",
    "EndToEndFlowTemplate",
    "EnvironmentSetupTemplate",
    "TestSetupTemplate",
    "ServiceLayerTemplate",
    "ApiClientTemplate",
    "RouteConfigTemplate",
    "NavigationTemplate",
    "PageCompositionTemplate",
    "sql_type_for",
    "json_type_for",
    "ui_type_for",
    "editable_fields",
]
