"""Processing layers for the requirement-to-task compiler."""

# Note: Import layers individually to avoid circular imports
# Use: from prd_tasks.layers.layer1_adapter import build_context
# Use: from prd_tasks.layers.layer2_templates import TaskTemplateEngine
# Use: from prd_tasks.layers.task_compiler import TaskCompiler

__all__ = [
    "layer1_adapter",
    "layer2_templates",
    "layer3_expansion",
    "layer4_dependencies",
    "layer5_classification",
    "layer6_summary",
    "layer7_enrichment",
]
