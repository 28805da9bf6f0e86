"""Layer 1: Document Model Adapter - structured document to generation context."""

from .context import GenerationContext, TaskIdCounter
from .adapter import build_context, assign_orphans

__all__ = [
    "GenerationContext",
    "TaskIdCounter",
    "build_context",
    "assign_orphans",
]
