"""Layer 4: Dependency Resolver - migration edges, graph validation, dependents, critical path."""

from .resolver import (
    needs_migration_dependency,
    resolve_dependencies,
    topological_order,
    validate_graph,
    attach_dependents,
    calculate_critical_path,
)

__all__ = [
    "needs_migration_dependency",
    "resolve_dependencies",
    "topological_order",
    "validate_graph",
    "attach_dependents",
    "calculate_critical_path",
]
