"""Layer 3: Reference Expansion - inline BR/SCR/FR fragments into task requirements."""

from .reference_expander import (
    ReferenceExpander,
    expand_references,
    find_references,
    is_bare_reference,
    render_rule,
    render_screen,
    render_requirement,
)

__all__ = [
    "ReferenceExpander",
    "expand_references",
    "find_references",
    "is_bare_reference",
    "render_rule",
    "render_screen",
    "render_requirement",
]
