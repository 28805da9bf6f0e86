"""Layer 5: Tier & Complexity Classifier - fixed tables per task family."""

from .classifier import (
    TIER_TABLE,
    COMPLEXITY_TABLE,
    tier_for,
    complexity_for,
    classify_tasks,
)

__all__ = [
    "TIER_TABLE",
    "COMPLEXITY_TABLE",
    "tier_for",
    "complexity_for",
    "classify_tasks",
]
