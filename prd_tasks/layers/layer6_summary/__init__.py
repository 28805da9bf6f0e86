"""Layer 6: Summary Aggregator - tier/type/module/priority counts and overall complexity."""

from .aggregator import complexity_from_average, overall_complexity, summarize

__all__ = [
    "complexity_from_average",
    "overall_complexity",
    "summarize",
]
