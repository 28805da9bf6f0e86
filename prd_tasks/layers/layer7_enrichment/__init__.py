"""Layer 7: Enrichment Adapter - bounded, cancellable technical-implementation enrichment."""

from .base_enricher import BaseTaskEnricher, EnrichmentContext
from .cancellation import CancellationToken
from .runner import (
    DEFAULT_CONCURRENCY_LIMIT,
    EnrichmentProgress,
    EnrichmentResult,
    is_enrichment_target,
    run_enrichment,
)
from .claude_enricher import ClaudeTaskEnricher

__all__ = [
    "BaseTaskEnricher",
    "EnrichmentContext",
    "CancellationToken",
    "DEFAULT_CONCURRENCY_LIMIT",
    "EnrichmentProgress",
    "EnrichmentResult",
    "is_enrichment_target",
    "run_enrichment",
    "ClaudeTaskEnricher",
]
