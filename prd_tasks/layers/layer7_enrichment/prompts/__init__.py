"""Prompts for Layer 7 enrichment."""

from .enrichment_prompts import ENRICHMENT_SYSTEM_PROMPT, TASK_IMPLEMENTATION_PROMPT

__all__ = ["ENRICHMENT_SYSTEM_PROMPT", "TASK_IMPLEMENTATION_PROMPT"]
