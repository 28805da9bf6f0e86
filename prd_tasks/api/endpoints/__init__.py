"""API endpoints package."""

from . import health
from . import tasks

__all__ = ["health", "tasks"]
