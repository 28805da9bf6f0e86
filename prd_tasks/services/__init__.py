"""Services for the requirement-to-task compiler."""

# Note: task_service imports the layers, so import it directly to avoid circular imports
# Use: from prd_tasks.services.task_service import TaskService, get_task_service

from .claude_client import ClaudeClient, get_claude_client

__all__ = [
    "ClaudeClient",
    "get_claude_client",
]
