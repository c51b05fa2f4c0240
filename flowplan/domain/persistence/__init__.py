from .repositories import PromptRepository, WorkflowRepository
from .system_prompt_catalog import SystemPromptCatalog
from .workflow_store import WorkflowStore

__all__ = [
    "PromptRepository",
    "WorkflowRepository",
    "SystemPromptCatalog",
    "WorkflowStore",
]
