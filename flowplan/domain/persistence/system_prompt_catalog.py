from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from flowplan.domain.constants import DEFAULT_SYSTEM_PROMPTS_FILE
from flowplan.domain.errors import RepositoryError
from flowplan.domain.models.workflow import PromptSummary


class SystemPromptCatalog:
    """Prompt repository backed by a YAML file of system prompts.

    Expected layout::

        system_prompts:
          - id: sys-memory-board
            name: Handoff Memory Board
            description: Document phase completion.
            content: |
              ...

    A missing file is an empty catalog. The file is re-read on every lookup.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or DEFAULT_SYSTEM_PROMPTS_FILE

    def find_system_prompt_by_name(self, name: str) -> PromptSummary | None:
        for prompt in self.list_system_prompts():
            if prompt.name == name:
                return prompt
        return None

    def list_system_prompts(self) -> list[PromptSummary]:
        entries = self._load_entries()
        try:
            return [PromptSummary(**entry) for entry in entries]
        except (TypeError, ValidationError) as e:
            raise RepositoryError(f"Invalid system prompt entry in {self.path}: {e}") from e

    def _load_entries(self) -> list[dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryError(f"Failed to read system prompts: {self.path}") from e

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise RepositoryError(f"Malformed YAML: {self.path}") from e

        if data is None:
            return []
        if not isinstance(data, dict) or not isinstance(data.get("system_prompts", []), list):
            raise RepositoryError(f"'system_prompts' must be a list: {self.path}")
        return data.get("system_prompts") or []
