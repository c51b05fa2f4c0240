from pathlib import Path
from typing import Any

import yaml

from flowplan.domain.constants import (
    DEFAULT_SYSTEM_PROMPTS_FILE,
    DEFAULT_TOKENS_FILE,
    DEFAULT_WORKFLOWS_DIR,
)
from flowplan.domain.models.auto_prompt import DEFAULT_SYSTEM_PROMPT_NAMES, AutoPromptKind


class ConfigLoadError(Exception):
    def __init__(self, message: str, *, path: Path | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.message}: {self.path}"


def _defaults() -> dict[str, Any]:
    return {
        "workflows_dir": str(DEFAULT_WORKFLOWS_DIR),
        "system_prompts_file": str(DEFAULT_SYSTEM_PROMPTS_FILE),
        "tokens_file": str(DEFAULT_TOKENS_FILE),
        # Execute stages in their saved custom order instead of assignment order
        "use_item_order": False,
        "system_prompt_names": {kind.value: name for kind, name in DEFAULT_SYSTEM_PROMPT_NAMES.items()},
    }


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge mapping keys. For non-dict values, overlay wins.
    """
    merged: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _deep_merge(merged[k], v)  # type: ignore[arg-type]
        else:
            merged[k] = v
    return merged


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    """
    Load YAML file and ensure root is a mapping.
    """
    # Protect against TOCTOU race conditions.
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except Exception as e:  # pragma: no cover
        raise ConfigLoadError("Failed to read config file", path=path, cause=e) from e

    try:
        data = yaml.safe_load(raw)
    except Exception as e:
        raise ConfigLoadError("Malformed YAML", path=path, cause=e) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigLoadError("YAML root must be a mapping", path=path)

    return data


def resolve_system_prompt_names(cfg: dict[str, Any]) -> dict[AutoPromptKind, str]:
    """
    Map configured system prompt names onto auto-prompt kinds.

    Unknown keys are rejected so a typo does not silently fall back to the
    default name.
    """
    raw = cfg.get("system_prompt_names") or {}
    if not isinstance(raw, dict):
        raise ConfigLoadError("system_prompt_names must be a mapping")

    names: dict[AutoPromptKind, str] = {}
    for key, name in raw.items():
        try:
            kind = AutoPromptKind(key)
        except ValueError as e:
            valid = ", ".join(k.value for k in AutoPromptKind)
            raise ConfigLoadError(
                f"Unknown auto-prompt kind '{key}' in system_prompt_names (expected one of: {valid})",
                cause=e,
            ) from e
        if not isinstance(name, str) or not name.strip():
            raise ConfigLoadError(f"system_prompt_names.{key} must be a non-empty string")
        names[kind] = name
    return names


def load_config(*, project_root: Path | None = None, user_home: Path | None = None) -> dict[str, Any]:
    """
    Load and merge config with precedence (highest wins):
    CLI args (handled in CLI) > project > user > defaults.

    Files:
      - user:    user_home/.flowplan/config.yml
      - project: project_root/.flowplan/config.yml

    Relative paths in the project file are left relative; the CLI resolves
    them against the working directory.
    """
    project_root = project_root or Path.cwd()
    user_home = user_home or Path.home()

    cfg: dict[str, Any] = _defaults()

    user_cfg = _load_yaml_mapping(user_home / ".flowplan" / "config.yml")
    cfg = _deep_merge(cfg, user_cfg)

    project_cfg = _load_yaml_mapping(project_root / ".flowplan" / "config.yml")
    cfg = _deep_merge(cfg, project_cfg)

    if not isinstance(cfg.get("use_item_order"), bool):
        raise ConfigLoadError("use_item_order must be a boolean")

    return cfg
