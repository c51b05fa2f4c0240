"""Tests for layered YAML configuration."""

from pathlib import Path

import pytest

from flowplan.application.config_loader import (
    ConfigLoadError,
    load_config,
    resolve_system_prompt_names,
)
from flowplan.domain.models.auto_prompt import AutoPromptKind


def _write(root: Path, text: str) -> Path:
    path = root / ".flowplan" / "config.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

        assert cfg["workflows_dir"] == ".flowplan/workflows"
        assert cfg["use_item_order"] is False
        assert cfg["system_prompt_names"] == {
            "memory-board": "Handoff Memory Board",
            "multi-agent-chat": "Internal Agents Chat",
        }

    def test_project_overrides_user(self, tmp_path: Path) -> None:
        _write(tmp_path / "h", "workflows_dir: /user/wf\nuse_item_order: true\n")
        _write(tmp_path / "p", "workflows_dir: /project/wf\n")

        cfg = load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

        assert cfg["workflows_dir"] == "/project/wf"
        assert cfg["use_item_order"] is True

    def test_system_prompt_names_deep_merged(self, tmp_path: Path) -> None:
        _write(tmp_path / "p", "system_prompt_names:\n  memory-board: Team Board\n")

        cfg = load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

        assert cfg["system_prompt_names"] == {
            "memory-board": "Team Board",
            "multi-agent-chat": "Internal Agents Chat",
        }

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "p", "workflows_dir: [oops\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

        assert exc_info.value.path == path
        assert "Malformed YAML" in str(exc_info.value)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        _write(tmp_path / "p", "- a\n- b\n")

        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        _write(tmp_path / "p", "")

        cfg = load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")

        assert cfg["tokens_file"] == ".flowplan/tokens.yml"

    def test_use_item_order_must_be_bool(self, tmp_path: Path) -> None:
        _write(tmp_path / "p", "use_item_order: sometimes\n")

        with pytest.raises(ConfigLoadError, match="boolean"):
            load_config(project_root=tmp_path / "p", user_home=tmp_path / "h")


class TestResolveSystemPromptNames:
    def test_maps_kinds(self) -> None:
        names = resolve_system_prompt_names({"system_prompt_names": {"memory-board": "Board"}})

        assert names == {AutoPromptKind.MEMORY_BOARD: "Board"}

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigLoadError, match="Unknown auto-prompt kind"):
            resolve_system_prompt_names({"system_prompt_names": {"review": "X"}})

    def test_blank_name(self) -> None:
        with pytest.raises(ConfigLoadError, match="non-empty"):
            resolve_system_prompt_names({"system_prompt_names": {"memory-board": " "}})
