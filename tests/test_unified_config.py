"""Tests for unified configuration loading."""

from pathlib import Path

import pytest

from crewplan.exceptions import ParseError
from crewplan.unified_config import (
    CONFIG_FILENAME,
    UnifiedConfig,
    discover_config,
    load_unified_config,
)


class TestLoadUnifiedConfig:
    """Test loading crewplan_config.yaml."""

    def test_full_config(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text(
            """
project:
  team_capacity: 6
scheduler:
  preemption: false
  medium_share: 0.5
  max_search_weeks: 52
"""
        )

        config = load_unified_config(path)

        assert config.project.team_capacity == 6
        assert config.project.max_engineers_per_task is None
        assert config.scheduler.preemption is False
        assert config.scheduler.medium_share == 0.5
        assert config.scheduler.max_search_weeks == 52
        assert config.scheduler.timeline_optimization is True

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("")
        assert load_unified_config(path) == UnifiedConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_unified_config(tmp_path / CONFIG_FILENAME)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("scheduler:\n  medium_share: 1.5\n")
        with pytest.raises(ParseError, match="Invalid configuration"):
            load_unified_config(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("project: {team_capacity: [\n")
        with pytest.raises(ParseError, match="Failed to parse config YAML"):
            load_unified_config(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("- 1\n")
        with pytest.raises(ParseError, match="dictionary"):
            load_unified_config(path)


class TestDiscoverConfig:
    """Test config file discovery."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("project:\n  team_capacity: 9\n")
        config = discover_config(tmp_path / "project.yaml", explicit)
        assert config is not None
        assert config.project.team_capacity == 9

    def test_project_directory(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("project:\n  max_engineers_per_task: 4\n")
        config = discover_config(tmp_path / "project.yaml")
        assert config is not None
        assert config.project.max_engineers_per_task == 4

    def test_none_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        project_dir = tmp_path / "plans"
        project_dir.mkdir()
        monkeypatch.chdir(tmp_path)
        assert discover_config(project_dir / "project.yaml") is None

    def test_current_directory_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        project_dir = tmp_path / "plans"
        project_dir.mkdir()
        (tmp_path / CONFIG_FILENAME).write_text("project:\n  team_capacity: 2\n")
        monkeypatch.chdir(tmp_path)
        config = discover_config(project_dir / "project.yaml")
        assert config is not None
        assert config.project.team_capacity == 2
