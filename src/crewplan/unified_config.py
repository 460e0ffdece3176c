"""Unified configuration file for team defaults and scheduler tuning.

A single `crewplan_config.yaml` may hold:
- `project`: team_capacity / max_engineers_per_task overriding the project file
- `scheduler`: SchedulingConfig fields
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError
from .scheduler import SchedulingConfig

CONFIG_FILENAME = "crewplan_config.yaml"


class ProjectOverrides(BaseModel):
    """Team settings that take precedence over the project file's own config."""

    team_capacity: int | None = Field(default=None, ge=1, le=100)
    max_engineers_per_task: int | None = Field(default=None, ge=1, le=10)


class UnifiedConfig(BaseModel):
    """Unified configuration for a crewplan workspace."""

    project: ProjectOverrides = Field(default_factory=ProjectOverrides)
    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from a YAML file.

    Args:
        config_path: Path to crewplan_config.yaml

    Returns:
        UnifiedConfig with defaults for every missing section

    Raises:
        FileNotFoundError: If config file doesn't exist
        ParseError: If config is not valid YAML or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config YAML: {e}") from e

    if data is None:
        return UnifiedConfig()
    if not isinstance(data, dict):
        raise ParseError("Config must contain a dictionary at the root level")

    try:
        return UnifiedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"Invalid configuration in {config_path}: {e}") from e


def discover_config(project_path: Path, config_path: Path | None = None) -> UnifiedConfig | None:
    """Find and load the unified config for a project file.

    Search order:
    1. Explicit config_path argument
    2. project file directory / crewplan_config.yaml
    3. Current directory / crewplan_config.yaml
    """
    if config_path is not None:
        return load_unified_config(config_path)

    dir_config = Path(project_path).parent / CONFIG_FILENAME
    if dir_config.exists():
        return load_unified_config(dir_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_unified_config(cwd_config)

    return None
