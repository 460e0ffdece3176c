"""Pydantic schemas for YAML data validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import DEFAULT_PRIORITY, ProjectConfig


class TaskSchema(BaseModel):
    """Schema for a single task in a project file."""

    name: str | None = None
    effort: int = Field(ge=1)  # Person-weeks
    priority: int = Field(default=DEFAULT_PRIORITY, ge=1)  # Lower number = higher priority
    dependencies: list[str] = Field(default_factory=list)
    start_week: int | None = Field(default=None, ge=0)

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of strings."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @field_validator("priority", mode="before")
    @classmethod
    def default_missing_priority(cls, v: Any) -> Any:
        """Treat an explicit null priority like an absent one."""
        return DEFAULT_PRIORITY if v is None else v


class ProjectSchema(BaseModel):
    """Schema for the entire project YAML file."""

    config: ProjectConfig = Field(default_factory=ProjectConfig)
    tasks: dict[str, TaskSchema] = Field(default_factory=dict)

    @field_validator("tasks", mode="before")
    @classmethod
    def stringify_task_ids(cls, v: Any) -> Any:
        """Allow bare numeric task IDs as mapping keys."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v
