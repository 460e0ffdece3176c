"""Project file loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import MissingReferenceError, ParseError, ValidationError
from .models import Project, ProjectConfig, Task
from .scheduler import dependency_order
from .schemas import ProjectSchema
from .unified_config import UnifiedConfig


def parse_project(path: Path | str) -> Project:
    """Parse a project YAML file into a Project without any config overrides."""
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("YAML must contain a dictionary at the root level")

    try:
        schema = ProjectSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid project structure: {e}") from e

    tasks: list[Task] = []
    for task_id, task_data in schema.tasks.items():
        try:
            task = Task(
                id=task_id,
                effort=task_data.effort,
                priority=task_data.priority,
                dependencies=tuple(task_data.dependencies),
                name=task_data.name or task_id,
                start_week=task_data.start_week,
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e
        tasks.append(task)

    return Project(tasks=tasks, config=schema.config)


def apply_overrides(project: Project, config: UnifiedConfig | None) -> Project:
    """Return the project with team settings from the unified config applied."""
    if config is None:
        return project
    overrides = config.project.model_dump(exclude_none=True)
    if not overrides:
        return project
    merged = ProjectConfig.model_validate({**project.config.model_dump(), **overrides})
    return Project(tasks=project.tasks, config=merged)


def load_project(path: Path | str, config: UnifiedConfig | None = None) -> Project:
    """Load a project file and apply config overrides.

    Dependencies on unknown tasks are kept. The scheduler ignores them and
    reports them in its result warnings.
    """
    return apply_overrides(parse_project(path), config)


def validate_project(project: Project, *, strict: bool = False) -> list[str]:
    """Validate references and cycles.

    Args:
        project: Project to validate
        strict: Treat dependencies on unknown tasks as errors

    Returns:
        Warning messages (unknown references when not strict)

    Raises:
        MissingReferenceError: If strict and a dependency points at an unknown task
        CyclicDependencyError: If the tasks contain a dependency cycle
    """
    warnings: list[str] = []
    for task_id, dep_id in project.missing_references():
        message = f"Task {task_id} depends on unknown task: {dep_id}"
        if strict:
            raise MissingReferenceError(message)
        warnings.append(message)

    dependency_order(project.tasks)
    return warnings
