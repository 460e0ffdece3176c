"""Data models for Crewplan."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

# Lower number = higher priority
DEFAULT_PRIORITY = 100

DEFAULT_TEAM_CAPACITY = 3
DEFAULT_MAX_ENGINEERS_PER_TASK = 2


def _normalize_dependencies(task_id: str, dependencies: tuple[str, ...]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for dep_id in dependencies:
        dep_id = str(dep_id)
        if dep_id == task_id:
            raise ValueError(f"Task '{task_id}' cannot depend on itself")
        seen.setdefault(dep_id, None)
    return tuple(seen)


@dataclass
class Task:
    """A unit of work to be scheduled.

    Effort is measured in person-weeks. Dependencies are kept in the order they
    were given (duplicates dropped) so that every traversal is deterministic.
    """

    id: str
    effort: int
    priority: int = DEFAULT_PRIORITY
    dependencies: tuple[str, ...] = ()
    name: str = ""
    start_week: int | None = None  # Last persisted start week, if any

    def __post_init__(self) -> None:
        self.id = str(self.id)
        self.dependencies = _normalize_dependencies(self.id, tuple(self.dependencies))
        if not self.name:
            self.name = self.id


class ProjectConfig(BaseModel):
    """Team-level scheduling parameters."""

    team_capacity: int = Field(default=DEFAULT_TEAM_CAPACITY, ge=1, le=100)
    max_engineers_per_task: int = Field(default=DEFAULT_MAX_ENGINEERS_PER_TASK, ge=1, le=10)


@dataclass
class Project:
    """A set of tasks plus the team configuration they are scheduled against."""

    tasks: list[Task] = field(default_factory=list)
    config: ProjectConfig = field(default_factory=ProjectConfig)

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_all_ids(self) -> set[str]:
        """Get all task IDs."""
        return {task.id for task in self.tasks}

    def missing_references(self) -> list[tuple[str, str]]:
        """Return (task_id, dependency_id) pairs that point at unknown tasks."""
        all_ids = self.get_all_ids()
        return [
            (task.id, dep_id)
            for task in self.tasks
            for dep_id in task.dependencies
            if dep_id not in all_ids
        ]
