"""Core dataclasses for the scheduling engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from crewplan.exceptions import ScheduleStateError
from crewplan.models import Task


class TaskState(str, Enum):
    """Progression of a task through one scheduling run."""

    UNSCHEDULED = "unscheduled"
    PLACED = "placed"
    OPTIMIZED = "optimized"


@dataclass
class ScheduleTask(Task):
    """A task as seen by one scheduling run.

    `effort` holds the resource-adjusted duration in weeks; the caller's raw
    estimate is kept in `original_effort`. Instances belong to the run that
    created them and are never handed back into another run.
    """

    original_effort: int = 0
    assigned_resources: int = 1
    state: TaskState = TaskState.UNSCHEDULED

    @classmethod
    def from_task(cls, task: Task, assigned_resources: int, effort: int) -> "ScheduleTask":
        """Create a fresh, unscheduled copy of a caller's task."""
        return cls(
            id=task.id,
            effort=effort,
            priority=task.priority,
            dependencies=task.dependencies,
            name=task.name,
            start_week=None,
            original_effort=task.effort,
            assigned_resources=assigned_resources,
        )

    @property
    def optimized(self) -> bool:
        """True once the timeline optimizer has accelerated this task."""
        return self.state is TaskState.OPTIMIZED

    @property
    def is_placed(self) -> bool:
        return self.state is not TaskState.UNSCHEDULED

    @property
    def end_week(self) -> int:
        """First week after the task finishes (exclusive end)."""
        if self.start_week is None:
            raise ScheduleStateError(f"Task '{self.id}' has not been placed")
        return self.start_week + self.effort

    def occupies(self, week: int) -> bool:
        """Whether the task is active during the given week."""
        return self.start_week is not None and self.start_week <= week < self.end_week

    def overlaps(self, start: int, duration: int) -> bool:
        """Whether the task is active anywhere in [start, start + duration)."""
        return self.start_week is not None and (
            self.start_week < start + duration and self.end_week > start
        )

    def place(self, week: int) -> None:
        """Record a start week (initial placement or displacement)."""
        if self.state is TaskState.OPTIMIZED:
            raise ScheduleStateError(f"Task '{self.id}' is already optimized and cannot move")
        if week < 0:
            raise ScheduleStateError(f"Task '{self.id}' cannot start at negative week {week}")
        self.start_week = week
        self.state = TaskState.PLACED

    def optimize(self, assigned_resources: int, effort: int) -> None:
        """Apply the single acceleration step granted by the timeline optimizer."""
        if self.state is not TaskState.PLACED:
            raise ScheduleStateError(
                f"Task '{self.id}' cannot be optimized from state '{self.state.value}'"
            )
        self.assigned_resources = assigned_resources
        self.effort = effort
        self.state = TaskState.OPTIMIZED


class UsageStatus(str, Enum):
    """Classification of one week's load against team capacity."""

    AVAILABLE = "available"
    FULL = "full"
    OVER = "over"


@dataclass
class WeekUsage:
    """Aggregate engineer usage for a single week."""

    week: int
    used: int
    capacity: int

    @property
    def status(self) -> UsageStatus:
        if self.used < self.capacity:
            return UsageStatus.AVAILABLE
        if self.used == self.capacity:
            return UsageStatus.FULL
        return UsageStatus.OVER

    @property
    def free(self) -> int:
        return self.capacity - self.used


def _default_str_list() -> list[str]:
    return []


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass
class SchedulingResult:
    """Complete result of scheduling a project."""

    tasks: list[ScheduleTask]
    weekly_usage: list[WeekUsage]
    warnings: list[str] = field(default_factory=_default_str_list)
    metadata: dict[str, Any] = field(default_factory=_default_dict)

    @property
    def total_weeks(self) -> int:
        """Project length: the latest end week over all tasks (0 if empty)."""
        return max((task.end_week for task in self.tasks), default=0)

    def get_task(self, task_id: str) -> ScheduleTask | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
