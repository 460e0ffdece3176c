"""Priority-tiered engineer allocation and effort adjustment."""

import math

from crewplan.logger import get_logger
from crewplan.models import Task

from .config import PriorityTier, SchedulingConfig
from .core import ScheduleTask

logger = get_logger()


def adjusted_effort(original_effort: int, resources: int, efficiency: float) -> int:
    """Duration in weeks when `resources` engineers share `original_effort` person-weeks.

    Coordination overhead makes extra engineers less than fully effective, so
    duration shrinks sublinearly. A single engineer takes the raw estimate.
    """
    if resources <= 1:
        return original_effort
    return max(1, math.ceil(original_effort / (resources * efficiency)))


class ResourceAllocator:
    """Turns a task's priority into an engineer count and a duration.

    - High tier: the full per-task engineer cap
    - Medium tier: a share of the cap (at least one engineer)
    - Low tier: one engineer

    Every count is also capped by team capacity.
    """

    def __init__(
        self,
        team_capacity: int,
        max_engineers_per_task: int,
        config: SchedulingConfig | None = None,
    ) -> None:
        self.team_capacity = team_capacity
        self.max_engineers_per_task = max_engineers_per_task
        self.config = config or SchedulingConfig()

    def tier(self, task: Task) -> PriorityTier:
        return self.config.tier_for(task.priority)

    def medium_engineers(self) -> int:
        return max(1, math.floor(self.max_engineers_per_task * self.config.medium_share))

    def resources_for(self, task: Task) -> int:
        """Engineers initially assigned to a task."""
        tier = self.tier(task)
        if tier is PriorityTier.HIGH:
            return min(self.max_engineers_per_task, self.team_capacity)
        if tier is PriorityTier.MEDIUM:
            return min(self.medium_engineers(), self.team_capacity)
        return 1

    def acceleration_ceiling(self, task: Task) -> int:
        """Most engineers the timeline optimizer may grant a task.

        High-tier tasks may grow to the full cap; every other task may grow to
        the medium share.
        """
        if self.tier(task) is PriorityTier.HIGH:
            ceiling = self.max_engineers_per_task
        else:
            ceiling = self.medium_engineers()
        return min(ceiling, self.team_capacity)

    def efficiency(self, task: Task) -> float:
        if self.tier(task) is PriorityTier.HIGH:
            return self.config.high_efficiency
        return self.config.medium_efficiency

    def effort_for(self, task: ScheduleTask, resources: int) -> int:
        """Duration of a scheduled task if it were staffed with `resources` engineers."""
        return adjusted_effort(task.original_effort, resources, self.efficiency(task))

    def allocate(self, task: Task) -> ScheduleTask:
        """Create the run's copy of a task with resources and adjusted effort filled in."""
        resources = self.resources_for(task)
        effort = adjusted_effort(task.effort, resources, self.efficiency(task))
        logger.debug(
            f"  Allocate {task.id}: priority {task.priority} ({self.tier(task).value}) -> "
            f"{resources} engineer(s), effort {task.effort} -> {effort}"
        )
        return ScheduleTask.from_task(task, assigned_resources=resources, effort=effort)

    def allocate_all(self, tasks: list[Task]) -> list[ScheduleTask]:
        return [self.allocate(task) for task in tasks]
