"""Event-driven second pass that hands freed engineers to waiting tasks."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from crewplan.exceptions import CapacityOverflowError
from crewplan.logger import get_logger

from .allocation import ResourceAllocator
from .config import SchedulingConfig
from .core import ScheduleTask
from .graph import earliest_start_week
from .usage import WeeklyUsage

logger = get_logger()


class EventAction(str, Enum):
    """What happens to a task's engineers at a timeline event."""

    END = "end"
    START = "start"


@dataclass
class TimelineEvent:
    """A task starting or finishing at a given week."""

    week: int
    action: EventAction
    task: ScheduleTask
    resources: int
    sequence: int  # Position of the task in placement order

    def sort_key(self) -> tuple[int, int, int]:
        # Ends sort before starts in the same week so freed engineers are visible first
        return (self.week, 0 if self.action is EventAction.END else 1, self.sequence)


def build_timeline(tasks: Sequence[ScheduleTask]) -> list[TimelineEvent]:
    """Create the sorted start/end events for placed tasks."""
    events: list[TimelineEvent] = []
    for sequence, task in enumerate(tasks):
        assert task.start_week is not None
        resources = task.assigned_resources
        events.append(TimelineEvent(task.start_week, EventAction.START, task, resources, sequence))
        events.append(TimelineEvent(task.end_week, EventAction.END, task, resources, sequence))
    events.sort(key=TimelineEvent.sort_key)
    return events


class TimelineOptimizer:
    """Walks the placed schedule chronologically and accelerates waiting tasks.

    Whenever a task ends, the most important task that is ready but has not
    started yet may take on more engineers, up to its tier's ceiling. Each task
    is accelerated at most once. An accelerated task keeps its start week and
    finishes earlier, so nothing that depends on it is invalidated.

    The running counter of available engineers mirrors the committed weekly
    usage; it going negative means placement and optimization disagree.
    """

    def __init__(self, allocator: ResourceAllocator, config: SchedulingConfig | None = None):
        self.allocator = allocator
        self.team_capacity = allocator.team_capacity
        self.config = config or SchedulingConfig()
        self.optimized: list[str] = []

    def optimize(self, tasks: Sequence[ScheduleTask], usage: WeeklyUsage) -> list[str]:
        """Run the pass over tasks in placement order.

        Args:
            tasks: Placed tasks, in placement order
            usage: The run's committed weekly usage; updated for every acceleration

        Returns:
            IDs of accelerated tasks, in the order they were accelerated
        """
        events = build_timeline(tasks)
        tasks_by_id = {task.id: task for task in tasks}
        running: set[str] = set()
        available = self.team_capacity

        index = 0
        while index < len(events):
            event = events[index]
            if event.action is EventAction.END:
                available += event.resources
                running.discard(event.task.id)
                logger.debug(
                    f"  Week {event.week}: {event.task.id} ends, {available} engineer(s) free"
                )
                if self._accelerate_next(
                    event.week, tasks, tasks_by_id, running, available, usage, events[index + 1 :]
                ):
                    events[index + 1 :] = sorted(events[index + 1 :], key=TimelineEvent.sort_key)
            else:
                available -= event.resources
                running.add(event.task.id)

            if available < 0:
                available = self._overdrawn(event.week, available)
            index += 1

        return list(self.optimized)

    def _select_candidate(
        self,
        week: int,
        tasks: Sequence[ScheduleTask],
        tasks_by_id: dict[str, ScheduleTask],
        running: set[str],
    ) -> ScheduleTask | None:
        """Most important task that is ready at `week` but has not started."""
        for task in sorted(tasks, key=lambda t: t.priority):
            if task.id in running or task.optimized:
                continue
            assert task.start_week is not None
            if task.start_week < week:
                continue
            if earliest_start_week(task, tasks_by_id) > week:
                continue
            return task
        return None

    def _accelerate_next(  # noqa: PLR0913 - shares the walk's state
        self,
        week: int,
        tasks: Sequence[ScheduleTask],
        tasks_by_id: dict[str, ScheduleTask],
        running: set[str],
        available: int,
        usage: WeeklyUsage,
        pending: list[TimelineEvent],
    ) -> bool:
        candidate = self._select_candidate(week, tasks, tasks_by_id, running)
        if candidate is None:
            return False

        current = candidate.assigned_resources
        grant = min(current + available, self.allocator.acceleration_ceiling(candidate))
        logger.checks(
            f"  Week {week}: candidate {candidate.id} (priority {candidate.priority}) "
            f"has {current}, may grow to {grant}"
        )
        if grant <= current:
            return False

        assert candidate.start_week is not None
        start = candidate.start_week
        trial = usage.copy()
        trial.release(start, candidate.effort, current)
        effort = candidate.effort
        while grant > current:
            effort = self.allocator.effort_for(candidate, grant)
            if trial.fits(start, effort, grant):
                break
            grant -= 1
        if grant <= current:
            logger.checks(f"  No larger allocation for {candidate.id} fits its window")
            return False

        old_effort = candidate.effort
        usage.release(start, old_effort, current)
        candidate.optimize(grant, effort)
        usage.allocate(start, effort, grant)
        self.optimized.append(candidate.id)

        # The task has not started yet, so both of its events are still pending
        for event in pending:
            if event.task is candidate:
                event.resources = grant
                if event.action is EventAction.END:
                    event.week = candidate.end_week

        logger.changes(
            f"Accelerated {candidate.id}: {current} -> {grant} engineer(s), "
            f"{old_effort} -> {effort} week(s), starting week {start}"
        )
        return True

    def _overdrawn(self, week: int, available: int) -> int:
        used = self.team_capacity - available
        if self.config.strict_capacity:
            raise CapacityOverflowError(week, used, self.team_capacity)
        logger.error(f"Resource overallocation detected at week {week}; clamping to capacity")
        return 0
