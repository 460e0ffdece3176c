"""Greedy capacity-aware placement with priority-based preemption."""

from collections.abc import Callable, Sequence

from crewplan.exceptions import ScheduleHorizonError, SchedulingCancelledError
from crewplan.logger import get_logger

from .config import PriorityTier, SchedulingConfig
from .core import ScheduleTask
from .graph import earliest_start_week
from .usage import WeeklyUsage

logger = get_logger()


class PlacementEngine:
    """Places tasks onto weeks one at a time, in the order given.

    For each task:
    1. Start at the week its dependencies finish
    2. Scan forward for the first window of `effort` weeks with room for its engineers
    3. High-tier tasks blocked by lower-priority work may push that work later
    4. Commit the window to the run's weekly usage

    The caller supplies tasks in placement order (dependencies first).
    """

    def __init__(
        self,
        team_capacity: int,
        config: SchedulingConfig | None = None,
        *,
        cancelled: Callable[[], bool] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            team_capacity: Engineers available in any single week
            config: Optional scheduling configuration
            cancelled: Optional callable polled once per task; returning True aborts the run
        """
        self.team_capacity = team_capacity
        self.config = config or SchedulingConfig()
        self.cancelled = cancelled
        self.usage = WeeklyUsage(team_capacity)
        self.displaced: list[str] = []
        self._placed: dict[str, ScheduleTask] = {}
        self._dependents: dict[str, list[str]] = {}

    def place(self, tasks: Sequence[ScheduleTask]) -> WeeklyUsage:
        """Place every task and return the committed weekly usage."""
        self._dependents = {task.id: [] for task in tasks}
        for task in tasks:
            for dep_id in task.dependencies:
                if dep_id in self._dependents:
                    self._dependents[dep_id].append(task.id)

        for task in tasks:
            if self.cancelled is not None and self.cancelled():
                raise SchedulingCancelledError("Scheduling cancelled during placement")
            self._place_task(task)

        return self.usage

    def _place_task(self, task: ScheduleTask) -> None:
        earliest = earliest_start_week(task, self._placed)
        # Past the committed horizon every window fits, so only preemption can push beyond it
        horizon = max(earliest, len(self.usage))
        ceiling = horizon + self.config.max_search_weeks
        may_preempt = (
            self.config.preemption and self.config.tier_for(task.priority) is PriorityTier.HIGH
        )

        logger.checks(
            f"Placing {task.id} (priority {task.priority}, {task.assigned_resources} engineer(s), "
            f"{task.effort} week(s)), earliest week {earliest}"
        )

        week = earliest
        while True:
            if week > ceiling:
                raise ScheduleHorizonError(
                    f"Task '{task.id}' could not be placed within "
                    f"{self.config.max_search_weeks} weeks of week {horizon}"
                )
            conflict = self.usage.first_conflict(week, task.effort, task.assigned_resources)
            if conflict is None:
                break
            logger.debug(
                f"  Week {week} blocked: week {conflict} has "
                f"{self.usage.free(conflict)} free of {self.team_capacity}"
            )
            if may_preempt and self._try_preempt(task, week):
                # Window changed; check the same week again
                continue
            week += 1

        task.place(week)
        self.usage.allocate(week, task.effort, task.assigned_resources)
        self._placed[task.id] = task
        logger.changes(
            f"Placed {task.id} at weeks {week}-{task.end_week - 1} "
            f"with {task.assigned_resources} engineer(s)"
        )

    def _try_preempt(self, task: ScheduleTask, week: int) -> bool:
        """Push one lower-priority task out of `task`'s window starting at `week`.

        Returns:
            True if a task was displaced
        """
        shortfall = self.usage.shortfall(week, task.effort, task.assigned_resources)
        candidates = [
            placed
            for placed in self._placed.values()
            if placed.priority > task.priority
            and placed.overlaps(week, task.effort)
            and placed.assigned_resources >= shortfall
        ]
        if not candidates:
            return False

        for candidate in candidates:
            new_start = self._find_displacement(candidate, week + task.effort)
            if new_start is None:
                logger.checks(f"  Cannot displace {candidate.id} without breaking its dependents")
                continue

            assert candidate.start_week is not None
            old_start = candidate.start_week
            self.usage.release(old_start, candidate.effort, candidate.assigned_resources)
            candidate.place(new_start)
            self.usage.allocate(new_start, candidate.effort, candidate.assigned_resources)
            self.displaced.append(candidate.id)
            logger.changes(
                f"Displaced {candidate.id} from week {old_start} to week {new_start} "
                f"to make room for {task.id}"
            )
            return True

        return False

    def _find_displacement(self, candidate: ScheduleTask, earliest: int) -> int | None:
        """Find a new start for `candidate` at or after `earliest`, on a trial copy of usage.

        The new window must fit capacity and must still finish before any
        already-placed dependent of the candidate starts.
        """
        assert candidate.start_week is not None
        trial = self.usage.copy()
        trial.release(candidate.start_week, candidate.effort, candidate.assigned_resources)

        dependent_starts = [
            dependent.start_week
            for dep_id in self._dependents.get(candidate.id, [])
            if (dependent := self._placed.get(dep_id)) is not None
            and dependent.start_week is not None
        ]
        if dependent_starts:
            latest = min(dependent_starts) - candidate.effort
        else:
            # Past the current horizon every week is empty, so a start there always fits
            latest = max(earliest, len(trial))

        for start in range(earliest, latest + 1):
            if trial.fits(start, candidate.effort, candidate.assigned_resources):
                return start
        return None
