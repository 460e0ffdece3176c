"""Per-week resource usage tracking."""

from collections.abc import Iterable

from crewplan.exceptions import CapacityOverflowError
from crewplan.logger import get_logger

from .core import ScheduleTask, WeekUsage

logger = get_logger()


class WeeklyUsage:
    """Engineers committed per week for a single scheduling run.

    Weeks past the current horizon are implicitly empty. Commits are checked:
    an allocation that would push any week above capacity is refused with
    CapacityOverflowError and leaves the vector untouched.
    """

    def __init__(self, capacity: int, weeks: Iterable[int] | None = None) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._weeks: list[int] = list(weeks) if weeks is not None else []

    def __len__(self) -> int:
        return len(self._weeks)

    def copy(self) -> "WeeklyUsage":
        """Create a speculative copy for trial displacements."""
        return WeeklyUsage(self.capacity, self._weeks)

    def as_list(self) -> list[int]:
        return list(self._weeks)

    def used(self, week: int) -> int:
        self._check_week(week)
        return self._weeks[week] if week < len(self._weeks) else 0

    def free(self, week: int) -> int:
        return self.capacity - self.used(week)

    def shortfall(self, start: int, duration: int, amount: int) -> int:
        """How many engineers are missing in the worst week of the window."""
        return max(
            (self.used(week) + amount - self.capacity for week in range(start, start + duration)),
            default=0,
        )

    def first_conflict(self, start: int, duration: int, amount: int) -> int | None:
        """Return the first week in the window that cannot take `amount` more engineers."""
        for week in range(start, start + duration):
            if self.used(week) + amount > self.capacity:
                return week
        return None

    def fits(self, start: int, duration: int, amount: int) -> bool:
        return self.first_conflict(start, duration, amount) is None

    def allocate(self, start: int, duration: int, amount: int) -> None:
        """Commit `amount` engineers to every week of [start, start + duration)."""
        conflict = self.first_conflict(start, duration, amount)
        if conflict is not None:
            used = self.used(conflict) + amount
            logger.error(
                f"Refusing allocation of {amount} at week {conflict}: "
                f"{used} would exceed capacity {self.capacity}"
            )
            raise CapacityOverflowError(conflict, used, self.capacity)
        self._grow(start + duration)
        for week in range(start, start + duration):
            self._weeks[week] += amount

    def release(self, start: int, duration: int, amount: int) -> None:
        """Return `amount` engineers for every week of [start, start + duration)."""
        for week in range(start, start + duration):
            if self.used(week) < amount:
                raise ValueError(
                    f"Cannot release {amount} engineers at week {week}: only {self.used(week)} used"
                )
        for week in range(start, start + duration):
            self._weeks[week] -= amount

    def _grow(self, length: int) -> None:
        if length > len(self._weeks):
            self._weeks.extend([0] * (length - len(self._weeks)))

    @staticmethod
    def _check_week(week: int) -> None:
        if week < 0:
            raise IndexError(f"Week index must be non-negative, got {week}")


def weekly_usage(tasks: Iterable[ScheduleTask], team_capacity: int) -> list[WeekUsage]:
    """Aggregate engineer usage for every week from 0 to the last task end.

    Unlike WeeklyUsage this never refuses anything: it reports what a schedule
    actually commits, so over-allocated weeks show up as OVER.
    """
    totals: list[int] = []
    for task in tasks:
        if task.start_week is None:
            continue
        end = task.start_week + task.effort
        if end > len(totals):
            totals.extend([0] * (end - len(totals)))
        for week in range(task.start_week, end):
            totals[week] += task.assigned_resources
    return [
        WeekUsage(week=week, used=used, capacity=team_capacity)
        for week, used in enumerate(totals)
    ]
