"""Custom exceptions for Crewplan."""


class CrewplanError(Exception):
    """Base exception for all Crewplan errors."""

    pass


class ValidationError(CrewplanError):
    """Raised when validation fails."""

    pass


class CyclicDependencyError(ValidationError):
    """Raised when a circular dependency is detected among present tasks."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")


class MissingReferenceError(ValidationError):
    """Raised when a referenced task ID does not exist."""

    pass


class ParseError(CrewplanError):
    """Raised when YAML parsing fails."""

    pass


class SchedulingError(CrewplanError):
    """Base class for failures inside a scheduling run."""

    pass


class CapacityOverflowError(SchedulingError):
    """Raised when committed weekly usage would exceed team capacity."""

    def __init__(self, week: int, used: int, capacity: int):
        self.week = week
        self.used = used
        self.capacity = capacity
        super().__init__(
            f"Resource overallocation at week {week}: {used} engineers used, capacity {capacity}"
        )


class ScheduleHorizonError(SchedulingError):
    """Raised when a task cannot be placed within the search-week ceiling."""

    pass


class ScheduleStateError(SchedulingError):
    """Raised on an illegal schedule task state transition."""

    pass


class SchedulingCancelledError(SchedulingError):
    """Raised when the caller cancels a run before it returns a result."""

    pass
