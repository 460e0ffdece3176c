"""High-level scheduling entry points."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from crewplan.exceptions import SchedulingCancelledError
from crewplan.logger import get_logger
from crewplan.models import DEFAULT_MAX_ENGINEERS_PER_TASK, Project, Task

from .allocation import ResourceAllocator
from .config import SchedulingConfig
from .core import ScheduleTask, SchedulingResult
from .graph import dependency_order, placement_order
from .optimizer import TimelineOptimizer
from .placement import PlacementEngine
from .usage import WeeklyUsage, weekly_usage

logger = get_logger()


@dataclass
class _RunOutput:
    tasks: list[ScheduleTask]
    usage: WeeklyUsage
    optimized: list[str] = field(default_factory=list)
    displaced: list[str] = field(default_factory=list)


def _check_cancelled(cancelled: Callable[[], bool] | None, phase: str) -> None:
    if cancelled is not None and cancelled():
        raise SchedulingCancelledError(f"Scheduling cancelled before {phase}")


def _run(
    tasks: Sequence[Task],
    team_capacity: int,
    max_engineers_per_task: int,
    config: SchedulingConfig,
    cancelled: Callable[[], bool] | None,
) -> _RunOutput:
    if team_capacity < 1:
        raise ValueError(f"team_capacity must be at least 1, got {team_capacity}")
    if max_engineers_per_task < 1:
        raise ValueError(
            f"max_engineers_per_task must be at least 1, got {max_engineers_per_task}"
        )

    # Phase 1: reject cycles before touching anything
    dependency_order(tasks)

    # Phase 2: fresh per-run copies with resources and adjusted effort
    _check_cancelled(cancelled, "allocation")
    allocator = ResourceAllocator(team_capacity, max_engineers_per_task, config)
    schedule_tasks = placement_order(allocator.allocate_all(list(tasks)))

    # Phase 3: greedy placement
    _check_cancelled(cancelled, "placement")
    engine = PlacementEngine(team_capacity, config, cancelled=cancelled)
    usage = engine.place(schedule_tasks)

    # Phase 4: reclaim freed capacity
    optimized: list[str] = []
    if config.timeline_optimization:
        _check_cancelled(cancelled, "timeline optimization")
        optimized = TimelineOptimizer(allocator, config).optimize(schedule_tasks, usage)

    _check_cancelled(cancelled, "returning results")
    return _RunOutput(
        tasks=schedule_tasks, usage=usage, optimized=optimized, displaced=engine.displaced
    )


def compute_schedule(
    tasks: Sequence[Task],
    team_capacity: int,
    max_engineers_per_task: int = DEFAULT_MAX_ENGINEERS_PER_TASK,
    *,
    config: SchedulingConfig | None = None,
    cancelled: Callable[[], bool] | None = None,
) -> list[ScheduleTask]:
    """Compute start weeks and engineer allocations for a set of tasks.

    The caller's tasks are never modified; every call works on its own copies.

    Args:
        tasks: Tasks to schedule (dependencies on unknown IDs are ignored)
        team_capacity: Engineers available in any single week
        max_engineers_per_task: Most engineers a single task may get
        config: Optional scheduling configuration
        cancelled: Optional callable; returning True aborts the run without a result

    Returns:
        One ScheduleTask per input task, in placement order

    Raises:
        CyclicDependencyError: If the tasks contain a dependency cycle
        SchedulingCancelledError: If `cancelled` returned True
    """
    effective_config = config or SchedulingConfig()
    return _run(tasks, team_capacity, max_engineers_per_task, effective_config, cancelled).tasks


class SchedulingService:
    """Schedules a whole project and assembles a report-ready result.

    Adds to compute_schedule:
    - Warnings for dependencies on tasks that are not in the project
    - The weekly usage read model
    - Metadata about displaced and accelerated tasks
    """

    def __init__(
        self,
        project: Project,
        config: SchedulingConfig | None = None,
        *,
        cancelled: Callable[[], bool] | None = None,
    ):
        self.project = project
        self.config = config or SchedulingConfig()
        self.cancelled = cancelled

    def schedule(self) -> SchedulingResult:
        """Schedule all project tasks.

        Raises:
            CyclicDependencyError: If the project contains a dependency cycle
        """
        project_config = self.project.config
        warnings = [
            f"Task '{task_id}' depends on unknown task '{dep_id}' - dependency ignored"
            for task_id, dep_id in self.project.missing_references()
        ]
        for warning in warnings:
            logger.warning(warning)

        output = _run(
            self.project.tasks,
            project_config.team_capacity,
            project_config.max_engineers_per_task,
            self.config,
            self.cancelled,
        )

        return SchedulingResult(
            tasks=output.tasks,
            weekly_usage=weekly_usage(output.tasks, project_config.team_capacity),
            warnings=warnings,
            metadata={
                "team_capacity": project_config.team_capacity,
                "max_engineers_per_task": project_config.max_engineers_per_task,
                "displaced": list(dict.fromkeys(output.displaced)),
                "optimized": output.optimized,
            },
        )
