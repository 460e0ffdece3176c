"""Scheduler package - capacity-constrained weekly project scheduling.

Pipeline for one run:
- Dependency graph validation (cycle detection, placement order)
- Priority-tiered resource allocation (engineers and adjusted effort)
- Greedy placement with preemption of lower-priority work
- Event-driven timeline optimization of freed capacity

Main entry points:
- compute_schedule: schedule a list of tasks
- SchedulingService: schedule a Project and build a report-ready result
"""

from .allocation import ResourceAllocator, adjusted_effort
from .config import PriorityTier, SchedulingConfig
from .core import ScheduleTask, SchedulingResult, TaskState, UsageStatus, WeekUsage
from .graph import (
    dependency_order,
    dependents_of,
    earliest_start_week,
    find_cycle,
    placement_order,
    would_create_cycle,
)
from .optimizer import EventAction, TimelineEvent, TimelineOptimizer, build_timeline
from .placement import PlacementEngine
from .service import SchedulingService, compute_schedule
from .usage import WeeklyUsage, weekly_usage

__all__ = [
    # Core dataclasses
    "ScheduleTask",
    "TaskState",
    "SchedulingResult",
    "WeekUsage",
    "UsageStatus",
    # Configuration
    "SchedulingConfig",
    "PriorityTier",
    # Graph
    "dependency_order",
    "dependents_of",
    "earliest_start_week",
    "find_cycle",
    "placement_order",
    "would_create_cycle",
    # Allocation
    "ResourceAllocator",
    "adjusted_effort",
    # Placement and optimization
    "PlacementEngine",
    "TimelineOptimizer",
    "TimelineEvent",
    "EventAction",
    "build_timeline",
    "WeeklyUsage",
    "weekly_usage",
    # Entry points
    "compute_schedule",
    "SchedulingService",
]
