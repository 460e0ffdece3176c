"""Configuration classes for the scheduling engine."""

from enum import Enum

from pydantic import BaseModel, Field


class PriorityTier(str, Enum):
    """Priority classes that govern how generously a task is staffed."""

    HIGH = "high"  # priority <= high_priority_max
    MEDIUM = "medium"  # high_priority_max < priority <= medium_priority_max
    LOW = "low"  # priority > medium_priority_max


class SchedulingConfig(BaseModel):
    """Tuning knobs for allocation, placement and timeline optimization."""

    # Tier boundaries (lower priority value = more important)
    high_priority_max: int = Field(default=10, ge=1)
    medium_priority_max: int = Field(default=100, ge=1)

    # Medium-tier tasks get this share of max_engineers_per_task (at least 1)
    medium_share: float = Field(default=0.75, gt=0.0, le=1.0)

    # Diminishing returns when more than one engineer shares a task
    high_efficiency: float = Field(default=0.90, gt=0.0, le=1.0)
    medium_efficiency: float = Field(default=0.85, gt=0.0, le=1.0)

    # Phase switches
    preemption: bool = True  # High-tier tasks may displace lower-priority placements
    timeline_optimization: bool = True  # Run the event-driven second pass

    # Treat an overdrawn resource counter as a defect (raise) instead of clamping to zero
    strict_capacity: bool = True

    # Per-task ceiling on how far past its earliest week placement may search
    max_search_weeks: int = Field(default=10_000, ge=1)

    def tier_for(self, priority: int) -> PriorityTier:
        """Classify a priority value into its tier."""
        if priority <= self.high_priority_max:
            return PriorityTier.HIGH
        if priority <= self.medium_priority_max:
            return PriorityTier.MEDIUM
        return PriorityTier.LOW
