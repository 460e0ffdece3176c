"""Pytest configuration and fixtures for crewplan tests."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest
import yaml

from crewplan.logger import reset_logger
from crewplan.models import DEFAULT_PRIORITY, Task
from crewplan.scheduler import ScheduleTask


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Reset logger state after each test for isolation."""
    yield
    reset_logger()


def make_task(
    task_id: str,
    effort: int,
    priority: int = DEFAULT_PRIORITY,
    deps: Sequence[str] = (),
    start_week: int | None = None,
) -> Task:
    """Create a Task with terse arguments.

    Example:
        make_task("api", 4, priority=5, deps=["schema"])
    """
    return Task(
        id=task_id,
        effort=effort,
        priority=priority,
        dependencies=tuple(deps),
        start_week=start_week,
    )


def by_id(tasks: Sequence[ScheduleTask]) -> dict[str, ScheduleTask]:
    """Index scheduled tasks by ID."""
    return {task.id: task for task in tasks}


def write_project(tmp_path: Path, data: dict[str, Any], name: str = "project.yaml") -> Path:
    """Write a project dict to a YAML file and return its path."""
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


def assert_valid_schedule(
    scheduled: Sequence[ScheduleTask],
    tasks: Sequence[Task],
    team_capacity: int,
    *,
    check_dependencies: bool = True,
    check_capacity: bool = True,
) -> None:
    """Assert that a schedule is valid without checking specific placements.

    Useful for tests over generated projects, where exact weeks are not
    interesting but the invariants always are.
    """
    scheduled_by_id = by_id(scheduled)
    input_ids = {task.id for task in tasks}

    assert set(scheduled_by_id) == input_ids, "Every input task must be scheduled exactly once"
    assert len(scheduled) == len(tasks)

    for task in tasks:
        st = scheduled_by_id[task.id]
        assert st.start_week is not None and st.start_week >= 0
        assert st.assigned_resources >= 1
        assert st.assigned_resources <= team_capacity
        assert st.effort >= 1
        assert st.original_effort == task.effort

    if check_dependencies:
        for st in scheduled:
            for dep_id in st.dependencies:
                dep = scheduled_by_id.get(dep_id)
                if dep is None:
                    continue
                assert dep.end_week <= st.start_week, (  # type: ignore[operator]
                    f"Task {st.id} starts at week {st.start_week} but "
                    f"dependency {dep.id} ends at week {dep.end_week}"
                )

    if check_capacity:
        horizon = max((st.end_week for st in scheduled), default=0)
        for week in range(horizon):
            used = sum(st.assigned_resources for st in scheduled if st.occupies(week))
            assert used <= team_capacity, (
                f"Week {week} uses {used} engineers, capacity is {team_capacity}"
            )
