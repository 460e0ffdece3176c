"""Tests for dependency graph validation and ordering."""

import pytest

from crewplan.exceptions import CyclicDependencyError, ValidationError
from crewplan.models import Task
from crewplan.scheduler import (
    ScheduleTask,
    dependency_order,
    dependents_of,
    earliest_start_week,
    find_cycle,
    placement_order,
    would_create_cycle,
)
from tests.conftest import make_task


class TestDependencyOrder:
    """Test cycle detection and dependency ordering."""

    def test_dependencies_come_first(self) -> None:
        """Test that a task is ordered after its dependency."""
        tasks = [make_task("b", 1, deps=["a"]), make_task("a", 1)]
        assert dependency_order(tasks) == ["a", "b"]

    def test_two_task_cycle(self) -> None:
        """Test that a mutual dependency is reported with its path."""
        tasks = [make_task("a", 1, deps=["b"]), make_task("b", 1, deps=["a"])]
        with pytest.raises(CyclicDependencyError) as exc_info:
            dependency_order(tasks)
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert "a -> b -> a" in str(exc_info.value)

    def test_three_task_cycle(self) -> None:
        """Test a longer cycle."""
        tasks = [
            make_task("a", 1, deps=["b"]),
            make_task("b", 1, deps=["c"]),
            make_task("c", 1, deps=["a"]),
        ]
        assert find_cycle(tasks) == ["a", "b", "c", "a"]

    def test_cycle_behind_acyclic_prefix(self) -> None:
        """Test that the reported path starts at the first task on the cycle."""
        tasks = [
            make_task("root", 1, deps=["x"]),
            make_task("x", 1, deps=["y"]),
            make_task("y", 1, deps=["x"]),
        ]
        assert find_cycle(tasks) == ["x", "y", "x"]

    def test_acyclic_has_no_cycle(self) -> None:
        """Test that a diamond is not a cycle."""
        tasks = [
            make_task("a", 1),
            make_task("b", 1, deps=["a"]),
            make_task("c", 1, deps=["a"]),
            make_task("d", 1, deps=["b", "c"]),
        ]
        assert find_cycle(tasks) is None
        order = dependency_order(tasks)
        assert order.index("a") < order.index("b") < order.index("d")
        assert order.index("c") < order.index("d")

    def test_missing_dependencies_ignored(self) -> None:
        """Test that unknown dependency IDs are skipped."""
        tasks = [make_task("a", 1, deps=["ghost"])]
        assert dependency_order(tasks) == ["a"]

    def test_duplicate_ids_rejected(self) -> None:
        """Test that two tasks with the same ID are a validation error."""
        with pytest.raises(ValidationError, match="Duplicate task id"):
            dependency_order([make_task("a", 1), make_task("a", 2)])

    def test_long_chain_does_not_recurse(self) -> None:
        """Test that a very deep chain is handled iteratively."""
        count = 5000
        tasks = [make_task(f"t{i}", 1, deps=[f"t{i - 1}"] if i else []) for i in range(count)]
        expected = [task.id for task in tasks]
        assert dependency_order(list(reversed(tasks))) == expected


class TestPlacementOrder:
    """Test priority-aware topological ordering."""

    def test_independent_tasks_by_priority_then_position(self) -> None:
        """Test that priority wins and input position breaks ties."""
        tasks = [
            make_task("x", 1, priority=100),
            make_task("y", 1, priority=5),
            make_task("z", 1, priority=100),
        ]
        assert [t.id for t in placement_order(tasks)] == ["y", "x", "z"]

    def test_dependency_precedes_more_important_dependent(self) -> None:
        """Test that a high-priority task still waits for its dependency."""
        tasks = [
            make_task("c", 1, priority=50),
            make_task("a", 1, priority=200),
            make_task("b", 1, priority=5, deps=["a"]),
        ]
        assert [t.id for t in placement_order(tasks)] == ["c", "a", "b"]

    def test_dependent_released_as_soon_as_ready(self) -> None:
        """Test that a newly ready task competes by priority."""
        tasks = [
            make_task("a", 1, priority=10),
            make_task("b", 1, priority=50),
            make_task("c", 1, priority=20, deps=["a"]),
        ]
        assert [t.id for t in placement_order(tasks)] == ["a", "c", "b"]

    def test_cycle_rejected(self) -> None:
        """Test that a cyclic input cannot be ordered."""
        tasks = [make_task("a", 1, deps=["b"]), make_task("b", 1, deps=["a"])]
        with pytest.raises(CyclicDependencyError):
            placement_order(tasks)


class TestGraphQueries:
    """Test helpers used by placement and the CLI."""

    @pytest.fixture
    def chain(self) -> list[Task]:
        return [
            make_task("a", 1),
            make_task("b", 1, deps=["a"]),
            make_task("c", 1, deps=["b"]),
        ]

    def test_would_create_cycle(self, chain: list[Task]) -> None:
        """Test transitive cycle checks for a proposed dependency."""
        assert would_create_cycle("a", "c", chain)
        assert not would_create_cycle("c", "a", chain)
        assert would_create_cycle("a", "a", chain)
        assert not would_create_cycle("a", "unknown", chain)

    def test_dependents_of(self, chain: list[Task]) -> None:
        """Test direct dependents lookup."""
        assert dependents_of("a", chain) == ["b"]
        assert dependents_of("c", chain) == []

    def test_earliest_start_week(self) -> None:
        """Test that a task waits for its latest-finishing dependency."""
        a = ScheduleTask.from_task(make_task("a", 2), assigned_resources=1, effort=2)
        b = ScheduleTask.from_task(make_task("b", 5), assigned_resources=1, effort=5)
        c = ScheduleTask.from_task(
            make_task("c", 1, deps=["a", "b", "ghost"]), assigned_resources=1, effort=1
        )
        a.place(0)
        b.place(1)
        assert earliest_start_week(c, {"a": a, "b": b}) == 6
        assert earliest_start_week(a, {"a": a, "b": b}) == 0
