"""Dependency graph validation and ordering."""

import heapq
from collections.abc import Iterator, Mapping, Sequence
from enum import IntEnum
from typing import TypeVar

from crewplan.exceptions import CyclicDependencyError, ValidationError
from crewplan.logger import get_logger
from crewplan.models import Task

from .core import ScheduleTask

logger = get_logger()

TaskT = TypeVar("TaskT", bound=Task)


class _Mark(IntEnum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def _dependency_map(tasks: Sequence[Task]) -> dict[str, tuple[str, ...]]:
    graph: dict[str, tuple[str, ...]] = {}
    for task in tasks:
        if task.id in graph:
            raise ValidationError(f"Duplicate task id: {task.id}")
        graph[task.id] = task.dependencies
    return graph


def _post_order(graph: Mapping[str, Sequence[str]]) -> tuple[list[str], list[str] | None]:
    """Depth-first post-order over `graph`, stopping at the first cycle.

    Uses one mark per task and an explicit path stack: a task is pushed when
    entered and popped once all of its dependencies are done. Dependencies that
    are not keys of `graph` are treated as already satisfied.

    Returns:
        Tuple of (order, cycle) where cycle is None when the graph is acyclic,
        otherwise the offending path with its first task repeated at the end
    """
    marks = dict.fromkeys(graph, _Mark.UNVISITED)
    order: list[str] = []

    for root in graph:
        if marks[root] is not _Mark.UNVISITED:
            continue

        path: list[str] = [root]
        pending: list[Iterator[str]] = [iter(graph[root])]
        marks[root] = _Mark.IN_PROGRESS

        while pending:
            for dep_id in pending[-1]:
                mark = marks.get(dep_id)
                if mark is None or mark is _Mark.DONE:
                    continue
                if mark is _Mark.IN_PROGRESS:
                    return order, path[path.index(dep_id) :] + [dep_id]
                marks[dep_id] = _Mark.IN_PROGRESS
                path.append(dep_id)
                pending.append(iter(graph[dep_id]))
                break
            else:
                pending.pop()
                done = path.pop()
                marks[done] = _Mark.DONE
                order.append(done)

    return order, None


def find_cycle(tasks: Sequence[Task]) -> list[str] | None:
    """Return one dependency cycle among the tasks, or None if there is none."""
    _, cycle = _post_order(_dependency_map(tasks))
    return cycle


def dependency_order(tasks: Sequence[Task]) -> list[str]:
    """Order task IDs so that every task comes after all of its dependencies.

    Raises:
        CyclicDependencyError: If the present tasks contain a dependency cycle
    """
    order, cycle = _post_order(_dependency_map(tasks))
    if cycle is not None:
        logger.error(f"Circular dependency detected: {' -> '.join(cycle)}")
        raise CyclicDependencyError(cycle)
    return order


def placement_order(tasks: Sequence[TaskT]) -> list[TaskT]:
    """Order tasks for greedy placement.

    Dependencies always come before their dependents. Among tasks whose
    dependencies are all emitted, the lowest priority value goes first and input
    position breaks remaining ties.
    """
    position = {task.id: pos for pos, task in enumerate(tasks)}
    by_id = {task.id: task for task in tasks}
    waiting_on: dict[str, int] = {}
    dependents: dict[str, list[str]] = {task.id: [] for task in tasks}

    for task in tasks:
        present = [dep_id for dep_id in task.dependencies if dep_id in position]
        waiting_on[task.id] = len(present)
        for dep_id in present:
            dependents[dep_id].append(task.id)

    ready = [(task.priority, position[task.id]) for task in tasks if waiting_on[task.id] == 0]
    heapq.heapify(ready)

    ordered: list[TaskT] = []
    while ready:
        _, pos = heapq.heappop(ready)
        task = tasks[pos]
        ordered.append(task)
        for child_id in dependents[task.id]:
            waiting_on[child_id] -= 1
            if waiting_on[child_id] == 0:
                child = by_id[child_id]
                heapq.heappush(ready, (child.priority, position[child_id]))

    if len(ordered) != len(tasks):
        raise CyclicDependencyError(find_cycle(tasks) or [])
    return ordered


def earliest_start_week(task: ScheduleTask, tasks_by_id: Mapping[str, ScheduleTask]) -> int:
    """Earliest week a task may start given where its dependencies are placed.

    Dependencies that are not part of the run are ignored.
    """
    earliest = 0
    for dep_id in task.dependencies:
        dep = tasks_by_id.get(dep_id)
        if dep is not None:
            earliest = max(earliest, dep.end_week)
    return earliest


def dependents_of(task_id: str, tasks: Sequence[Task]) -> list[str]:
    """IDs of tasks that directly depend on the given task."""
    return [task.id for task in tasks if task_id in task.dependencies]


def would_create_cycle(task_id: str, new_dependency_id: str, tasks: Sequence[Task]) -> bool:
    """Check whether making `task_id` depend on `new_dependency_id` closes a cycle.

    That is the case when the new dependency already (transitively) depends on
    `task_id`, or when the two are the same task.
    """
    if task_id == new_dependency_id:
        return True

    graph = _dependency_map(tasks)
    seen: set[str] = set()
    stack = [new_dependency_id]
    while stack:
        current = stack.pop()
        if current == task_id:
            return True
        if current in seen:
            continue
        seen.add(current)
        stack.extend(graph.get(current, ()))
    return False
