"""Write scheduling results back into a project file."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from .exceptions import ParseError
from .logger import get_logger
from .scheduler import ScheduleTask

logger = get_logger()


def write_start_weeks(file_path: Path, tasks: Iterable[ScheduleTask]) -> int:
    """Persist computed start weeks into the project file, preserving its formatting.

    Only `start_week` is written; effort, priority and dependencies stay as the
    user wrote them.

    Args:
        file_path: Path to the project file
        tasks: Scheduled tasks whose start weeks should be stored

    Returns:
        Number of tasks updated
    """
    yaml_rt = YAML()
    yaml_rt.preserve_quotes = True  # type: ignore[assignment]

    with file_path.open(encoding="utf-8") as f:
        data: Any = yaml_rt.load(f)  # type: ignore[no-untyped-call]

    if not isinstance(data, dict) or not isinstance(data.get("tasks"), dict):
        raise ParseError(f"No 'tasks' section found in {file_path}")

    # YAML keys may be numbers; match them by their string form
    yaml_tasks: dict[str, Any] = data["tasks"]
    keys_by_id = {str(key): key for key in yaml_tasks}

    updated = 0
    for task in tasks:
        key = keys_by_id.get(task.id)
        if key is None:
            logger.warning(f"Task '{task.id}' not found in {file_path}; start week not written")
            continue
        if task.start_week is None:
            continue
        yaml_tasks[key]["start_week"] = task.start_week
        updated += 1

    with file_path.open("w", encoding="utf-8") as f:
        yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]

    logger.changes(f"Wrote start weeks for {updated} task(s) to {file_path}")
    return updated
