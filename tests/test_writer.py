"""Tests for writing start weeks back into project files."""

from pathlib import Path

import pytest
import yaml

from crewplan.exceptions import ParseError
from crewplan.loader import parse_project
from crewplan.scheduler import ScheduleTask, compute_schedule
from crewplan.writer import write_start_weeks
from tests.conftest import make_task

PROJECT_TEXT = """\
# Q3 plan
config:
  team_capacity: 2
tasks:
  a:
    effort: 2  # two weeks
  b:
    effort: 1
    dependencies: [a]
  1:
    effort: 1
"""


def test_start_weeks_written(tmp_path: Path) -> None:
    """Test that computed start weeks land in the file and formatting survives."""
    path = tmp_path / "project.yaml"
    path.write_text(PROJECT_TEXT)
    project = parse_project(path)
    scheduled = compute_schedule(project.tasks, project.config.team_capacity)

    updated = write_start_weeks(path, scheduled)

    assert updated == 3
    text = path.read_text()
    assert "# Q3 plan" in text
    assert "# two weeks" in text

    data = yaml.safe_load(text)
    weeks = {str(key): value["start_week"] for key, value in data["tasks"].items()}
    assert weeks == {st.id: st.start_week for st in scheduled}
    assert weeks["b"] == 2
    # Nothing else is rewritten
    assert data["tasks"]["a"]["effort"] == 2


def test_written_weeks_reload(tmp_path: Path) -> None:
    """Test that an annotated file parses back with the stored start weeks."""
    path = tmp_path / "project.yaml"
    path.write_text(PROJECT_TEXT)
    scheduled = compute_schedule(parse_project(path).tasks, 2)

    write_start_weeks(path, scheduled)

    reloaded = parse_project(path)
    assert {t.id: t.start_week for t in reloaded.tasks} == {
        st.id: st.start_week for st in scheduled
    }


def test_unknown_and_unplaced_tasks_skipped(tmp_path: Path) -> None:
    path = tmp_path / "project.yaml"
    path.write_text(PROJECT_TEXT)
    stranger = ScheduleTask.from_task(make_task("zzz", 1), assigned_resources=1, effort=1)
    stranger.place(4)
    unplaced = ScheduleTask.from_task(make_task("a", 2), assigned_resources=1, effort=2)

    assert write_start_weeks(path, [stranger, unplaced]) == 0
    assert "start_week" not in path.read_text()


def test_requires_tasks_section(tmp_path: Path) -> None:
    path = tmp_path / "project.yaml"
    path.write_text("config:\n  team_capacity: 2\n")
    with pytest.raises(ParseError, match="No 'tasks' section"):
        write_start_weeks(path, [])
