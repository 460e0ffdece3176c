"""Command-line interface for Crewplan."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .exceptions import CrewplanError
from .loader import load_project, validate_project
from .logger import setup_logger
from .models import Project
from .scheduler import (
    SchedulingConfig,
    SchedulingResult,
    SchedulingService,
    UsageStatus,
    would_create_cycle,
)
from .unified_config import discover_config
from .writer import write_start_weeks

app = typer.Typer(
    name="crewplan",
    help="Capacity-aware weekly scheduling for engineering teams",
    add_completion=False,
)

DEFAULT_PROJECT_FILE = Path("project.yaml")

_USAGE_MARKERS = {
    UsageStatus.AVAILABLE: "available",
    UsageStatus.FULL: "full",
    UsageStatus.OVER: "OVER",
}


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to unified config file (default: crewplan_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for crewplan commands."""
    setup_logger(verbose)
    ctx.obj = {"config_path": config}


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


def _load(
    ctx: typer.Context,
    file: Path,
    *,
    team_capacity: int | None = None,
    max_engineers: int | None = None,
) -> tuple[Project, SchedulingConfig]:
    """Load a project plus its scheduler config, applying CLI overrides last."""
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    try:
        unified = discover_config(file, config_path)
        project = load_project(file, unified)
    except (CrewplanError, FileNotFoundError) as e:
        raise _fail(e) from e

    updates: dict[str, int] = {}
    if team_capacity is not None:
        updates["team_capacity"] = team_capacity
    if max_engineers is not None:
        updates["max_engineers_per_task"] = max_engineers
    if updates:
        project = Project(tasks=project.tasks, config=project.config.model_copy(update=updates))

    scheduler_config = unified.scheduler if unified else SchedulingConfig()
    return project, scheduler_config


def _run_schedule(project: Project, config: SchedulingConfig) -> SchedulingResult:
    try:
        return SchedulingService(project, config).schedule()
    except CrewplanError as e:
        raise _fail(e) from e


def _display_schedule_results(result: SchedulingResult) -> None:
    """Display schedule results to stdout."""
    typer.echo("Schedule Results")
    typer.echo("=" * 80)
    typer.echo(
        f"Team capacity: {result.metadata['team_capacity']}  "
        f"Max engineers per task: {result.metadata['max_engineers_per_task']}  "
        f"Total weeks: {result.total_weeks}"
    )
    typer.echo("")

    for task in sorted(result.tasks, key=lambda t: (t.start_week or 0, t.priority, t.id)):
        typer.echo(f"{task.name} ({task.id})")
        typer.echo(f"  Weeks:      {task.start_week}-{task.end_week - 1}")
        typer.echo(f"  Priority:   {task.priority}")
        typer.echo(f"  Engineers:  {task.assigned_resources}")
        typer.echo(f"  Effort:     {task.original_effort} person-weeks -> {task.effort} week(s)")
        if task.dependencies:
            typer.echo(f"  Depends on: {', '.join(task.dependencies)}")
        if task.optimized:
            typer.echo("  (accelerated with freed capacity)")
        if task.id in result.metadata.get("displaced", []):
            typer.echo("  (moved later for higher-priority work)")
        typer.echo("")


def _display_warnings(result: SchedulingResult) -> None:
    if result.warnings:
        typer.echo("\nWarnings:", err=True)
        for warning in result.warnings:
            typer.echo(f"  - {warning}", err=True)


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = (
        DEFAULT_PROJECT_FILE
    ),
    *,
    team_capacity: Annotated[
        int | None,
        typer.Option("--team-capacity", help="Override team capacity", min=1, max=100),
    ] = None,
    max_engineers: Annotated[
        int | None,
        typer.Option("--max-engineers", help="Override max engineers per task", min=1, max=10),
    ] = None,
    no_optimize: Annotated[
        bool,
        typer.Option("--no-optimize", help="Skip the timeline optimization pass"),
    ] = False,
    annotate_yaml: Annotated[
        bool,
        typer.Option("--annotate-yaml", help="Write computed start_week back to the YAML file"),
    ] = False,
) -> None:
    """Run the scheduler and display or persist results."""
    project, config = _load(ctx, file, team_capacity=team_capacity, max_engineers=max_engineers)
    if no_optimize:
        config = config.model_copy(update={"timeline_optimization": False})

    result = _run_schedule(project, config)

    if annotate_yaml:
        updated = write_start_weeks(file, result.tasks)
        typer.echo(f"Start weeks for {updated} task(s) written to {file}")
    else:
        _display_schedule_results(result)

    _display_warnings(result)


@app.command()
def usage(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = (
        DEFAULT_PROJECT_FILE
    ),
) -> None:
    """Show engineers used per week against team capacity."""
    project, config = _load(ctx, file)
    result = _run_schedule(project, config)

    typer.echo("Weekly Usage")
    typer.echo("=" * 40)
    for week in result.weekly_usage:
        bar = "#" * week.used + "." * max(0, week.free)
        typer.echo(
            f"Week {week.week:>3}  {week.used:>3}/{week.capacity:<3} {bar}  "
            f"{_USAGE_MARKERS[week.status]}"
        )

    _display_warnings(result)


@app.command()
def validate(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = (
        DEFAULT_PROJECT_FILE
    ),
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat dependencies on unknown tasks as errors"),
    ] = False,
) -> None:
    """Check a project for dependency cycles and unknown references."""
    project, _ = _load(ctx, file)
    try:
        warnings = validate_project(project, strict=strict)
    except CrewplanError as e:
        raise _fail(e) from e

    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(f"{file}: {len(project.tasks)} task(s), no dependency cycles")


@app.command(name="check-dependency")
def check_dependency(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    task_id: Annotated[str, typer.Argument(help="Task that would gain the dependency")],
    dependency_id: Annotated[str, typer.Argument(help="Task it would depend on")],
) -> None:
    """Check whether adding a dependency would create a cycle."""
    project, _ = _load(ctx, file)
    all_ids = project.get_all_ids()
    for required in (task_id, dependency_id):
        if required not in all_ids:
            raise _fail(CrewplanError(f"Unknown task: {required}"))

    if would_create_cycle(task_id, dependency_id, project.tasks):
        raise _fail(
            CrewplanError(
                f"Making {task_id} depend on {dependency_id} would create a circular dependency"
            )
        )
    typer.echo(f"OK: {task_id} can depend on {dependency_id}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
