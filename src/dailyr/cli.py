"""Typer CLI for dailyr."""

from __future__ import annotations

import sys
from datetime import date, datetime
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from dailyr.agenda import ChunkAlreadyDone, build_plan, day_agenda, log_hours
from dailyr.allocator import days_left, find_shortfalls, group_by_day, is_feasible
from dailyr.businessdays import add_days, is_weekend
from dailyr.completion import CompletionError
from dailyr.models import PlannerConfig, Project
from dailyr.persistence import Store, completions_on
from dailyr.validation import ProjectValidationError, active_projects, validate_project

app = typer.Typer(
    name="dailyr",
    help="Daily hour planner: spreads project effort across business days.",
    no_args_is_help=True,
)
console = Console()


def _get_store() -> Store:
    return Store()


def _setup_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "WARNING",
        colorize=True,
    )


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    _setup_logging(verbose)


def _complete_project_id(incomplete: str) -> list[str]:
    """Shell completion for project IDs. Matches against both ID and name."""
    try:
        _, projects, _ = Store().load()
    except (OSError, ValueError):
        return []

    q = incomplete.lower()
    # Name first so shell prefix-matching works: "Thesis draft (P-3)"
    return [
        f"{p.name} ({pid})"
        for pid, p in projects.items()
        if q in pid.lower() or q in p.name.lower()
    ]


def _parse_project_id(project_id_arg: str) -> str:
    """Extracts the ID if the user used the autocompleted 'Name (ID)' format."""
    if "(" in project_id_arg and project_id_arg.endswith(")"):
        return project_id_arg.split("(")[-1].strip(")")
    return project_id_arg.strip()


def _parse_date(value: Optional[str], label: str = "date") -> date:
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid {label} '{value}'. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)


def _require_project(projects: dict[str, Project], project_id: str) -> Project:
    if project_id not in projects:
        console.print(f"[red]Project {project_id} not found.[/red]")
        raise typer.Exit(1)
    return projects[project_id]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def init(
    hours_per_day: Annotated[float, typer.Option(help="Schedulable hours per business day")] = 8.0,
    min_chunk: Annotated[float, typer.Option(help="Smallest chunk worth scheduling, in hours")] = 2.0,
) -> None:
    """Initialize (or reinitialize) planner configuration."""
    if hours_per_day <= 0 or min_chunk <= 0 or min_chunk > hours_per_day:
        console.print("[red]Need 0 < min-chunk <= hours-per-day.[/red]")
        raise typer.Exit(1)
    store = _get_store()
    _, projects, completions = store.load()
    config = PlannerConfig(hours_per_day=hours_per_day, min_chunk_hrs=min_chunk)
    store.save(config, projects, completions)
    console.print(
        f"[green]Planner initialized: {hours_per_day:g}h/day, {min_chunk:g}h minimum chunk.[/green]"
    )


@app.command()
def add(
    name: str,
    hours: Annotated[float, typer.Option("--hours", "-h", help="Total effort in hours")],
    due: Annotated[str, typer.Option("--due", help="Due date (YYYY-MM-DD)")],
) -> None:
    """Add a new project."""
    store = _get_store()
    config, projects, completions = store.load()
    pid = store.generate_id(projects)

    project = Project(
        id=pid,
        name=name,
        due_date=_parse_date(due, "due date"),
        total_hours=hours,
        remaining_hours=hours,
        created_at=datetime.now(),
    )
    try:
        validate_project(project)
    except ProjectValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    projects[pid] = project
    store.save(config, projects, completions)
    console.print(f"[green]Added '{name}' as {pid}[/green]")

    if not is_feasible(project, config):
        console.print(
            f"  [yellow]{hours:g}h will not fit in the {days_left(project, date.today())} "
            f"business day(s) before {project.due_date.isoformat()}.[/yellow]"
        )


@app.command("list")
def list_projects(
    all_projects: Annotated[bool, typer.Option("--all", "-a", help="Include projects past their due date")] = False,
) -> None:
    """List projects with progress."""
    store = _get_store()
    config, projects, _ = store.load()
    today = date.today()

    shown = list(projects.values()) if all_projects else active_projects(projects.values(), today)
    if not shown:
        console.print("No projects found.")
        return

    tasks = build_plan(projects.values(), config, today)
    at_risk = {s.project.id for s in find_shortfalls(active_projects(projects.values(), today), tasks)}

    table = Table(title="Projects", show_lines=False)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Due")
    table.add_column("Days left", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Flags")

    for p in sorted(shown, key=lambda p: p.due_date):
        flags = []
        if p.is_finished:
            flags.append("[green]DONE[/green]")
        elif p.id in at_risk:
            flags.append("[bold red]AT RISK[/bold red]")
        if p.due_date < today:
            flags.append("[dim]EXPIRED[/dim]")
        table.add_row(
            p.id,
            p.name,
            p.due_date.strftime("%a %b %d"),
            str(days_left(p, today)),
            f"{p.done_hours:g}/{p.total_hours:g}h",
            f"{p.remaining_hours:g}h",
            " ".join(flags),
        )
    console.print(table)


@app.command()
def show(project_id: Annotated[str, typer.Argument(autocompletion=_complete_project_id)]) -> None:
    """Show one project and its upcoming chunks."""
    project_id = _parse_project_id(project_id)
    store = _get_store()
    config, projects, _ = store.load()
    p = _require_project(projects, project_id)
    today = date.today()

    console.print(f"\n[bold]{p.id}[/bold]  {p.name}")
    console.print(f"  Due:        {p.due_date.strftime('%a %b %d, %Y')}")
    console.print(f"  Total:      {p.total_hours:g}h")
    console.print(f"  Remaining:  {p.remaining_hours:g}h")
    console.print(f"  Days left:  {days_left(p, today)}")
    console.print(f"  Created:    {p.created_at.strftime('%Y-%m-%d %H:%M')}")

    tasks = [t for t in build_plan(projects.values(), config, today) if t.project_id == p.id]
    if tasks:
        console.print("\n  [dim]── Upcoming ──[/dim]")
        for t in tasks:
            console.print(f"  {t.date.strftime('%a %b %d')}  {t.hours:g}h")
    allocated = sum(t.hours for t in tasks)
    if not p.is_finished and allocated < p.remaining_hours:
        console.print(
            f"\n  [bold red]{p.remaining_hours - allocated:g}h cannot be placed before the due date[/bold red]"
        )
    console.print()


@app.command()
def delete(project_id: Annotated[str, typer.Argument(autocompletion=_complete_project_id)]) -> None:
    """Delete a project and its logged completions."""
    project_id = _parse_project_id(project_id)
    store = _get_store()
    config, projects, completions = store.load()
    _require_project(projects, project_id)

    del projects[project_id]
    for entries in completions.values():
        entries.pop(project_id, None)

    store.save(config, projects, completions)
    console.print(f"[green]Deleted {project_id}.[/green]")


@app.command()
def today(
    on: Annotated[Optional[str], typer.Option("--date", help="Show another day (YYYY-MM-DD)")] = None,
) -> None:
    """Checklist of the chunks scheduled for today."""
    day = _parse_date(on)
    store = _get_store()
    config, projects, completions = store.load()

    console.print(f"\n[bold underline]{day.strftime('%A, %B %d')}[/bold underline]\n")
    if is_weekend(day):
        console.print("  Weekend! No tasks scheduled.")
        console.print("  [dim]Enjoy your time off![/dim]\n")
        return

    tasks = build_plan(projects.values(), config, day)
    items = day_agenda(tasks, completions_on(completions, day), day)
    if not items:
        console.print("  [dim]No tasks scheduled for today.[/dim]\n")
        return

    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("", width=3)
    table.add_column("ID", style="bold")
    table.add_column("Project")
    table.add_column("Hours", justify="right")
    table.add_column("", justify="right")

    for item in items:
        t = item.task
        if item.done:
            table.add_row("[green]✓[/green]", t.project_id, f"[strike dim]{t.project_name}[/strike dim]",
                          f"[strike dim]{t.hours:g}h[/strike dim]", "")
        else:
            note = f"[dim]{item.logged_hrs:g}h logged[/dim]" if item.completion else ""
            table.add_row("☐", t.project_id, t.project_name, f"{t.hours:g}h", note)
    console.print(table)

    pending = [i for i in items if not i.done]
    total = sum(i.task.hours for i in pending)
    if pending:
        console.print(f"\n  {total:g}h to go. Run [bold]dailyr done {pending[0].task.project_id}[/bold] when finished.")
    console.print()


@app.command()
def done(
    project_id: Annotated[str, typer.Argument(autocompletion=_complete_project_id)],
    hours: Annotated[Optional[float], typer.Option("--hours", "-h", help="Hours worked (default: the full chunk)")] = None,
    on: Annotated[Optional[str], typer.Option("--date", help="Day of the chunk (YYYY-MM-DD)")] = None,
) -> None:
    """Log hours worked on a project's chunk for today."""
    project_id = _parse_project_id(project_id)
    day = _parse_date(on)
    store = _get_store()
    config, projects, completions = store.load()
    project = _require_project(projects, project_id)

    try:
        updated, hours_worked = log_hours(projects, completions, config, project_id, day, hours)
    except ChunkAlreadyDone as e:
        console.print(str(e))
        return
    except CompletionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    store.save(config, projects, completions)

    console.print(f"[green]Logged {hours_worked:g}h on {project_id} ({project.name}).[/green]")
    if updated.is_finished:
        console.print("  [bold green]Project complete![/bold green]")
    else:
        console.print(f"  {updated.remaining_hours:g}h remaining, due {updated.due_date.strftime('%a %b %d')}")


@app.command()
def plan(
    days: Annotated[int, typer.Option("--days", "-n", help="How many calendar days to show")] = 14,
    on: Annotated[Optional[str], typer.Option("--date", help="Plan from another day (YYYY-MM-DD)")] = None,
) -> None:
    """Day-by-day schedule for every active project."""
    start = _parse_date(on)
    store = _get_store()
    config, projects, _ = store.load()
    config = config or PlannerConfig()

    active = active_projects(projects.values(), start)
    tasks = build_plan(active, config, start)
    if not tasks:
        console.print("Nothing to schedule.")
    else:
        end = add_days(start, days)
        table = Table(title="Plan", show_lines=True)
        table.add_column("Day", style="bold")
        table.add_column("Project")
        table.add_column("Hours", justify="right")
        table.add_column("Load", justify="right")

        for day, chunks in group_by_day(tasks).items():
            if day >= end:
                break
            total = sum(t.hours for t in chunks)
            table.add_row(
                day.strftime("%a %b %d"),
                "\n".join(f"{t.project_name} [dim]({t.project_id})[/dim]" for t in chunks),
                "\n".join(f"{t.hours:g}h" for t in chunks),
                f"{total:g}/{config.hours_per_day:g}h",
            )
        console.print(table)

    for s in find_shortfalls(active, tasks):
        console.print(
            f"  [bold red]⚠ {s.project.id} {s.project.name}: {s.unallocated_hrs:g}h "
            f"cannot be placed before {s.project.due_date.strftime('%a %b %d')}[/bold red]"
        )


if __name__ == "__main__":
    app()
