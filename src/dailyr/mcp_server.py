"""MCP server for dailyr — exposes the daily planner to AI assistants."""

from __future__ import annotations

import json
import sys
from datetime import date, datetime

from loguru import logger
from mcp.server.fastmcp import FastMCP

from dailyr.agenda import ChunkAlreadyDone, build_plan, day_agenda, log_hours
from dailyr.allocator import days_left, find_shortfalls, group_by_day
from dailyr.businessdays import add_days, is_weekend
from dailyr.completion import CompletionError
from dailyr.models import Project, Task
from dailyr.persistence import Store, completions_on
from dailyr.validation import ProjectValidationError, active_projects, validate_project

mcp = FastMCP(
    "dailyr",
    instructions="""\
dailyr is a daily hour planner. Projects have a total effort in hours and a due \
date. Every time it is asked, the planner spreads each project's remaining hours \
across the business days up to its due date and says how many hours to spend on \
which project each day.

Key concepts:
- **Business days**: Monday to Friday. Nothing is ever scheduled on a weekend.
- **Daily capacity**: each business day holds 8 hours by default, shared by all projects.
- **Earliest deadline first**: projects due sooner claim a day's hours before later ones.
- **Minimum chunk**: chunks are at least 2 hours, except a project's final remainder.
- **Chunks are recomputed**: chunk ids change on every call. Refer to a chunk by its \
project id and date.

Typical workflow:
1. Use add_project to register work with hours and a due date
2. Use get_today to see today's checklist
3. Use complete_task when the user reports hours worked on a project today
4. Use get_plan for the days ahead and for projects at risk of missing their due date
""",
)


def _get_store() -> Store:
    return Store()


def _parse_day(value: str | None) -> date:
    if value is None:
        return date.today()
    return date.fromisoformat(value)


def _project_to_dict(p: Project, today: date) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "due_date": p.due_date.isoformat(),
        "total_hours": p.total_hours,
        "remaining_hours": p.remaining_hours,
        "days_left": days_left(p, today),
    }


def _task_to_dict(t: Task) -> dict:
    return {
        "project_id": t.project_id,
        "project_name": t.project_name,
        "project_due_date": t.project_due_date.isoformat(),
        "date": t.date.isoformat(),
        "hours": t.hours,
    }


# ---------------------------------------------------------------------------
# Write tools
# ---------------------------------------------------------------------------


@mcp.tool()
def add_project(name: str, total_hours: float, due_date: str) -> str:
    """Register a new project.

    Args:
        name: Project name
        total_hours: Total effort in hours
        due_date: Due date in YYYY-MM-DD format
    """
    store = _get_store()
    config, projects, completions = store.load()
    try:
        due = date.fromisoformat(due_date)
    except ValueError:
        return "Error: due_date must be in YYYY-MM-DD format."

    pid = store.generate_id(projects)
    project = Project(
        id=pid,
        name=name,
        due_date=due,
        total_hours=total_hours,
        remaining_hours=total_hours,
        created_at=datetime.now(),
    )
    try:
        validate_project(project)
    except ProjectValidationError as e:
        return f"Error: {e}"

    projects[pid] = project
    store.save(config, projects, completions)
    return f"Added '{name}' as {pid}"


@mcp.tool()
def delete_project(project_id: str) -> str:
    """Delete a project and its logged completions.

    Args:
        project_id: Project ID (e.g. "P-3")
    """
    store = _get_store()
    config, projects, completions = store.load()
    if project_id not in projects:
        return f"Error: project {project_id} not found."
    del projects[project_id]
    for entries in completions.values():
        entries.pop(project_id, None)
    store.save(config, projects, completions)
    return f"Deleted {project_id}."


@mcp.tool()
def complete_task(project_id: str, hours_worked: float | None = None, date_iso: str | None = None) -> str:
    """Log hours worked on a project's chunk for a day.

    Args:
        project_id: Project ID (e.g. "P-3")
        hours_worked: Hours actually worked; defaults to the whole scheduled chunk
        date_iso: Day of the chunk in YYYY-MM-DD format; defaults to today
    """
    store = _get_store()
    config, projects, completions = store.load()
    try:
        day = _parse_day(date_iso)
    except ValueError:
        return "Error: date_iso must be in YYYY-MM-DD format."

    try:
        updated, worked = log_hours(projects, completions, config, project_id, day, hours_worked)
    except ChunkAlreadyDone as e:
        return str(e)
    except CompletionError as e:
        return f"Error: {e}"

    store.save(config, projects, completions)
    return f"Logged {worked:g}h on {project_id}. {updated.remaining_hours:g}h remaining."


# ---------------------------------------------------------------------------
# Read tools
# ---------------------------------------------------------------------------


@mcp.tool()
def list_projects(include_expired: bool = False) -> str:
    """List projects with remaining hours and business days left.

    Args:
        include_expired: Also list projects whose due date has passed
    """
    _, projects, _ = _get_store().load()
    today = date.today()
    shown = list(projects.values()) if include_expired else active_projects(projects.values(), today)
    result = [_project_to_dict(p, today) for p in sorted(shown, key=lambda p: p.due_date)]
    return json.dumps(result, indent=2)


@mcp.tool()
def get_today(date_iso: str | None = None) -> str:
    """Checklist of chunks scheduled for a day, including ones already completed.

    Args:
        date_iso: Day in YYYY-MM-DD format; defaults to today
    """
    store = _get_store()
    config, projects, completions = store.load()
    try:
        day = _parse_day(date_iso)
    except ValueError:
        return "Error: date_iso must be in YYYY-MM-DD format."

    if is_weekend(day):
        return json.dumps({"date": day.isoformat(), "weekend": True, "tasks": []}, indent=2)

    tasks = build_plan(projects.values(), config, day)
    items = []
    for item in day_agenda(tasks, completions_on(completions, day), day):
        d = _task_to_dict(item.task)
        d["done"] = item.done
        d["logged_hrs"] = item.logged_hrs
        items.append(d)
    return json.dumps({"date": day.isoformat(), "weekend": False, "tasks": items}, indent=2)


@mcp.tool()
def get_plan(days: int = 14) -> str:
    """Day-by-day allocation for the coming days, plus projects at risk.

    Args:
        days: Number of calendar days to include
    """
    config, projects, _ = _get_store().load()
    today = date.today()
    active = active_projects(projects.values(), today)
    tasks = build_plan(active, config, today)
    end = add_days(today, days)

    schedule = {
        day.isoformat(): [_task_to_dict(t) for t in chunks]
        for day, chunks in group_by_day(tasks).items()
        if day < end
    }
    at_risk = [
        {
            "project_id": s.project.id,
            "name": s.project.name,
            "due_date": s.project.due_date.isoformat(),
            "unallocated_hrs": round(s.unallocated_hrs, 2),
        }
        for s in find_shortfalls(active, tasks)
    ]
    return json.dumps({"schedule": schedule, "at_risk": at_risk}, indent=2)


def main():
    """Entry point for the MCP server."""
    logger.remove()
    logger.add(sys.stderr, level="INFO")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
