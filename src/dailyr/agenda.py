"""Today's checklist: allocated chunks merged with logged completions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from dailyr.allocator import allocate, tasks_on
from dailyr.completion import CompletionError, complete_task
from dailyr.models import Completion, PlannerConfig, Project, Task
from dailyr.persistence import Completions, completions_on, record_completion
from dailyr.validation import active_projects


class ChunkAlreadyDone(CompletionError):
    """Raised when a chunk's scheduled hours have all been logged."""


@dataclass
class AgendaItem:
    task: Task
    completion: Completion | None = None

    @property
    def done(self) -> bool:
        return self.completion is not None and self.completion.is_complete

    @property
    def logged_hrs(self) -> float:
        return self.completion.hours_worked if self.completion else 0.0


def build_plan(
    projects: Iterable[Project],
    config: PlannerConfig | None,
    today: date,
) -> list[Task]:
    """Allocate the projects that are still active on *today*."""
    return allocate(active_projects(projects, today), config, today)


def day_agenda(
    tasks: Iterable[Task],
    completions: dict[str, Completion],
    day: date,
) -> list[AgendaItem]:
    """Checklist for *day*.

    Chunks are matched to completions by project id, since chunk ids change
    on every allocation.  A project whose chunk was fully worked shows the
    completed chunk instead of whatever the fresh allocation gave it.
    """
    finished = {pid for pid, c in completions.items() if c.is_complete}

    items = [
        AgendaItem(task=t, completion=completions.get(t.project_id))
        for t in tasks_on(tasks, day)
        if t.project_id not in finished
    ]
    items.extend(
        AgendaItem(task=c.task, completion=c)
        for pid, c in completions.items()
        if pid in finished
    )
    return items


def log_hours(
    projects: dict[str, Project],
    completions: Completions,
    config: PlannerConfig | None,
    project_id: str,
    day: date,
    hours_worked: float | None = None,
    now: datetime | None = None,
) -> tuple[Project, float]:
    """Log hours on *project_id*'s chunk for *day*, defaulting to the whole chunk.

    The chunk is looked up in a fresh plan for *day*.  *projects* and
    *completions* are updated in place; the caller saves them.  Returns the
    updated project and the hours logged.
    """
    if project_id not in projects:
        raise CompletionError(f"Project {project_id} not found.")

    previous = completions_on(completions, day).get(project_id)
    if previous is not None and previous.is_complete:
        raise ChunkAlreadyDone(f"{project_id} is already done for {day.isoformat()}.")

    chunk = next(
        (t for t in tasks_on(build_plan(projects.values(), config, day), day) if t.project_id == project_id),
        None,
    )
    if chunk is None:
        raise CompletionError(f"{project_id} has nothing scheduled on {day.isoformat()}.")

    worked = chunk.hours if hours_worked is None else hours_worked
    updated, completion = complete_task(projects[project_id], chunk, worked, now=now)
    projects[project_id] = updated
    record_completion(completions, completion)
    return updated, worked
