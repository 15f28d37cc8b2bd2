"""Logging worked hours against a scheduled chunk."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from loguru import logger

from dailyr.models import Completion, Project, Task


class CompletionError(ValueError):
    """Raised when the worked hours cannot be applied to a chunk."""


def validate_hours_worked(task: Task, hours_worked: float) -> None:
    if hours_worked <= 0:
        raise CompletionError("Hours must be greater than 0")
    if hours_worked > task.hours:
        raise CompletionError(f"Maximum hours for this task is {task.hours:g}")


def complete_task(
    project: Project,
    task: Task,
    hours_worked: float,
    now: datetime | None = None,
) -> tuple[Project, Completion]:
    """Apply *hours_worked* on *task* to its project.

    Returns the updated project (remaining hours decremented, never below 0)
    and the completion record.  The input project is left untouched.
    """
    if task.project_id != project.id:
        raise CompletionError(
            f"Task belongs to {task.project_id}, not {project.id}"
        )
    validate_hours_worked(task, hours_worked)

    remaining = max(0.0, project.remaining_hours - hours_worked)
    updated = replace(project, remaining_hours=remaining)
    completion = Completion(task=task, hours_worked=hours_worked, completed_at=now or datetime.now())
    logger.info(
        f"Logged {hours_worked:g}h on {project.id} for {task.date.isoformat()}, "
        f"{remaining:g}h remaining"
    )
    return updated, completion
