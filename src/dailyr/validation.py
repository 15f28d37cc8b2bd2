"""Checks applied to projects before they reach the allocator."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from dailyr.businessdays import is_before, start_of_day
from dailyr.models import Project


class ProjectValidationError(ValueError):
    """Raised when a project record cannot be scheduled."""


def validate_project(project: Project, today: date | None = None) -> None:
    """Reject project records the allocator would silently skip or mis-plan.

    Raises ProjectValidationError with a readable message.
    """
    today = start_of_day(today or date.today())
    if not project.name.strip():
        raise ProjectValidationError("Project name must not be empty")
    if project.total_hours <= 0:
        raise ProjectValidationError(
            f"Total hours must be greater than 0 (got {project.total_hours})"
        )
    if project.remaining_hours < 0:
        raise ProjectValidationError(
            f"Remaining hours must not be negative (got {project.remaining_hours})"
        )
    if project.remaining_hours > project.total_hours:
        raise ProjectValidationError(
            f"Remaining hours ({project.remaining_hours}) exceed total hours ({project.total_hours})"
        )
    if is_before(project.due_date, today):
        raise ProjectValidationError(
            f"Due date {project.due_date.isoformat()} is in the past"
        )


def active_projects(projects: Iterable[Project], today: date | None = None) -> list[Project]:
    """Drop projects whose due date has passed. Projects due today stay."""
    today = start_of_day(today or date.today())
    return [p for p in projects if not is_before(p.due_date, today)]
