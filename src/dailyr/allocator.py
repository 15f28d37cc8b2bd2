"""Daily allocation: turn projects into per-day work chunks.

Projects are served earliest-deadline-first.  Each one walks forward from
today through its due date, claiming hours from a per-day capacity ledger
that is shared by all projects within one run and discarded afterwards.
"""

from __future__ import annotations

import math
import uuid
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from loguru import logger

from dailyr.businessdays import (
    add_days,
    business_days_between,
    is_before,
    is_weekend,
    start_of_day,
)
from dailyr.models import PlannerConfig, Project, Task

_EPS = 1e-9


class CapacityLedger:
    """Remaining schedulable hours per day for a single allocation run.

    Days are seeded with the full daily capacity the first time they are
    touched.
    """

    def __init__(self, hours_per_day: float):
        self.hours_per_day = hours_per_day
        self._remaining: dict[date, float] = {}

    def available(self, day: date) -> float:
        return self._remaining.get(start_of_day(day), self.hours_per_day)

    def booked(self, day: date) -> float:
        return self.hours_per_day - self.available(day)

    def reserve(self, day: date, hours: float) -> float:
        """Take *hours* from *day* and return what is left on it."""
        day = start_of_day(day)
        available = self.available(day)
        if hours > available + _EPS:
            raise ValueError(
                f"Cannot reserve {hours}h on {day.isoformat()}: only {available}h left"
            )
        self._remaining[day] = max(0.0, available - hours)
        return self._remaining[day]

    def days(self) -> list[date]:
        return sorted(self._remaining)


@dataclass
class Shortfall:
    """A project whose chunks do not cover its remaining effort."""

    project: Project
    allocated_hrs: float

    @property
    def unallocated_hrs(self) -> float:
        return self.project.remaining_hours - self.allocated_hrs


def days_left(project: Project, today: date) -> int:
    """Weekdays from *today* through the due date, both inclusive.

    A weekend due date adds nothing: a project due Sunday has the same days
    left as one due the Friday before.  Past-due projects have 0.
    """
    return max(business_days_between(today, add_days(project.due_date, 1)), 0)


def target_hours_per_day(remaining: float, n_days: int, min_chunk: float) -> float:
    """Even daily spread of *remaining* over *n_days*, never below *min_chunk*.

    The final chunk is clamped to the true remainder by the caller, so a
    floor larger than the even spread only makes the project finish early.
    """
    return max(min_chunk, math.ceil(remaining / n_days))


def is_feasible(project: Project, config: PlannerConfig | None = None, today: date | None = None) -> bool:
    """Whether the project fits into its remaining business days when it has
    every day's full capacity to itself."""
    config = config or PlannerConfig()
    today = start_of_day(today or date.today())
    n_days = days_left(project, today)
    if project.remaining_hours <= 0:
        return True
    if n_days <= 0:
        return False
    return project.remaining_hours <= config.hours_per_day * n_days + _EPS


def _allocate_project(
    project: Project,
    ledger: CapacityLedger,
    config: PlannerConfig,
    today: date,
) -> list[Task]:
    n_days = days_left(project, today)
    if n_days <= 0:
        logger.debug(f"Skipping {project.id}: due {project.due_date}, no business days left")
        return []

    min_chunk = config.min_chunk_hrs
    hours_per_day = target_hours_per_day(project.remaining_hours, n_days, min_chunk)
    remaining = project.remaining_hours
    current = today
    chunks: list[Task] = []

    while remaining > _EPS and not is_before(project.due_date, current):
        if is_weekend(current):
            current = add_days(current, 1)
            continue

        available = ledger.available(current)
        if remaining < min_chunk:
            # Final sliver: one chunk of exactly the remainder, or nothing today.
            hours = remaining if available + _EPS >= remaining else 0.0
        else:
            hours = min(hours_per_day, available, remaining)

        if hours > _EPS and (hours >= min_chunk or remaining < min_chunk):
            chunks.append(
                Task(
                    id=str(uuid.uuid4()),
                    project_id=project.id,
                    project_name=project.name,
                    project_due_date=project.due_date,
                    date=current,
                    hours=hours,
                )
            )
            remaining = round(remaining - hours, 6)
            ledger.reserve(current, hours)
            logger.debug(f"{project.id}: {hours}h on {current.isoformat()}, {max(remaining, 0.0)}h left")

        current = add_days(current, 1)

    if remaining > _EPS:
        logger.warning(
            f"Project {project.id} ({project.name}) is short {remaining:.1f}h "
            f"before its due date {project.due_date.isoformat()}"
        )
    return chunks


def allocate(
    projects: Iterable[Project],
    config: PlannerConfig | None = None,
    today: date | None = None,
) -> list[Task]:
    """Allocate every project's remaining hours across business days.

    Returns chunks project-major (earliest due date first), date-ascending
    within a project.  Projects are never mutated.
    """
    config = config or PlannerConfig()
    today = start_of_day(today or date.today())
    ledger = CapacityLedger(config.hours_per_day)

    tasks: list[Task] = []
    for project in sorted(projects, key=lambda p: p.due_date):
        if project.remaining_hours <= 0:
            continue
        tasks.extend(_allocate_project(project, ledger, config, today))

    logger.debug(f"Allocated {len(tasks)} chunk(s) across {len(ledger.days())} day(s)")
    return tasks


# ---------------------------------------------------------------------------
# Views over an allocation
# ---------------------------------------------------------------------------


def tasks_on(tasks: Iterable[Task], day: date) -> list[Task]:
    """Chunks scheduled on *day*."""
    day = start_of_day(day)
    return [t for t in tasks if t.date == day]


def group_by_day(tasks: Iterable[Task]) -> dict[date, list[Task]]:
    """Date-major view of an allocation, days in ascending order."""
    by_day: dict[date, list[Task]] = defaultdict(list)
    for t in tasks:
        by_day[t.date].append(t)
    return {d: by_day[d] for d in sorted(by_day)}


def find_shortfalls(projects: Sequence[Project], tasks: Iterable[Task]) -> list[Shortfall]:
    """Projects with remaining effort that the allocation did not place."""
    allocated: dict[str, float] = defaultdict(float)
    for t in tasks:
        allocated[t.project_id] += t.hours

    shortfalls = []
    for p in sorted(projects, key=lambda p: p.due_date):
        if p.remaining_hours <= 0:
            continue
        if allocated[p.id] + _EPS < p.remaining_hours:
            shortfalls.append(Shortfall(project=p, allocated_hrs=allocated[p.id]))
    return shortfalls
