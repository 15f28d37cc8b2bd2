"""Project, task chunk and planner config definitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

DAILY_CAPACITY_HRS = 8.0
MIN_CHUNK_HRS = 2.0


@dataclass
class PlannerConfig:
    """Planner-level settings stored alongside projects."""

    hours_per_day: float = DAILY_CAPACITY_HRS
    min_chunk_hrs: float = MIN_CHUNK_HRS

    def to_dict(self) -> dict:
        return {
            "hours_per_day": self.hours_per_day,
            "min_chunk_hrs": self.min_chunk_hrs,
        }

    @classmethod
    def from_dict(cls, d: dict) -> PlannerConfig:
        return cls(
            hours_per_day=d.get("hours_per_day", DAILY_CAPACITY_HRS),
            min_chunk_hrs=d.get("min_chunk_hrs", MIN_CHUNK_HRS),
        )


@dataclass
class Project:
    """A multi-day unit of work with an effort budget and a due date."""

    id: str
    name: str
    due_date: date
    total_hours: float
    remaining_hours: float
    created_at: datetime

    @property
    def done_hours(self) -> float:
        return self.total_hours - self.remaining_hours

    @property
    def is_finished(self) -> bool:
        return self.remaining_hours <= 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "due_date": self.due_date.isoformat(),
            "total_hours": self.total_hours,
            "remaining_hours": self.remaining_hours,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, project_id: str, d: dict) -> Project:
        total = d["total_hours"]
        return cls(
            id=project_id,
            name=d["name"],
            due_date=date.fromisoformat(d["due_date"]),
            total_hours=total,
            remaining_hours=d.get("remaining_hours", total),
            created_at=datetime.fromisoformat(d["created_at"]),
        )


@dataclass(frozen=True)
class Task:
    """One day's allocated effort toward one project.

    The project fields are copied when the chunk is allocated, so a task
    renders without looking the project up again.  Ids are regenerated on
    every allocation run; use ``key`` to compare chunks across runs.
    """

    id: str
    project_id: str
    project_name: str
    project_due_date: date
    date: date
    hours: float

    @property
    def key(self) -> tuple[str, date]:
        return (self.project_id, self.date)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "project_due_date": self.project_due_date.isoformat(),
            "date": self.date.isoformat(),
            "hours": self.hours,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        return cls(
            id=d["id"],
            project_id=d["project_id"],
            project_name=d["project_name"],
            project_due_date=date.fromisoformat(d["project_due_date"]),
            date=date.fromisoformat(d["date"]),
            hours=d["hours"],
        )


@dataclass(frozen=True)
class Completion:
    """Hours logged against a task chunk."""

    task: Task
    hours_worked: float
    completed_at: datetime

    @property
    def is_complete(self) -> bool:
        return self.hours_worked >= self.task.hours

    def to_dict(self) -> dict:
        return {
            "task": self.task.to_dict(),
            "hours_worked": self.hours_worked,
            "completed_at": self.completed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> Completion:
        return cls(
            task=Task.from_dict(d["task"]),
            hours_worked=d["hours_worked"],
            completed_at=datetime.fromisoformat(d["completed_at"]),
        )
