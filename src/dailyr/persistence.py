"""JSON file persistence for projects, completions and planner config."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from loguru import logger

from dailyr.models import Completion, PlannerConfig, Project

DEFAULT_DB_FILE = "dailyr.json"

# {"YYYY-MM-DD": {project_id: Completion}}
Completions = dict[str, dict[str, Completion]]


class Store:
    """Reads and writes the planner database (JSON file)."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_FILE):
        self.db_path = Path(db_path)

    def load(self) -> tuple[PlannerConfig | None, dict[str, Project], Completions]:
        """Return (config_or_None, {project_id: Project}, completions)."""
        if not self.db_path.exists():
            return None, {}, {}

        raw = json.loads(self.db_path.read_text())

        config = None
        if "config" in raw:
            config = PlannerConfig.from_dict(raw["config"])

        projects = {
            pid: Project.from_dict(pid, pdata)
            for pid, pdata in raw.get("projects", {}).items()
        }
        completions: Completions = {
            day: {pid: Completion.from_dict(c) for pid, c in entries.items()}
            for day, entries in raw.get("completions", {}).items()
        }
        logger.debug(f"Loaded {len(projects)} project(s) from {self.db_path}")
        return config, projects, completions

    def save(
        self,
        config: PlannerConfig | None,
        projects: dict[str, Project],
        completions: Completions | None = None,
    ) -> None:
        """Persist config, projects and completions to disk."""
        raw: dict = {}
        if config is not None:
            raw["config"] = config.to_dict()
        raw["projects"] = {pid: p.to_dict() for pid, p in projects.items()}
        raw["completions"] = {
            day: {pid: c.to_dict() for pid, c in entries.items()}
            for day, entries in (completions or {}).items()
            if entries
        }
        self.db_path.write_text(json.dumps(raw, indent=4))
        logger.debug(f"Saved {len(projects)} project(s) to {self.db_path}")

    def generate_id(self, projects: dict[str, Project]) -> str:
        """Generate the next P-N id."""
        existing = [int(k.split("-")[1]) for k in projects if k.startswith("P-")]
        next_num = max(existing, default=0) + 1
        return f"P-{next_num}"


def completions_on(completions: Completions, day: date) -> dict[str, Completion]:
    """Completions recorded for *day*, keyed by project id."""
    return completions.get(day.isoformat(), {})


def record_completion(completions: Completions, completion: Completion) -> Completion:
    """Store a completion under its (date, project id) key.

    Hours logged again for the same chunk add to the earlier record, which
    keeps the chunk as it was first logged.  Returns the stored record.
    """
    entries = completions.setdefault(completion.task.date.isoformat(), {})
    existing = entries.get(completion.task.project_id)
    if existing is not None:
        completion = Completion(
            task=existing.task,
            hours_worked=existing.hours_worked + completion.hours_worked,
            completed_at=completion.completed_at,
        )
    entries[completion.task.project_id] = completion
    return completion
