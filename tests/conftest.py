from datetime import date, datetime

import pytest
from loguru import logger

from dailyr.models import Project

# A business week: Mon 2026-02-23 .. Fri 2026-02-27
MON = date(2026, 2, 23)
TUE = date(2026, 2, 24)
WED = date(2026, 2, 25)
THU = date(2026, 2, 26)
FRI = date(2026, 2, 27)
SAT = date(2026, 2, 28)
SUN = date(2026, 3, 1)
NEXT_MON = date(2026, 3, 2)
NEXT_TUE = date(2026, 3, 3)


def make_project(pid: str, due: date, remaining: float, total: float | None = None, name: str | None = None) -> Project:
    return Project(
        id=pid,
        name=name or f"Project {pid}",
        due_date=due,
        total_hours=total if total is not None else max(remaining, 1.0),
        remaining_hours=remaining,
        created_at=datetime(2026, 2, 1, 9, 0),
    )


@pytest.fixture
def log_warnings():
    """Collect loguru WARNING messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def _drop_log_handlers():
    # The CLI binds a sink to whatever stderr is current; don't let it leak
    # into later tests.
    yield
    logger.remove()
