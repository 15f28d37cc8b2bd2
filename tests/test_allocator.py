from collections import defaultdict
from datetime import date

import pytest
from conftest import FRI, MON, NEXT_MON, NEXT_TUE, SAT, SUN, THU, TUE, WED, make_project

from dailyr.allocator import (
    CapacityLedger,
    allocate,
    days_left,
    find_shortfalls,
    group_by_day,
    is_feasible,
    target_hours_per_day,
    tasks_on,
)
from dailyr.models import PlannerConfig


def _chunks(tasks, pid=None):
    return [(t.date, t.hours) for t in tasks if pid is None or t.project_id == pid]


def test_spreads_hours_up_to_due_date():
    tasks = allocate([make_project("P-1", WED, 10)], today=MON)
    assert _chunks(tasks) == [(MON, 4), (TUE, 4), (WED, 2)]


def test_earliest_deadline_claims_capacity_first():
    a = make_project("P-A", MON, 6)
    b = make_project("P-B", FRI, 6)
    # Input order must not matter
    tasks = allocate([b, a], today=MON)

    assert _chunks(tasks, "P-A") == [(MON, 6)]
    assert _chunks(tasks, "P-B") == [(MON, 2), (TUE, 2), (WED, 2)]
    assert [t.project_id for t in tasks] == ["P-A", "P-B", "P-B", "P-B"]
    assert sum(t.hours for t in tasks_on(tasks, MON)) == 8


def test_small_project_gets_one_sub_minimum_chunk():
    tasks = allocate([make_project("P-1", FRI, 1)], today=MON)
    assert _chunks(tasks) == [(MON, 1)]


@pytest.mark.parametrize(
    "due, remaining, expected",
    [
        # remaining is an exact multiple of the business days left
        (FRI, 10, [(MON, 2), (TUE, 2), (WED, 2), (THU, 2), (FRI, 2)]),
        (WED, 6, [(MON, 2), (TUE, 2), (WED, 2)]),
        (TUE, 16, [(MON, 8), (TUE, 8)]),
        (WED, 12, [(MON, 4), (TUE, 4), (WED, 4)]),
        # the 2h floor dominates the even spread, so the project finishes early
        (THU, 4, [(MON, 2), (TUE, 2)]),
        (FRI, 5, [(MON, 2), (TUE, 2), (WED, 1)]),
        (WED, 3, [(MON, 2), (TUE, 1)]),
        (WED, 2, [(MON, 2)]),
    ],
)
def test_floor_and_even_spread(due, remaining, expected):
    tasks = allocate([make_project("P-1", due, remaining)], today=MON)
    assert _chunks(tasks) == expected
    assert sum(t.hours for t in tasks) == remaining


def test_fractional_remainder_is_exact():
    tasks = allocate([make_project("P-1", FRI, 4.5)], today=MON)
    assert _chunks(tasks) == [(MON, 2), (TUE, 2), (WED, 0.5)]


def test_capacity_limits_single_project(log_warnings):
    project = make_project("P-1", TUE, 20)
    tasks = allocate([project], today=MON)
    assert _chunks(tasks) == [(MON, 8), (TUE, 8)]
    assert not is_feasible(project, today=MON)
    assert any("P-1" in m and "short 4.0h" in m for m in log_warnings)


def test_skips_weekends():
    tasks = allocate([make_project("P-1", NEXT_TUE, 12)], today=FRI)
    assert _chunks(tasks) == [(FRI, 4), (NEXT_MON, 4), (NEXT_TUE, 4)]


def test_weekend_due_date_counts_only_weekdays():
    project = make_project("P-1", SUN, 6)
    assert _chunks(allocate([project], today=FRI)) == [(FRI, 6)]
    assert is_feasible(project, today=FRI)


def test_saturday_due_date_fills_friday(log_warnings):
    project = make_project("P-1", SAT, 10)
    tasks = allocate([project], today=FRI)
    assert _chunks(tasks) == [(FRI, 8)]
    assert not is_feasible(project, today=FRI)
    assert any("P-1" in m and "short 2.0h" in m for m in log_warnings)


def test_run_starting_on_weekend():
    tasks = allocate([make_project("P-1", NEXT_MON, 5)], today=SAT)
    assert _chunks(tasks) == [(NEXT_MON, 5)]


def test_due_today_is_scheduled_today():
    tasks = allocate([make_project("P-1", MON, 3)], today=MON)
    assert _chunks(tasks) == [(MON, 3)]


def test_past_due_and_finished_projects_get_nothing():
    projects = [
        make_project("P-late", date(2026, 2, 20), 5),
        make_project("P-sunday", date(2026, 2, 22), 5),
        make_project("P-done", FRI, 0, total=10),
        make_project("P-negative", FRI, -2, total=10),
    ]
    assert allocate(projects, today=MON) == []


def test_fully_booked_day_is_skipped():
    first = make_project("P-1", MON, 7)
    second = make_project("P-2", WED, 4)
    tasks = allocate([first, second], today=MON)
    # One hour left on Monday is below the minimum chunk
    assert _chunks(tasks, "P-2") == [(TUE, 2), (WED, 2)]


def test_sub_minimum_remainder_waits_for_room():
    blocker = make_project("P-1", MON, 7)
    sliver = make_project("P-2", TUE, 1.5)
    tasks = allocate([blocker, sliver], today=MON)
    assert _chunks(tasks, "P-2") == [(TUE, 1.5)]


def test_later_project_can_be_starved(log_warnings):
    a = make_project("P-1", TUE, 16)
    b = make_project("P-2", TUE, 4)
    tasks = allocate([a, b], today=MON)
    assert _chunks(tasks, "P-2") == []

    shortfalls = find_shortfalls([a, b], tasks)
    assert [s.project.id for s in shortfalls] == ["P-2"]
    assert shortfalls[0].unallocated_hrs == 4
    assert any("P-2" in m for m in log_warnings)


def test_does_not_mutate_projects():
    project = make_project("P-1", WED, 10)
    allocate([project], today=MON)
    assert project.remaining_hours == 10


def test_same_input_gives_same_schedule():
    projects = [make_project("P-1", WED, 10), make_project("P-2", FRI, 13), make_project("P-3", TUE, 3)]
    first = allocate(projects, today=MON)
    second = allocate(projects, today=MON)

    assert [(t.project_id, t.date, t.hours) for t in first] == [(t.project_id, t.date, t.hours) for t in second]
    assert {t.key for t in first} == {t.key for t in second}
    # Ids are fresh per run
    assert not {t.id for t in first} & {t.id for t in second}


def test_snapshot_fields():
    project = make_project("P-1", WED, 4, name="Thesis")
    task = allocate([project], today=MON)[0]
    project.name = "Renamed"
    assert task.project_name == "Thesis"
    assert task.project_due_date == WED


def test_custom_config():
    config = PlannerConfig(hours_per_day=6.0, min_chunk_hrs=1.0)
    tasks = allocate([make_project("P-1", TUE, 14)], config=config, today=MON)
    assert _chunks(tasks) == [(MON, 6), (TUE, 6)]


MIXED = [
    make_project("P-1", WED, 10),
    make_project("P-2", MON, 6),
    make_project("P-3", FRI, 30),
    make_project("P-4", NEXT_TUE, 3.5),
    make_project("P-5", THU, 0.5),
    make_project("P-6", date(2026, 2, 20), 5),
    make_project("P-7", FRI, 0, total=4),
    make_project("P-8", NEXT_MON, 25),
]


@pytest.mark.parametrize("today", [MON, TUE, THU, SAT, SUN])
def test_schedule_invariants(today):
    tasks = allocate(MIXED, today=today)
    remaining = {p.id: p.remaining_hours for p in MIXED}

    per_day = defaultdict(float)
    per_project = defaultdict(list)
    for t in tasks:
        assert t.hours > 0
        assert t.date.weekday() < 5
        assert t.date >= today
        assert t.date <= t.project_due_date
        per_day[t.date] += t.hours
        per_project[t.project_id].append(t)

    for total in per_day.values():
        assert total <= 8 + 1e-9

    for pid, chunks in per_project.items():
        assert sum(c.hours for c in chunks) <= remaining[pid] + 1e-9
        assert [c.date for c in chunks] == sorted(c.date for c in chunks)
        # Only the chunk that finishes the project may be below 2h
        for c in chunks[:-1]:
            assert c.hours >= 2
        if chunks[-1].hours < 2:
            assert sum(c.hours for c in chunks) == pytest.approx(remaining[pid])

    assert "P-6" not in per_project
    assert "P-7" not in per_project


@pytest.mark.parametrize(
    "due, remaining, weekdays",
    [
        (WED, 10, 3),
        (FRI, 50, 5),
        (TUE, 17, 2),
        (NEXT_MON, 7, 6),
        (THU, 0.5, 4),
        (FRI, 41, 5),
        (SAT, 45, 5),
        (SUN, 30, 5),
        (SUN, 6, 5),
        (SUN, 44, 5),
    ],
)
def test_isolated_total_is_min_of_remaining_and_capacity(due, remaining, weekdays):
    project = make_project("P-1", due, remaining)
    assert days_left(project, MON) == weekdays
    tasks = allocate([project], today=MON)
    total = sum(t.hours for t in tasks)
    assert total == pytest.approx(min(remaining, 8 * weekdays))


def test_target_hours_per_day():
    assert target_hours_per_day(10, 3, 2.0) == 4
    assert target_hours_per_day(3, 5, 2.0) == 2.0
    assert target_hours_per_day(16, 2, 2.0) == 8


def test_days_left():
    assert days_left(make_project("P-1", WED, 1), MON) == 3
    assert days_left(make_project("P-1", MON, 1), MON) == 1
    assert days_left(make_project("P-1", date(2026, 2, 20), 1), MON) == 0
    assert days_left(make_project("P-1", SAT, 1), MON) == 5
    assert days_left(make_project("P-1", SUN, 1), FRI) == 1
    assert days_left(make_project("P-1", NEXT_MON, 1), SAT) == 1
    assert days_left(make_project("P-1", SUN, 1), SAT) == 0


def test_ledger():
    ledger = CapacityLedger(8.0)
    assert ledger.available(MON) == 8.0
    assert ledger.days() == []

    assert ledger.reserve(MON, 5) == 3
    assert ledger.booked(MON) == 5
    assert ledger.reserve(MON, 3) == 0
    assert ledger.days() == [MON]

    with pytest.raises(ValueError):
        ledger.reserve(MON, 0.5)


def test_group_by_day():
    tasks = allocate([make_project("P-2", FRI, 6), make_project("P-1", MON, 6)], today=MON)
    grouped = group_by_day(tasks)
    assert list(grouped) == [MON, TUE, WED]
    assert [t.project_id for t in grouped[MON]] == ["P-1", "P-2"]
