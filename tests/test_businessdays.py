from datetime import date, datetime

from conftest import FRI, MON, NEXT_MON, SAT, SUN, TUE, WED

from dailyr.businessdays import (
    add_days,
    business_days_between,
    is_before,
    is_today,
    is_weekend,
    start_of_day,
)


def test_is_weekend():
    assert not is_weekend(MON)
    assert not is_weekend(FRI)
    assert is_weekend(SAT)
    assert is_weekend(SUN)
    assert is_weekend(datetime(2026, 2, 28, 23, 59))


def test_business_days_forward():
    assert business_days_between(MON, MON) == 0
    assert business_days_between(MON, WED) == 2
    assert business_days_between(MON, FRI) == 4
    # Fri counts, the weekend does not
    assert business_days_between(FRI, NEXT_MON) == 1
    assert business_days_between(SAT, NEXT_MON) == 0
    assert business_days_between(MON, NEXT_MON) == 5


def test_business_days_backward():
    assert business_days_between(WED, MON) == -2
    assert business_days_between(MON, date(2026, 2, 20)) == -1
    assert business_days_between(SUN, FRI) == 0
    assert business_days_between(NEXT_MON, MON) == -5


def test_business_days_across_several_weeks():
    assert business_days_between(MON, date(2026, 3, 23)) == 20
    assert business_days_between(TUE, date(2026, 3, 18)) == 16
    assert business_days_between(date(2026, 3, 18), TUE) == -16


def test_time_of_day_is_ignored():
    late_monday = datetime(2026, 2, 23, 23, 30)
    early_wednesday = datetime(2026, 2, 25, 0, 5)
    assert business_days_between(late_monday, early_wednesday) == 2
    assert start_of_day(late_monday) == MON
    assert not is_before(late_monday, MON)


def test_comparisons():
    assert is_before(MON, TUE)
    assert not is_before(TUE, MON)
    assert not is_before(MON, MON)
    assert is_today(datetime(2026, 2, 23, 15, 0), today=MON)
    assert not is_today(TUE, today=MON)
    assert is_today(date.today())


def test_add_days():
    assert add_days(FRI, 3) == NEXT_MON
    assert add_days(datetime(2026, 2, 23, 18, 0), 1) == TUE
