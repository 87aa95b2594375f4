from datetime import date, timedelta

from staffroom.services.reallocation_engine import expand_teaching_dates, weekday_index

MONDAY = date(2026, 10, 19)
SUNDAY = date(2026, 10, 25)


def test_weekday_index_uses_monday_one_convention():
    assert weekday_index(MONDAY) == 1
    assert weekday_index(MONDAY + timedelta(days=5)) == 6
    assert weekday_index(SUNDAY) == 7


def test_full_week_drops_only_sunday():
    dates = expand_teaching_dates(MONDAY, SUNDAY)

    assert dates == [MONDAY + timedelta(days=offset) for offset in range(6)]


def test_single_sunday_window_is_empty():
    assert expand_teaching_dates(SUNDAY, SUNDAY) == []


def test_start_after_end_is_empty_not_an_error():
    assert expand_teaching_dates(SUNDAY, MONDAY) == []


def test_multi_week_window_is_ordered_and_never_contains_sunday():
    end = MONDAY + timedelta(days=40)  # a Saturday
    dates = expand_teaching_dates(MONDAY, end)

    assert dates == sorted(set(dates))
    assert all(weekday_index(item) != 7 for item in dates)
    assert dates[0] == MONDAY
    assert dates[-1] == end
    # six teaching days per full week
    assert len(expand_teaching_dates(MONDAY, MONDAY + timedelta(days=13))) == 12


def test_single_teaching_day_window():
    saturday = MONDAY + timedelta(days=5)
    assert expand_teaching_dates(saturday, saturday) == [saturday]
