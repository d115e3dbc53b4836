from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from zonecal import dates
from zonecal.errors import InvalidArgument

NY = ZoneInfo("America/New_York")


def test_compare_at_day_granularity_ignores_time_of_day():
    morning = datetime(2024, 3, 5, 8, 0, tzinfo=NY)
    evening = datetime(2024, 3, 5, 22, 30, tzinfo=NY)

    assert dates.compare(morning, evening, "day") == 0
    assert dates.compare(morning, evening) == -1
    assert dates.compare(evening, morning, "minutes") == 1
    assert dates.lt(evening, datetime(2024, 3, 6, 0, 0, tzinfo=NY), "day")


def test_compare_uses_absolute_time_inside_fall_back_hour():
    first_pass = datetime(2024, 11, 3, 1, 45, tzinfo=NY)             # EDT
    second_pass = datetime(2024, 11, 3, 1, 30, fold=1, tzinfo=NY)    # EST, 45 minutes later

    assert dates.lt(first_pass, second_pass)
    assert dates.diff(second_pass, first_pass, "minutes") == 45


def test_start_of_week_honours_first_day_of_week():
    wednesday = datetime(2024, 3, 6, 15, 0, tzinfo=NY)

    assert dates.start_of(wednesday, "week") == datetime(2024, 3, 3, tzinfo=NY)
    assert dates.start_of(wednesday, "week", first_of_week=1) == datetime(2024, 3, 4, tzinfo=NY)


def test_end_of_day_is_last_microsecond():
    value = datetime(2024, 3, 5, 9, 15, tzinfo=NY)

    assert dates.end_of(value, "day") == datetime(2024, 3, 5, 23, 59, 59, 999999, tzinfo=NY)
    assert dates.end_of(value, "month") == datetime(2024, 3, 31, 23, 59, 59, 999999, tzinfo=NY)


def test_start_of_day_on_spring_forward_day_keeps_standard_offset():
    floor = dates.start_of(datetime(2024, 3, 10, 10, 0, tzinfo=NY), "day")

    assert (floor.hour, floor.minute) == (0, 0)
    assert floor.utcoffset() == timedelta(hours=-5)


def test_add_day_keeps_wall_clock_across_dst():
    before = datetime(2024, 3, 9, 9, 0, tzinfo=NY)
    after = dates.add(before, 1, "day")

    assert (after.day, after.hour) == (10, 9)
    assert after.utcoffset() == timedelta(hours=-4)
    assert dates.diff(after, before, "minutes") == 23 * 60


def test_add_minutes_moves_elapsed_time_through_gap():
    result = dates.add(datetime(2024, 3, 10, 1, 30, tzinfo=NY), 60, "minutes")

    assert (result.hour, result.minute) == (3, 30)


def test_add_month_clamps_to_month_length():
    assert dates.add(datetime(2024, 1, 31, tzinfo=NY), 1, "month").date().isoformat() == "2024-02-29"
    assert dates.add(datetime(2024, 2, 29, tzinfo=NY), 1, "year").date().isoformat() == "2025-02-28"
    assert dates.add(datetime(2024, 3, 31, tzinfo=NY), -1, "month").date().isoformat() == "2024-02-29"


def test_add_month_keeps_wall_clock_across_dst():
    result = dates.add(datetime(2024, 2, 15, 9, 0, tzinfo=NY), 1, "month")

    assert (result.month, result.day, result.hour) == (3, 15, 9)
    assert result.utcoffset() == timedelta(hours=-4)


def test_diff_is_signed():
    a = datetime(2024, 3, 5, 9, 0, tzinfo=NY)
    b = datetime(2024, 3, 5, 10, 30, tzinfo=NY)

    assert dates.diff(b, a, "minutes") == 90
    assert dates.diff(a, b, "minutes") == -90
    assert dates.diff(b, a, "hours") == 1
    assert dates.diff(datetime(2024, 3, 10, 0, 30, tzinfo=NY), datetime(2024, 3, 9, 23, 30, tzinfo=NY), "day") == 1
    assert dates.diff(datetime(2025, 1, 1, tzinfo=NY), datetime(2024, 11, 30, tzinfo=NY), "month") == 2


def test_date_range_is_inclusive_and_restartable():
    seq = dates.date_range(datetime(2024, 3, 1, tzinfo=NY), datetime(2024, 3, 3, 12, 0, tzinfo=NY), "day")

    first = list(seq)
    second = list(seq)

    assert [d.day for d in first] == [1, 2, 3]
    assert first == second


def test_date_range_steps_by_hours():
    seq = dates.date_range(datetime(2024, 3, 1, 8, tzinfo=NY), datetime(2024, 3, 1, 14, tzinfo=NY), "hours", 3)

    assert [d.hour for d in seq] == [8, 11, 14]


def test_in_range_is_inclusive_and_open_ended():
    start = datetime(2024, 3, 1, tzinfo=NY)
    end = datetime(2024, 3, 5, tzinfo=NY)

    assert dates.in_range(datetime(2024, 3, 5, 23, 0, tzinfo=NY), start, end)
    assert not dates.in_range(datetime(2024, 3, 6, tzinfo=NY), start, end)
    assert dates.in_range(datetime(2030, 1, 1, tzinfo=NY), start, None)


def test_min_max_ceil_and_merge():
    a = datetime(2024, 3, 5, 9, 0, tzinfo=NY)
    b = datetime(2024, 3, 5, 13, 0, tzinfo=timezone.utc)   # 08:00 in New York

    assert dates.min_date(a, b) is b
    assert dates.max_date(a, b) is a
    assert dates.ceil(a, "day") == datetime(2024, 3, 6, tzinfo=NY)
    assert dates.ceil(datetime(2024, 3, 6, tzinfo=NY), "day") == datetime(2024, 3, 6, tzinfo=NY)
    assert dates.merge(a, datetime(2020, 1, 1, 17, 45, tzinfo=NY)) == datetime(2024, 3, 5, 17, 45, tzinfo=NY)


def test_timezone_offset_uses_minutes_behind_utc():
    assert dates.get_timezone_offset(datetime(2024, 1, 15, tzinfo=NY)) == 300
    assert dates.get_timezone_offset(datetime(2024, 7, 15, tzinfo=NY)) == 240
    assert dates.get_timezone_offset(datetime(2024, 7, 15, tzinfo=timezone.utc)) == 0


def test_visible_days_cover_whole_weeks():
    days = dates.visible_days(datetime(2024, 3, 10, tzinfo=NY))
    monday_days = dates.visible_days(datetime(2024, 3, 10, tzinfo=NY), first_of_week=1)

    assert days[0].date().isoformat() == "2024-02-25"
    assert days[-1].date().isoformat() == "2024-04-06"
    assert len(days) == 42
    assert monday_days[0].date().isoformat() == "2024-02-26"
    assert monday_days[-1].date().isoformat() == "2024-03-31"
    assert len(monday_days) == 35


def test_is_just_date():
    assert dates.is_just_date(datetime(2024, 3, 5, tzinfo=NY))
    assert not dates.is_just_date(datetime(2024, 3, 5, 0, 0, 1, tzinfo=NY))


@pytest.mark.parametrize(
    "call",
    [
        lambda: dates.start_of(datetime(2024, 1, 1), "fortnight"),
        lambda: dates.add(datetime(2024, 1, 1), "1", "day"),
        lambda: dates.add(datetime(2024, 1, 1), 1.5, "day"),
        lambda: dates.add(datetime(2024, 1, 1), float("inf"), "month"),
        lambda: dates.add(datetime(9999, 12, 1), 1, "month"),
        lambda: dates.diff(datetime(2024, 1, 1), datetime(2024, 1, 1, tzinfo=NY), "day"),
        lambda: dates.date_range(datetime(2024, 1, 1), datetime(2024, 1, 2), "day", 0),
        lambda: dates.compare("2024-01-01", datetime(2024, 1, 1)),
        lambda: dates.min_date(),
    ],
)
def test_malformed_arguments_raise_invalid_argument(call):
    with pytest.raises(InvalidArgument):
        call()
