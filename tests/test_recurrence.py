"""Tests for statement recurrence rules."""

from __future__ import annotations

from datetime import date

import pytest

from statements.core.errors import ConfigurationError
from statements.processing.recurrence import Grain, RecurrencePeriod, roll_to_weekday


def _rule(value, **kwargs):
    return RecurrencePeriod.from_config(value, **kwargs)


def test_fifteenth_of_every_month():
    rule = _rule([15, "Day", 1, "Month"])
    anchor = date(2020, 1, 15)

    assert rule.next_after(date(2020, 1, 15), anchor) == date(2020, 2, 15)
    assert rule.next_after(date(2020, 1, 14), anchor) == date(2020, 1, 15)
    assert rule.prev_before_or_eq(date(2020, 3, 1), anchor) == date(2020, 2, 15)
    assert rule.prev_before_or_eq(date(2020, 3, 15), anchor) == date(2020, 3, 15)
    assert rule.occurrences_in_range(date(2020, 1, 1), date(2020, 4, 30), anchor) == [
        date(2020, 1, 15),
        date(2020, 2, 15),
        date(2020, 3, 15),
        date(2020, 4, 15),
    ]


def test_next_after_date_before_anchor_returns_anchor():
    rule = _rule([15, "Day", 1, "Month"])
    assert rule.next_after(date(2019, 12, 1), date(2020, 1, 15)) == date(2020, 1, 15)


def test_nothing_before_anchor():
    rule = _rule([15, "Day", 1, "Month"])
    anchor = date(2020, 1, 20)

    assert rule.occurrences_in_range(date(2020, 1, 1), date(2020, 3, 31), anchor) == [
        date(2020, 2, 15),
        date(2020, 3, 15),
    ]
    assert rule.prev_before_or_eq(date(2020, 2, 1), anchor) is None
    assert rule.prev_before_or_eq(date(2019, 6, 1), anchor) is None


def test_last_day_of_month_handles_leap_year():
    rule = _rule([-1, "Day", 1, "Month"])
    anchor = date(2020, 1, 31)
    assert rule.occurrences_in_range(anchor, date(2020, 4, 30), anchor) == [
        date(2020, 1, 31),
        date(2020, 2, 29),
        date(2020, 3, 31),
        date(2020, 4, 30),
    ]


def test_ordinal_missing_from_instance_is_skipped():
    rule = _rule([31, "Day", 1, "Month"])
    anchor = date(2021, 1, 31)
    assert rule.occurrences_in_range(anchor, date(2021, 6, 30), anchor) == [
        date(2021, 1, 31),
        date(2021, 3, 31),
        date(2021, 5, 31),
    ]
    assert rule.next_after(date(2021, 1, 31), anchor) == date(2021, 3, 31)


def test_first_and_last_day_of_month():
    rule = _rule([[1, -1], "Day", 1, "Month"])
    anchor = date(2021, 1, 1)
    assert rule.occurrences_in_range(anchor, date(2021, 2, 28), anchor) == [
        date(2021, 1, 1),
        date(2021, 1, 31),
        date(2021, 2, 1),
        date(2021, 2, 28),
    ]


def test_ordinals_landing_on_same_day_are_collapsed():
    rule = _rule([[1, 1, -31], "Day", 1, "Month"])
    anchor = date(2021, 1, 1)
    assert rule.ordinals == (-31, 1)
    assert rule.occurrences_in_range(anchor, date(2021, 3, 31), anchor) == [
        date(2021, 1, 1),
        date(2021, 2, 1),
        date(2021, 3, 1),
    ]


def test_first_month_of_every_quarter():
    rule = _rule([1, "Month", 1, "Quarter"])
    anchor = date(2021, 1, 1)
    assert rule.next_after(anchor, anchor) == date(2021, 4, 1)
    assert rule.occurrences_in_range(anchor, date(2021, 12, 31), anchor) == [
        date(2021, 1, 1),
        date(2021, 4, 1),
        date(2021, 7, 1),
        date(2021, 10, 1),
    ]


def test_interval_steps_from_anchor_instance():
    rule = _rule([-1, "Day", 2, "Month"])
    anchor = date(2021, 1, 31)
    assert rule.occurrences_in_range(anchor, date(2021, 6, 30), anchor) == [
        date(2021, 1, 31),
        date(2021, 3, 31),
        date(2021, 5, 31),
    ]

    quarterly = _rule([15, "Day", 3, "Month"])
    start = date(2020, 2, 15)
    assert quarterly.occurrences_in_range(start, date(2020, 12, 31), start) == [
        date(2020, 2, 15),
        date(2020, 5, 15),
        date(2020, 8, 15),
        date(2020, 11, 15),
    ]


def test_second_week_of_month_starts_on_sunday():
    rule = _rule([2, "Week", 1, "Month"])
    # 2021-02-01 is a Monday, so the first week starts on Sunday 2021-02-07
    anchor = date(2021, 2, 14)
    assert rule.next_after(anchor, anchor) == date(2021, 3, 14)
    assert rule.prev_before_or_eq(date(2021, 3, 13), anchor) == date(2021, 2, 14)


def test_every_other_week():
    rule = _rule([1, "Day", 2, "Week"])
    anchor = date(2021, 1, 3)  # Sunday
    assert rule.occurrences_in_range(anchor, date(2021, 2, 6), anchor) == [
        date(2021, 1, 3),
        date(2021, 1, 17),
        date(2021, 1, 31),
    ]


def test_last_day_of_year():
    rule = _rule([-1, "Day", 1, "Year"])
    anchor = date(2019, 12, 31)
    assert rule.next_after(anchor, anchor) == date(2020, 12, 31)


def test_weekend_dates_roll_to_monday_when_enabled():
    rule = _rule([1, "Day", 1, "Month"], roll_weekends=True)
    anchor = date(2021, 5, 1)  # Saturday
    assert rule.occurrences_in_range(anchor, date(2021, 8, 31), anchor) == [
        date(2021, 5, 3),
        date(2021, 6, 1),
        date(2021, 7, 1),
        date(2021, 8, 2),
    ]
    assert rule.next_after(anchor, anchor) == date(2021, 5, 3)


def test_weekend_dates_kept_by_default():
    rule = _rule([1, "Day", 1, "Month"])
    anchor = date(2021, 5, 1)
    assert rule.next_after(date(2021, 4, 30), anchor) == date(2021, 5, 1)


def test_roll_to_weekday():
    assert roll_to_weekday(date(2021, 5, 1)) == date(2021, 5, 3)
    assert roll_to_weekday(date(2021, 5, 2)) == date(2021, 5, 3)
    assert roll_to_weekday(date(2021, 5, 4)) == date(2021, 5, 4)


def test_week_index_starts_on_sunday():
    wednesday = date(2021, 2, 3)
    start = Grain.WEEK.start_of(Grain.WEEK.index_of(wednesday))
    assert start == date(2021, 1, 31)
    assert start.weekday() == 6


def test_grain_parse_accepts_case_and_old_spelling():
    assert Grain.parse("month") is Grain.MONTH
    assert Grain.parse("Millenium") is Grain.MILLENNIUM
    with pytest.raises(ConfigurationError, match="Unknown unit"):
        Grain.parse("Fortnight")


def test_to_config_round_trips():
    assert _rule([15, "Day", 1, "Month"]).to_config() == [15, "Day", 1, "Month"]
    assert _rule([[-1, 1], "day", 2, "month"]).to_config() == [[-1, 1], "Day", 2, "Month"]


@pytest.mark.parametrize(
    "value, message",
    [
        ([0, "Day", 1, "Month"], "Ordinal 0"),
        ([1, "Month", 1, "Day"], "finer"),
        ([1, "Day", 0, "Month"], "positive"),
        ([32, "Day", 1, "Month"], "never fits"),
        ([6, "Week", 1, "Month"], "never fits"),
        ([1, "Day", 1], "array length"),
        ([1.5, "Day", 1, "Month"], "not an integer"),
        ([[], "Day", 1, "Month"], "empty"),
    ],
)
def test_invalid_rules_rejected(value, message):
    with pytest.raises(ConfigurationError, match=message):
        _rule(value)


def test_rule_that_never_fires_from_anchor_rejected():
    # every stepped instance is a February, which never has a 30th
    rule = _rule([30, "Day", 12, "Month"])
    with pytest.raises(ConfigurationError, match="never produces"):
        rule.check_anchor(date(2021, 2, 1))

    rule.check_anchor(date(2021, 1, 1))


@pytest.mark.parametrize(
    "value, anchor",
    [
        ([1, "Year", 1, "Millennium"], date(999, 1, 1)),
        ([1, "Year", 1, "Century"], date(50, 6, 1)),
        ([1, "Day", 1, "Month"], date(9999, 12, 31)),
        ([1, "Day", 1, "Month"], date(1, 1, 1)),
    ],
)
def test_anchor_outside_calendar_rejected(value, anchor):
    with pytest.raises(ConfigurationError, match="supported calendar"):
        _rule(value).check_anchor(anchor)


@pytest.mark.parametrize(
    "value, anchor, expected",
    [
        ([15, "Day", 1, "Month"], date(2020, 1, 15), [date(2020, 1, 15)]),
        ([15, "Day", 1, "Month"], date(2020, 1, 20), []),
        ([-1, "Day", 1, "Month"], date(2020, 2, 29), [date(2020, 2, 29)]),
        ([2, "Week", 1, "Month"], date(2021, 2, 10), []),
        ([1, "Day", 1, "Month"], date(2021, 5, 1), [date(2021, 5, 1)]),
    ],
)
def test_range_of_only_the_anchor(value, anchor, expected):
    assert _rule(value).occurrences_in_range(anchor, anchor, anchor) == expected


def test_range_of_only_a_weekend_anchor_when_rolling():
    # 2021-05-01 is a Saturday and rolls to Monday 2021-05-03
    rule = _rule([1, "Day", 1, "Month"], roll_weekends=True)
    anchor = date(2021, 5, 1)
    assert rule.occurrences_in_range(anchor, anchor, anchor) == []
