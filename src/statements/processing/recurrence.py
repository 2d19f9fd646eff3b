"""Recurrence rules: when an account's statements are expected.

A rule is the parametric family ``[n, x, m, y]``: the ``n``-th ``x`` of every
``m``-th ``y``. ``n`` may be a single ordinal or several; negative ordinals
count from the end of the unit (``-1`` is the last). Examples::

    [15, "Day", 1, "Month"]        the 15th of every month
    [[1, -1], "Day", 1, "Month"]   the 1st and the last day of every month
    [2, "Week", 1, "Month"]        the start of the 2nd week of every month
    [1, "Month", 1, "Quarter"]     the first day of every quarter
    [-1, "Day", 2, "Month"]        the last day of every other month

Combined with an anchor (the account's first statement date), a rule yields a
strictly increasing sequence of dates that never starts before the anchor.
The ``y`` instances are stepped by ``m`` starting from the one containing the
anchor. An ordinal that does not exist in one instance (the 31st in
February) contributes nothing for that instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from math import gcd
from typing import Any, Optional, Sequence

from dateutil.relativedelta import relativedelta

from statements.core.errors import ConfigurationError

# 400 Gregorian years: the calendar repeats exactly after this many months/weeks.
_CYCLE_MONTHS = 4800
_CYCLE_WEEKS = 20871

_PERIOD_HELP = (
    "The required format is `[n, x, m, y]` where `n` is an integer (or a list of "
    "integers), `m` is a positive integer, and `x` and `y` are unit names."
)


class Grain(str, Enum):
    """Calendar units a rule can count in, finest first."""

    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    QUARTER = "Quarter"
    HALF = "Half"
    YEAR = "Year"
    LUSTRUM = "Lustrum"
    DECADE = "Decade"
    CENTURY = "Century"
    MILLENNIUM = "Millennium"

    @classmethod
    def parse(cls, value: Any) -> "Grain":
        if isinstance(value, Grain):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(f"Unit `{value}` must be a string. {_PERIOD_HELP}")
        key = value.strip().lower()
        # common misspelling, accepted by older configuration files
        if key == "millenium":
            key = "millennium"
        for grain in cls:
            if grain.value.lower() == key:
                return grain
        allowed = ", ".join(f"`{g.value}`" for g in cls)
        raise ConfigurationError(f"Unknown unit `{value}`. Allowable units are {allowed}.")

    @property
    def rank(self) -> int:
        return list(Grain).index(self)

    @property
    def months(self) -> int:
        """Length in months for month-based units, 0 for days and weeks."""
        return _GRAIN_MONTHS.get(self, 0)

    # ---- absolute instance indexing ----

    def index_of(self, d: date) -> int:
        """Index of the instance of this unit that contains ``d``."""
        if self is Grain.DAY:
            return d.toordinal()
        if self is Grain.WEEK:
            # ordinal 7 (0001-01-07) is a Sunday; weeks start on Sunday
            return d.toordinal() // 7
        return (d.year * 12 + d.month - 1) // self.months

    def start_of(self, index: int) -> date:
        if self is Grain.DAY:
            return date.fromordinal(index)
        if self is Grain.WEEK:
            return date.fromordinal(max(index * 7, 1))
        month_index = index * self.months
        return date(month_index // 12, month_index % 12 + 1, 1)

    def max_days(self) -> int:
        """Upper bound on the number of days in one instance."""
        if self is Grain.DAY:
            return 1
        if self is Grain.WEEK:
            return 7
        fixed = {1: 31, 3: 92, 6: 184}
        if self.months in fixed:
            return fixed[self.months]
        years = self.months // 12
        return years * 365 + (years + 3) // 4


_GRAIN_MONTHS = {
    Grain.MONTH: 1,
    Grain.QUARTER: 3,
    Grain.HALF: 6,
    Grain.YEAR: 12,
    Grain.LUSTRUM: 60,
    Grain.DECADE: 120,
    Grain.CENTURY: 1200,
    Grain.MILLENNIUM: 12000,
}


def roll_to_weekday(d: date) -> date:
    """Move a Saturday or Sunday forward to the following Monday."""
    wd = d.weekday()
    if wd == 5:
        return d + timedelta(days=2)
    if wd == 6:
        return d + timedelta(days=1)
    return d


def _max_count(sub_unit: Grain, unit: Grain) -> int:
    """Upper bound on how many ``sub_unit`` instances start inside one ``unit``."""
    if sub_unit is Grain.DAY:
        return unit.max_days()
    if sub_unit is Grain.WEEK:
        return (unit.max_days() + 6) // 7
    return unit.months // sub_unit.months


def _cycle_length(unit: Grain) -> int:
    """Number of ``unit`` instances after which the calendar repeats."""
    if unit is Grain.WEEK:
        return _CYCLE_WEEKS
    months = unit.months
    return (months * _CYCLE_MONTHS // gcd(months, _CYCLE_MONTHS)) // months


def _parse_ordinals(value: Any) -> tuple[int, ...]:
    raw = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
    ordinals: set[int] = set()
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, int):
            raise ConfigurationError(f"Ordinal `{item}` is not an integer. {_PERIOD_HELP}")
        if item == 0:
            raise ConfigurationError("Ordinal 0 is not allowed; use 1 for the first or -1 for the last.")
        ordinals.add(item)
    if not ordinals:
        raise ConfigurationError(f"The ordinal set is empty. {_PERIOD_HELP}")
    return tuple(sorted(ordinals))


@dataclass(frozen=True)
class RecurrencePeriod:
    """The ``[n, x, m, y]`` rule. Immutable and validated on construction."""

    ordinals: tuple[int, ...]
    sub_unit: Grain
    interval: int
    unit: Grain
    roll_weekends: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "ordinals", _parse_ordinals(self.ordinals))
        object.__setattr__(self, "sub_unit", Grain.parse(self.sub_unit))
        object.__setattr__(self, "unit", Grain.parse(self.unit))

        if isinstance(self.interval, bool) or not isinstance(self.interval, int):
            raise ConfigurationError(f"Interval `{self.interval}` is not an integer. {_PERIOD_HELP}")
        if self.interval < 1:
            raise ConfigurationError(f"Interval must be positive, got {self.interval}.")
        if self.sub_unit.rank >= self.unit.rank:
            raise ConfigurationError(
                f"`{self.sub_unit.value}` cannot be counted within `{self.unit.value}`; "
                "the first unit must be finer than the second."
            )

        bound = _max_count(self.sub_unit, self.unit)
        too_big = [n for n in self.ordinals if abs(n) > bound]
        if too_big:
            raise ConfigurationError(
                f"Ordinal {too_big[0]} never fits: a `{self.unit.value}` holds at most "
                f"{bound} `{self.sub_unit.value}` units."
            )

    @classmethod
    def from_config(cls, value: Sequence[Any], *, roll_weekends: bool = False) -> "RecurrencePeriod":
        """Build a rule from the ``statement_period = [n, x, m, y]`` configuration array."""
        if not isinstance(value, (list, tuple)):
            raise ConfigurationError(f"Statement period must be an array. {_PERIOD_HELP}")
        if len(value) != 4:
            raise ConfigurationError(
                f"Incorrect array length in statement period (should be 4, was {len(value)}). {_PERIOD_HELP}"
            )
        n, x, m, y = value
        return cls(ordinals=n, sub_unit=x, interval=m, unit=y, roll_weekends=roll_weekends)

    def to_config(self) -> list[Any]:
        n: Any = self.ordinals[0] if len(self.ordinals) == 1 else list(self.ordinals)
        return [n, self.sub_unit.value, self.interval, self.unit.value]

    # ---- instance arithmetic ----

    def _step_at_or_before(self, d: date, anchor: date) -> int:
        """Step number ``j`` of the stepped instance at or before the one containing ``d``."""
        base = self.unit.index_of(anchor)
        offset = self.unit.index_of(d) - base
        if offset <= 0:
            return 0
        return offset // self.interval

    def _instance(self, step: int, anchor: date) -> tuple[date, date]:
        index = self.unit.index_of(anchor) + step * self.interval
        return self.unit.start_of(index), self.unit.start_of(index + 1)

    def _nth_start(self, start: date, end: date, n: int) -> Optional[date]:
        sub = self.sub_unit
        if sub is Grain.DAY:
            d = start + timedelta(days=n - 1) if n > 0 else end + timedelta(days=n)
        elif sub is Grain.WEEK:
            if n > 0:
                first_sunday = start + timedelta(days=(6 - start.weekday()) % 7)
                d = first_sunday + timedelta(weeks=n - 1)
            else:
                last = end - timedelta(days=1)
                last_sunday = last - timedelta(days=(last.weekday() + 1) % 7)
                d = last_sunday + timedelta(weeks=n + 1)
        else:
            count = self.unit.months // sub.months
            position = n - 1 if n > 0 else count + n
            if position < 0 or position >= count:
                return None
            d = start + relativedelta(months=sub.months * position)
        if start <= d < end:
            return d
        return None

    def _dates_in(self, step: int, anchor: date) -> list[date]:
        """Sorted, de-duplicated dates produced by one stepped instance, never before ``anchor``."""
        start, end = self._instance(step, anchor)
        found: set[date] = set()
        for n in self.ordinals:
            d = self._nth_start(start, end, n)
            if d is None or d < anchor:
                continue
            found.add(roll_to_weekday(d) if self.roll_weekends else d)
        return sorted(found)

    def _lookback(self, d: date) -> date:
        # raw dates up to two days earlier can roll forward onto ``d``
        return d - timedelta(days=2) if self.roll_weekends else d

    # ---- public queries ----

    def check_anchor(self, anchor: date) -> None:
        """Fail if the rule stepped from ``anchor`` never produces a date."""
        try:
            first = self._search_forward(anchor - timedelta(days=1), anchor)
            # the instance after the first one must also be representable
            self._instance(self._step_at_or_before(first or anchor, anchor) + 1, anchor)
        except (ValueError, OverflowError) as exc:
            raise ConfigurationError(
                f"Statement period {self.to_config()} starting {anchor.isoformat()} "
                f"falls outside the supported calendar (years 1 to 9999): {exc}"
            ) from exc
        if first is None:
            raise ConfigurationError(
                f"Statement period {self.to_config()} starting {anchor.isoformat()} never produces a date."
            )

    def _search_forward(self, after: date, anchor: date) -> Optional[date]:
        step = self._step_at_or_before(self._lookback(max(after, anchor)), anchor)
        # one full calendar cycle of stepped instances, plus the partial one we start in
        for _ in range(_cycle_length(self.unit) + 2):
            candidates = [d for d in self._dates_in(step, anchor) if d > after]
            if candidates:
                return candidates[0]
            step += 1
        return None

    def next_after(self, d: date, anchor: date) -> date:
        """The earliest date produced by the rule that is strictly after ``d``."""
        found = self._search_forward(d, anchor)
        if found is None:
            raise ConfigurationError(
                f"Statement period {self.to_config()} starting {anchor.isoformat()} never produces a date."
            )
        return found

    def prev_before_or_eq(self, d: date, anchor: date) -> Optional[date]:
        """The latest date produced by the rule that is on or before ``d``, if any."""
        if d < anchor:
            return None
        step = self._step_at_or_before(d, anchor)
        while step >= 0:
            candidates = [x for x in self._dates_in(step, anchor) if x <= d]
            if candidates:
                return candidates[-1]
            step -= 1
        return None

    def occurrences_in_range(self, start: date, end: date, anchor: date) -> list[date]:
        """Every date in ``[start, end]`` produced by the rule, ascending."""
        lo = max(start, anchor)
        if end < lo:
            return []
        dates: list[date] = []
        step = self._step_at_or_before(self._lookback(lo), anchor)
        while True:
            instance_start, _ = self._instance(step, anchor)
            if instance_start > end:
                break
            for d in self._dates_in(step, anchor):
                if lo <= d <= end and (not dates or d > dates[-1]):
                    dates.append(d)
            step += 1
        return dates

    def __str__(self) -> str:
        return str(self.to_config())
