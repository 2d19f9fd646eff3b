"""Pair expected statement dates with the files found on disk."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable

from statements.core.models import CandidateFile, Statement, StatementStatus
from statements.ingestion.ignore import IgnoreList
from statements.processing.recurrence import RecurrencePeriod


def _files_by_date(candidates: Iterable[CandidateFile], ignore: IgnoreList) -> dict[date, Path]:
    """Index candidates by date; on a tie the lexicographically last path wins."""
    chosen: dict[date, Path] = {}
    for candidate in candidates:
        if ignore.ignores_file(candidate.path):
            continue
        current = chosen.get(candidate.extracted_date)
        if current is None or str(candidate.path) > str(current):
            chosen[candidate.extracted_date] = candidate.path
    return chosen


def resolve_status(expected: date, now: date, file: Path | None, ignore: IgnoreList) -> StatementStatus:
    """Status of one expected date. A matching file always wins over an ignored date."""
    if expected > now:
        return StatementStatus.UPCOMING
    if file is not None:
        return StatementStatus.AVAILABLE
    if ignore.ignores_date(expected):
        return StatementStatus.IGNORED
    return StatementStatus.MISSING


def build_history(
    period: RecurrencePeriod,
    candidates: Iterable[CandidateFile],
    ignore: IgnoreList,
    anchor: date,
    now: date,
) -> list[Statement]:
    """Every statement the account owes from ``anchor`` through ``now``, plus the next upcoming one.

    Expected dates are enumerated from the rule alone, then the files found on
    disk are overlaid, so periods without any file still show up as missing.
    Candidates whose extracted date is not an expected date are dropped.
    """
    files = _files_by_date(candidates, ignore)

    expected = period.occurrences_in_range(anchor, now, anchor)
    history = [
        Statement(
            expected_date=d,
            status=resolve_status(d, now, files.get(d), ignore),
            file=files.get(d),
        )
        for d in expected
    ]

    history.append(Statement(expected_date=period.next_after(now, anchor), status=StatementStatus.UPCOMING))
    return history
