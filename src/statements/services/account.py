"""A tracked account: one schedule, one directory, one filename pattern."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from statements.core.config import settings
from statements.core.errors import ConfigurationError
from statements.core.models import CandidateFile, Statement, StatementStatus
from statements.ingestion import ignore as ignore_file
from statements.ingestion.ignore import IgnoreList
from statements.ingestion.pattern import FilenamePattern
from statements.ingestion.scanner import scan
from statements.processing.matcher import build_history
from statements.processing.recurrence import RecurrencePeriod


@dataclass(frozen=True)
class Account:
    """Information related to an account, its statement period, and where to find the statements.

    Every query recomputes from the directory and ignore file as they are
    now; nothing is cached between calls.
    """

    name: str
    directory: Path
    statement_period: RecurrencePeriod
    first_date: date
    filename_pattern: FilenamePattern
    institution: str = ""
    ignore_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigurationError("Missing account name")
        object.__setattr__(self, "directory", Path(self.directory))
        if self.ignore_path is not None:
            object.__setattr__(self, "ignore_path", Path(self.ignore_path))
        try:
            self.statement_period.check_anchor(self.first_date)
        except ConfigurationError as exc:
            raise ConfigurationError(str(exc), account=self.name) from exc

    @property
    def key(self) -> tuple[str, str]:
        return (self.institution, self.name)

    @property
    def ignore_file(self) -> Path:
        """The ignore file consulted for this account."""
        if self.ignore_path is None:
            return self.directory / settings.IGNORE_FILENAME
        if self.ignore_path.is_absolute():
            return self.ignore_path
        return self.directory / self.ignore_path

    # ---- schedule only, no filesystem access ----

    def next_statement_date(self, now: date) -> date:
        return self.statement_period.next_after(now, self.first_date)

    def prev_statement_date(self, now: date) -> Optional[date]:
        return self.statement_period.prev_before_or_eq(now, self.first_date)

    def statement_dates(self, now: date) -> list[date]:
        """All expected statement dates up to and including ``now``, earliest first."""
        return self.statement_period.occurrences_in_range(self.first_date, now, self.first_date)

    def expected_filename(self, d: date) -> str:
        return self.filename_pattern.format(d)

    # ---- filesystem-backed queries ----

    def downloaded_statements(self) -> list[CandidateFile]:
        return scan(self.directory, self.filename_pattern)

    def ignored(self) -> IgnoreList:
        return ignore_file.load(self.ignore_file)

    def history(self, now: Optional[date] = None) -> list[Statement]:
        """Full matched history; raises ``DirectoryNotFound``/``NotADirectory``/``IgnoreFileParseError``."""
        now = now or date.today()
        candidates = self.downloaded_statements()
        return build_history(
            self.statement_period,
            candidates,
            self.ignored(),
            self.first_date,
            now,
        )

    def full_log(self, now: Optional[date] = None) -> list[Statement]:
        return self.history(now)

    def most_recent(self, now: Optional[date] = None) -> Optional[Statement]:
        """The last statement that is already due, whatever its status."""
        due = [s for s in self.history(now) if s.status is not StatementStatus.UPCOMING]
        return due[-1] if due else None

    def next_due(self, now: Optional[date] = None) -> Statement:
        return next(s for s in self.history(now) if s.status is StatementStatus.UPCOMING)

    def missing(self, now: Optional[date] = None) -> list[Statement]:
        return [s for s in self.history(now) if s.status is StatementStatus.MISSING]

    def __str__(self) -> str:
        if self.institution:
            return f"{self.name} ({self.institution})"
        return self.name
