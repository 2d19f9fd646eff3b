"""Value types shared by the scanner, matcher and account queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional


class StatementStatus(str, Enum):
    """Resolved status of one expected statement date."""

    AVAILABLE = "available"
    MISSING = "missing"
    IGNORED = "ignored"
    UPCOMING = "upcoming"

    @property
    def symbol(self) -> str:
        return _STATUS_SYMBOLS[self]


_STATUS_SYMBOLS = {
    StatementStatus.AVAILABLE: "✔",
    StatementStatus.MISSING: "❌",
    StatementStatus.IGNORED: "-",
    StatementStatus.UPCOMING: "…",
}


@dataclass(frozen=True, order=True)
class CandidateFile:
    """A directory entry whose name parsed into a date under the account's pattern."""

    extracted_date: date
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class Statement:
    """One expected statement period and how it was resolved."""

    expected_date: date
    status: StatementStatus
    file: Optional[Path] = None

    @property
    def is_due(self) -> bool:
        return self.status is not StatementStatus.UPCOMING

    def to_dict(self) -> dict:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "date": self.expected_date.isoformat(),
            "status": self.status.value,
            "file": str(self.file) if self.file else None,
        }

    def __str__(self) -> str:
        suffix = f" ({self.file.name})" if self.file else ""
        return f"{self.expected_date.isoformat()} {self.status.symbol}{suffix}"


@dataclass
class AccountResult:
    """Outcome of computing one account's history: statements or the error that stopped it."""

    institution: str
    account: str
    statements: list[Statement] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def key(self) -> tuple[str, str]:
        return (self.institution, self.account)
