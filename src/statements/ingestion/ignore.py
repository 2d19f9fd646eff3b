"""Per-account ignore files.

An ignore file lives next to the statements (``.statementignore.toml`` by
default) and lists statement dates to treat as fulfilled and file names to
leave out of matching::

    dates = [2021-11-01, "2021-12-01"]
    files = ["statement_2021-10-01.pdf"]
    # or one mixed list; ISO-date strings are dates, anything else a file name
    ignore = ["2022-01-01", "statement_2022-02-01_draft.pdf"]
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional

from dateutil import parser as date_parser

from statements.core.errors import IgnoreFileParseError
from statements.logging_setup import get_logger

logger = get_logger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ].*)?$")
# entries of the mixed `ignore` list are dates only when they are exactly YYYY-MM-DD
_DATE_ENTRY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_KNOWN_KEYS = {"dates", "files", "ignore"}


@dataclass(frozen=True)
class IgnoreList:
    """Dates treated as available without a file, and file names excluded from matching."""

    dates: frozenset[date] = field(default_factory=frozenset)
    files: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> "IgnoreList":
        return cls()

    @classmethod
    def of(cls, dates: Iterable[date] = (), files: Iterable[str] = ()) -> "IgnoreList":
        return cls(dates=frozenset(dates), files=frozenset(files))

    def ignores_date(self, d: date) -> bool:
        return d in self.dates

    def ignores_file(self, path: Path | str) -> bool:
        return Path(path).name in self.files

    def __bool__(self) -> bool:
        return bool(self.dates or self.files)

    def __len__(self) -> int:
        return len(self.dates) + len(self.files)


def _as_date(value: Any, path: Path) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE_RE.match(value.strip()):
        try:
            return date_parser.isoparse(value.strip()).date()
        except ValueError as exc:
            raise IgnoreFileParseError(path, f"invalid date `{value}`") from exc
    raise IgnoreFileParseError(path, f"`{value}` is not a date")


def _as_list(data: dict, key: str, path: Path) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise IgnoreFileParseError(path, f"`{key}` must be an array")
    return value


def parse(data: dict[str, Any], path: Path) -> IgnoreList:
    """Build an ``IgnoreList`` from an already-decoded ignore document."""
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise IgnoreFileParseError(path, f"unknown key(s): {', '.join(sorted(unknown))}")

    dates = {_as_date(v, path) for v in _as_list(data, "dates", path)}

    files: set[str] = set()
    for value in _as_list(data, "files", path):
        if not isinstance(value, str) or not value.strip():
            raise IgnoreFileParseError(path, f"`{value}` is not a file name")
        files.add(Path(value.strip()).name)

    for value in _as_list(data, "ignore", path):
        if isinstance(value, str) and not _DATE_ENTRY_RE.match(value.strip()):
            if not value.strip():
                raise IgnoreFileParseError(path, "empty entry")
            files.add(Path(value.strip()).name)
        else:
            dates.add(_as_date(value, path))

    return IgnoreList.of(dates, files)


def load(ignore_file: Optional[Path]) -> IgnoreList:
    """Read an ignore file. A missing file (or no file at all) is an empty list.

    Raises:
        IgnoreFileParseError: the file exists but is not a valid ignore document.
    """
    if ignore_file is None:
        return IgnoreList.empty()
    path = Path(ignore_file)
    if not path.exists():
        return IgnoreList.empty()
    if not path.is_file():
        raise IgnoreFileParseError(path, "not a file")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise IgnoreFileParseError(path, str(exc)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise IgnoreFileParseError(path, str(exc)) from exc

    ignore = parse(data, path)
    logger.debug("Loaded %s: %d date(s), %d file(s)", path, len(ignore.dates), len(ignore.files))
    return ignore
