"""Compiled statement filename patterns.

A pattern is a strftime-style template such as ``statement_%Y-%m-%d.pdf``.
The span from the first to the last ``%`` directive is the date placeholder;
everything around it is literal text that has to match exactly, extension
included. ``*`` and ``?`` in the literal text behave like shell wildcards so
revision suffixes can be admitted explicitly (``statement_%Y-%m-%d*.pdf``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from statements.core.errors import ConfigurationError, DateParseError
from statements.logging_setup import get_logger

logger = get_logger(__name__)

# strptime directives a statement filename may carry, with the text each consumes
DIRECTIVE_PATTERNS: dict[str, str] = {
    "Y": r"\d{4}",
    "y": r"\d{2}",
    "m": r"\d{1,2}",
    "d": r"\d{1,2}",
    "j": r"\d{1,3}",
    "b": r"[A-Za-z]{3}",
    "B": r"[A-Za-z]+",
    "a": r"[A-Za-z]{3}",
    "A": r"[A-Za-z]+",
}

_TOKEN_RE = re.compile(r"%(.)|([*?])|([^%*?]+)", re.DOTALL)


def _literal_regex(text: str) -> str:
    parts = []
    for directive, wildcard, literal in _TOKEN_RE.findall(text):
        if wildcard == "*":
            parts.append(".*")
        elif wildcard == "?":
            parts.append(".")
        elif directive == "%":
            parts.append(re.escape("%"))
        elif literal:
            parts.append(re.escape(literal))
    return "".join(parts)


def _split_template(template: str) -> tuple[str, str, str]:
    """Split a template into (prefix, date format, suffix)."""
    first = last = None
    i = 0
    while i < len(template):
        if template[i] == "%":
            if i + 1 >= len(template):
                raise ConfigurationError(f"Filename pattern `{template}` ends with a lone `%`.")
            directive = template[i + 1]
            if directive != "%":
                if directive not in DIRECTIVE_PATTERNS:
                    raise ConfigurationError(
                        f"Unsupported date directive `%{directive}` in filename pattern `{template}`."
                    )
                if first is None:
                    first = i
                last = i + 2
            i += 2
        else:
            i += 1
    if first is None or last is None:
        raise ConfigurationError(f"Filename pattern `{template}` has no date directive (e.g. `%Y-%m-%d`).")
    return template[:first], template[first:last], template[last:]


@dataclass(frozen=True)
class FilenamePattern:
    """Literal prefix + one date-format segment + literal suffix."""

    template: str
    prefix: str = field(init=False)
    date_format: str = field(init=False)
    suffix: str = field(init=False)
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.template:
            raise ConfigurationError("Filename pattern is empty.")
        prefix, date_format, suffix = _split_template(self.template)
        if any(ch in date_format for ch in "*?"):
            raise ConfigurationError(
                f"Wildcards are not allowed inside the date part `{date_format}` of `{self.template}`."
            )
        regex = re.compile(
            rf"{_literal_regex(prefix)}(?P<date>{self._date_regex(date_format)}){_literal_regex(suffix)}",
            re.DOTALL,
        )
        object.__setattr__(self, "prefix", prefix)
        object.__setattr__(self, "date_format", date_format)
        object.__setattr__(self, "suffix", suffix)
        object.__setattr__(self, "_regex", regex)

    @staticmethod
    def _date_regex(date_format: str) -> str:
        parts = []
        for directive, _, literal in _TOKEN_RE.findall(date_format):
            if directive == "%":
                parts.append(re.escape("%"))
            elif directive:
                parts.append(DIRECTIVE_PATTERNS[directive])
            elif literal:
                parts.append(re.escape(literal))
        return "".join(parts)

    def parse_date(self, text: str) -> date:
        """Parse the date segment of a filename.

        Raises:
            DateParseError: if ``text`` is not a real date in ``date_format``.
        """
        try:
            return datetime.strptime(text, self.date_format).date()
        except ValueError as exc:
            raise DateParseError(text, self.date_format) from exc

    def match(self, name: str) -> Optional[date]:
        """Return the date encoded in ``name``, or ``None`` if the whole name does not conform."""
        m = self._regex.fullmatch(name)
        if m is None:
            return None
        try:
            return self.parse_date(m.group("date"))
        except DateParseError as exc:
            logger.debug("Skipping %s: %s", name, exc)
            return None

    def format(self, d: date) -> str:
        """Canonical filename for a statement dated ``d``; wildcards are dropped."""
        return (
            self.prefix.replace("*", "").replace("?", "").replace("%%", "%")
            + d.strftime(self.date_format)
            + self.suffix.replace("*", "").replace("?", "").replace("%%", "%")
        )

    def __str__(self) -> str:
        return self.template
