"""Exception types raised while building and scanning accounts."""

from __future__ import annotations

from pathlib import Path


class StatementsError(Exception):
    """Base class for all errors raised by the statements package."""


class ConfigurationError(StatementsError):
    """Invalid account or recurrence parameters.

    Raised while constructing an account. Fatal for that one account only,
    unless no account could be built at all.
    """

    def __init__(self, message: str, *, account: str | None = None) -> None:
        self.account = account
        if account:
            message = f"Account `{account}`: {message}"
        super().__init__(message)


class ScanError(StatementsError):
    """The statement directory of an account could not be listed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


class DirectoryNotFound(ScanError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Statement directory `{path}` does not exist.")


class NotADirectory(ScanError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Statement directory `{path}` is not a directory.")


class IgnoreFileParseError(StatementsError):
    """The ignore file exists but its structure is malformed."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = Path(path)
        self.reason = reason
        message = f"Ignore file `{path}` could not be parsed. Ensure that it is properly formatted."
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DateParseError(StatementsError):
    """A date-shaped filename segment does not parse as a date.

    Only used internally by filename matching; callers see a non-match.
    """

    def __init__(self, text: str, fmt: str) -> None:
        self.text = text
        self.fmt = fmt
        super().__init__(f"`{text}` does not match date format `{fmt}`")
