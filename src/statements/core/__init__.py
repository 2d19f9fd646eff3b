"""Core module - settings, errors and value types."""

from statements.core.config import Settings, settings
from statements.core.errors import (
    ConfigurationError,
    DateParseError,
    DirectoryNotFound,
    IgnoreFileParseError,
    NotADirectory,
    ScanError,
    StatementsError,
)
from statements.core.models import (
    AccountResult,
    CandidateFile,
    Statement,
    StatementStatus,
)

__all__ = [
    "Settings",
    "settings",
    "StatementsError",
    "ConfigurationError",
    "ScanError",
    "DirectoryNotFound",
    "NotADirectory",
    "IgnoreFileParseError",
    "DateParseError",
    "AccountResult",
    "CandidateFile",
    "Statement",
    "StatementStatus",
]
