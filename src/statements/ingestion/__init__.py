"""Ingestion module for finding statement files on disk."""

from .ignore import IgnoreList
from .pattern import FilenamePattern
from .scanner import scan

__all__ = [
    "FilenamePattern",
    "IgnoreList",
    "scan",
]
