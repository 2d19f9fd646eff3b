"""List an account's statement directory and pick out dated statement files."""

from __future__ import annotations

from pathlib import Path

from statements.core.errors import DirectoryNotFound, NotADirectory
from statements.core.models import CandidateFile
from statements.ingestion.pattern import FilenamePattern
from statements.logging_setup import get_logger

logger = get_logger(__name__)


def scan(directory: Path, pattern: FilenamePattern) -> list[CandidateFile]:
    """Return the direct entries of ``directory`` whose whole name matches ``pattern``.

    Subdirectories are skipped and file contents are never read. The result is
    sorted by extracted date, then by path.

    Raises:
        DirectoryNotFound: ``directory`` does not exist.
        NotADirectory: ``directory`` exists but is not a directory.
        OSError: the directory could not be listed for any other reason.
    """
    directory = Path(directory)
    if not directory.exists():
        raise DirectoryNotFound(directory)
    if not directory.is_dir():
        raise NotADirectory(directory)

    candidates: list[CandidateFile] = []
    rejected = 0
    for entry in directory.iterdir():
        if entry.is_dir():
            continue
        extracted = pattern.match(entry.name)
        if extracted is None:
            rejected += 1
            continue
        candidates.append(CandidateFile(extracted_date=extracted, path=entry))

    candidates.sort()
    logger.debug(
        "Scanned %s with %s: %d candidate(s), %d other entr(ies)",
        directory,
        pattern,
        len(candidates),
        rejected,
    )
    return candidates
