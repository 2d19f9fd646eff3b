"""Tests for per-account ignore files."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from statements.core.errors import IgnoreFileParseError
from statements.ingestion import ignore
from statements.ingestion.ignore import IgnoreList


def _write(tmp_path, text):
    path = tmp_path / ".statementignore.toml"
    path.write_text(text)
    return path


def test_missing_file_is_empty(tmp_path):
    assert ignore.load(tmp_path / ".statementignore.toml") == IgnoreList.empty()
    assert not ignore.load(None)


def test_dates_and_files(tmp_path):
    path = _write(
        tmp_path,
        'dates = [2021-11-01, "2021-12-01"]\n'
        'files = ["statement_2021-10-01.pdf"]\n',
    )
    result = ignore.load(path)

    assert result.dates == {date(2021, 11, 1), date(2021, 12, 1)}
    assert result.files == {"statement_2021-10-01.pdf"}
    assert len(result) == 3


def test_mixed_ignore_list(tmp_path):
    path = _write(
        tmp_path,
        'ignore = ["2022-01-01", 2022-03-01, "statement_2022-02-01_draft.pdf"]\n',
    )
    result = ignore.load(path)

    assert result.ignores_date(date(2022, 1, 1))
    assert result.ignores_date(date(2022, 3, 1))
    assert result.ignores_file("statement_2022-02-01_draft.pdf")
    assert not result.ignores_date(date(2022, 2, 1))


def test_ignores_file_compares_base_name():
    result = IgnoreList.of(files=["statement_2021-10-01.pdf"])
    assert result.ignores_file(Path("/data/visa/statement_2021-10-01.pdf"))
    assert not result.ignores_file(Path("/data/visa/statement_2021-11-01.pdf"))


def test_empty_document(tmp_path):
    assert ignore.load(_write(tmp_path, "")) == IgnoreList.empty()


@pytest.mark.parametrize(
    "text",
    [
        "dates = [2021-11-01\n",
        'dates = "2021-11-01"\n',
        'dates = ["last tuesday"]\n',
        'dates = ["2021-13-45"]\n',
        "files = [42]\n",
        'skip = ["2021-11-01"]\n',
    ],
)
def test_malformed_files_rejected(tmp_path, text):
    with pytest.raises(IgnoreFileParseError):
        ignore.load(_write(tmp_path, text))


def test_parse_without_file():
    result = ignore.parse({"dates": [date(2020, 9, 15)]}, Path("inline"))
    assert result.ignores_date(date(2020, 9, 15))


def test_mixed_list_filename_starting_with_date(tmp_path):
    path = _write(tmp_path, 'ignore = ["2020-09-15 Statement.pdf", "2020-10-15"]\n')
    result = ignore.load(path)

    assert result.files == {"2020-09-15 Statement.pdf"}
    assert result.dates == {date(2020, 10, 15)}
    assert not result.ignores_date(date(2020, 9, 15))
