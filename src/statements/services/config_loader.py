"""Load the accounts configuration file into a ``Ledger``.

Example configuration::

    [institutions.chase]
    name = "Chase"

    [accounts.chase_visa]
    name = "Visa"
    institution = "chase"
    dir = "~/statements/chase/visa"
    first_date = 2020-01-15
    statement_period = [15, "Day", 1, "Month"]
    statement_fmt = "statement_%Y-%m-%d.pdf"
"""

from __future__ import annotations

import tomllib
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from statements.core.config import settings
from statements.core.errors import ConfigurationError
from statements.ingestion.pattern import FilenamePattern
from statements.logging_setup import get_logger
from statements.processing.recurrence import RecurrencePeriod
from statements.services.account import Account
from statements.services.ledger import Ledger

logger = get_logger(__name__)


class InstitutionConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class AccountConfig(BaseModel):
    """One ``[accounts.<key>]`` table."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1)
    institution: str = ""
    directory: str = Field(validation_alias=AliasChoices("dir", "directory"), min_length=1)
    first_date: date
    statement_period: list[Any]
    statement_fmt: str = Field(validation_alias=AliasChoices("statement_fmt", "filename_pattern"), min_length=1)
    ignore_file: Optional[str] = None
    roll_weekends: bool = False


def _table(document: dict[str, Any], key: str) -> Optional[dict[str, Any]]:
    for candidate in (key, key.capitalize()):
        if candidate in document:
            value = document[candidate]
            if not isinstance(value, dict):
                raise ConfigurationError(f"`[{candidate}]` must be a table.")
            return value
    return None


def _describe_validation_error(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "account"
        messages.append(f"{loc}: {err.get('msg')}")
    return "; ".join(messages)


def _resolve_directory(raw: str, base_dir: Path) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def build_account(
    key: str,
    props: dict[str, Any],
    *,
    institutions: dict[str, InstitutionConfig],
    base_dir: Path,
) -> Account:
    """Validate one account table and construct the ``Account``.

    Raises:
        ConfigurationError: on any missing or invalid property.
    """
    if not isinstance(props, dict):
        raise ConfigurationError("account entry must be a table", account=key)
    try:
        cfg = AccountConfig.model_validate(props)
    except ValidationError as exc:
        raise ConfigurationError(_describe_validation_error(exc), account=key) from exc

    institution = cfg.institution
    if institution in institutions:
        institution = institutions[institution].name or institution

    try:
        period = RecurrencePeriod.from_config(cfg.statement_period, roll_weekends=cfg.roll_weekends)
        pattern = FilenamePattern(cfg.statement_fmt)
        return Account(
            name=cfg.name,
            institution=institution,
            directory=_resolve_directory(cfg.directory, base_dir),
            statement_period=period,
            first_date=cfg.first_date,
            filename_pattern=pattern,
            ignore_path=Path(cfg.ignore_file).expanduser() if cfg.ignore_file else None,
        )
    except ConfigurationError as exc:
        if exc.account:
            raise
        raise ConfigurationError(str(exc), account=key) from exc


def load_ledger(path: Optional[Path] = None) -> Ledger:
    """Read a configuration file and build one account per ``[accounts.*]`` table.

    Problems with a single account are collected in ``Ledger.errors`` and the
    remaining accounts are still loaded.

    Raises:
        ConfigurationError: the file is missing, is not valid TOML, or has no accounts.
    """
    path = Path(path) if path is not None else settings.DEFAULT_CONFIG_PATH
    if not path.exists():
        raise ConfigurationError(f"Configuration file `{path}` does not exist.")
    if not path.is_file():
        raise ConfigurationError(f"Configuration file `{path}` is not a file.")

    try:
        with open(path, "rb") as f:
            document = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Configuration file `{path}` could not be parsed: {exc}") from exc

    return ledger_from_document(document, base_dir=path.resolve().parent)


def ledger_from_document(document: dict[str, Any], *, base_dir: Path) -> Ledger:
    accounts_table = _table(document, "accounts")
    if not accounts_table:
        raise ConfigurationError("No accounts are configured; add at least one `[accounts.<key>]` table.")

    institutions: dict[str, InstitutionConfig] = {}
    for inst_key, props in (_table(document, "institutions") or {}).items():
        try:
            institutions[inst_key] = InstitutionConfig.model_validate(props if isinstance(props, dict) else {})
        except ValidationError as exc:
            raise ConfigurationError(
                f"Institution `{inst_key}`: {_describe_validation_error(exc)}"
            ) from exc

    ledger = Ledger()
    for key, props in accounts_table.items():
        try:
            ledger.add(build_account(key, props, institutions=institutions, base_dir=base_dir))
        except ConfigurationError as exc:
            logger.warning("Skipping account %s: %s", key, exc)
            ledger.errors[key] = exc

    logger.debug("Loaded %d account(s), %d rejected", len(ledger), len(ledger.errors))
    return ledger
