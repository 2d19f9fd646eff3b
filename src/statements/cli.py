"""Command-line interface for the statements tracker.

Lists accounts, upcoming and most recent statements, the full log of one
account, and every statement that is due but missing.
"""

from __future__ import annotations

import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click

from statements.core.errors import ConfigurationError, DirectoryNotFound
from statements.core.models import AccountResult, Statement, StatementStatus
from statements.logging_setup import configure_logging
from statements.services.config_loader import load_ledger
from statements.services.ledger import Ledger


class _State:
    def __init__(self, config_path: Optional[Path], today: date) -> None:
        self.config_path = config_path
        self.today = today
        self._ledger: Optional[Ledger] = None

    @property
    def ledger(self) -> Ledger:
        if self._ledger is None:
            try:
                self._ledger = load_ledger(self.config_path)
            except ConfigurationError as e:
                click.echo(f"Error: {e}", err=True)
                sys.exit(1)
            for key, err in self._ledger.errors.items():
                click.echo(f"⚠ Skipped account '{key}': {err}", err=True)
        return self._ledger


def _error_text(error: Exception) -> str:
    if isinstance(error, DirectoryNotFound):
        return f"no statements found yet ({error.path} does not exist)"
    return str(error)


def _result_to_dict(result: AccountResult) -> dict:
    return {
        "institution": result.institution,
        "account": result.account,
        "statements": [s.to_dict() for s in result.statements],
        "error": _error_text(result.error) if result.error else None,
    }


def _label(institution: str, name: str) -> str:
    return f"{institution}/{name}" if institution else name


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Configuration file with accounts and statements info.",
)
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Pretend today is this date (YYYY-MM-DD).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], today: Optional[datetime], verbose: bool) -> None:
    """Check which account statements have been downloaded."""
    configure_logging("DEBUG" if verbose else None)
    ctx.obj = _State(config_path, today.date() if today else date.today())


@main.command("accounts")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def accounts_command(state: _State, json_output: bool) -> None:
    """List configured accounts grouped by institution."""
    ledger = state.ledger
    if json_output:
        payload = [
            {"institution": institution, "account": name}
            for institution, name in ledger.list_accounts()
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    for institution, accounts in ledger.institutions().items():
        click.echo(institution or "(no institution)")
        for account in accounts:
            click.echo(f"  {account.name}")


@main.command("next")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def next_command(state: _State, json_output: bool) -> None:
    """Show the next statement date of every account, soonest first."""
    rows = state.ledger.upcoming_all(state.today)
    if json_output:
        payload = [
            {"institution": a.institution, "account": a.name, "date": d.isoformat()}
            for a, d in rows
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    for account, next_date in rows:
        click.echo(f"{next_date.isoformat()}  {_label(account.institution, account.name)}")


@main.command("prev")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def prev_command(state: _State, json_output: bool) -> None:
    """Show the most recent due statement of every account and its status."""
    results = state.ledger.scan_all(state.today)
    rows: list[tuple[AccountResult, Optional[Statement]]] = []
    for result in results:
        due = [s for s in result.statements if s.is_due]
        rows.append((result, due[-1] if due else None))

    if json_output:
        payload = [
            {
                "institution": r.institution,
                "account": r.account,
                "statement": s.to_dict() if s else None,
                "error": _error_text(r.error) if r.error else None,
            }
            for r, s in rows
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    for result, stmt in rows:
        label = _label(result.institution, result.account)
        if result.error:
            click.echo(f"{label}: {_error_text(result.error)}")
        elif stmt is None:
            click.echo(f"{label}: no statements due yet")
        else:
            click.echo(f"{label}: {stmt}")


@main.command("log")
@click.argument("account")
@click.option("--reverse", "-r", is_flag=True, help="Newest statements first")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def log_command(state: _State, account: str, reverse: bool, json_output: bool) -> None:
    """Show every statement of ACCOUNT (``institution/name`` or a unique name)."""
    ledger = state.ledger
    try:
        acct = ledger.get(account)
    except KeyError as e:
        click.echo(f"Error: {e.args[0]}", err=True)
        sys.exit(1)

    outcome = ledger.result(acct, state.today)

    if json_output:
        click.echo(json.dumps(_result_to_dict(outcome), indent=2))
        return

    click.echo(str(acct))
    if outcome.error:
        click.echo(f"  {_error_text(outcome.error)}")
        return
    statements = list(reversed(outcome.statements)) if reverse else outcome.statements
    for stmt in statements:
        if stmt.status is StatementStatus.MISSING:
            click.echo(f"  {stmt}  (expected {acct.expected_filename(stmt.expected_date)})")
        else:
            click.echo(f"  {stmt}")


@main.command("missing")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_obj
def missing_command(state: _State, json_output: bool) -> None:
    """List every due statement that has no file, grouped by account."""
    results = state.ledger.missing_all(state.today)
    if json_output:
        click.echo(json.dumps([_result_to_dict(r) for r in results], indent=2))
        return

    total = 0
    for result in results:
        label = _label(result.institution, result.account)
        if result.error:
            click.echo(f"{label}: {_error_text(result.error)}")
            continue
        if not result.statements:
            continue
        click.echo(label)
        for stmt in result.statements:
            click.echo(f"  {stmt.expected_date.isoformat()}")
        total += len(result.statements)

    if total == 0:
        click.echo("No missing statements.")
