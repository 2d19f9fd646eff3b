"""The ledger: every configured account, grouped by institution."""

from __future__ import annotations

from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, Optional, Union

from statements.core.config import settings
from statements.core.errors import ConfigurationError, StatementsError
from statements.core.models import AccountResult, Statement, StatementStatus
from statements.logging_setup import get_logger
from statements.services.account import Account

logger = get_logger(__name__)

AccountKey = tuple[str, str]
AccountRef = Union[Account, AccountKey, str]


class Ledger:
    """Ordered collection of accounts.

    Accounts share no mutable state, so their histories can be computed in
    parallel; a failure in one account never affects another.
    """

    def __init__(
        self,
        accounts: Iterable[Account] = (),
        *,
        errors: Optional[dict[str, ConfigurationError]] = None,
    ) -> None:
        self._accounts: dict[AccountKey, Account] = {}
        # configuration errors for accounts that could not be built, by config key
        self.errors: dict[str, ConfigurationError] = dict(errors or {})
        for account in accounts:
            self.add(account)

    def add(self, account: Account) -> None:
        if account.key in self._accounts:
            raise ConfigurationError(
                f"Account `{account.name}` is duplicated for institution `{account.institution}`. "
                "Account names must be unique within an institution.",
            )
        self._accounts[account.key] = account

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self):
        return iter(self.accounts)

    @property
    def accounts(self) -> list[Account]:
        return [self._accounts[key] for key in sorted(self._accounts)]

    def institutions(self) -> "OrderedDict[str, list[Account]]":
        grouped: OrderedDict[str, list[Account]] = OrderedDict()
        for account in self.accounts:
            grouped.setdefault(account.institution, []).append(account)
        return grouped

    def list_accounts(self) -> list[AccountKey]:
        return [account.key for account in self.accounts]

    def get(self, ref: AccountRef) -> Account:
        """Look an account up by object, ``(institution, name)`` key, ``"institution/name"`` or bare name.

        Raises:
            KeyError: no account, or a bare name shared by several institutions.
        """
        if isinstance(ref, Account):
            return ref
        if isinstance(ref, tuple):
            return self._accounts[ref]

        if "/" in ref:
            institution, _, name = ref.partition("/")
            key = (institution, name)
            if key in self._accounts:
                return self._accounts[key]

        matches = [a for a in self.accounts if a.name == ref]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            options = ", ".join(f"{a.institution}/{a.name}" for a in matches)
            raise KeyError(f"Account name `{ref}` is ambiguous: {options}")
        raise KeyError(f"No account `{ref}`")

    # ---- per-account query surface ----

    def history(self, ref: AccountRef, now: Optional[date] = None) -> list[Statement]:
        return self.get(ref).full_log(now)

    def upcoming(self, ref: AccountRef, now: Optional[date] = None) -> Statement:
        return self.get(ref).next_due(now)

    def recent(self, ref: AccountRef, now: Optional[date] = None) -> Optional[Statement]:
        return self.get(ref).most_recent(now)

    # ---- whole-ledger views ----

    def result(self, ref: AccountRef, now: Optional[date] = None) -> AccountResult:
        """History of one account, with any scan error captured instead of raised."""
        account = self.get(ref)
        now = now or date.today()
        result = AccountResult(institution=account.institution, account=account.name)
        try:
            result.statements = account.history(now)
        except (StatementsError, OSError) as exc:
            logger.warning("Could not compute statements for %s: %s", account, exc)
            result.error = exc
        return result

    def scan_all(self, now: Optional[date] = None, max_workers: Optional[int] = None) -> list[AccountResult]:
        """Compute every account's history, one worker per account, in ledger order."""
        now = now or date.today()
        accounts = self.accounts
        if not accounts:
            return []
        workers = max(1, min(max_workers or settings.MAX_WORKERS, len(accounts)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda account: self.result(account, now), accounts))

    def upcoming_all(self, now: Optional[date] = None) -> list[tuple[Account, date]]:
        """Next statement date of every account, soonest first. Needs no filesystem access."""
        now = now or date.today()
        rows = [(account, account.next_statement_date(now)) for account in self.accounts]
        rows.sort(key=lambda row: (row[1], row[0].key))
        return rows

    def missing_all(self, now: Optional[date] = None, max_workers: Optional[int] = None) -> list[AccountResult]:
        """Per-account missing statements; accounts that failed keep their error."""
        results = []
        for result in self.scan_all(now, max_workers):
            result.statements = [s for s in result.statements if s.status is StatementStatus.MISSING]
            results.append(result)
        return results
