# src/tokenstats/application/balances.py
"""
Balance Resolver - Wallet Balances and the Decimals Policy

Resolves a wallet's balance of one mint by listing its token accounts and
summing each account's balance. Also owns the decimals policy shared with the
total-supply fetch: an amount whose decimals are missing or out of range is
rejected unless DEFAULT_TOKEN_DECIMALS is configured.

Files that USE this module:
- tokenstats.application.stats_service (founder and burn wallet balances, supply scaling)
- tests.test_balances (unit tests)

Files that this module USES:
- tokenstats.adapters.providers.base (TokenAccountSource interface)
- tokenstats.shared.validators (validate_decimals)
"""
import logging
import threading
from decimal import Decimal
from typing import Optional

from tokenstats.adapters.providers.base import TokenAccountSource
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import ZERO, BalanceResult, RawTokenAmount
from tokenstats.shared.validators import validate_decimals

log = logging.getLogger(__name__)


def scale_amount(
    raw: RawTokenAmount,
    default_decimals: Optional[int],
    source: str,
) -> Decimal:
    """
    Convert a raw amount to token units under the decimals policy.

    Args:
        raw: Raw amount with the decimals reported upstream
        default_decimals: Configured fallback exponent (None = no fallback)
        source: What the amount belongs to, for errors and logs

    Returns:
        raw.amount / 10**decimals

    Raises:
        DataUnavailableError: If decimals are missing or invalid and no fallback is configured
    """
    if validate_decimals(raw.decimals):
        return raw.to_decimal()

    if default_decimals is None:
        raise DataUnavailableError(source, f"missing or invalid decimals ({raw.decimals!r})")

    log.warning(
        "%s reported decimals %r; using DEFAULT_TOKEN_DECIMALS=%d",
        source, raw.decimals, default_decimals,
    )
    return raw.to_decimal(default_decimals)


class BalanceResolver:
    def __init__(self, source: TokenAccountSource, default_decimals: Optional[int] = None):
        """
        Initialize resolver.

        Args:
            source: RPC source listing accounts and reading balances
            default_decimals: Fallback exponent for accounts without valid decimals
        """
        self.source = source
        self.default_decimals = default_decimals

    def wallet_balance(
        self,
        wallet: str,
        mint: str,
        cancel: Optional[threading.Event] = None,
    ) -> BalanceResult:
        """
        Sum the balance of every token account `wallet` holds for `mint`.

        Accounts whose balance cannot be read or scaled are skipped and counted.
        A wallet without token accounts has a zero balance.

        Args:
            wallet: Owner address
            mint: Token mint
            cancel: Set by the caller once it stops waiting; checked between accounts

        Raises:
            DataUnavailableError: If the wallet's accounts cannot be listed, or cancel was set
        """
        accounts = self.source.token_accounts_by_owner(wallet, mint)

        total = ZERO
        skipped = 0
        for account in accounts:
            if cancel is not None and cancel.is_set():
                raise DataUnavailableError(f"balance of {wallet}", "abandoned by caller", retryable=False)
            try:
                raw = self.source.token_account_balance(account)
                total += scale_amount(raw, self.default_decimals, f"token account {account}")
            except DataUnavailableError as e:
                skipped += 1
                log.warning("Skipping token account %s of %s: %s", account, wallet, e)

        if skipped:
            log.warning("Balance of %s excludes %d of %d account(s)", wallet, skipped, len(accounts))
        log.debug("Balance of %s: %s across %d account(s)", wallet, total, len(accounts))
        return BalanceResult(
            wallet=wallet,
            balance=total,
            accounts_total=len(accounts),
            accounts_skipped=skipped,
        )
