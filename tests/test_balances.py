"""
Balance Resolver Tests - Wallet Sums and the Decimals Policy

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.application.balances (BalanceResolver, scale_amount)
"""
import threading
from decimal import Decimal

import pytest

from conftest import FOUNDER, FOUNDER_ACCOUNT, MINT, FakeRpc, unavailable
from tokenstats.application.balances import BalanceResolver, scale_amount
from tokenstats.domain.errors import DataUnavailableError
from tokenstats.domain.models import RawTokenAmount

SECOND_ACCOUNT = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
THIRD_ACCOUNT = "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH"


class TestScaleAmount:
    def test_reported_decimals(self):
        assert scale_amount(RawTokenAmount(1_500_000, 6), None, "x") == Decimal("1.5")

    def test_missing_decimals_rejected_without_default(self):
        with pytest.raises(DataUnavailableError, match="decimals"):
            scale_amount(RawTokenAmount(1_500_000, None), None, "x")

    def test_out_of_range_decimals_rejected(self):
        with pytest.raises(DataUnavailableError):
            scale_amount(RawTokenAmount(1, 42), None, "x")

    def test_default_decimals_used_and_logged(self, caplog):
        assert scale_amount(RawTokenAmount(2_000_000_000, None), 9, "x") == Decimal(2)
        assert "DEFAULT_TOKEN_DECIMALS=9" in caplog.text


class TestBalanceResolver:
    def test_sums_every_account(self):
        rpc = FakeRpc()
        rpc.accounts[FOUNDER] = [FOUNDER_ACCOUNT, SECOND_ACCOUNT]
        rpc.balances[SECOND_ACCOUNT] = RawTokenAmount(amount=250_000, decimals=6)

        result = BalanceResolver(rpc).wallet_balance(FOUNDER, MINT)

        assert result.balance == Decimal("100000000.25")
        assert result.accounts_total == 2
        assert result.accounts_skipped == 0

    def test_failed_and_undecodable_accounts_skipped(self):
        rpc = FakeRpc()
        rpc.accounts[FOUNDER] = [FOUNDER_ACCOUNT, SECOND_ACCOUNT, THIRD_ACCOUNT]
        rpc.balances[SECOND_ACCOUNT] = unavailable("rpc")
        rpc.balances[THIRD_ACCOUNT] = RawTokenAmount(amount=5, decimals=None)

        result = BalanceResolver(rpc).wallet_balance(FOUNDER, MINT)

        assert result.balance == Decimal(100_000_000)
        assert result.accounts_total == 3
        assert result.accounts_skipped == 2

    def test_default_decimals_applied_per_account(self):
        rpc = FakeRpc()
        rpc.accounts[FOUNDER] = [SECOND_ACCOUNT]
        rpc.balances[SECOND_ACCOUNT] = RawTokenAmount(amount=3_000, decimals=None)

        result = BalanceResolver(rpc, default_decimals=3).wallet_balance(FOUNDER, MINT)

        assert result.balance == Decimal(3)
        assert result.accounts_skipped == 0

    def test_wallet_without_accounts(self):
        rpc = FakeRpc()
        rpc.accounts[FOUNDER] = []
        assert BalanceResolver(rpc).wallet_balance(FOUNDER, MINT).balance == 0

    def test_listing_failure_propagates(self):
        rpc = FakeRpc()
        rpc.accounts_error = unavailable("rpc")
        with pytest.raises(DataUnavailableError):
            BalanceResolver(rpc).wallet_balance(FOUNDER, MINT)

    def test_cancelled_resolution_reads_no_balances(self):
        rpc = FakeRpc()
        rpc.balances[FOUNDER_ACCOUNT] = unavailable("rpc")
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(DataUnavailableError, match="abandoned"):
            BalanceResolver(rpc).wallet_balance(FOUNDER, MINT, cancel)
