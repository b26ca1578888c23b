"""
Fee Collector

Enforces the fixed per-operation fee. Affordability is checked before
any other side effect; the transfer itself runs inside the operation's
transaction so it is undone if anything later in the operation fails.
"""

from __future__ import annotations

import logging

from core.journal.transaction import Transaction
from core.ledger.interfaces import CurrencyTransfer
from core.rewards.numeric import require_u64
from core.schemas.errors import InsufficientFee


logger = logging.getLogger(__name__)


class FeeCollector:
    """Charges `fee_amount` of `currency` to the treasury."""

    def __init__(
        self,
        currency_transfer: CurrencyTransfer,
        *,
        currency: str,
        fee_amount: int,
        treasury: bytes,
    ) -> None:
        self._transfer = currency_transfer
        self.currency = currency
        self.fee_amount = require_u64(fee_amount, "fee_amount")
        self.treasury = bytes(treasury)

    def ensure_affordable(self, payer: bytes) -> int:
        """
        Check the payer can cover the fee; returns the balance seen.

        Raises:
            InsufficientFee: If balance < fee_amount
        """
        balance = self._transfer.balance_of(payer, self.currency)
        if balance < self.fee_amount:
            raise InsufficientFee(
                f"Balance {balance} {self.currency} is below the "
                f"{self.fee_amount} {self.currency} operation fee",
                balance=balance,
                fee=self.fee_amount,
            )
        return balance

    def collect(self, tx: Transaction, payer: bytes) -> None:
        """Move the fee from `payer` to the treasury within `tx`."""
        tx.move_currency("fee", self.currency, payer, self.treasury, self.fee_amount)
        logger.debug(f"Collected {self.fee_amount} {self.currency} fee in {tx.tx_id}")


__all__ = ["FeeCollector"]
