"""
In-memory ledger collaborators.

Process-local implementations of every capability in
core.ledger.interfaces, used by the test suite and the CLI preview
commands. Each one guards its state with its own lock.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from core.schemas.errors import (
    MissingAuthorization,
    TransferFailed,
)
from core.schemas.records import AllowlistRoot, StakeRecord, record_key


def _short(identifier: bytes) -> str:
    return "0x" + bytes(identifier).hex()[:8]


class InMemoryCustody:
    """Tracks a single holder per non-fungible asset."""

    def __init__(self) -> None:
        self._holders: dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def mint_asset(self, asset: bytes, holder: bytes) -> None:
        """Create an asset held by `holder` (test setup)."""
        with self._lock:
            self._holders[bytes(asset)] = bytes(holder)

    def holder_of(self, asset: bytes) -> Optional[bytes]:
        with self._lock:
            return self._holders.get(bytes(asset))

    def move_asset(
        self,
        asset: bytes,
        source: bytes,
        destination: bytes,
        quantity: int = 1,
    ) -> None:
        if quantity != 1:
            raise TransferFailed(
                f"Non-fungible transfer requires quantity 1, got {quantity}",
                details={"asset": asset.hex(), "quantity": quantity},
            )
        with self._lock:
            holder = self._holders.get(bytes(asset))
            if holder != bytes(source):
                raise TransferFailed(
                    f"Asset {_short(asset)} is not held by {_short(source)}",
                    details={
                        "asset": asset.hex(),
                        "source": source.hex(),
                        "holder": holder.hex() if holder else None,
                    },
                )
            self._holders[bytes(asset)] = bytes(destination)


class InMemoryCurrencyLedger:
    """
    Fungible balances per (account, currency).

    Issuer accounts may go below zero: moving currency out of an issuer
    is minting, moving it back in is burning. Transfer ids of applied
    movements are remembered so a repeated id is not applied twice.
    """

    def __init__(self, issuers: Iterable[tuple[bytes, str]] = ()) -> None:
        self._balances: dict[tuple[bytes, str], int] = {}
        self._issuers: set[tuple[bytes, str]] = {(bytes(a), c) for a, c in issuers}
        self._applied: set[str] = set()
        self._lock = threading.Lock()

    def add_issuer(self, account: bytes, currency: str) -> None:
        with self._lock:
            self._issuers.add((bytes(account), currency))

    def deposit(self, account: bytes, currency: str, amount: int) -> None:
        """Credit an account out of thin air (test setup)."""
        with self._lock:
            key = (bytes(account), currency)
            self._balances[key] = self._balances.get(key, 0) + amount

    def balance_of(self, account: bytes, currency: str) -> int:
        with self._lock:
            return self._balances.get((bytes(account), currency), 0)

    def move_currency(
        self,
        currency: str,
        source: bytes,
        destination: bytes,
        amount: int,
        transfer_id: Optional[str] = None,
    ) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise TransferFailed(
                f"Invalid transfer amount: {amount!r}",
                details={"currency": currency},
            )
        if amount == 0:
            return
        with self._lock:
            if transfer_id is not None and transfer_id in self._applied:
                return
            src = (bytes(source), currency)
            dst = (bytes(destination), currency)
            available = self._balances.get(src, 0)
            if src not in self._issuers and available < amount:
                raise TransferFailed(
                    f"{_short(source)} holds {available} {currency}, needs {amount}",
                    details={
                        "currency": currency,
                        "source": source.hex(),
                        "available": available,
                        "amount": amount,
                    },
                )
            self._balances[src] = available - amount
            self._balances[dst] = self._balances.get(dst, 0) + amount
            if transfer_id is not None:
                self._applied.add(transfer_id)

    def transfer_applied(self, transfer_id: str) -> bool:
        with self._lock:
            return transfer_id in self._applied


class InMemoryRecordStore:
    """
    Stake records keyed by (asset, owner) plus the allowlist root.

    Records are copied on the way in and out, so callers never mutate
    stored state in place.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[bytes, bytes], StakeRecord] = {}
        self._root: Optional[AllowlistRoot] = None
        self._lock = threading.Lock()

    def get_record(self, asset: bytes, owner: bytes) -> Optional[StakeRecord]:
        with self._lock:
            record = self._records.get(record_key(asset, owner))
            return record.model_copy(deep=True) if record is not None else None

    def put_record(self, record: StakeRecord) -> None:
        with self._lock:
            self._records[record.key] = record.model_copy(deep=True)

    def records(self) -> list[StakeRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values()]

    def get_root(self) -> Optional[AllowlistRoot]:
        with self._lock:
            return self._root

    def put_root(self, root: AllowlistRoot) -> None:
        with self._lock:
            self._root = root


class StaticAuthenticator:
    """Treats a fixed set of identities as verified signers."""

    def __init__(self, signers: Iterable[bytes] = ()) -> None:
        self._signers: set[bytes] = {bytes(s) for s in signers}
        self._lock = threading.Lock()

    def sign_in(self, identity: bytes) -> None:
        with self._lock:
            self._signers.add(bytes(identity))

    def sign_out(self, identity: bytes) -> None:
        with self._lock:
            self._signers.discard(bytes(identity))

    def require(self, claimed: bytes) -> None:
        with self._lock:
            verified = bytes(claimed) in self._signers
        if not verified:
            raise MissingAuthorization(
                f"Caller {_short(claimed)} did not authenticate",
                details={"caller": bytes(claimed).hex()},
            )


__all__ = [
    "InMemoryCustody",
    "InMemoryCurrencyLedger",
    "InMemoryRecordStore",
    "StaticAuthenticator",
]
