"""
Ledger Capabilities

Narrow typed contracts for every collaborator the staking core depends on.
The orchestrator talks to the surrounding ledger/runtime only through
these, so any of them can be swapped for an in-memory fake in tests.

- Clock: trusted time source (Unix seconds)
- CustodyTransfer: moves the staked asset in and out of the vault
- CurrencyTransfer: moves fees and mints/transfers reward currency
- RecordStore: persisted stake records and the allowlist root
- Authenticator: confirms the runtime verified the caller's key
"""

from __future__ import annotations

import time
from typing import Optional, Protocol, runtime_checkable

from core.schemas.records import AllowlistRoot, StakeRecord


@runtime_checkable
class Clock(Protocol):
    """
    Protocol for the trusted time source.

    Can be real time or frozen for deterministic testing.
    """
    def now(self) -> int:
        """Current Unix timestamp in whole seconds."""
        ...


class SystemClock:
    """Real-time clock implementation."""

    def now(self) -> int:
        return int(time.time())


class FrozenClock:
    """
    Frozen clock for deterministic testing.

    Only moves when told to.
    """

    def __init__(self, frozen_time: int = 0) -> None:
        self._time = frozen_time

    def now(self) -> int:
        return self._time

    def set_time(self, timestamp: int) -> None:
        """Set the frozen time."""
        self._time = timestamp

    def advance(self, seconds: int = 0, *, days: int = 0) -> int:
        """Move the clock forward and return the new time."""
        self._time += seconds + days * 86_400
        return self._time


@runtime_checkable
class CustodyTransfer(Protocol):
    """Protocol for moving a non-fungible asset between holders."""

    def move_asset(
        self,
        asset: bytes,
        source: bytes,
        destination: bytes,
        quantity: int = 1,
    ) -> None:
        """Move `quantity` of `asset`; raises TransferFailed on rejection."""
        ...

    def holder_of(self, asset: bytes) -> Optional[bytes]:
        """Current holder of the asset, if known."""
        ...


@runtime_checkable
class CurrencyTransfer(Protocol):
    """Protocol for moving fungible balances (fees and rewards)."""

    def move_currency(
        self,
        currency: str,
        source: bytes,
        destination: bytes,
        amount: int,
        transfer_id: Optional[str] = None,
    ) -> None:
        """
        Move `amount` of `currency`; raises TransferFailed on rejection.

        A transfer_id seen before is a no-op, so a retried movement is
        applied at most once.
        """
        ...

    def transfer_applied(self, transfer_id: str) -> bool:
        """True if the movement with this transfer_id has taken effect."""
        ...

    def balance_of(self, account: bytes, currency: str) -> int:
        """Available balance of `account` in `currency`."""
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for persisted stake records and the allowlist root."""

    def get_record(self, asset: bytes, owner: bytes) -> Optional[StakeRecord]:
        ...

    def put_record(self, record: StakeRecord) -> None:
        """Insert or overwrite a record."""
        ...

    def get_root(self) -> Optional[AllowlistRoot]:
        ...

    def put_root(self, root: AllowlistRoot) -> None:
        ...


@runtime_checkable
class Authenticator(Protocol):
    """
    Protocol for caller authentication.

    The surrounding runtime verifies signatures; the core only asks
    whether the claimed identity has been verified for this call.
    """

    def require(self, claimed: bytes) -> None:
        """Raise MissingAuthorization unless `claimed` is authenticated."""
        ...


__all__ = [
    "Clock",
    "SystemClock",
    "FrozenClock",
    "CustodyTransfer",
    "CurrencyTransfer",
    "RecordStore",
    "Authenticator",
]
