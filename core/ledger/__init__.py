"""
Ledger capabilities consumed by the staking core, their in-memory
implementations and the context that bundles them.
"""

from .context import StakingContext
from .interfaces import (
    Authenticator,
    Clock,
    CurrencyTransfer,
    CustodyTransfer,
    FrozenClock,
    RecordStore,
    SystemClock,
)
from .memory import (
    InMemoryCurrencyLedger,
    InMemoryCustody,
    InMemoryRecordStore,
    StaticAuthenticator,
)

__all__ = [
    "StakingContext",
    "Authenticator",
    "Clock",
    "CurrencyTransfer",
    "CustodyTransfer",
    "FrozenClock",
    "RecordStore",
    "SystemClock",
    "InMemoryCurrencyLedger",
    "InMemoryCustody",
    "InMemoryRecordStore",
    "StaticAuthenticator",
]
