"""
Staking Context

Provides dependency injection for the orchestrator, containing:
- Clock (can be frozen for determinism)
- Custody and currency transfer collaborators
- Record store
- Authenticator
- Operation journal

The orchestrator receives a context rather than reaching for ledger
services itself, which keeps every collaborator substitutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.journal.recorder import OperationJournal

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


@dataclass
class StakingContext:
    """
    Collaborators of one staking campaign.

    Usage:
        ctx = StakingContext.in_memory(frozen_time=0)
        orchestrator = StakingOrchestrator(ctx, campaign_config)
    """

    clock: Clock
    custody: CustodyTransfer
    currency: CurrencyTransfer
    store: RecordStore
    authenticator: Authenticator
    journal: OperationJournal = field(default_factory=OperationJournal)

    @classmethod
    def in_memory(
        cls,
        *,
        frozen_time: Optional[int] = None,
        journal: Optional[OperationJournal] = None,
    ) -> "StakingContext":
        """
        Context backed entirely by in-memory collaborators.

        Args:
            frozen_time: If given, use a FrozenClock starting here;
                otherwise the system clock.
            journal: Journal to use (fresh in-memory journal by default)
        """
        clock: Clock
        if frozen_time is not None:
            clock = FrozenClock(frozen_time)
        else:
            clock = SystemClock()

        return cls(
            clock=clock,
            custody=InMemoryCustody(),
            currency=InMemoryCurrencyLedger(),
            store=InMemoryRecordStore(),
            authenticator=StaticAuthenticator(),
            journal=journal if journal is not None else OperationJournal(),
        )
