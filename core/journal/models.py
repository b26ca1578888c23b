"""
Journal Models

Schemas for the write-ahead operation journal. Every stake, unstake,
claim and root initialization is one JournalEntry; every currency or
asset movement it performs is one Effect inside it.

Key Design Principles:
1. An effect is journaled BEFORE it is executed
2. The record image is journaled BEFORE it is written to the store
3. entry_hash covers the committed content and enables tamper checks
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import hash_canonical, to_hex
from core.schemas.errors import StakeError
from core.schemas.records import AllowlistRoot, Identifier, StakeRecord, U64_MAX


EffectKind = Literal["currency", "asset"]


class TxStatus(str, Enum):
    """
    Journal entry status.

    PENDING -> COMMITTING -> COMMITTED
    PENDING -> ROLLED_BACK
    """
    PENDING = "pending"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Effect(BaseModel):
    """
    One side effect of an operation.

    Currency effects carry `currency`; asset effects carry `asset`.
    The compensation of an effect is the same movement reversed.
    `effect_id` is handed to the currency ledger as an idempotency key, so
    an effect whose outcome was never journaled can be settled later.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    effect_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: EffectKind = Field(..., description="Type of movement")
    label: str = Field(..., description="Purpose, e.g. fee, custody_in, reward")
    source: Identifier
    destination: Identifier
    amount: int = Field(..., ge=0, le=U64_MAX)
    currency: Optional[str] = Field(default=None)
    asset: Optional[Identifier] = Field(default=None)
    applied: bool = Field(default=False)
    compensated: bool = Field(default=False)

    def reversed(self) -> "Effect":
        """The movement that undoes this effect."""
        return self.model_copy(
            update={
                "effect_id": f"{self.effect_id}-undo",
                "label": f"undo_{self.label}",
                "source": self.destination,
                "destination": self.source,
                "applied": False,
                "compensated": False,
            }
        )


class JournalEntry(BaseModel):
    """
    Write-ahead journal entry for one operation.

    Timestamps come from the campaign's trusted clock.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    tx_id: str = Field(..., description="Unique transaction identifier")
    operation: str = Field(..., description="Operation name")
    key: str = Field(..., description="Lock key the operation ran under")
    timestamp: int = Field(..., description="Clock reading at operation start")
    status: TxStatus = Field(default=TxStatus.PENDING)
    effects: list[Effect] = Field(default_factory=list)
    record_image: Optional[StakeRecord] = Field(
        default=None,
        description="Record to write on commit",
    )
    root_image: Optional[AllowlistRoot] = Field(
        default=None,
        description="Allowlist root to write on commit",
    )
    error: Optional[StakeError] = Field(default=None)
    entry_hash: Optional[str] = Field(
        default=None,
        description="Hash of canonical entry content (0x-prefixed)",
    )

    @property
    def is_finished(self) -> bool:
        return self.status in (TxStatus.COMMITTED, TxStatus.ROLLED_BACK)

    @property
    def applied_effects(self) -> list[Effect]:
        return [e for e in self.effects if e.applied and not e.compensated]

    def compute_hash(self) -> "JournalEntry":
        """Recompute entry_hash over everything but the hash itself."""
        content = self.model_dump(exclude={"entry_hash"})
        self.entry_hash = to_hex(hash_canonical(content))
        return self


__all__ = [
    "EffectKind",
    "TxStatus",
    "Effect",
    "JournalEntry",
]
