"""
Schemas
File: records.py

Purpose: Persistent data model of a staking campaign.

- AllowlistRoot: the 256-bit allowlist commitment (one per campaign)
- StakeRecord: per-(asset, owner) staking state
- Identifier: 32-byte asset / account identifier type

Numeric fields carry the widths of the ledger they mirror and are
range-checked on construction AND on assignment.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)


IDENTIFIER_SIZE = 32

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U64_MAX = 2**64 - 1

SECONDS_PER_DAY = 86_400


def coerce_identifier(value: Any) -> bytes:
    """
    Accept raw 32 bytes or a 0x-prefixed 64-character hex string.

    Raises:
        ValueError: On any other shape or length
    """
    if isinstance(value, str):
        if not value.startswith("0x"):
            raise ValueError("hex identifiers must start with '0x'")
        try:
            value = bytes.fromhex(value[2:])
        except ValueError as e:
            raise ValueError(f"invalid hex identifier: {e}") from e
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
        if len(value) != IDENTIFIER_SIZE:
            raise ValueError(
                f"identifier must be {IDENTIFIER_SIZE} bytes, got {len(value)}"
            )
        return value
    raise ValueError(f"identifier must be bytes or hex string, got {type(value).__name__}")


def _identifier_to_hex(value: bytes) -> str:
    return "0x" + value.hex()


Identifier = Annotated[
    bytes,
    BeforeValidator(coerce_identifier),
    PlainSerializer(_identifier_to_hex, return_type=str, when_used="json"),
]


class StakeState(str, Enum):
    """
    Lifecycle of an (asset, owner) pair.

    INITIAL -> STAKED -> WITHDRAWN -> STAKED -> ...
    Claimability is an accrual attribute, not a state.
    """
    INITIAL = "initial"
    STAKED = "staked"
    WITHDRAWN = "withdrawn"


class AllowlistRoot(BaseModel):
    """The allowlist commitment written once per campaign."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: Identifier = Field(..., description="256-bit Merkle root")
    bump: int = Field(
        default=0,
        ge=0,
        le=255,
        strict=True,
        description="Derivation salt, opaque to core logic",
    )
    authority: Optional[Identifier] = Field(
        default=None,
        description="Administrator that wrote the root",
    )


class StakeRecord(BaseModel):
    """
    Staking state of one asset for one owner.

    Invariants:
    - owner and asset never change after creation
    - stake_time only ever comes from the trusted clock
    - reward_amount is a non-negative u64; once unstake_nft is set it is
      only decreased (by claims)
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    asset: Identifier = Field(..., frozen=True)
    owner: Identifier = Field(..., frozen=True)
    stake_time: int = Field(default=0, ge=I64_MIN, le=I64_MAX, strict=True)
    reward_amount: int = Field(default=0, ge=0, le=U64_MAX, strict=True)
    locked_period: int = Field(default=0, ge=I32_MIN, le=I32_MAX, strict=True)
    unstake_nft: bool = Field(default=False, strict=True)
    state: StakeState = Field(default=StakeState.INITIAL)

    @classmethod
    def opened(cls, asset: bytes, owner: bytes) -> "StakeRecord":
        """A freshly opened record: owner bound, every other field zeroed."""
        return cls(asset=asset, owner=owner)

    @property
    def key(self) -> tuple[bytes, bytes]:
        return record_key(self.asset, self.owner)

    @property
    def unlock_time(self) -> int:
        """Timestamp at which the lock period has elapsed."""
        return self.stake_time + self.locked_period * SECONDS_PER_DAY

    @property
    def is_staked(self) -> bool:
        return self.state is StakeState.STAKED


def record_key(asset: bytes, owner: bytes) -> tuple[bytes, bytes]:
    """Storage key of a stake record."""
    return (bytes(asset), bytes(owner))


__all__ = [
    "IDENTIFIER_SIZE",
    "I32_MIN",
    "I32_MAX",
    "I64_MIN",
    "I64_MAX",
    "U64_MAX",
    "SECONDS_PER_DAY",
    "Identifier",
    "coerce_identifier",
    "StakeState",
    "AllowlistRoot",
    "StakeRecord",
    "record_key",
]
