"""
Reward accrual: time-weighted, integer-only entitlement computation.
"""
from .accrual import (
    RewardQuote,
    accrued_reward,
    claim_entitlement,
    elapsed_days,
    lock_elapsed,
    quote,
    unstake_freeze,
)
from .numeric import checked_add, checked_mul, checked_sub, require_u64

__all__ = [
    "RewardQuote",
    "accrued_reward",
    "claim_entitlement",
    "elapsed_days",
    "lock_elapsed",
    "quote",
    "unstake_freeze",
    "checked_add",
    "checked_mul",
    "checked_sub",
    "require_u64",
]
