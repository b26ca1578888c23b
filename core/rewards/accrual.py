"""
Reward Accrual Engine

Pure functions computing reward entitlement from a StakeRecord and a
timestamp. No I/O, no clock access: the caller supplies `now`.

Rules:
- elapsed_days = floor((now - stake_time) / 86400), whole seconds
- accrued = elapsed_days * reward_rate_per_day (checked u64)
- Claim-time entitlement:
    never staked        -> 0
    unstake_nft is true -> frozen reward_amount
    lock not elapsed    -> 0
    otherwise           -> accrued
- Unstake-time freeze:
    lock not elapsed    -> 0 (early withdrawal forfeits reward)
    otherwise           -> accrued

Both rules go through the same lock_elapsed() predicate so the amount
frozen at unstake and the amount read at claim cannot drift apart.
"""
from __future__ import annotations

from dataclasses import dataclass

from core.rewards.numeric import checked_mul, require_u64
from core.schemas.records import SECONDS_PER_DAY, StakeRecord, StakeState


def elapsed_days(stake_time: int, now: int) -> int:
    """Whole days since stake_time; 0 if the clock reads earlier."""
    if now <= stake_time:
        return 0
    return (now - stake_time) // SECONDS_PER_DAY


def lock_elapsed(record: StakeRecord, now: int) -> bool:
    """True once `now` has reached stake_time + locked_period days."""
    return now >= record.stake_time + record.locked_period * SECONDS_PER_DAY


def accrued_reward(record: StakeRecord, now: int, reward_rate_per_day: int) -> int:
    """Reward accrued by elapsed time alone, ignoring the lock."""
    days = elapsed_days(record.stake_time, now)
    return checked_mul(days, require_u64(reward_rate_per_day, "reward_rate_per_day"))


def claim_entitlement(record: StakeRecord, now: int, reward_rate_per_day: int) -> int:
    """Amount the owner may claim at `now`."""
    if record.state is StakeState.INITIAL:
        return 0
    if record.unstake_nft:
        return record.reward_amount
    if not lock_elapsed(record, now):
        return 0
    return accrued_reward(record, now, reward_rate_per_day)


def unstake_freeze(record: StakeRecord, now: int, reward_rate_per_day: int) -> int:
    """reward_amount to freeze when the asset leaves custody at `now`."""
    if not lock_elapsed(record, now):
        return 0
    return accrued_reward(record, now, reward_rate_per_day)


@dataclass(frozen=True)
class RewardQuote:
    """Read-only entitlement preview for a record."""
    entitlement: int
    elapsed_days: int
    lock_elapsed: bool
    unlock_time: int
    state: StakeState

    def to_dict(self) -> dict:
        return {
            "entitlement": self.entitlement,
            "elapsed_days": self.elapsed_days,
            "lock_elapsed": self.lock_elapsed,
            "unlock_time": self.unlock_time,
            "state": self.state.value,
        }


def quote(record: StakeRecord, now: int, reward_rate_per_day: int) -> RewardQuote:
    return RewardQuote(
        entitlement=claim_entitlement(record, now, reward_rate_per_day),
        elapsed_days=elapsed_days(record.stake_time, now),
        lock_elapsed=lock_elapsed(record, now),
        unlock_time=record.unlock_time,
        state=record.state,
    )


__all__ = [
    "elapsed_days",
    "lock_elapsed",
    "accrued_reward",
    "claim_entitlement",
    "unstake_freeze",
    "RewardQuote",
    "quote",
]
