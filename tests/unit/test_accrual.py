"""
Reward Accrual Unit Tests
Tests for core/rewards/accrual.py
"""
import pytest

from core.rewards import (
    accrued_reward,
    claim_entitlement,
    elapsed_days,
    lock_elapsed,
    quote,
    unstake_freeze,
)
from core.schemas.errors import ArithmeticOverflow
from core.schemas.records import U64_MAX, StakeState
from fixtures import DAY, RATE, make_stake_record


class TestElapsedDays:
    @pytest.mark.parametrize(
        "now,days",
        [(0, 0), (DAY - 1, 0), (DAY, 1), (DAY + 1, 1), (10 * DAY, 10), (10 * DAY + DAY - 1, 10)],
    )
    def test_whole_days(self, now, days):
        assert elapsed_days(0, now) == days

    def test_clock_before_stake_time(self):
        assert elapsed_days(1_000, 10) == 0

    def test_negative_timestamps(self):
        assert elapsed_days(-2 * DAY, 0) == 2


class TestLockElapsed:
    def test_boundary_is_inclusive(self):
        record = make_stake_record(stake_time=0, locked_period=7)
        assert not lock_elapsed(record, 7 * DAY - 1)
        assert lock_elapsed(record, 7 * DAY)

    def test_zero_lock_elapses_immediately(self):
        record = make_stake_record(stake_time=500, locked_period=0)
        assert lock_elapsed(record, 500)


class TestAccruedReward:
    def test_linear_in_days(self):
        record = make_stake_record()
        assert accrued_reward(record, 10 * DAY, RATE) == 10 * RATE

    def test_overflow_raises(self):
        record = make_stake_record()
        with pytest.raises(ArithmeticOverflow):
            accrued_reward(record, 2 * DAY, U64_MAX)

    def test_zero_rate(self):
        record = make_stake_record()
        assert accrued_reward(record, 100 * DAY, 0) == 0


class TestClaimEntitlement:
    def test_initial_record_has_nothing(self):
        record = make_stake_record(state=StakeState.INITIAL, locked_period=0)
        assert claim_entitlement(record, 1_000 * DAY, RATE) == 0

    def test_locked_stake_has_nothing(self):
        record = make_stake_record(locked_period=7)
        assert claim_entitlement(record, 3 * DAY, RATE) == 0

    def test_unlocked_stake_accrues(self):
        record = make_stake_record(locked_period=7)
        assert claim_entitlement(record, 10 * DAY, RATE) == 100_000_000

    def test_unstaked_reads_frozen_amount(self):
        record = make_stake_record(
            reward_amount=42,
            unstake_nft=True,
            state=StakeState.WITHDRAWN,
        )
        assert claim_entitlement(record, 1_000 * DAY, RATE) == 42


class TestUnstakeFreeze:
    def test_early_withdrawal_forfeits(self):
        record = make_stake_record(locked_period=7)
        assert unstake_freeze(record, 2 * DAY, RATE) == 0

    def test_after_lock_freezes_accrual(self):
        record = make_stake_record(locked_period=7)
        assert unstake_freeze(record, 9 * DAY, RATE) == 90_000_000

    def test_agrees_with_claim_rule(self):
        record = make_stake_record(locked_period=7)
        for now in (0, 6 * DAY, 7 * DAY - 1, 7 * DAY, 30 * DAY):
            assert unstake_freeze(record, now, RATE) == claim_entitlement(record, now, RATE)


class TestQuote:
    def test_quote_fields(self):
        record = make_stake_record(stake_time=0, locked_period=7)
        preview = quote(record, 8 * DAY, RATE)
        assert preview.entitlement == 8 * RATE
        assert preview.elapsed_days == 8
        assert preview.lock_elapsed is True
        assert preview.unlock_time == 7 * DAY
        assert preview.to_dict()["state"] == "staked"
