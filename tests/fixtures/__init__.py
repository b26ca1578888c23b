"""
Test fixtures package for staking core tests.

This package provides factory functions for creating test objects:
- common.py: identifiers, configs, records and a wired in-memory campaign

Usage:
    from fixtures import make_staking_env, OWNER

    def test_something():
        env = make_staking_env()
        env.open_and_stake()
"""

from .common import (
    ADMIN,
    DAY,
    FAR_CUTOFF,
    FEE,
    OTHER_OWNER,
    OWNER,
    RATE,
    TREASURY,
    StakingEnv,
    make_account,
    make_asset_id,
    make_campaign_config,
    make_stake_record,
    make_staking_env,
)

__all__ = [
    "ADMIN",
    "DAY",
    "FAR_CUTOFF",
    "FEE",
    "OTHER_OWNER",
    "OWNER",
    "RATE",
    "TREASURY",
    "StakingEnv",
    "make_account",
    "make_asset_id",
    "make_campaign_config",
    "make_stake_record",
    "make_staking_env",
]
