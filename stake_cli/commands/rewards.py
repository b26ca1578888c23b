"""
CLI Rewards Command

Preview the claimable entitlement of a stake with the configured daily
rate, without touching any ledger.

Usage:
    stake-cli quote --stake-time T --locked-period D [--now N]
    stake-cli quote --stake-time T --locked-period D --unstaked --reward-amount X
"""

from __future__ import annotations

import json
from argparse import Namespace

from core.ledger import SystemClock
from core.rewards import quote
from core.schemas.records import StakeRecord, StakeState


EXIT_SUCCESS = 0

_PLACEHOLDER_ID = bytes(32)


def quote_cmd(args: Namespace) -> int:
    """Print the entitlement preview."""
    campaign = args.runtime_config.campaign
    now = args.now if args.now is not None else SystemClock().now()

    record = StakeRecord(
        asset=_PLACEHOLDER_ID,
        owner=_PLACEHOLDER_ID,
        stake_time=args.stake_time,
        locked_period=args.locked_period,
        reward_amount=args.reward_amount if args.unstaked else 0,
        unstake_nft=args.unstaked,
        state=StakeState.WITHDRAWN if args.unstaked else StakeState.STAKED,
    )
    preview = quote(record, now, campaign.reward_rate_per_day)

    if args.json:
        data = preview.to_dict()
        data["now"] = now
        data["reward_rate_per_day"] = campaign.reward_rate_per_day
        print(json.dumps(data, indent=2))
    else:
        print(f"Entitlement:  {preview.entitlement} {campaign.reward_currency}")
        print(f"Elapsed days: {preview.elapsed_days}")
        print(f"Unlock time:  {preview.unlock_time}")
        print(f"Lock elapsed: {'yes' if preview.lock_elapsed else 'no'}")
    return EXIT_SUCCESS
