"""
Common test fixtures shared by all modules.

Provides factory functions for core staking data structures:
- Asset and account identifiers
- CampaignConfig
- StakeRecord
- A fully wired in-memory staking environment (StakingEnv)

These are the foundational building blocks used by the orchestrator tests.
"""

from dataclasses import dataclass, field
from typing import Optional

from core.config import CampaignConfig
from core.ledger import StakingContext
from core.merkle import AllowlistTree
from core.schemas.records import SECONDS_PER_DAY, StakeRecord, StakeState
from orchestrator import StakingOrchestrator


DAY = SECONDS_PER_DAY
FEE = 50_000_000
RATE = 10_000_000
FAR_CUTOFF = 10**12


def make_asset_id(n: int) -> bytes:
    """Deterministic 32-byte asset id."""
    return b"\xa5" + n.to_bytes(31, "big")


def make_account(n: int) -> bytes:
    """Deterministic 32-byte account id."""
    return b"\x0c" + n.to_bytes(31, "big")


ADMIN = make_account(900)
TREASURY = make_account(901)
OWNER = make_account(1)
OTHER_OWNER = make_account(2)


def make_campaign_config(
    cutoff_timestamp: int = FAR_CUTOFF,
    fee_amount: int = FEE,
    reward_rate_per_day: int = RATE,
    hash_function: str = "keccak256",
    admin: Optional[bytes] = ADMIN,
    treasury: bytes = TREASURY,
) -> CampaignConfig:
    """Create a CampaignConfig for testing (cutoff far in the future)."""
    return CampaignConfig(
        cutoff_timestamp=cutoff_timestamp,
        fee_amount=fee_amount,
        reward_rate_per_day=reward_rate_per_day,
        hash_function=hash_function,
        admin=admin,
        treasury=treasury,
    )


def make_stake_record(
    stake_time: int = 0,
    locked_period: int = 7,
    reward_amount: int = 0,
    unstake_nft: bool = False,
    state: StakeState = StakeState.STAKED,
    asset: Optional[bytes] = None,
    owner: Optional[bytes] = None,
) -> StakeRecord:
    """Create a StakeRecord in the given state (STAKED by default)."""
    return StakeRecord(
        asset=asset or make_asset_id(1),
        owner=owner or OWNER,
        stake_time=stake_time,
        locked_period=locked_period,
        reward_amount=reward_amount,
        unstake_nft=unstake_nft,
        state=state,
    )


@dataclass
class StakingEnv:
    """In-memory campaign with funded owners, minted assets and a built tree."""
    ctx: StakingContext
    config: CampaignConfig
    orchestrator: StakingOrchestrator
    tree: AllowlistTree
    assets: list[bytes]
    owners: list[bytes] = field(default_factory=list)

    @property
    def clock(self):
        return self.ctx.clock

    @property
    def currency(self):
        return self.ctx.currency

    @property
    def custody(self):
        return self.ctx.custody

    def fee_balance(self, account: bytes) -> int:
        return self.currency.balance_of(account, self.config.fee_currency)

    def reward_balance(self, account: bytes) -> int:
        return self.currency.balance_of(account, self.config.reward_currency)

    def set_fee_balance(self, account: bytes, amount: int) -> None:
        current = self.fee_balance(account)
        self.currency.deposit(account, self.config.fee_currency, amount - current)

    def proof(self, asset: bytes) -> list[bytes]:
        return self.tree.proof_for(asset)

    def initialize(self) -> None:
        """Write the tree root as the campaign admin."""
        self.orchestrator.initialize_allowlist(ADMIN, self.tree.root, 254)

    def open_and_stake(
        self,
        asset: Optional[bytes] = None,
        owner: bytes = OWNER,
        locked_period: int = 7,
    ) -> StakeRecord:
        asset = asset or self.assets[0]
        self.orchestrator.open_stake_record(asset, owner)
        receipt = self.orchestrator.stake(asset, owner, self.proof(asset), locked_period)
        return receipt.record


def make_staking_env(
    frozen_time: int = 0,
    num_assets: int = 5,
    initialize: bool = True,
    funding: int = FEE * 100,
    config: Optional[CampaignConfig] = None,
    journal=None,
) -> StakingEnv:
    """
    Create a fully wired in-memory staking campaign.

    Owners 1 and 2 and the admin are signed in and funded; owner 1 holds
    every allowlisted asset. The reward authority may mint.
    """
    config = config or make_campaign_config()
    ctx = StakingContext.in_memory(frozen_time=frozen_time, journal=journal)
    orchestrator = StakingOrchestrator(ctx, config)

    assets = [make_asset_id(i) for i in range(1, num_assets + 1)]
    tree = AllowlistTree(
        assets,
        domain_separator=config.hash_domain_separator,
        hash_function=config.hash_function,
    )

    owners = [OWNER, OTHER_OWNER]
    for identity in [*owners, ADMIN]:
        ctx.authenticator.sign_in(identity)
        ctx.currency.deposit(identity, config.fee_currency, funding)
    for asset in assets:
        ctx.custody.mint_asset(asset, OWNER)
    ctx.currency.add_issuer(orchestrator.reward_authority, config.reward_currency)

    env = StakingEnv(
        ctx=ctx,
        config=config,
        orchestrator=orchestrator,
        tree=tree,
        assets=assets,
        owners=owners,
    )
    if initialize:
        env.initialize()
    return env
