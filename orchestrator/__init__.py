"""
Staking Orchestrator

Entry points of a staking campaign, composed from the core components
(allowlist verifier, reward accrual, fee collector, transaction journal).

Public API:
- StakingOrchestrator: open/initialize/stake/unstake/claim plus queries
- OperationReceipt: outcome of a committed operation
- derive_authority: vault and reward authority derivation
"""

from orchestrator.staking import (
    REWARD_AUTHORITY_SEED,
    VAULT_AUTHORITY_SEED,
    OperationReceipt,
    StakingOrchestrator,
    derive_authority,
)

__all__ = [
    "StakingOrchestrator",
    "OperationReceipt",
    "derive_authority",
    "VAULT_AUTHORITY_SEED",
    "REWARD_AUTHORITY_SEED",
]
