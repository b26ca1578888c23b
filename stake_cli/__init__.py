"""
Stake CLI

Offline tooling for staking campaigns: allowlist trees and proofs,
entitlement previews and configuration.

Usage:
    python -m stake_cli tree assets.txt --out allowlist.json
    python -m stake_cli proof assets.txt 0x<asset>
    python -m stake_cli verify --root 0x<root> --asset 0x<asset> --proof 0x<sibling>
    python -m stake_cli quote --stake-time 0 --locked-period 7 --now 864000
    python -m stake_cli config --init
"""

__version__ = "0.1.0"
