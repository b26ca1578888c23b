"""
CLI command modules.
"""

from stake_cli.commands import allowlist, rewards

__all__ = ["allowlist", "rewards"]
