"""
Runtime Configuration Module

Provides campaign parameters and configuration loading for the staking core.
"""

from .runtime import (
    CampaignConfig,
    RuntimeConfig,
    get_config_template,
    get_default_config,
)

__all__ = [
    "CampaignConfig",
    "RuntimeConfig",
    "get_config_template",
    "get_default_config",
]
