"""
CLI Configuration

Resolves the RuntimeConfig used by CLI commands.

Priority (highest to lowest):
1. STAKE_* environment variables (and .env)
2. Config file given with --config
3. ./stake.yaml in the working directory
4. Built-in defaults
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from core.config import RuntimeConfig, get_config_template


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "stake.yaml"


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """Return the config file to load, if any."""
    if explicit is not None:
        return explicit
    local = Path.cwd() / DEFAULT_CONFIG_FILE
    if local.exists():
        return local
    return None


def load_config(path: Optional[Path] = None) -> RuntimeConfig:
    """
    Load the runtime configuration for the CLI.

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ConfigurationException: If any value is invalid
    """
    config_path = find_config_file(path)
    if config_path is None:
        return RuntimeConfig.from_env()
    logger.debug(f"Loading configuration from {config_path}")
    return RuntimeConfig.from_yaml(config_path).with_env_overrides()


def get_default_config_template() -> str:
    return get_config_template()
