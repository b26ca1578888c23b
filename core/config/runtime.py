"""
Runtime Configuration

Campaign parameters and service setup for the staking core.

CampaignConfig is immutable and handed to the orchestrator at
construction time, so campaigns with different parameters can run side
by side in one process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.crypto.hashing import HASH_FUNCTIONS, HashFunction, from_hex32, get_hash_function, to_hex
from core.merkle.merkle_proofs import DEFAULT_DOMAIN_SEPARATOR
from core.schemas.errors import ConfigurationException
from core.schemas.records import I64_MAX, I64_MIN, IDENTIFIER_SIZE, U64_MAX

load_dotenv()


ENV_PREFIX = "STAKE_"

# 2022-02-18 17:00:00 UTC
DEFAULT_CUTOFF_TIMESTAMP = 1_645_203_600
# 0.05 SOL in lamports
DEFAULT_FEE_AMOUNT = 50_000_000
# 10 reward tokens with 6 decimals
DEFAULT_REWARD_RATE_PER_DAY = 10_000_000

DEFAULT_TREASURY = bytes(IDENTIFIER_SIZE)


def _parse_identifier(value: Any, name: str) -> Optional[bytes]:
    if value is None or value == "":
        return None
    if isinstance(value, (bytes, bytearray)):
        data = bytes(value)
        if len(data) != IDENTIFIER_SIZE:
            raise ConfigurationException(
                f"{name} must be {IDENTIFIER_SIZE} bytes, got {len(data)}"
            )
        return data
    try:
        return from_hex32(str(value))
    except ValueError as e:
        raise ConfigurationException(f"Invalid {name}: {e}") from e


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationException(f"{name} must be an integer, got a boolean")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationException(f"{name} must be an integer: {value!r}") from e


@dataclass(frozen=True)
class CampaignConfig:
    """
    Policy values of one staking campaign.

    Attributes:
        cutoff_timestamp: After this Unix time staking is permanently closed
        fee_amount: Fixed fee per state-changing operation (base currency units)
        reward_rate_per_day: Reward units accrued per whole staked day
        hash_domain_separator: Prefix hashed into every allowlist leaf
        hash_function: "keccak256" or "sha256"
        admin: Only identity allowed to initialize the allowlist root
        treasury: Destination of collected fees
        fee_currency: Base network currency the fee is paid in
        reward_currency: Currency minted to owners on claim
    """
    cutoff_timestamp: int = DEFAULT_CUTOFF_TIMESTAMP
    fee_amount: int = DEFAULT_FEE_AMOUNT
    reward_rate_per_day: int = DEFAULT_REWARD_RATE_PER_DAY
    hash_domain_separator: bytes = DEFAULT_DOMAIN_SEPARATOR
    hash_function: str = "keccak256"
    admin: Optional[bytes] = None
    treasury: bytes = DEFAULT_TREASURY
    fee_currency: str = "SOL"
    reward_currency: str = "LP"

    def __post_init__(self) -> None:
        if not I64_MIN <= self.cutoff_timestamp <= I64_MAX:
            raise ConfigurationException("cutoff_timestamp must fit a signed 64-bit integer")
        for name in ("fee_amount", "reward_rate_per_day"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
                raise ConfigurationException(f"{name} must be an unsigned 64-bit integer")
        if not isinstance(self.hash_domain_separator, bytes) or not self.hash_domain_separator:
            raise ConfigurationException("hash_domain_separator must be non-empty bytes")
        if self.hash_function not in HASH_FUNCTIONS:
            raise ConfigurationException(
                f"hash_function must be one of {sorted(HASH_FUNCTIONS)}, "
                f"got {self.hash_function!r}"
            )
        if self.admin is not None and len(self.admin) != IDENTIFIER_SIZE:
            raise ConfigurationException(f"admin must be {IDENTIFIER_SIZE} bytes")
        if len(self.treasury) != IDENTIFIER_SIZE:
            raise ConfigurationException(f"treasury must be {IDENTIFIER_SIZE} bytes")
        if not self.fee_currency or not self.reward_currency:
            raise ConfigurationException("currency names must be non-empty")

    @property
    def hash_fn(self) -> HashFunction:
        return get_hash_function(self.hash_function)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignConfig":
        """Build from plain data (hex identifiers, str separator)."""
        kwargs: dict[str, Any] = {}
        for name in ("cutoff_timestamp", "fee_amount", "reward_rate_per_day"):
            if data.get(name) is not None:
                kwargs[name] = _parse_int(data[name], name)
        separator = data.get("hash_domain_separator")
        if separator is not None:
            kwargs["hash_domain_separator"] = (
                separator if isinstance(separator, bytes) else str(separator).encode("utf-8")
            )
        for name in ("hash_function", "fee_currency", "reward_currency"):
            if data.get(name) is not None:
                kwargs[name] = str(data[name])
        if data.get("admin") is not None:
            kwargs["admin"] = _parse_identifier(data["admin"], "admin")
        if data.get("treasury") is not None:
            kwargs["treasury"] = _parse_identifier(data["treasury"], "treasury")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cutoff_timestamp": self.cutoff_timestamp,
            "fee_amount": self.fee_amount,
            "reward_rate_per_day": self.reward_rate_per_day,
            "hash_domain_separator": self.hash_domain_separator.decode("utf-8", errors="replace"),
            "hash_function": self.hash_function,
            "admin": to_hex(self.admin) if self.admin is not None else None,
            "treasury": to_hex(self.treasury),
            "fee_currency": self.fee_currency,
            "reward_currency": self.reward_currency,
        }


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    campaign: CampaignConfig = field(default_factory=CampaignConfig)
    journal_path: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - STAKE_CUTOFF_TIMESTAMP: Unix time after which staking closes
        - STAKE_FEE_AMOUNT: Fee per operation in base currency units
        - STAKE_REWARD_RATE_PER_DAY: Reward units per staked day
        - STAKE_DOMAIN_SEPARATOR: Allowlist leaf domain separator
        - STAKE_HASH_FUNCTION: keccak256 or sha256
        - STAKE_ADMIN: 0x-prefixed administrator identity
        - STAKE_TREASURY: 0x-prefixed treasury identity
        - STAKE_FEE_CURRENCY / STAKE_REWARD_CURRENCY: Currency names
        - STAKE_JOURNAL_PATH: JSON-lines journal file
        - STAKE_LOG_LEVEL / STAKE_LOG_FILE: Logging setup
        """
        overrides: dict[str, Any] = {}

        campaign_vars = {
            "CUTOFF_TIMESTAMP": "cutoff_timestamp",
            "FEE_AMOUNT": "fee_amount",
            "REWARD_RATE_PER_DAY": "reward_rate_per_day",
            "DOMAIN_SEPARATOR": "hash_domain_separator",
            "HASH_FUNCTION": "hash_function",
            "ADMIN": "admin",
            "TREASURY": "treasury",
            "FEE_CURRENCY": "fee_currency",
            "REWARD_CURRENCY": "reward_currency",
        }
        for env_name, key in campaign_vars.items():
            value = os.getenv(f"{ENV_PREFIX}{env_name}")
            if value:
                overrides.setdefault("campaign", {})[key] = value

        if os.getenv(f"{ENV_PREFIX}JOURNAL_PATH"):
            overrides["journal_path"] = os.getenv(f"{ENV_PREFIX}JOURNAL_PATH")
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        campaign_data = data.get("campaign") or {}
        campaign = CampaignConfig.from_dict(campaign_data) if campaign_data else CampaignConfig()
        return cls(
            campaign=campaign,
            journal_path=data.get("journal_path"),
            log_level=str(data.get("log_level", "INFO")),
            log_file=data.get("log_file"),
            extra=data.get("extra", {}) or {},
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        campaign = self.campaign
        if "campaign" in overrides:
            merged = {**self.campaign.to_dict(), **overrides["campaign"]}
            campaign = CampaignConfig.from_dict(merged)

        return replace(
            self,
            campaign=campaign,
            journal_path=overrides.get("journal_path", self.journal_path),
            log_level=overrides.get("log_level", self.log_level),
            log_file=overrides.get("log_file", self.log_file),
            extra=dict(self.extra),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "campaign": self.campaign.to_dict(),
            "journal_path": self.journal_path,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }


def get_config_template() -> str:
    """YAML template written by `stake-cli config --init`."""
    return """\
# Staking campaign configuration
campaign:
  cutoff_timestamp: 1645203600      # staking closes after this Unix time
  fee_amount: 50000000              # per-operation fee (base currency units)
  reward_rate_per_day: 10000000     # reward units per whole staked day
  hash_domain_separator: nft-staking-merkle-tree
  hash_function: keccak256          # keccak256 | sha256
  admin: null                       # 0x-prefixed 32-byte administrator id
  treasury: "0x0000000000000000000000000000000000000000000000000000000000000000"
  fee_currency: SOL
  reward_currency: LP

journal_path: null                  # JSON-lines operation journal
log_level: INFO
log_file: null
"""


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config
