"""
Schemas

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import the data
model and the error taxonomy.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AllowlistAlreadyInitialized,
    AllowlistNotInitialized,
    AlreadyStaked,
    ArithmeticOverflow,
    CanonicalizationException,
    ConfigurationException,
    ErrorCodes,
    InsufficientEntitlement,
    InsufficientFee,
    InvalidLockPeriod,
    InvalidProof,
    JournalException,
    MissingAuthorization,
    NotStaked,
    OwnerMismatch,
    RecordAlreadyExists,
    RecordNotFound,
    SchemaValidationException,
    StakeError,
    StakeException,
    StakingClosed,
    TransferFailed,
    UnclaimedReward,
)

# Persistent data model
from .records import (
    I32_MAX,
    I32_MIN,
    I64_MAX,
    I64_MIN,
    IDENTIFIER_SIZE,
    SECONDS_PER_DAY,
    U64_MAX,
    AllowlistRoot,
    Identifier,
    StakeRecord,
    StakeState,
    coerce_identifier,
    record_key,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "AllowlistAlreadyInitialized",
    "AllowlistNotInitialized",
    "AlreadyStaked",
    "ArithmeticOverflow",
    "CanonicalizationException",
    "ConfigurationException",
    "ErrorCodes",
    "InsufficientEntitlement",
    "InsufficientFee",
    "InvalidLockPeriod",
    "InvalidProof",
    "JournalException",
    "MissingAuthorization",
    "NotStaked",
    "OwnerMismatch",
    "RecordAlreadyExists",
    "RecordNotFound",
    "SchemaValidationException",
    "StakeError",
    "StakeException",
    "StakingClosed",
    "TransferFailed",
    "UnclaimedReward",
    # Records
    "I32_MAX",
    "I32_MIN",
    "I64_MAX",
    "I64_MIN",
    "IDENTIFIER_SIZE",
    "SECONDS_PER_DAY",
    "U64_MAX",
    "AllowlistRoot",
    "Identifier",
    "StakeRecord",
    "StakeState",
    "coerce_identifier",
    "record_key",
]
