"""
Schemas
File: errors.py

Purpose: Standard error taxonomy for the staking core.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every exception aborts the current operation. None of them is
recovered inside the core.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the staking core."""

    # Schema & Configuration Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Authorization Errors
    MISSING_AUTHORIZATION = "MISSING_AUTHORIZATION"
    OWNER_MISMATCH = "OWNER_MISMATCH"

    # Fee Errors
    INSUFFICIENT_FEE = "INSUFFICIENT_FEE"

    # Time & State Window Errors
    STAKING_CLOSED = "STAKING_CLOSED"
    ALREADY_STAKED = "ALREADY_STAKED"
    NOT_STAKED = "NOT_STAKED"
    UNCLAIMED_REWARD = "UNCLAIMED_REWARD"
    INVALID_LOCK_PERIOD = "INVALID_LOCK_PERIOD"

    # Allowlist Errors
    INVALID_PROOF = "INVALID_PROOF"
    ALLOWLIST_NOT_INITIALIZED = "ALLOWLIST_NOT_INITIALIZED"
    ALLOWLIST_ALREADY_INITIALIZED = "ALLOWLIST_ALREADY_INITIALIZED"

    # Record Errors
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    RECORD_ALREADY_EXISTS = "RECORD_ALREADY_EXISTS"

    # Amount Errors
    INSUFFICIENT_ENTITLEMENT = "INSUFFICIENT_ENTITLEMENT"
    ARITHMETIC_OVERFLOW = "ARITHMETIC_OVERFLOW"

    # Collaborator Errors
    TRANSFER_FAILED = "TRANSFER_FAILED"
    JOURNAL_ERROR = "JOURNAL_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class StakeError(BaseModel):
    """
    Base error model for structured error communication.

    Used for reporting a failed operation without raising, e.g. in
    CLI JSON output and journal entries.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_PROOF],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the whole operation may be retried later",
    )

    def to_exception(self) -> "StakeException":
        """Convert this error model to a raised exception."""
        return StakeException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class StakeException(Exception):
    """
    Base exception for all staking core errors.

    This exception carries structured error information and can be
    converted to/from StakeError models.
    """

    default_code: str = "STAKE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> StakeError:
        """Convert this exception to a StakeError model."""
        return StakeError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(StakeException):
    """Exception raised when canonical serialization fails."""

    default_code = ErrorCodes.CANONICALIZATION_ERROR


class SchemaValidationException(StakeException):
    """Exception raised when schema validation fails."""

    default_code = ErrorCodes.SCHEMA_VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(message=message, details=full_details)


class ConfigurationException(StakeException):
    """Exception raised when campaign or runtime configuration is invalid."""

    default_code = ErrorCodes.CONFIGURATION_ERROR


class MissingAuthorization(StakeException):
    """Caller did not authenticate as the required owner or administrator."""

    default_code = ErrorCodes.MISSING_AUTHORIZATION


class OwnerMismatch(StakeException):
    """The record's stored owner differs from the authenticated caller."""

    default_code = ErrorCodes.OWNER_MISMATCH


class InsufficientFee(StakeException):
    """Payable balance is below the fixed per-operation fee."""

    default_code = ErrorCodes.INSUFFICIENT_FEE

    def __init__(self, message: str, balance: int, fee: int) -> None:
        super().__init__(message=message, details={"balance": balance, "fee": fee})


class StakingClosed(StakeException):
    """Current time is past the campaign cutoff."""

    default_code = ErrorCodes.STAKING_CLOSED

    def __init__(self, message: str, now: int, cutoff: int) -> None:
        super().__init__(message=message, details={"now": now, "cutoff": cutoff})


class AlreadyStaked(StakeException):
    """The asset is currently staked under this record."""

    default_code = ErrorCodes.ALREADY_STAKED


class NotStaked(StakeException):
    """The asset is not currently staked under this record."""

    default_code = ErrorCodes.NOT_STAKED


class UnclaimedReward(StakeException):
    """Restaking would discard a frozen, still-unclaimed reward."""

    default_code = ErrorCodes.UNCLAIMED_REWARD


class InvalidLockPeriod(StakeException):
    """Requested lock period is outside the accepted range."""

    default_code = ErrorCodes.INVALID_LOCK_PERIOD


class InvalidProof(StakeException):
    """Merkle membership verification returned false."""

    default_code = ErrorCodes.INVALID_PROOF


class AllowlistNotInitialized(StakeException):
    """No allowlist root has been written for the campaign."""

    default_code = ErrorCodes.ALLOWLIST_NOT_INITIALIZED


class AllowlistAlreadyInitialized(StakeException):
    """The allowlist root was already written."""

    default_code = ErrorCodes.ALLOWLIST_ALREADY_INITIALIZED


class RecordNotFound(StakeException):
    """No stake record exists for the (asset, owner) pair."""

    default_code = ErrorCodes.RECORD_NOT_FOUND


class RecordAlreadyExists(StakeException):
    """A stake record already exists for the (asset, owner) pair."""

    default_code = ErrorCodes.RECORD_ALREADY_EXISTS


class InsufficientEntitlement(StakeException):
    """Requested claim amount exceeds the computed entitlement."""

    default_code = ErrorCodes.INSUFFICIENT_ENTITLEMENT

    def __init__(self, message: str, requested: int, entitlement: int) -> None:
        super().__init__(
            message=message,
            details={"requested": requested, "entitlement": entitlement},
        )


class ArithmeticOverflow(StakeException):
    """An unsigned 64-bit computation overflowed or underflowed."""

    default_code = ErrorCodes.ARITHMETIC_OVERFLOW


class TransferFailed(StakeException):
    """A custody or currency transfer collaborator rejected a movement."""

    default_code = ErrorCodes.TRANSFER_FAILED

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, details=details, retryable=True)


class JournalException(StakeException):
    """The operation journal is inconsistent or cannot be written."""

    default_code = ErrorCodes.JOURNAL_ERROR
