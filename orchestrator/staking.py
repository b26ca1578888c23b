"""
Staking Orchestrator

Entry points of one staking campaign: open a stake record, write the
allowlist root, stake, unstake and claim.

Every state-changing operation:
- validates in a fixed order (authorization, owner match, fee
  affordability, time/state window, proof, amount) before any side
  effect runs
- runs its side effects inside one journaled transaction under the lock
  of its key, so it either completes fully or leaves no trace
- returns an OperationReceipt
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

from pydantic import ValidationError

from core.config.runtime import CampaignConfig
from core.crypto.hashing import HashFunction, to_hex
from core.fees.collector import FeeCollector
from core.journal.transaction import TransactionManager
from core.ledger.context import StakingContext
from core.merkle.merkle_proofs import AllowlistVerifier
from core.rewards.accrual import RewardQuote, claim_entitlement, quote, unstake_freeze
from core.rewards.numeric import checked_sub, require_u64
from core.schemas.errors import (
    AllowlistAlreadyInitialized,
    AllowlistNotInitialized,
    AlreadyStaked,
    InsufficientEntitlement,
    InvalidLockPeriod,
    InvalidProof,
    MissingAuthorization,
    NotStaked,
    OwnerMismatch,
    RecordAlreadyExists,
    RecordNotFound,
    SchemaValidationException,
    StakeException,
    StakingClosed,
    UnclaimedReward,
)
from core.schemas.records import (
    I32_MAX,
    AllowlistRoot,
    StakeRecord,
    StakeState,
    coerce_identifier,
)


logger = logging.getLogger(__name__)

VAULT_AUTHORITY_SEED = b"vault-stake-auth"
REWARD_AUTHORITY_SEED = b"reward-stake-auth"

ALLOWLIST_LOCK_KEY = "allowlist"

F = TypeVar("F", bound=Callable[..., Any])


def derive_authority(seed: bytes, hash_fn: HashFunction) -> bytes:
    """32-byte program authority derived from a fixed seed."""
    return hash_fn(seed)


def _identifier(value: Any, name: str) -> bytes:
    try:
        return coerce_identifier(value)
    except ValueError as e:
        raise SchemaValidationException(f"Invalid {name}: {e}", field_path=name) from e


def _short(identifier: bytes) -> str:
    return to_hex(identifier)[:10]


def _rejections_logged(operation: str) -> Callable[[F], F]:
    """Log a rejected operation at WARNING and let the exception propagate."""
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except StakeException as e:
                logger.warning(f"{operation} rejected [{e.code}]: {e.message}")
                raise
        return wrapper  # type: ignore[return-value]
    return decorator


@dataclass(frozen=True)
class OperationReceipt:
    """Outcome of a committed operation."""
    operation: str
    tx_id: str
    timestamp: int
    record: Optional[StakeRecord] = None
    root: Optional[AllowlistRoot] = None
    fee_paid: int = 0
    reward_paid: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "tx_id": self.tx_id,
            "timestamp": self.timestamp,
            "record": self.record.model_dump(mode="json") if self.record else None,
            "root": self.root.model_dump(mode="json") if self.root else None,
            "fee_paid": self.fee_paid,
            "reward_paid": self.reward_paid,
        }


class StakingOrchestrator:
    """
    Runs the staking state machine of one campaign.

    Usage:
        ctx = StakingContext.in_memory(frozen_time=1_645_000_000)
        orchestrator = StakingOrchestrator(ctx, CampaignConfig(admin=admin))
        orchestrator.initialize_allowlist(admin, tree.root)
        orchestrator.open_stake_record(asset, owner)
        orchestrator.stake(asset, owner, tree.proof_for(asset), locked_period=7)
    """

    def __init__(self, context: StakingContext, config: CampaignConfig) -> None:
        self.ctx = context
        self.config = config
        self.transactions = TransactionManager(
            context.custody,
            context.currency,
            context.store,
            context.journal,
        )
        self.fees = FeeCollector(
            context.currency,
            currency=config.fee_currency,
            fee_amount=config.fee_amount,
            treasury=config.treasury,
        )
        hash_fn = config.hash_fn
        self.vault_authority = derive_authority(VAULT_AUTHORITY_SEED, hash_fn)
        self.reward_authority = derive_authority(REWARD_AUTHORITY_SEED, hash_fn)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _record_lock_key(asset: bytes, owner: bytes) -> str:
        return f"record:{asset.hex()}:{owner.hex()}"

    def _now(self) -> int:
        return self.ctx.clock.now()

    def _authenticate(self, caller: bytes) -> None:
        self.ctx.authenticator.require(caller)

    def _load_record(self, asset: bytes, owner: bytes) -> StakeRecord:
        record = self.ctx.store.get_record(asset, owner)
        if record is None:
            raise RecordNotFound(
                f"No stake record for asset {_short(asset)} and owner {_short(owner)}",
                details={"asset": asset.hex(), "owner": owner.hex()},
            )
        return record

    @staticmethod
    def _require_owner(record: StakeRecord, caller: bytes) -> None:
        if record.owner != caller:
            raise OwnerMismatch(
                f"Record is owned by {_short(record.owner)}, not {_short(caller)}",
                details={"owner": record.owner.hex(), "caller": caller.hex()},
            )

    def _require_staking_open(self, now: int) -> None:
        if now > self.config.cutoff_timestamp:
            raise StakingClosed(
                f"Staking closed at {self.config.cutoff_timestamp}",
                now=now,
                cutoff=self.config.cutoff_timestamp,
            )

    def _require_allowlisted(self, asset: bytes, proof: Optional[Sequence[bytes]]) -> None:
        root = self.ctx.store.get_root()
        if root is None:
            raise AllowlistNotInitialized("Allowlist root has not been initialized")
        verifier = AllowlistVerifier(
            root.root,
            domain_separator=self.config.hash_domain_separator,
            hash_function=self.config.hash_fn,
        )
        if not verifier.verify_asset(asset, list(proof or ())):
            raise InvalidProof(
                f"Proof does not place asset {_short(asset)} under the allowlist root",
                details={"asset": asset.hex(), "proof_length": len(proof or ())},
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @_rejections_logged("open_stake_record")
    def open_stake_record(self, asset: Any, caller: Any) -> OperationReceipt:
        """
        Create the zeroed record binding `asset` to `caller`.

        Raises:
            MissingAuthorization, StakingClosed, RecordAlreadyExists
        """
        asset = _identifier(asset, "asset")
        caller = _identifier(caller, "caller")
        self._authenticate(caller)

        now = self._now()
        key = self._record_lock_key(asset, caller)
        with self.transactions.begin("open_stake_record", key=key, timestamp=now) as tx:
            self._require_staking_open(now)
            if self.ctx.store.get_record(asset, caller) is not None:
                raise RecordAlreadyExists(
                    f"Stake record for asset {_short(asset)} already exists",
                    details={"asset": asset.hex(), "owner": caller.hex()},
                )
            record = StakeRecord.opened(asset, caller)
            tx.stage_record(record)

        logger.info(f"Opened stake record {_short(asset)} for {_short(caller)}")
        return OperationReceipt(
            operation="open_stake_record",
            tx_id=tx.tx_id,
            timestamp=now,
            record=record,
        )

    @_rejections_logged("initialize_allowlist")
    def initialize_allowlist(self, caller: Any, root: Any, bump: int = 0) -> OperationReceipt:
        """
        Write the campaign's allowlist root. Administrator only, once.

        Raises:
            MissingAuthorization, InsufficientFee, AllowlistAlreadyInitialized
        """
        caller = _identifier(caller, "caller")
        root_bytes = _identifier(root, "root")
        self._authenticate(caller)
        if self.config.admin is None or caller != self.config.admin:
            raise MissingAuthorization(
                f"{_short(caller)} is not the campaign administrator",
                details={"caller": caller.hex()},
            )
        try:
            allowlist_root = AllowlistRoot(root=root_bytes, bump=bump, authority=caller)
        except ValidationError as e:
            raise SchemaValidationException(f"Invalid allowlist root: {e}", field_path="bump") from e

        now = self._now()
        with self.transactions.begin(
            "initialize_allowlist", key=ALLOWLIST_LOCK_KEY, timestamp=now
        ) as tx:
            self.fees.ensure_affordable(caller)
            if self.ctx.store.get_root() is not None:
                raise AllowlistAlreadyInitialized("Allowlist root is already initialized")
            self.fees.collect(tx, caller)
            tx.stage_root(allowlist_root)

        logger.info(f"Initialized allowlist root {to_hex(root_bytes)}")
        return OperationReceipt(
            operation="initialize_allowlist",
            tx_id=tx.tx_id,
            timestamp=now,
            root=allowlist_root,
            fee_paid=self.fees.fee_amount,
        )

    @_rejections_logged("stake")
    def stake(
        self,
        asset: Any,
        caller: Any,
        proof: Optional[Sequence[bytes]],
        locked_period: int,
    ) -> OperationReceipt:
        """
        Lock `asset` in the vault for at least `locked_period` days.

        Raises:
            MissingAuthorization, RecordNotFound, OwnerMismatch,
            InsufficientFee, StakingClosed, AlreadyStaked, UnclaimedReward,
            InvalidLockPeriod, AllowlistNotInitialized, InvalidProof
        """
        asset = _identifier(asset, "asset")
        caller = _identifier(caller, "caller")
        self._authenticate(caller)

        now = self._now()
        key = self._record_lock_key(asset, caller)
        with self.transactions.begin("stake", key=key, timestamp=now) as tx:
            record = self._load_record(asset, caller)
            self._require_owner(record, caller)
            self.fees.ensure_affordable(caller)
            self._require_staking_open(now)
            if record.state is StakeState.STAKED:
                raise AlreadyStaked(f"Asset {_short(asset)} is already staked")
            if record.reward_amount > 0:
                raise UnclaimedReward(
                    f"Claim the frozen reward of {record.reward_amount} before restaking",
                    details={"reward_amount": record.reward_amount},
                )
            if (
                isinstance(locked_period, bool)
                or not isinstance(locked_period, int)
                or not 0 <= locked_period <= I32_MAX
            ):
                raise InvalidLockPeriod(
                    f"locked_period must be a whole number of days in [0, {I32_MAX}], "
                    f"got {locked_period!r}",
                    details={"locked_period": repr(locked_period)},
                )
            self._require_allowlisted(asset, proof)

            self.fees.collect(tx, caller)
            tx.move_asset("custody_in", asset, caller, self.vault_authority)

            updated = record.model_copy(deep=True)
            updated.stake_time = now
            updated.reward_amount = 0
            updated.locked_period = locked_period
            updated.unstake_nft = False
            updated.state = StakeState.STAKED
            tx.stage_record(updated)

        logger.info(
            f"Staked {_short(asset)} for {_short(caller)}, "
            f"locked {locked_period} days until {updated.unlock_time}"
        )
        return OperationReceipt(
            operation="stake",
            tx_id=tx.tx_id,
            timestamp=now,
            record=updated,
            fee_paid=self.fees.fee_amount,
        )

    @_rejections_logged("unstake")
    def unstake(
        self,
        asset: Any,
        caller: Any,
        proof: Optional[Sequence[bytes]],
    ) -> OperationReceipt:
        """
        Return `asset` to its owner and freeze the reward earned so far.

        Withdrawing before the lock period has elapsed forfeits the reward.

        Raises:
            MissingAuthorization, RecordNotFound, OwnerMismatch,
            InsufficientFee, NotStaked, AllowlistNotInitialized, InvalidProof
        """
        asset = _identifier(asset, "asset")
        caller = _identifier(caller, "caller")
        self._authenticate(caller)

        now = self._now()
        key = self._record_lock_key(asset, caller)
        with self.transactions.begin("unstake", key=key, timestamp=now) as tx:
            record = self._load_record(asset, caller)
            self._require_owner(record, caller)
            self.fees.ensure_affordable(caller)
            if record.state is not StakeState.STAKED:
                raise NotStaked(f"Asset {_short(asset)} is not staked")
            self._require_allowlisted(asset, proof)
            frozen = unstake_freeze(record, now, self.config.reward_rate_per_day)

            tx.move_asset("custody_out", asset, self.vault_authority, caller)
            self.fees.collect(tx, caller)

            updated = record.model_copy(deep=True)
            updated.reward_amount = frozen
            updated.unstake_nft = True
            updated.state = StakeState.WITHDRAWN
            tx.stage_record(updated)

        if frozen == 0 and now < record.unlock_time:
            logger.info(f"Unstaked {_short(asset)} before unlock; reward forfeited")
        else:
            logger.info(f"Unstaked {_short(asset)}; frozen reward {frozen}")
        return OperationReceipt(
            operation="unstake",
            tx_id=tx.tx_id,
            timestamp=now,
            record=updated,
            fee_paid=self.fees.fee_amount,
        )

    @_rejections_logged("claim")
    def claim(self, asset: Any, caller: Any, claim_amount: int) -> OperationReceipt:
        """
        Mint up to the current entitlement in reward currency to the owner.

        The unclaimed remainder is kept in reward_amount and the accrual
        clock restarts at `now`.

        Raises:
            MissingAuthorization, RecordNotFound, OwnerMismatch,
            InsufficientFee, ArithmeticOverflow, InsufficientEntitlement
        """
        asset = _identifier(asset, "asset")
        caller = _identifier(caller, "caller")
        self._authenticate(caller)

        now = self._now()
        key = self._record_lock_key(asset, caller)
        with self.transactions.begin("claim", key=key, timestamp=now) as tx:
            record = self._load_record(asset, caller)
            self._require_owner(record, caller)
            self.fees.ensure_affordable(caller)
            require_u64(claim_amount, "claim_amount")
            entitlement = claim_entitlement(record, now, self.config.reward_rate_per_day)
            if claim_amount > entitlement:
                raise InsufficientEntitlement(
                    f"Requested {claim_amount} exceeds entitlement {entitlement}",
                    requested=claim_amount,
                    entitlement=entitlement,
                )

            tx.move_currency(
                "reward",
                self.config.reward_currency,
                self.reward_authority,
                caller,
                claim_amount,
            )
            self.fees.collect(tx, caller)

            updated = record.model_copy(deep=True)
            updated.reward_amount = checked_sub(entitlement, claim_amount)
            updated.stake_time = now
            tx.stage_record(updated)

        logger.info(
            f"Claimed {claim_amount} {self.config.reward_currency} for {_short(asset)}, "
            f"{updated.reward_amount} left"
        )
        return OperationReceipt(
            operation="claim",
            tx_id=tx.tx_id,
            timestamp=now,
            record=updated,
            fee_paid=self.fees.fee_amount,
            reward_paid=claim_amount,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def quote(self, asset: Any, owner: Any) -> RewardQuote:
        """Entitlement preview at the current time. No fee, no mutation."""
        asset = _identifier(asset, "asset")
        owner = _identifier(owner, "owner")
        record = self._load_record(asset, owner)
        return quote(record, self._now(), self.config.reward_rate_per_day)

    def get_record(self, asset: Any, owner: Any) -> Optional[StakeRecord]:
        return self.ctx.store.get_record(_identifier(asset, "asset"), _identifier(owner, "owner"))

    def get_allowlist(self) -> Optional[AllowlistRoot]:
        return self.ctx.store.get_root()

    def recover(self) -> int:
        """Finish operations interrupted by a crash; returns how many."""
        recovered = self.transactions.recover()
        if recovered:
            logger.info(f"Recovered {len(recovered)} unfinished operation(s)")
        return len(recovered)


__all__ = [
    "VAULT_AUTHORITY_SEED",
    "REWARD_AUTHORITY_SEED",
    "derive_authority",
    "OperationReceipt",
    "StakingOrchestrator",
]
