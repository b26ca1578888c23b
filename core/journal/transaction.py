"""
Transaction Boundary

Makes every staking operation all-or-nothing:

- Operations on the same key (one (asset, owner) pair, or the campaign
  allowlist) are serialized by a per-key lock; different keys run
  concurrently.
- Effects are journaled before they run and compensated in reverse
  order if the operation raises before commit. Whether an effect took
  place is settled against the collaborator, so one executed just before
  a crash or a failed journal write is still undone.
- The new record/root image is journaled before it is stored, so a
  crash between the two is rolled forward by recover().

Usage:
    manager = TransactionManager(custody, currency, store, journal)
    with manager.begin("stake", key=key, timestamp=now) as tx:
        tx.move_currency("fee", "SOL", payer, treasury, fee)
        tx.move_asset("custody_in", asset, owner, vault)
        tx.stage_record(record)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from core.ledger.interfaces import CurrencyTransfer, CustodyTransfer, RecordStore
from core.schemas.errors import JournalException, StakeException
from core.schemas.records import AllowlistRoot, StakeRecord

from .models import Effect, JournalEntry, TxStatus
from .recorder import OperationJournal


logger = logging.getLogger(__name__)


class Transaction:
    """
    Side-effect scope of one operation.

    Obtained from TransactionManager.begin(); never constructed directly.
    """

    def __init__(self, manager: "TransactionManager", entry: JournalEntry) -> None:
        self._manager = manager
        self._entry = entry
        self._record: Optional[StakeRecord] = None
        self._root: Optional[AllowlistRoot] = None

    @property
    def tx_id(self) -> str:
        return self._entry.tx_id

    @property
    def entry(self) -> JournalEntry:
        return self._entry

    def move_currency(
        self,
        label: str,
        currency: str,
        source: bytes,
        destination: bytes,
        amount: int,
    ) -> None:
        """Journal, then execute, a currency movement."""
        if amount == 0:
            return
        self._apply(
            Effect(
                kind="currency",
                label=label,
                source=source,
                destination=destination,
                amount=amount,
                currency=currency,
            )
        )

    def move_asset(self, label: str, asset: bytes, source: bytes, destination: bytes) -> None:
        """Journal, then execute, a single-asset custody movement."""
        self._apply(
            Effect(
                kind="asset",
                label=label,
                source=source,
                destination=destination,
                amount=1,
                asset=asset,
            )
        )

    def stage_record(self, record: StakeRecord) -> None:
        """Record image written to the store on commit."""
        self._record = record

    def stage_root(self, root: AllowlistRoot) -> None:
        """Allowlist root written to the store on commit."""
        self._root = root

    def _apply(self, effect: Effect) -> None:
        journal = self._manager.journal
        index = journal.record_effect(self._entry, effect)
        self._manager.execute(effect)
        journal.mark_applied(self._entry, index)

    def _prepare_commit(self) -> None:
        self._manager.journal.prepare_commit(self._entry, record=self._record, root=self._root)

    def _commit(self) -> None:
        self._manager.write_images(self._entry)
        self._manager.journal.complete(self._entry, TxStatus.COMMITTED)

    def _rollback(self, exc: BaseException) -> None:
        error = exc.to_error_model() if isinstance(exc, StakeException) else None
        self._manager.compensate(self._entry)
        self._manager.journal.complete(self._entry, TxStatus.ROLLED_BACK, error=error)


class _KeyLock:
    """A lock plus the number of threads holding or waiting for it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class TransactionManager:
    """
    Runs operations under per-key locks with journaled, compensatable effects.

    A key's lock exists only while some thread holds or waits for it.
    """

    def __init__(
        self,
        custody: CustodyTransfer,
        currency: CurrencyTransfer,
        store: RecordStore,
        journal: Optional[OperationJournal] = None,
    ) -> None:
        self.custody = custody
        self.currency = currency
        self.store = store
        self.journal = journal if journal is not None else OperationJournal()
        self._locks: dict[str, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _hold(self, key: str) -> Iterator[None]:
        with self._locks_guard:
            slot = self._locks.get(key)
            if slot is None:
                slot = self._locks[key] = _KeyLock()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._locks_guard:
                slot.users -= 1
                if slot.users == 0:
                    del self._locks[key]

    @contextmanager
    def begin(self, operation: str, *, key: str, timestamp: int) -> Iterator[Transaction]:
        """
        Open a transaction for `operation` under the lock for `key`.

        Leaving the block normally commits. Raising inside it compensates
        every effect that took place, marks the entry ROLLED_BACK and
        re-raises the original exception.
        """
        with self._hold(key):
            entry = self.journal.begin(operation, key=key, timestamp=timestamp)
            tx = Transaction(self, entry)
            try:
                yield tx
                tx._prepare_commit()
            except BaseException as exc:
                self._abort(tx, exc)
                raise
            tx._commit()

    def _abort(self, tx: Transaction, exc: BaseException) -> None:
        """
        Roll back `tx` after `exc`. A rollback that cannot finish leaves the
        entry PENDING for recover() and is reported in the original
        exception's details instead of replacing it.
        """
        try:
            tx._rollback(exc)
        except JournalException as rollback_error:
            logger.error(
                f"Rollback of {tx.tx_id} left for recovery: {rollback_error.message}"
            )
            if isinstance(exc, StakeException):
                exc.details["rollback_error"] = rollback_error.message

    def execute(self, effect: Effect) -> None:
        if effect.kind == "currency":
            self.currency.move_currency(
                effect.currency,
                effect.source,
                effect.destination,
                effect.amount,
                transfer_id=effect.effect_id,
            )
        else:
            self.custody.move_asset(effect.asset, effect.source, effect.destination, 1)

    def took_effect(self, effect: Effect) -> bool:
        """Ask the collaborator whether a journaled movement has happened."""
        if effect.kind == "currency":
            return self.currency.transfer_applied(effect.effect_id)
        return self.custody.holder_of(effect.asset) == bytes(effect.destination)

    def compensate(self, entry: JournalEntry) -> None:
        """
        Undo, in reverse order, every journaled effect that took place.

        The collaborators decide what happened, not the `applied` flags: an
        effect executed just before a crash or a failed journal write is
        still undone, and an undo that already ran is not repeated.
        """
        for index in reversed(range(len(entry.effects))):
            effect = entry.effects[index]
            if effect.compensated:
                continue
            undo = effect.reversed()
            if self.took_effect(undo):
                if effect.applied:
                    self.journal.mark_compensated(entry, index)
                continue
            if not self.took_effect(effect):
                continue
            if not effect.applied:
                logger.warning(f"Settling in-doubt {effect.label} of {entry.tx_id}")
            try:
                self.execute(undo)
            except StakeException as e:
                logger.error(
                    f"Compensation of {effect.label} failed for {entry.tx_id}: {e.message}"
                )
                raise JournalException(
                    f"Rollback of {entry.tx_id} incomplete: {e.message}",
                    details={"tx_id": entry.tx_id, "effect": effect.label},
                ) from e
            self.journal.mark_compensated(entry, index)
            logger.debug(f"Compensated {effect.label} for {entry.tx_id}")

    def write_images(self, entry: JournalEntry) -> None:
        """Write the journaled record/root images (idempotent)."""
        if entry.record_image is not None:
            self.store.put_record(entry.record_image)
        if entry.root_image is not None:
            self.store.put_root(entry.root_image)

    def recover(self) -> list[JournalEntry]:
        """
        Finish entries left unfinished by a crash.

        PENDING entries are rolled back; COMMITTING entries are rolled
        forward by re-writing their images. Returns the entries touched.
        """
        recovered: list[JournalEntry] = []
        for entry in self.journal.unfinished():
            with self._hold(entry.key):
                if entry.status is TxStatus.COMMITTING:
                    self.write_images(entry)
                    self.journal.complete(entry, TxStatus.COMMITTED)
                    logger.info(f"Rolled forward {entry.operation} {entry.tx_id}")
                else:
                    self.compensate(entry)
                    self.journal.complete(entry, TxStatus.ROLLED_BACK)
                    logger.info(f"Rolled back {entry.operation} {entry.tx_id}")
            recovered.append(entry)
        return recovered


__all__ = [
    "Transaction",
    "TransactionManager",
]
