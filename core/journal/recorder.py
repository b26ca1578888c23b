"""
Operation Journal

Append-only record of every operation and its side effects. Used by the
TransactionManager as a write-ahead log: an effect is journaled before it
runs, the record image before it is stored.

The journal is in-memory by default. Given a path it also appends one
JSON line per entry update and replays that file on start, so entries
left unfinished by a crash can be recovered. Only unfinished entries and
the most recent finished ones stay in memory; the file keeps the rest.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from core.schemas.errors import JournalException, StakeError
from core.schemas.records import AllowlistRoot, StakeRecord

from .models import Effect, JournalEntry, TxStatus


logger = logging.getLogger(__name__)

DEFAULT_FINISHED_HISTORY = 1024


def generate_tx_id(operation: str) -> str:
    """
    Generate a unique transaction ID.

    Format: tx_{operation}_{random_hex}
    """
    return f"tx_{operation}_{uuid.uuid4().hex[:16]}"


class OperationJournal:
    """
    Records journal entries for staking operations.

    Usage:
        journal = OperationJournal()

        entry = journal.begin("stake", key="...", timestamp=now)
        index = journal.record_effect(entry, effect)
        journal.mark_applied(entry, index)
        journal.prepare_commit(entry, record=record)
        journal.complete(entry, TxStatus.COMMITTED)

        unfinished = journal.unfinished()
    """

    def __init__(
        self,
        path: Optional[Path | str] = None,
        max_finished: int = DEFAULT_FINISHED_HISTORY,
    ) -> None:
        self._entries: dict[str, JournalEntry] = {}
        self._finished: OrderedDict[str, None] = OrderedDict()
        self._max_finished = max(0, max_finished)
        self._lock = threading.Lock()
        self._path = Path(path) if path is not None else None
        if self._path is not None and self._path.exists():
            self._replay(self._path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _replay(self, path: Path) -> None:
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = JournalEntry.model_validate(json.loads(line))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise JournalException(
                        f"Corrupt journal line {line_no} in {path}: {e}",
                        details={"path": str(path), "line": line_no},
                    ) from e
                # Later snapshots of the same transaction supersede earlier ones
                self._entries[entry.tx_id] = entry
        for entry in list(self._entries.values()):
            if entry.is_finished:
                self._retire(entry)
        logger.debug(f"Replayed {len(self._entries)} journal entries from {path}")

    def _retire(self, entry: JournalEntry) -> None:
        """Move a finished entry into the bounded history window."""
        self._finished[entry.tx_id] = None
        self._finished.move_to_end(entry.tx_id)
        while len(self._finished) > self._max_finished:
            old_id, _ = self._finished.popitem(last=False)
            self._entries.pop(old_id, None)

    def _write(self, entry: JournalEntry) -> None:
        entry.compute_hash()
        self._entries[entry.tx_id] = entry
        if self._path is None:
            return
        line = entry.model_dump_json()
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise JournalException(
                f"Failed to append to journal {self._path}: {e}",
                details={"path": str(self._path), "tx_id": entry.tx_id},
            ) from e

    def begin(self, operation: str, *, key: str, timestamp: int) -> JournalEntry:
        """Open a PENDING entry for a new operation."""
        entry = JournalEntry(
            tx_id=generate_tx_id(operation),
            operation=operation,
            key=key,
            timestamp=timestamp,
        )
        with self._lock:
            self._write(entry)
        logger.debug(f"Journal begin {entry.tx_id} key={key}")
        return entry

    def record_effect(self, entry: JournalEntry, effect: Effect) -> int:
        """Journal an effect before it runs; returns its index."""
        with self._lock:
            self._require_status(entry, TxStatus.PENDING)
            entry.effects = [*entry.effects, effect]
            self._write(entry)
            return len(entry.effects) - 1

    def mark_applied(self, entry: JournalEntry, index: int) -> None:
        with self._lock:
            entry.effects[index].applied = True
            self._write(entry)

    def mark_compensated(self, entry: JournalEntry, index: int) -> None:
        with self._lock:
            entry.effects[index].compensated = True
            self._write(entry)

    def prepare_commit(
        self,
        entry: JournalEntry,
        *,
        record: Optional[StakeRecord] = None,
        root: Optional[AllowlistRoot] = None,
    ) -> None:
        """Journal the state images and move the entry to COMMITTING."""
        with self._lock:
            self._require_status(entry, TxStatus.PENDING)
            entry.record_image = record.model_copy(deep=True) if record is not None else None
            entry.root_image = root
            entry.status = TxStatus.COMMITTING
            self._write(entry)

    def complete(
        self,
        entry: JournalEntry,
        status: TxStatus,
        *,
        error: Optional[StakeError] = None,
    ) -> JournalEntry:
        """Finish an entry as COMMITTED or ROLLED_BACK."""
        if status not in (TxStatus.COMMITTED, TxStatus.ROLLED_BACK):
            raise JournalException(f"Cannot complete entry with status {status.value}")
        with self._lock:
            entry.status = status
            if error is not None:
                entry.error = error
            self._write(entry)
            self._retire(entry)
        logger.debug(f"Journal {status.value} {entry.tx_id}")
        return entry

    def get(self, tx_id: str) -> Optional[JournalEntry]:
        with self._lock:
            return self._entries.get(tx_id)

    def get_entries(self) -> list[JournalEntry]:
        """Unfinished entries and recent finished ones, in the order they were opened."""
        with self._lock:
            return list(self._entries.values())

    def unfinished(self) -> list[JournalEntry]:
        """Entries left PENDING or COMMITTING (e.g. by a crash)."""
        with self._lock:
            return [e for e in self._entries.values() if not e.is_finished]

    def clear(self) -> None:
        """Forget in-memory entries (the file, if any, is left untouched)."""
        with self._lock:
            self._entries.clear()
            self._finished.clear()

    @staticmethod
    def _require_status(entry: JournalEntry, expected: TxStatus) -> None:
        if entry.status is not expected:
            raise JournalException(
                f"Journal entry {entry.tx_id} is {entry.status.value}, "
                f"expected {expected.value}",
                details={"tx_id": entry.tx_id},
            )

    def to_dict_list(self) -> list[dict]:
        """Convert all entries to JSON-serializable dicts."""
        return [e.model_dump(mode="json", exclude_none=True) for e in self.get_entries()]


__all__ = [
    "generate_tx_id",
    "OperationJournal",
]
