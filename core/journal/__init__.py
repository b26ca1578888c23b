"""
Core Journal Module

Write-ahead journal and transaction boundary for staking operations.
Journal entries make every operation auditable and let a crashed
process finish or undo whatever it left half-done.
"""

from .models import Effect, EffectKind, JournalEntry, TxStatus
from .recorder import OperationJournal, generate_tx_id
from .transaction import Transaction, TransactionManager

__all__ = [
    "Effect",
    "EffectKind",
    "JournalEntry",
    "TxStatus",
    "OperationJournal",
    "generate_tx_id",
    "Transaction",
    "TransactionManager",
]
