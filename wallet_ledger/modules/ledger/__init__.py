# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/__init__.py

Ledger Store: saldos por cuenta + registro append-only de transacciones.

Exports:
- LedgerStore / TransactionHistory
- Modelos ORM (Account, LedgerTransaction)
- Vistas inmutables (AccountSnapshot, TransactionRecord, ...)
- Excepciones del ledger
"""

from .enums import TransactionKind, TransactionStatus
from .exceptions import (
    AlreadyReversedError,
    ConcurrencyConflictError,
    InsufficientFundsError,
    InvalidAmountError,
    LedgerError,
    LockTimeoutError,
    StorageUnavailableError,
    TransactionNotFoundError,
)
from .locks import AccountLockRegistry
from .models import Account, LedgerTransaction
from .repositories import AccountRepository, LedgerTransactionRepository
from .schemas import (
    AccountSnapshot,
    ConsistencyReport,
    LedgerWriteResult,
    TransactionRecord,
)
from .store import LedgerStore, TransactionHistory, ensure_positive_amount

__all__ = [
    # Enums
    "TransactionKind",
    "TransactionStatus",
    # Excepciones
    "LedgerError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "ConcurrencyConflictError",
    "LockTimeoutError",
    "AlreadyReversedError",
    "TransactionNotFoundError",
    "StorageUnavailableError",
    # Modelos
    "Account",
    "LedgerTransaction",
    # Repositorios
    "AccountRepository",
    "LedgerTransactionRepository",
    # Schemas
    "AccountSnapshot",
    "TransactionRecord",
    "LedgerWriteResult",
    "ConsistencyReport",
    # Store
    "AccountLockRegistry",
    "LedgerStore",
    "TransactionHistory",
    "ensure_positive_amount",
]
