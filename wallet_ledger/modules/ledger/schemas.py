# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/schemas.py

Vistas inmutables que el ledger entrega a sus consumidores. Los modelos ORM
nunca salen del LedgerStore: fuera de la sesión solo circulan estos valores.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import TransactionKind, TransactionStatus
from .models import Account, LedgerTransaction


@dataclass(frozen=True)
class AccountSnapshot:
    """Estado de una cuenta en un instante."""
    account_id: str
    balance: int
    version: int
    updated_at: datetime

    @classmethod
    def from_model(cls, model: Account) -> "AccountSnapshot":
        return cls(
            account_id=model.account_id,
            balance=model.balance,
            version=model.version,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Registro del ledger tal como quedó persistido."""
    transaction_id: str
    account_id: str
    account_version: int
    kind: TransactionKind
    amount: int
    order_ref: Optional[str]
    resulting_balance: int
    status: TransactionStatus
    reverses_transaction_id: Optional[str]
    description: Optional[str]
    created_at: datetime

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    @property
    def is_reversed(self) -> bool:
        return self.status == TransactionStatus.REVERSED

    @classmethod
    def from_model(cls, model: LedgerTransaction) -> "TransactionRecord":
        return cls(
            transaction_id=model.transaction_id,
            account_id=model.account_id,
            account_version=model.account_version,
            kind=TransactionKind(model.kind),
            amount=model.amount,
            order_ref=model.order_ref,
            resulting_balance=model.resulting_balance,
            status=TransactionStatus(model.status),
            reverses_transaction_id=model.reverses_transaction_id,
            description=model.description,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class LedgerWriteResult:
    """
    Resultado de un débito/crédito.

    replayed=True significa que no se escribió nada: se devolvió el
    movimiento ya registrado para el mismo order_ref.
    """
    transaction_id: str
    account_id: str
    new_balance: int
    replayed: bool = False

    @classmethod
    def from_record(cls, record: TransactionRecord, *, replayed: bool = False) -> "LedgerWriteResult":
        return cls(
            transaction_id=record.transaction_id,
            account_id=record.account_id,
            new_balance=record.resulting_balance,
            replayed=replayed,
        )


@dataclass(frozen=True)
class ConsistencyReport:
    """Comparación saldo vs. suma del ledger de una cuenta."""
    account_id: str
    balance: int
    ledger_sum: int
    transaction_count: int

    @property
    def is_consistent(self) -> bool:
        return self.balance == self.ledger_sum

    @property
    def drift(self) -> int:
        return self.balance - self.ledger_sum


__all__ = [
    "AccountSnapshot",
    "TransactionRecord",
    "LedgerWriteResult",
    "ConsistencyReport",
]
