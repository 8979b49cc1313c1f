# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/models.py

Modelos ORM del ledger de wallets.

Tablas:
- accounts(account_id, balance, version, created_at, updated_at)
- transactions(transaction_id, account_id, account_version, kind, amount,
  order_ref, resulting_balance, status, reverses_transaction_id,
  description, created_at)

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from wallet_ledger.shared.database.base import Base, as_str_enum
from .enums import TransactionKind, TransactionStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_transaction_id() -> str:
    return str(uuid.uuid4())


class Account(Base):
    """
    Saldo de una cuenta (1:1 con un usuario), en unidades menores.

    Tabla: accounts

    Constraints:
    - ck_accounts_balance_non_negative: balance >= 0
    - ck_accounts_version_non_negative: version >= 0

    `version` se incrementa en cada mutación; es el token del
    compare-and-swap que usa LedgerStore.
    """

    __tablename__ = "accounts"

    account_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    balance: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
        CheckConstraint("version >= 0", name="version_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.account_id} balance={self.balance} version={self.version}>"


class LedgerTransaction(Base):
    """
    Ledger append-only de movimientos.

    Tabla: transactions

    - amount con signo: negativo = débito, positivo = crédito
    - account_version: versión de la cuenta producida por este movimiento;
      ordena el historial de la cuenta igual que created_at
    - status: único campo mutable (applied -> reversed)
    - reverses_transaction_id: la reversión apunta al original; UNIQUE
      garantiza a lo sumo una reversión por transacción

    Constraints:
    - uq_transactions_account_version: UNIQUE(account_id, account_version)
    - uq_transactions_reverses_transaction_id: UNIQUE(reverses_transaction_id)
    - ck_transactions_amount_nonzero: amount <> 0
    - ck_transactions_resulting_balance_non_negative: resulting_balance >= 0
    """

    __tablename__ = "transactions"

    transaction_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_transaction_id,
    )

    account_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("accounts.account_id"),
        nullable=False,
        index=True,
    )

    account_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    kind: Mapped[TransactionKind] = mapped_column(
        as_str_enum(TransactionKind, name="transaction_kind"),
        nullable=False,
    )

    amount: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    order_ref: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    resulting_balance: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    status: Mapped[TransactionStatus] = mapped_column(
        as_str_enum(TransactionStatus, name="transaction_status"),
        nullable=False,
        default=TransactionStatus.APPLIED,
    )

    reverses_transaction_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("transactions.transaction_id"),
        nullable=True,
        unique=True,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        UniqueConstraint("account_id", "account_version", name="uq_transactions_account_version"),
        CheckConstraint("amount <> 0", name="amount_nonzero"),
        CheckConstraint("resulting_balance >= 0", name="resulting_balance_non_negative"),
        Index("ix_transactions_account_order_ref", "account_id", "order_ref"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerTransaction id={self.transaction_id} account={self.account_id} "
            f"amount={self.amount:+d} after={self.resulting_balance} status={self.status}>"
        )


__all__ = [
    "Account",
    "LedgerTransaction",
]
