# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/repositories.py

Repositorios del ledger. No hacen commit: la unidad de trabajo la decide
LedgerStore (balance + registro se confirman juntos o no se confirman).

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .enums import TransactionKind, TransactionStatus
from .models import Account, LedgerTransaction

logger = logging.getLogger(__name__)


class AccountRepository:
    """Repositorio para Account."""

    async def get(
        self,
        session: AsyncSession,
        account_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[Account]:
        """
        Obtiene la cuenta. for_update=True emite SELECT ... FOR UPDATE
        (PostgreSQL); en SQLite se ignora y solo queda el CAS.
        """
        stmt = select(Account).where(Account.account_id == account_id)
        if for_update:
            stmt = stmt.with_for_update()

        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, session: AsyncSession, account_id: str) -> Account:
        """Agrega una cuenta nueva (balance 0, version 0) y hace flush."""
        account = Account(account_id=account_id, balance=0, version=0)
        session.add(account)
        await session.flush()
        return account

    async def compare_and_swap(
        self,
        session: AsyncSession,
        account_id: str,
        *,
        expected_version: int,
        new_balance: int,
    ) -> bool:
        """
        Escribe el nuevo balance solo si nadie movió la cuenta desde que se
        leyó `expected_version`. Devuelve False si perdió la carrera.
        """
        stmt = (
            update(Account)
            .where(
                Account.account_id == account_id,
                Account.version == expected_version,
            )
            .values(
                balance=new_balance,
                version=Account.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1


class LedgerTransactionRepository:
    """Repositorio para LedgerTransaction (append-only)."""

    async def create(
        self,
        session: AsyncSession,
        *,
        account_id: str,
        account_version: int,
        amount: int,
        resulting_balance: int,
        order_ref: Optional[str] = None,
        reverses_transaction_id: Optional[str] = None,
        description: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ) -> LedgerTransaction:
        """
        Crea un registro en el ledger. transaction_id permite fijar el id
        de antemano; si no se pasa lo genera el modelo.

        Validaciones:
        - amount != 0
        """
        if amount == 0:
            raise ValueError("amount cannot be zero")

        tx = LedgerTransaction(
            account_id=account_id,
            account_version=account_version,
            kind=TransactionKind.DEBIT if amount < 0 else TransactionKind.CREDIT,
            amount=amount,
            order_ref=order_ref,
            resulting_balance=resulting_balance,
            status=TransactionStatus.APPLIED,
            reverses_transaction_id=reverses_transaction_id,
            description=description,
        )
        if transaction_id is not None:
            tx.transaction_id = transaction_id
        session.add(tx)
        await session.flush()

        logger.debug(
            "LedgerTransaction created: account=%s delta=%+d after=%d ref=%s",
            account_id, amount, resulting_balance, order_ref,
        )
        return tx

    async def get(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> Optional[LedgerTransaction]:
        return await session.get(LedgerTransaction, transaction_id)

    async def get_applied_debit_by_order_ref(
        self,
        session: AsyncSession,
        account_id: str,
        order_ref: str,
    ) -> Optional[LedgerTransaction]:
        """
        Busca el débito vigente (applied) de un order_ref.
        Base de la idempotencia de charge().
        """
        stmt = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.account_id == account_id,
                LedgerTransaction.order_ref == order_ref,
                LedgerTransaction.kind == TransactionKind.DEBIT,
                LedgerTransaction.status == TransactionStatus.APPLIED,
            )
            .order_by(LedgerTransaction.account_version.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_applied_credit_by_order_ref(
        self,
        session: AsyncSession,
        account_id: str,
        order_ref: str,
    ) -> Optional[LedgerTransaction]:
        """
        Crédito directo (top-up/ajuste) ya registrado con ese order_ref.
        Las reversiones no cuentan: reutilizan el order_ref del débito.
        """
        stmt = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.account_id == account_id,
                LedgerTransaction.order_ref == order_ref,
                LedgerTransaction.kind == TransactionKind.CREDIT,
                LedgerTransaction.status == TransactionStatus.APPLIED,
                LedgerTransaction.reverses_transaction_id.is_(None),
            )
            .order_by(LedgerTransaction.account_version.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_reversal_of(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> Optional[LedgerTransaction]:
        """Registro compensatorio que revierte `transaction_id`, si existe."""
        stmt = select(LedgerTransaction).where(
            LedgerTransaction.reverses_transaction_id == transaction_id
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_reversed(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> bool:
        """
        Transición applied -> reversed. Condicional: devuelve False si el
        registro ya no estaba applied (otra reversión ganó).
        """
        stmt = (
            update(LedgerTransaction)
            .where(
                LedgerTransaction.transaction_id == transaction_id,
                LedgerTransaction.status == TransactionStatus.APPLIED,
            )
            .values(status=TransactionStatus.REVERSED)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def list_page(
        self,
        session: AsyncSession,
        account_id: str,
        *,
        after_version: int,
        upto_version: int,
        limit: int,
    ) -> List[LedgerTransaction]:
        """
        Página de historial en orden cronológico (keyset sobre
        account_version), acotada a `upto_version`.
        """
        stmt = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.account_id == account_id,
                LedgerTransaction.account_version > after_version,
                LedgerTransaction.account_version <= upto_version,
            )
            .order_by(LedgerTransaction.account_version.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def sum_amounts(
        self,
        session: AsyncSession,
        account_id: str,
    ) -> tuple[int, int]:
        """
        Suma de amounts y número de registros de la cuenta.
        """
        stmt = select(
            func.coalesce(func.sum(LedgerTransaction.amount), 0),
            func.count(LedgerTransaction.transaction_id),
        ).where(LedgerTransaction.account_id == account_id)
        result = await session.execute(stmt)
        total, count = result.one()
        return int(total), int(count)


__all__ = [
    "AccountRepository",
    "LedgerTransactionRepository",
]
