# -*- coding: utf-8 -*-
"""
tests/modules/ledger/test_repositories.py

Repositorios y constraints del esquema (la BD es la última barrera contra
saldos negativos y reversiones duplicadas).
"""

import pytest
from sqlalchemy.exc import IntegrityError

from wallet_ledger.modules.ledger import (
    Account,
    AccountRepository,
    LedgerTransactionRepository,
    TransactionKind,
    TransactionStatus,
)
from wallet_ledger.shared.database import session_scope


@pytest.mark.asyncio
async def test_compare_and_swap_checks_version(session_factory):
    repo = AccountRepository()

    async with session_scope(session_factory) as session:
        await repo.add(session, "acct-1")

    async with session_scope(session_factory) as session:
        assert await repo.compare_and_swap(session, "acct-1", expected_version=0, new_balance=10)
        assert not await repo.compare_and_swap(session, "acct-1", expected_version=0, new_balance=20)

    async with session_factory() as session:
        account = await repo.get(session, "acct-1")
        assert account.balance == 10
        assert account.version == 1


@pytest.mark.asyncio
async def test_negative_balance_rejected_by_database(session_factory):
    with pytest.raises(IntegrityError):
        async with session_scope(session_factory) as session:
            session.add(Account(account_id="acct-neg", balance=-1, version=0))


@pytest.mark.asyncio
async def test_create_derives_kind_from_sign(session_factory):
    accounts = AccountRepository()
    txs = LedgerTransactionRepository()

    async with session_scope(session_factory) as session:
        await accounts.add(session, "acct-1")
        credit = await txs.create(
            session, account_id="acct-1", account_version=1, amount=50, resulting_balance=50,
        )
        debit = await txs.create(
            session, account_id="acct-1", account_version=2, amount=-20,
            resulting_balance=30, order_ref="order-1",
        )

    assert credit.kind == TransactionKind.CREDIT
    assert debit.kind == TransactionKind.DEBIT
    assert debit.status == TransactionStatus.APPLIED

    async with session_factory() as session:
        total, count = await txs.sum_amounts(session, "acct-1")
        assert (total, count) == (30, 2)
        found = await txs.get_applied_debit_by_order_ref(session, "acct-1", "order-1")
        assert found.transaction_id == debit.transaction_id


@pytest.mark.asyncio
async def test_create_rejects_zero_amount(session_factory):
    with pytest.raises(ValueError):
        async with session_factory() as session:
            await LedgerTransactionRepository().create(
                session, account_id="acct-1", account_version=1, amount=0, resulting_balance=0,
            )


@pytest.mark.asyncio
async def test_mark_reversed_is_conditional(session_factory):
    accounts = AccountRepository()
    txs = LedgerTransactionRepository()

    async with session_scope(session_factory) as session:
        await accounts.add(session, "acct-1")
        tx = await txs.create(
            session, account_id="acct-1", account_version=1, amount=-5, resulting_balance=0,
        )

    async with session_scope(session_factory) as session:
        assert await txs.mark_reversed(session, tx.transaction_id) is True
        assert await txs.mark_reversed(session, tx.transaction_id) is False


@pytest.mark.asyncio
async def test_duplicate_account_version_rejected(session_factory):
    accounts = AccountRepository()
    txs = LedgerTransactionRepository()

    async with session_scope(session_factory) as session:
        await accounts.add(session, "acct-1")

    with pytest.raises(IntegrityError):
        async with session_scope(session_factory) as session:
            await txs.create(session, account_id="acct-1", account_version=1, amount=5, resulting_balance=5)
            await txs.create(session, account_id="acct-1", account_version=1, amount=5, resulting_balance=10)
