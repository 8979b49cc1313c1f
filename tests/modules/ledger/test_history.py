# -*- coding: utf-8 -*-
"""
tests/modules/ledger/test_history.py

list_transactions: orden cronológico, paginación perezosa, iteración
acotada a la versión vista al empezar y re-iterable.
"""

import pytest

from wallet_ledger.modules.ledger import LedgerStore, TransactionHistory


@pytest.fixture
def paged_store(session_factory):
    return LedgerStore(session_factory, history_page_size=2)


async def _seed(store, account_id="acct-1"):
    await store.credit(account_id, 100, "topup-1")
    await store.atomic_debit(account_id, 10, "order-1")
    await store.atomic_debit(account_id, 20, "order-2")
    await store.credit(account_id, 5, "topup-2")
    await store.atomic_debit(account_id, 15, "order-3")


@pytest.mark.asyncio
async def test_history_is_ordered_across_pages(paged_store):
    await _seed(paged_store)

    history = paged_store.list_transactions("acct-1")
    assert isinstance(history, TransactionHistory)

    records = await history.to_list()
    assert [r.amount for r in records] == [100, -10, -20, 5, -15]
    assert [r.account_version for r in records] == [1, 2, 3, 4, 5]
    assert [r.resulting_balance for r in records] == [100, 90, 70, 75, 60]

    # El último resulting_balance coincide con el balance actual
    assert records[-1].resulting_balance == await paged_store.get_balance("acct-1")


@pytest.mark.asyncio
async def test_history_is_restartable(paged_store):
    await _seed(paged_store)
    history = paged_store.list_transactions("acct-1")

    first = [r.transaction_id async for r in history]
    second = [r.transaction_id async for r in history]
    assert first == second
    assert len(first) == 5


@pytest.mark.asyncio
async def test_history_is_bounded_by_version_at_start(paged_store):
    await _seed(paged_store)
    history = paged_store.list_transactions("acct-1")

    seen = []
    async for record in history:
        seen.append(record)
        if len(seen) == 1:
            await paged_store.credit("acct-1", 1, "late-topup")

    assert len(seen) == 5
    assert all(r.order_ref != "late-topup" for r in seen)

    # Una nueva iteración sí ve el movimiento posterior
    assert len(await history.to_list()) == 6


@pytest.mark.asyncio
async def test_history_of_unknown_account_is_empty(paged_store):
    assert await paged_store.list_transactions("nobody").to_list() == []
    assert await paged_store.get_balance("nobody") == 0
