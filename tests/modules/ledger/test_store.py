# -*- coding: utf-8 -*-
"""
tests/modules/ledger/test_store.py

Tests de LedgerStore contra SQLite real:
- creación perezosa de cuentas
- débitos/créditos atómicos y registro en el ledger
- idempotencia por order_ref
- reversión (applied -> reversed) en la misma unidad de trabajo
- consistencia balance == suma del ledger
"""

import pytest

from wallet_ledger.modules.ledger import (
    AlreadyReversedError,
    InsufficientFundsError,
    InvalidAmountError,
    TransactionKind,
    TransactionNotFoundError,
    TransactionStatus,
)


@pytest.mark.asyncio
async def test_get_balance_creates_account_lazily(store):
    assert await store.get_balance("acct-new") == 0

    snapshot = await store.get_account("acct-new")
    assert snapshot.balance == 0
    assert snapshot.version == 0


@pytest.mark.asyncio
async def test_credit_then_debit_updates_balance_and_version(store):
    credited = await store.credit("acct-1", 1000, "topup-1")
    assert credited.new_balance == 1000
    assert credited.replayed is False

    debited = await store.atomic_debit("acct-1", 300, "order-1")
    assert debited.new_balance == 700

    snapshot = await store.get_account("acct-1")
    assert snapshot.balance == 700
    assert snapshot.version == 2

    tx = await store.get_transaction(debited.transaction_id)
    assert tx.amount == -300
    assert tx.kind == TransactionKind.DEBIT
    assert tx.status == TransactionStatus.APPLIED
    assert tx.resulting_balance == 700
    assert tx.account_version == 2
    assert tx.order_ref == "order-1"


@pytest.mark.asyncio
async def test_debit_insufficient_funds_leaves_no_trace(store):
    await store.credit("acct-1", 100)

    with pytest.raises(InsufficientFundsError) as ei:
        await store.atomic_debit("acct-1", 101, "order-1")

    assert ei.value.requested == 101
    assert ei.value.available == 100

    snapshot = await store.get_account("acct-1")
    assert snapshot.balance == 100
    assert snapshot.version == 1
    assert len(await store.list_transactions("acct-1").to_list()) == 1


@pytest.mark.asyncio
async def test_debit_exact_balance_reaches_zero(store):
    await store.credit("acct-1", 50)
    result = await store.atomic_debit("acct-1", 50, "order-1")
    assert result.new_balance == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5, 1.5, "10", True, None])
async def test_invalid_amounts_rejected_before_storage(store, amount):
    with pytest.raises(InvalidAmountError):
        await store.atomic_debit("acct-1", amount, "order-1")
    with pytest.raises(InvalidAmountError):
        await store.credit("acct-1", amount)


@pytest.mark.asyncio
async def test_debit_same_order_ref_is_replayed(store):
    await store.credit("acct-1", 1000)

    first = await store.atomic_debit("acct-1", 400, "order-1")
    second = await store.atomic_debit("acct-1", 400, "order-1")

    assert second.replayed is True
    assert second.transaction_id == first.transaction_id
    assert second.new_balance == first.new_balance == 600
    assert await store.get_balance("acct-1") == 600


@pytest.mark.asyncio
async def test_order_ref_is_scoped_per_account(store):
    await store.credit("acct-a", 100)
    await store.credit("acct-b", 100)

    a = await store.atomic_debit("acct-a", 10, "order-1")
    b = await store.atomic_debit("acct-b", 10, "order-1")

    assert a.transaction_id != b.transaction_id
    assert b.replayed is False


@pytest.mark.asyncio
async def test_credit_with_reversal_flips_original(store):
    await store.credit("acct-1", 500)
    debit = await store.atomic_debit("acct-1", 200, "order-1")

    reversal = await store.credit(
        "acct-1", 200, "order-1", reverses_transaction_id=debit.transaction_id
    )
    assert reversal.new_balance == 500

    original = await store.get_transaction(debit.transaction_id)
    assert original.status == TransactionStatus.REVERSED

    found = await store.find_reversal(debit.transaction_id)
    assert found.transaction_id == reversal.transaction_id
    assert found.reverses_transaction_id == debit.transaction_id


@pytest.mark.asyncio
async def test_second_reversal_raises_and_writes_nothing(store):
    await store.credit("acct-1", 500)
    debit = await store.atomic_debit("acct-1", 200, "order-1")
    await store.credit("acct-1", 200, reverses_transaction_id=debit.transaction_id)

    with pytest.raises(AlreadyReversedError):
        await store.credit("acct-1", 200, reverses_transaction_id=debit.transaction_id)

    assert await store.get_balance("acct-1") == 500
    assert len(await store.list_transactions("acct-1").to_list()) == 3


@pytest.mark.asyncio
async def test_reversal_of_unknown_or_foreign_transaction(store):
    await store.credit("acct-a", 100)
    debit = await store.atomic_debit("acct-a", 10, "order-1")

    with pytest.raises(TransactionNotFoundError):
        await store.credit("acct-a", 10, reverses_transaction_id="does-not-exist")

    # Una reversión solo puede abonarse a la cuenta del original
    with pytest.raises(TransactionNotFoundError):
        await store.credit("acct-b", 10, reverses_transaction_id=debit.transaction_id)


@pytest.mark.asyncio
async def test_reversed_debit_no_longer_blocks_order_ref(store):
    await store.credit("acct-1", 100)
    first = await store.atomic_debit("acct-1", 30, "order-1")
    await store.credit("acct-1", 30, "order-1", reverses_transaction_id=first.transaction_id)

    assert await store.find_applied_debit("acct-1", "order-1") is None

    again = await store.atomic_debit("acct-1", 30, "order-1")
    assert again.replayed is False
    assert again.transaction_id != first.transaction_id


@pytest.mark.asyncio
async def test_check_consistency_matches_ledger_sum(store):
    await store.credit("acct-1", 1000)
    await store.atomic_debit("acct-1", 250, "order-1")
    debit = await store.atomic_debit("acct-1", 100, "order-2")
    await store.credit("acct-1", 100, reverses_transaction_id=debit.transaction_id)

    report = await store.check_consistency("acct-1")
    assert report.is_consistent
    assert report.balance == report.ledger_sum == 750
    assert report.transaction_count == 4
    assert report.drift == 0


@pytest.mark.asyncio
async def test_get_transaction_unknown_returns_none(store):
    assert await store.get_transaction("missing") is None


@pytest.mark.asyncio
async def test_credit_same_order_ref_is_replayed(store):
    first = await store.credit("acct-1", 1000, "topup-1")
    second = await store.credit("acct-1", 1000, "topup-1")

    assert second.replayed is True
    assert second.transaction_id == first.transaction_id
    assert second.new_balance == first.new_balance == 1000
    assert await store.get_balance("acct-1") == 1000
    assert len(await store.list_transactions("acct-1").to_list()) == 1


@pytest.mark.asyncio
async def test_reversal_credit_is_not_blocked_by_order_ref(store):
    await store.credit("acct-1", 100)
    first = await store.atomic_debit("acct-1", 30, "order-1")
    await store.credit("acct-1", 30, "order-1", reverses_transaction_id=first.transaction_id)

    again = await store.atomic_debit("acct-1", 30, "order-1")
    reversal = await store.credit(
        "acct-1", 30, "order-1", reverses_transaction_id=again.transaction_id
    )

    assert reversal.replayed is False
    assert await store.get_balance("acct-1") == 100
