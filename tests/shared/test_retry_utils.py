# -*- coding: utf-8 -*-
import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from wallet_ledger.shared.core import is_transient_db_error, retry_with_backoff


@pytest.fixture
def no_sleep(monkeypatch):
    """Evita esperas reales en los reintentos."""
    delays = []

    async def _fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("wallet_ledger.shared.core.retry_utils.asyncio.sleep", _fake_sleep)
    return delays


def _operational():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.mark.asyncio
async def test_retry_success_without_retries(no_sleep):
    async def _ok(value):
        return value * 2

    assert await retry_with_backoff(_ok, 21) == 42
    assert no_sleep == []


@pytest.mark.asyncio
async def test_retry_on_transient_error_then_success(no_sleep):
    calls = {"n": 0}

    async def _flaky():
        calls["n"] += 1
        if calls["n"] < 3:
            raise _operational()
        return "ok"

    assert await retry_with_backoff(_flaky, max_retries=3, base_delay=0.1) == "ok"
    assert calls["n"] == 3
    assert len(no_sleep) == 2
    # Backoff exponencial con jitter (<= 20%)
    assert 0.1 <= no_sleep[0] <= 0.12
    assert 0.2 <= no_sleep[1] <= 0.24


@pytest.mark.asyncio
async def test_retry_gives_up_after_max_retries(no_sleep):
    calls = {"n": 0}

    async def _down():
        calls["n"] += 1
        raise _operational()

    with pytest.raises(OperationalError):
        await retry_with_backoff(_down, max_retries=2)
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_non_transient_errors_are_not_retried(no_sleep):
    calls = {"n": 0}

    async def _bad():
        calls["n"] += 1
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    with pytest.raises(IntegrityError):
        await retry_with_backoff(_bad, max_retries=5)
    assert calls["n"] == 1
    assert no_sleep == []


@pytest.mark.asyncio
async def test_delay_is_capped(no_sleep):
    async def _down():
        raise _operational()

    with pytest.raises(OperationalError):
        await retry_with_backoff(_down, max_retries=4, base_delay=0.5, max_delay=1.0)
    assert max(no_sleep) <= 1.2


@pytest.mark.asyncio
async def test_param_validation():
    async def _noop():
        return None

    with pytest.raises(ValueError):
        await retry_with_backoff(_noop, max_retries=-1)
    with pytest.raises(ValueError):
        await retry_with_backoff(_noop, base_delay=0.0)


def test_is_transient_db_error():
    assert is_transient_db_error(_operational())
    assert not is_transient_db_error(IntegrityError("INSERT", {}, Exception("dup")))
    assert not is_transient_db_error(ValueError("x"))

    invalidated = DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
    assert is_transient_db_error(invalidated)
# Fin del archivo tests/shared/test_retry_utils.py
