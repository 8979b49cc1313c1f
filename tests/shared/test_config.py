# -*- coding: utf-8 -*-
import pytest

from wallet_ledger.shared.config import (
    BaseAppSettings,
    DevSettings,
    EnvTestingSettings,
    ProdSettings,
    get_settings,
    load_settings,
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Evita heredar variables del shell del dev."""
    import os

    for k in list(os.environ.keys()):
        if k.startswith(("DB_", "LEDGER_", "SETTLEMENT_", "GATEWAY_", "LOG_", "APP_")):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("PYTHON_ENV", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_loader_returns_dev_by_default(monkeypatch):
    monkeypatch.delenv("PYTHON_ENV", raising=False)
    s = get_settings()
    assert isinstance(s, DevSettings)
    assert s.is_dev is True
    assert s.log_level == "DEBUG"


def test_loader_selects_test(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "test")
    s = get_settings()
    assert isinstance(s, EnvTestingSettings)
    assert s.is_test is True
    assert s.ledger_lock_timeout_s == 2.0


def test_loader_caches_singleton():
    assert get_settings() is get_settings()


def test_prod_rejects_sqlite(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("DB_URL", "sqlite+aiosqlite:///./prod.db")
    with pytest.raises(ValueError) as ei:
        load_settings("production")
    assert "sqlite" in str(ei.value).lower()


def test_prod_with_postgres(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("DB_URL", "postgres://ledger:secret@db:5432/ledger")
    s = load_settings("production")
    assert isinstance(s, ProdSettings)
    assert s.database_url == "postgresql+asyncpg://ledger:secret@db:5432/ledger"
    assert s.log_format == "json"
    assert s.is_sqlite is False


def test_env_overrides_ledger_values(monkeypatch):
    monkeypatch.setenv("LEDGER_LOCK_TIMEOUT_S", "0.5")
    monkeypatch.setenv("LEDGER_CAS_MAX_RETRIES", "9")
    monkeypatch.setenv("SETTLEMENT_ENABLED", "false")
    s = load_settings("development")
    assert s.ledger_lock_timeout_s == 0.5
    assert s.ledger_cas_max_retries == 9
    assert s.settlement_enabled is False


@pytest.mark.parametrize(
    "var, value",
    [
        ("LEDGER_LOCK_TIMEOUT_S", "0"),
        ("LEDGER_CAS_MAX_RETRIES", "0"),
        ("LEDGER_STORAGE_MAX_RETRIES", "-1"),
        ("LEDGER_HISTORY_PAGE_SIZE", "0"),
    ],
)
def test_ledger_checks_reject_invalid_values(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ValueError):
        load_settings("development")


def test_postgresql_scheme_normalized():
    s = BaseAppSettings(db_url="postgresql://u:p@h/db")
    assert s.database_url == "postgresql+asyncpg://u:p@h/db"
    assert BaseAppSettings(db_url="sqlite+aiosqlite:///x.db").is_sqlite is True
