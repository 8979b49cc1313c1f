# -*- coding: utf-8 -*-
"""
tests/conftest.py

Config global de tests del ledger.

- Cada test obtiene su propia base SQLite (archivo en tmp_path) con las
  tablas creadas vía init_models, así no hay estado compartido.
- Fixtures de alto nivel: store (LedgerStore), settlement (SettlementEngine),
  admin (LedgerAdminService).
"""

import os

import pytest
import pytest_asyncio

from wallet_ledger.modules.admin import LedgerAdminService
from wallet_ledger.modules.ledger import LedgerStore
from wallet_ledger.modules.settlement import SettlementEngine
from wallet_ledger.shared.config import EnvTestingSettings, get_settings
from wallet_ledger.shared.database import build_engine, build_session_factory, init_models

# La suite nunca debe caer en la configuración de desarrollo por accidente
os.environ.setdefault("PYTHON_ENV", "test")


@pytest.fixture
def test_settings(tmp_path):
    """Settings de pruebas apuntando a una base SQLite aislada."""
    db_path = tmp_path / "ledger.db"
    return EnvTestingSettings(
        db_url=f"sqlite+aiosqlite:///{db_path}",
        ledger_lock_timeout_s=5.0,
    )


@pytest_asyncio.fixture
async def db_engine(test_settings):
    engine = build_engine(test_settings)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def store(session_factory, test_settings):
    return LedgerStore.from_settings(session_factory, test_settings)


@pytest.fixture
def settlement(store):
    return SettlementEngine(store)


@pytest.fixture
def admin(store):
    return LedgerAdminService(store)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
