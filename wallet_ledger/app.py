# -*- coding: utf-8 -*-
"""
wallet_ledger/app.py

Factory del proceso del ledger: arma, en orden, logging, engine de BD,
LedgerStore, SettlementEngine, gateway de checkout y servicio de admin,
todo a partir de un mismo settings.

Uso:
    app = await create_app()
    try:
        result = await app.settlement.charge("user-1", 500, "order-42")
    finally:
        await app.close()

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from wallet_ledger.modules.admin import LedgerAdminService
from wallet_ledger.modules.ledger import LedgerStore
from wallet_ledger.modules.settlement import SettlementEngine, WalletPaymentGateway
from wallet_ledger.shared.config import BaseAppSettings, get_settings, setup_logging_from_settings
from wallet_ledger.shared.database import (
    build_engine,
    build_session_factory,
    check_database_health,
    init_models,
)

logger = logging.getLogger(__name__)


@dataclass
class LedgerApp:
    """Componentes ya cableados de una instancia del ledger."""

    settings: BaseAppSettings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    store: LedgerStore
    settlement: SettlementEngine
    gateway: WalletPaymentGateway
    admin: LedgerAdminService

    async def is_healthy(self) -> bool:
        return await check_database_health(self.engine)

    async def close(self) -> None:
        logger.info("Ledger app shutting down: env=%s", self.settings.python_env)
        await self.engine.dispose()


async def create_app(
    settings: Optional[BaseAppSettings] = None,
    *,
    create_tables: Optional[bool] = None,
) -> LedgerApp:
    """
    Crea una instancia del ledger.

    create_tables=None crea el esquema fuera de producción; en producción
    el esquema lo gestionan las migraciones.
    """
    settings = settings or get_settings()
    setup_logging_from_settings(settings)

    engine = build_engine(settings)
    if create_tables is None:
        create_tables = not settings.is_prod
    if create_tables:
        await init_models(engine)

    session_factory = build_session_factory(engine)
    store = LedgerStore.from_settings(session_factory, settings)
    settlement = SettlementEngine.from_settings(store, settings)
    gateway = WalletPaymentGateway.from_settings(settlement, settings)

    logger.info(
        "Ledger app ready: env=%s settlement_enabled=%s tables_created=%s",
        settings.python_env, settlement.enabled, create_tables,
    )
    return LedgerApp(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        store=store,
        settlement=settlement,
        gateway=gateway,
        admin=LedgerAdminService(store),
    )


__all__ = ["LedgerApp", "create_app"]

# Fin del archivo wallet_ledger/app.py
