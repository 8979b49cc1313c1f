# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/database/database.py

SQLAlchemy async: construcción de engine y session factory a partir del
settings activo (asyncpg en producción, aiosqlite en local/pruebas).

Provee:
- build_engine(settings) (create_async_engine)
- build_session_factory(engine) (async_sessionmaker)
- session_scope(): unidad de trabajo con commit/rollback
- init_models(engine): crea tablas (dev/test; en prod usar scripts SQL)
- check_database_health()

Notas:
- En SQLite se fija `timeout` de conexión (busy timeout) para que los
  escritores esperen el lock de archivo en vez de fallar de inmediato.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wallet_ledger.shared.config import BaseAppSettings, get_settings
from wallet_ledger.shared.database.base import Base  # reutilizamos la Base única

logger = logging.getLogger(__name__)


def build_engine(settings: Optional[BaseAppSettings] = None) -> AsyncEngine:
    """Crea el AsyncEngine según el settings (o el singleton si no se pasa)."""
    settings = settings or get_settings()
    url = settings.database_url

    engine_kwargs: dict[str, Any] = {
        "echo": settings.db_echo_sql,
        "future": True,
    }
    if settings.is_sqlite:
        engine_kwargs["connect_args"] = {"timeout": settings.db_busy_timeout_s}
    else:
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=settings.db_pool_pre_ping,
        )

    # Log de conexión (debug en dev, info en prod)
    log_level = logger.info if settings.is_prod else logger.debug
    log_level("[DB] Engine → %s (echo=%s)", url.split("@")[-1], settings.db_echo_sql)

    return create_async_engine(url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Unidad de trabajo: commit si el bloque termina bien, rollback si lanza
    (incluida la cancelación de la task). Nada queda a medio escribir.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise


async def init_models(engine: AsyncEngine) -> None:
    """Crea las tablas del ledger (desarrollo/pruebas)."""
    # Importar modelos para registrarlos en Base.metadata
    from wallet_ledger.modules.ledger import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_health(
    engine: AsyncEngine,
    timeout_s: float = 3.0,
    sql: str = "SELECT 1",
) -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except Exception as exc:
        logger.warning("[DB] Health check failed: %s", exc)
        return False


__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "session_scope",
    "init_models",
    "check_database_health",
]
# Fin del archivo wallet_ledger/shared/database/database.py
