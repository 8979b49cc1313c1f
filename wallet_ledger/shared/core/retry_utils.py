# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/core/retry_utils.py

Reintentos con backoff exponencial (+ jitter) para errores transitorios de
la base de datos: conexiones caídas, "database is locked", timeouts del
driver. Los errores de negocio nunca pasan por aquí: se propagan tal cual.

Uso:
    from wallet_ledger.shared.core.retry_utils import retry_with_backoff

    result = await retry_with_backoff(
        store._write_once,
        account_id,
        max_retries=3,
        base_delay=0.05,
    )

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


def is_transient_db_error(exc: BaseException) -> bool:
    """
    True si el error de SQLAlchemy amerita reintento.

    - OperationalError / InterfaceError: conexión, lock de archivo, timeouts
    - DBAPIError con connection_invalidated: el pool descartó la conexión
    """
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return False


async def retry_with_backoff(
    func: Callable[..., Awaitable[Any]],
    *args,
    max_retries: int = 3,
    base_delay: float = 0.05,
    max_delay: float = 1.0,
    backoff_factor: float = 2.0,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    **kwargs
) -> Any:
    """
    Ejecuta una corrutina con reintentos y backoff exponencial.

    Args:
        func: Función async a ejecutar
        *args: Argumentos posicionales para func
        max_retries: Número máximo de reintentos (0 = un solo intento)
        base_delay: Delay inicial en segundos
        max_delay: Delay máximo en segundos
        backoff_factor: Factor de multiplicación del delay
        should_retry: Predicado sobre la excepción (default: is_transient_db_error)
        **kwargs: Argumentos nombrados para func

    Returns:
        Lo que devuelva func

    Raises:
        La última excepción si todos los reintentos fallan, o cualquier
        excepción que el predicado no considere transitoria.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries debe ser >= 0, recibido: {max_retries}")
    if base_delay <= 0:
        raise ValueError(f"base_delay debe ser > 0, recibido: {base_delay}")

    should_retry = should_retry or is_transient_db_error
    delay = base_delay

    for attempt in range(max_retries + 1):
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if not should_retry(e):
                raise
            if attempt >= max_retries:
                logger.error(
                    "Transient error persisted after %d attempts: %s: %s",
                    max_retries + 1, type(e).__name__, e,
                )
                raise
            logger.warning(
                "Transient error (%s) on attempt %d/%d, retrying in %.3fs",
                type(e).__name__, attempt + 1, max_retries + 1, delay,
            )
            # Jitter para evitar thundering herd
            await asyncio.sleep(delay + random.uniform(0, 0.2 * delay))
            delay = min(delay * backoff_factor, max_delay)
            continue

        if attempt > 0:
            logger.info("Succeeded after %d attempts", attempt + 1)
        return result

    raise RuntimeError("Reintentos agotados sin excepción clara")  # pragma: no cover


__all__ = ["retry_with_backoff", "is_transient_db_error"]
# Fin del archivo wallet_ledger/shared/core/retry_utils.py
