# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/locks.py

Locks por cuenta para serializar las mutaciones dentro del proceso.

- Un asyncio.Lock por account_id, creado bajo demanda y liberado cuando
  ya no hay tasks esperando (el registro no crece sin límite).
- La espera está acotada: si vence, LockTimeoutError.
- Cuentas distintas nunca comparten lock.

Entre procesos la serialización la da el compare-and-swap sobre
accounts.version (ver LedgerStore).

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from .exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


class AccountLockRegistry:
    """Registro de locks por cuenta (un event loop)."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, account_id: str) -> bool:
        lock = self._locks.get(account_id)
        return bool(lock and lock.locked())

    @asynccontextmanager
    async def hold(self, account_id: str, timeout_s: float) -> AsyncIterator[None]:
        """
        Adquiere el lock exclusivo de la cuenta durante el bloque.

        Raises:
            LockTimeoutError: si no se adquiere en `timeout_s` segundos
        """
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        self._holders[account_id] = self._holders.get(account_id, 0) + 1

        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=timeout_s)
            except asyncio.TimeoutError:
                logger.warning(
                    "Account lock timeout: account=%s timeout=%.3fs",
                    account_id, timeout_s,
                )
                raise LockTimeoutError(account_id, timeout_s) from None

            try:
                yield
            finally:
                lock.release()
        finally:
            self._holders[account_id] -= 1
            if self._holders[account_id] == 0:
                del self._holders[account_id]
                self._locks.pop(account_id, None)


__all__ = ["AccountLockRegistry"]
