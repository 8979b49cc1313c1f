# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/services.py

SettlementEngine: orquesta un cargo "pagar con saldo de wallet", su
reversión y el reintento idempotente.

Flujo:
    Procesador de órdenes
      → SettlementEngine.charge(account_id, amount, order_ref)
      → LedgerStore.atomic_debit(...)
      → SettlementResult (settled / declined / failed)

Reglas:
- Nunca lanza por resultados esperados: toda excepción del ledger se
  traduce a un SettlementResult.
- Cualquier falla que no sea un rechazo de negocio es FAILED (reintentar
  más tarde); jamás un éxito silencioso.
- Mismo order_ref → mismo resultado registrado (replayed=True).

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Optional

from wallet_ledger.modules.ledger import (
    AlreadyReversedError,
    ConcurrencyConflictError,
    InsufficientFundsError,
    InvalidAmountError,
    LedgerError,
    LedgerStore,
    LockTimeoutError,
    StorageUnavailableError,
    TransactionNotFoundError,
    TransactionRecord,
    ensure_positive_amount,
)
from wallet_ledger.shared.config import BaseAppSettings, get_settings

from .enums import SettlementReason
from .metrics import REVERSALS_TOTAL, SETTLEMENTS_TOTAL, SETTLEMENT_SECONDS
from .schemas import SettlementResult

logger = logging.getLogger(__name__)


def failure_result(exc: LedgerError) -> SettlementResult:
    """Traduce fallas del sistema del ledger a FAILED{reason}."""
    if isinstance(exc, LockTimeoutError):
        return SettlementResult.failed(SettlementReason.TIMEOUT, str(exc))
    if isinstance(exc, ConcurrencyConflictError):
        return SettlementResult.failed(SettlementReason.CONFLICT, str(exc))
    if isinstance(exc, StorageUnavailableError):
        return SettlementResult.failed(SettlementReason.STORAGE_UNAVAILABLE, str(exc))
    if isinstance(exc, TransactionNotFoundError):
        return SettlementResult.failed(SettlementReason.NOT_FOUND, str(exc))
    if isinstance(exc, InvalidAmountError):
        return SettlementResult.failed(SettlementReason.INVALID_AMOUNT, str(exc))
    raise exc


class SettlementEngine:
    """
    Motor de settlement sobre un LedgerStore.

    `enabled=False` equivale a deshabilitar el método de pago: los cargos
    se rechazan con FAILED{disabled}, las reversiones siguen permitidas
    para poder devolver siempre el dinero.
    """

    def __init__(self, store: LedgerStore, *, enabled: bool = True):
        self.store = store
        self.enabled = enabled

    @classmethod
    def from_settings(
        cls,
        store: LedgerStore,
        settings: Optional[BaseAppSettings] = None,
    ) -> "SettlementEngine":
        settings = settings or get_settings()
        return cls(store, enabled=settings.settlement_enabled)

    # ---------------------------------------------------------
    # charge
    # ---------------------------------------------------------
    async def charge(
        self,
        account_id: str,
        amount: int,
        order_ref: Optional[str],
    ) -> SettlementResult:
        """
        Cobra `amount` (unidades menores) del saldo de la cuenta.

        Returns:
            settled{transaction_id, new_balance} | declined{insufficient_funds}
            | failed{invalid_amount|disabled|timeout|conflict|storage_unavailable}
        """
        with SETTLEMENT_SECONDS.labels(operation="charge").time():
            result = await self._charge(account_id, amount, order_ref)

        SETTLEMENTS_TOTAL.labels(
            status=result.status.value,
            reason=result.reason.value if result.reason else "",
        ).inc()
        return result

    async def _charge(
        self,
        account_id: str,
        amount: int,
        order_ref: Optional[str],
    ) -> SettlementResult:
        if not self.enabled:
            logger.warning("Charge rejected, wallet payments disabled: account=%s ref=%s", account_id, order_ref)
            return SettlementResult.failed(SettlementReason.DISABLED, "Wallet payments are disabled")

        try:
            ensure_positive_amount(amount)
        except InvalidAmountError as exc:
            logger.warning("Charge rejected: account=%s amount=%r ref=%s", account_id, amount, order_ref)
            return SettlementResult.failed(SettlementReason.INVALID_AMOUNT, str(exc))

        try:
            # Reintento de una orden ya cobrada: se devuelve lo registrado
            if order_ref is not None:
                existing = await self.store.find_applied_debit(account_id, order_ref)
                if existing is not None:
                    logger.info(
                        "Charge replayed: account=%s ref=%s tx=%s",
                        account_id, order_ref, existing.transaction_id,
                    )
                    return SettlementResult.settled(
                        existing.transaction_id,
                        existing.resulting_balance,
                        replayed=True,
                    )

            written = await self.store.atomic_debit(account_id, amount, order_ref)

        except InsufficientFundsError as exc:
            logger.info(
                "Charge declined: account=%s amount=%d available=%d ref=%s",
                account_id, amount, exc.available, order_ref,
            )
            return SettlementResult.declined(SettlementReason.INSUFFICIENT_FUNDS, str(exc))

        except LedgerError as exc:
            logger.error(
                "Charge failed: account=%s amount=%d ref=%s error=%s",
                account_id, amount, order_ref, type(exc).__name__,
            )
            return failure_result(exc)

        logger.info(
            "Charge settled: account=%s amount=%d balance=%d ref=%s tx=%s replayed=%s",
            account_id, amount, written.new_balance, order_ref, written.transaction_id, written.replayed,
        )
        return SettlementResult.settled(
            written.transaction_id,
            written.new_balance,
            replayed=written.replayed,
        )

    # ---------------------------------------------------------
    # reverse
    # ---------------------------------------------------------
    async def reverse(self, transaction_id: str) -> SettlementResult:
        """
        Revierte un débito: abona el mismo monto a la cuenta y marca el
        original como reversed, en una sola unidad de trabajo.

        Una segunda reversión devuelve la primera (replayed=True,
        reason=already_reversed) sin escribir nada.
        """
        with SETTLEMENT_SECONDS.labels(operation="reverse").time():
            result = await self._reverse(transaction_id)

        REVERSALS_TOTAL.labels(status=result.status.value).inc()
        return result

    async def _reverse(self, transaction_id: str) -> SettlementResult:
        try:
            original = await self.store.get_transaction(transaction_id)
            if original is None:
                logger.warning("Reverse failed, unknown transaction: tx=%s", transaction_id)
                return SettlementResult.failed(
                    SettlementReason.NOT_FOUND,
                    f"Transaction {transaction_id} not found",
                )

            if not original.is_debit:
                logger.warning("Reverse rejected, not a debit: tx=%s amount=%+d", transaction_id, original.amount)
                return SettlementResult.failed(
                    SettlementReason.NOT_REVERSIBLE,
                    f"Transaction {transaction_id} is a credit",
                )

            if original.is_reversed:
                return await self._replay_reversal(original)

            try:
                written = await self.store.credit(
                    original.account_id,
                    -original.amount,
                    original.order_ref,
                    reverses_transaction_id=original.transaction_id,
                    description=f"Reversal of {original.transaction_id}",
                )
            except AlreadyReversedError:
                # Otra task revirtió entre la lectura y el lock
                return await self._replay_reversal(original)

        except LedgerError as exc:
            logger.error("Reverse failed: tx=%s error=%s", transaction_id, type(exc).__name__)
            return failure_result(exc)

        logger.info(
            "Reverse settled: account=%s amount=%d balance=%d original=%s tx=%s",
            original.account_id, -original.amount, written.new_balance,
            original.transaction_id, written.transaction_id,
        )
        return SettlementResult.settled(written.transaction_id, written.new_balance)

    async def _replay_reversal(self, original: TransactionRecord) -> SettlementResult:
        reversal = await self.store.find_reversal(original.transaction_id)
        if reversal is None:
            # reversed sin registro compensatorio: el ledger está inconsistente
            logger.error("Reversed transaction without reversal record: tx=%s", original.transaction_id)
            return SettlementResult.failed(
                SettlementReason.NOT_FOUND,
                f"Reversal of {original.transaction_id} not found",
            )

        logger.info(
            "Reverse replayed: original=%s reversal=%s",
            original.transaction_id, reversal.transaction_id,
        )
        return SettlementResult.settled(
            reversal.transaction_id,
            reversal.resulting_balance,
            replayed=True,
            reason=SettlementReason.ALREADY_REVERSED,
        )


__all__ = ["SettlementEngine", "failure_result"]
