# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/admin/services.py

Colaborador de administración / reportes del ledger.

- Consultas de solo lectura (balance, historial)
- Ajustes manuales de saldo, siempre como movimientos del ledger
  (crédito o débito compensatorio), nunca escribiendo el balance directo
- Reconciliación balance vs. suma del ledger

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from wallet_ledger.modules.ledger import (
    ConsistencyReport,
    InsufficientFundsError,
    LedgerError,
    LedgerStore,
    TransactionHistory,
)
from wallet_ledger.modules.settlement import (
    SettlementReason,
    SettlementResult,
    failure_result,
)

logger = logging.getLogger(__name__)


class LedgerAdminService:
    """
    Servicio para operadores del ledger.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    async def get_balance(self, account_id: str) -> int:
        return await self.store.get_balance(account_id)

    def list_transactions(self, account_id: str) -> TransactionHistory:
        return self.store.list_transactions(account_id)

    async def adjust_balance(
        self,
        account_id: str,
        delta: int,
        reference: str,
        reason: Optional[str] = None,
    ) -> SettlementResult:
        """
        Ajuste manual de saldo.

        delta > 0 → crédito; delta < 0 → débito (puede ser declined por
        saldo insuficiente). `reference` se registra como order_ref: repetir
        un ajuste con la misma referencia devuelve el ya aplicado.
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            logger.warning("Adjustment rejected: account=%s delta=%r ref=%s", account_id, delta, reference)
            return SettlementResult.failed(
                SettlementReason.INVALID_AMOUNT,
                f"Invalid adjustment: {delta!r} (must be a non-zero integer)",
            )

        description = reason or "Manual adjustment"
        try:
            if delta > 0:
                written = await self.store.credit(
                    account_id, delta, reference, description=description,
                )
            else:
                written = await self.store.atomic_debit(
                    account_id, -delta, reference, description=description,
                )
        except InsufficientFundsError as exc:
            logger.info(
                "Adjustment declined: account=%s delta=%d available=%d ref=%s",
                account_id, delta, exc.available, reference,
            )
            return SettlementResult.declined(SettlementReason.INSUFFICIENT_FUNDS, str(exc))
        except LedgerError as exc:
            logger.error(
                "Adjustment failed: account=%s delta=%d ref=%s error=%s",
                account_id, delta, reference, type(exc).__name__,
            )
            return failure_result(exc)

        logger.info(
            "Balance adjusted: account=%s delta=%+d balance=%d ref=%s tx=%s reason=%s",
            account_id, delta, written.new_balance, reference, written.transaction_id, description,
        )
        return SettlementResult.settled(
            written.transaction_id,
            written.new_balance,
            replayed=written.replayed,
        )

    async def reconcile(self, account_ids: Iterable[str]) -> List[ConsistencyReport]:
        """
        Verifica balance == suma del ledger por cuenta.
        Las discrepancias se reportan (log ERROR) pero no se corrigen.

        Una cuenta que no se puede verificar (lock ocupado, BD caída) se
        registra en el log y se omite del resultado; el resto continúa.
        """
        reports: List[ConsistencyReport] = []
        skipped = 0
        for account_id in account_ids:
            try:
                report = await self.store.check_consistency(account_id)
            except LedgerError as exc:
                skipped += 1
                logger.error(
                    "Reconciliation skipped account: account=%s error=%s detail=%s",
                    account_id, type(exc).__name__, exc,
                )
                continue
            if not report.is_consistent:
                logger.error(
                    "Ledger drift detected: account=%s balance=%d ledger_sum=%d drift=%+d",
                    account_id, report.balance, report.ledger_sum, report.drift,
                )
            reports.append(report)

        logger.info(
            "Reconciliation finished: accounts=%d inconsistent=%d skipped=%d",
            len(reports), sum(1 for r in reports if not r.is_consistent), skipped,
        )
        return reports


__all__ = ["LedgerAdminService"]
