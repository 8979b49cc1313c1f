# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/enums.py

Enums del motor de settlement.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from enum import Enum


class SettlementStatus(str, Enum):
    """
    Resultado de un charge/reverse.

    - SETTLED: el movimiento quedó registrado (o ya lo estaba)
    - DECLINED: rechazo de negocio (saldo insuficiente); no reintentar igual
    - FAILED: falla del sistema o entrada inválida; reintentable con el
      mismo order_ref salvo invalid_amount / not_found / not_reversible
    """
    SETTLED = "settled"
    DECLINED = "declined"
    FAILED = "failed"


class SettlementReason(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_AMOUNT = "invalid_amount"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    ALREADY_REVERSED = "already_reversed"
    NOT_FOUND = "not_found"
    NOT_REVERSIBLE = "not_reversible"
    DISABLED = "disabled"


# Fallas que se resuelven reintentando la misma operación
RETRYABLE_REASONS = frozenset({
    SettlementReason.CONFLICT,
    SettlementReason.TIMEOUT,
    SettlementReason.STORAGE_UNAVAILABLE,
})


__all__ = ["SettlementStatus", "SettlementReason", "RETRYABLE_REASONS"]
