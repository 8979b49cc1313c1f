# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/__init__.py

Settlement Engine: charge / reverse sobre el LedgerStore y el adaptador
de checkout que lo expone al procesador de órdenes.
"""

from .enums import RETRYABLE_REASONS, SettlementReason, SettlementStatus
from .gateway import (
    CheckoutResult,
    OrderPort,
    PaymentFields,
    WalletPaymentGateway,
    format_minor_units,
)
from .schemas import SettlementResult
from .services import SettlementEngine, failure_result

__all__ = [
    "SettlementStatus",
    "SettlementReason",
    "RETRYABLE_REASONS",
    "SettlementResult",
    "SettlementEngine",
    "failure_result",
    "OrderPort",
    "CheckoutResult",
    "PaymentFields",
    "WalletPaymentGateway",
    "format_minor_units",
]
