# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/metrics.py

Métricas del motor de settlement.
"""

from prometheus_client import Counter, Histogram

from wallet_ledger.shared.observability import registry

SETTLEMENTS_TOTAL = Counter(
    "settlements_total",
    "Charges procesados por status y reason",
    ["status", "reason"],  # reason="" cuando settled sin motivo
    registry=registry,
)

REVERSALS_TOTAL = Counter(
    "settlement_reversals_total",
    "Reversiones procesadas por status",
    ["status"],
    registry=registry,
)

SETTLEMENT_SECONDS = Histogram(
    "settlement_duration_seconds",
    "Latencia de charge/reverse",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=registry,
)

__all__ = ["SETTLEMENTS_TOTAL", "REVERSALS_TOTAL", "SETTLEMENT_SECONDS"]
