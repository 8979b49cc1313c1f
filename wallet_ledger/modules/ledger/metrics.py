# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/metrics.py

Métricas del LedgerStore.
"""

from prometheus_client import Counter

from wallet_ledger.shared.observability import registry

LEDGER_WRITES_TOTAL = Counter(
    "ledger_writes_total",
    "Movimientos escritos en el ledger por tipo",
    ["kind"],  # kind: debit/credit
    registry=registry,
)

LEDGER_REPLAYS_TOTAL = Counter(
    "ledger_replays_total",
    "Débitos devueltos por idempotencia (mismo order_ref) sin escribir",
    registry=registry,
)

LEDGER_DECLINES_TOTAL = Counter(
    "ledger_insufficient_funds_total",
    "Débitos rechazados por saldo insuficiente",
    registry=registry,
)

LEDGER_CAS_CONFLICTS_TOTAL = Counter(
    "ledger_cas_conflicts_total",
    "Compare-and-swap perdidos sobre accounts.version",
    registry=registry,
)

LEDGER_LOCK_TIMEOUTS_TOTAL = Counter(
    "ledger_lock_timeouts_total",
    "Esperas por lock de cuenta que vencieron",
    registry=registry,
)

LEDGER_STORAGE_FAILURES_TOTAL = Counter(
    "ledger_storage_failures_total",
    "Operaciones que terminaron en StorageUnavailable",
    registry=registry,
)

__all__ = [
    "LEDGER_WRITES_TOTAL",
    "LEDGER_REPLAYS_TOTAL",
    "LEDGER_DECLINES_TOTAL",
    "LEDGER_CAS_CONFLICTS_TOTAL",
    "LEDGER_LOCK_TIMEOUTS_TOTAL",
    "LEDGER_STORAGE_FAILURES_TOTAL",
]
