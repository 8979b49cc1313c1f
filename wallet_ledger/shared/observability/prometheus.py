# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/observability/prometheus.py

Registro Prometheus propio del ledger. Los módulos declaran sus métricas
contra `registry` y el host que embebe la librería decide cómo exponerlas
(render_metrics devuelve el texto en formato de exposición).

Autor: WalletLedger
Fecha: 2026-10-19
"""

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

# --------------------------------------------------------------------------
# Registro global de Prometheus
# --------------------------------------------------------------------------
registry = CollectorRegistry()


def render_metrics() -> tuple[bytes, str]:
    """Devuelve (payload, content_type) listo para un endpoint /metrics."""
    return generate_latest(registry), CONTENT_TYPE_LATEST


__all__ = ["registry", "render_metrics"]
