# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/observability/__init__.py

Métricas Prometheus compartidas.
"""

from .prometheus import registry, render_metrics

__all__ = ["registry", "render_metrics"]
