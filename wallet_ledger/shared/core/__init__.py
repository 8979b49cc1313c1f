# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/core/__init__.py

Utilidades transversales del núcleo (reintentos).
"""

from .retry_utils import is_transient_db_error, retry_with_backoff

__all__ = ["is_transient_db_error", "retry_with_backoff"]
