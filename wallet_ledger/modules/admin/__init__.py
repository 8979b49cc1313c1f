# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/admin/__init__.py

Administración y reportes del ledger.
"""

from .services import LedgerAdminService

__all__ = ["LedgerAdminService"]
