# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/__init__.py

Módulos de dominio: ledger, settlement, admin.
"""
