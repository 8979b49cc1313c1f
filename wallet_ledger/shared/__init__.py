# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/__init__.py

Infraestructura compartida: configuración, base de datos y utilidades.
"""
