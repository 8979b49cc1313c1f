# -*- coding: utf-8 -*-
"""
wallet_ledger/__init__.py

Motor de ledger de wallets: saldos por cuenta en unidades menores y
settlement de cargos "pagar con saldo", con reversión y reintento
idempotente.

Uso típico:
    from wallet_ledger.app import create_app

    app = await create_app()
    result = await app.settlement.charge("user-1", 500, "order-42")
    await app.close()

Autor: WalletLedger
Fecha: 2026-10-19
"""

__version__ = "0.1.0"

# Fin del archivo wallet_ledger/__init__.py
