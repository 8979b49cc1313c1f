# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/enums.py

Enums del ledger de wallets.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from enum import Enum


class TransactionKind(str, Enum):
    """
    Tipo de movimiento en el ledger (derivado del signo de amount).
    """
    DEBIT = "debit"    # Cargo (amount < 0)
    CREDIT = "credit"  # Abono (amount > 0)


class TransactionStatus(str, Enum):
    """
    Estado de una transacción.

    Única transición permitida: APPLIED -> REVERSED (terminal).
    """
    APPLIED = "applied"
    REVERSED = "reversed"


__all__ = [
    "TransactionKind",
    "TransactionStatus",
]
