# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/ledger/exceptions.py

Taxonomía de errores del ledger.

- InsufficientFundsError: rechazo de negocio, nunca se reintenta
- ConcurrencyConflictError / LockTimeoutError / StorageUnavailableError:
  fallas del sistema; el caller puede reintentar con el mismo order_ref
"""


class LedgerError(Exception):
    """Base de todos los errores del ledger."""


class InvalidAmountError(LedgerError, ValueError):
    """Monto no positivo o no entero; se rechaza antes de tocar storage."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Invalid amount: {amount!r} (must be a positive integer)")


class InsufficientFundsError(LedgerError):
    """El saldo de la cuenta no alcanza para el cargo solicitado."""

    def __init__(self, account_id, requested, available):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Account {account_id}: requested {requested}, available {available}"
        )


class ConcurrencyConflictError(LedgerError):
    """El compare-and-swap sobre `version` perdió todas las veces permitidas."""

    def __init__(self, account_id, attempts):
        self.account_id = account_id
        self.attempts = attempts
        super().__init__(
            f"Account {account_id}: version conflict after {attempts} attempts"
        )


class LockTimeoutError(LedgerError):
    """No se obtuvo el lock de la cuenta dentro del tiempo configurado."""

    def __init__(self, account_id, timeout_s):
        self.account_id = account_id
        self.timeout_s = timeout_s
        super().__init__(
            f"Account {account_id}: lock not acquired within {timeout_s}s"
        )


class AlreadyReversedError(LedgerError):
    """La transacción ya fue revertida; no se escribe nada."""

    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} is already reversed")


class TransactionNotFoundError(LedgerError, LookupError):
    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class StorageUnavailableError(LedgerError):
    """El storage falló de forma persistente; no hubo escritura parcial."""


__all__ = [
    "LedgerError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "ConcurrencyConflictError",
    "LockTimeoutError",
    "AlreadyReversedError",
    "TransactionNotFoundError",
    "StorageUnavailableError",
]
