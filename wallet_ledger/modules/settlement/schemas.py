# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/schemas.py

SettlementResult: valor de retorno explícito de charge() y reverse().
El motor nunca lanza por resultados esperados; el procesador de órdenes
decide qué hacer mirando `status`.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import RETRYABLE_REASONS, SettlementReason, SettlementStatus


@dataclass(frozen=True)
class SettlementResult:
    status: SettlementStatus
    reason: Optional[SettlementReason] = None
    transaction_id: Optional[str] = None
    new_balance: Optional[int] = None
    replayed: bool = False
    message: Optional[str] = None

    # ---------------------------------------------------------
    # Constructores
    # ---------------------------------------------------------
    @classmethod
    def settled(
        cls,
        transaction_id: str,
        new_balance: int,
        *,
        replayed: bool = False,
        reason: Optional[SettlementReason] = None,
    ) -> "SettlementResult":
        return cls(
            status=SettlementStatus.SETTLED,
            reason=reason,
            transaction_id=transaction_id,
            new_balance=new_balance,
            replayed=replayed,
        )

    @classmethod
    def declined(
        cls,
        reason: SettlementReason = SettlementReason.INSUFFICIENT_FUNDS,
        message: Optional[str] = None,
    ) -> "SettlementResult":
        return cls(status=SettlementStatus.DECLINED, reason=reason, message=message)

    @classmethod
    def failed(cls, reason: SettlementReason, message: Optional[str] = None) -> "SettlementResult":
        return cls(status=SettlementStatus.FAILED, reason=reason, message=message)

    # ---------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------
    @property
    def is_settled(self) -> bool:
        return self.status == SettlementStatus.SETTLED

    @property
    def is_declined(self) -> bool:
        return self.status == SettlementStatus.DECLINED

    @property
    def is_failed(self) -> bool:
        return self.status == SettlementStatus.FAILED

    @property
    def is_retryable(self) -> bool:
        """True si reintentar con el mismo order_ref puede tener éxito."""
        return self.is_failed and self.reason in RETRYABLE_REASONS

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "transaction_id": self.transaction_id,
            "new_balance": self.new_balance,
            "replayed": self.replayed,
            "message": self.message,
        }


__all__ = ["SettlementResult"]
