# -*- coding: utf-8 -*-
"""
wallet_ledger/modules/settlement/gateway.py

Adaptador de checkout "Pagar con saldo de wallet".

El ciclo de vida de la orden pertenece al host (tienda, carrito, stock):
aquí solo se habla con él a través de OrderPort y se devuelve un
CheckoutResult explícito en lugar de hooks del framework.

Mapeo:
- settled  → order.payment_complete(tx), result "success"
- declined → order.mark_failed(...), notas y avisos al cliente, "failure"
- failed   → sin tocar la orden, aviso "intente más tarde", "retry"

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Protocol

from wallet_ledger.shared.config import BaseAppSettings, get_settings

from .schemas import SettlementResult
from .services import SettlementEngine

logger = logging.getLogger(__name__)


INSUFFICIENT_BALANCE_NOTE = "Insufficient wallet balance."
ORDER_FAILED_NOTICE = "Order #{order_ref} has failed due to insufficient wallet balance."
ORDER_NOT_COMPLETED_NOTICE = "Your order could not be completed due to insufficient wallet balance."
TRY_AGAIN_NOTICE = "Wallet payment is temporarily unavailable. Please try again later."
BALANCE_LINE = "Your current wallet balance: {balance}"


class OrderPort(Protocol):
    """Lo mínimo que el gateway necesita de una orden del host."""

    @property
    def order_ref(self) -> str: ...

    @property
    def customer_id(self) -> str: ...

    @property
    def total_minor(self) -> int: ...

    def payment_complete(self, transaction_id: str) -> None: ...

    def mark_failed(self, note: str) -> None: ...

    def add_note(self, note: str) -> None: ...


@dataclass(frozen=True)
class CheckoutResult:
    """Respuesta al host: 'success' | 'failure' | 'retry'."""
    result: str
    settlement: SettlementResult
    notices: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.result == "success"


@dataclass(frozen=True)
class PaymentFields:
    """Lo que se muestra al cliente al elegir el método de pago."""
    title: str
    description: str
    balance_minor: int
    balance_formatted: str

    @property
    def balance_line(self) -> str:
        return BALANCE_LINE.format(balance=self.balance_formatted)


def format_minor_units(amount_minor: int, exponent: int = 2, currency: Optional[str] = None) -> str:
    """
    Formatea unidades menores con Decimal (nunca float).

        >>> format_minor_units(123456, 2, "USD")
        'USD 1,234.56'
    """
    if exponent < 0:
        raise ValueError("exponent must be >= 0")

    value = Decimal(amount_minor).scaleb(-exponent)
    text = f"{value:,.{exponent}f}"
    return f"{currency} {text}" if currency else text


class WalletPaymentGateway:
    def __init__(
        self,
        engine: SettlementEngine,
        *,
        title: str = "Pay By Wallet Credit",
        description: str = "Pay with your Wallet Credit.",
        currency: Optional[str] = None,
        currency_exponent: int = 2,
    ):
        self.engine = engine
        self.title = title
        self.description = description
        self.currency = currency
        self.currency_exponent = currency_exponent

    @classmethod
    def from_settings(
        cls,
        engine: SettlementEngine,
        settings: Optional[BaseAppSettings] = None,
    ) -> "WalletPaymentGateway":
        settings = settings or get_settings()
        return cls(
            engine,
            title=settings.gateway_title,
            description=settings.gateway_description,
            currency=settings.ledger_currency,
            currency_exponent=settings.ledger_currency_exponent,
        )

    @property
    def enabled(self) -> bool:
        return self.engine.enabled

    async def payment_fields(self, account_id: str) -> PaymentFields:
        balance = await self.engine.store.get_balance(account_id)
        return PaymentFields(
            title=self.title,
            description=self.description,
            balance_minor=balance,
            balance_formatted=format_minor_units(balance, self.currency_exponent, self.currency),
        )

    async def process_payment(self, order: OrderPort) -> CheckoutResult:
        settlement = await self.engine.charge(order.customer_id, order.total_minor, order.order_ref)

        if settlement.is_settled:
            order.payment_complete(settlement.transaction_id)
            logger.info(
                "Order paid with wallet: order=%s customer=%s tx=%s replayed=%s",
                order.order_ref, order.customer_id, settlement.transaction_id, settlement.replayed,
            )
            return CheckoutResult(result="success", settlement=settlement)

        if settlement.is_declined:
            order.mark_failed(INSUFFICIENT_BALANCE_NOTE)
            order.add_note(ORDER_NOT_COMPLETED_NOTICE)
            logger.info("Order failed, insufficient wallet balance: order=%s", order.order_ref)
            return CheckoutResult(
                result="failure",
                settlement=settlement,
                notices=[
                    ORDER_FAILED_NOTICE.format(order_ref=order.order_ref),
                    ORDER_NOT_COMPLETED_NOTICE,
                ],
            )

        # FAILED: la orden queda intacta para reintentar con el mismo order_ref
        logger.warning(
            "Wallet payment not processed: order=%s reason=%s",
            order.order_ref, settlement.reason.value if settlement.reason else None,
        )
        return CheckoutResult(result="retry", settlement=settlement, notices=[TRY_AGAIN_NOTICE])


__all__ = [
    "OrderPort",
    "CheckoutResult",
    "PaymentFields",
    "WalletPaymentGateway",
    "format_minor_units",
]
