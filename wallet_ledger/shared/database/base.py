# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_str_enum: helper para mapear enums Python a columnas portables
  (VARCHAR + CHECK), válidas tanto en PostgreSQL como en SQLite

Autor: WalletLedger
Fecha: 2026-10-19
"""

from __future__ import annotations

from enum import Enum
from typing import Type

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM del ledger.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_str_enum(enum_cls: Type[Enum], name: str | None = None) -> SQLEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy que persiste el `.value` del enum.

    Uso típico:

        status: Mapped[TransactionStatus] = mapped_column(
            as_str_enum(TransactionStatus, name="transaction_status"),
            nullable=False,
        )

    - native_enum=False: se guarda como VARCHAR con CHECK, sin crear tipos
      en la BD (el mismo esquema funciona en SQLite para pruebas).
    """
    enum_name = name or enum_cls.__name__.lower()
    return SQLEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=True,
        length=32,
        values_callable=lambda e: [x.value for x in e],
    )


__all__ = ["Base", "NAMING_CONVENTION", "as_str_enum"]

# Fin del archivo wallet_ledger/shared/database/base.py
