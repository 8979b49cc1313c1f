# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/database/__init__.py

Helpers de base de datos (Base declarativa, engine, sesiones).
"""

from .base import Base, NAMING_CONVENTION, as_str_enum
from .database import (
    build_engine,
    build_session_factory,
    check_database_health,
    init_models,
    session_scope,
)

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_str_enum",
    "build_engine",
    "build_session_factory",
    "check_database_health",
    "init_models",
    "session_scope",
]
