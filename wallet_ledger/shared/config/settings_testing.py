# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, base de datos aislada
y tiempos de espera/reintentos cortos para que la suite sea rápida.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = "test"

    # --- Logging en test: menos ruido ---
    log_level: str = "WARNING"
    log_format: str = "pretty"

    # --- Base de datos: archivo separado para pruebas ---
    db_url: str = "sqlite+aiosqlite:///./wallet_ledger_test.db"

    # --- Ledger: esperas cortas ---
    ledger_lock_timeout_s: float = 2.0
    ledger_retry_base_delay_s: float = 0.01
    ledger_retry_max_delay_s: float = 0.1

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo wallet_ledger/shared/config/settings_testing.py
