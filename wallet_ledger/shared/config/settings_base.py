# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/config/settings_base.py

Base de configuración (Pydantic v2) para el motor de ledger de wallets.
- Esta clase NO instancia singletons; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: WalletLedger
Fecha: 2026-10-19
"""

from typing import Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="WalletLedger", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")

    # =========================
    # Base de datos
    # =========================
    db_url: str = Field(default="sqlite+aiosqlite:///./wallet_ledger.db", validation_alias="DB_URL")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=5, validation_alias="DB_POOL_TIMEOUT")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    # Solo SQLite: espera máxima por el lock de archivo antes de "database is locked"
    db_busy_timeout_s: float = Field(default=5.0, validation_alias="DB_BUSY_TIMEOUT_S")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        URL de conexión para SQLAlchemy async.
        Normaliza esquemas postgres:// / postgresql:// al driver asyncpg.
        """
        url = self.db_url
        if url.startswith("postgres://"):
            url = "postgresql+asyncpg://" + url[len("postgres://"):]
        elif url.startswith("postgresql://"):
            url = "postgresql+asyncpg://" + url[len("postgresql://"):]
        return url

    # =========================
    # Ledger (concurrencia y reintentos)
    # =========================
    ledger_lock_timeout_s: float = Field(default=5.0, validation_alias="LEDGER_LOCK_TIMEOUT_S")
    ledger_cas_max_retries: int = Field(default=5, validation_alias="LEDGER_CAS_MAX_RETRIES")
    ledger_storage_max_retries: int = Field(default=3, validation_alias="LEDGER_STORAGE_MAX_RETRIES")
    ledger_retry_base_delay_s: float = Field(default=0.05, validation_alias="LEDGER_RETRY_BASE_DELAY_S")
    ledger_retry_max_delay_s: float = Field(default=1.0, validation_alias="LEDGER_RETRY_MAX_DELAY_S")
    ledger_history_page_size: int = Field(default=100, validation_alias="LEDGER_HISTORY_PAGE_SIZE")

    # Moneda de presentación; los saldos siempre se guardan en unidades menores
    ledger_currency: str = Field(default="USD", validation_alias="LEDGER_CURRENCY")
    ledger_currency_exponent: int = Field(default=2, validation_alias="LEDGER_CURRENCY_EXPONENT")

    # =========================
    # Settlement / gateway de checkout
    # =========================
    settlement_enabled: bool = Field(default=True, validation_alias="SETTLEMENT_ENABLED")
    gateway_title: str = Field(default="Pay By Wallet Credit", validation_alias="GATEWAY_TITLE")
    gateway_description: str = Field(
        default="Pay with your Wallet Credit.",
        validation_alias="GATEWAY_DESCRIPTION",
    )

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _ledger_checks(self) -> None:
        """
        Validaciones mínimas de coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        if self.ledger_lock_timeout_s <= 0:
            raise ValueError("LEDGER_LOCK_TIMEOUT_S debe ser > 0")
        if self.ledger_cas_max_retries < 1:
            raise ValueError("LEDGER_CAS_MAX_RETRIES debe ser >= 1")
        if self.ledger_storage_max_retries < 0:
            raise ValueError("LEDGER_STORAGE_MAX_RETRIES debe ser >= 0")
        if self.ledger_history_page_size < 1:
            raise ValueError("LEDGER_HISTORY_PAGE_SIZE debe ser >= 1")

        # En producción el ledger vive en PostgreSQL (CAS + row locks reales)
        if self.is_prod and self.is_sqlite:
            raise ValueError("DB_URL no puede apuntar a SQLite en producción")

        if self.is_dev and self.is_sqlite:
            logger.info("ℹ️ Ledger usando SQLite local (%s)", self.database_url)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo wallet_ledger/shared/config/settings_base.py
