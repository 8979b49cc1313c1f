# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/config/logging_config.py

Logging del ledger.

- plain/pretty: una línea legible por evento (desarrollo, tests)
- json: un objeto por evento con `level`, `logger`, `message` y el campo
  fijo `service`, listo para el agregador de logs en producción
- El SQL de SQLAlchemy queda en WARNING salvo que DB_ECHO_SQL lo active

Autor: WalletLedger
Fecha: 2026-10-19
"""

import importlib
import logging.config
from typing import TYPE_CHECKING, Any, Dict, Literal

if TYPE_CHECKING:
    from .settings_base import BaseAppSettings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["plain", "pretty", "json"]

SERVICE_NAME = "wallet-ledger"

# Nombres de campo del JSON (LogRecord -> clave emitida)
JSON_RENAMED_FIELDS = {"levelname": "level", "name": "logger", "asctime": "timestamp"}


def _json_formatter_path() -> str:
    # python-json-logger v3 movió jsonlogger -> json
    try:
        importlib.import_module("pythonjsonlogger.json")
        return "pythonjsonlogger.json.JsonFormatter"
    except ImportError:  # pragma: no cover
        return "pythonjsonlogger.jsonlogger.JsonFormatter"


def build_logging_config(
    level: LogLevel = "INFO",
    fmt: LogFormat = "plain",
    *,
    echo_sql: bool = False,
) -> Dict[str, Any]:
    """Arma el dict para logging.config.dictConfig."""
    formatter = "json" if fmt == "json" else "line"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "line": {
                "format": "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            },
            "json": {
                "()": _json_formatter_path(),
                "fmt": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "rename_fields": dict(JSON_RENAMED_FIELDS),
                "static_fields": {"service": SERVICE_NAME},
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "wallet_ledger": {"level": level.upper()},
            "sqlalchemy.engine": {"level": "INFO" if echo_sql else "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }


def setup_logging(
    level: LogLevel = "INFO",
    fmt: LogFormat = "plain",
    *,
    echo_sql: bool = False,
) -> None:
    """
    Instala el logging del proceso.

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    logging.config.dictConfig(build_logging_config(level, fmt, echo_sql=echo_sql))


def setup_logging_from_settings(settings: "BaseAppSettings") -> None:
    """Aplica LOG_LEVEL / LOG_FORMAT / DB_ECHO_SQL del settings recibido."""
    setup_logging(settings.log_level, settings.log_format, echo_sql=settings.db_echo_sql)


__all__ = [
    "SERVICE_NAME",
    "build_logging_config",
    "setup_logging",
    "setup_logging_from_settings",
]
# Fin del archivo wallet_ledger/shared/config/logging_config.py
