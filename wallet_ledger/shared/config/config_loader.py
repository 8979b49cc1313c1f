# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/config/config_loader.py

Carga dinámica de configuración según PYTHON_ENV.
Ejecuta validaciones de coherencia y cachea la instancia (singleton).

Autor: WalletLedger
Fecha: 2026-10-19
"""

from functools import lru_cache
import os

from .settings_base import BaseAppSettings
from .settings_dev import DevSettings
from .settings_testing import EnvTestingSettings
from .settings_prod import ProdSettings


def load_settings(env: str | None = None) -> BaseAppSettings:
    """
    Construye (sin cachear) la configuración del entorno indicado.

    Raises:
        ValueError: Si las validaciones de coherencia fallan
    """
    env = (env or os.getenv("PYTHON_ENV", "development")).lower()

    if env == "production":
        settings = ProdSettings()
    elif env == "test":
        settings = EnvTestingSettings()
    else:
        settings = DevSettings()

    settings._ledger_checks()
    return settings


@lru_cache(maxsize=1)
def get_settings() -> BaseAppSettings:
    """
    Devuelve la configuración apropiada según PYTHON_ENV.

    Carga la subclase correcta (Dev/Test/Prod), ejecuta validaciones
    y cachea el resultado como singleton.
    """
    return load_settings()


__all__ = ["get_settings", "load_settings"]
# Fin del archivo
