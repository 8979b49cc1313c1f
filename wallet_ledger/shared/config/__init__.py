# -*- coding: utf-8 -*-
"""
wallet_ledger/shared/config/__init__.py

Punto único de acceso a la configuración:
    from wallet_ledger.shared.config import get_settings

El singleton se resuelve de forma perezosa (get_settings) para que los
tests puedan fijar PYTHON_ENV o construir settings propios antes.
"""

from .config_loader import get_settings, load_settings
from .logging_config import build_logging_config, setup_logging, setup_logging_from_settings
from .settings_base import BaseAppSettings, EnvName
from .settings_dev import DevSettings
from .settings_prod import ProdSettings
from .settings_testing import EnvTestingSettings

__all__ = [
    "BaseAppSettings",
    "EnvName",
    "DevSettings",
    "EnvTestingSettings",
    "build_logging_config",
    "ProdSettings",
    "get_settings",
    "load_settings",
    "setup_logging",
    "setup_logging_from_settings",
]
