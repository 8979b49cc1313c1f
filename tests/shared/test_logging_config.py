# -*- coding: utf-8 -*-
import json
import logging

import pytest

from wallet_ledger.shared.config import (
    EnvTestingSettings,
    build_logging_config,
    setup_logging,
    setup_logging_from_settings,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    named = {name: logging.getLogger(name).level for name in ("wallet_ledger", "sqlalchemy.engine")}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, named_level in named.items():
        logging.getLogger(name).setLevel(named_level)


def _console_formatter():
    root = logging.getLogger()
    assert root.handlers, "setup_logging debe instalar un handler de consola"
    return root.handlers[0].formatter


def test_setup_logging_plain():
    setup_logging("INFO", "plain")
    assert logging.getLogger().level == logging.INFO
    assert type(_console_formatter()) is logging.Formatter


def test_setup_logging_json():
    setup_logging("WARNING", "json")
    assert logging.getLogger().level == logging.WARNING
    assert type(_console_formatter()).__name__ == "JsonFormatter"


def test_sqlalchemy_engine_logger_is_quiet():
    setup_logging("DEBUG", "plain")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_from_settings():
    settings = EnvTestingSettings(log_level="ERROR", log_format="json")
    setup_logging_from_settings(settings)
    assert logging.getLogger().level == logging.ERROR
    assert type(_console_formatter()).__name__ == "JsonFormatter"


def test_json_records_carry_service_and_renamed_fields(capsys):
    setup_logging("INFO", "json")
    logging.getLogger("wallet_ledger.modules.ledger.store").info(
        "Ledger credit applied: account=%s", "user-1"
    )

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["service"] == "wallet-ledger"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "wallet_ledger.modules.ledger.store"
    assert payload["message"] == "Ledger credit applied: account=user-1"


def test_echo_sql_raises_sqlalchemy_logger_to_info():
    settings = EnvTestingSettings(log_level="WARNING", log_format="plain", db_echo_sql=True)
    setup_logging_from_settings(settings)
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
    assert logging.getLogger("wallet_ledger").level == logging.WARNING


def test_build_logging_config_selects_formatter():
    assert build_logging_config("INFO", "pretty")["handlers"]["console"]["formatter"] == "line"
    assert build_logging_config("INFO", "json")["handlers"]["console"]["formatter"] == "json"
