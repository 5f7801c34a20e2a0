"""
Tests for structured logging and configuration
"""

import json
import logging

from mini_banking.config import BankingConfig, get_config, reload_config
from mini_banking.logging_config import JSONFormatter, log_action, setup_logging


class TestJSONFormatter:

    def test_structured_fields(self):
        logger = logging.getLogger("test_json_formatter")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "deposit done", (), None)
        record.action = "deposit"
        record.resource = "alice"
        record.extra = {"balance": 4000}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "deposit done"
        assert entry["action"] == "deposit"
        assert entry["resource"] == "alice"
        assert entry["extra"] == {"balance": 4000}
        assert "timestamp" in entry

    def test_missing_fields_are_omitted(self):
        logger = logging.getLogger("test_json_formatter")
        record = logger.makeRecord(logger.name, logging.WARNING, __name__, 0, "plain", (), None)

        entry = json.loads(JSONFormatter().format(record))

        assert "action" not in entry
        assert "resource" not in entry


class TestSetupLogging:

    def test_setup_replaces_handlers(self):
        logger = setup_logging("DEBUG", "test_setup_logging")
        logger = setup_logging("INFO", "test_setup_logging")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.level == logging.INFO
        assert not logger.propagate

    def test_text_format(self):
        logger = setup_logging("INFO", "test_setup_text", fmt="text")
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_log_action_respects_level(self, caplog):
        logger = logging.getLogger("test_log_action")
        logger.addHandler(caplog.handler)
        logger.setLevel(logging.WARNING)
        logger.propagate = False
        try:
            log_action(logger, "info", "hidden", action="create")
            log_action(logger, "warning", "shown", action="create", resource="alice")
        finally:
            logger.removeHandler(caplog.handler)
            logger.propagate = True

        assert [r.getMessage() for r in caplog.records] == ["shown"]
        assert caplog.records[0].resource == "alice"

    def test_log_action_attaches_only_given_fields(self, caplog):
        logger = logging.getLogger("test_log_action_fields")
        logger.addHandler(caplog.handler)
        logger.setLevel(logging.INFO)
        try:
            log_action(logger, "info", "deposited", action="deposit", extra={"balance": 4000})
        finally:
            logger.removeHandler(caplog.handler)

        record = caplog.records[0]
        assert record.levelno == logging.INFO
        assert record.action == "deposit"
        assert record.extra == {"balance": 4000}
        assert not hasattr(record, "resource")

        entry = json.loads(JSONFormatter().format(record))
        assert entry["action"] == "deposit"
        assert entry["extra"] == {"balance": 4000}
        assert "resource" not in entry


class TestConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MINI_BANKING_STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("MINI_BANKING_CURRENCY_SYMBOL", raising=False)
        config = BankingConfig(_env_file=None)

        assert config.storage_backend == "csv"
        assert config.currency_symbol == "$"
        assert config.api_port == 8090

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MINI_BANKING_STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("MINI_BANKING_API_PORT", "9000")

        config = reload_config()
        try:
            assert config.storage_backend == "sqlite"
            assert config.api_port == 9000
            assert get_config() is config
        finally:
            monkeypatch.undo()
            reload_config()
