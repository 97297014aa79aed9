"""
Tests for logging configuration.
"""

import logging
from pathlib import Path

import pytest

from rag_contracts.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_flags_win(self, monkeypatch):
        monkeypatch.setenv("RAG_CONTRACTS_LOG_LEVEL", "ERROR")
        assert resolve_level(debug=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_then_default(self, monkeypatch):
        monkeypatch.delenv("RAG_CONTRACTS_LOG_LEVEL", raising=False)
        assert resolve_level() == "WARNING"
        monkeypatch.setenv("RAG_CONTRACTS_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"


class TestSetupLogging:
    def test_console_level(self, restore_root_logger):
        setup_logging(level="INFO")
        assert restore_root_logger.level == logging.INFO
        assert len(restore_root_logger.handlers) == 1

    def test_unknown_level_falls_back(self, restore_root_logger):
        setup_logging(level="LOUD")
        assert restore_root_logger.level == logging.WARNING

    def test_file_handler(self, restore_root_logger, tmp_path: Path):
        log_file = tmp_path / "contracts.log"
        setup_logging(level="WARNING", log_file=str(log_file), log_file_level="DEBUG")
        assert restore_root_logger.level == logging.DEBUG

        logging.getLogger("rag_contracts.test").debug("wired %s", "ragEmbedding")
        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "wired ragEmbedding" in log_file.read_text()

        for handler in restore_root_logger.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.close()

    def test_third_party_quieted(self, restore_root_logger):
        setup_logging(level="INFO")
        assert logging.getLogger("yaml").level == logging.WARNING

    def test_returns_effective_level(self, restore_root_logger, tmp_path: Path):
        log_file = tmp_path / "contracts.log"
        assert setup_logging(level="ERROR") == logging.ERROR
        level = setup_logging(level="WARNING", log_file=str(log_file), log_file_level="INFO")
        assert level == logging.INFO
        for handler in restore_root_logger.handlers:
            handler.close()

    def test_console_format_by_level(self, restore_root_logger):
        setup_logging(level="WARNING")
        assert restore_root_logger.handlers[0].formatter._fmt == "%(message)s"
        setup_logging(level="DEBUG")
        assert "%(lineno)d" in restore_root_logger.handlers[0].formatter._fmt
