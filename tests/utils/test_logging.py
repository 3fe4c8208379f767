import logging

import pytest

from txhooks.utils.config import resolve_log_level, resolve_slow_query_ms
from txhooks.utils.logging import get_correlation_id, get_logger, set_correlation_id, time_call


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_loggers_live_under_package_namespace():
    assert get_logger("tests.logging").name == "txhooks.tests.logging"


def test_time_call_logs_duration(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, threshold_ms=0, table="users"):
        pass
    records = [record for record in caplog.records if record.name == logger.name]
    assert any("unit-test took" in record.message for record in records)
    assert records[-1].levelno == logging.WARNING
    assert records[-1].table == "users"
    assert records[-1].failed is False


def test_time_call_marks_failures(caplog):
    logger = get_logger("tests.logging")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with pytest.raises(KeyError):
        with time_call("failing", logger, threshold_ms=10_000):
            raise KeyError("x")
    record = [r for r in caplog.records if r.name == logger.name][-1]
    assert record.levelno == logging.DEBUG
    assert record.failed is True


def test_slow_query_threshold_resolution(monkeypatch):
    monkeypatch.delenv("TXHOOKS_SLOW_QUERY_MS", raising=False)
    assert resolve_slow_query_ms(default=100) == 100
    monkeypatch.setenv("TXHOOKS_SLOW_QUERY_MS", "250")
    assert resolve_slow_query_ms(default=100) == 250
    assert resolve_slow_query_ms(default=100, override=5) == 5
    monkeypatch.setenv("TXHOOKS_SLOW_QUERY_MS", "fast")
    with pytest.raises(ValueError):
        resolve_slow_query_ms(default=100)


def test_log_level_resolution(monkeypatch):
    monkeypatch.delenv("TXHOOKS_LOG_LEVEL", raising=False)
    assert resolve_log_level(default=logging.INFO) == logging.INFO
    monkeypatch.setenv("TXHOOKS_LOG_LEVEL", "debug")
    assert resolve_log_level(default=logging.INFO) == logging.DEBUG
    monkeypatch.setenv("TXHOOKS_LOG_LEVEL", "30")
    assert resolve_log_level(default=logging.INFO) == 30
    monkeypatch.setenv("TXHOOKS_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        resolve_log_level(default=logging.INFO)
