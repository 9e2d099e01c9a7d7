"""Tests for MemoryLogHandler."""

import logging

from com.kizuna.app.common.memory_log_handler import MemoryLogHandler


def make_logger(handler: MemoryLogHandler, name: str) -> logging.Logger:
    test_logger = logging.getLogger(name)
    test_logger.propagate = False
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers = [handler]
    return test_logger


def test_buffer_keeps_most_recent_records():
    handler = MemoryLogHandler(max_logs=3)
    test_logger = make_logger(handler, "kizuna.test.buffer")
    for n in range(5):
        test_logger.info(f"record {n}")

    assert [entry["message"] for entry in handler.get_logs()] == ["record 2", "record 3", "record 4"]
    info = handler.get_memory_usage_info()
    assert info["current_logs"] == 3
    assert info["dropped_logs"] == 2
    assert info["memory_usage_percent"] == 100


def test_filters_and_clear():
    handler = MemoryLogHandler()
    make_logger(handler, "kizuna.test.alpha").warning("careful")
    make_logger(handler, "kizuna.test.beta").info("fine")

    assert [entry["message"] for entry in handler.get_logs(level="warning")] == ["careful"]
    assert [entry["logger"] for entry in handler.get_logs(logger_prefix="kizuna.test.beta")] == ["kizuna.test.beta"]
    assert handler.get_logs(limit=1)[0]["message"] == "fine"
    assert handler.get_logs(limit=0) == []

    handler.clear_logs()
    assert handler.get_logs() == []
