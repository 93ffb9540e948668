import logging

import pytest

from field_relations.exceptions import ConfigurationError
from field_relations.logging_config import (
    ROOT_LOGGER_NAME,
    FieldRelationsLogger,
    RunLogger,
    coerce_level,
    get_logger,
    log_performance,
    setup_logging,
)


def test_loggers_are_namespaced():
    assert get_logger("scanner").name == f"{ROOT_LOGGER_NAME}.scanner"
    assert get_logger("field_relations.analyzer").name == "field_relations.analyzer"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    try:
        setup_logging("INFO", log_file, console_output=False, force=True)
        get_logger("test").info("hello from test")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()
        assert "hello from test" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.close()
        setup_logging(force=True)


def test_set_level():
    try:
        FieldRelationsLogger.set_level("DEBUG")
        assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG
    finally:
        FieldRelationsLogger.set_level("WARNING")


def test_log_performance_passes_through():
    @log_performance
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert add.__name__ == "add"


def test_log_performance_reraises():
    @log_performance
    def fail():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        fail()


def test_coerce_level():
    assert coerce_level("info") == logging.INFO
    assert coerce_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ConfigurationError):
        coerce_level("loud")


def test_run_logger_prefixes_run_number():
    first = RunLogger.start(get_logger("runs"))
    second = RunLogger.start(get_logger("runs"))
    assert second.run_id == first.run_id + 1
    msg, _ = first.process("Scanned %d sources", {})
    assert msg == f"[run {first.run_id}] Scanned %d sources"
