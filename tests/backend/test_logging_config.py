"""
Tests for structured logging.
"""

import json
import logging

from healing_records.core.logging_config import (
    StructuredFormatter, get_healing_logger, setup_healing_logging
)


def test_structured_formatter_includes_context():
    record = logging.LogRecord("healing_records.services", logging.INFO, __file__, 10,
                               "saved %s", ("h1",), None)
    record.healing_id = "h1"
    record.operation = "save_healing"

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "saved h1"
    assert data["healing_id"] == "h1"
    assert data["operation"] == "save_healing"
    assert "selector_id" not in data


def test_logger_adapter_merges_context(caplog):
    log = get_healing_logger("healing_records.tests", selector_id="sel1")

    with caplog.at_level(logging.INFO, logger="healing_records.tests"):
        log.log_operation_success("save_healing", 0.25, healing_id="h1")

    record = caplog.records[-1]
    assert record.selector_id == "sel1"
    assert record.operation == "save_healing"
    assert record.metadata == {"healing_id": "h1"}


def test_setup_creates_log_files(tmp_path):
    root = logging.getLogger()
    previous = root.handlers[:]
    try:
        loggers = setup_healing_logging("DEBUG", str(tmp_path / "logs"))
        logging.getLogger("healing_records.services").error("failure")

        assert set(loggers) == {"services", "metrics", "api"}
        assert (tmp_path / "logs" / "healing_all.log").exists()
        assert (tmp_path / "logs" / "healing_errors.log").exists()
    finally:
        for name in ("healing_records.services", "healing_records.services.metrics_gateway", "healing_records.api"):
            for handler in logging.getLogger(name).handlers[:]:
                logging.getLogger(name).removeHandler(handler)
                handler.close()
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            if handler not in previous:
                handler.close()
        for handler in previous:
            root.addHandler(handler)
