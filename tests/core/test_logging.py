# ==============================
# Tests: JSON-line logging
# ==============================
from __future__ import annotations

import json
import logging

from ragcore.config.schema import LoggingConfig, Settings
from ragcore.logging.logger import JsonLineFormatter, LogContext, bootstrap_logger, with_context


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("ragcore.test", logging.WARNING, __file__, 1, "chunk %s skipped", ("VVD_chunk_3",), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_formatter_emits_structured_fields() -> None:
    line = JsonLineFormatter().format(_record(collection="verkiezingsprogrammas", tier="http", secret="x"))
    payload = json.loads(line)

    assert payload["level"] == "WARNING"
    assert payload["msg"] == "chunk VVD_chunk_3 skipped"
    assert payload["collection"] == "verkiezingsprogrammas"
    assert payload["tier"] == "http"
    assert "secret" not in payload
    assert "endpoint" not in payload


def test_context_adapter_attaches_fields(caplog) -> None:
    log = with_context(logging.getLogger("ragcore.ingest"), LogContext(collection="c1", party="CDA"))
    with caplog.at_level(logging.INFO, logger="ragcore.ingest"):
        log.info("processing")

    record = caplog.records[-1]
    assert record.collection == "c1"
    assert record.party == "CDA"


def test_bootstrap_quiets_http_client_logs() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    settings = Settings(logging=LoggingConfig(level="DEBUG", console=False))
    try:
        logger = bootstrap_logger(settings)

        assert logger.name == "ragcore"
        assert root.level == logging.DEBUG
        assert root.handlers == []
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
