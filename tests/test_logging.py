from __future__ import annotations

import json
import logging


class _Capture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.lines: list[dict] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(json.loads(self.format(record)))


def test_events_carry_document_context_and_are_bounded():
    from travel_receipts.core.logging import (
        MAX_FIELD_CHARS,
        JsonFormatter,
        document_context,
        get_logger,
        log_event,
    )

    logger = get_logger("travel_receipts.tests")
    capture = _Capture()
    capture.setFormatter(JsonFormatter())
    logging.getLogger("travel_receipts").addHandler(capture)
    try:
        with document_context("scan.pdf"):
            log_event(logger, "extract.failed", error="x" * 2000, api_key="sk-live", page=None)
        log_event(logger, "extract.start", input_chars=12)
    finally:
        logging.getLogger("travel_receipts").removeHandler(capture)

    first, second = capture.lines
    assert first["event"] == "extract.failed"
    assert first["source_file"] == "scan.pdf"
    assert first["api_key"] == "***"
    assert len(first["error"]) < MAX_FIELD_CHARS + 32
    assert "page" not in first
    assert "source_file" not in second
    assert second["input_chars"] == 12
