"""Unit tests for the structured logging helpers."""

from __future__ import annotations

import logging

import pytest

from xvals import bind_trace_id, get_logger
from xvals.observability import TRACE_ID, log_info, make_event


def test_null_handler_present() -> None:
    logger = get_logger()
    assert logger.name == "xvals"
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="xvals")
    bind_trace_id("trace-123")
    try:
        log_info("objects_reloaded", source="store", path=None)
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "source": "store", "path": None}


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    assert make_event("env", None, {"keys": 3}) == {"source": "env", "path": None, "keys": 3}
    assert make_event("file", "/tmp/x.yaml") == {"source": "file", "path": "/tmp/x.yaml"}
