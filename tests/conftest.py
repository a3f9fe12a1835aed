"""Shared test fixtures for ReqSmith tests."""

import io
import logging
import os
from collections.abc import Callable
from typing import Any

import orjson
import pytest
import structlog
from structlog.typing import FilteringBoundLogger

LogEvents = Callable[[], list[dict[str, Any]]]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove REQSMITH_* variables so the host environment cannot leak in."""
    for key in list(os.environ):
        if key.startswith("REQSMITH_"):
            monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def capturing_logger(log_stream: io.StringIO) -> FilteringBoundLogger:
    """Create a debug-level JSON logger writing into log_stream."""
    return structlog.wrap_logger(
        structlog.PrintLogger(file=log_stream),
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
    )


@pytest.fixture
def log_events(log_stream: io.StringIO) -> LogEvents:
    """Return a function parsing every entry written to log_stream so far."""

    def _events() -> list[dict[str, Any]]:
        return [orjson.loads(line) for line in log_stream.getvalue().splitlines()]

    return _events
