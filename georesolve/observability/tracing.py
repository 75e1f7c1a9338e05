"""Tracing helpers for resolution stages."""
from __future__ import annotations

import contextlib
import time
from typing import Any, Iterator

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


def _logger() -> structlog.stdlib.BoundLogger:
    return structlog.get_logger("georesolve.trace")


def set_context(*, query: str) -> None:
    bind_contextvars(query=query)
    _logger().debug("trace_context", query=query)


def clear_context() -> None:
    clear_contextvars()


@contextlib.contextmanager
def span(*, name: str, **fields: Any) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        _logger().info("trace_span", span=name, elapsed_ms=elapsed_ms, **fields)


def log_stage_failure(*, stage: str, reason: str) -> None:
    _logger().warning("stage_failed", stage=stage, reason=reason)


def log_fetch_result(*, url: str, status: int, bytes_read: int, elapsed_ms: int) -> None:
    _logger().info(
        "fetch_result",
        url=url,
        status=status,
        bytes=bytes_read,
        elapsed_ms=elapsed_ms,
    )
