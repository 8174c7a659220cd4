"""Structured logging helpers shared by providers, the chain, and the store.

Purpose
    Keep every diagnostic emitted by ``xvals`` predictable and contextual
    without forcing applications to adopt a logging backend. The library is
    silent until the host attaches a handler to the ``xvals`` logger.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: builder for ``source``/``path`` event payloads.

System Integration
    Every record carries ``extra={"context": {...}}`` with the trace id and the
    event fields, so a JSON formatter can render them verbatim.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("xvals_trace_id", default=None)
"""Trace identifier attached to every record emitted by the helpers below."""

_LOGGER: Final[logging.Logger] = logging.getLogger("xvals")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('reload-7')
    >>> TRACE_ID.get()
    'reload-7'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, *, source: str, path: str | None, **payload: Any) -> None:
    _emit(logging.DEBUG, message, make_event(source, path, payload))


def log_info(message: str, *, source: str, path: str | None, **payload: Any) -> None:
    _emit(logging.INFO, message, make_event(source, path, payload))


def log_error(message: str, *, source: str, path: str | None, **payload: Any) -> None:
    _emit(logging.ERROR, message, make_event(source, path, payload))


def make_event(source: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the payload of a provider lifecycle event.

    Inputs
        source: Name of the provider or component (``"env"``, ``"store"``).
        path: Backing file, if any.
        payload: Optional extra diagnostic fields.

    Examples
    --------
    >>> make_event('env', None, {'keys': 3})
    {'source': 'env', 'path': None, 'keys': 3}
    """

    event: dict[str, Any] = {"source": source, "path": path}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
