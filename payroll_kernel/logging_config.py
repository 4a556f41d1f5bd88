"""
Structured logging (``payroll_kernel.logging_config``).

Responsibility
--------------
Renders every ``payroll_kernel.*`` record as one JSON object per line and
merges the context of the payroll run being computed (restaurant,
employee, pay period, correlation and trace ids) into each record.

Architecture position
---------------------
**Kernel layer**.  Engines call ``get_logger("engines.x")`` and log an
event name plus an ``extra`` dict; only the application (or the test
suite) installs handlers via ``configure_logging``.

Invariants enforced
-------------------
* Context lives in ``ContextVar`` objects: an employee bound on one
  worker thread never appears on another thread's records.
* ``LogContext.bind`` restores the previous values on exit, including
  "unset".
* Values JSON cannot encode are rendered as text: dates and datetimes in
  ISO format, enums by value, ``Decimal`` and anything else via ``str``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "format_pay_period",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "payroll_kernel"

# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------

_CONTEXT: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"payroll_log_{name}", default=None)
    for name in (
        "correlation_id",
        "restaurant_id",
        "employee_id",
        "pay_period",
        "trace_id",
    )
}


def format_pay_period(start: date, end: date) -> str:
    """Log label of an inclusive pay period, e.g. ``2024-01-14/2024-01-20``."""
    return f"{start.isoformat()}/{end.isoformat()}"


def _checked(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - set(_CONTEXT)
    if unknown:
        raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
    return fields


class LogContext:
    """Fields of the payroll run currently being computed.

    Each per-employee computation binds its own ``employee_id`` and
    ``pay_period``; callers fanning employees out over threads get
    isolated values per worker.
    """

    FIELDS: tuple[str, ...] = tuple(_CONTEXT)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields.  ``None`` leaves a field unchanged."""
        for name, value in _checked(fields).items():
            if value is not None:
                _CONTEXT[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """All fields that currently have a value."""
        return {
            name: var.get() for name, var in _CONTEXT.items() if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block.

        Raises:
            TypeError: If a field name is not a context field.
        """
        tokens = [
            _CONTEXT[name].set(value)
            for name, value in _checked(fields).items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for token in reversed(tokens):
                token.var.reset(token)

    @classmethod
    def bind_pay_period(
        cls, employee_id: str, start: date, end: date
    ) -> AbstractContextManager[type["LogContext"]]:
        """Bind one employee's computation for ``[start, end]``."""
        return cls.bind(employee_id=employee_id, pay_period=format_pay_period(start, end))


# ---------------------------------------------------------------------------
# JSON rendering
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # PayrollKernelError subclasses keep their context as attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, run context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STDLIB_KEYS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``payroll_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on ``payroll_kernel``.  Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)


def reset_logging() -> None:
    """Remove handlers and allow ``configure_logging`` again.  Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
