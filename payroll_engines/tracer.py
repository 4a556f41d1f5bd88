"""
Engine trace records (``payroll_engines.tracer``).

Every public stage entry point is wrapped with ``@traced_engine``.  Each
call emits one ``PAYROLL_ENGINE_TRACE`` record carrying the engine name
and version, a fingerprint of the arguments that define the run (pay
period bounds, punch batch, tips) and the elapsed time.  Reruns over the
same inputs share a fingerprint, so a recomputed pay period can be
matched to the original run in the logs.

Fingerprint fields are looked up by parameter name whether the caller
passed them positionally or by keyword.  Only lists and tuples are
walked; a generator argument is never consumed by the tracer.

A call that raises emits the same record with ``outcome="error"`` and the
payroll error code, then re-raises unchanged.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_MESSAGE = "PAYROLL_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    """Stable text form of an engine argument."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, (int, float, str)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        items = sorted((_canonicalize(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    if is_dataclass(value) and not isinstance(value, type):
        return type(value).__name__ + _canonicalize(
            {f.name: getattr(value, f.name) for f in fields(value)}
        )
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16-hex SHA-256 prefix over the named arguments; absent ones are "null"."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator emitting ``PAYROLL_ENGINE_TRACE`` around a stage call.

    Args:
        engine_name: Stage identifier (e.g. "punch_normalizer").
        engine_version: Version of the stage's rules (e.g. "1.0").
        fingerprint_fields: Parameter names hashed into the fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)
        unknown = set(fingerprint_fields) - set(signature.parameters)
        if unknown:
            raise TypeError(
                f"{func.__qualname__} has no parameters named {sorted(unknown)}"
            )

        def _emit(fingerprint: str, started: float, **outcome: Any) -> None:
            _logger.info(
                TRACE_MESSAGE,
                extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                    "function": func.__qualname__,
                    **outcome,
                },
            )

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _emit(
                    fingerprint,
                    started,
                    outcome="error",
                    error_code=getattr(exc, "code", type(exc).__name__),
                )
                raise
            _emit(fingerprint, started, outcome="ok")
            return result

        return wrapper

    return decorator
