"""
purchasing_engines.tracer -- Engine invocation tracer emitting PURCHASING_ENGINE_TRACE.

Responsibility:
    A lightweight decorator (``@traced_engine``) that wraps pure engine
    invocations with one structured trace record: engine_name,
    engine_version, input_fingerprint (SHA-256 of selected keyword inputs,
    16 hex chars) and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure decision layer.  Emits a
    log record only.  Uses its own logger under the ``purchasing_kernel``
    namespace so engines need not import kernel logging setup.

Usage:
    from purchasing_engines.tracer import traced_engine

    @traced_engine("fifo_reduction", "1.0", fingerprint_fields=("quantity",))
    def plan_reduction(*, lots, quantity):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

_logger = logging.getLogger("purchasing_kernel.engines.tracer")


def _canonicalize(value: Any) -> str:
    """Stable string form of a value for fingerprinting.

    Dataclasses are walked field by field so two equal snapshots always
    fingerprint the same, whatever their repr.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        items = [
            (f.name, getattr(value, f.name))
            for f in dataclasses.fields(value)
            if f.compare
        ]
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """Deterministic 16-char SHA-256 prefix over the named keyword inputs.

    Missing fields are recorded as "null".
    """
    parts: list[str] = []
    for name in fingerprint_fields:
        parts.append(f"{name}={_canonicalize(kwargs.get(name))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits PURCHASING_ENGINE_TRACE for pure engine invocations."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "PURCHASING_ENGINE_TRACE",
                extra={
                    "trace_type": "PURCHASING_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
