"""
parks_engines.tracer -- PARKS_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` wraps an engine entry point and, after it returns,
    logs one PARKS_ENGINE_TRACE record: engine name and version, a short
    fingerprint of the selected inputs, the wrapped function and how long
    the call took.  Two calls with equal inputs log equal fingerprints,
    which makes repeated report runs easy to compare in the log stream.

Architecture position:
    Engines -- support code for the pure calculation layer.  Only logs.

Invariants enforced:
    - Fingerprints depend on values, not on how they were passed: positional
      and keyword arguments are bound to parameter names first, dict key
      order is ignored, dataclasses are compared field by field and Decimals
      keep their exact text.
    - One-shot iterators are never read while fingerprinting.

Usage:
    @traced_engine("projection", "1.0", fingerprint_fields=("base", "years"))
    def project(self, base, scenario, inflation_rate_pct, years=3):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Collection, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from parks_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "PARKS_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> Any:
    """Reduce ``value`` to JSON-compatible data with a stable layout."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            "__type__": type(value).__name__,
            **{f.name: _canonicalize(getattr(value, f.name)) for f in dataclasses.fields(value)},
        }
    if isinstance(value, Mapping):
        return {str(k): _canonicalize(v) for k, v in value.items()}
    if isinstance(value, Collection):
        return [_canonicalize(v) for v in value]
    # Iterators and other opaque objects
    return f"<{type(value).__name__}>"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex chars of a SHA-256 over the named arguments.

    Absent names hash the same as ``None``.
    """
    selected = {name: _canonicalize(arguments.get(name)) for name in fingerprint_fields}
    canonical = json.dumps(selected, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entry point so each call logs a trace record.

    ``fingerprint_fields`` names the parameters hashed into
    ``input_fingerprint``; with none given the fingerprint is empty.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                arguments = signature.bind_partial(*args, **kwargs).arguments
                fingerprint = compute_input_fingerprint(fingerprint_fields, arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info(TRACE_TYPE, extra={
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": round(elapsed_ms, 2),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
