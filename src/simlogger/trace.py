"""In-memory trace store for recording-form invocations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ._config import get_config

logger = logging.getLogger(__name__)


@dataclass
class InvocationTrace:
    """
    One recording-form run of a @loggable function (sentinel, `.logged`,
    `.capture`, and the nested runs started by `nested_log`).

    Written to the in-memory store only when `keep_traces` is configured.
    """

    function: str                   # qualified function name (__qualname__)
    keys: list[str]                 # top-level keys of the Record it produced
    duration_ms: float


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

_records: list[InvocationTrace] = []


def record(trace: InvocationTrace) -> None:
    """Append a trace record to the in-memory store."""
    _records.append(trace)


def all_records() -> list[InvocationTrace]:
    """Return a snapshot of all trace records."""
    return list(_records)


def clear() -> None:
    """Clear all in-memory trace records (useful in tests)."""
    _records.clear()


def emit(trace: InvocationTrace) -> None:
    """Store and/or export a finished invocation according to the configuration."""
    cfg = get_config()
    if cfg["keep_traces"]:
        record(trace)

    tracer = cfg.get("tracer")
    if tracer is None:
        return
    span_attrs: dict[str, Any] = {
        "simlogger.function": trace.function,
        "simlogger.key_count": len(trace.keys),
        "simlogger.duration_ms": trace.duration_ms,
    }
    try:
        tracer(span_attrs)
    except Exception:
        # Tracer errors must not affect the simulation
        logger.warning("tracer failed for %s", trace.function, exc_info=True)
