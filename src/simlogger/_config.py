"""Global simlogger configuration."""

from __future__ import annotations

from typing import Any


_config: dict[str, Any] = {
    "copy_values": False,     # True → deep-copy leaf values when they are recorded
    "tracer": None,           # None = no span export
    "keep_traces": False,     # True → every recording-form run lands in the trace store
}


def configure(
    copy_values: bool | None = None,
    tracer: Any = None,
    keep_traces: bool | None = None,
) -> None:
    """
    Set global simlogger configuration.

    Configuration is global and set once at startup, before the simulation
    starts sampling.
    """
    if copy_values is not None:
        _config["copy_values"] = copy_values
    if tracer is not None:
        _config["tracer"] = tracer
    if keep_traces is not None:
        _config["keep_traces"] = keep_traces


def reset() -> None:
    """Restore the default configuration (useful in tests)."""
    _config.update(copy_values=False, tracer=None, keep_traces=False)


def get_config() -> dict[str, Any]:
    """Return the current configuration dict (mutable reference)."""
    return _config
