"""Recording context, propagated through the call stack via ContextVar."""

from __future__ import annotations

import dataclasses
import contextvars
from contextlib import contextmanager
from typing import Iterator

from .record import Record


@dataclasses.dataclass
class _RecordingContext:
    record: Record


# ContextVar values are per thread and per asyncio task, so independent call
# stacks never see each other's Record.
_recording_ctx: contextvars.ContextVar[_RecordingContext | None] = contextvars.ContextVar(
    "_recording_ctx", default=None
)


def is_logging() -> bool:
    """Return True if a Record is being accumulated in the current call."""
    return _recording_ctx.get() is not None


def active_record() -> Record | None:
    """Return the Record being accumulated, or None in plain mode."""
    ctx = _recording_ctx.get()
    return ctx.record if ctx is not None else None


@contextmanager
def _activate(ctx: _RecordingContext | None) -> Iterator[None]:
    token = _recording_ctx.set(ctx)
    try:
        yield
    finally:
        _recording_ctx.reset(token)


@contextmanager
def RecordingScope() -> Iterator[Record]:
    """
    Context manager. Establishes a fresh Record for the duration of the block
    and yields it. Record operations inside the block write to it.

        with RecordingScope() as rec:
            log(y=2)
        assert rec == {"y": 2}
    """
    record = Record()
    with _activate(_RecordingContext(record=record)):
        yield record
