"""@loggable: one function body, a plain form and a recording form."""

from __future__ import annotations

import functools
import inspect
import logging
import time
from typing import Any, Callable

from .exceptions import LoggableDefinitionError
from .record import Record
from .scope import _RecordingContext, _activate, _recording_ctx
from .trace import InvocationTrace, emit

logger = logging.getLogger(__name__)


class _LogIndicator:
    """Trailing sentinel argument that selects the recording form."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "LOG_INDICATOR"


LOG_INDICATOR = _LogIndicator()


# ---------------------------------------------------------------------------
# LoggableFunction
# ---------------------------------------------------------------------------

class LoggableFunction:
    """
    A function with two entry points sharing one body.

        fn(*args, **kwargs)                  plain form: runs the body, returns its value
        fn(*args, LOG_INDICATOR, **kwargs)   recording form: returns the Record
        fn.logged(*args, **kwargs)           recording form, by name
        fn.capture(*args, **kwargs)          (value, Record) from a single run

    The plain form suspends any enclosing recording context, so record
    operations in the body only evaluate. The recording form always records
    into a fresh Record owned by this invocation and hands it to the caller,
    also when called from inside another recording body; the caller decides
    where it goes (`log(sub=g(x, LOG_INDICATOR))`, `merge` or `nested_log`).

    A `return` anywhere in the body ends the invocation; the recording form
    returns what was recorded up to that point. An exception discards the
    Record and propagates.
    """

    def __init__(self, fn: Callable) -> None:
        functools.update_wrapper(self, fn)
        self._fn = fn
        self._name = getattr(fn, "__qualname__", type(fn).__name__)
        self.is_async = inspect.iscoroutinefunction(fn)

    def __repr__(self) -> str:
        return f"<loggable {self._name}>"

    def __get__(self, instance: Any, owner: Any = None) -> Any:
        # Methods: bind the instance, keep both entry points.
        if instance is None:
            return self
        return LoggableFunction(self._fn.__get__(instance, owner))

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if args and args[-1] is LOG_INDICATOR:
            return self.logged(*args[:-1], **kwargs)
        if self.is_async:
            return self._aplain(args, kwargs)
        with _activate(None):
            return self._fn(*args, **kwargs)

    def logged(self, *args: Any, **kwargs: Any) -> Any:
        """Recording form. Returns the Record (an awaitable of it for async functions)."""
        if self.is_async:
            return self._arun(args, kwargs, with_value=False)
        return self._run(args, kwargs)[1]

    def capture(self, *args: Any, **kwargs: Any) -> Any:
        """Run once in recording form; return (value, Record)."""
        if self.is_async:
            return self._arun(args, kwargs, with_value=True)
        return self._run(args, kwargs)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enter(self) -> _RecordingContext:
        # Never the enclosing Record: the returned one belongs to this call
        if _recording_ctx.get() is not None:
            logger.debug("%s: recording form inside an active record", self._name)
        return _RecordingContext(record=Record())

    def _exit(self, ctx: _RecordingContext, start: float) -> None:
        emit(
            InvocationTrace(
                function=self._name,
                keys=list(ctx.record),
                duration_ms=(time.monotonic() - start) * 1000,
            )
        )

    def _run(self, args: tuple, kwargs: dict) -> tuple[Any, Record]:
        ctx = self._enter()
        start = time.monotonic()
        with _activate(ctx):
            value = self._fn(*args, **kwargs)
        self._exit(ctx, start)
        return value, ctx.record

    async def _aplain(self, args: tuple, kwargs: dict) -> Any:
        with _activate(None):
            return await self._fn(*args, **kwargs)

    async def _arun(self, args: tuple, kwargs: dict, with_value: bool) -> Any:
        ctx = self._enter()
        start = time.monotonic()
        with _activate(ctx):
            value = await self._fn(*args, **kwargs)
        self._exit(ctx, start)
        if with_value:
            return value, ctx.record
        return ctx.record


# ---------------------------------------------------------------------------
# @loggable
# ---------------------------------------------------------------------------

def loggable(fn: Callable) -> LoggableFunction:
    """
    Marks a function (sync or async) as dual-mode.

        @loggable
        def dynamics(dx, x, p, t):
            u = log(u=-x)
            onlylog(state=lambda: x)
            dx[:] = u
    """
    if isinstance(fn, LoggableFunction):
        return fn
    if not callable(fn):
        raise LoggableDefinitionError(
            f"@loggable expects a function, got {type(fn).__name__}"
        )
    if inspect.isgeneratorfunction(fn) or inspect.isasyncgenfunction(fn):
        raise LoggableDefinitionError(
            f"@loggable cannot wrap generator function "
            f"'{getattr(fn, '__qualname__', fn)}': the recording form must run the "
            "body to completion to return its Record"
        )
    wrapped = LoggableFunction(fn)
    logger.debug("registered loggable %s (async=%s)", wrapped._name, wrapped.is_async)
    return wrapped


def is_loggable(obj: Any) -> bool:
    """Return True if `obj` was produced by @loggable."""
    return isinstance(obj, LoggableFunction)
