"""
Record operations: log, onlylog, nested_log, nested_onlylog.

Every operation names what it records in one of these forms:

    log("x")                   identifier: value of the caller's variable x
    log(x=expr)                assignment
    log("a", "b")              several identifiers
    log(("a", "b"), values)    tuple: names zipped with the iterable values

and returns the recorded value (a tuple for more than one item), so it can be
used inline: `u = log(u=-x)`.

The identifier form reads the frame that called the operation. A generator
expression or a lambda (and, before Python 3.12, any comprehension) runs in
its own frame, so `log("x")` there only sees the enclosing function's locals
it actually references; anything else raises NameError. Use the assignment
form there: `log(x=x)`.

    operation        evaluates          records            target
    log              always             when recording     flat
    onlylog          when recording     when recording     flat
    nested_log       always             when recording     flat or sub-key
    nested_onlylog   when recording     when recording     flat or sub-key

The `only` variants take zero-argument callables (`onlylog(state=lambda: x)`)
so that nothing is computed outside of recording mode.
"""

from __future__ import annotations

import copy
import functools
import sys
from collections.abc import Sequence
from types import FrameType
from typing import Any, Callable

from ._config import get_config
from .decorators import LoggableFunction
from .exceptions import InvalidRecordExpressionError
from .record import Record
from .scope import _recording_ctx

# (name or tuple of names, zero-argument getter)
_Item = tuple[Any, Callable[[], Any]]


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _check_name(op: str, name: Any) -> str:
    if not isinstance(name, str) or not name.isidentifier():
        raise InvalidRecordExpressionError(
            op, f"record names must be identifier strings, got {name!r}"
        )
    return name


def _lookup(frame: FrameType, name: str) -> Any:
    if name in frame.f_locals:
        return frame.f_locals[name]
    if name in frame.f_globals:
        return frame.f_globals[name]
    raise NameError(f"name {name!r} is not defined")


def _getter(op: str, name: str, value: Any, lazy: bool) -> Callable[[], Any]:
    if not lazy:
        return lambda: value
    if not callable(value):
        raise InvalidRecordExpressionError(
            op,
            f"'{name}' must be a zero-argument callable so that it is only "
            f"evaluated while logging, e.g. {op}({name}=lambda: ...)",
        )
    return value


def _parse(
    op: str,
    positional: tuple,
    named: dict[str, Any],
    frame: FrameType,
    lazy: bool,
) -> list[_Item]:
    if not positional and not named:
        raise InvalidRecordExpressionError(
            op, "nothing to record; use ('x'), (x=value) or (('a', 'b'), values)"
        )

    if positional and isinstance(positional[0], (tuple, list)):
        if len(positional) != 2 or named:
            raise InvalidRecordExpressionError(
                op, "the tuple form takes a tuple of names and the values: (('a', 'b'), values)"
            )
        names = tuple(_check_name(op, n) for n in positional[0])
        if not names:
            raise InvalidRecordExpressionError(op, "empty tuple of names")
        return [(names, _getter(op, ", ".join(names), positional[1], lazy))]

    items: list[_Item] = []
    for name in positional:
        _check_name(op, name)
        items.append((name, functools.partial(_lookup, frame, name)))
    for name, value in named.items():
        _check_name(op, name)
        items.append((name, _getter(op, name, value, lazy)))
    return items


def _evaluate(op: str, items: list[_Item]) -> tuple[list[tuple[str, Any]], Any]:
    """Compute every value first; return (name/value pairs, passthrough result)."""
    pairs: list[tuple[str, Any]] = []
    results: list[Any] = []
    for names, getter in items:
        value = getter()
        if isinstance(names, str):
            pairs.append((names, value))
        else:
            if not isinstance(value, Sequence):
                value = tuple(value)
            if len(value) != len(names):
                raise InvalidRecordExpressionError(
                    op, f"{len(names)} names for {len(value)} values"
                )
            pairs.extend(zip(names, value))
        results.append(value)
    result = results[0] if len(results) == 1 else tuple(results)
    return pairs, result


def _store(record: Record, pairs: list[tuple[str, Any]]) -> None:
    copy_values = get_config()["copy_values"]
    for name, value in pairs:
        record.set(name, copy.deepcopy(value) if copy_values else value)


# ---------------------------------------------------------------------------
# Flat operations
# ---------------------------------------------------------------------------

def log(*names: Any, **named: Any) -> Any:
    """
    Evaluate and return the value(s); record them if a Record is active.

        log("x")             # records x under "x"
        u = log(u=-x)        # records and binds u
        a, b = log(("a", "b"), split(x))
    """
    items = _parse("log", names, named, sys._getframe(1), lazy=False)
    pairs, result = _evaluate("log", items)
    ctx = _recording_ctx.get()
    if ctx is not None:
        _store(ctx.record, pairs)
    return result


def onlylog(*names: Any, **named: Any) -> Any:
    """
    Record only when a Record is active; otherwise do nothing and return None.

    Values are zero-argument callables, never called in plain mode.
    """
    items = _parse("onlylog", names, named, sys._getframe(1), lazy=True)
    ctx = _recording_ctx.get()
    if ctx is None:
        return None
    pairs, result = _evaluate("onlylog", items)
    _store(ctx.record, pairs)
    return result


# ---------------------------------------------------------------------------
# Nested operations
# ---------------------------------------------------------------------------

def _split_nested(op: str, args: tuple, kwargs: dict) -> tuple[str | None, LoggableFunction | None, tuple]:
    """Return (sub-key, loggable target or None, remaining positional args)."""
    if not args:
        if kwargs:
            # nested_log(a=1): assignment form, merged flat
            return None, None, ()
        raise InvalidRecordExpressionError(op, "expected a sub-key or a @loggable function")
    if isinstance(args[0], LoggableFunction):
        return None, args[0], args[1:]

    key = args[0]
    if key is not None:
        if callable(key):
            raise InvalidRecordExpressionError(
                op, f"the call form requires a @loggable function, got {key!r}"
            )
        _check_name(op, key)
    rest = args[1:]
    if rest and isinstance(rest[0], LoggableFunction):
        return key, rest[0], rest[1:]
    if rest and callable(rest[0]):
        raise InvalidRecordExpressionError(
            op, f"the call form requires a @loggable function, got {rest[0]!r}"
        )
    return key, None, rest


async def _none() -> None:
    return None


async def _anested_call(record: Record, key: str | None, fn: LoggableFunction, args: tuple, kwargs: dict) -> Any:
    value, sub = await fn.capture(*args, **kwargs)
    record.merge_in(sub, key)
    return value


def _nested_call(key: str | None, fn: LoggableFunction, args: tuple, kwargs: dict, only: bool) -> Any:
    ctx = _recording_ctx.get()
    if ctx is None:
        if only:
            return _none() if fn.is_async else None
        return fn(*args, **kwargs)
    if fn.is_async:
        return _anested_call(ctx.record, key, fn, args, kwargs)
    value, sub = fn.capture(*args, **kwargs)
    ctx.record.merge_in(sub, key)
    return value


def _nested_values(op: str, key: str | None, names: tuple, named: dict, frame: FrameType, lazy: bool) -> Any:
    items = _parse(op, names, named, frame, lazy)
    ctx = _recording_ctx.get()
    if ctx is None and lazy:
        return None
    pairs, result = _evaluate(op, items)
    if ctx is not None:
        tmp = Record()
        _store(tmp, pairs)
        ctx.record.merge_in(tmp, key)
    return result


def nested_log(*args: Any, **kwargs: Any) -> Any:
    """
    Record into a sub-key (or flat, with no key or None) and return the value.

    Value form, with the naming forms of `log` after the sub-key:

        nested_log("values", x=1)
        nested_log("values", "y1", "y2")
        nested_log(x=1)                        # flat

    Call form, with a @loggable function and its arguments:

        u = nested_log(control, x)             # control's record merged flat
        u = nested_log("ctrl", control, x)     # ... merged under "ctrl"

    In recording mode the function runs once in recording form and its
    ordinary return value is passed through; otherwise only its plain form
    runs. Async functions give an awaitable.

    Repeated writes under one sub-key accumulate; a key that collides with an
    existing leaf raises DuplicateKeyError.
    """
    key, target, rest = _split_nested("nested_log", args, kwargs)
    if target is not None:
        return _nested_call(key, target, rest, kwargs, only=False)
    return _nested_values("nested_log", key, rest, kwargs, sys._getframe(1), lazy=False)


def nested_onlylog(*args: Any, **kwargs: Any) -> Any:
    """
    Like `nested_log`, but nothing runs unless a Record is active.

    Values of the assignment and tuple forms are zero-argument callables; the
    call form skips the function entirely in plain mode.
    """
    key, target, rest = _split_nested("nested_onlylog", args, kwargs)
    if target is not None:
        return _nested_call(key, target, rest, kwargs, only=True)
    return _nested_values("nested_onlylog", key, rest, kwargs, sys._getframe(1), lazy=True)
