"""
Sample-point driver: call a @loggable function's recording form at chosen
points and collect the Records into a time-indexed sequence.

The solver loop itself lives outside this package. `saving_callback` gives a
callable to hand to a solver's save hook; `collect` drives a plain loop over
known sample points.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field

from .decorators import LoggableFunction
from .exceptions import LoggableDefinitionError
from .record import Record

logger = logging.getLogger(__name__)


class Sample(BaseModel):
    """One sample point and the Record captured there."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    t: float
    record: Record


class SavedValues(BaseModel):
    """Ordered sequence of samples, in the order they were taken."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    samples: list[Sample] = Field(default_factory=list)

    def append(self, t: float, record: Record) -> None:
        self.samples.append(Sample(t=t, record=record))

    @property
    def t(self) -> list[float]:
        return [s.t for s in self.samples]

    @property
    def saveval(self) -> list[Record]:
        return [s.record for s in self.samples]

    def series(self, path: str, default: Any = ...) -> list[Any]:
        """
        Values at a dotted path across all samples, e.g. ``series("ctrl.u")``.

        Without a default, a sample missing the path raises KeyError.
        """
        return [s.record.get_path(path, default) for s in self.samples]

    def __len__(self) -> int:
        return len(self.samples)


def _require_loggable(fn: Any) -> LoggableFunction:
    if not isinstance(fn, LoggableFunction):
        raise LoggableDefinitionError(
            f"the driver needs a @loggable function, got {fn!r}"
        )
    if fn.is_async:
        raise LoggableDefinitionError(
            f"the driver calls {fn!r} synchronously; await fn.logged(...) for async functions"
        )
    return fn


def saving_callback(
    fn: Any,
    saved: SavedValues,
    args: Callable[..., tuple[tuple, dict]] | None = None,
) -> Callable[..., Record]:
    """
    Return `callback(*call_args, t)` that runs `fn`'s recording form and
    appends the Record at `t` to `saved`.

    By default the callback's positional arguments are forwarded unchanged
    (including `t` as the last one). Pass `args` to map them to
    `(positional, keyword)` arguments for `fn` instead, e.g. to hand the
    function a copy of a state array the solver keeps mutating.
    """
    fn = _require_loggable(fn)

    def callback(*call_args: Any) -> Record:
        t = call_args[-1]
        if args is None:
            pos, kw = call_args, {}
        else:
            pos, kw = args(*call_args)
        record = fn.logged(*pos, **kw)
        saved.append(float(t), record)
        return record

    return callback


def collect(
    fn: Any,
    points: Iterable[float],
    args_at: Callable[[float], tuple[tuple, dict]],
) -> SavedValues:
    """
    Call `fn`'s recording form once per sample point.

    `args_at(t)` returns the `(positional, keyword)` arguments for point `t`.
    Each call gets its own Record; nothing carries over between samples.
    """
    fn = _require_loggable(fn)
    saved = SavedValues()
    for t in points:
        pos, kw = args_at(t)
        saved.append(float(t), fn.logged(*pos, **kw))
    logger.debug("collected %d samples from %r", len(saved), fn)
    return saved
