"""
simlogger: structured logging for simulation step functions.

One function body serves both the solver (plain form) and the data recorder
(recording form), so logged quantities are never computed twice.

Public API surface (v1):

    Decorator:    @loggable, LOG_INDICATOR, is_loggable
    Operations:   log, onlylog, nested_log, nested_onlylog
    Records:      Record, merge, recursive_merge
    Context:      RecordingScope, is_logging, active_record
    Driver:       Sample, SavedValues, saving_callback, collect
    Utilities:    configure
    Errors:       SimloggerError and all subclasses
    Trace:        InvocationTrace, all_records, clear_traces
"""

from __future__ import annotations

from .record import Record, merge, recursive_merge
from .exceptions import (
    SimloggerError,
    DuplicateKeyError,
    InvalidRecordExpressionError,
    LoggableDefinitionError,
)
from .scope import RecordingScope, is_logging, active_record
from .decorators import loggable, is_loggable, LoggableFunction, LOG_INDICATOR
from .operations import log, onlylog, nested_log, nested_onlylog
from .driver import Sample, SavedValues, saving_callback, collect
from .trace import InvocationTrace, all_records, clear as clear_traces
from ._config import configure


__all__ = [
    # Decorator
    "loggable",
    "is_loggable",
    "LoggableFunction",
    "LOG_INDICATOR",
    # Operations
    "log",
    "onlylog",
    "nested_log",
    "nested_onlylog",
    # Records
    "Record",
    "merge",
    "recursive_merge",
    # Context
    "RecordingScope",
    "is_logging",
    "active_record",
    # Driver
    "Sample",
    "SavedValues",
    "saving_callback",
    "collect",
    # Configuration
    "configure",
    # Trace
    "InvocationTrace",
    "all_records",
    "clear_traces",
    # Errors
    "SimloggerError",
    "DuplicateKeyError",
    "InvalidRecordExpressionError",
    "LoggableDefinitionError",
]
