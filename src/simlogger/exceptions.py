"""simlogger exception hierarchy."""


class SimloggerError(Exception):
    """Base class for all simlogger errors."""


class DuplicateKeyError(SimloggerError):
    """Raised when a key is written twice at the same record level."""

    def __init__(self, key: str, path: str | None = None) -> None:
        self.key = key
        self.path = path if path is not None else key
        super().__init__(
            f"Already defined key: '{self.path}'. "
            "Two logged values share a name at the same level; "
            "rename one or nest them under different sub-keys."
        )


class InvalidRecordExpressionError(SimloggerError):
    """Raised when a record operation receives an argument shape it does not support."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Invalid expression for '{operation}': {reason}")


class LoggableDefinitionError(SimloggerError):
    """Raised at decoration time when @loggable is applied to something it cannot wrap."""
