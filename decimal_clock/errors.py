"""Exception hierarchy for the decimal clock engine."""


class DecimalClockError(Exception):
    """Base exception for decimal clock errors."""


class InvalidTimeArgumentError(DecimalClockError, ValueError):
    """Raised when a conversion receives a negative or non-finite time value.

    Subclasses ``ValueError`` so callers that only guard against the builtin
    still catch it.
    """

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value
