from typing import Optional


class ConversionError(ValueError):
    """Base class for errors raised by the conversion engine."""


class RegexSyntaxError(ConversionError):
    """Raised when a regular expression cannot be parsed."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class AutomatonFormatError(ConversionError):
    """Raised when an automaton definition is structurally invalid."""


class AutomatonTooLargeError(ConversionError):
    """Raised when a conversion exceeds one of the configured ceilings."""

    def __init__(self, message: str, limit: int):
        super().__init__(message)
        self.limit = limit
