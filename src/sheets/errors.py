"""
Error kinds raised by sheet parsers, formatters and the convertor.
"""

from typing import Dict, Optional


class SheetError(Exception):
    """Base class for all conversion errors."""


class SheetSyntaxError(SheetError, ValueError):
    """
    Malformed input for a format grammar.

    Attributes:
        index: Character index of the offending character (optional)
        line: 1-based line number (optional)
        column: Column within the line (optional)
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        line: Optional[int] = None,
        column: Optional[int] = None
    ):
        super().__init__(message)
        self.index = index
        self.line = line
        self.column = column


class SheetRangeError(SheetError, ValueError):
    """A numeric value outside its legal domain."""


class SheetTypeError(SheetError, TypeError):
    """A value of the wrong type or JSON shape."""


class MissingKeyError(SheetError):
    """The notation cannot be played on a key layout at any transposition."""

    def __init__(self, message: str = "MissingKeyException"):
        super().__init__(message)


class UnknownFormatError(SheetError, LookupError):
    """No formatter is registered under the requested label."""

    def __init__(self, label: str):
        super().__init__(f"Unknown format: {label}")
        self.label = label

    def __str__(self) -> str:
        return self.args[0]


class NoParserMatchedError(SheetError):
    """Every registered parser rejected the input."""

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = dict(failures)
        if self.failures:
            message = "\n".join(f"{label} -> {error}" for label, error in self.failures.items())
        else:
            message = "No parser registered"
        super().__init__(message)
