"""Typed exceptions for content-stream extraction and output sinks."""

from __future__ import annotations


class FatalExtractionError(Exception):
    """Base class for conditions that abort a whole document run."""

    def __init__(self, message: str, page_number: int | None = None) -> None:
        super().__init__(message)
        self.page_number = page_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.page_number is None:
            return message
        return f"page {self.page_number}: {message}"


class FontNotFoundError(FatalExtractionError):
    """Raised when ``Tf`` names a font missing from the page resources."""


class NoActiveFontError(FatalExtractionError):
    """Raised when text is shown before any font was selected."""


class OperandTypeError(FatalExtractionError):
    """Raised when an operator finds an operand of the wrong kind."""


class UnexpectedTokenError(FatalExtractionError):
    """Raised when the token source yields something other than an operand or keyword."""


class SinkError(ValueError):
    """Raised on invalid output sink use (overflow, seek past end)."""
