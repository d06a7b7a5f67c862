"""Custom exceptions for htmlterm."""

from typing import Optional


class HtmlTermError(Exception):
    """Base exception for htmlterm errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class MalformedMarkupError(HtmlTermError):
    """Raised when the input cannot be decoded or parsed as HTML."""

    pass


class InvariantViolation(HtmlTermError):
    """
    Raised when a rendering contract is broken.

    Examples: nested no-break sections, overlapping redaction regions, a
    marker span carrying text. These are programming errors upstream and
    are never recovered from.
    """

    pass
