"""Caller-facing failure taxonomy for document conversion."""
from __future__ import annotations

from typing import Optional


class ConversionError(Exception):
    """Base class for every failure raised by a conversion call.

    ``kind`` names the taxonomy branch (``unsupported_format``, ``provider``
    or ``io``) and ``code`` narrows it to a specific cause so callers can
    branch on something sturdier than the message text.
    """

    kind = "conversion"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.kind

    def __str__(self) -> str:
        return self.message


class UnsupportedFormatError(ConversionError):
    """The format selector did not map to a known provider."""

    kind = "unsupported_format"

    def __init__(self, selector: object) -> None:
        super().__init__(f"Unsupported document format: {selector!r}", code="unsupported_format")
        self.selector = selector


class ProviderError(ConversionError):
    """A provider could not extract content from the supplied document."""

    kind = "provider"

    def __init__(self, message: str, code: str = "malformed_markup") -> None:
        super().__init__(message, code)


class DocumentIoError(ConversionError):
    """The byte buffer could not be read as a container of the declared type."""

    kind = "io"

    def __init__(self, message: str, code: str = "invalid_archive") -> None:
        super().__init__(message, code)
