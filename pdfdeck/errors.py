"""
Exception types raised by PDFDeck.

Per-page extraction failures, per-image encode failures and network
failures are handled where they occur and never surface as exceptions.
"""

from typing import Optional


class PdfDeckError(Exception):
    """Base class for all PDFDeck errors."""


class InvalidInputError(PdfDeckError, ValueError):
    """User input was rejected before any state changed (non-PDF file, empty text)."""


class MalformedGlyphRun(PdfDeckError, ValueError):
    """A glyph run could not be placed on the page (missing or non-finite geometry)."""

    def __init__(self, reason: str, index: Optional[int] = None):
        self.reason = reason
        self.index = index
        where = f"glyph run {index}" if index is not None else "glyph run"
        super().__init__(f"Malformed {where}: {reason}")


class ConversionError(PdfDeckError):
    """The PDF document as a whole could not be opened."""


class ExportError(PdfDeckError):
    """A presentation or document could not be written."""
