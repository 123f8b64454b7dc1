"""
Extraction engines for turning PDF pages into text blocks and image elements.

- TextRunExtractor: groups positioned glyph runs into text blocks
- ImageRegionDetector: one image element per image paint operation
- PyMuPDFBackend: page access, glyph runs, paint trace and rasterization
"""

from pdfdeck.extractors.base import PdfBackend, PdfPage, Viewport
from pdfdeck.extractors.image_regions import ImageRegionDetector
from pdfdeck.extractors.pymupdf_backend import PyMuPDFBackend
from pdfdeck.extractors.text_runs import TextRunExtractor

__all__ = [
    "PdfBackend",
    "PdfPage",
    "Viewport",
    "ImageRegionDetector",
    "PyMuPDFBackend",
    "TextRunExtractor",
]
