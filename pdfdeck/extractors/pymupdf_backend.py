"""
PyMuPDF implementation of the PDF backend.

Text spans are reported with a pdf.js-style text matrix so the extractor
sees the same geometry regardless of which library parsed the page.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

import fitz  # PyMuPDF
from PIL import Image

from pdfdeck.errors import ConversionError
from pdfdeck.extractors.base import (
    PAINT_IMAGE_XOBJECT,
    PAINT_INLINE_IMAGE_XOBJECT,
    PdfBackend,
    PdfPage,
    Viewport,
)
from pdfdeck.models import GlyphRun

logger = logging.getLogger(__name__)


class PyMuPDFPage(PdfPage):
    """A page wrapper that scales everything into viewport space."""

    def __init__(self, page: "fitz.Page", number: int, scale: float):
        self._page = page
        self._number = number
        self._scale = scale

    @property
    def number(self) -> int:
        return self._number

    @property
    def viewport(self) -> Viewport:
        rect = self._page.rect
        return Viewport(
            width=rect.width * self._scale,
            height=rect.height * self._scale,
            scale=self._scale,
        )

    def glyph_runs(self) -> List[GlyphRun]:
        page_dict = self._page.get_text("dict")
        viewport_height = self.viewport.height
        runs = []
        for block in page_dict.get("blocks", []):
            # type 1 is an image block
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                cos, sin = line.get("dir", (1.0, 0.0))
                for span in line.get("spans", []):
                    runs.append(self._span_to_run(span, cos, sin, viewport_height))
        return runs

    def _span_to_run(self, span: Dict, cos: float, sin: float, viewport_height: float) -> GlyphRun:
        s = self._scale
        size = span.get("size", 0.0) * s
        origin_x, origin_y = span.get("origin", span["bbox"][:2])
        x0, _, x1, _ = span["bbox"]
        # PyMuPDF's Y axis points down; the text matrix uses PDF's bottom-up axis
        return GlyphRun(
            text=span.get("text", ""),
            transform=[
                size * cos,
                -size * sin,
                size * sin,
                size * cos,
                origin_x * s,
                viewport_height - origin_y * s,
            ],
            width=(x1 - x0) * s,
            height=size,
        )

    def paint_operations(self) -> List[str]:
        operations = []
        for info in self._page.get_image_info(xrefs=True):
            if info.get("xref", 0):
                operations.append(PAINT_IMAGE_XOBJECT)
            else:
                operations.append(PAINT_INLINE_IMAGE_XOBJECT)
        return operations

    def rasterize(self) -> Image.Image:
        matrix = fitz.Matrix(self._scale, self._scale)
        pix = self._page.get_pixmap(matrix=matrix, alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


class PyMuPDFBackend(PdfBackend):
    """Open a PDF from bytes or a path with PyMuPDF."""

    def __init__(self, source: Union[bytes, str, Path], scale: float = 2.0):
        super().__init__(scale=scale)
        try:
            if isinstance(source, (bytes, bytearray)):
                self._doc = fitz.open(stream=bytes(source), filetype="pdf")
            else:
                self._doc = fitz.open(str(source))
        except Exception as e:
            raise ConversionError(f"Could not open PDF: {e}") from e
        if self._doc.page_count == 0:
            self._doc.close()
            raise ConversionError("Could not open PDF: document has no pages")
        logger.debug(f"[PyMuPDF] Opened document with {self._doc.page_count} pages")

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def load_page(self, page_number: int) -> PyMuPDFPage:
        if not 1 <= page_number <= self._doc.page_count:
            raise IndexError(f"Page {page_number} out of range (1-{self._doc.page_count})")
        page = self._doc.load_page(page_number - 1)
        return PyMuPDFPage(page, page_number, self.scale)

    def close(self) -> None:
        self._doc.close()
