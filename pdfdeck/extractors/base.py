"""
Base PDF backend interface.

The extraction pipeline only needs four things from a PDF library: page
enumeration, a viewport at a given scale, positioned glyph runs and a paint
operation trace, plus a rasterized bitmap of the page.
"""

from abc import ABC, abstractmethod
from typing import List, NamedTuple

from PIL import Image

from pdfdeck.models import GlyphRun

# Paint operation tags (pdf.js operator names) that draw a raster image
PAINT_IMAGE_XOBJECT = "paintImageXObject"
PAINT_INLINE_IMAGE_XOBJECT = "paintInlineImageXObject"
PAINT_IMAGE_XOBJECT_REPEAT = "paintImageXObjectRepeat"

IMAGE_PAINT_OPERATIONS = frozenset(
    {PAINT_IMAGE_XOBJECT, PAINT_INLINE_IMAGE_XOBJECT, PAINT_IMAGE_XOBJECT_REPEAT}
)


class Viewport(NamedTuple):
    """Coordinate frame used to render a page to pixels."""

    width: float
    height: float
    scale: float


class PdfPage(ABC):
    """One page of an open PDF document."""

    @property
    @abstractmethod
    def number(self) -> int:
        """1-based page number."""

    @property
    @abstractmethod
    def viewport(self) -> Viewport:
        pass

    @abstractmethod
    def glyph_runs(self) -> List[GlyphRun]:
        """
        Positioned text runs in content order.

        Transforms are expressed in viewport space with a bottom-up Y axis,
        so ``viewport.height - transform[5]`` is the top-down position.
        """

    @abstractmethod
    def paint_operations(self) -> List[str]:
        """Ordered paint operation tags for the page."""

    @abstractmethod
    def rasterize(self) -> Image.Image:
        """Render the whole page at the viewport scale."""


class PdfBackend(ABC):
    """Abstract base class for PDF document backends."""

    def __init__(self, scale: float = 2.0):
        self.scale = scale
        self.name = self.__class__.__name__.replace("Backend", "").lower()

    @property
    @abstractmethod
    def page_count(self) -> int:
        pass

    @abstractmethod
    def load_page(self, page_number: int) -> PdfPage:
        """
        Load a page.

        Args:
            page_number: 1-based page number

        Returns:
            PdfPage for the page
        """

    def close(self) -> None:
        pass

    def __enter__(self) -> "PdfBackend":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
