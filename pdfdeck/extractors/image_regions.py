"""
Turn a page's image paint operations into image elements.

This is a coarse stand-in for real image extraction: every image paint
operation yields one element carrying the rasterization of the whole page
and a fixed placeholder box. Nothing is cropped or deduplicated.
"""

import base64
import io
import logging
from typing import Iterable, List

from PIL import Image

from pdfdeck.extractors.base import IMAGE_PAINT_OPERATIONS
from pdfdeck.library import IdSequence
from pdfdeck.models import ImageElement

logger = logging.getLogger(__name__)


def encode_png_data_uri(bitmap: Image.Image) -> str:
    """Encode a bitmap as a ``data:image/png;base64,...`` URI."""
    buffer = io.BytesIO()
    bitmap.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


class ImageRegionDetector:
    """Emit one image element per image paint operation on a page."""

    PLACEHOLDER_BOX = (50.0, 50.0, 200.0, 150.0)

    def __init__(self, paint_operations: Iterable[str] = IMAGE_PAINT_OPERATIONS):
        self.paint_operations = frozenset(paint_operations)

    def detect(
        self,
        operations: Iterable[str],
        bitmap: Image.Image,
        page: int,
        ids: IdSequence,
    ) -> List[ImageElement]:
        """
        Detect image elements on one page.

        Args:
            operations: Ordered paint operation tags for the page
            bitmap: Rasterization of the whole page
            page: 1-based page number
            ids: Identifier source shared with the text extractor

        Returns:
            One ImageElement per image paint operation that could be encoded
        """
        x, y, width, height = self.PLACEHOLDER_BOX
        elements = []

        for op_index, operation in enumerate(operations):
            if operation not in self.paint_operations:
                continue
            try:
                src = encode_png_data_uri(bitmap)
            except Exception as e:
                logger.warning(f"[Images] Could not encode image for op {op_index} on page {page}: {e}")
                continue

            elements.append(
                ImageElement(
                    id=ids.next_id(),
                    page=page,
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    src=src,
                )
            )

        if elements:
            logger.debug(f"[Images] Page {page}: {len(elements)} image paint operations")
        return elements
