"""
Shared fixtures: PDFs and images generated on the fly.
"""

import base64
import io

import fitz  # PyMuPDF
import pytest
from PIL import Image


def png_bytes(width=200, height=100, color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_uri(width=200, height=100):
    return "data:image/png;base64," + base64.b64encode(png_bytes(width, height)).decode("ascii")


def build_pdf(pages):
    """
    Build a PDF from a list of page descriptions.

    Each page is a dict with optional ``texts`` (list of (x, y, text, fontsize))
    and ``images`` (list of fitz.Rect).
    """
    doc = fitz.open()
    for content in pages:
        page = doc.new_page(width=595, height=842)
        for x, y, text, fontsize in content.get("texts", []):
            page.insert_text((x, y), text, fontsize=fontsize)
        for rect in content.get("images", []):
            page.insert_image(rect, stream=png_bytes())
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def two_block_pdf():
    """One page: two runs on one line 5 units apart, one run on a later line."""
    gap_x = 72 + fitz.get_text_length("Hello", fontname="helv", fontsize=16) + 5
    return build_pdf(
        [
            {
                "texts": [
                    (72, 100, "Hello", 16),
                    (gap_x, 100, "World", 16),
                    (72, 300, "Later line", 16),
                ]
            }
        ]
    )


@pytest.fixture
def image_pdf():
    return build_pdf([{"texts": [(72, 72, "Caption", 12)], "images": [fitz.Rect(100, 400, 300, 500)]}])


@pytest.fixture
def image_uri():
    """Factory for PNG data URIs of a given size."""
    return png_data_uri
