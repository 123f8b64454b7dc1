"""
End-to-end tests for the conversion pipeline.
"""

import json

import pytest
from PIL import Image
from pptx import Presentation

from pdfdeck.errors import ConversionError, InvalidInputError
from pdfdeck.extractors import PdfBackend, PdfPage, PyMuPDFBackend, Viewport
from pdfdeck.extractors.base import PAINT_IMAGE_XOBJECT
from pdfdeck.models import GlyphRun, ImageElement
from pdfdeck.pipeline import DeckPipeline, validate_pdf_source


def test_two_block_pdf(two_block_pdf):
    """Test that two nearby runs on one line merge and a later line stays apart."""
    result = DeckPipeline().convert(two_block_pdf, filename="deck.pdf", content_type="application/pdf")

    texts = result.library.filter("text")
    assert len(texts) == 2
    assert texts[0].content == "Hello World"
    assert texts[1].content == "Later line"
    assert texts[0].y < texts[1].y

    assert result.page_count == 1
    assert result.failed_pages == []
    assert len(result.deck.slides) == 1
    assert result.deck.slides[0].source_page == 1
    assert result.deck.slides[0].cards == []


def test_image_pdf(image_pdf):
    result = DeckPipeline().convert(image_pdf)

    images = result.library.filter("image")
    assert len(images) == 1
    assert images[0].src.startswith("data:image/png;base64,")
    assert [e.id for e in result.library] == ["elem_1", "elem_2"]


def test_progress_reported_per_page(two_block_pdf):
    calls = []
    DeckPipeline().convert(two_block_pdf, progress_callback=lambda p, m: calls.append((p, m)))
    assert calls == [(100.0, "Extracting page 1 of 1...")]


@pytest.mark.parametrize(
    "data, filename, content_type",
    [
        (b"%PDF-1.4", "notes.txt", None),
        (b"%PDF-1.4", "deck.pdf", "text/plain"),
        (b"GIF89a", "deck.pdf", "application/pdf"),
    ],
)
def test_non_pdf_rejected(data, filename, content_type):
    with pytest.raises(InvalidInputError):
        validate_pdf_source(data, filename, content_type)


def test_unreadable_pdf():
    with pytest.raises(ConversionError):
        PyMuPDFBackend(b"%PDF-1.4 this is not really a pdf")


class FakePage(PdfPage):
    def __init__(self, number, fail=False):
        self._number = number
        self._fail = fail

    @property
    def number(self):
        return self._number

    @property
    def viewport(self):
        return Viewport(width=800, height=600, scale=1.0)

    def glyph_runs(self):
        return [GlyphRun(text=f"page {self._number}", transform=[12, 0, 0, 12, 10, 500], width=50, height=12)]

    def paint_operations(self):
        return [PAINT_IMAGE_XOBJECT]

    def rasterize(self):
        if self._fail:
            raise RuntimeError("renderer crashed")
        return Image.new("RGB", (8, 6), "white")


class FakeBackend(PdfBackend):
    def __init__(self, failing_pages=()):
        super().__init__(scale=1.0)
        self.failing_pages = set(failing_pages)

    @property
    def page_count(self):
        return 3

    def load_page(self, page_number):
        return FakePage(page_number, fail=page_number in self.failing_pages)


def test_failing_page_is_skipped():
    """Test that a page failing mid-way leaves no elements and no slide behind."""
    pipeline = DeckPipeline(backend_factory=lambda data, scale: FakeBackend(failing_pages={2}))

    result = pipeline.convert(b"%PDF-1.4 fake")

    assert result.failed_pages == [2]
    assert [slide.source_page for slide in result.deck.slides] == [1, 3]
    assert sorted({e.page for e in result.library}) == [1, 3]
    assert not any("page 2" in getattr(e, "content", "") for e in result.library)
    assert all(isinstance(e, ImageElement) for e in result.library.filter("image"))


class PaddedTextPage(FakePage):
    def glyph_runs(self):
        return [
            GlyphRun(text="  Hello", transform=[12, 0, 0, 12, 10, 500], width=50, height=12),
            GlyphRun(text=" ", transform=[12, 0, 0, 12, 62, 500], width=4, height=12),
        ]

    def paint_operations(self):
        return []


class PaddedTextBackend(FakeBackend):
    @property
    def page_count(self):
        return 1

    def load_page(self, page_number):
        return PaddedTextPage(page_number)


def test_text_content_is_trimmed():
    pipeline = DeckPipeline(backend_factory=lambda data, scale: PaddedTextBackend())

    result = pipeline.convert(b"%PDF-1.4 fake")

    texts = result.library.filter("text")
    assert [element.content for element in texts] == ["Hello"]


def test_ids_continue_across_pages():
    pipeline = DeckPipeline(backend_factory=lambda data, scale: FakeBackend())
    result = pipeline.convert(b"%PDF-1.4 fake")
    assert [e.id for e in result.library] == [f"elem_{i}" for i in range(1, 7)]


def test_process_writes_outputs(tmp_path, two_block_pdf):
    pdf_path = tmp_path / "deck.pdf"
    pdf_path.write_bytes(two_block_pdf)

    outputs = DeckPipeline().process(pdf_path, output_dir=tmp_path / "out", auto_place=True)

    assert outputs["pptx"].exists()
    deck = json.loads(outputs["deck"].read_text(encoding="utf-8"))
    assert len(deck["slides"][0]["cards"]) == 2

    prs = Presentation(str(outputs["pptx"]))
    assert len(prs.slides[0].shapes) == 2


def test_from_deck_rerenders(tmp_path, two_block_pdf):
    pdf_path = tmp_path / "deck.pdf"
    pdf_path.write_bytes(two_block_pdf)
    pipeline = DeckPipeline()
    outputs = pipeline.process(pdf_path, output_dir=tmp_path / "out")

    rerendered = pipeline.from_deck(outputs["deck"], tmp_path / "again.pptx")

    assert rerendered.exists()
    assert len(Presentation(str(rerendered)).slides) == 1
