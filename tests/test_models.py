"""
Tests for PDFDeck data models.
"""

import math

import pytest
from pydantic import ValidationError

from pdfdeck.errors import MalformedGlyphRun
from pdfdeck.models import (
    Deck,
    GlyphRun,
    ImageCard,
    PlacedGlyph,
    Slide,
    TextBlock,
    TextCard,
)


def test_glyph_run_from_pdfjs_mapping():
    """Runs accept the pdf.js field name ``str`` for their text."""
    run = GlyphRun.from_raw({"str": "Hi", "transform": [12, 0, 0, 12, 10, 700], "width": 20, "height": 12})
    assert run.text == "Hi"
    assert run.font_size == 12


def test_glyph_run_font_size_from_rotated_matrix():
    run = GlyphRun(text="x", transform=[3, 4, -4, 3, 0, 0], width=1, height=5)
    assert math.isclose(run.font_size, 5)


def test_glyph_run_missing_transform():
    with pytest.raises(MalformedGlyphRun) as excinfo:
        GlyphRun.from_raw({"str": "x", "width": 1, "height": 1}, index=3)
    assert excinfo.value.index == 3
    assert "transform" in excinfo.value.reason


def test_glyph_run_non_finite_geometry():
    with pytest.raises(MalformedGlyphRun):
        GlyphRun.from_raw({"str": "x", "transform": [1, 0, 0, 1, float("nan"), 0], "width": 1, "height": 1})

    with pytest.raises(MalformedGlyphRun):
        GlyphRun.from_raw({"str": "x", "transform": [1, 0, 0, 1, 0, 0], "width": float("inf"), "height": 1})


def test_glyph_run_not_a_mapping():
    with pytest.raises(MalformedGlyphRun):
        GlyphRun.from_raw(["x", 1, 2])


def test_text_block_extend_grows_box():
    """Test that a block's box covers every glyph added to it."""
    first = PlacedGlyph(text="Hello", x=10, y=100, width=50, height=16, font_size=16)
    second = PlacedGlyph(text="World", x=65, y=98, width=50, height=20, font_size=16)

    block = TextBlock.seed(first)
    block.extend(second)

    assert block.text == "Hello World"
    assert block.x == 10
    assert block.y == 98
    assert block.width == 105
    assert block.font_size == 16
    assert block.contains(first)
    assert block.contains(second)


def test_card_style_validation():
    card = TextCard(id=1)
    with pytest.raises(ValidationError):
        card.color = "red"
    with pytest.raises(ValidationError):
        card.align = "justify"

    image = ImageCard(id=2, src="https://example.com/a.png")
    assert image.fit == "contain"
    with pytest.raises(ValidationError):
        image.fit = "stretch"


def test_deck_serialization():
    """Test Deck JSON serialization keeps card kinds apart."""
    deck = Deck(
        slides=[
            Slide(
                id=0,
                source_page=1,
                cards=[
                    TextCard(id=1, content="Title", font_size=24),
                    ImageCard(id=2, src="https://example.com/a.png", fit="cover"),
                ],
            )
        ]
    )

    data = deck.to_dict()
    assert data["title"] == "Generated Presentation"
    assert data["slides"][0]["cards"][0]["kind"] == "text"

    deck2 = Deck.from_dict(data)
    text_card, image_card = deck2.slides[0].cards
    assert isinstance(text_card, TextCard)
    assert isinstance(image_card, ImageCard)
    assert image_card.fit == "cover"
    assert deck2.find_card(2)[0].id == 0
    assert deck2.find_card(99) is None
