"""
Tests for grouping glyph runs into text blocks.
"""

import pytest

from pdfdeck.errors import MalformedGlyphRun
from pdfdeck.extractors import TextRunExtractor

VIEWPORT_HEIGHT = 800


def run(text, x, y_top, width=40, size=16):
    """A pdf.js-style run whose top-down position is (x, y_top)."""
    return {
        "str": text,
        "transform": [size, 0, 0, size, x, VIEWPORT_HEIGHT - y_top],
        "width": width,
        "height": size,
    }


@pytest.fixture
def extractor():
    return TextRunExtractor()


def test_runs_on_one_line_merge(extractor):
    blocks = extractor.extract([run("Hello", 10, 100), run("World", 55, 100)], VIEWPORT_HEIGHT)

    assert len(blocks) == 1
    assert blocks[0].text == "Hello World"
    assert blocks[0].x == 10
    assert blocks[0].y == 100
    assert blocks[0].width == 85
    assert blocks[0].font_size == 16


def test_horizontal_gap_splits(extractor):
    # 50 - (10 + 40) = 0 merges; 32 is exactly 2 * font size and splits
    blocks = extractor.extract([run("a", 10, 100), run("b", 50, 100), run("c", 122, 100)], VIEWPORT_HEIGHT)

    assert [block.text for block in blocks] == ["a b", "c"]


def test_vertical_distance_splits(extractor):
    # Half the font size (8) is not "less than"
    blocks = extractor.extract([run("top", 10, 100), run("low", 50, 108)], VIEWPORT_HEIGHT)
    assert len(blocks) == 2

    blocks = extractor.extract([run("top", 10, 100), run("near", 50, 107)], VIEWPORT_HEIGHT)
    assert len(blocks) == 1


def test_comparison_uses_last_glyph(extractor):
    """A run is compared against the most recent run, not the block's first."""
    blocks = extractor.extract(
        [run("one", 10, 100), run("two", 55, 100), run("three", 100, 100)],
        VIEWPORT_HEIGHT,
    )
    assert len(blocks) == 1
    assert blocks[0].text == "one two three"


def test_block_contains_every_glyph(extractor):
    runs = [run("a", 100, 100, width=30), run("b", 95, 104, width=60, size=18), run("c", 160, 99, width=10)]
    blocks = extractor.extract(runs, VIEWPORT_HEIGHT)

    assert len(blocks) == 1
    for glyph in blocks[0].glyphs:
        assert blocks[0].contains(glyph)


def test_whitespace_blocks_dropped(extractor):
    blocks = extractor.extract(
        [run("Title", 10, 100), run("   ", 10, 300), run("Body", 10, 500)],
        VIEWPORT_HEIGHT,
    )
    assert [block.text for block in blocks] == ["Title", "Body"]


def test_empty_page(extractor):
    assert extractor.extract([], VIEWPORT_HEIGHT) == []


def test_malformed_run_raises(extractor):
    with pytest.raises(MalformedGlyphRun) as excinfo:
        extractor.extract([run("ok", 10, 100), {"str": "bad", "width": 1, "height": 1}], VIEWPORT_HEIGHT)
    assert excinfo.value.index == 1
