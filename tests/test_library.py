"""
Tests for the element library and id sequence.
"""

import pytest

from pdfdeck.library import ElementLibrary, IdSequence
from pdfdeck.models import ImageElement, TextElement


def make_elements():
    return [
        TextElement(id="elem_1", page=1, x=0, y=0, width=10, height=10, content="one", font_size=12),
        ImageElement(id="elem_2", page=1, src="data:image/png;base64,AAAA"),
        TextElement(id="elem_3", page=2, x=0, y=0, width=10, height=10, content="two", font_size=12),
    ]


def test_id_sequence_is_monotonic():
    ids = IdSequence()
    assert [ids.next_id() for _ in range(3)] == ["elem_1", "elem_2", "elem_3"]


def test_filter_by_kind():
    library = ElementLibrary(make_elements())

    assert len(library.filter()) == 3
    assert len(library.filter("all")) == 3
    assert [e.id for e in library.filter("text")] == ["elem_1", "elem_3"]
    assert [e.id for e in library.filter("image")] == ["elem_2"]


def test_lookup_and_pages():
    library = ElementLibrary(make_elements())

    assert library.lookup("elem_3").content == "two"
    assert library.lookup("elem_99") is None
    assert "elem_2" in library
    assert [e.id for e in library.by_page(1)] == ["elem_1", "elem_2"]


def test_duplicate_id_rejected():
    library = ElementLibrary(make_elements())
    with pytest.raises(ValueError):
        library.add(make_elements()[0])


def test_replace_resets_contents():
    library = ElementLibrary(make_elements())
    library.replace([make_elements()[2]])

    assert len(library) == 1
    assert library.lookup("elem_1") is None
