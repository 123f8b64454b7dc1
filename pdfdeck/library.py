"""
Element library: every element extracted from the current document.
"""

import itertools
from typing import Iterable, Iterator, List, Optional

from pdfdeck.models import Element


class IdSequence:
    """Monotonic identifier source, e.g. ``elem_1``, ``elem_2``..."""

    def __init__(self, prefix: str = "elem", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"{self.prefix}_{next(self._counter)}"


class ElementLibrary:
    """
    Ordered, append-only collection of extracted elements.

    The library lives for one converted document; the next conversion
    replaces its contents wholesale.
    """

    def __init__(self, elements: Optional[Iterable[Element]] = None):
        self._elements: List[Element] = []
        self._index = {}
        if elements:
            self.extend(elements)

    def add(self, element: Element) -> None:
        if element.id in self._index:
            raise ValueError(f"Duplicate element id: {element.id}")
        self._elements.append(element)
        self._index[element.id] = element

    def extend(self, elements: Iterable[Element]) -> None:
        for element in elements:
            self.add(element)

    def replace(self, elements: Iterable[Element]) -> None:
        self._elements = []
        self._index = {}
        self.extend(elements)

    def lookup(self, element_id: str) -> Optional[Element]:
        return self._index.get(element_id)

    def filter(self, kind: Optional[str] = None) -> List[Element]:
        """Elements of one kind ("text" or "image"); all of them when kind is None or "all"."""
        if kind in (None, "all"):
            return list(self._elements)
        return [element for element in self._elements if element.kind == kind]

    def by_page(self, page: int) -> List[Element]:
        return [element for element in self._elements if element.page == page]

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index
