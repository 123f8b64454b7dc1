"""
Core data models for PDFDeck.

Covers the extraction side (glyph runs, text blocks, extracted elements),
the editable deck (slides holding positioned cards) and the flat
title/content/layout deck used by the layout exporter.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from pdfdeck.errors import MalformedGlyphRun


# --- Extraction models ---


class GlyphRun(BaseModel):
    """
    One rendered text fragment as reported by the page text API.

    ``transform`` is the six-element text matrix ``[a, b, c, d, e, f]`` in
    viewport space with the PDF's bottom-up Y axis; ``e``/``f`` locate the
    run and the 2x2 ``a, b, c, d`` submatrix carries the font scale.
    """

    model_config = {"populate_by_name": True}

    text: str = Field(alias="str")
    transform: List[float] = Field(..., min_length=6, max_length=6)
    width: float
    height: float

    @field_validator("transform")
    @classmethod
    def validate_transform(cls, v: List[float]) -> List[float]:
        if not all(math.isfinite(value) for value in v):
            raise ValueError("transform contains non-finite values")
        return v

    @field_validator("width", "height")
    @classmethod
    def validate_extent(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("extent must be finite")
        return v

    @classmethod
    def from_raw(cls, raw: Union["GlyphRun", Mapping[str, Any]], index: Optional[int] = None) -> "GlyphRun":
        """Build a run from a pdf.js-style mapping, raising MalformedGlyphRun on bad geometry."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise MalformedGlyphRun(f"expected a mapping, got {type(raw).__name__}", index)
        if raw.get("transform") is None:
            raise MalformedGlyphRun("missing transform", index)
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise MalformedGlyphRun(problems, index) from e

    @property
    def font_size(self) -> float:
        a, b = self.transform[0], self.transform[1]
        return math.sqrt(a * a + b * b)


class PlacedGlyph(BaseModel):
    """A glyph run placed in top-left page coordinates."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float

    @property
    def right(self) -> float:
        return self.x + self.width


class TextBlock(BaseModel):
    """
    A run of glyphs judged contiguous.

    ``font_size`` is taken from the first glyph and is not re-measured as
    the block grows.
    """

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float
    glyphs: List[PlacedGlyph] = Field(default_factory=list)

    @classmethod
    def seed(cls, glyph: PlacedGlyph) -> "TextBlock":
        return cls(
            text=glyph.text,
            x=glyph.x,
            y=glyph.y,
            width=glyph.width,
            height=glyph.height,
            font_size=glyph.font_size,
            glyphs=[glyph],
        )

    @property
    def last_glyph(self) -> PlacedGlyph:
        return self.glyphs[-1]

    def extend(self, glyph: PlacedGlyph) -> None:
        """
        Append a glyph, joining text with a single space and growing the box.

        For left-to-right runs on one baseline this is ``width = last.right - x``
        and ``height = max(heights)``; runs that step back or sit slightly
        higher widen the box instead of escaping it.
        """
        self.text += " " + glyph.text
        self.glyphs.append(glyph)

        right = max(self.x + self.width, glyph.right)
        bottom = max(self.y + self.height, glyph.y + glyph.height)
        self.x = min(self.x, glyph.x)
        self.y = min(self.y, glyph.y)
        self.width = right - self.x
        self.height = bottom - self.y

    def contains(self, glyph: PlacedGlyph) -> bool:
        return (
            self.x <= glyph.x
            and self.x + self.width >= glyph.right
            and self.y <= glyph.y
            and self.y + self.height >= glyph.y + glyph.height
        )


class TextElement(BaseModel):
    """A finalized text block offered in the element library."""

    model_config = {"frozen": True}

    kind: Literal["text"] = "text"
    id: str
    page: int = Field(ge=1)
    x: float
    y: float
    width: float
    height: float
    content: str
    font_size: float


class ImageElement(BaseModel):
    """
    A detected image paint operation.

    The box is a fixed placeholder and ``src`` holds the whole page's
    rasterization as a PNG data URI.
    """

    model_config = {"frozen": True}

    kind: Literal["image"] = "image"
    id: str
    page: int = Field(ge=1)
    x: float = 50
    y: float = 50
    width: float = 200
    height: float = 150
    src: str


Element = Union[TextElement, ImageElement]


# --- Editable deck ---


class TextCard(BaseModel):
    """A positioned, editable text card."""

    model_config = {"validate_assignment": True}

    kind: Literal["text"] = "text"
    id: int
    x: float = 0
    y: float = 0
    width: float = 400
    height: float = 100
    z_index: int = 1
    selected: bool = False
    content: str = ""
    font_size: int = Field(default=16, gt=0)
    color: str = Field(default="#333333", pattern=r"^#[0-9a-fA-F]{6}$")
    align: Literal["left", "center", "right"] = "left"


class ImageCard(BaseModel):
    """A positioned image card."""

    model_config = {"validate_assignment": True}

    kind: Literal["image"] = "image"
    id: int
    x: float = 0
    y: float = 0
    width: float = 300
    height: float = 200
    z_index: int = 1
    selected: bool = False
    src: str
    fit: Literal["contain", "cover", "fill"] = "contain"


Card = Union[TextCard, ImageCard]

STYLE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "text": ("font_size", "color", "align"),
    "image": ("fit",),
}


class Slide(BaseModel):
    """One page of the output presentation."""

    model_config = {"validate_assignment": True}

    id: int
    background_color: str = Field(default="#ffffff", pattern=r"^#[0-9a-fA-F]{6}$")
    background_image: Optional[str] = None
    background_transparency: int = Field(default=30, ge=0, le=100)
    source_page: Optional[int] = None
    cards: List[Card] = Field(default_factory=list)

    def find_card(self, card_id: int) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None


class Deck(BaseModel):
    """The editable document: an ordered list of slides."""

    title: str = "Generated Presentation"
    author: str = "PDFDeck"
    subject: str = "PDF to PPT Conversion"
    slides: List[Slide] = Field(default_factory=list)

    def find_slide(self, slide_id: int) -> Optional[Slide]:
        for slide in self.slides:
            if slide.id == slide_id:
                return slide
        return None

    def find_card(self, card_id: int) -> Optional[Tuple[Slide, Card]]:
        for slide in self.slides:
            card = slide.find_card(card_id)
            if card is not None:
                return slide, card
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Export to dict for JSON serialization."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deck":
        """Load from dict."""
        return cls.model_validate(data)


# --- Flat layout deck ---


class SlideLayout(str, Enum):
    """Closed set of fixed-geometry slide layouts."""

    TITLE = "title"
    CONTENT = "content"
    TWO_COLUMN = "two_column"
    IMAGE_LEFT = "image_left"
    IMAGE_RIGHT = "image_right"


class ImageRef(BaseModel):
    """An image referenced by URL or data URI."""

    url: str
    alt: Optional[str] = None


class LayoutSlide(BaseModel):
    """A slide described by title, body text and a layout variant."""

    title: str = ""
    content: str = ""
    layout: SlideLayout = SlideLayout.CONTENT
    images: List[ImageRef] = Field(default_factory=list)
    background_color: str = Field(default="#ffffff", pattern=r"^#[0-9a-fA-F]{6}$")
    background_image: Optional[str] = None
    background_transparency: int = Field(default=30, ge=0, le=100)


class LayoutDeck(BaseModel):
    title: str = "Generated Presentation"
    author: str = "PDFDeck"
    subject: str = "PDF to PPT Conversion"
    slides: List[LayoutSlide] = Field(default_factory=list)


# --- Remote service results ---


class ImageSearchResult(BaseModel):
    """One hit from the image search service (or its local placeholder)."""

    id: str
    thumb_url: str
    url: str
    alt: str = "Image"


class GrammarIssue(BaseModel):
    message: str
    offset: int = Field(ge=0)
    length: int = Field(ge=0)
    replacements: List[str] = Field(default_factory=list)


class GrammarReport(BaseModel):
    """Grammar findings and which checker produced them."""

    issues: List[GrammarIssue] = Field(default_factory=list)
    source: Literal["languagetool", "basic"] = "languagetool"

    @property
    def ok(self) -> bool:
        return not self.issues
