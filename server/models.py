"""
Pydantic models for API requests/responses.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from pdfdeck.models import LayoutDeck
from pdfdeck.renderers import ExportFormat


class DocumentResponse(BaseModel):
    """Status of an uploaded document."""
    document_id: str
    status: str
    filename: str
    total_pages: int
    created_at: str
    updated_at: str
    progress: float = 0.0
    current_phase: Optional[str] = None
    error_message: Optional[str] = None
    failed_pages: List[int] = Field(default_factory=list)
    results: Optional[dict] = None


class SelectSlideRequest(BaseModel):
    index: int


class BackgroundRequest(BaseModel):
    """Background of the current slide; omitted fields are left unchanged."""
    color: Optional[str] = None
    image: Optional[str] = Field(default=None, description="Image URL or data URI; empty string clears it")
    transparency: Optional[int] = None


class AddCardRequest(BaseModel):
    """
    Add a card to the current slide.

    ``element`` copies a library element, ``text`` adds a placeholder text
    card and ``image`` places an image search result.
    """
    source: Literal["element", "text", "image"]
    element_id: Optional[str] = None
    image_url: Optional[str] = None
    image_alt: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "source": "element",
                "element_id": "elem_1",
            }
        }
    }


class MoveRequest(BaseModel):
    x: float
    y: float


class ResizeRequest(BaseModel):
    width: float
    height: float


class StyleRequest(BaseModel):
    """One style attribute: font_size, color or align for text cards, fit for image cards."""
    field: str
    value: Any


class ContentRequest(BaseModel):
    content: str


class GrammarRequest(BaseModel):
    apply: bool = Field(default=False, description="Apply the first suggestion if the card is unchanged")


class TextExportRequest(BaseModel):
    """Text to export as a document."""
    text: str
    format: ExportFormat = ExportFormat.PDF


class LayoutExportRequest(LayoutDeck):
    """A flat title/content deck to render."""


class ElementsResponse(BaseModel):
    document_id: str
    kind: str
    elements: List[Dict[str, Any]]
