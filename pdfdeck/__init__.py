"""
PDFDeck: Turn PDF pages into an editable slide deck and export it as PPTX.

Text runs and image paint operations are extracted into an element library;
elements are placed as cards on slides and rendered with python-pptx.
"""

__version__ = "0.1.0"
__author__ = "PDFDeck Team"

from pdfdeck.models import Deck, Slide, TextCard, ImageCard, TextElement, ImageElement
from pdfdeck.pipeline import DeckPipeline, ConversionResult

__all__ = [
    "Deck",
    "Slide",
    "TextCard",
    "ImageCard",
    "TextElement",
    "ImageElement",
    "DeckPipeline",
    "ConversionResult",
]
