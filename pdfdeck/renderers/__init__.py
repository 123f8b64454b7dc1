"""Output renderers for PDFDeck."""

from pdfdeck.renderers.layouts import geometry_for
from pdfdeck.renderers.pptx_renderer import LayoutRenderer, PPTXRenderer
from pdfdeck.renderers.text_exporter import ExportedDocument, ExportFormat, TextExporter

__all__ = [
    "PPTXRenderer",
    "LayoutRenderer",
    "TextExporter",
    "ExportFormat",
    "ExportedDocument",
    "geometry_for",
]
