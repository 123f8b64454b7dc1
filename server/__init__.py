"""
FastAPI backend server for the PDFDeck web editor.

Provides REST API and WebSocket endpoints for:
- PDF upload and background conversion
- Real-time progress updates
- Slide and card editing
- PPTX and text document export
"""

__version__ = "0.1.0"
