"""
Slide/card editing: explicit editor state plus the controller that owns it.
"""

from pdfdeck.editor.controller import EditorController
from pdfdeck.editor.state import CanvasSize, CardTarget, EditorState, InteractionMode

__all__ = [
    "EditorController",
    "CanvasSize",
    "CardTarget",
    "EditorState",
    "InteractionMode",
]
