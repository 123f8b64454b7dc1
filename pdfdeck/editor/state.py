"""
Editor state: what is selected and what the pointer is doing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class InteractionMode(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class CanvasSize(NamedTuple):
    """Editing canvas in pixels."""

    width: float
    height: float


class CardTarget(NamedTuple):
    """A card captured at the start of an operation that waits on I/O."""

    slide_id: int
    card_id: int


@dataclass
class EditorState:
    """
    Mutable interaction state of one editing session.

    Only one card can be selected, and only the selected card can be in
    drag or resize mode.
    """

    current_slide_index: int = 0
    selected_card_id: Optional[int] = None
    mode: InteractionMode = InteractionMode.IDLE
    drag_offset: Tuple[float, float] = (0.0, 0.0)

    def reset(self) -> None:
        self.current_slide_index = 0
        self.selected_card_id = None
        self.mode = InteractionMode.IDLE
        self.drag_offset = (0.0, 0.0)
