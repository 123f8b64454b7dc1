"""
Editor controller: the single owner of the deck, the element library and
the interaction state.

Every mutation of the slide/card model goes through this class. Operations
that wait on I/O capture a CardTarget first and re-validate it on resume.
"""

import itertools
import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from pydantic import ValidationError

from pdfdeck.editor.state import CanvasSize, CardTarget, EditorState, InteractionMode
from pdfdeck.errors import InvalidInputError
from pdfdeck.library import ElementLibrary
from pdfdeck.models import (
    STYLE_FIELDS,
    Card,
    Deck,
    GrammarReport,
    ImageCard,
    ImageSearchResult,
    Slide,
    TextCard,
    TextElement,
)

if TYPE_CHECKING:
    from pdfdeck.pipeline import ConversionResult
    from pdfdeck.services.grammar import GrammarChecker

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


def _clamp(value: float, low: float, high: float) -> float:
    # Low wins when the card is larger than the canvas
    return max(low, min(value, high))


class EditorController:
    """
    Slide/card editing operations.

    Listeners receive ``"render"`` whenever the current slide needs to be
    redrawn and ``"slides"`` when the slide list changed.
    """

    MIN_CARD_WIDTH = 100
    MIN_CARD_HEIGHT = 50

    CARD_ORIGIN = 50
    CARD_OFFSET_STEP = 20
    NEW_CARD_POSITION = (100, 100)

    TEXT_CARD_SIZE = (400, 100)
    IMAGE_CARD_SIZE = (300, 200)

    MIN_FONT_SIZE = 12
    MAX_FONT_SIZE = 32
    DEFAULT_FONT_SIZE = 16
    DEFAULT_TEXT_COLOR = "#333333"
    PLACEHOLDER_TEXT = "Enter your text here"

    def __init__(
        self,
        deck: Optional[Deck] = None,
        library: Optional[ElementLibrary] = None,
        canvas: CanvasSize = CanvasSize(960, 540),
    ):
        self.deck = deck or Deck()
        self.library = library or ElementLibrary()
        self.canvas = canvas
        self.state = EditorState()
        self._listeners: List[Listener] = []
        self._card_ids = itertools.count(self._max_card_id() + 1)
        self._slide_ids = itertools.count(self._max_slide_id() + 1)

    # --- Listeners ---

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, event: str) -> None:
        for listener in self._listeners:
            listener(event)

    # --- Slides ---

    @property
    def current_slide(self) -> Optional[Slide]:
        index = self.state.current_slide_index
        if 0 <= index < len(self.deck.slides):
            return self.deck.slides[index]
        return None

    def load_conversion(self, result: "ConversionResult") -> None:
        """Replace the deck and library with a freshly converted document."""
        self.deck = result.deck
        self.library = result.library
        self.state.reset()
        # Card ids are never reused, even across documents
        self._card_ids = itertools.count(max(next(self._card_ids), self._max_card_id() + 1))
        self._slide_ids = itertools.count(self._max_slide_id() + 1)
        logger.info(
            f"[Editor] Loaded {len(self.deck.slides)} slides and {len(self.library)} elements"
        )
        self._notify("slides")
        if self.deck.slides:
            self.select_slide(0)

    def add_slide(self) -> Slide:
        slide = Slide(id=next(self._slide_ids))
        self.deck.slides.append(slide)
        self._notify("slides")
        self.select_slide(len(self.deck.slides) - 1)
        return slide

    def delete_slide(self, slide_id: int) -> bool:
        slide = self.deck.find_slide(slide_id)
        if slide is None:
            return False
        self.deck.slides.remove(slide)

        if not self.deck.slides:
            self.state.current_slide_index = 0
            self.deselect_all()
        else:
            self.state.current_slide_index = min(
                self.state.current_slide_index, len(self.deck.slides) - 1
            )
            self.select_slide(self.state.current_slide_index)
        self._notify("slides")
        return True

    def select_slide(self, index: int) -> bool:
        if index < 0 or index >= len(self.deck.slides):
            return False
        self.state.current_slide_index = index
        self.deselect_all()
        self._notify("render")
        return True

    def set_background(
        self,
        color: Optional[str] = None,
        image: Optional[str] = None,
        transparency: Optional[int] = None,
    ) -> Optional[Slide]:
        slide = self.current_slide
        if slide is None:
            return None
        changes = {}
        if color is not None:
            changes["background_color"] = color
        if image is not None:
            changes["background_image"] = image or None
        if transparency is not None:
            changes["background_transparency"] = transparency

        # Validate everything before touching the slide
        try:
            validated = Slide.model_validate({**slide.model_dump(), **changes})
        except ValidationError as e:
            raise InvalidInputError(f"Invalid background: {e.errors()[0]['msg']}") from e
        for name in changes:
            setattr(slide, name, getattr(validated, name))
        self._notify("render")
        self._notify("slides")
        return slide

    # --- Adding cards ---

    def add_element_to_slide(self, element_id: str) -> Optional[Card]:
        """
        Copy a library element into a new card on the current slide.

        Returns None, without raising, when there is no slide or the element
        id is unknown.
        """
        element = self.library.lookup(element_id)
        slide = self.current_slide
        if element is None or slide is None:
            return None

        count = len(slide.cards)
        offset = self.CARD_ORIGIN + count * self.CARD_OFFSET_STEP
        z_index = count + 1

        if isinstance(element, TextElement):
            width, height = self.TEXT_CARD_SIZE
            card: Card = TextCard(
                id=next(self._card_ids),
                x=offset,
                y=offset,
                width=width,
                height=height,
                z_index=z_index,
                content=element.content,
                font_size=self._clamp_font_size(element.font_size),
                color=self.DEFAULT_TEXT_COLOR,
                align="left",
            )
        else:
            width, height = self.IMAGE_CARD_SIZE
            card = ImageCard(
                id=next(self._card_ids),
                x=offset,
                y=offset,
                width=width,
                height=height,
                z_index=z_index,
                src=element.src,
                fit="contain",
            )

        slide.cards.append(card)
        logger.debug(f"[Editor] Added {element.kind} card {card.id} from {element.id} to slide {slide.id}")
        self._notify("render")
        self._notify("slides")
        return card

    def add_text_card(self) -> Optional[TextCard]:
        slide = self.current_slide
        if slide is None:
            return None
        x, y = self.NEW_CARD_POSITION
        width, height = self.TEXT_CARD_SIZE
        card = TextCard(
            id=next(self._card_ids),
            x=x,
            y=y,
            width=width,
            height=height,
            z_index=len(slide.cards) + 1,
            content=self.PLACEHOLDER_TEXT,
            font_size=self.DEFAULT_FONT_SIZE,
            color=self.DEFAULT_TEXT_COLOR,
        )
        slide.cards.append(card)
        self._notify("render")
        self._notify("slides")
        return card

    def add_image_to_slide(self, image: ImageSearchResult) -> Optional[ImageCard]:
        slide = self.current_slide
        if slide is None:
            return None
        x, y = self.NEW_CARD_POSITION
        width, height = self.IMAGE_CARD_SIZE
        card = ImageCard(
            id=next(self._card_ids),
            x=x,
            y=y,
            width=width,
            height=height,
            z_index=len(slide.cards) + 1,
            src=image.url,
            fit="contain",
        )
        slide.cards.append(card)
        self._notify("render")
        self._notify("slides")
        return card

    # --- Selection and pointer interaction ---

    def find_card(self, card_id: int) -> Optional[Card]:
        found = self.deck.find_card(card_id)
        return found[1] if found else None

    def select_card(self, card_id: int) -> bool:
        self.deselect_all()
        slide = self.current_slide
        card = slide.find_card(card_id) if slide else None
        if card is None:
            return False
        self.state.selected_card_id = card_id
        card.selected = True
        return True

    def deselect_all(self) -> None:
        self.state.selected_card_id = None
        self.state.mode = InteractionMode.IDLE
        slide = self.current_slide
        if slide:
            for card in slide.cards:
                card.selected = False

    def pointer_down(self, card_id: int, px: float, py: float, on_resize_handle: bool = False) -> bool:
        """Select a card and enter drag or resize mode."""
        if not self.select_card(card_id):
            return False
        card = self.find_card(card_id)
        if on_resize_handle:
            self.state.mode = InteractionMode.RESIZING
        else:
            self.state.mode = InteractionMode.DRAGGING
            self.state.drag_offset = (px - card.x, py - card.y)
        return True

    def pointer_move(self, px: float, py: float) -> Optional[Card]:
        if self.state.selected_card_id is None or self.state.mode == InteractionMode.IDLE:
            return None
        slide = self.current_slide
        card = slide.find_card(self.state.selected_card_id) if slide else None
        if card is None:
            return None

        if self.state.mode == InteractionMode.DRAGGING:
            offset_x, offset_y = self.state.drag_offset
            self._place(card, px - offset_x, py - offset_y)
        else:
            self._size(card, px - card.x, py - card.y)
        return card

    def pointer_up(self) -> None:
        self.state.mode = InteractionMode.IDLE

    def _place(self, card: Card, x: float, y: float) -> None:
        card.x = _clamp(x, 0, self.canvas.width - card.width)
        card.y = _clamp(y, 0, self.canvas.height - card.height)

    def _size(self, card: Card, width: float, height: float) -> None:
        card.width = max(self.MIN_CARD_WIDTH, width)
        card.height = max(self.MIN_CARD_HEIGHT, height)

    def move_card(self, card_id: int, x: float, y: float) -> Optional[Card]:
        card = self.find_card(card_id)
        if card is None:
            return None
        self._place(card, x, y)
        self._notify("render")
        return card

    def resize_card(self, card_id: int, width: float, height: float) -> Optional[Card]:
        card = self.find_card(card_id)
        if card is None:
            return None
        self._size(card, width, height)
        self._notify("render")
        return card

    # --- Editing ---

    def update_card_style(self, card_id: int, field: str, value: Any) -> Optional[Card]:
        """
        Change one style attribute of a card in place.

        Raises:
            InvalidInputError: If the field does not apply to the card type or the value is invalid
        """
        card = self.find_card(card_id)
        if card is None:
            return None
        if field not in STYLE_FIELDS[card.kind]:
            raise InvalidInputError(f"'{field}' is not a style of {card.kind} cards")
        try:
            setattr(card, field, value)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid {field}: {e.errors()[0]['msg']}") from e
        self._notify("render")
        return card

    def update_card_content(self, card_id: int, content: str) -> Optional[TextCard]:
        card = self.find_card(card_id)
        if card is None:
            return None
        if not isinstance(card, TextCard):
            raise InvalidInputError("Only text cards have editable content")
        card.content = content
        return card

    def bring_to_front(self, card_id: int) -> Optional[Card]:
        found = self.deck.find_card(card_id)
        if found is None:
            return None
        slide, card = found
        card.z_index = max(c.z_index for c in slide.cards) + 1
        self._notify("render")
        return card

    def send_to_back(self, card_id: int) -> Optional[Card]:
        card = self.find_card(card_id)
        if card is None:
            return None
        card.z_index = 1
        self._notify("render")
        return card

    def delete_card(self, card_id: int) -> bool:
        """Remove a card by id; unknown ids are ignored."""
        found = self.deck.find_card(card_id)
        if found is None:
            return False
        slide, card = found
        slide.cards.remove(card)
        if self.state.selected_card_id == card_id:
            self.state.selected_card_id = None
            self.state.mode = InteractionMode.IDLE
        self._notify("render")
        self._notify("slides")
        return True

    def delete_selected_card(self) -> bool:
        if self.state.selected_card_id is None:
            return False
        return self.delete_card(self.state.selected_card_id)

    def handle_key(self, key: str) -> None:
        if key == "Delete" and self.state.selected_card_id is not None:
            self.delete_selected_card()
        elif key == "Escape":
            self.deselect_all()

    # --- Operations that resume after I/O ---

    def capture_card(self, card_id: int) -> Optional[CardTarget]:
        found = self.deck.find_card(card_id)
        if found is None:
            return None
        slide, card = found
        return CardTarget(slide_id=slide.id, card_id=card.id)

    def resolve_target(self, target: CardTarget) -> Optional[Card]:
        """The captured card, or None if it or its slide was deleted meanwhile."""
        slide = self.deck.find_slide(target.slide_id)
        if slide is None:
            return None
        return slide.find_card(target.card_id)

    def apply_text(self, target: CardTarget, expected: str, corrected: str) -> bool:
        """Replace a text card's content if it is still there and unchanged."""
        card = self.resolve_target(target)
        if not isinstance(card, TextCard):
            logger.info(f"[Editor] Card {target.card_id} no longer exists, dropping correction")
            return False
        if card.content != expected:
            logger.info(f"[Editor] Card {target.card_id} was edited meanwhile, dropping correction")
            return False
        card.content = corrected
        self._notify("render")
        return True

    def check_card_grammar(
        self,
        card_id: int,
        checker: "GrammarChecker",
        apply: bool = False,
    ) -> Optional[GrammarReport]:
        """
        Grammar-check a text card, optionally applying the first suggestion.

        The suggestion is applied only if the card still exists with the
        text that was checked.
        """
        target = self.capture_card(card_id)
        card = self.find_card(card_id)
        if target is None or not isinstance(card, TextCard) or not card.content.strip():
            return None

        checked_text = card.content
        report = checker.check(checked_text)

        if apply:
            corrected = checker.apply_first_suggestion(checked_text, report)
            if corrected is not None:
                self.apply_text(target, checked_text, corrected)
        return report

    # --- Helpers ---

    def _clamp_font_size(self, font_size: Optional[float]) -> int:
        size = font_size or self.DEFAULT_FONT_SIZE
        return int(round(min(max(size, self.MIN_FONT_SIZE), self.MAX_FONT_SIZE)))

    def _max_card_id(self) -> int:
        ids = [card.id for slide in self.deck.slides for card in slide.cards]
        return max(ids, default=-1)

    def _max_slide_id(self) -> int:
        return max((slide.id for slide in self.deck.slides), default=0)
