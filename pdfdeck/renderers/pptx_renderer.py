"""
PPTX renderer using python-pptx.

Turns the editable deck (slides of positioned cards) or the flat
title/content/layout deck into a PowerPoint file.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import requests
from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_PARAGRAPH_ALIGNMENT
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from pdfdeck.errors import ExportError
from pdfdeck.models import Card, Deck, ImageCard, LayoutDeck, LayoutSlide, TextCard
from pdfdeck.renderers.layouts import Box, TextFrameSpec, geometry_for

logger = logging.getLogger(__name__)

ALIGNMENTS = {
    "left": PP_PARAGRAPH_ALIGNMENT.LEFT,
    "center": PP_PARAGRAPH_ALIGNMENT.CENTER,
    "right": PP_PARAGRAPH_ALIGNMENT.RIGHT,
}

ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

BLANK_LAYOUT = 6

# CSS pixels are 1/96 in, points are 1/72 in
PX_TO_PT = 72 / 96


def load_image_bytes(src: str, timeout: float = 30) -> bytes:
    """
    Resolve an image reference to raw bytes.

    Accepts ``data:`` URIs, http(s) URLs and local file paths.
    """
    if src.startswith("data:"):
        header, _, payload = src.partition(",")
        if ";base64" in header:
            return base64.b64decode(payload, validate=True)
        return payload.encode("utf-8")
    if src.startswith(("http://", "https://")):
        response = requests.get(src, timeout=timeout)
        response.raise_for_status()
        return response.content
    return Path(src).read_bytes()


def _parse_hex_color(hex_color: Optional[str]) -> Optional[RGBColor]:
    """Parse hex color string to RGBColor."""
    if not hex_color:
        return None
    try:
        hex_color = hex_color.lstrip("#")
        if len(hex_color) == 6:
            return RGBColor.from_string(hex_color.upper())
    except ValueError:
        pass
    return None


class _PresentationBuilder:
    """Shared python-pptx plumbing for both deck renderers."""

    def __init__(
        self,
        slide_width_inches: float = 10.0,
        slide_height_inches: float = 5.625,
        image_timeout: float = 30,
    ):
        self.slide_width_inches = slide_width_inches
        self.slide_height_inches = slide_height_inches
        self.image_timeout = image_timeout

    def _new_presentation(self, title: str, author: str, subject: str):
        prs = Presentation()
        prs.slide_width = Inches(self.slide_width_inches)
        prs.slide_height = Inches(self.slide_height_inches)
        prs.core_properties.title = title
        prs.core_properties.author = author
        prs.core_properties.subject = subject
        return prs

    def _add_slide(self, prs, background_color: str):
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        color = _parse_hex_color(background_color)
        if color is not None:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = color
        return slide

    def _render_background_image(self, slide, src: str, transparency: int, slide_number: int) -> None:
        """Full-bleed background picture; failures are logged and skipped."""
        try:
            data = load_image_bytes(src, self.image_timeout)
            picture = slide.shapes.add_picture(
                io.BytesIO(data),
                Inches(0),
                Inches(0),
                width=Inches(self.slide_width_inches),
                height=Inches(self.slide_height_inches),
            )
        except Exception as e:
            logger.warning(f"[PPTX] Could not add background image to slide {slide_number}: {e}")
            return
        self._set_transparency(picture, transparency)

    @staticmethod
    def _set_transparency(picture, transparency: int) -> None:
        if transparency <= 0:
            return
        blip = picture._element.find(".//" + qn("a:blip"))
        if blip is None:
            return
        alpha = OxmlElement("a:alphaModFix")
        alpha.set("amt", str(int((100 - transparency) * 1000)))
        blip.append(alpha)

    @staticmethod
    def _add_textbox(
        slide,
        box: Box,
        text: str,
        font_size_pt: float,
        color: Optional[str] = None,
        align: str = "left",
        bold: bool = False,
        valign: str = "top",
    ):
        textbox = slide.shapes.add_textbox(Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h))
        text_frame = textbox.text_frame
        text_frame.word_wrap = True
        text_frame.vertical_anchor = ANCHORS.get(valign, MSO_ANCHOR.TOP)

        rgb = _parse_hex_color(color)
        for i, line in enumerate(text.split("\n")):
            p = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            p.alignment = ALIGNMENTS.get(align, PP_PARAGRAPH_ALIGNMENT.LEFT)
            run = p.add_run()
            run.text = line
            run.font.size = Pt(font_size_pt)
            if bold:
                run.font.bold = True
            if rgb is not None:
                run.font.color.rgb = rgb
        return textbox

    def _add_image(self, slide, src: str, box: Box, fit: str = "fill"):
        """Add a picture into a box; ``contain`` letterboxes, ``cover`` crops, ``fill`` stretches."""
        try:
            data = load_image_bytes(src, self.image_timeout)
            with Image.open(io.BytesIO(data)) as img:
                image_w, image_h = img.size
        except Exception as e:
            raise ExportError(f"Could not load image: {e}") from e

        if fit == "contain" and image_w and image_h:
            scale = min(box.w / image_w, box.h / image_h)
            w, h = image_w * scale, image_h * scale
            box = Box(box.x + (box.w - w) / 2, box.y + (box.h - h) / 2, w, h)

        picture = slide.shapes.add_picture(
            io.BytesIO(data), Inches(box.x), Inches(box.y), width=Inches(box.w), height=Inches(box.h)
        )

        if fit == "cover" and image_w and image_h and box.h:
            image_aspect = image_w / image_h
            box_aspect = box.w / box.h
            if image_aspect > box_aspect:
                trim = (1 - box_aspect / image_aspect) / 2
                picture.crop_left = trim
                picture.crop_right = trim
            elif image_aspect < box_aspect:
                trim = (1 - image_aspect / box_aspect) / 2
                picture.crop_top = trim
                picture.crop_bottom = trim
        return picture

    @staticmethod
    def _write(prs, output_path: Optional[Path]) -> bytes:
        buffer = io.BytesIO()
        prs.save(buffer)
        data = buffer.getvalue()
        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
            logger.info(f"[PPTX] Saved presentation to {output_path}")
        return data


class PPTXRenderer(_PresentationBuilder):
    """
    Render the editable deck into a PowerPoint presentation.

    Card geometry is in canvas pixels; ``dpi`` maps pixels to inches, so the
    default 960 x 540 canvas fills a 10 x 5.625 inch slide.
    """

    def __init__(self, canvas_width: int = 960, canvas_height: int = 540, dpi: int = 96, image_timeout: float = 30):
        super().__init__(
            slide_width_inches=canvas_width / dpi,
            slide_height_inches=canvas_height / dpi,
            image_timeout=image_timeout,
        )
        self.dpi = dpi

    def render(self, deck: Deck, output_path: Path) -> Path:
        """
        Render all slides to a PPTX file.

        The file is written only once the whole presentation has been built.

        Raises:
            ExportError: If the deck is empty or a card image cannot be loaded
        """
        self._write(self._build(deck), output_path)
        return Path(output_path)

    def render_bytes(self, deck: Deck) -> bytes:
        return self._write(self._build(deck), None)

    def _build(self, deck: Deck):
        if not deck.slides:
            raise ExportError("No slides to export. Please add some slides first.")

        prs = self._new_presentation(deck.title, deck.author, deck.subject)
        logger.info(f"[PPTX] Rendering {len(deck.slides)} slides")

        for i, slide_data in enumerate(deck.slides):
            slide = self._add_slide(prs, slide_data.background_color)
            if slide_data.background_image:
                self._render_background_image(
                    slide, slide_data.background_image, slide_data.background_transparency, i + 1
                )

            for card in self._in_z_order(slide_data.cards):
                if isinstance(card, TextCard):
                    self._render_text_card(slide, card)
                elif isinstance(card, ImageCard):
                    self._render_image_card(slide, card)

        return prs

    @staticmethod
    def _in_z_order(cards: Iterable[Card]) -> List[Card]:
        return sorted(cards, key=lambda card: card.z_index)

    def _card_box(self, card: Card) -> Box:
        return Box(card.x / self.dpi, card.y / self.dpi, card.width / self.dpi, card.height / self.dpi)

    def _render_text_card(self, slide, card: TextCard) -> None:
        self._add_textbox(
            slide,
            self._card_box(card),
            card.content,
            font_size_pt=card.font_size * PX_TO_PT,
            color=card.color,
            align=card.align,
        )

    def _render_image_card(self, slide, card: ImageCard) -> None:
        try:
            self._add_image(slide, card.src, self._card_box(card), fit=card.fit)
        except ExportError as e:
            raise ExportError(f"Card {card.id}: {e}") from e


class LayoutRenderer(_PresentationBuilder):
    """Render a flat title/content deck with fixed per-layout geometry."""

    def render(self, deck: LayoutDeck, output_path: Path) -> Path:
        self._write(self._build(deck), output_path)
        return Path(output_path)

    def render_bytes(self, deck: LayoutDeck) -> bytes:
        return self._write(self._build(deck), None)

    def _build(self, deck: LayoutDeck):
        if not deck.slides:
            raise ExportError("No slides to export. Please add some slides first.")

        prs = self._new_presentation(deck.title, deck.author, deck.subject)
        for i, slide_data in enumerate(deck.slides):
            slide = self._add_slide(prs, slide_data.background_color)
            if slide_data.background_image:
                self._render_background_image(
                    slide, slide_data.background_image, slide_data.background_transparency, i + 1
                )
            self._render_layout(slide, slide_data)
        return prs

    def _render_layout(self, slide, slide_data: LayoutSlide) -> None:
        geometry = geometry_for(slide_data.layout)
        # Image before body so image_left reads left to right
        self._render_frame(slide, geometry.title, slide_data.title)
        if geometry.image is not None and slide_data.images:
            self._add_image(slide, slide_data.images[0].url, geometry.image, fit="fill")
        self._render_frame(slide, geometry.content, slide_data.content)

    def _render_frame(self, slide, frame: TextFrameSpec, text: str) -> None:
        self._add_textbox(
            slide,
            frame.box,
            text,
            font_size_pt=frame.font_size,
            color=frame.color,
            align=frame.align,
            bold=frame.bold,
            valign=frame.valign,
        )
