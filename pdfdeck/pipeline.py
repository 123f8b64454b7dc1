"""
Main orchestration pipeline for PDFDeck.

Coordinates PDF loading, text and image extraction, deck assembly and PPTX
generation.
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from pdfdeck.config import Settings
from pdfdeck.editor import CanvasSize, EditorController
from pdfdeck.errors import InvalidInputError
from pdfdeck.extractors import ImageRegionDetector, PdfBackend, PyMuPDFBackend, TextRunExtractor
from pdfdeck.library import ElementLibrary, IdSequence
from pdfdeck.models import Deck, ImageElement, Slide, TextElement
from pdfdeck.renderers import PPTXRenderer

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
PDF_CONTENT_TYPE = "application/pdf"

ProgressCallback = Callable[[float, str], None]
BackendFactory = Callable[[Union[bytes, str, Path], float], PdfBackend]


class ConversionResult(BaseModel):
    """Deck and element library produced from one PDF."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    deck: Deck
    library: ElementLibrary
    page_count: int
    failed_pages: List[int] = Field(default_factory=list)


def validate_pdf_source(
    data: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> None:
    """
    Reject anything that is not a PDF.

    Raises:
        InvalidInputError: On a non-.pdf filename, a non-PDF content type or missing %PDF header
    """
    if filename is not None and not filename.lower().endswith(".pdf"):
        raise InvalidInputError("Please select a valid PDF file.")
    if content_type is not None and content_type != PDF_CONTENT_TYPE:
        raise InvalidInputError("Please select a valid PDF file.")
    if not data.startswith(PDF_MAGIC):
        raise InvalidInputError("File does not look like a PDF document.")


class DeckPipeline:
    """
    End-to-end pipeline for turning a PDF into an editable deck.

    Pipeline stages:
    1. Validation: filename, content type and %PDF header
    2. Extraction, page by page: glyph runs -> text elements, paint trace -> image elements
    3. Deck assembly: one empty slide per page
    4. (process only) Placement and PPTX rendering
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend_factory: Optional[BackendFactory] = None,
        text_extractor: Optional[TextRunExtractor] = None,
        image_detector: Optional[ImageRegionDetector] = None,
    ):
        self.settings = settings or Settings()
        self.backend_factory = backend_factory or PyMuPDFBackend
        self.text_extractor = text_extractor or TextRunExtractor()
        self.image_detector = image_detector or ImageRegionDetector()
        self.renderer = PPTXRenderer(
            canvas_width=self.settings.canvas_width,
            canvas_height=self.settings.canvas_height,
            dpi=self.settings.dpi,
            image_timeout=self.settings.http_timeout,
        )

    def convert(
        self,
        source: Union[bytes, str, Path],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ConversionResult:
        """
        Convert a PDF into a deck of empty slides plus an element library.

        Args:
            source: PDF bytes or a path to a PDF file
            filename: Original filename, checked for a .pdf extension
            content_type: Declared media type, checked against application/pdf
            progress_callback: Called with (percent, message) after every page

        Returns:
            ConversionResult with one slide per successfully processed page

        Raises:
            InvalidInputError: If the input is not a PDF
            ConversionError: If the document cannot be opened
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if filename is None:
                filename = path.name
            data = path.read_bytes()
        else:
            data = source
        validate_pdf_source(data, filename, content_type)

        ids = IdSequence()
        library = ElementLibrary()
        deck = Deck(title=self.settings.title, author=self.settings.author, subject=self.settings.subject)
        failed_pages: List[int] = []

        with self.backend_factory(data, self.settings.render_scale) as backend:
            page_count = backend.page_count
            logger.info(f"[Extract] Processing {page_count} pages with {backend.name}")

            for number in range(1, page_count + 1):
                try:
                    elements = self._extract_page(backend, number, ids)
                except Exception as e:
                    logger.error(f"[Extract] Error processing page {number}: {e}")
                    failed_pages.append(number)
                else:
                    library.extend(elements)
                    deck.slides.append(Slide(id=len(deck.slides), source_page=number))

                if progress_callback:
                    progress_callback(100.0 * number / page_count, f"Extracting page {number} of {page_count}...")

        if failed_pages:
            logger.warning(f"[Extract] {len(failed_pages)} page(s) failed: {failed_pages}")
        logger.info(
            f"[Extract] {len(deck.slides)} slides, "
            f"{len(library.filter('text'))} text and {len(library.filter('image'))} image elements"
        )
        return ConversionResult(deck=deck, library=library, page_count=page_count, failed_pages=failed_pages)

    def _extract_page(self, backend: PdfBackend, number: int, ids: IdSequence) -> List[Union[TextElement, ImageElement]]:
        """Extract all elements of one page; nothing is kept if any step fails."""
        page = backend.load_page(number)
        viewport = page.viewport

        blocks = self.text_extractor.extract(page.glyph_runs(), viewport.height)
        elements: List[Union[TextElement, ImageElement]] = [
            TextElement(
                id=ids.next_id(),
                page=number,
                x=block.x,
                y=block.y,
                width=block.width,
                height=block.height,
                content=block.text.strip(),
                font_size=block.font_size,
            )
            for block in blocks
        ]

        operations = page.paint_operations()
        if self.image_detector.paint_operations.intersection(operations):
            bitmap = page.rasterize()
            elements.extend(self.image_detector.detect(operations, bitmap, number, ids))

        logger.debug(f"[Extract] Page {number}: {len(elements)} elements")
        return elements

    def place_all(self, result: ConversionResult) -> EditorController:
        """Put every library element onto the slide of the page it came from."""
        controller = EditorController(
            canvas=CanvasSize(self.settings.canvas_width, self.settings.canvas_height)
        )
        controller.load_conversion(result)
        for index, slide in enumerate(controller.deck.slides):
            controller.select_slide(index)
            for element in result.library.by_page(slide.source_page):
                controller.add_element_to_slide(element.id)
        return controller

    def process(
        self,
        pdf_path: Path,
        output_dir: Optional[Path] = None,
        auto_place: bool = False,
        save_intermediate: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> dict:
        """
        Process a PDF through the full pipeline.

        Args:
            pdf_path: Path to input PDF file
            output_dir: Output directory (default: ./output/<pdf_name>)
            auto_place: Place every extracted element on its page's slide
            save_intermediate: Save deck and element library JSON

        Returns:
            Dictionary with paths to generated files:
            {
                "pptx": Path to PPTX file,
                "deck": Path to deck JSON (if enabled),
                "elements": Path to element library JSON (if enabled)
            }
        """
        pdf_path = Path(pdf_path)

        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        if output_dir is None:
            output_dir = Path("output") / pdf_path.stem

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        print(f"\n{'='*60}")
        print(f"PDFDeck Pipeline")
        print(f"{'='*60}")
        print(f"Input: {pdf_path}")
        print(f"Output: {output_dir}")
        print(f"Auto-place: {auto_place}")
        print(f"{'='*60}\n")

        print(f"[Stage 1/3] Extraction")
        result = self.convert(pdf_path, progress_callback=progress_callback)
        deck = result.deck

        if auto_place:
            print(f"\n[Stage 2/3] Placing {len(result.library)} elements")
            deck = self.place_all(result).deck
        else:
            print(f"\n[Stage 2/3] Placement skipped")

        deck_path = None
        elements_path = None
        if save_intermediate:
            deck_path = output_dir / f"{pdf_path.stem}.deck.json"
            with open(deck_path, "w", encoding="utf-8") as f:
                json.dump(deck.to_dict(), f, indent=2, ensure_ascii=False)

            elements_path = output_dir / f"{pdf_path.stem}.elements.json"
            with open(elements_path, "w", encoding="utf-8") as f:
                json.dump(
                    [element.model_dump(mode="json") for element in result.library],
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
            print(f"[Stage 2/3] Saved deck to {deck_path}")

        print(f"\n[Stage 3/3] Rendering PPTX")
        pptx_path = output_dir / f"{pdf_path.stem}.pptx"
        self.renderer.render(deck, pptx_path)

        print(f"\n{'='*60}")
        print(f"✓ Pipeline Complete")
        print(f"{'='*60}")
        print(f"PPTX: {pptx_path}")
        if deck_path:
            print(f"Deck JSON: {deck_path}")
        if result.failed_pages:
            print(f"Failed pages: {', '.join(str(p) for p in result.failed_pages)}")
        print(f"{'='*60}\n")

        return {
            "pptx": pptx_path,
            "deck": deck_path,
            "elements": elements_path,
            "failed_pages": result.failed_pages,
        }

    def from_deck(self, deck_path: Path, output_path: Path) -> Path:
        """
        Generate PPTX from an existing deck JSON.

        Useful for re-rendering after manual edits to the deck.
        """
        deck_path = Path(deck_path)
        with open(deck_path, "r", encoding="utf-8") as f:
            deck = Deck.from_dict(json.load(f))

        print(f"[Render] Loaded deck with {len(deck.slides)} slides from {deck_path}")
        return self.renderer.render(deck, output_path)
