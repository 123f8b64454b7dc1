"""
Group a page's glyph runs into text blocks.

A greedy single pass: each run is compared against the most recently added
run of the current block and either joins it or closes it. There is no
backtracking and no column, right-to-left or vertical text awareness.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from pdfdeck.models import GlyphRun, PlacedGlyph, TextBlock

logger = logging.getLogger(__name__)


class TextRunExtractor:
    """
    Cluster positioned glyph runs into lines/paragraphs.

    Two runs belong together when the incoming run sits less than half its
    font size away vertically and less than two font sizes to the right of
    the previous run's right edge.
    """

    SAME_LINE_FACTOR = 0.5
    MAX_GAP_FACTOR = 2.0

    @staticmethod
    def place(run: GlyphRun, viewport_height: float) -> PlacedGlyph:
        """Flip a run's anchor into top-left page coordinates."""
        return PlacedGlyph(
            text=run.text,
            x=run.transform[4],
            y=viewport_height - run.transform[5],
            width=run.width,
            height=run.height,
            font_size=run.font_size,
        )

    def is_contiguous(self, previous: PlacedGlyph, glyph: PlacedGlyph) -> bool:
        distance_y = abs(glyph.y - previous.y)
        distance_x = glyph.x - previous.right
        return (
            distance_y < glyph.font_size * self.SAME_LINE_FACTOR
            and distance_x < glyph.font_size * self.MAX_GAP_FACTOR
        )

    def extract(
        self,
        runs: Iterable[Union[GlyphRun, Mapping[str, Any]]],
        viewport_height: float,
    ) -> List[TextBlock]:
        """
        Extract text blocks from one page.

        Args:
            runs: Glyph runs in content order (GlyphRun objects or pdf.js-style mappings)
            viewport_height: Height of the page viewport, used to flip the Y axis

        Returns:
            Finalized text blocks in the order they were closed

        Raises:
            MalformedGlyphRun: If a run has no usable transform or geometry
        """
        blocks: List[TextBlock] = []
        current: Optional[TextBlock] = None

        for index, raw in enumerate(runs):
            glyph = self.place(GlyphRun.from_raw(raw, index), viewport_height)

            if current is None:
                current = TextBlock.seed(glyph)
            elif self.is_contiguous(current.last_glyph, glyph):
                current.extend(glyph)
            else:
                self._finalize(current, blocks)
                current = TextBlock.seed(glyph)

        if current is not None:
            self._finalize(current, blocks)

        logger.debug(f"[TextRuns] Grouped runs into {len(blocks)} blocks")
        return blocks

    @staticmethod
    def _finalize(block: TextBlock, blocks: List[TextBlock]) -> None:
        # Whitespace-only blocks are dropped
        if block.text.strip():
            blocks.append(block)
