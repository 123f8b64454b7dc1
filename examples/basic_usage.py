"""
Basic usage example for PDFDeck.

Converts a PDF, places a few extracted elements by hand and exports the
edited deck to PPTX using the Python API.
"""

from pathlib import Path

from pdfdeck import DeckPipeline
from pdfdeck.editor import EditorController
from pdfdeck.renderers import PPTXRenderer


def main():
    pipeline = DeckPipeline()

    pdf_path = Path("examples/sample_deck.pdf")
    result = pipeline.convert(pdf_path)

    print(f"Pages: {result.page_count}, failed: {result.failed_pages}")
    print(f"Elements: {len(result.library)}")

    controller = EditorController()
    controller.load_conversion(result)

    # Put the first three text blocks of page 1 on the first slide
    for element in result.library.filter("text")[:3]:
        if element.page == 1:
            controller.add_element_to_slide(element.id)

    card = controller.add_text_card()
    if card:
        controller.update_card_content(card.id, "Notes for this slide.")
        controller.update_card_style(card.id, "align", "center")

    output_path = Path("output/sample_deck/edited.pptx")
    PPTXRenderer().render(controller.deck, output_path)
    print(f"\n✓ Saved {output_path}")


if __name__ == "__main__":
    main()
