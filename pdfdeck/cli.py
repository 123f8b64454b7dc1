"""
Command-line interface for PDFDeck.
"""

import sys
import json
import argparse
from pathlib import Path

from dotenv import load_dotenv

from pdfdeck import __version__
from pdfdeck.config import Settings
from pdfdeck.logging_config import setup_logging
from pdfdeck.pipeline import DeckPipeline
from pdfdeck.renderers import ExportFormat, TextExporter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfdeck",
        description="PDFDeck: Turn PDF pages into an editable slide deck and export PPTX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a PDF into a deck of empty slides plus an element library
  pdfdeck convert input.pdf

  # Put every extracted element on its page's slide
  pdfdeck convert input.pdf --auto-place --output ./my_output

  # Dump the element library as JSON
  pdfdeck elements input.pdf --kind text

  # Re-render a saved (possibly hand-edited) deck
  pdfdeck render output/input/input.deck.json -o edited.pptx

  # Export text as a branded document
  pdfdeck export-text notes.txt --format rtf

Environment Variables:
  PDFDECK_RENDER_SCALE   Viewport scale for extraction (default: 2.0)
  PDFDECK_BRAND_NAME     Brand used by export-text
  PDFDECK_LOG_LEVEL      Logging level (default: INFO)
        """,
    )
    parser.add_argument("--version", action="version", version=f"PDFDeck {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and tracebacks")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command")

    convert = subparsers.add_parser("convert", help="Convert a PDF to PPTX")
    convert.add_argument("input", type=Path, help="Input PDF file")
    convert.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output directory (default: ./output/<pdf_name>)",
    )
    convert.add_argument(
        "--auto-place",
        action="store_true",
        help="Place every extracted element on the slide of its page",
    )
    convert.add_argument(
        "--no-intermediate",
        action="store_true",
        help="Don't save intermediate deck and element JSON",
    )

    elements = subparsers.add_parser("elements", help="Print the element library of a PDF as JSON")
    elements.add_argument("input", type=Path, help="Input PDF file")
    elements.add_argument("--kind", choices=["all", "text", "image"], default="all")

    render = subparsers.add_parser("render", help="Render a saved deck JSON to PPTX")
    render.add_argument("input", type=Path, help="Deck JSON file")
    render.add_argument("--output", "-o", type=Path, help="Output PPTX path (default: <deck>.pptx)")

    export_text = subparsers.add_parser("export-text", help="Export a text file as a document")
    export_text.add_argument("input", type=Path, help="Input text file")
    export_text.add_argument(
        "--format",
        "-f",
        dest="fmt",
        choices=[fmt.value for fmt in ExportFormat],
        default=ExportFormat.PDF.value,
    )
    export_text.add_argument("--output", "-o", type=Path, help="Output file (default: exporter's filename)")

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    load_dotenv()  # Load .env file if present

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = Settings.from_env()
    setup_logging("DEBUG" if args.debug else settings.log_level, log_file=args.log_file)

    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        if args.command == "convert":
            pipeline = DeckPipeline(settings)
            pipeline.process(
                pdf_path=args.input,
                output_dir=args.output,
                auto_place=args.auto_place,
                save_intermediate=not args.no_intermediate,
            )

        elif args.command == "elements":
            result = DeckPipeline(settings).convert(args.input)
            kind = None if args.kind == "all" else args.kind
            payload = [element.model_dump(mode="json") for element in result.library.filter(kind)]
            print(json.dumps(payload, indent=2, ensure_ascii=False))

        elif args.command == "render":
            output = args.output or args.input.with_suffix(".pptx")
            DeckPipeline(settings).from_deck(args.input, output)
            print(f"PPTX: {output}")

        elif args.command == "export-text":
            text = args.input.read_text(encoding="utf-8")
            document = TextExporter(settings.brand_name).export(text, ExportFormat(args.fmt))
            output = args.output or Path(document.filename)
            output.write_bytes(document.content)
            print(f"{document.media_type}: {output}")

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
