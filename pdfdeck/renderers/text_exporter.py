"""
Export plain text as a branded document.

Every format wraps the text in the same header ("<brand> Document",
"Generated on <date>") and footer ("Created with <brand> Document
Converter"). Text formats are jinja2 templates; PDF is laid out with
PyMuPDF on A4.
"""

import logging
from datetime import date
from enum import Enum
from typing import List, NamedTuple, Optional

import fitz  # PyMuPDF
from jinja2 import Environment

from pdfdeck.errors import InvalidInputError

logger = logging.getLogger(__name__)

MM = 72 / 25.4


class ExportFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    RTF = "rtf"
    HTML = "html"
    MARKDOWN = "markdown"


class ExportedDocument(NamedTuple):
    filename: str
    media_type: str
    content: bytes


def rtf_escape(text: str) -> str:
    """Escape RTF control characters; newlines become paragraph breaks."""
    out = []
    for ch in text:
        if ch in "\\{}":
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\par\n")
        elif ch == "\r":
            continue
        elif ord(ch) > 127:
            code = ord(ch)
            # RTF \u takes a signed 16-bit value
            if code > 0xFFFF:
                out.append("?")
                continue
            if code > 32767:
                code -= 65536
            out.append(f"\\u{code}?")
        else:
            out.append(ch)
    return "".join(out)


def format_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


class TextExporter:
    """Render text into pdf, doc, txt, rtf, html or markdown."""

    TXT_TEMPLATE = """{{ brand|upper }} DOCUMENT CONVERTER
Generated on {{ generated_on }}
{{ rule }}

{{ text }}

{{ rule }}
Created with {{ brand }} Document Converter"""

    MARKDOWN_TEMPLATE = """# {{ brand }} Document

**Generated on {{ generated_on }}**

---

{{ text }}

---

*Created with {{ brand }} Document Converter*"""

    RTF_TEMPLATE = """{\\rtf1\\ansi\\deff0
{\\fonttbl{\\f0 Arial;}}
{\\colortbl;\\red37\\green99\\blue235;\\red30\\green41\\blue59;}
\\f0\\fs24
{\\cf1\\b\\fs32 {{ brand|rtf }} Document\\par}
\\cf2\\fs20 Generated on {{ generated_on }}\\par
\\par
{{ text|rtf }}
\\par
\\par
{\\fs18 Created with {{ brand|rtf }} Document Converter}
}"""

    HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ brand|e }} Document</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
            max-width: 800px;
            margin: 0 auto;
            padding: 40px 20px;
            line-height: 1.6;
            color: #1e293b;
        }
        .header {
            border-bottom: 3px solid #2563eb;
            padding-bottom: 20px;
            margin-bottom: 30px;
        }
        h1 {
            color: #2563eb;
            margin: 0 0 10px 0;
        }
        .date {
            color: #64748b;
            font-size: 14px;
        }
        .content {
            white-space: pre-wrap;
            margin-bottom: 40px;
        }
        .footer {
            border-top: 1px solid #e2e8f0;
            padding-top: 20px;
            text-align: center;
            color: #64748b;
            font-size: 14px;
        }
    </style>
</head>
<body>
    <div class="header">
        <h1>{{ brand|e }} Document</h1>
        <p class="date">Generated on {{ generated_on }}</p>
    </div>
    <div class="content">{{ text|e }}</div>
    <div class="footer">
        <p>Created with {{ brand|e }} Document Converter</p>
    </div>
</body>
</html>"""

    # Word opens HTML saved with a .doc extension
    DOC_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{{ brand|e }} Document</title>
    <style>
        body { font-family: Arial, sans-serif; line-height: 1.6; padding: 40px; }
        h1 { color: #2563eb; }
        .header { border-bottom: 2px solid #2563eb; padding-bottom: 10px; margin-bottom: 20px; }
        .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #ccc; font-size: 12px; color: #666; }
    </style>
</head>
<body>
    <div class="header">
        <h1>{{ brand|e }} Document</h1>
        <p>Generated on {{ generated_on }}</p>
    </div>
    <div class="content">
        {% for line in lines %}{{ line|e }}{% if not loop.last %}<br>{% endif %}{% endfor %}
    </div>
    <div class="footer">
        <p>Created with {{ brand|e }} Document Converter</p>
    </div>
</body>
</html>"""

    # PDF layout, in millimetres on A4
    PAGE_WIDTH_MM = 210
    MARGIN_MM = 20
    CONTENT_WIDTH_MM = 170
    CONTENT_TOP_MM = 40
    CONTENT_BOTTOM_MM = 275
    FOOTER_PAGE_MM = 285
    FOOTER_BRAND_MM = 290
    BODY_FONT_SIZE = 11
    LINE_HEIGHT_FACTOR = 1.15
    FONT = "helv"

    TITLE_COLOR = (37 / 255, 99 / 255, 235 / 255)
    DATE_COLOR = (100 / 255, 116 / 255, 139 / 255)
    BODY_COLOR = (30 / 255, 41 / 255, 59 / 255)
    FOOTER_COLOR = (148 / 255, 163 / 255, 184 / 255)

    MEDIA_TYPES = {
        ExportFormat.PDF: ("pdf", "application/pdf"),
        ExportFormat.DOCX: ("doc", "application/msword"),
        ExportFormat.TXT: ("txt", "text/plain"),
        ExportFormat.RTF: ("rtf", "application/rtf"),
        ExportFormat.HTML: ("html", "text/html"),
        ExportFormat.MARKDOWN: ("md", "text/markdown"),
    }

    def __init__(self, brand_name: str = "PDFDeck"):
        self.brand_name = brand_name
        self._env = Environment(autoescape=False, keep_trailing_newline=True)
        self._env.filters["rtf"] = rtf_escape

    def export(self, text: str, fmt: ExportFormat, generated_on: Optional[date] = None) -> ExportedDocument:
        """
        Export text in the requested format.

        Raises:
            InvalidInputError: If the text is empty or the format is unknown
        """
        if not text or not text.strip():
            raise InvalidInputError("Please enter some text to convert")
        try:
            fmt = ExportFormat(fmt)
        except ValueError as e:
            raise InvalidInputError(f"Unsupported export format: {fmt}") from e

        day = format_date(generated_on or date.today())
        extension, media_type = self.MEDIA_TYPES[fmt]

        if fmt == ExportFormat.PDF:
            content = self._render_pdf(text, day)
        elif fmt == ExportFormat.DOCX:
            # BOM so Word picks up UTF-8
            content = ("\ufeff" + self._render(self.DOC_TEMPLATE, text, day)).encode("utf-8")
        else:
            template = {
                ExportFormat.TXT: self.TXT_TEMPLATE,
                ExportFormat.RTF: self.RTF_TEMPLATE,
                ExportFormat.HTML: self.HTML_TEMPLATE,
                ExportFormat.MARKDOWN: self.MARKDOWN_TEMPLATE,
            }[fmt]
            content = self._render(template, text, day).encode("utf-8")

        logger.info(f"[Export] Rendered {fmt.value} document ({len(content)} bytes)")
        return ExportedDocument(
            filename=f"{self.brand_name}-document.{extension}",
            media_type=media_type,
            content=content,
        )

    def _render(self, source: str, text: str, day: str) -> str:
        template = self._env.from_string(source)
        return template.render(
            brand=self.brand_name,
            generated_on=day,
            text=text,
            lines=text.split("\n"),
            rule="=" * 50,
        )

    def _render_pdf(self, text: str, day: str) -> bytes:
        doc = fitz.open()
        doc.set_metadata(
            {
                "title": f"{self.brand_name} Document",
                "subject": "Converted Document",
                "author": f"{self.brand_name} Document Converter",
                "creator": self.brand_name,
            }
        )
        width, height = fitz.paper_size("a4")
        left = self.MARGIN_MM * MM
        line_height = self.BODY_FONT_SIZE * self.LINE_HEIGHT_FACTOR

        page = doc.new_page(width=width, height=height)
        page.insert_text(
            (left, 20 * MM),
            f"{self.brand_name} Document",
            fontsize=20,
            fontname=self.FONT,
            color=self.TITLE_COLOR,
        )
        page.insert_text(
            (left, 28 * MM), f"Generated on {day}", fontsize=10, fontname=self.FONT, color=self.DATE_COLOR
        )

        y = self.CONTENT_TOP_MM * MM
        for line in self.wrap(text, self.CONTENT_WIDTH_MM * MM):
            if y > self.CONTENT_BOTTOM_MM * MM:
                page = doc.new_page(width=width, height=height)
                y = self.MARGIN_MM * MM
            if line:
                page.insert_text(
                    (left, y), line, fontsize=self.BODY_FONT_SIZE, fontname=self.FONT, color=self.BODY_COLOR
                )
            y += line_height

        page_count = doc.page_count
        for i, page in enumerate(doc, start=1):
            self._centered(page, f"Page {i} of {page_count}", self.FOOTER_PAGE_MM * MM)
            self._centered(page, f"Created with {self.brand_name} Document Converter", self.FOOTER_BRAND_MM * MM)

        data = doc.tobytes()
        doc.close()
        return data

    def _centered(self, page, text: str, y: float, fontsize: float = 9) -> None:
        center = self.PAGE_WIDTH_MM / 2 * MM
        width = fitz.get_text_length(text, fontname=self.FONT, fontsize=fontsize)
        page.insert_text((center - width / 2, y), text, fontsize=fontsize, fontname=self.FONT, color=self.FOOTER_COLOR)

    def wrap(self, text: str, max_width: float) -> List[str]:
        """Greedy word wrap by measured string width; over-long words are split."""

        def fits(s: str) -> bool:
            return fitz.get_text_length(s, fontname=self.FONT, fontsize=self.BODY_FONT_SIZE) <= max_width

        lines: List[str] = []
        for paragraph in text.replace("\r\n", "\n").split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if fits(candidate):
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                    current = ""
                while not fits(word):
                    cut = len(word) - 1
                    while cut > 1 and not fits(word[:cut]):
                        cut -= 1
                    lines.append(word[:cut])
                    word = word[cut:]
                current = word
            lines.append(current)
        return lines
