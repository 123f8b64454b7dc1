"""
Runtime settings for PDFDeck.

Defaults live on the model; every field can be overridden with a
``PDFDECK_<FIELD>`` environment variable (``.env`` files are loaded by the
CLI and the server through python-dotenv).
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "PDFDECK_"


class Settings(BaseModel):
    """All tunables of the conversion pipeline, editor, exporters and services."""

    # Extraction
    render_scale: float = Field(default=2.0, gt=0, description="Viewport scale used for extraction and rasterization")

    # Editor canvas (pixels) and its mapping onto the slide (pixels per inch)
    canvas_width: int = Field(default=960, gt=0)
    canvas_height: int = Field(default=540, gt=0)
    dpi: int = Field(default=96, gt=0)

    # Branding and presentation metadata
    brand_name: str = "PDFDeck"
    author: str = "PDFDeck"
    title: str = "Generated Presentation"
    subject: str = "PDF to PPT Conversion"

    # Remote services
    unsplash_access_key: Optional[str] = None
    image_search_url: str = "https://api.unsplash.com/search/photos"
    grammar_api_url: str = "https://api.languagetool.org/v2/check"
    grammar_language: str = "en-US"
    http_timeout: float = Field(default=10.0, gt=0)

    # Server
    upload_dir: Path = Path("server/uploads")
    output_dir: Path = Path("server/output")
    database_url: str = "sqlite:///server/pdfdeck.db"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Build settings from ``PDFDECK_*`` variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        # Unsplash's own variable name is honoured as well
        if "unsplash_access_key" not in values and environ.get("UNSPLASH_ACCESS_KEY"):
            values["unsplash_access_key"] = environ["UNSPLASH_ACCESS_KEY"]
        return cls.model_validate(values)
