"""
Image search via the Unsplash API.

Any failure, and an empty result, falls back to deterministic placeholder
images so the caller always gets something to place.
"""

import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from pdfdeck.errors import InvalidInputError
from pdfdeck.models import ImageSearchResult

logger = logging.getLogger(__name__)


class ImageSearchClient:
    """Search photos by keyword."""

    DEFAULT_API_URL = "https://api.unsplash.com/search/photos"
    DEMO_IMAGE_COUNT = 12

    def __init__(
        self,
        access_key: Optional[str] = None,
        api_url: Optional[str] = None,
        per_page: int = 12,
        timeout: float = 10.0,
    ):
        # Unsplash's public demo client id is rate limited to almost nothing
        self.access_key = access_key or os.getenv("UNSPLASH_ACCESS_KEY") or "demo"
        self.api_url = api_url or self.DEFAULT_API_URL
        self.per_page = per_page
        self.timeout = timeout

    def search(self, query: str) -> List[ImageSearchResult]:
        """
        Search images for a query.

        Raises:
            InvalidInputError: If the query is empty
        """
        query = (query or "").strip()
        if not query:
            raise InvalidInputError("Please enter search keywords")

        try:
            response = requests.get(
                self.api_url,
                params={"query": query, "per_page": self.per_page, "client_id": self.access_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = [self._parse_result(item) for item in response.json().get("results", [])]
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[ImageSearch] Search failed, using demo images: {e}")
            return self.demo_images(query)

        if not results:
            logger.info(f"[ImageSearch] No results for '{query}', using demo images")
            return self.demo_images(query)
        return results

    @staticmethod
    def _parse_result(item: Dict[str, Any]) -> ImageSearchResult:
        urls = item["urls"]
        return ImageSearchResult(
            id=str(item["id"]),
            thumb_url=urls["small"],
            url=urls["regular"],
            alt=item.get("alt_description") or item.get("description") or "Image",
        )

    def demo_images(self, query: str) -> List[ImageSearchResult]:
        """Placeholder images keyed by index and query."""
        q = quote(query)
        return [
            ImageSearchResult(
                id=f"demo-{i}",
                url=f"https://picsum.photos/800/600?random={i}&q={q}",
                thumb_url=f"https://picsum.photos/200/150?random={i}&q={q}",
                alt=f"{query} image {i}",
            )
            for i in range(1, self.DEMO_IMAGE_COUNT + 1)
        ]
