"""
Remote services used by the editor.

Both clients swallow network failures and answer with a local substitute.
"""

from pdfdeck.services.grammar import GrammarChecker, basic_check
from pdfdeck.services.image_search import ImageSearchClient

__all__ = ["GrammarChecker", "ImageSearchClient", "basic_check"]
