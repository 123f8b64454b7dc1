"""
Grammar checking via the LanguageTool API, with local heuristics as fallback.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from pdfdeck.errors import InvalidInputError
from pdfdeck.models import GrammarIssue, GrammarReport

logger = logging.getLogger(__name__)

TERMINAL_PUNCTUATION = (".", "!", "?", ":", ";")


def basic_check(text: str) -> List[GrammarIssue]:
    """Double spaces, a lowercase first letter and a missing final punctuation mark."""
    issues = []

    double_space = text.find("  ")
    if double_space >= 0:
        issues.append(
            GrammarIssue(
                message="Multiple consecutive spaces found",
                offset=double_space,
                length=2,
                replacements=[" "],
            )
        )

    if text and text[0] != text[0].upper():
        issues.append(
            GrammarIssue(
                message="Text should start with capital letter",
                offset=0,
                length=1,
                replacements=[text[0].upper()],
            )
        )

    if text and not text.endswith(TERMINAL_PUNCTUATION):
        issues.append(
            GrammarIssue(
                message="Consider adding punctuation at the end",
                offset=len(text),
                length=0,
                replacements=["."],
            )
        )

    return issues


class GrammarChecker:
    """Check text against LanguageTool; degrade to basic_check on any failure."""

    DEFAULT_API_URL = "https://api.languagetool.org/v2/check"

    def __init__(
        self,
        api_url: Optional[str] = None,
        language: str = "en-US",
        timeout: float = 10.0,
    ):
        self.api_url = api_url or self.DEFAULT_API_URL
        self.language = language
        self.timeout = timeout

    def check(self, text: str) -> GrammarReport:
        """
        Check text for grammar issues.

        Raises:
            InvalidInputError: If the text is empty
        """
        # Offsets refer to the text exactly as given
        if not text or not text.strip():
            raise InvalidInputError("Please enter some text to check")

        try:
            response = requests.post(
                self.api_url,
                data={"text": text, "language": self.language},
                timeout=self.timeout,
            )
            response.raise_for_status()
            matches = response.json().get("matches", [])
            issues = [self._parse_match(match) for match in matches]
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[Grammar] LanguageTool unavailable, using basic checks: {e}")
            return GrammarReport(issues=basic_check(text), source="basic")

        return GrammarReport(issues=issues, source="languagetool")

    @staticmethod
    def _parse_match(match: Dict[str, Any]) -> GrammarIssue:
        return GrammarIssue(
            message=match["message"],
            offset=match["offset"],
            length=match["length"],
            replacements=[r["value"] for r in match.get("replacements", []) if "value" in r],
        )

    @staticmethod
    def apply_suggestion(text: str, issue: GrammarIssue) -> Optional[str]:
        """Splice the issue's first replacement into the text."""
        if not issue.replacements:
            return None
        end = issue.offset + issue.length
        return text[: issue.offset] + issue.replacements[0] + text[end:]

    def apply_first_suggestion(self, text: str, report: GrammarReport) -> Optional[str]:
        if not report.issues:
            return None
        return self.apply_suggestion(text, report.issues[0])
