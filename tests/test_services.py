"""
Tests for the remote service clients and their local fallbacks.
"""

import pytest
import requests

from pdfdeck.errors import InvalidInputError
from pdfdeck.models import GrammarIssue
from pdfdeck.services import GrammarChecker, ImageSearchClient, basic_check


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def offline(*args, **kwargs):
    raise requests.ConnectionError("network down")


# --- Image search ---


def test_image_search_parses_results(monkeypatch):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured.update(url=url, params=params, timeout=timeout)
        return FakeResponse(
            {
                "results": [
                    {
                        "id": "abc",
                        "alt_description": "a cat",
                        "urls": {"small": "https://img/small.jpg", "regular": "https://img/regular.jpg"},
                    }
                ]
            }
        )

    monkeypatch.setattr(requests, "get", fake_get)

    results = ImageSearchClient(access_key="key", timeout=3).search("  cats ")

    assert captured["params"] == {"query": "cats", "per_page": 12, "client_id": "key"}
    assert captured["timeout"] == 3
    assert len(results) == 1
    assert results[0].thumb_url == "https://img/small.jpg"
    assert results[0].url == "https://img/regular.jpg"
    assert results[0].alt == "a cat"


def test_image_search_network_failure_uses_demo_images(monkeypatch):
    monkeypatch.setattr(requests, "get", offline)

    results = ImageSearchClient(access_key="key").search("sunset beach")

    assert len(results) == 12
    assert results[0].url == "https://picsum.photos/800/600?random=1&q=sunset%20beach"
    assert results[0].thumb_url == "https://picsum.photos/200/150?random=1&q=sunset%20beach"


def test_image_search_http_error_and_empty_results(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({}, status_code=401))
    assert len(ImageSearchClient(access_key="key").search("x")) == 12

    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"results": []}))
    assert len(ImageSearchClient(access_key="key").search("x")) == 12


def test_image_search_demo_images_are_deterministic():
    client = ImageSearchClient(access_key="key")
    assert client.demo_images("dogs") == client.demo_images("dogs")


def test_image_search_empty_query():
    with pytest.raises(InvalidInputError):
        ImageSearchClient(access_key="key").search("   ")


# --- Grammar ---


def test_basic_check_heuristics():
    issues = basic_check("hello  world")
    messages = [issue.message for issue in issues]

    assert messages == [
        "Multiple consecutive spaces found",
        "Text should start with capital letter",
        "Consider adding punctuation at the end",
    ]
    assert basic_check("Fine sentence.") == []
    assert basic_check("Is it?") == []


def test_grammar_check_parses_languagetool(monkeypatch):
    captured = {}

    def fake_post(url, data=None, timeout=None):
        captured.update(url=url, data=data)
        return FakeResponse(
            {
                "matches": [
                    {
                        "message": "Possible typo",
                        "offset": 4,
                        "length": 4,
                        "replacements": [{"value": "test"}, {"value": "text"}],
                    }
                ]
            }
        )

    monkeypatch.setattr(requests, "post", fake_post)

    report = GrammarChecker().check("the tset")

    assert captured["url"] == "https://api.languagetool.org/v2/check"
    assert captured["data"] == {"text": "the tset", "language": "en-US"}
    assert report.source == "languagetool"
    assert report.issues[0].replacements == ["test", "text"]
    assert not report.ok


def test_grammar_check_falls_back_when_offline(monkeypatch):
    monkeypatch.setattr(requests, "post", offline)

    report = GrammarChecker().check("no capital")

    assert report.source == "basic"
    assert len(report.issues) == 2


def test_grammar_check_empty_text():
    with pytest.raises(InvalidInputError):
        GrammarChecker().check("  \n ")


def test_apply_suggestion():
    text = "hello world"
    capital = GrammarIssue(message="cap", offset=0, length=1, replacements=["H"])
    period = GrammarIssue(message="end", offset=len(text), length=0, replacements=["."])

    assert GrammarChecker.apply_suggestion(text, capital) == "Hello world"
    assert GrammarChecker.apply_suggestion(text, period) == "hello world."
    assert GrammarChecker.apply_suggestion(text, GrammarIssue(message="x", offset=0, length=1)) is None
