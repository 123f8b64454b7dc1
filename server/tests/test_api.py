"""
HTTP API tests against a temporary database and upload directory.
"""

import io

import fitz  # PyMuPDF
import pytest
import requests
from fastapi.testclient import TestClient
from pptx import Presentation

from server.main import app


def make_pdf():
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 100), "Hello world", fontsize=16)
    page.insert_text((72, 300), "Second block", fontsize=16)
    data = doc.tobytes()
    doc.close()
    return data


def offline(*args, **kwargs):
    raise requests.ConnectionError("network down")


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("PDFDECK_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("PDFDECK_UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("PDFDECK_OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setattr(requests, "get", offline)
    monkeypatch.setattr(requests, "post", offline)

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def document_id(client):
    """A converted document."""
    response = client.post("/api/upload", files={"file": ("deck.pdf", make_pdf(), "application/pdf")})
    assert response.status_code == 200
    document_id = response.json()["document_id"]

    response = client.post(f"/api/documents/{document_id}/convert")
    assert response.status_code == 200
    return document_id


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


def test_upload_rejects_non_pdf(client):
    response = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400

    response = client.post("/api/upload", files={"file": ("fake.pdf", b"hello", "application/pdf")})
    assert response.status_code == 400


def test_upload_reports_pages(client):
    response = client.post("/api/upload", files={"file": ("deck.pdf", make_pdf(), "application/pdf")})
    body = response.json()
    assert body["total_pages"] == 1
    assert body["filename"] == "deck.pdf"


def test_conversion_completes(client, document_id):
    status = client.get(f"/api/documents/{document_id}").json()
    assert status["status"] == "completed"
    assert status["progress"] == 100.0
    assert status["failed_pages"] == []
    assert status["results"]["slides_created"] == 1

    elements = client.get(f"/api/documents/{document_id}/elements", params={"kind": "text"}).json()
    assert [e["content"] for e in elements["elements"]] == ["Hello world", "Second block"]

    slides = client.get(f"/api/documents/{document_id}/slides").json()
    assert len(slides["deck"]["slides"]) == 1
    assert slides["current_slide_index"] == 0


def test_unknown_document(client):
    assert client.get("/api/documents/nope").status_code == 404
    assert client.post("/api/documents/nope/convert").status_code == 404
    assert client.get("/api/documents/nope/slides").status_code == 404


def test_bad_element_kind(client, document_id):
    assert client.get(f"/api/documents/{document_id}/elements", params={"kind": "video"}).status_code == 400


def test_card_editing(client, document_id):
    base = f"/api/documents/{document_id}"
    card = client.post(f"{base}/cards", json={"source": "element", "element_id": "elem_1"}).json()["card"]
    assert (card["x"], card["y"], card["z_index"]) == (50, 50, 1)
    card_id = card["id"]

    moved = client.post(f"{base}/cards/{card_id}/move", json={"x": 5000, "y": -10}).json()
    assert (moved["x"], moved["y"]) == (560, 0)

    resized = client.post(f"{base}/cards/{card_id}/resize", json={"width": 1, "height": 1}).json()
    assert (resized["width"], resized["height"]) == (100, 50)

    styled = client.patch(f"{base}/cards/{card_id}/style", json={"field": "align", "value": "right"}).json()
    assert styled["align"] == "right"

    response = client.patch(f"{base}/cards/{card_id}/style", json={"field": "fit", "value": "cover"})
    assert response.status_code == 400

    edited = client.patch(f"{base}/cards/{card_id}/content", json={"content": "Edited"}).json()
    assert edited["content"] == "Edited"

    assert client.post(f"{base}/cards/999/move", json={"x": 0, "y": 0}).status_code == 404


def test_unknown_element_adds_nothing(client, document_id):
    response = client.post(f"/api/documents/{document_id}/cards", json={"source": "element", "element_id": "elem_404"})
    assert response.status_code == 200
    assert response.json()["card"] is None


def test_delete_card_is_idempotent(client, document_id):
    base = f"/api/documents/{document_id}"
    card_id = client.post(f"{base}/cards", json={"source": "text"}).json()["card"]["id"]

    assert client.delete(f"{base}/cards/{card_id}").json() == {"deleted": True}
    assert client.delete(f"{base}/cards/{card_id}").json() == {"deleted": False}


def test_slides_and_background(client, document_id):
    base = f"/api/documents/{document_id}"

    slide = client.post(f"{base}/slides").json()
    selected = client.post(f"{base}/slides/select", json={"index": 0}).json()
    assert selected["selected"] is True
    assert selected["current_slide_index"] == 0

    background = client.patch(f"{base}/slides/current/background", json={"color": "#abcdef"}).json()
    assert background["background_color"] == "#abcdef"
    response = client.patch(f"{base}/slides/current/background", json={"transparency": 500})
    assert response.status_code == 400

    response = client.delete(f"{base}/slides/{slide['id']}")
    assert len(response.json()["deck"]["slides"]) == 1
    assert client.delete(f"{base}/slides/{slide['id']}").status_code == 404


def test_grammar_check_falls_back_and_applies(client, document_id):
    base = f"/api/documents/{document_id}"
    card_id = client.post(f"{base}/cards", json={"source": "text"}).json()["card"]["id"]

    body = client.post(f"{base}/cards/{card_id}/grammar", json={"apply": True}).json()

    assert body["report"]["source"] == "basic"
    assert body["applied"] is True
    slides = client.get(f"{base}/slides").json()
    assert slides["deck"]["slides"][0]["cards"][0]["content"] == "Enter your text here."


def test_download_pptx(client, document_id):
    base = f"/api/documents/{document_id}"
    client.post(f"{base}/cards", json={"source": "element", "element_id": "elem_2"})

    response = client.get(f"{base}/download")

    assert response.status_code == 200
    assert "deck.pptx" in response.headers["content-disposition"]
    prs = Presentation(io.BytesIO(response.content))
    assert len(prs.slides) == 1
    assert prs.slides[0].shapes[0].text_frame.text == "Second block"


def test_image_search_offline(client):
    body = client.get("/api/images/search", params={"q": "mountains"}).json()
    assert len(body["results"]) == 12
    assert body["results"][0]["url"].startswith("https://picsum.photos/800/600")

    assert client.get("/api/images/search", params={"q": ""}).status_code == 400


def test_export_text(client):
    response = client.post("/api/export/text", json={"text": "Hello", "format": "txt"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "Hello" in response.text

    assert client.post("/api/export/text", json={"text": "  ", "format": "txt"}).status_code == 400


def test_export_layout(client):
    response = client.post(
        "/api/export/layout",
        json={"slides": [{"title": "Welcome", "content": "Intro", "layout": "title"}]},
    )
    assert response.status_code == 200
    prs = Presentation(io.BytesIO(response.content))
    assert len(prs.slides[0].shapes) == 2

    assert client.post("/api/export/layout", json={"slides": []}).status_code == 500


def test_websocket_heartbeat(client):
    with client.websocket_connect("/ws/some-document") as websocket:
        websocket.send_text("ping")
        assert websocket.receive_text() == "pong"
