"""
Main FastAPI application.
"""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, UploadFile, HTTPException, WebSocket, WebSocketDisconnect, BackgroundTasks, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from pdfdeck.config import Settings
from pdfdeck.editor import CanvasSize
from pdfdeck.errors import ConversionError, ExportError, InvalidInputError
from pdfdeck.extractors import PyMuPDFBackend
from pdfdeck.logging_config import setup_logging
from pdfdeck.models import ImageSearchResult, TextCard
from pdfdeck.pipeline import validate_pdf_source
from pdfdeck.renderers import LayoutRenderer, PPTXRenderer, TextExporter
from pdfdeck.services import GrammarChecker, ImageSearchClient

from server.db import init_db, get_db, Document, DocumentStatus
from server.models import (
    AddCardRequest,
    BackgroundRequest,
    ContentRequest,
    DocumentResponse,
    ElementsResponse,
    GrammarRequest,
    LayoutExportRequest,
    MoveRequest,
    ResizeRequest,
    SelectSlideRequest,
    StyleRequest,
    TextExportRequest,
)
from server.sessions import EditorSession, SessionRegistry
from server.tasks import convert_document_task
from server.websocket_manager import ConnectionManager

load_dotenv()

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    init_db(settings.database_url)

    app.state.settings = settings
    app.state.upload_dir = Path(settings.upload_dir)
    app.state.output_dir = Path(settings.output_dir)
    app.state.upload_dir.mkdir(parents=True, exist_ok=True)
    app.state.output_dir.mkdir(parents=True, exist_ok=True)

    app.state.sessions = SessionRegistry(CanvasSize(settings.canvas_width, settings.canvas_height))
    app.state.renderer = PPTXRenderer(
        canvas_width=settings.canvas_width,
        canvas_height=settings.canvas_height,
        dpi=settings.dpi,
        image_timeout=settings.http_timeout,
    )
    app.state.layout_renderer = LayoutRenderer(image_timeout=settings.http_timeout)
    app.state.exporter = TextExporter(settings.brand_name)
    app.state.grammar = GrammarChecker(
        api_url=settings.grammar_api_url,
        language=settings.grammar_language,
        timeout=settings.http_timeout,
    )
    app.state.image_search = ImageSearchClient(
        access_key=settings.unsplash_access_key,
        api_url=settings.image_search_url,
        timeout=settings.http_timeout,
    )
    yield


app = FastAPI(
    title="PDFDeck API",
    description="Convert PDFs into editable slide decks and export PPTX",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# WebSocket connection manager
manager = ConnectionManager()


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(ExportError)
async def export_error_handler(request: Request, exc: ExportError):
    return JSONResponse(status_code=500, content={"detail": f"Error generating file: {exc}"})


# --- Helpers ---

def _get_document(db: Session, document_id: str) -> Document:
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


def _get_session(request: Request, document_id: str) -> EditorSession:
    session = request.app.state.sessions.get(document_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Document has not been converted")
    return session


def _card_or_404(card):
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return card.model_dump(mode="json")


def _deck_state(session: EditorSession) -> dict:
    controller = session.controller
    return {
        "deck": controller.deck.to_dict(),
        "current_slide_index": controller.state.current_slide_index,
        "selected_card_id": controller.state.selected_card_id,
    }


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        document_id=document.id,
        status=document.status.value,
        filename=document.filename,
        total_pages=document.total_pages,
        created_at=document.created_at.isoformat(),
        updated_at=document.updated_at.isoformat(),
        progress=document.progress,
        current_phase=document.current_phase,
        error_message=document.error_message,
        failed_pages=document.failed_pages or [],
        results=document.results,
    )


# --- API Endpoints ---

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "PDFDeck API is running"}


@app.post("/api/upload", response_model=dict)
async def upload_pdf(
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """
    Upload a PDF file and register a new document.

    Returns document_id and file metadata.
    """
    content = await file.read()
    validate_pdf_source(content, file.filename, file.content_type)

    document_id = str(uuid.uuid4())
    upload_path = request.app.state.upload_dir / f"{document_id}.pdf"
    with open(upload_path, "wb") as f:
        f.write(content)

    try:
        with PyMuPDFBackend(content) as backend:
            page_count = backend.page_count
    except ConversionError:
        page_count = 0

    document = Document(
        id=document_id,
        filename=file.filename,
        status=DocumentStatus.UPLOADED,
        total_pages=page_count,
        pdf_path=str(upload_path),
    )
    db.add(document)
    db.commit()

    return {
        "document_id": document_id,
        "filename": file.filename,
        "total_pages": page_count,
        "size_bytes": len(content),
    }


@app.post("/api/documents/{document_id}/convert")
async def start_conversion(
    document_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Start converting an uploaded PDF.

    Kicks off background task and returns immediately.
    """
    document = _get_document(db, document_id)

    if document.status in (DocumentStatus.QUEUED, DocumentStatus.PROCESSING):
        raise HTTPException(status_code=400, detail=f"Document is already {document.status.value}")

    document.status = DocumentStatus.QUEUED
    document.progress = 0.0
    document.error_message = None
    db.commit()

    background_tasks.add_task(
        convert_document_task,
        document_id=document_id,
        settings=request.app.state.settings,
        sessions=request.app.state.sessions,
        manager=manager,
    )

    return {"document_id": document_id, "status": "queued"}


@app.get("/api/documents/{document_id}", response_model=DocumentResponse)
async def get_document_status(document_id: str, db: Session = Depends(get_db)):
    """Get document status, progress and failed pages."""
    return _to_response(_get_document(db, document_id))


@app.get("/api/documents/{document_id}/elements", response_model=ElementsResponse)
def get_elements(document_id: str, request: Request, kind: str = "all"):
    """Element library of a converted document, optionally filtered by kind."""
    if kind not in ("all", "text", "image"):
        raise HTTPException(status_code=400, detail="kind must be one of: all, text, image")
    session = _get_session(request, document_id)
    with session.lock:
        elements = [element.model_dump(mode="json") for element in session.controller.library.filter(kind)]
    return ElementsResponse(document_id=document_id, kind=kind, elements=elements)


# --- Slides ---

@app.get("/api/documents/{document_id}/slides")
def get_slides(document_id: str, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _deck_state(session)


@app.post("/api/documents/{document_id}/slides")
def add_slide(document_id: str, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        slide = session.controller.add_slide()
        return slide.model_dump(mode="json")


@app.delete("/api/documents/{document_id}/slides/{slide_id}")
def delete_slide(document_id: str, slide_id: int, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        if not session.controller.delete_slide(slide_id):
            raise HTTPException(status_code=404, detail="Slide not found")
        return _deck_state(session)


@app.post("/api/documents/{document_id}/slides/select")
def select_slide(document_id: str, body: SelectSlideRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        selected = session.controller.select_slide(body.index)
        state = _deck_state(session)
    state["selected"] = selected
    return state


@app.patch("/api/documents/{document_id}/slides/current/background")
def set_background(document_id: str, body: BackgroundRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        slide = session.controller.set_background(body.color, body.image, body.transparency)
        if slide is None:
            raise HTTPException(status_code=404, detail="No slide selected")
        return slide.model_dump(mode="json")


# --- Cards ---

@app.post("/api/documents/{document_id}/cards")
def add_card(document_id: str, body: AddCardRequest, request: Request):
    """Add a card to the current slide; an unknown element id adds nothing."""
    session = _get_session(request, document_id)
    controller = session.controller

    if body.source == "element" and not body.element_id:
        raise InvalidInputError("element_id is required")
    if body.source == "image" and not body.image_url:
        raise InvalidInputError("image_url is required")

    with session.lock:
        if body.source == "element":
            card = controller.add_element_to_slide(body.element_id)
        elif body.source == "text":
            card = controller.add_text_card()
        else:
            image = ImageSearchResult(
                id=body.image_url,
                url=body.image_url,
                thumb_url=body.image_url,
                alt=body.image_alt or "Image",
            )
            card = controller.add_image_to_slide(image)
        return {"card": card.model_dump(mode="json") if card else None}


@app.post("/api/documents/{document_id}/cards/{card_id}/move")
def move_card(document_id: str, card_id: int, body: MoveRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.move_card(card_id, body.x, body.y))


@app.post("/api/documents/{document_id}/cards/{card_id}/resize")
def resize_card(document_id: str, card_id: int, body: ResizeRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.resize_card(card_id, body.width, body.height))


@app.patch("/api/documents/{document_id}/cards/{card_id}/style")
def update_card_style(document_id: str, card_id: int, body: StyleRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.update_card_style(card_id, body.field, body.value))


@app.patch("/api/documents/{document_id}/cards/{card_id}/content")
def update_card_content(document_id: str, card_id: int, body: ContentRequest, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.update_card_content(card_id, body.content))


@app.post("/api/documents/{document_id}/cards/{card_id}/front")
def bring_to_front(document_id: str, card_id: int, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.bring_to_front(card_id))


@app.post("/api/documents/{document_id}/cards/{card_id}/back")
def send_to_back(document_id: str, card_id: int, request: Request):
    session = _get_session(request, document_id)
    with session.lock:
        return _card_or_404(session.controller.send_to_back(card_id))


@app.delete("/api/documents/{document_id}/cards/{card_id}")
def delete_card(document_id: str, card_id: int, request: Request):
    """Delete a card; deleting a card that does not exist is not an error."""
    session = _get_session(request, document_id)
    with session.lock:
        deleted = session.controller.delete_card(card_id)
    return {"deleted": deleted}


@app.post("/api/documents/{document_id}/cards/{card_id}/grammar")
def check_card_grammar(document_id: str, card_id: int, request: Request, body: Optional[GrammarRequest] = None):
    """
    Grammar-check a text card.

    The session lock is released while LanguageTool is queried; the first
    suggestion is applied only if the card survived unchanged.
    """
    body = body or GrammarRequest()
    session = _get_session(request, document_id)
    checker: GrammarChecker = request.app.state.grammar

    with session.lock:
        target = session.controller.capture_card(card_id)
        card = session.controller.resolve_target(target) if target else None
        if card is None:
            raise HTTPException(status_code=404, detail="Card not found")
        if not isinstance(card, TextCard):
            raise InvalidInputError("Only text cards can be grammar-checked")
        text = card.content

    report = checker.check(text)

    applied = False
    if body.apply:
        corrected = checker.apply_first_suggestion(text, report)
        if corrected is not None:
            with session.lock:
                applied = session.controller.apply_text(target, text, corrected)

    return {"report": report.model_dump(mode="json"), "ok": report.ok, "applied": applied}


# --- Export ---

@app.get("/api/documents/{document_id}/download")
def download_pptx(document_id: str, request: Request, db: Session = Depends(get_db)):
    """Render the edited deck to PPTX."""
    document = _get_document(db, document_id)
    session = _get_session(request, document_id)
    with session.lock:
        deck = session.controller.deck.model_copy(deep=True)

    data = request.app.state.renderer.render_bytes(deck)
    return Response(
        content=data,
        media_type=PPTX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{Path(document.filename).stem}.pptx"'},
    )


@app.get("/api/images/search")
def search_images(request: Request, q: str = ""):
    client: ImageSearchClient = request.app.state.image_search
    results = client.search(q)
    return {"query": q, "results": [result.model_dump() for result in results]}


@app.post("/api/export/text")
def export_text(body: TextExportRequest, request: Request):
    document = request.app.state.exporter.export(body.text, body.format)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@app.post("/api/export/layout")
def export_layout(body: LayoutExportRequest, request: Request):
    data = request.app.state.layout_renderer.render_bytes(body)
    return Response(
        content=data,
        media_type=PPTX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="presentation.pptx"'},
    )


# --- WebSocket for real-time progress ---

@app.websocket("/ws/{document_id}")
async def websocket_endpoint(websocket: WebSocket, document_id: str):
    """
    WebSocket endpoint for real-time conversion progress updates.
    """
    await manager.connect(document_id, websocket)

    try:
        while True:
            # Keep connection alive and receive any client messages
            data = await websocket.receive_text()

            # Echo back for heartbeat
            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        manager.disconnect(document_id, websocket)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
