"""
Background task processing for PDF conversion.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

from pdfdeck.config import Settings
from pdfdeck.pipeline import DeckPipeline

from server.db import SessionLocal, DocumentStatus, Document
from server.sessions import SessionRegistry
from server.websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)


def convert_document_task(
    document_id: str,
    settings: Settings,
    sessions: SessionRegistry,
    manager: ConnectionManager,
):
    """
    Background task to convert an uploaded PDF.

    Runs in a worker thread: updates the database, publishes progress over
    the WebSocket and finally loads the result into the document's editor
    session under its lock.
    """
    db = SessionLocal()

    logger.info(f"[Task] Starting conversion for document_id={document_id}")

    try:
        document = db.query(Document).filter(Document.id == document_id).first()
        if not document:
            logger.error(f"[Task] Document {document_id} not found in database")
            return

        document.status = DocumentStatus.PROCESSING
        document.current_phase = "Loading PDF document..."
        document.progress = 0.0
        db.commit()

        def update_progress(progress: float, phase: str):
            document.progress = min(progress, 99.0)
            document.current_phase = phase
            db.commit()
            manager.broadcast_from_thread(
                document_id,
                json.dumps({"status": "processing", "phase": phase, "progress": progress}),
            )

        pipeline = DeckPipeline(settings)
        result = pipeline.convert(Path(document.pdf_path), progress_callback=update_progress)

        output_dir = Path(settings.output_dir) / document_id
        output_dir.mkdir(parents=True, exist_ok=True)
        deck_path = output_dir / "deck.json"
        with open(deck_path, "w", encoding="utf-8") as f:
            json.dump(result.deck.to_dict(), f, indent=2, ensure_ascii=False)

        session = sessions.get_or_create(document_id)
        with session.lock:
            session.controller.load_conversion(result)

        document.status = DocumentStatus.COMPLETED
        document.current_phase = "Completed"
        document.progress = 100.0
        document.total_pages = result.page_count
        document.failed_pages = result.failed_pages
        document.deck_path = str(deck_path)
        document.results = {
            "slides_created": len(result.deck.slides),
            "text_elements": len(result.library.filter("text")),
            "image_elements": len(result.library.filter("image")),
            "completed_at": datetime.utcnow().isoformat(),
        }
        db.commit()

        logger.info(f"[Task] Conversion completed: {len(result.deck.slides)} slides, {len(result.library)} elements")

        manager.broadcast_from_thread(
            document_id,
            json.dumps({
                "status": "completed",
                "phase": "Completed",
                "progress": 100.0,
                "results": document.results,
                "failed_pages": result.failed_pages,
            }),
        )

    except Exception as e:
        error_msg = str(e)
        logger.exception(f"[Task] Conversion failed: {error_msg}")

        db.rollback()
        document = db.query(Document).filter(Document.id == document_id).first()
        if document:
            document.status = DocumentStatus.FAILED
            document.current_phase = "Failed"
            document.error_message = error_msg
            db.commit()

        manager.broadcast_from_thread(
            document_id,
            json.dumps({"status": "failed", "phase": "Failed", "error": error_msg}),
        )

    finally:
        db.close()
