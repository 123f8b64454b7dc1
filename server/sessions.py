"""
Per-document editor sessions.

Each converted document gets one EditorController; the lock serializes
every mutation of it coming from request handlers and background tasks.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from pdfdeck.editor import CanvasSize, EditorController


@dataclass
class EditorSession:
    controller: EditorController
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """document_id -> EditorSession."""

    def __init__(self, canvas: CanvasSize = CanvasSize(960, 540)):
        self.canvas = canvas
        self._sessions: Dict[str, EditorSession] = {}
        self._lock = threading.Lock()

    def get(self, document_id: str) -> Optional[EditorSession]:
        with self._lock:
            return self._sessions.get(document_id)

    def get_or_create(self, document_id: str) -> EditorSession:
        with self._lock:
            session = self._sessions.get(document_id)
            if session is None:
                session = EditorSession(EditorController(canvas=self.canvas))
                self._sessions[document_id] = session
            return session
