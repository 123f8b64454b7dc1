"""
WebSocket connection manager for real-time conversion progress.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manage WebSocket connections for document updates."""

    def __init__(self):
        # document_id -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    async def connect(self, document_id: str, websocket: WebSocket):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.loop = asyncio.get_running_loop()

        if document_id not in self.active_connections:
            self.active_connections[document_id] = []

        self.active_connections[document_id].append(websocket)

    def disconnect(self, document_id: str, websocket: WebSocket):
        """Remove a WebSocket connection."""
        if document_id in self.active_connections:
            if websocket in self.active_connections[document_id]:
                self.active_connections[document_id].remove(websocket)

            # Clean up empty lists
            if not self.active_connections[document_id]:
                del self.active_connections[document_id]

    async def broadcast(self, document_id: str, message: str):
        """Broadcast a message to all connections for a document."""
        if document_id not in self.active_connections:
            return

        dead_connections = []

        for websocket in list(self.active_connections[document_id]):
            try:
                await websocket.send_text(message)
            except Exception as e:
                logger.debug(f"[WS] Dropping connection for {document_id}: {e}")
                dead_connections.append(websocket)

        for websocket in dead_connections:
            self.disconnect(document_id, websocket)

    def broadcast_from_thread(self, document_id: str, message: str):
        """Schedule a broadcast on the server loop from a worker thread."""
        if self.loop is None or self.loop.is_closed() or document_id not in self.active_connections:
            return
        asyncio.run_coroutine_threadsafe(self.broadcast(document_id, message), self.loop)
