"""Websocket fan-out of world events to connected viewers."""

from typing import Any, Set

import structlog
from fastapi import WebSocket

logger = structlog.get_logger()


class BroadcastHub:
    """Keeps the open viewer sockets and pushes JSON events to all of them."""

    def __init__(self):
        self.connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.add(websocket)
        logger.info("Socket connected", connections=len(self.connections))

    def disconnect(self, websocket: WebSocket) -> None:
        self.connections.discard(websocket)
        logger.info("Socket disconnected", connections=len(self.connections))

    async def broadcast(self, event: str, data: Any) -> int:
        """
        Send ``{"event": event, "data": data}`` to every viewer.

        Sockets that fail to receive are dropped.

        Returns:
            Number of viewers the message reached
        """
        message = {"event": event, "data": data}
        delivered = 0
        for websocket in list(self.connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping dead socket", error=str(e))
                self.disconnect(websocket)
        return delivered


hub = BroadcastHub()
