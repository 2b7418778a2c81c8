"""Agent Generator — UI event signal.

A single named broadcast with no payload (`toggle-settings`) asks any open UI
to show the API key form. Events are fanned out to connected WebSocket clients
and to in-process listeners; nothing is persisted.
"""

import logging
from typing import Awaitable, Callable, Set

from fastapi import WebSocket

logger = logging.getLogger("agent-generator.ws")

TOGGLE_SETTINGS = "toggle-settings"

Listener = Callable[[str], Awaitable[None]]


class EventBus:
    """Tracks WebSocket clients and in-process listeners for UI events."""

    def __init__(self):
        self._clients: Set[WebSocket] = set()
        self._listeners: list[Listener] = []

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def connect(self, ws: WebSocket):
        await ws.accept()
        self._clients.add(ws)
        logger.info("Event client connected (%s open)", len(self._clients))

    def disconnect(self, ws: WebSocket):
        self._clients.discard(ws)
        logger.info("Event client disconnected")

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    async def broadcast(self, event_type: str):
        """Send an event to every connected client and listener."""
        message = {"type": event_type}
        dead = []
        for ws in list(self._clients):
            try:
                await ws.send_json(message)
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.disconnect(ws)
        for listener in list(self._listeners):
            await listener(event_type)

    async def send_personal(self, ws: WebSocket, event_type: str):
        try:
            await ws.send_json({"type": event_type})
        except Exception:
            self.disconnect(ws)


bus = EventBus()
