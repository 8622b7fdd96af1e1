"""WebSocket connection registry.

Each connected user joins the room ``user-<id>``; a user may hold several
connections (tabs, devices). Messages pushed to a room go to every socket
in it. Rooms live in process memory, so pushes reach only clients connected
to this worker.
"""

from collections import defaultdict

import structlog
from fastapi import WebSocket
from starlette.websockets import WebSocketState

logger = structlog.get_logger(__name__)


def room_for(user_id) -> str:
    return f"user-{user_id}"


class ConnectionManager:
    def __init__(self) -> None:
        self.rooms: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id, websocket: WebSocket) -> None:
        await websocket.accept()
        self.rooms[room_for(user_id)].add(websocket)
        logger.info("WebSocket connected", user_id=str(user_id), connections=len(self.rooms[room_for(user_id)]))

    def disconnect(self, user_id, websocket: WebSocket) -> bool:
        """Leave the room. Returns True when this was the user's last connection."""
        room = room_for(user_id)
        self.rooms[room].discard(websocket)
        if self.rooms[room]:
            return False
        del self.rooms[room]
        logger.info("WebSocket disconnected", user_id=str(user_id))
        return True

    def is_connected(self, user_id) -> bool:
        return bool(self.rooms.get(room_for(user_id)))

    async def send_to_user(self, user_id, payload: dict) -> int:
        """Push a JSON payload to every connection of a user. Returns how many received it."""
        delivered = 0
        for websocket in list(self.rooms.get(room_for(user_id), ())):
            if websocket.client_state != WebSocketState.CONNECTED:
                continue
            await websocket.send_json(payload)
            delivered += 1
        return delivered


manager = ConnectionManager()
