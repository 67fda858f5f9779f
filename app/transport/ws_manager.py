from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import WebSocket

from app.domain.common.types import Team

logger = logging.getLogger(__name__)


@dataclass
class Conn:
    conn_id: str
    ws: WebSocket
    team: Optional[Team] = None  # None for spectators


class WSManager:
    """
    In-memory connection registry.
    - room_code -> conn_id -> websocket
    Transport-only: no Redis, no domain rules.
    """
    def __init__(self) -> None:
        self._rooms: Dict[str, Dict[str, Conn]] = {}
        self._lock = asyncio.Lock()

    async def add(self, room_code: str, conn_id: str, ws: WebSocket, team: Optional[Team] = None) -> None:
        async with self._lock:
            self._rooms.setdefault(room_code, {})[conn_id] = Conn(conn_id=conn_id, ws=ws, team=team)

    async def remove(self, room_code: str, conn_id: str) -> None:
        async with self._lock:
            room = self._rooms.get(room_code)
            if not room:
                return
            room.pop(conn_id, None)
            if not room:
                self._rooms.pop(room_code, None)

    async def broadcast(self, room_code: str, event: dict) -> None:
        # copy conns under lock, send outside lock
        async with self._lock:
            room = self._rooms.get(room_code, {})
            conns = list(room.values())

        for c in conns:
            try:
                await c.ws.send_json(event)
            except Exception:
                # dead socket; ws.py removes it on disconnect
                logger.debug("send to %s/%s failed", room_code, c.conn_id)

    async def room_counts(self) -> Dict[str, int]:
        async with self._lock:
            return {code: len(conns) for code, conns in self._rooms.items()}
