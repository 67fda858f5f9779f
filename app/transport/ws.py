from __future__ import annotations

import uuid
import ipaddress
import logging
from typing import Optional
from urllib.parse import urlparse

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.settings import get_settings
from app.domain.banpick.errors import BanPickError
from app.domain.banpick.service import load_room, resolve_team
from app.domain.lifecycle.handlers import build_snapshot
from app.transport.dispatcher import dispatch_message
from app.transport.protocols import OutError
from app.transport.room_bus import publish_events

router = APIRouter()
logger = logging.getLogger(__name__)

WS_CLOSE_FORBIDDEN = 4403
WS_CLOSE_NOT_FOUND = 4404


def _is_private_ip(host: str) -> bool:
    """Return True if host is a private IP (192.168.x.x, 10.x.x.x, 172.16-31.x.x)."""
    try:
        ip = ipaddress.ip_address(host)
        return ip.is_private
    except ValueError:
        return False


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = get_settings()
    allowed = set(settings.allowed_origins())

    origin = websocket.headers.get("origin")
    if origin is not None:
        if origin in allowed:
            return True
        if settings.WS_ALLOW_LAN_ORIGINS:
            o = urlparse(origin)
            host = o.hostname or ""
            port = o.port
            if _is_private_ip(host) and port == 3000:
                return True
            await websocket.close(code=1008)
            return False
        await websocket.close(code=1008)
        return False
    return True


@router.websocket("/ws-create")
async def ws_create(websocket: WebSocket):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    try:
        raw = await websocket.receive_json()
        if not isinstance(raw, dict) or raw.get("type") != "create_room":
            err = OutError(code="ONLY_CREATE_ROOM", message="ws-create only accepts create_room").model_dump()
            await websocket.send_json(err)
            return

        to_sender, _ = await dispatch_message(
            app=websocket.app,
            room_code="CREATE",
            team_code=None,
            raw=raw,
        )
        for e in to_sender:
            await websocket.send_json(e)
    except WebSocketDisconnect:
        return
    finally:
        await websocket.close()


async def _serve_room(websocket: WebSocket, room_code: str, team_code: Optional[str]) -> None:
    """
    Shared loop for spectator and team sockets: validate the link, push the
    current snapshot, then answer messages until the client goes away.
    """
    repo = websocket.app.state.repo
    wsman = websocket.app.state.wsman

    try:
        room = await load_room(repo, room_code)
        team = resolve_team(room, team_code) if team_code else None
        snapshot = build_snapshot(room, team_code)
    except BanPickError as e:
        await websocket.send_json(OutError(code=e.code, message=e.message).model_dump())
        close_code = WS_CLOSE_NOT_FOUND if e.code == "ROOM_NOT_FOUND" else WS_CLOSE_FORBIDDEN
        await websocket.close(code=close_code)
        return

    conn_id = uuid.uuid4().hex[:10]
    await wsman.add(room_code, conn_id, websocket, team=team)
    await websocket.send_json(snapshot.model_dump())
    logger.debug("room %s: %s connected (team=%s)", room_code, conn_id, team)

    try:
        while True:
            raw = await websocket.receive_json()

            to_sender, to_room = await dispatch_message(
                app=websocket.app,
                room_code=room_code,
                team_code=team_code,
                raw=raw,
            )

            # unicast
            for e in to_sender:
                await websocket.send_json(e)

            # every worker (this one included) relays these to its sockets
            await publish_events(repo, room_code, to_room)

    except WebSocketDisconnect:
        logger.debug("room %s: %s disconnected", room_code, conn_id)

    finally:
        await wsman.remove(room_code, conn_id)


@router.websocket("/ws/{room_code}")
async def ws_room(websocket: WebSocket, room_code: str):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()
    await _serve_room(websocket, room_code, None)


@router.websocket("/ws/{room_code}/team/{team_code}")
async def ws_team(websocket: WebSocket, room_code: str, team_code: str):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()
    await _serve_room(websocket, room_code, team_code)
