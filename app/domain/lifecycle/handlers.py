# app/domain/lifecycle/handlers.py
from __future__ import annotations

from typing import List, Tuple, Optional

from app.domain.banpick.errors import BanPickError, StoreWriteFailure
from app.domain.banpick.service import create_room, load_room, resolve_team
from app.domain.banpick.views import creation_links, spectator_view, team_view
from app.settings import get_settings
from app.store.models import RoomStore
from app.transport.protocols import (
    OutgoingEvent,
    OutError,
    OutRoomCreated,
    OutRoomSnapshot,
    InCreateRoom,
    InHeartbeat,
    InSnapshot,
)

# Returns: (to_sender, to_room)
Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


def build_snapshot(room: RoomStore, team_code: Optional[str] = None) -> OutRoomSnapshot:
    """
    Team links get the team view, everyone else the spectator view.
    Raises InvalidTeamLink for a team code that matches neither team.
    """
    image_base = get_settings().MAP_IMAGE_BASE
    if team_code:
        team = resolve_team(room, team_code)
        return OutRoomSnapshot(room=team_view(room, team, image_base))
    return OutRoomSnapshot(room=spectator_view(room, image_base))


async def handle_create_room(*, app, room_code: str, team_code: Optional[str], msg: InCreateRoom) -> Result:
    """
    create_room ignores the URL room code and always allocates a fresh one.
    """
    repo = app.state.repo
    settings = get_settings()

    try:
        room = await create_room(repo, team_a=msg.team_a, team_b=msg.team_b, mode=msg.mode, settings=settings)
    except BanPickError as e:
        return [OutError(code=e.code, message=e.message)], []

    links = creation_links(room.code, room.team_a_code, room.team_b_code, settings.PUBLIC_BASE_URL)
    return [OutRoomCreated(room_code=room.code, mode=room.mode, links=links)], []


async def handle_snapshot(*, app, room_code: str, team_code: Optional[str], msg: InSnapshot) -> Result:
    repo = app.state.repo
    try:
        room = await load_room(repo, room_code)
        snap = build_snapshot(room, team_code)
    except BanPickError as e:
        return [OutError(code=e.code, message=e.message)], []
    return [snap], []


async def handle_heartbeat(*, app, room_code: str, team_code: Optional[str], msg: InHeartbeat) -> Result:
    """
    Heartbeat only proves the room is still there. Keep it quiet.
    """
    repo = app.state.repo
    try:
        exists = await repo.room_exists(room_code)
    except StoreWriteFailure as e:
        return [OutError(code=e.code, message=e.message)], []
    if not exists:
        return [OutError(code="ROOM_NOT_FOUND", message=f"Room {room_code} not found")], []
    return [], []
