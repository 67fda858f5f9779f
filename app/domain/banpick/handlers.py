# app/domain/banpick/handlers.py
from __future__ import annotations

from typing import List, Optional

from app.domain.banpick.errors import BanPickError, InvalidTeamLink, RoomNotFound
from app.domain.banpick.service import load_room, submit_action
from app.domain.banpick.views import spectator_view
from app.domain.lifecycle.handlers import Result, build_snapshot
from app.settings import get_settings
from app.transport.inflight import ActionInFlight
from app.transport.protocols import (
    InSubmitAction,
    OutActionAccepted,
    OutDeciderResolved,
    OutError,
    OutgoingEvent,
    OutRoomUpdated,
)


async def _resync(repo, room_code: str, team_code: Optional[str]) -> List[OutgoingEvent]:
    try:
        room = await load_room(repo, room_code)
        return [build_snapshot(room, team_code)]
    except BanPickError:
        return []


async def handle_submit_action(*, app, room_code: str, team_code: Optional[str], msg: InSubmitAction) -> Result:
    """
    Ban or pick a map for the team behind `team_code`.

    On failure the sender gets the error plus a fresh snapshot so a stale view
    is corrected before the next attempt. Nothing is broadcast.
    """
    if not team_code:
        return [OutError(code="READ_ONLY", message="Spectators cannot submit actions")], []

    repo = app.state.repo
    inflight = app.state.inflight

    try:
        async with inflight.hold((room_code, team_code)):
            room, team, step = await submit_action(repo, room_code=room_code, team_code=team_code, map_name=msg.map)
    except ActionInFlight:
        return [OutError(code="ACTION_IN_FLIGHT", message="Previous action is still being submitted")], []
    except (RoomNotFound, InvalidTeamLink) as e:
        return [OutError(code=e.code, message=e.message)], []
    except BanPickError as e:
        return [OutError(code=e.code, message=e.message), *await _resync(repo, room_code, team_code)], []

    progress = room.progress
    public = spectator_view(room, get_settings().MAP_IMAGE_BASE)
    last_action = {"action": step.action, "team": team, "map": msg.map, "step": progress.current_step}

    to_room: List[OutgoingEvent] = [OutRoomUpdated(room=public, last_action=last_action)]
    if progress.decider:
        to_room.append(OutDeciderResolved(map=progress.decider))

    to_sender: List[OutgoingEvent] = [
        OutActionAccepted(action=step.action, map=msg.map, team=team, step=progress.current_step),
        build_snapshot(room, team_code),
    ]
    return to_sender, to_room
