# app/transport/dispatcher.py
from __future__ import annotations

from typing import Any, Dict, List, Tuple, Optional

from pydantic import ValidationError

from app.transport.protocols import (
    parse_incoming,
    OutError,
    OutgoingEvent,
    InCreateRoom,
    InHeartbeat,
    InSnapshot,
    InSubmitAction,
)
from app.domain.lifecycle.handlers import (
    handle_create_room,
    handle_heartbeat,
    handle_snapshot,
)
from app.domain.banpick.handlers import handle_submit_action

DispatchResult = Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]
# (to_sender_events, to_room_events), each event is JSON dict


async def dispatch_message(
    *,
    app,
    room_code: str,
    team_code: Optional[str],
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the correct domain handler
    - Returns (to_sender, to_room) events as JSON dicts

    NOTE: This file contains NO Redis key usage and NO ban/pick rules.
    """
    if not isinstance(raw, dict):
        err = OutError(code="BAD_MESSAGE", message="Message must be a JSON object").model_dump()
        return [err], []

    try:
        msg = parse_incoming(raw)
    except (ValidationError, ValueError) as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return [err], []

    if isinstance(msg, InCreateRoom):
        to_sender, to_room = await handle_create_room(app=app, room_code=room_code, team_code=team_code, msg=msg)
        return _dump(to_sender), _dump(to_room)

    if isinstance(msg, InSnapshot):
        to_sender, to_room = await handle_snapshot(app=app, room_code=room_code, team_code=team_code, msg=msg)
        return _dump(to_sender), _dump(to_room)

    if isinstance(msg, InHeartbeat):
        to_sender, to_room = await handle_heartbeat(app=app, room_code=room_code, team_code=team_code, msg=msg)
        return _dump(to_sender), _dump(to_room)

    if isinstance(msg, InSubmitAction):
        to_sender, to_room = await handle_submit_action(app=app, room_code=room_code, team_code=team_code, msg=msg)
        return _dump(to_sender), _dump(to_room)

    err = OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}").model_dump()
    return [err], []


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump() for e in events]
