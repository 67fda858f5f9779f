from __future__ import annotations

from fastapi import APIRouter, Request

from app.domain.banpick.derived import is_finished

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/rooms")
async def list_rooms(request: Request):
    """
    List all rooms (debug/admin). Team link codes are not included.
    """
    repo = request.app.state.repo
    wsman = request.app.state.wsman

    connected = await wsman.room_counts()
    rooms = []
    for code in await repo.list_room_codes():
        room = await repo.get_room(code)
        if room is None:
            continue
        rooms.append(
            {
                "room_code": code,
                "mode": room.mode,
                "team_a": room.team_a,
                "team_b": room.team_b,
                "step": room.progress.current_step,
                "steps": len(room.steps),
                "finished": is_finished(room),
                "decider": room.progress.decider,
                "version": room.version,
                "connected": connected.get(code, 0),
                "created_at": room.created_at,
                "updated_at": room.updated_at,
            }
        )

    return {"rooms": rooms}
