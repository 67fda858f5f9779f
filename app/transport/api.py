from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.domain.banpick.errors import BanPickError
from app.domain.banpick.service import create_room, load_room, resolve_team, submit_action
from app.domain.banpick.views import creation_links, spectator_view, team_view
from app.domain.maps import map_image_url
from app.settings import get_settings
from app.transport.inflight import ActionInFlight
from app.transport.protocols import InCreateRoom, OutDeciderResolved, OutRoomUpdated
from app.transport.room_bus import publish_events

router = APIRouter(prefix="/api", tags=["banpick"])


class ActionBody(BaseModel):
    map: str = Field(min_length=1, max_length=64)


def _http_error(e: BanPickError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail={"code": e.code, "message": e.message})


@router.get("/maps")
async def list_maps():
    settings = get_settings()
    return {
        "maps": [
            {"name": m, "image": map_image_url(m, settings.MAP_IMAGE_BASE)}
            for m in settings.map_pool()
        ]
    }


@router.post("/rooms", status_code=201)
async def post_room(body: InCreateRoom, request: Request):
    """
    Create a room and hand back the spectator link and both team links.
    """
    repo = request.app.state.repo
    settings = get_settings()
    try:
        room = await create_room(repo, team_a=body.team_a, team_b=body.team_b, mode=body.mode, settings=settings)
    except BanPickError as e:
        raise _http_error(e)

    return {
        "room_code": room.code,
        "mode": room.mode,
        "links": creation_links(room.code, room.team_a_code, room.team_b_code, settings.PUBLIC_BASE_URL),
    }


@router.get("/rooms/{room_code}")
async def get_room(room_code: str, request: Request):
    repo = request.app.state.repo
    try:
        room = await load_room(repo, room_code)
    except BanPickError as e:
        raise _http_error(e)
    return spectator_view(room, get_settings().MAP_IMAGE_BASE)


@router.get("/rooms/{room_code}/team/{team_code}")
async def get_team_room(room_code: str, team_code: str, request: Request):
    repo = request.app.state.repo
    try:
        room = await load_room(repo, room_code)
        team = resolve_team(room, team_code)
    except BanPickError as e:
        raise _http_error(e)
    return team_view(room, team, get_settings().MAP_IMAGE_BASE)


@router.post("/rooms/{room_code}/team/{team_code}/actions")
async def post_action(room_code: str, team_code: str, body: ActionBody, request: Request):
    repo = request.app.state.repo
    inflight = request.app.state.inflight
    image_base = get_settings().MAP_IMAGE_BASE

    try:
        async with inflight.hold((room_code, team_code)):
            room, team, step = await submit_action(repo, room_code=room_code, team_code=team_code, map_name=body.map)
    except ActionInFlight:
        raise HTTPException(
            status_code=409,
            detail={"code": "ACTION_IN_FLIGHT", "message": "Previous action is still being submitted"},
        )
    except BanPickError as e:
        raise _http_error(e)

    progress = room.progress
    events = [
        OutRoomUpdated(
            room=spectator_view(room, image_base),
            last_action={"action": step.action, "team": team, "map": body.map, "step": progress.current_step},
        ).model_dump()
    ]
    if progress.decider:
        events.append(OutDeciderResolved(map=progress.decider).model_dump())
    await publish_events(repo, room_code, events)

    return team_view(room, team, image_base)
