# app/domain/banpick/views.py
from __future__ import annotations

from typing import Any, Dict, List

from app.domain.banpick.derived import (
    current_map,
    current_step,
    is_acting_teams_turn,
    is_finished,
    map_status,
    remaining_maps,
)
from app.domain.common.types import Team, other_team
from app.domain.maps import DEFAULT_MAP_IMAGE_BASE, map_image_url
from app.store.models import RoomStore


def _tiles(room: RoomStore, image_base: str) -> List[Dict[str, Any]]:
    tiles = []
    for name in room.map_pool:
        status = map_status(room, name)
        tiles.append(
            {
                "name": name,
                "image": map_image_url(name, image_base),
                "status": status.kind,
                "by": status.by,
            }
        )
    return tiles


def spectator_view(room: RoomStore, image_base: str = DEFAULT_MAP_IMAGE_BASE) -> Dict[str, Any]:
    """
    Public room document. Built from the stored snapshot only and never
    carries the team link codes.
    """
    step = current_step(room)
    highlight = current_map(room)
    return {
        "code": room.code,
        "team_a": room.team_a,
        "team_b": room.team_b,
        "mode": room.mode,
        "map_pool": list(room.map_pool),
        "steps": [s.model_dump() for s in room.steps],
        "progress": room.progress.model_dump(),
        "version": room.version,
        "current_step": step.model_dump() if step else None,
        "finished": is_finished(room),
        "current_map": highlight,
        "current_map_image": map_image_url(highlight, image_base),
        "remaining": remaining_maps(room),
        "maps": _tiles(room, image_base),
    }


def team_view(room: RoomStore, team: Team, image_base: str = DEFAULT_MAP_IMAGE_BASE) -> Dict[str, Any]:
    view = spectator_view(room, image_base)
    my_turn = is_acting_teams_turn(room, team)
    step = current_step(room)
    left = set(view["remaining"])

    view["team"] = team
    view["team_name"] = room.team_name(team)
    view["opponent"] = other_team(team)
    view["is_my_turn"] = my_turn
    view["pending_action"] = step.action if (my_turn and step is not None) else None
    for tile in view["maps"]:
        tile["can_act"] = my_turn and tile["name"] in left
    return view


def creation_links(code: str, team_a_code: str, team_b_code: str, base_url: str = "") -> Dict[str, str]:
    base = base_url.rstrip("/")
    return {
        "spectator": f"{base}/{code}",
        "team_a": f"{base}/{code}/team/{team_a_code}",
        "team_b": f"{base}/{code}/team/{team_b_code}",
    }
