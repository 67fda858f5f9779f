# app/domain/banpick/derived.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.domain.banpick.machine import consumed_maps
from app.domain.common.types import MapState, Team, TEAMS
from app.store.models import RoomStore, Step

# Read-only helpers over a room snapshot. Views call them on every render.


@dataclass(frozen=True)
class MapStatus:
    kind: MapState = "none"
    by: Optional[Team] = None


def current_step(room: RoomStore) -> Optional[Step]:
    idx = room.progress.current_step
    if 0 <= idx < len(room.steps):
        return room.steps[idx]
    return None


def is_finished(room: RoomStore) -> bool:
    return room.progress.current_step >= len(room.steps)


def remaining_maps(room: RoomStore) -> list[str]:
    taken = consumed_maps(room.progress)
    return [m for m in room.map_pool if m not in taken]


def current_map(room: RoomStore) -> Optional[str]:
    """
    Map to highlight: the decider once the sequence is over, otherwise the
    last untouched map if only one is left (None while several remain).
    """
    if is_finished(room):
        return room.progress.decider
    left = remaining_maps(room)
    if len(left) == 1:
        return left[0]
    return None


def is_acting_teams_turn(room: RoomStore, team: Team) -> bool:
    step = current_step(room)
    return step is not None and step.team == team


def map_status(room: RoomStore, map_name: str) -> MapStatus:
    progress = room.progress
    for team in TEAMS:
        if map_name in progress.bans.get(team, []):
            return MapStatus(kind="ban", by=team)
    for team in TEAMS:
        if map_name in progress.picks.get(team, []):
            return MapStatus(kind="pick", by=team)
    if progress.decider == map_name:
        return MapStatus(kind="decider")
    return MapStatus()
