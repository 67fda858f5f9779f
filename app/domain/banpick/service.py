# app/domain/banpick/service.py
from __future__ import annotations

import logging
import secrets
from typing import Optional, Tuple

from redis.exceptions import RedisError

from app.domain.banpick.errors import InternalConsistency, InvalidTeamLink, RoomNotFound, StoreWriteFailure
from app.domain.banpick.machine import apply_action, check_pool_fits
from app.domain.banpick.steps import generate_steps
from app.domain.common.types import Mode, Team
from app.settings import Settings
from app.store.models import Progress, RoomStore, Step
from app.util.timeutil import now_ts

logger = logging.getLogger(__name__)

# no 0/O or 1/I
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CREATE_ATTEMPTS = 5


def gen_code(n: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(n))


async def create_room(repo, *, team_a: str, team_b: str, mode: Mode, settings: Settings) -> RoomStore:
    steps = generate_steps(mode)
    map_pool = settings.map_pool()
    check_pool_fits(map_pool, steps)

    team_a_code = gen_code(settings.TEAM_CODE_LEN)
    team_b_code = gen_code(settings.TEAM_CODE_LEN)
    while team_b_code == team_a_code:
        team_b_code = gen_code(settings.TEAM_CODE_LEN)

    ts = now_ts()
    for _ in range(CREATE_ATTEMPTS):
        room = RoomStore(
            code=gen_code(settings.ROOM_CODE_LEN),
            team_a=team_a,
            team_b=team_b,
            team_a_code=team_a_code,
            team_b_code=team_b_code,
            mode=mode,
            map_pool=map_pool,
            steps=steps,
            progress=Progress(),
            version=0,
            created_at=ts,
            updated_at=ts,
        )
        if await repo.create_room(room):
            logger.info("room %s created: %s vs %s (%s)", room.code, team_a, team_b, mode)
            return room

    raise StoreWriteFailure("Could not allocate a free room code")


async def load_room(repo, room_code: str) -> RoomStore:
    try:
        room = await repo.get_room(room_code)
    except RedisError as e:
        raise StoreWriteFailure(f"Could not read room: {e}") from e
    if room is None:
        raise RoomNotFound(f"Room {room_code} not found")
    return room


def resolve_team(room: RoomStore, team_code: Optional[str]) -> Team:
    if team_code:
        # always compare against both codes
        is_a = secrets.compare_digest(team_code.encode(), room.team_a_code.encode())
        is_b = secrets.compare_digest(team_code.encode(), room.team_b_code.encode())
        if is_a:
            return "A"
        if is_b:
            return "B"
    raise InvalidTeamLink("Invalid team link")


async def submit_action(repo, *, room_code: str, team_code: str, map_name: str) -> Tuple[RoomStore, Team, Step]:
    """
    Apply one ban/pick for the team owning `team_code`.

    The state machine runs inside the store's atomic commit so it always sees
    the latest stored progress. Returns (updated room, acting team, step taken).
    """
    room = await load_room(repo, room_code)
    team = resolve_team(room, team_code)

    def _mutate(latest: RoomStore) -> Progress:
        return apply_action(latest.progress, latest.steps, latest.map_pool, team, map_name)

    try:
        updated = await repo.commit_progress(room_code, _mutate)
    except InternalConsistency:
        logger.error("room %s: decider could not be resolved", room_code, exc_info=True)
        raise

    step = updated.steps[updated.progress.current_step - 1]
    logger.info("room %s: team %s %s %s (step %d/%d)", room_code, team, step.action, map_name,
                updated.progress.current_step, len(updated.steps))
    if updated.progress.decider:
        logger.info("room %s: decider is %s", room_code, updated.progress.decider)
    return updated, team, step
