# app/domain/banpick/machine.py
from __future__ import annotations

from typing import Iterable, Sequence

from app.domain.banpick.errors import (
    InternalConsistency,
    MapUnavailable,
    NotYourTurn,
    SequenceComplete,
)
from app.domain.common.types import Team, TEAMS
from app.store.models import Progress, Step


def consumed_maps(progress: Progress) -> set[str]:
    """Every map already taken by a ban, a pick or the decider slot."""
    taken: set[str] = set()
    for team in TEAMS:
        taken.update(progress.bans.get(team, []))
        taken.update(progress.picks.get(team, []))
    if progress.decider:
        taken.add(progress.decider)
    return taken


def check_pool_fits(map_pool: Sequence[str], steps: Sequence[Step]) -> None:
    """
    A template consumes one map per step and must leave exactly one decider.
    """
    if len(set(map_pool)) != len(map_pool):
        raise InternalConsistency("Map pool contains duplicate maps")
    if len(map_pool) != len(steps) + 1:
        raise InternalConsistency(
            f"Map pool has {len(map_pool)} maps but {len(steps)} steps need exactly {len(steps) + 1}"
        )


def resolve_decider(progress: Progress, map_pool: Iterable[str]) -> str:
    taken = consumed_maps(progress)
    candidates = [m for m in map_pool if m not in taken]
    if len(candidates) != 1:
        raise InternalConsistency(
            f"Expected exactly one decider candidate, found {len(candidates)}: {candidates}"
        )
    return candidates[0]


def apply_action(
    progress: Progress,
    steps: Sequence[Step],
    map_pool: Sequence[str],
    team: Team,
    map_name: str,
) -> Progress:
    """
    Validate and apply one ban/pick for `team`.

    Checks, in order: the scripted phase is still running, it is `team`'s
    turn, and `map_name` is a pool map nobody has taken yet. Any violation
    raises before anything is changed. Returns a new Progress; the one passed
    in is left as is. When the last step is applied the decider is resolved.
    """
    if progress.current_step >= len(steps):
        raise SequenceComplete("Ban/pick sequence is already complete")

    step = steps[progress.current_step]
    if step.team != team:
        raise NotYourTurn(f"Waiting for team {step.team} to {step.action}")

    if map_name not in map_pool or map_name in consumed_maps(progress):
        raise MapUnavailable(f"Map {map_name} is not available")

    new = progress.model_copy(deep=True)
    if step.action == "ban":
        new.bans.setdefault(team, []).append(map_name)
    else:
        new.picks.setdefault(team, []).append(map_name)
    new.current_step += 1

    if new.current_step == len(steps):
        new.decider = resolve_decider(new, map_pool)

    return new
