# app/domain/common/types.py
from __future__ import annotations

from typing import Literal

Mode = Literal["BO3", "BO5"]
Team = Literal["A", "B"]
Action = Literal["ban", "pick"]

# Rendering classification of a single pool map
MapState = Literal["none", "ban", "pick", "decider"]

TEAMS: tuple[Team, Team] = ("A", "B")


def other_team(team: Team) -> Team:
    return "B" if team == "A" else "A"
