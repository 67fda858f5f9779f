from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.domain.common.types import Action, Mode, Team


def _per_team() -> Dict[Team, List[str]]:
    return {"A": [], "B": []}


class Step(BaseModel):
    action: Action
    team: Team


class Progress(BaseModel):
    """
    Ban/pick state of one room. Replaced as a whole on every committed action.
    """
    bans: Dict[Team, List[str]] = Field(default_factory=_per_team)
    picks: Dict[Team, List[str]] = Field(default_factory=_per_team)
    decider: Optional[str] = None
    current_step: int = 0


class RoomStore(BaseModel):
    code: str
    team_a: str
    team_b: str
    team_a_code: str
    team_b_code: str
    mode: Mode
    map_pool: List[str]
    steps: List[Step]
    progress: Progress = Field(default_factory=Progress)
    version: int = 0
    created_at: int
    updated_at: int

    def team_name(self, team: Team) -> str:
        return self.team_a if team == "A" else self.team_b
