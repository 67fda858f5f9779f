# app/domain/banpick/steps.py
from __future__ import annotations

from app.domain.common.types import Mode
from app.store.models import Step

# After the two picks of a BO3 three maps remain; each team bans one in
# reverse order so exactly one decider is left.
_TEMPLATES: dict[str, list[tuple[str, str]]] = {
    "BO3": [("ban", "A"), ("ban", "B"), ("pick", "A"), ("pick", "B"), ("ban", "B"), ("ban", "A")],
    "BO5": [("ban", "A"), ("ban", "B"), ("pick", "A"), ("pick", "B"), ("pick", "A"), ("pick", "B")],
}


def generate_steps(mode: Mode) -> list[Step]:
    template = _TEMPLATES.get(mode)
    if template is None:
        raise ValueError(f"Unknown mode: {mode}")
    return [Step(action=action, team=team) for action, team in template]
