# app/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator

from app.domain.common.types import Action, Mode, Team


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


# ---- Lifecycle ----

class InCreateRoom(InBase):
    type: Literal["create_room"] = "create_room"
    team_a: str = Field(min_length=1, max_length=32)
    team_b: str = Field(min_length=1, max_length=32)
    mode: Mode = "BO3"

    @field_validator("team_a", "team_b", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("mode", mode="before")
    @classmethod
    def _upper_mode(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class InHeartbeat(InBase):
    type: Literal["heartbeat"] = "heartbeat"


class InSnapshot(InBase):
    """Ask for the full current room state, e.g. after a reconnect."""
    type: Literal["snapshot"] = "snapshot"


# ---- Ban/pick ----

class InSubmitAction(InBase):
    type: Literal["submit_action"] = "submit_action"
    map: str = Field(min_length=1, max_length=64)


IncomingMessage = Union[
    InCreateRoom,
    InHeartbeat,
    InSnapshot,
    InSubmitAction,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutRoomCreated(OutBase):
    type: Literal["room_created"] = "room_created"
    room_code: str
    mode: Mode
    links: Dict[str, str]


class OutRoomSnapshot(OutBase):
    type: Literal["room_snapshot"] = "room_snapshot"
    room: Dict[str, Any]


class OutRoomUpdated(OutBase):
    """
    Broadcast to every view of a room after a committed action. `room` is the
    public (spectator) document; team views merge their own fields locally or
    ask for a snapshot.
    """
    type: Literal["room_updated"] = "room_updated"
    room: Dict[str, Any]
    last_action: Optional[Dict[str, Any]] = None


class OutActionAccepted(OutBase):
    type: Literal["action_accepted"] = "action_accepted"
    action: Action
    map: str
    team: Team
    step: int


class OutDeciderResolved(OutBase):
    type: Literal["decider_resolved"] = "decider_resolved"
    map: str


OutgoingEvent = Union[
    OutError,
    OutRoomCreated,
    OutRoomSnapshot,
    OutRoomUpdated,
    OutActionAccepted,
    OutDeciderResolved,
]


# =========================
# Parser helpers
# =========================

_INCOMING_BY_TYPE = {
    "create_room": InCreateRoom,
    "heartbeat": InHeartbeat,
    "snapshot": InSnapshot,
    "submit_action": InSubmitAction,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError for a bad payload, ValueError for a bad/unknown type.
    """
    t = payload.get("type")
    if not isinstance(t, str):
        raise ValueError("Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValueError(f"Unknown message type: {t}")

    return cls.model_validate(payload)
