# app/domain/banpick/errors.py
from __future__ import annotations


class BanPickError(Exception):
    """
    Base for every failure a ban/pick operation can surface to a client.
    `code` is the wire error code, `http_status` what the HTTP API answers with.
    """
    code: str = "BANPICK_ERROR"
    http_status: int = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class RoomNotFound(BanPickError):
    code = "ROOM_NOT_FOUND"
    http_status = 404


class InvalidTeamLink(BanPickError):
    code = "INVALID_TEAM_LINK"
    http_status = 403


class IllegalAction(BanPickError):
    """Action rejected by the state machine; progress is left untouched."""
    http_status = 409


class SequenceComplete(IllegalAction):
    code = "SEQUENCE_COMPLETE"


class NotYourTurn(IllegalAction):
    code = "NOT_YOUR_TURN"


class MapUnavailable(IllegalAction):
    code = "MAP_UNAVAILABLE"


class StoreWriteFailure(BanPickError):
    code = "STORE_WRITE_FAILURE"
    http_status = 503


class InternalConsistency(BanPickError):
    code = "INTERNAL_CONSISTENCY"
    http_status = 500
