from __future__ import annotations

from dataclasses import dataclass

ROOM_PREFIX = "banpick:room:"
UPDATES_PREFIX = "banpick:updates:"


@dataclass(frozen=True)
class RK:
    """
    Redis Key builder for room-scoped keys.
    """
    room_code: str

    def room(self) -> str:
        return f"{ROOM_PREFIX}{self.room_code}"  # HASH

    def updates(self) -> str:
        return f"{UPDATES_PREFIX}{self.room_code}"  # PUB/SUB channel

    @staticmethod
    def room_pattern() -> str:
        return f"{ROOM_PREFIX}*"

    @staticmethod
    def updates_pattern() -> str:
        return f"{UPDATES_PREFIX}*"

    @staticmethod
    def code_from_key(key: str) -> str:
        for prefix in (ROOM_PREFIX, UPDATES_PREFIX):
            if key.startswith(prefix):
                return key[len(prefix):]
        return key
