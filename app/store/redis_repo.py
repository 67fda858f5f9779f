from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError, WatchError

from app.domain.banpick.errors import RoomNotFound, StoreWriteFailure
from app.store.redis_keys import RK
from app.store.models import Progress, RoomStore
from app.util.timeutil import now_ts

logger = logging.getLogger(__name__)

_JSON_FIELDS = ("map_pool", "steps", "progress")
_INT_FIELDS = ("version", "created_at", "updated_at")

Mutation = Callable[[RoomStore], Progress]


class RedisRepo:
    def __init__(self, r: Redis, commit_retries: int = 5):
        self.r = r
        self.commit_retries = commit_retries

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/int/None safely."""
        if x is None:
            return None
        if isinstance(x, bytes):
            return x.decode("utf-8")
        return x

    def _dec_map(self, d: dict) -> dict:
        return {self._dec(k): self._dec(v) for k, v in d.items()}

    def _room_to_hash(self, room: RoomStore) -> dict[str, str]:
        data = room.model_dump()
        out: dict[str, str] = {}
        for k, v in data.items():
            out[k] = json.dumps(v) if k in _JSON_FIELDS else str(v)
        return out

    def _room_from_hash(self, data: dict) -> RoomStore:
        norm: dict[str, Any] = self._dec_map(data)
        for f in _JSON_FIELDS:
            if f in norm:
                norm[f] = json.loads(norm[f])
        for f in _INT_FIELDS:
            if f in norm and norm[f] != "":
                norm[f] = int(norm[f])
        return RoomStore.model_validate(norm)

    # ----------------------------
    # Room record
    # ----------------------------
    async def room_exists(self, room_code: str) -> bool:
        try:
            return bool(await self.r.exists(RK(room_code).room()))
        except RedisError as e:
            raise StoreWriteFailure(f"Could not read room: {e}") from e

    async def create_room(self, room: RoomStore) -> bool:
        """
        Store a new room. Returns False (nothing written) if the code is taken.
        """
        key = RK(room.code).room()
        try:
            async with self.r.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                if await pipe.exists(key):
                    return False
                pipe.multi()
                pipe.hset(key, mapping=self._room_to_hash(room))
                await pipe.execute()
        except WatchError:
            return False
        except RedisError as e:
            raise StoreWriteFailure(f"Could not create room: {e}") from e
        return True

    async def get_room(self, room_code: str) -> Optional[RoomStore]:
        try:
            data = await self.r.hgetall(RK(room_code).room())
        except RedisError as e:
            logger.warning("room %s read failed: %s", room_code, e)
            raise StoreWriteFailure(f"Could not read room: {e}") from e
        if not data:
            return None
        return self._room_from_hash(data)

    async def commit_progress(self, room_code: str, mutate: Mutation) -> RoomStore:
        """
        Optimistic check-and-set of a room's progress.

        `mutate` receives the latest stored room and returns the new progress,
        or raises to abort without writing. The room hash is WATCHed while
        `mutate` runs; if another writer commits first the transaction is
        dropped and `mutate` is re-run against the fresh state.
        """
        key = RK(room_code).room()
        for attempt in range(1, self.commit_retries + 1):
            try:
                async with self.r.pipeline(transaction=True) as pipe:
                    await pipe.watch(key)
                    data = await pipe.hgetall(key)
                    if not data:
                        raise RoomNotFound(f"Room {room_code} not found")
                    room = self._room_from_hash(data)

                    progress = mutate(room)
                    ts = now_ts()
                    version = room.version + 1

                    pipe.multi()
                    pipe.hset(
                        key,
                        mapping={
                            "progress": progress.model_dump_json(),
                            "version": str(version),
                            "updated_at": str(ts),
                        },
                    )
                    await pipe.execute()
            except WatchError:
                logger.warning("room %s changed during commit (attempt %d/%d)", room_code, attempt, self.commit_retries)
                continue
            except RedisError as e:
                logger.warning("room %s commit failed: %s", room_code, e)
                raise StoreWriteFailure(f"Could not save action: {e}") from e

            return room.model_copy(update={"progress": progress, "version": version, "updated_at": ts})

        raise StoreWriteFailure(f"Room {room_code} kept changing, giving up after {self.commit_retries} attempts")

    async def list_room_codes(self) -> list[str]:
        codes: list[str] = []
        cursor = 0
        while True:
            cursor, keys = await self.r.scan(cursor=cursor, match=RK.room_pattern(), count=200)
            for k in keys:
                codes.append(RK.code_from_key(self._dec(k)))
            if cursor == 0:
                break
        return sorted(set(codes))

    # ----------------------------
    # Change notification
    # ----------------------------
    async def publish(self, room_code: str, event: dict[str, Any]) -> int:
        return int(await self.r.publish(RK(room_code).updates(), json.dumps(event)))
