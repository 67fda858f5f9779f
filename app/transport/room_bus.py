from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.store.redis_keys import RK
from app.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


class RoomBus:
    """
    Relays room change notifications from Redis pub/sub to the sockets this
    worker holds. Every worker runs one listener, so a commit made through
    any worker reaches every view.
    """
    def __init__(self, r: Redis, wsman: WSManager, reconnect_delay_sec: float = 1.0) -> None:
        self.r = r
        self.wsman = wsman
        self.reconnect_delay_sec = reconnect_delay_sec
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="room-bus")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def relay(self, channel: str, data: Any) -> None:
        room_code = RK.code_from_key(channel)
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        try:
            event: Dict[str, Any] = json.loads(data)
        except (TypeError, ValueError):
            logger.warning("dropping malformed update on %s", channel)
            return
        await self.wsman.broadcast(room_code, event)

    async def _run(self) -> None:
        while True:
            pubsub = self.r.pubsub()
            try:
                await pubsub.psubscribe(RK.updates_pattern())
                logger.info("room bus listening on %s", RK.updates_pattern())
                async for msg in pubsub.listen():
                    if msg.get("type") != "pmessage":
                        continue
                    channel = msg.get("channel")
                    if isinstance(channel, (bytes, bytearray)):
                        channel = channel.decode("utf-8")
                    await self.relay(channel, msg.get("data"))
            except RedisError as e:
                # views resync on reconnect, missed updates are not replayed
                logger.warning("room bus lost redis connection: %s", e)
                await asyncio.sleep(self.reconnect_delay_sec)
            finally:
                await pubsub.aclose()


async def publish_events(repo, room_code: str, events: List[Dict[str, Any]]) -> None:
    """
    Publish committed changes for every worker's listener. A failed publish
    does not undo the commit; views pick the state up on their next snapshot.
    """
    for event in events:
        try:
            await repo.publish(room_code, event)
        except RedisError as e:
            logger.warning("could not publish %s for room %s: %s", event.get("type"), room_code, e)
