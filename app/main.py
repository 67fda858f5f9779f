from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from app.settings import get_settings
from app.store.redis_repo import RedisRepo
from app.transport.admin import router as admin_router
from app.transport.api import router as api_router
from app.transport.inflight import InFlightGuard
from app.transport.room_bus import RoomBus
from app.transport.ws import router as ws_router
from app.transport.ws_manager import WSManager


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.LOG_LEVEL.upper(),
    )

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = settings.allowed_origins()
    if "null" not in allowed_origins:
        allowed_origins.append("null")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # in-process state that needs no redis; startup adds the store
    app.state.wsman = WSManager()
    app.state.inflight = InFlightGuard()

    @app.on_event("startup")
    async def _startup() -> None:
        r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        app.state.redis = r
        app.state.repo = RedisRepo(r, commit_retries=settings.COMMIT_RETRIES)
        await r.ping()
        app.state.bus = RoomBus(r, app.state.wsman)
        app.state.bus.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.bus.stop()
        r: Redis = app.state.redis
        await r.aclose()

    @app.get("/health")
    async def health():
        r: Redis = app.state.redis
        pong = await r.ping()
        return {"ok": True, "redis": str(pong)}

    app.include_router(api_router)
    app.include_router(ws_router)
    app.include_router(admin_router)
    return app


app = create_app()
