from __future__ import annotations

from pydantic import BaseModel
import os

from app.domain.maps import DEFAULT_MAP_IMAGE_BASE, MAP_POOL

DEFAULT_MAP_POOL = ",".join(MAP_POOL)


class Settings(BaseModel):
    APP_NAME: str = "banpick-server"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    # WATCH/EXEC attempts before a progress write is reported as failed
    COMMIT_RETRIES: int = 5

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,null"
    # Dev helper: allow any private LAN IP on port 3000
    WS_ALLOW_LAN_ORIGINS: bool = True

    # Links handed out on room creation, e.g. "https://banpick.example.com"
    PUBLIC_BASE_URL: str = ""

    # Maps
    MAP_POOL: str = DEFAULT_MAP_POOL
    MAP_IMAGE_BASE: str = DEFAULT_MAP_IMAGE_BASE

    # Codes
    ROOM_CODE_LEN: int = 6
    TEAM_CODE_LEN: int = 10

    def map_pool(self) -> list[str]:
        return [m.strip() for m in self.MAP_POOL.split(",") if m.strip()]

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.WS_ALLOWED_ORIGINS.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "banpick-server"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        COMMIT_RETRIES=int(os.getenv("COMMIT_RETRIES", "5")),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,null",
        ),
        WS_ALLOW_LAN_ORIGINS=os.getenv("WS_ALLOW_LAN_ORIGINS", "true").lower()
        in ("1", "true", "yes", "y", "on"),

        PUBLIC_BASE_URL=os.getenv("PUBLIC_BASE_URL", "").rstrip("/"),
        MAP_POOL=os.getenv("MAP_POOL", DEFAULT_MAP_POOL),
        MAP_IMAGE_BASE=os.getenv("MAP_IMAGE_BASE", DEFAULT_MAP_IMAGE_BASE),
        ROOM_CODE_LEN=int(os.getenv("ROOM_CODE_LEN", "6")),
        TEAM_CODE_LEN=int(os.getenv("TEAM_CODE_LEN", "10")),
    )
