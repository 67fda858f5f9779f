# app/domain/maps.py
from __future__ import annotations

from typing import Optional

MAP_POOL: list[str] = ["Mirage", "Inferno", "Nuke", "Ancient", "Anubis", "Vertigo", "Overpass"]

MAP_IMAGE_MAP: dict[str, str] = {
    "Mirage": "de_mirage.png",
    "Inferno": "de_inferno.png",
    "Nuke": "de_nuke.png",
    "Ancient": "de_ancient.png",
    "Anubis": "de_anubis.png",
    "Vertigo": "de_vertigo.png",
    "Overpass": "de_overpass.png",
}

FALLBACK_MAP_IMAGE = "de_dust2.png"

DEFAULT_MAP_IMAGE_BASE = (
    "https://ghfast.top/https://raw.githubusercontent.com/ghostcap-gaming/cs2-map-images/refs/heads/main/cs2/"
)


def map_image(name: str) -> str:
    return MAP_IMAGE_MAP.get(name, FALLBACK_MAP_IMAGE)


def map_image_url(name: Optional[str], base: str = DEFAULT_MAP_IMAGE_BASE) -> Optional[str]:
    if not name:
        return None
    return base + map_image(name)
