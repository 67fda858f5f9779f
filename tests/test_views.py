from app.domain.banpick.machine import apply_action
from app.domain.banpick.views import creation_links, spectator_view, team_view
from app.domain.maps import FALLBACK_MAP_IMAGE
from tests.fakes import TEAM_A_CODE, TEAM_B_CODE, make_room


def _contains(obj, needle):
    if isinstance(obj, dict):
        return any(_contains(v, needle) for v in obj.values())
    if isinstance(obj, list):
        return any(_contains(v, needle) for v in obj)
    return obj == needle


def test_spectator_view_hides_team_codes():
    view = spectator_view(make_room())
    assert not _contains(view, TEAM_A_CODE)
    assert not _contains(view, TEAM_B_CODE)
    assert "team_a_code" not in view
    assert view["current_step"] == {"action": "ban", "team": "A"}
    assert view["finished"] is False
    assert len(view["maps"]) == 7


def test_spectator_view_tiles_follow_progress():
    room = make_room()
    room.progress = apply_action(room.progress, room.steps, room.map_pool, "A", "Mirage")
    view = spectator_view(room, image_base="http://img/")
    tile = next(t for t in view["maps"] if t["name"] == "Mirage")
    assert tile == {"name": "Mirage", "image": "http://img/de_mirage.png", "status": "ban", "by": "A"}
    assert "Mirage" not in view["remaining"]
    assert view["progress"]["current_step"] == 1


def test_unknown_map_uses_fallback_image():
    room = make_room()
    room.map_pool = room.map_pool[:-1] + ["Dust2"]
    view = spectator_view(room, image_base="http://img/")
    tile = next(t for t in view["maps"] if t["name"] == "Dust2")
    assert tile["image"] == "http://img/" + FALLBACK_MAP_IMAGE


def test_team_view_on_turn():
    view = team_view(make_room(), "A")
    assert view["team"] == "A"
    assert view["team_name"] == "Alpha"
    assert view["opponent"] == "B"
    assert view["is_my_turn"] is True
    assert view["pending_action"] == "ban"
    assert all(t["can_act"] for t in view["maps"])


def test_team_view_waiting():
    room = make_room()
    room.progress = apply_action(room.progress, room.steps, room.map_pool, "A", "Mirage")
    view_a = team_view(room, "A")
    assert view_a["is_my_turn"] is False
    assert view_a["pending_action"] is None
    assert not any(t["can_act"] for t in view_a["maps"])

    view_b = team_view(room, "B")
    acts = {t["name"]: t["can_act"] for t in view_b["maps"]}
    assert acts["Mirage"] is False
    assert acts["Inferno"] is True


def test_creation_links():
    links = creation_links("ABC234", TEAM_A_CODE, TEAM_B_CODE, "https://bp.example.com/")
    assert links == {
        "spectator": "https://bp.example.com/ABC234",
        "team_a": f"https://bp.example.com/ABC234/team/{TEAM_A_CODE}",
        "team_b": f"https://bp.example.com/ABC234/team/{TEAM_B_CODE}",
    }
    assert creation_links("ABC234", "x", "y")["spectator"] == "/ABC234"
