import pytest
from redis.exceptions import ConnectionError

from app.domain.banpick.errors import StoreWriteFailure
from app.domain.banpick.handlers import handle_submit_action
from app.domain.banpick.service import submit_action
from app.domain.lifecycle.handlers import handle_create_room, handle_heartbeat, handle_snapshot
from app.transport.dispatcher import dispatch_message
from app.transport.protocols import InCreateRoom
from tests.fakes import TEAM_A_CODE, TEAM_B_CODE, FakeApp, FakeRepo, make_room


class Msg:
    def __init__(self, map):
        self.map = map


def _types(events):
    return [getattr(e, "type", None) or e.get("type") for e in events]


@pytest.mark.asyncio
async def test_create_room_returns_links():
    repo = FakeRepo()
    app = FakeApp(repo)
    msg = InCreateRoom(team_a="Alpha", team_b="Bravo", mode="BO3")

    to_sender, to_room = await handle_create_room(app=app, room_code="CREATE", team_code=None, msg=msg)

    assert to_room == []
    created = to_sender[0]
    assert created.type == "room_created"
    room = repo.rooms[created.room_code]
    assert created.links["spectator"].endswith(f"/{room.code}")
    assert created.links["team_a"].endswith(f"/{room.code}/team/{room.team_a_code}")
    assert created.links["team_b"].endswith(f"/{room.code}/team/{room.team_b_code}")


@pytest.mark.asyncio
async def test_snapshot_spectator_and_team():
    app = FakeApp(FakeRepo(make_room()))

    to_sender, _ = await handle_snapshot(app=app, room_code="ROOM01", team_code=None, msg=None)
    assert to_sender[0].type == "room_snapshot"
    assert "is_my_turn" not in to_sender[0].room

    to_sender, _ = await handle_snapshot(app=app, room_code="ROOM01", team_code=TEAM_B_CODE, msg=None)
    assert to_sender[0].room["team"] == "B"
    assert to_sender[0].room["is_my_turn"] is False


@pytest.mark.asyncio
async def test_snapshot_errors():
    app = FakeApp(FakeRepo(make_room()))

    to_sender, _ = await handle_snapshot(app=app, room_code="NOPE00", team_code=None, msg=None)
    assert to_sender[0].code == "ROOM_NOT_FOUND"

    to_sender, _ = await handle_snapshot(app=app, room_code="ROOM01", team_code="WRONGWRONG", msg=None)
    assert to_sender[0].code == "INVALID_TEAM_LINK"


@pytest.mark.asyncio
async def test_heartbeat_is_quiet():
    app = FakeApp(FakeRepo(make_room()))
    assert await handle_heartbeat(app=app, room_code="ROOM01", team_code=None, msg=None) == ([], [])
    to_sender, _ = await handle_heartbeat(app=app, room_code="NOPE00", team_code=None, msg=None)
    assert to_sender[0].code == "ROOM_NOT_FOUND"


@pytest.mark.asyncio
async def test_submit_action_broadcasts_update():
    repo = FakeRepo(make_room())
    app = FakeApp(repo)

    to_sender, to_room = await handle_submit_action(
        app=app, room_code="ROOM01", team_code=TEAM_A_CODE, msg=Msg("Mirage")
    )

    assert _types(to_sender) == ["action_accepted", "room_snapshot"]
    assert to_sender[0].action == "ban" and to_sender[0].team == "A" and to_sender[0].step == 1
    assert _types(to_room) == ["room_updated"]
    update = to_room[0]
    assert update.last_action == {"action": "ban", "team": "A", "map": "Mirage", "step": 1}
    assert update.room["progress"]["bans"]["A"] == ["Mirage"]
    assert TEAM_A_CODE not in str(update.model_dump())


@pytest.mark.asyncio
async def test_last_action_announces_decider():
    repo = FakeRepo(make_room())
    app = FakeApp(repo)
    plays = [
        (TEAM_A_CODE, "Mirage"),
        (TEAM_B_CODE, "Inferno"),
        (TEAM_A_CODE, "Nuke"),
        (TEAM_B_CODE, "Ancient"),
        (TEAM_B_CODE, "Anubis"),
        (TEAM_A_CODE, "Vertigo"),
    ]
    for code, m in plays:
        to_sender, to_room = await handle_submit_action(app=app, room_code="ROOM01", team_code=code, msg=Msg(m))

    assert _types(to_room) == ["room_updated", "decider_resolved"]
    assert to_room[1].map == "Overpass"
    assert to_room[0].room["finished"] is True
    assert to_room[0].room["current_map"] == "Overpass"


@pytest.mark.asyncio
async def test_submit_action_failure_resyncs_sender_only():
    repo = FakeRepo(make_room())
    app = FakeApp(repo)

    to_sender, to_room = await handle_submit_action(
        app=app, room_code="ROOM01", team_code=TEAM_B_CODE, msg=Msg("Mirage")
    )

    assert to_room == []
    assert _types(to_sender) == ["error", "room_snapshot"]
    assert to_sender[0].code == "NOT_YOUR_TURN"
    assert to_sender[1].room["team"] == "B"
    assert repo.commits == 0


@pytest.mark.asyncio
async def test_submit_action_bad_link_has_no_snapshot():
    app = FakeApp(FakeRepo(make_room()))
    to_sender, to_room = await handle_submit_action(
        app=app, room_code="ROOM01", team_code="AAAAAAAAAB", msg=Msg("Mirage")
    )
    assert _types(to_sender) == ["error"]
    assert to_sender[0].code == "INVALID_TEAM_LINK"


@pytest.mark.asyncio
async def test_spectator_cannot_submit():
    app = FakeApp(FakeRepo(make_room()))
    to_sender, to_room = await handle_submit_action(app=app, room_code="ROOM01", team_code=None, msg=Msg("Mirage"))
    assert to_sender[0].code == "READ_ONLY"
    assert to_room == []


@pytest.mark.asyncio
async def test_duplicate_in_flight_submission_rejected():
    repo = FakeRepo(make_room())
    app = FakeApp(repo)
    await app.state.inflight.try_acquire(("ROOM01", TEAM_A_CODE))

    to_sender, _ = await handle_submit_action(app=app, room_code="ROOM01", team_code=TEAM_A_CODE, msg=Msg("Mirage"))
    assert to_sender[0].code == "ACTION_IN_FLIGHT"
    assert repo.commits == 0

    # the other team is not blocked by A's pending action
    to_sender, _ = await handle_submit_action(app=app, room_code="ROOM01", team_code=TEAM_B_CODE, msg=Msg("Mirage"))
    assert to_sender[0].code == "NOT_YOUR_TURN"


@pytest.mark.asyncio
async def test_dispatch_routes_and_dumps():
    app = FakeApp(FakeRepo(make_room()))

    to_sender, to_room = await dispatch_message(
        app=app, room_code="ROOM01", team_code=TEAM_A_CODE, raw={"type": "submit_action", "map": "Nuke"}
    )
    assert [e["type"] for e in to_sender] == ["action_accepted", "room_snapshot"]
    assert to_room[0]["type"] == "room_updated"

    to_sender, _ = await dispatch_message(app=app, room_code="ROOM01", team_code=None, raw={"type": "bogus"})
    assert to_sender[0]["code"] == "BAD_MESSAGE"

    to_sender, _ = await dispatch_message(app=app, room_code="ROOM01", team_code=None, raw=["not", "a", "dict"])
    assert to_sender[0]["code"] == "BAD_MESSAGE"


class UnreachableRepo(FakeRepo):
    async def get_room(self, room_code):
        raise ConnectionError("connection reset")

    async def room_exists(self, room_code):
        raise StoreWriteFailure("Could not read room: connection reset")


@pytest.mark.asyncio
async def test_store_read_failure_is_reported_not_raised():
    repo = UnreachableRepo(make_room())
    app = FakeApp(repo)

    with pytest.raises(StoreWriteFailure, match="connection reset"):
        await submit_action(repo, room_code="ROOM01", team_code=TEAM_A_CODE, map_name="Mirage")

    to_sender, to_room = await handle_submit_action(
        app=app, room_code="ROOM01", team_code=TEAM_A_CODE, msg=Msg("Mirage")
    )
    assert _types(to_sender) == ["error"]
    assert to_sender[0].code == "STORE_WRITE_FAILURE"
    assert "connection reset" in to_sender[0].message
    assert to_room == []
    assert repo.commits == 0

    to_sender, _ = await handle_snapshot(app=app, room_code="ROOM01", team_code=None, msg=None)
    assert to_sender[0].code == "STORE_WRITE_FAILURE"

    to_sender, _ = await handle_heartbeat(app=app, room_code="ROOM01", team_code=None, msg=None)
    assert to_sender[0].code == "STORE_WRITE_FAILURE"
