import pytest
from pydantic import ValidationError

from app.transport.protocols import parse_incoming


def test_parse_incoming_create_room():
    msg = parse_incoming({"type": "create_room", "team_a": "  Alpha ", "team_b": "Bravo", "mode": "bo5"})
    assert msg.type == "create_room"
    assert msg.team_a == "Alpha"
    assert msg.mode == "BO5"


def test_parse_incoming_create_room_defaults_to_bo3():
    msg = parse_incoming({"type": "create_room", "team_a": "Alpha", "team_b": "Bravo"})
    assert msg.mode == "BO3"


def test_parse_incoming_create_room_rejects_blank_names_and_modes():
    with pytest.raises(ValidationError):
        parse_incoming({"type": "create_room", "team_a": "   ", "team_b": "Bravo"})

    with pytest.raises(ValidationError):
        parse_incoming({"type": "create_room", "team_a": "Alpha", "team_b": "Bravo", "mode": "BO7"})


def test_parse_incoming_submit_action():
    msg = parse_incoming({"type": "submit_action", "map": "Nuke"})
    assert msg.map == "Nuke"

    with pytest.raises(ValidationError):
        parse_incoming({"type": "submit_action"})


def test_parse_incoming_unknown_type():
    with pytest.raises(ValueError):
        parse_incoming({"type": "does_not_exist"})

    with pytest.raises(ValueError):
        parse_incoming({"map": "Nuke"})
