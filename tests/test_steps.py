import pytest

from app.domain.banpick.steps import generate_steps


def _turns(steps, team):
    return {i for i, s in enumerate(steps) if s.team == team}


def test_bo3_template():
    steps = generate_steps("BO3")
    assert [(s.action, s.team) for s in steps] == [
        ("ban", "A"),
        ("ban", "B"),
        ("pick", "A"),
        ("pick", "B"),
        ("ban", "B"),
        ("ban", "A"),
    ]
    assert _turns(steps, "A") == {0, 2, 5}
    assert _turns(steps, "B") == {1, 3, 4}


def test_bo5_template():
    steps = generate_steps("BO5")
    assert len(steps) == 6
    assert [s.action for s in steps] == ["ban", "ban", "pick", "pick", "pick", "pick"]
    assert _turns(steps, "A") == {0, 2, 4}
    assert _turns(steps, "B") == {1, 3, 5}


def test_generate_steps_returns_fresh_lists():
    first = generate_steps("BO3")
    first.pop()
    assert len(generate_steps("BO3")) == 6


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        generate_steps("BO7")
