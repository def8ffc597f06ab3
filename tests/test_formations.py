from __future__ import annotations

import pytest

from roster.formations import (
    DEFAULT_FORMATIONS,
    FORMATIONS,
    KEEPER,
    PositionRole,
    classify_position,
    custom_formation,
    field_size_for_division,
    formation_names,
    get_formation,
    is_defensive,
)


@pytest.mark.parametrize(
    "position,role",
    [
        ("Keeper", PositionRole.KEEPER),
        ("Left Back", PositionRole.DEFENSIVE),
        ("Left Wing Back", PositionRole.DEFENSIVE),
        ("Center Back", PositionRole.DEFENSIVE),
        ("Striker", PositionRole.OFFENSIVE),
        ("Center Mid", PositionRole.OFFENSIVE),
        ("Midfield", PositionRole.OFFENSIVE),
    ],
)
def test_classify_position(position: str, role: PositionRole) -> None:
    assert classify_position(position) == role


def test_keeper_is_defensive() -> None:
    assert is_defensive(KEEPER)
    assert not is_defensive("Right Wing")


def test_builtin_formations_are_well_formed() -> None:
    for size, shapes in FORMATIONS.items():
        for name, positions in shapes.items():
            assert len(positions) == size, (size, name)
            assert len(set(positions)) == size, (size, name)
            assert KEEPER in positions, (size, name)


def test_defaults_exist_for_every_size() -> None:
    for size, name in DEFAULT_FORMATIONS.items():
        assert name in formation_names(size)


def test_get_formation_by_name() -> None:
    f = get_formation(9, "2-3-3")
    assert f.name == "2-3-3"
    assert f.field_size == 9
    assert f.positions[0] == KEEPER
    assert f.has_keeper


def test_get_formation_falls_back_to_default() -> None:
    assert get_formation(7).name == "2-3-1"
    assert get_formation(11, "9-0-1").name == "4-4-2"


def test_get_formation_unknown_size() -> None:
    with pytest.raises(KeyError):
        get_formation(8)


def test_defensive_positions() -> None:
    f = get_formation(7, "2-3-1")
    assert f.defensive_positions == frozenset({"Keeper", "Left Back", "Right Back"})


def test_custom_formation_uses_length_as_field_size() -> None:
    f = custom_formation(["Left Back", "Striker", "Right Wing"])
    assert f.field_size == 3
    assert not f.has_keeper


def test_field_size_for_division() -> None:
    assert field_size_for_division("10U") == 7
    assert field_size_for_division("12u") == 9
    with pytest.raises(KeyError):
        field_size_for_division("8U")
