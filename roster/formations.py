"""Formation definitions and position role classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

KEEPER = "Keeper"


class PositionRole(str, Enum):
    KEEPER = "keeper"
    DEFENSIVE = "defensive"
    OFFENSIVE = "offensive"


def classify_position(position: str) -> PositionRole:
    if position == KEEPER:
        return PositionRole.KEEPER
    if "Back" in position:
        return PositionRole.DEFENSIVE
    return PositionRole.OFFENSIVE


def is_defensive(position: str) -> bool:
    """Keeper counts toward a player's defensive quarters."""
    return classify_position(position) != PositionRole.OFFENSIVE


@dataclass(frozen=True)
class Formation:
    name: str
    field_size: int
    positions: tuple[str, ...]

    @property
    def defensive_positions(self) -> frozenset[str]:
        return frozenset(p for p in self.positions if is_defensive(p))

    @property
    def has_keeper(self) -> bool:
        return KEEPER in self.positions


# field size -> formation name -> ordered positions
FORMATIONS: dict[int, dict[str, list[str]]] = {
    11: {
        "4-3-3": ["Keeper", "Left Back", "Left Center Back", "Right Center Back", "Right Back",
                  "Left Mid", "Center Mid", "Right Mid",
                  "Left Wing", "Striker", "Right Wing"],
        "4-4-2": ["Keeper", "Left Back", "Left Center Back", "Right Center Back", "Right Back",
                  "Left Mid", "Left Center Mid", "Right Center Mid", "Right Mid",
                  "Left Striker", "Right Striker"],
        "4-2-3-1": ["Keeper", "Left Back", "Left Center Back", "Right Center Back", "Right Back",
                    "Left Defensive Mid", "Right Defensive Mid",
                    "Left Wing", "Attacking Mid", "Right Wing",
                    "Striker"],
        "3-5-2": ["Keeper", "Left Center Back", "Center Back", "Right Center Back",
                  "Left Wing Back", "Left Mid", "Center Mid", "Right Mid", "Right Wing Back",
                  "Left Striker", "Right Striker"],
        "5-3-2": ["Keeper", "Left Wing Back", "Left Center Back", "Center Back", "Right Center Back",
                  "Right Wing Back", "Left Mid", "Center Mid", "Right Mid",
                  "Left Striker", "Right Striker"],
    },
    9: {
        "3-3-2": ["Keeper", "Left Back", "Center Back", "Right Back",
                  "Left Mid", "Center Mid", "Right Mid",
                  "Left Forward", "Right Forward"],
        "3-2-3": ["Keeper", "Left Back", "Center Back", "Right Back",
                  "Left Mid", "Right Mid",
                  "Left Wing", "Striker", "Right Wing"],
        "2-3-3": ["Keeper", "Left Back", "Right Back",
                  "Left Mid", "Center Mid", "Right Mid",
                  "Left Wing", "Striker", "Right Wing"],
    },
    7: {
        "2-3-1": ["Keeper", "Left Back", "Right Back", "Left Wing", "Right Wing", "Center Mid", "Striker"],
        "3-2-1": ["Keeper", "Left Back", "Center Back", "Right Back", "Left Mid", "Right Mid", "Striker"],
        "2-2-2": ["Keeper", "Left Back", "Right Back", "Left Mid", "Right Mid", "Left Striker", "Right Striker"],
        "3-3": ["Keeper", "Left Back", "Center Back", "Right Back", "Left Mid", "Center Mid", "Right Mid"],
    },
    6: {
        "2-3-1": ["Keeper", "Left Back", "Right Back", "Left Mid", "Right Mid", "Striker"],
        "3-2-1": ["Keeper", "Left Back", "Center Back", "Right Back", "Left Mid", "Striker"],
        "2-2-2": ["Keeper", "Left Back", "Right Back", "Left Mid", "Right Mid", "Striker"],
        "3-3": ["Keeper", "Left Back", "Center Back", "Right Back", "Left Mid", "Center Mid"],
    },
    5: {
        "2-2": ["Keeper", "Left Back", "Right Back", "Midfield", "Striker"],
    },
}

DEFAULT_FORMATIONS: dict[int, str] = {5: "2-2", 6: "2-3-1", 7: "2-3-1", 9: "3-3-2", 11: "4-4-2"}

FIELD_SIZES = sorted(FORMATIONS)

DEFAULT_FIELD_SIZE = 7

# age division -> field size; 10U may also play 6v6
AGE_DIVISIONS: dict[str, int] = {"10U": 7, "12U": 9, "14U": 11, "16U": 11, "19U": 11}


def field_size_for_division(division: str) -> int:
    """Raises KeyError for an unknown division."""
    key = division.strip().upper()
    if key not in AGE_DIVISIONS:
        raise KeyError(f"Unknown age division {division!r}; expected one of {sorted(AGE_DIVISIONS)}")
    return AGE_DIVISIONS[key]


def formation_names(field_size: int) -> list[str]:
    return list(FORMATIONS.get(field_size, {}))


def get_formation(field_size: int, name: str | None = None) -> Formation:
    """Look up a built-in formation, falling back to the size's default shape.

    Raises:
        KeyError: if no formations exist for ``field_size``
    """
    shapes = FORMATIONS.get(field_size)
    if shapes is None:
        raise KeyError(f"No formations for field size {field_size}; expected one of {FIELD_SIZES}")
    if name not in shapes:
        name = DEFAULT_FORMATIONS[field_size]
    return Formation(name=name, field_size=field_size, positions=tuple(shapes[name]))


def custom_formation(positions: list[str], name: str = "custom") -> Formation:
    return Formation(name=name, field_size=len(positions), positions=tuple(positions))
