"""Player and per-game tracking models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PlayerStatus(str, Enum):
    AVAILABLE = "available"
    INJURED = "injured"
    ABSENT = "absent"


@dataclass(frozen=True)
class Player:
    """Roster entry with static preferences."""

    name: str
    number: int | None = None
    must_rest: bool = False
    no_keeper: bool = False
    status: PlayerStatus = PlayerStatus.AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.status == PlayerStatus.AVAILABLE


@dataclass
class PlayerGameState:
    """Accumulators for one player during one generation attempt.

    A fresh instance is built for every attempt; nothing here is shared with
    the static ``Player`` record.
    """

    quarters_played: list[int] = field(default_factory=list)
    quarters_sitting: list[int] = field(default_factory=list)
    positions_played: list[tuple[int, str]] = field(default_factory=list)
    keeper_quarter: int | None = None
    defensive_quarters: int = 0
    offensive_quarters: int = 0

    def times_played(self, position: str) -> int:
        return sum(1 for _, pos in self.positions_played if pos == position)

    @property
    def role_imbalance(self) -> int:
        return abs(self.defensive_quarters - self.offensive_quarters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quarters_played": list(self.quarters_played),
            "quarters_sitting": list(self.quarters_sitting),
            "positions_played": [
                {"quarter": q, "position": pos} for q, pos in self.positions_played
            ],
            "keeper_quarter": self.keeper_quarter,
            "defensive_quarters": self.defensive_quarters,
            "offensive_quarters": self.offensive_quarters,
        }


RosterState = dict[str, PlayerGameState]


def fresh_state(players: list[Player]) -> RosterState:
    """Build empty accumulators keyed by player name, in roster order."""
    return {p.name: PlayerGameState() for p in players}


@dataclass
class QuarterLineup:
    quarter: int
    positions: dict[str, str] = field(default_factory=dict)
    sitting: list[str] = field(default_factory=list)

    def players_on_field(self) -> list[str]:
        return list(self.positions.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "quarter": self.quarter,
            "positions": dict(self.positions),
            "sitting": list(self.sitting),
        }
