"""Season history: saved game records folded into per-player summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from .models import Player, PlayerStatus


class PositionRecord(BaseModel):
    quarter: int
    position: str


class GamePlayerRecord(BaseModel):
    name: str
    status: PlayerStatus = PlayerStatus.AVAILABLE
    quarters_played: list[int] = []
    quarters_sitting: list[int] = []
    positions_played: list[PositionRecord] = []
    keeper_quarter: int | None = None
    defensive_quarters: int = 0
    offensive_quarters: int = 0
    is_captain: bool = False


class GameRecord(BaseModel):
    name: str | None = None
    captains: list[str] = []
    players: list[GamePlayerRecord]


RECOMMENDATION_LIMIT = 3


@dataclass
class SeasonSummary:
    """Prior-game aggregates for one player. Read-only input to generation.

    ``games_played`` counts games attended; absent and injured games only
    count towards ``games_on_roster``.
    """

    games_played: int = 0
    games_on_roster: int = 0
    games_absent: int = 0
    games_injured: int = 0
    total_quarters: int = 0
    total_sitting: int = 0
    goalkeeper_quarters: int = 0
    captain_games: int = 0
    defensive_quarters: int = 0
    offensive_quarters: int = 0
    position_counts: dict[str, int] = field(default_factory=dict)

    @property
    def avg_sitting(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return self.total_sitting / self.games_played

    @property
    def attendance_pct(self) -> int:
        if self.games_on_roster <= 0:
            return 0
        return round(100 * self.games_played / self.games_on_roster)

    def sitting_pct(self, quarters: int = 4) -> int:
        possible = self.games_played * quarters
        if possible <= 0:
            return 0
        return round(100 * self.total_sitting / possible)

    @property
    def total_positions(self) -> int:
        return sum(self.position_counts.values())

    def position_share(self, position: str) -> float | None:
        """Fraction of season positions equal to ``position``; None without history."""
        total = self.total_positions
        if total <= 0:
            return None
        return self.position_counts.get(position, 0) / total

    def top_positions(self, n: int = 3) -> list[tuple[str, int]]:
        return sorted(self.position_counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


SeasonHistory = Mapping[str, SeasonSummary]

EMPTY_SUMMARY = SeasonSummary()


def summary_for(season: SeasonHistory | None, name: str) -> SeasonSummary:
    if not season:
        return EMPTY_SUMMARY
    return season.get(name, EMPTY_SUMMARY)


def summarize_games(games: Iterable[GameRecord | Mapping[str, Any]]) -> dict[str, SeasonSummary]:
    """Fold saved games into season summaries keyed by player name.

    Only games where the player was available count as played. Keeper
    involvement counts once per game.
    """
    stats: dict[str, SeasonSummary] = {}
    for raw in games:
        game = raw if isinstance(raw, GameRecord) else GameRecord(**raw)
        captains = set(game.captains)
        for player in game.players:
            s = stats.setdefault(player.name, SeasonSummary())
            s.games_on_roster += 1
            if player.status == PlayerStatus.AVAILABLE:
                s.games_played += 1
            elif player.status == PlayerStatus.ABSENT:
                s.games_absent += 1
            elif player.status == PlayerStatus.INJURED:
                s.games_injured += 1
            s.total_quarters += len(player.quarters_played)
            s.total_sitting += len(player.quarters_sitting)
            s.defensive_quarters += player.defensive_quarters
            s.offensive_quarters += player.offensive_quarters
            if player.is_captain or player.name in captains:
                s.captain_games += 1
            kept = False
            for rec in player.positions_played:
                s.position_counts[rec.position] = s.position_counts.get(rec.position, 0) + 1
                if rec.position == "Keeper":
                    kept = True
            if kept or player.keeper_quarter is not None:
                s.goalkeeper_quarters += 1
    return stats


@dataclass
class LineupRecommendations:
    """Who to favour for rest, goal, captaincy and role balance next game.

    Each list holds at most ``RECOMMENDATION_LIMIT`` entries of
    ``{"name": ..., <supporting counts>}``.
    """

    should_sit: list[dict[str, Any]] = field(default_factory=list)
    should_keep: list[dict[str, Any]] = field(default_factory=list)
    should_captain: list[dict[str, Any]] = field(default_factory=list)
    needs_offense: list[dict[str, Any]] = field(default_factory=list)
    needs_defense: list[dict[str, Any]] = field(default_factory=list)
    position_variety: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "should_sit": self.should_sit,
            "should_keep": self.should_keep,
            "should_captain": self.should_captain,
            "needs_offense": self.needs_offense,
            "needs_defense": self.needs_defense,
            "position_variety": self.position_variety,
        }


def recommend_lineup(
    season: SeasonHistory | None,
    players: Sequence[Player],
    limit: int = RECOMMENDATION_LIMIT,
) -> LineupRecommendations | None:
    """Suggest next-game priorities for the available ``players``.

    Returns None when nobody is available or there is no history.
    """
    available = [p for p in players if p.is_available]
    if not available or not season:
        return None
    rows = [(p, summary_for(season, p.name)) for p in available]
    veterans = [(p, s) for p, s in rows if s.games_played > 0]
    rec = LineupRecommendations()

    by_sitting = sorted(rows, key=lambda ps: ps[1].avg_sitting)
    least_rested = by_sitting[0][1].avg_sitting
    rec.should_sit = [
        {"name": p.name, "avg_sitting": round(s.avg_sitting, 1), "games_played": s.games_played}
        for p, s in by_sitting
        if s.games_played > 0 and s.avg_sitting <= least_rested + 0.5
    ][:limit]

    keepers = sorted(((p, s) for p, s in veterans if not p.no_keeper), key=lambda ps: ps[1].goalkeeper_quarters)
    if keepers:
        fewest = keepers[0][1].goalkeeper_quarters
        rec.should_keep = [
            {"name": p.name, "goalkeeper_quarters": s.goalkeeper_quarters}
            for p, s in keepers
            if s.goalkeeper_quarters <= fewest
        ][:limit]

    captains = sorted(veterans, key=lambda ps: ps[1].captain_games)
    if captains:
        fewest = captains[0][1].captain_games
        rec.should_captain = [
            {"name": p.name, "captain_games": s.captain_games} for p, s in captains if s.captain_games <= fewest
        ][:limit]

    balanced = [(p, s) for p, s in rows if s.defensive_quarters + s.offensive_quarters > 0]
    heavy_defense = sorted(
        ((p, s) for p, s in balanced if s.defensive_quarters > s.offensive_quarters),
        key=lambda ps: ps[1].defensive_quarters - ps[1].offensive_quarters,
        reverse=True,
    )
    rec.needs_offense = [
        {"name": p.name, "offense": s.offensive_quarters, "defense": s.defensive_quarters}
        for p, s in heavy_defense[:limit]
    ]
    heavy_offense = sorted(
        ((p, s) for p, s in balanced if s.offensive_quarters > s.defensive_quarters),
        key=lambda ps: ps[1].offensive_quarters - ps[1].defensive_quarters,
        reverse=True,
    )
    rec.needs_defense = [
        {"name": p.name, "offense": s.offensive_quarters, "defense": s.defensive_quarters}
        for p, s in heavy_offense[:limit]
    ]

    by_variety = sorted(veterans, key=lambda ps: len(ps[1].position_counts))
    if by_variety:
        narrowest = len(by_variety[0][1].position_counts)
        rec.position_variety = [
            {
                "name": p.name,
                "position_count": len(s.position_counts),
                "top_positions": [pos for pos, _ in s.top_positions(2)],
            }
            for p, s in by_variety
            if len(s.position_counts) <= narrowest + 1
        ][:limit]
    return rec
