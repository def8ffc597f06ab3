"""Roster data model: players, formations, per-game state and season history."""

from .formations import (
    AGE_DIVISIONS,
    DEFAULT_FORMATIONS,
    FORMATIONS,
    KEEPER,
    Formation,
    PositionRole,
    classify_position,
    custom_formation,
    field_size_for_division,
    get_formation,
    is_defensive,
)
from .models import (
    Player,
    PlayerGameState,
    PlayerStatus,
    QuarterLineup,
    RosterState,
    fresh_state,
)
from .season import (
    GameRecord,
    LineupRecommendations,
    SeasonSummary,
    recommend_lineup,
    summarize_games,
    summary_for,
)

__all__ = [
    "AGE_DIVISIONS",
    "DEFAULT_FORMATIONS",
    "FORMATIONS",
    "KEEPER",
    "Formation",
    "GameRecord",
    "LineupRecommendations",
    "Player",
    "PlayerGameState",
    "PlayerStatus",
    "PositionRole",
    "QuarterLineup",
    "RosterState",
    "SeasonSummary",
    "classify_position",
    "custom_formation",
    "field_size_for_division",
    "fresh_state",
    "get_formation",
    "is_defensive",
    "recommend_lineup",
    "summarize_games",
    "summary_for",
]
