"""Rotation run adapter: roster/history/config in, validated run artifacts out."""

from .adapter import (
    load_config,
    load_history,
    load_roster,
    player_frame,
    run_rotation,
    season_frame,
    season_recommendations,
)

__all__ = [
    "load_config",
    "load_history",
    "load_roster",
    "player_frame",
    "run_rotation",
    "season_frame",
    "season_recommendations",
]
