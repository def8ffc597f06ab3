from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from roster.models import Player, PlayerStatus
from roster.season import GameRecord, SeasonSummary, recommend_lineup, summarize_games, summary_for


def _game(**overrides: Any) -> dict[str, Any]:
    game: dict[str, Any] = {
        "name": "vs Tigers",
        "captains": ["Ava"],
        "players": [
            {
                "name": "Ava",
                "quarters_sitting": [2],
                "positions_played": [
                    {"quarter": 1, "position": "Keeper"},
                    {"quarter": 3, "position": "Striker"},
                    {"quarter": 4, "position": "Left Back"},
                ],
                "keeper_quarter": 1,
            },
            {
                "name": "Ben",
                "quarters_sitting": [1, 3],
                "positions_played": [
                    {"quarter": 2, "position": "Striker"},
                    {"quarter": 4, "position": "Right Back"},
                ],
                "is_captain": True,
            },
            {"name": "Cal", "status": "injured"},
        ],
    }
    game.update(overrides)
    return game


class TestSummarizeGames:
    def test_counts_from_one_game(self):
        stats = summarize_games([_game()])

        ava = stats["Ava"]
        assert ava.games_played == 1
        assert ava.total_sitting == 1
        assert ava.goalkeeper_quarters == 1
        assert ava.captain_games == 1
        assert ava.position_counts == {"Keeper": 1, "Striker": 1, "Left Back": 1}

    def test_captain_flag_or_list(self):
        stats = summarize_games([_game()])

        assert stats["Ben"].captain_games == 1
        assert stats["Ben"].goalkeeper_quarters == 0

    def test_unavailable_player_not_counted_as_played(self):
        stats = summarize_games([_game()])

        assert stats["Cal"].games_played == 0
        assert stats["Cal"].avg_sitting == 0.0

    def test_accumulates_across_games(self):
        stats = summarize_games([_game(), GameRecord(**_game(captains=[]))])

        ben = stats["Ben"]
        assert ben.games_played == 2
        assert ben.total_sitting == 4
        assert ben.avg_sitting == 2.0
        assert ben.position_counts["Striker"] == 2
        assert stats["Ava"].captain_games == 1

    def test_keeper_counted_once_per_game(self):
        game = _game()
        game["players"][0]["positions_played"].append({"quarter": 2, "position": "Keeper"})

        stats = summarize_games([game])

        assert stats["Ava"].goalkeeper_quarters == 1

    def test_invalid_record_raises(self):
        with pytest.raises(ValidationError):
            summarize_games([{"players": [{"name": "Ava", "status": "retired"}]}])


class TestSeasonSummary:
    def test_position_share(self):
        s = SeasonSummary(games_played=2, position_counts={"Striker": 3, "Left Back": 1})

        assert s.position_share("Striker") == 0.75
        assert s.position_share("Keeper") == 0.0

    def test_position_share_without_history(self):
        assert SeasonSummary().position_share("Striker") is None

    def test_summary_for_missing_player(self):
        assert summary_for(None, "Ava") == SeasonSummary()
        assert summary_for({"Ben": SeasonSummary(games_played=1)}, "Ava").games_played == 0


class TestSeasonTotals:
    def test_attendance(self):
        absent = _game()
        absent["players"][1]["status"] = "absent"

        stats = summarize_games([_game(), absent, _game()])

        ben = stats["Ben"]
        assert ben.games_on_roster == 3
        assert ben.games_played == 2
        assert ben.games_absent == 1
        assert ben.attendance_pct == 67
        assert stats["Cal"].games_injured == 3
        assert stats["Cal"].attendance_pct == 0

    def test_quarters_and_roles(self):
        game = _game()
        game["players"][0].update({"quarters_played": [1, 3, 4], "defensive_quarters": 1, "offensive_quarters": 1})

        stats = summarize_games([game, game])

        ava = stats["Ava"]
        assert ava.total_quarters == 6
        assert ava.defensive_quarters == 2
        assert ava.offensive_quarters == 2
        assert ava.sitting_pct() == 25
        assert ava.top_positions(1) == [("Keeper", 2)]


class TestRecommendLineup:
    def _season(self) -> dict[str, SeasonSummary]:
        return {
            "Ava": SeasonSummary(games_played=4, total_sitting=2, goalkeeper_quarters=2, captain_games=1,
                                 defensive_quarters=6, offensive_quarters=2,
                                 position_counts={"Keeper": 2, "Left Back": 6}),
            "Ben": SeasonSummary(games_played=4, total_sitting=8, goalkeeper_quarters=0, captain_games=0,
                                 defensive_quarters=1, offensive_quarters=5,
                                 position_counts={"Striker": 4, "Left Wing": 1, "Right Back": 1}),
            "Cal": SeasonSummary(games_played=4, total_sitting=3, goalkeeper_quarters=0, captain_games=2,
                                 defensive_quarters=3, offensive_quarters=3,
                                 position_counts={"Striker": 2, "Center Mid": 2, "Left Back": 2, "Keeper": 0}),
        }

    def test_priorities(self):
        players = [Player("Ava"), Player("Ben"), Player("Cal", no_keeper=True)]

        rec = recommend_lineup(self._season(), players)

        assert rec is not None
        assert [r["name"] for r in rec.should_sit] == ["Ava", "Cal"]
        assert [r["name"] for r in rec.should_keep] == ["Ben"]
        assert [r["name"] for r in rec.should_captain] == ["Ben"]
        assert rec.needs_offense == [{"name": "Ava", "offense": 2, "defense": 6}]
        assert rec.needs_defense == [{"name": "Ben", "offense": 5, "defense": 1}]
        assert [r["name"] for r in rec.position_variety] == ["Ava", "Ben"]
        assert rec.position_variety[0]["top_positions"] == ["Left Back", "Keeper"]

    def test_unavailable_players_skipped(self):
        players = [Player("Ava", status=PlayerStatus.INJURED), Player("Ben"), Player("Cal")]

        rec = recommend_lineup(self._season(), players)

        assert rec is not None
        assert all(r["name"] != "Ava" for r in rec.to_dict()["should_sit"])
        assert rec.needs_offense == []

    def test_no_history_or_players(self):
        assert recommend_lineup({}, [Player("Ava")]) is None
        assert recommend_lineup(self._season(), [Player("Ava", status=PlayerStatus.ABSENT)]) is None
