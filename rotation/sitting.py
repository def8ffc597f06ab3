"""Sitting schedule: which players rest in each quarter."""

from __future__ import annotations

import json
import logging

from roster.models import Player
from roster.season import SeasonHistory, summary_for

from .randomizer import Randomizer

logger = logging.getLogger("rotation.sitting")

SittingSchedule = dict[int, list[str]]


def empty_schedule(quarters: int) -> SittingSchedule:
    return {q: [] for q in range(1, quarters + 1)}


def _season_sit_bucket(season: SeasonHistory | None, name: str) -> float:
    # average sitting rounded to the nearest half quarter
    return round(summary_for(season, name).avg_sitting * 2) / 2


class SittingScheduler:
    """Spread rest quarters evenly, never back to back when avoidable.

    Quarters are tried in block order (1..Q, or Q..1 for half of the
    attempts). Filling players into blocks in turn means a player's next sit
    lands at least two quarters after the previous one whenever the roster
    has at least twice as many players as rest slots per quarter.
    """

    def __init__(self, randomizer: Randomizer, quarters: int = 4) -> None:
        self.randomizer = randomizer
        self.quarters = quarters

    def schedule(
        self,
        players: list[Player],
        field_size: int,
        season: SeasonHistory | None = None,
    ) -> SittingSchedule:
        schedule = empty_schedule(self.quarters)
        total_players = len(players)
        per_quarter = total_players - field_size
        if per_quarter <= 0:
            return schedule

        order = list(range(1, self.quarters + 1))
        if self.randomizer.coin():
            order.reverse()

        sits: dict[str, list[int]] = {p.name: [] for p in players}
        must_rest = [p.name for p in players if p.must_rest]
        regular = [p.name for p in players if not p.must_rest]
        self._order_by_season(regular, season)

        total_slots = per_quarter * self.quarters
        min_sits, extra = divmod(total_slots, total_players)

        for name in must_rest:
            self._place(name, sits, schedule, per_quarter, order)

        combined = must_rest + regular
        for i in range(min_sits):
            for name in combined:
                if len(sits[name]) > i:
                    continue
                self._place(name, sits, schedule, per_quarter, order)

        extra_pool = list(combined)
        self._order_by_season(extra_pool, season)
        needed = min_sits + 1
        assigned = 0
        # every candidate gets a strict try before anyone sits back to back
        for relax in (False, True):
            for name in extra_pool:
                if assigned >= extra:
                    break
                if len(sits[name]) >= needed:
                    continue
                if relax:
                    if self._place(name, sits, schedule, per_quarter, order) is not None:
                        assigned += 1
                    continue
                quarter = self.find_quarter(sits[name], schedule, per_quarter, order)
                if quarter is None:
                    continue
                sits[name].append(quarter)
                schedule[quarter].append(name)
                assigned += 1

        return schedule

    def find_quarter(
        self,
        current: list[int],
        schedule: SittingSchedule,
        capacity: int,
        order: list[int],
        relax_adjacency: bool = False,
    ) -> int | None:
        """First quarter in ``order`` that has room and the player is not already sitting.

        Quarters next to one of ``current`` are rejected unless
        ``relax_adjacency`` is set.
        """
        for q in order:
            if len(schedule[q]) >= capacity or q in current:
                continue
            if not relax_adjacency and any(abs(s - q) == 1 for s in current):
                continue
            return q
        return None

    def _place(
        self,
        name: str,
        sits: dict[str, list[int]],
        schedule: SittingSchedule,
        capacity: int,
        order: list[int],
    ) -> int | None:
        """Give ``name`` one more sit; returns the quarter, or None if every quarter is full."""
        quarter = self.find_quarter(sits[name], schedule, capacity, order)
        if quarter is None:
            quarter = self.find_quarter(sits[name], schedule, capacity, order, relax_adjacency=True)
            if quarter is not None:
                self._log_relaxed(name, quarter, sits[name])
        if quarter is None:
            quarter = self._swap_into(name, sits, schedule, capacity, order)
        if quarter is None:
            logger.warning(json.dumps({"event": "sit_unplaced", "player": name, "sits": sits[name]}))
            return None
        sits[name].append(quarter)
        schedule[quarter].append(name)
        return quarter

    def _swap_into(
        self,
        name: str,
        sits: dict[str, list[int]],
        schedule: SittingSchedule,
        capacity: int,
        order: list[int],
    ) -> int | None:
        """Free a slot for ``name`` in a full quarter it is not sitting.

        Every quarter with room already holds ``name``, so another sitter of
        a full quarter moves to one of those open quarters. A full quarter
        always holds someone missing from a quarter with room, which makes
        the move possible whenever any quarter has room.
        """
        current = sits[name]
        open_quarters = [q for q in order if len(schedule[q]) < capacity]
        if not open_quarters:
            return None
        for relax in (False, True):
            for q in order:
                if q in current or len(schedule[q]) < capacity:
                    continue
                if not relax and any(abs(s - q) == 1 for s in current):
                    continue
                for other in schedule[q]:
                    rest = [s for s in sits[other] if s != q]
                    target = self.find_quarter(rest, schedule, capacity, open_quarters, relax)
                    if target is None:
                        continue
                    schedule[q].remove(other)
                    sits[other].remove(q)
                    sits[other].append(target)
                    schedule[target].append(other)
                    logger.debug(json.dumps({
                        "event": "sit_swapped",
                        "player": name,
                        "moved": other,
                        "from": q,
                        "to": target,
                    }))
                    return q
        return None

    def _order_by_season(self, names: list[str], season: SeasonHistory | None) -> None:
        # players who sat least this season go first
        names.sort(key=lambda n: summary_for(season, n).avg_sitting)
        self.randomizer.shuffle_within_groups(names, lambda n: _season_sit_bucket(season, n))

    @staticmethod
    def _log_relaxed(name: str, quarter: int, current: list[int]) -> None:
        logger.debug(json.dumps({
            "event": "sitting_adjacency_relaxed",
            "player": name,
            "quarter": quarter,
            "sits": sorted(current),
        }))
