"""Per-quarter position assignment and keeper selection."""

from __future__ import annotations

import json
import logging

from roster.formations import KEEPER, Formation, is_defensive
from roster.models import Player, PlayerGameState, QuarterLineup, RosterState
from roster.season import SeasonHistory, SeasonSummary, summary_for

from .randomizer import Randomizer
from .types import ScoringWeights

logger = logging.getLogger("rotation.positions")


def record_position(state: PlayerGameState, quarter: int, position: str) -> None:
    """Apply one quarter at ``position`` to a player's accumulators."""
    state.quarters_played.append(quarter)
    state.positions_played.append((quarter, position))
    if position == KEEPER:
        state.keeper_quarter = quarter
    if is_defensive(position):
        state.defensive_quarters += 1
    else:
        state.offensive_quarters += 1


class KeeperSelector:
    """Pick the quarter's keeper, rotating the role across the season."""

    def __init__(self, randomizer: Randomizer) -> None:
        self.randomizer = randomizer

    def select(
        self,
        playing: list[Player],
        states: RosterState,
        season: SeasonHistory | None = None,
    ) -> Player | None:
        if not playing:
            return None
        pool = [p for p in playing if not p.no_keeper]
        if not pool:
            logger.debug(json.dumps({
                "event": "keeper_pool_widened",
                "players": [p.name for p in playing],
            }))
            pool = list(playing)

        fresh = [p for p in pool if states[p.name].keeper_quarter is None]
        if not fresh:
            return pool[0]

        lowest = min(summary_for(season, p.name).goalkeeper_quarters for p in fresh)
        group = [p for p in fresh if summary_for(season, p.name).goalkeeper_quarters == lowest]
        return self.randomizer.choice(group)


class PositionAssigner:
    """Fill a quarter's positions greedily from scored (player, position) pairs."""

    def __init__(
        self,
        randomizer: Randomizer,
        weights: ScoringWeights | None = None,
        keeper_selector: KeeperSelector | None = None,
    ) -> None:
        self.randomizer = randomizer
        self.weights = weights or ScoringWeights()
        self.keeper_selector = keeper_selector or KeeperSelector(randomizer)

    def assign_quarter(
        self,
        quarter: int,
        playing: list[Player],
        formation: Formation,
        states: RosterState,
        season: SeasonHistory | None = None,
    ) -> QuarterLineup:
        """Assign ``playing`` to the formation for one quarter.

        Mutates the assigned players' accumulators in ``states``. Players left
        over once every position is filled are returned in ``sitting``.
        """
        lineup = QuarterLineup(quarter=quarter)
        remaining = list(playing)
        positions = list(formation.positions)

        if KEEPER in positions:
            keeper = self.keeper_selector.select(remaining, states, season)
            if keeper is not None:
                lineup.positions[KEEPER] = keeper.name
                record_position(states[keeper.name], quarter, KEEPER)
                remaining.remove(keeper)
                positions.remove(KEEPER)

        self.randomizer.shuffle(positions)
        for position in positions:
            if not remaining:
                break
            defensive = is_defensive(position)
            # max() keeps the first of equal scores
            best = max(
                remaining,
                key=lambda p: self.score(states[p.name], position, defensive, summary_for(season, p.name)),
            )
            lineup.positions[position] = best.name
            record_position(states[best.name], quarter, position)
            remaining.remove(best)

        unfilled = [p for p in positions if p not in lineup.positions]
        if unfilled:
            logger.warning(json.dumps({"event": "positions_unfilled", "quarter": quarter, "positions": unfilled}))
        if remaining:
            logger.debug(json.dumps({
                "event": "players_benched",
                "quarter": quarter,
                "players": [p.name for p in remaining],
            }))
            lineup.sitting = [p.name for p in remaining]
        return lineup

    def score(
        self,
        state: PlayerGameState,
        position: str,
        defensive: bool,
        summary: SeasonSummary,
    ) -> float:
        w = self.weights
        score = 0.0

        times = state.times_played(position)
        if times:
            score -= w.repeat_penalty * times

        d, o = state.defensive_quarters, state.offensive_quarters
        current = abs(d - o)
        if defensive:
            projected = abs(d + 1 - o)
            score += (o - d) * w.balance_reward
        else:
            projected = abs(d - (o + 1))
            score += (d - o) * w.balance_reward
        if projected > current:
            score -= w.imbalance_penalty * (projected - current)

        share = summary.position_share(position)
        if share is None:
            score += w.neutral_variety
        else:
            score += (1 - share) * w.variety_bonus

        if w.jitter > 0:
            score += self.randomizer.uniform(0, w.jitter)
        return score
