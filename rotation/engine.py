from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields, replace
from typing import Any

from roster.formations import Formation, custom_formation
from roster.models import Player, QuarterLineup, RosterState, fresh_state
from roster.season import SeasonHistory
from validators import ValidationResult, Violation, validate_lineup

from .captains import CaptainRotator
from .positions import PositionAssigner
from .randomizer import Randomizer
from .sitting import SittingSchedule, SittingScheduler
from .types import ErrorCodes, RotationError, RotationSettings

logger = logging.getLogger("rotation.engine")

# (attempt, max_attempts, best violation count so far)
ProgressFn = Callable[[int, int, int], None]


@dataclass
class LineupCandidate:
    attempt: int
    lineup: list[QuarterLineup]
    states: RosterState
    schedule: SittingSchedule
    validation: ValidationResult

    @property
    def violation_count(self) -> int:
        return len(self.validation.violations)


@dataclass
class RotationResult:
    """Best lineup found by a search, with everything needed to persist it."""

    lineup: list[QuarterLineup]
    violations: list[Violation]
    attempts: int
    states: RosterState
    schedule: SittingSchedule
    captains: list[str]
    players: list[Player]
    formation: Formation
    seed: int
    accepted: bool = False

    @property
    def valid(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "seed": self.seed,
            "attempts": self.attempts,
            "accepted": self.accepted,
            "formation": {
                "name": self.formation.name,
                "field_size": self.formation.field_size,
                "positions": list(self.formation.positions),
            },
            "quarters": [q.to_dict() for q in self.lineup],
            "sitting_schedule": {str(q): list(names) for q, names in self.schedule.items()},
            "captains": list(self.captains),
            "violations": [v.to_dict() for v in self.violations],
            "players": {name: s.to_dict() for name, s in self.states.items()},
        }

    def to_record(self, name: str | None = None) -> dict[str, Any]:
        """Saved-game record, the shape ``roster.season.GameRecord`` reads back."""
        players: list[dict[str, Any]] = []
        for p in self.players:
            entry: dict[str, Any] = {
                "name": p.name,
                "number": p.number,
                "status": p.status.value,
                "is_captain": p.name in self.captains,
            }
            state = self.states.get(p.name)
            if state is not None:
                entry.update(state.to_dict())
            players.append(entry)
        return {"name": name, "captains": list(self.captains), "players": players}


def check_preconditions(
    players: Sequence[Player],
    formation: Formation,
    settings: RotationSettings,
) -> None:
    """Reject inputs no search could satisfy.

    Raises:
        RotationError: with the matching ``ErrorCodes`` member
    """
    if settings.quarters < 1:
        raise RotationError(ErrorCodes.INVALID_PARAMS, f"quarters must be >= 1, got {settings.quarters}")
    if settings.max_attempts < 1:
        raise RotationError(
            ErrorCodes.INVALID_PARAMS, f"max_attempts must be >= 1, got {settings.max_attempts}"
        )

    positions = list(formation.positions)
    if not positions:
        raise RotationError(ErrorCodes.INVALID_FORMATION, f"Formation {formation.name!r} has no positions")
    dupes = sorted({p for p in positions if positions.count(p) > 1})
    if dupes:
        raise RotationError(
            ErrorCodes.INVALID_FORMATION,
            f"Formation {formation.name!r} repeats positions: {dupes}",
            details={"positions": dupes},
        )
    if len(positions) != formation.field_size:
        raise RotationError(
            ErrorCodes.INVALID_FORMATION,
            f"Formation {formation.name!r} has {len(positions)} positions for field size {formation.field_size}",
        )

    seen: set[str] = set()
    numbers: dict[int, str] = {}
    for p in players:
        if p.name in seen:
            raise RotationError(
                ErrorCodes.DUPLICATE_PLAYER, f"Duplicate player name {p.name!r}", details={"name": p.name}
            )
        seen.add(p.name)
        if p.number is not None:
            if p.number in numbers:
                raise RotationError(
                    ErrorCodes.DUPLICATE_PLAYER,
                    f"Jersey #{p.number} used by {numbers[p.number]!r} and {p.name!r}",
                    details={"number": p.number},
                )
            numbers[p.number] = p.name

    available = sum(1 for p in players if p.is_available)
    if available < formation.field_size:
        raise RotationError(
            ErrorCodes.NOT_ENOUGH_PLAYERS,
            f"{available} available players for a field of {formation.field_size}",
            user_message=f"Need at least {formation.field_size} available players, have {available}.",
            details={"available": available, "field_size": formation.field_size},
        )


class RotationEngine:
    """Retry search over randomized lineups, keeping the best candidate."""

    def __init__(
        self,
        players: Sequence[Player],
        formation: Formation,
        season: SeasonHistory | None = None,
        settings: RotationSettings | None = None,
    ) -> None:
        self.settings = settings or RotationSettings()
        self.roster = list(players)
        self.players = [p for p in self.roster if p.is_available]
        self.formation = formation
        self.season = season
        seed = self.settings.seed
        if seed is None:
            seed = random.randrange(2**32)
        self.randomizer = Randomizer(seed)
        self.scheduler = SittingScheduler(self.randomizer, self.settings.quarters)
        self.assigner = PositionAssigner(self.randomizer, self.settings.weights)
        self.captain_rotator = CaptainRotator(self.randomizer, self.settings.max_captains)

    @property
    def seed(self) -> int:
        return int(self.randomizer.seed)

    def _rank(self, candidate: LineupCandidate) -> tuple[int, ...]:
        if self.settings.rank_by_severity:
            return (candidate.validation.hard_count, candidate.violation_count)
        return (candidate.violation_count,)

    def _run_attempt(self, attempt: int) -> LineupCandidate:
        states = fresh_state(self.players)
        planned = self.scheduler.schedule(self.players, self.formation.field_size, self.season)
        lineup: list[QuarterLineup] = []
        for quarter in range(1, self.settings.quarters + 1):
            sitting = planned[quarter]
            playing = [p for p in self.players if p.name not in sitting]
            q = self.assigner.assign_quarter(quarter, playing, self.formation, states, self.season)
            q.sitting = list(sitting) + q.sitting
            for name in q.sitting:
                states[name].quarters_sitting.append(quarter)
            lineup.append(q)
        # benched overflow players count as sitting
        schedule = {q.quarter: list(q.sitting) for q in lineup}
        validation = validate_lineup(states, self.settings.rules, self.players)
        return LineupCandidate(attempt, lineup, states, schedule, validation)

    def generate(self, on_progress: ProgressFn | None = None) -> RotationResult:
        max_attempts = self.settings.max_attempts
        every = max(1, self.settings.progress_every)
        attempts = 1
        candidate = best = self._run_attempt(attempts)
        while True:
            if self._rank(candidate) < self._rank(best):
                best = candidate
            accepted = candidate.validation.valid
            if on_progress is not None and (accepted or attempts % every == 0 or attempts == max_attempts):
                on_progress(attempts, max_attempts, best.violation_count)
            if accepted or attempts >= max_attempts:
                break
            attempts += 1
            candidate = self._run_attempt(attempts)

        captains = self.captain_rotator.select(self.players, self.season)
        logger.info(json.dumps({
            "event": "rotation_generated",
            "seed": self.seed,
            "attempts": attempts,
            "accepted": accepted,
            "best_attempt": best.attempt,
            "violations": best.violation_count,
        }))
        if not accepted:
            logger.warning(json.dumps({
                "event": "rotation_best_effort",
                "violations": [v.to_dict() for v in best.validation.violations],
            }))
        return RotationResult(
            lineup=best.lineup,
            violations=list(best.validation.violations),
            attempts=attempts,
            states=best.states,
            schedule=best.schedule,
            captains=captains,
            players=self.roster,
            formation=self.formation,
            seed=self.seed,
            accepted=accepted,
        )


def resolve_settings(settings: RotationSettings | None = None, **overrides: Any) -> RotationSettings:
    base = settings or RotationSettings()
    names = {f.name for f in fields(base)}
    unknown = sorted(k for k in overrides if k not in names)
    if unknown:
        raise RotationError(ErrorCodes.INVALID_PARAMS, f"Unknown rotation settings: {unknown}")
    return replace(base, **{k: v for k, v in overrides.items() if v is not None})


def generate_rotation(
    players: Sequence[Player],
    formation: Formation | Sequence[str],
    *,
    season: SeasonHistory | None = None,
    settings: RotationSettings | None = None,
    on_progress: ProgressFn | None = None,
    **overrides: Any,
) -> RotationResult:
    """Generate a full-game rotation for ``players``.

    Keyword overrides (``quarters``, ``max_attempts``, ``seed`` ...) replace
    the matching ``RotationSettings`` fields.

    Raises:
        RotationError: if the roster, formation or settings fail preconditions
    """
    if not isinstance(formation, Formation):
        formation = custom_formation(list(formation))
    resolved = resolve_settings(settings, **overrides)
    check_preconditions(players, formation, resolved)
    engine = RotationEngine(players, formation, season=season, settings=resolved)
    return engine.generate(on_progress)
