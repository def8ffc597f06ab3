"""Core rotation validation rules."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from roster.formations import KEEPER
from roster.models import Player, PlayerGameState

from .types import Rules, ValidationResult, Violation, ViolationRule


def validate_lineup(
    states: Mapping[str, PlayerGameState],
    rules: Rules | None = None,
    players: Sequence[Player] | None = None,
) -> ValidationResult:
    """Validate the finished per-player state of one generated lineup.

    Pure function with no I/O dependencies; it only reads ``states``.

    Args:
        states: Accumulators keyed by player name, in roster order
        rules: Rules configuration object (defaults if omitted)
        players: Static roster records; enables the preference checks

    Returns:
        ValidationResult listing violations in roster order, then rule order
    """
    rules = rules or Rules()
    by_name = {p.name: p for p in players or []}
    violations: list[Violation] = []

    for name, state in states.items():
        violations.extend(_player_violations(name, state, rules, by_name.get(name)))

    return ValidationResult(valid=not violations, violations=violations)


def _player_violations(
    name: str,
    state: PlayerGameState,
    rules: Rules,
    player: Player | None,
) -> list[Violation]:
    out: list[Violation] = []

    keeper_quarters = state.times_played(KEEPER)
    if keeper_quarters > rules.max_keeper_quarters:
        out.append(Violation(
            name, ViolationRule.KEEPER_LIMIT,
            f"{name} is playing keeper for {keeper_quarters} quarters (max {rules.max_keeper_quarters})",
        ))

    sitting = sorted(state.quarters_sitting)
    for prev, nxt in zip(sitting, sitting[1:]):
        if nxt - prev == 1:
            out.append(Violation(
                name, ViolationRule.CONSECUTIVE_SITTING,
                f"{name} sits consecutively in quarters {prev} and {nxt}",
            ))

    if len(sitting) > rules.max_sitting_quarters:
        out.append(Violation(
            name, ViolationRule.SITTING_LIMIT,
            f"{name} sits for {len(sitting)} quarters (max {rules.max_sitting_quarters})",
        ))

    d, o = state.defensive_quarters, state.offensive_quarters
    if state.quarters_played:
        if d == 0:
            out.append(Violation(name, ViolationRule.NO_DEFENSE, f"{name} never played defense"))
        if o == 0:
            out.append(Violation(name, ViolationRule.NO_OFFENSE, f"{name} never played offense"))
        if state.role_imbalance > rules.max_role_imbalance:
            out.append(Violation(
                name, ViolationRule.ROLE_IMBALANCE,
                f"{name} has D/O imbalance of {state.role_imbalance} (D:{d} / O:{o})",
            ))

    counts: dict[str, int] = {}
    for _, position in state.positions_played:
        counts[position] = counts.get(position, 0) + 1
    for position, count in counts.items():
        if count > 1:
            out.append(Violation(
                name, ViolationRule.REPEATED_POSITION,
                f"{name} plays {position} {count} times (each position only once)",
            ))

    if player is not None:
        if rules.check_keeper_preference and player.no_keeper and keeper_quarters > 0:
            out.append(Violation(
                name, ViolationRule.KEEPER_PREFERENCE,
                f"{name} asked not to play keeper but kept in quarter {state.keeper_quarter}",
            ))
        if rules.check_must_rest and player.must_rest and not sitting:
            out.append(Violation(name, ViolationRule.MUST_REST, f"{name} must rest but never sat"))

    return out


def validate_lineup_simple(
    states: Mapping[str, PlayerGameState],
    max_sitting_quarters: int = 2,
    max_role_imbalance: int = 1,
) -> bool:
    """Simple boolean validation for callers that only need a verdict."""
    rules = Rules(max_sitting_quarters=max_sitting_quarters, max_role_imbalance=max_role_imbalance)
    return validate_lineup(states, rules).valid
