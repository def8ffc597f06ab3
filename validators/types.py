"""Types and models for rotation validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

class ViolationRule(Enum):
    """Enumerated codes for rotation rule failures."""

    KEEPER_LIMIT = "keeper_limit"
    CONSECUTIVE_SITTING = "consecutive_sitting"
    SITTING_LIMIT = "sitting_limit"
    NO_DEFENSE = "no_defense"
    NO_OFFENSE = "no_offense"
    ROLE_IMBALANCE = "role_imbalance"
    REPEATED_POSITION = "repeated_position"
    KEEPER_PREFERENCE = "keeper_preference"
    MUST_REST = "must_rest"

class Severity(Enum):
    HARD = "hard"
    SOFT = "soft"

RULE_SEVERITY: dict[ViolationRule, Severity] = {
    ViolationRule.KEEPER_LIMIT: Severity.HARD,
    ViolationRule.CONSECUTIVE_SITTING: Severity.HARD,
    ViolationRule.SITTING_LIMIT: Severity.HARD,
    ViolationRule.NO_DEFENSE: Severity.SOFT,
    ViolationRule.NO_OFFENSE: Severity.SOFT,
    ViolationRule.ROLE_IMBALANCE: Severity.SOFT,
    ViolationRule.REPEATED_POSITION: Severity.SOFT,
    ViolationRule.KEEPER_PREFERENCE: Severity.HARD,
    ViolationRule.MUST_REST: Severity.HARD,
}

@dataclass(frozen=True)
class Violation:
    """One broken rule for one player."""

    player: str
    rule: ViolationRule
    detail: str

    @property
    def severity(self) -> Severity:
        return RULE_SEVERITY[self.rule]

    def to_dict(self) -> dict[str, Any]:
        return {
            "player": self.player,
            "rule": self.rule.value,
            "severity": self.severity.value,
            "detail": self.detail,
        }

def coerce_like(default: Any, value: Any, name: str) -> Any:
    """Convert a config value to the type of the field default it replaces.

    Raises:
        ValueError: if ``value`` cannot be read as that type
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "yes", "1"):
            return True
        if text in ("false", "no", "0"):
            return False
        raise ValueError(f"{name} must be true or false, got {value!r}")
    if isinstance(default, (int, float)):
        kind = type(default)
        if isinstance(value, bool):
            raise ValueError(f"{name} must be a number, got {value!r}")
        try:
            return kind(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name} must be {'an integer' if kind is int else 'a number'}, got {value!r}") from e
    return value

@dataclass
class Rules:
    """Configuration for rotation validation rules."""

    max_keeper_quarters: int = 1
    max_sitting_quarters: int = 2
    max_role_imbalance: int = 1

    # preference checks for the generation fallbacks
    check_keeper_preference: bool = True
    check_must_rest: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> Rules:
        if not d:
            return cls()
        defaults = cls().__dict__
        return cls(**{k: coerce_like(defaults[k], v, k) for k, v in d.items() if k in defaults})

@dataclass
class ValidationResult:
    """Result of rotation validation with per-player diagnostics."""

    valid: bool
    violations: list[Violation] = field(default_factory=list)

    @property
    def hard_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.HARD)

    def rules(self) -> list[ViolationRule]:
        return [v.rule for v in self.violations]
