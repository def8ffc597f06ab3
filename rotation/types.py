from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from validators.types import Rules, coerce_like

DEFAULT_QUARTERS = 4
MAX_GENERATION_ATTEMPTS = 500
MAX_CAPTAINS = 2
PROGRESS_EVERY = 50


class ErrorCodes(str, Enum):
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    INVALID_FORMATION = "INVALID_FORMATION"
    DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
    INVALID_PARAMS = "INVALID_PARAMS"
    CONFIG_ERROR = "CONFIG_ERROR"


class RotationError(Exception):
    def __init__(
        self,
        code: ErrorCodes,
        message: str,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.user_message = user_message or message
        self.details = details or {}


@dataclass
class ScoringWeights:
    # tiers: no-repeat > role imbalance > season variety > jitter
    repeat_penalty: float = 1000.0
    balance_reward: float = 100.0
    imbalance_penalty: float = 200.0
    variety_bonus: float = 200.0
    neutral_variety: float = 100.0
    jitter: float = 5.0

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> ScoringWeights:
        if not d:
            return cls()
        defaults = cls().__dict__
        return cls(**{k: coerce_like(defaults[k], v, k) for k, v in d.items() if k in defaults})


@dataclass
class RotationSettings:
    quarters: int = DEFAULT_QUARTERS
    max_attempts: int = MAX_GENERATION_ATTEMPTS
    max_captains: int = MAX_CAPTAINS
    progress_every: int = PROGRESS_EVERY
    # flat violation count unless enabled; then (hard count, total count)
    rank_by_severity: bool = False
    seed: int | None = None
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    rules: Rules = field(default_factory=Rules)

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> RotationSettings:
        if not d:
            return cls()
        defaults = cls()
        known: dict[str, Any] = {}
        for k in ("quarters", "max_attempts", "max_captains", "progress_every", "rank_by_severity"):
            if k in d:
                known[k] = coerce_like(getattr(defaults, k), d[k], k)
        if d.get("seed") is not None:
            known["seed"] = coerce_like(0, d["seed"], "seed")
        for section in ("weights", "rules"):
            if d.get(section) is not None and not isinstance(d[section], dict):
                raise ValueError(f"{section} must be a mapping, got {d[section]!r}")
        return cls(
            **known,
            weights=ScoringWeights.from_dict(d.get("weights")),
            rules=Rules.from_dict(d.get("rules")),
        )
