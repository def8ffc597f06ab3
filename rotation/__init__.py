"""Lineup rotation engine: sitting schedule, position assignment and retry search."""

from .captains import CaptainRotator
from .engine import (
    LineupCandidate,
    RotationEngine,
    RotationResult,
    check_preconditions,
    generate_rotation,
)
from .positions import KeeperSelector, PositionAssigner
from .randomizer import Randomizer
from .sitting import SittingSchedule, SittingScheduler
from .types import ErrorCodes, RotationError, RotationSettings, ScoringWeights
from .worker import RotationJob, submit_rotation

__all__ = [
    "CaptainRotator",
    "ErrorCodes",
    "KeeperSelector",
    "LineupCandidate",
    "PositionAssigner",
    "Randomizer",
    "RotationEngine",
    "RotationError",
    "RotationJob",
    "RotationResult",
    "RotationSettings",
    "ScoringWeights",
    "SittingSchedule",
    "SittingScheduler",
    "check_preconditions",
    "generate_rotation",
    "submit_rotation",
]
