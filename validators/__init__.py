"""Rotation validation module."""

from .lineup_rules import validate_lineup, validate_lineup_simple
from .types import Rules, Severity, ValidationResult, Violation, ViolationRule

__all__ = [
    "validate_lineup",
    "validate_lineup_simple",
    "Rules",
    "Severity",
    "ValidationResult",
    "Violation",
    "ViolationRule",
]
