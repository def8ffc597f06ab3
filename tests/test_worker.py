from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from roster.formations import get_formation
from roster.models import Player
from rotation.types import ErrorCodes, RotationError
from rotation.worker import submit_rotation


def _roster(n: int) -> list[Player]:
    return [Player(f"P{i:02d}") for i in range(1, n + 1)]


def test_default_executor_runs_search() -> None:
    job = submit_rotation(_roster(10), get_formation(7), seed=7)

    result = job.result(timeout=60)

    assert job.done()
    assert result.seed == 7
    assert job.attempts_completed == result.attempts
    assert job.max_attempts == 500
    assert job.best_violations == len(result.violations)


def test_matches_synchronous_run() -> None:
    from rotation.engine import generate_rotation

    expected = generate_rotation(_roster(11), get_formation(7), seed=3)
    with ThreadPoolExecutor(max_workers=2) as pool:
        job = submit_rotation(_roster(11), get_formation(7), seed=3, executor=pool)
        result = job.result(timeout=60)

    assert result.to_dict() == expected.to_dict()


def test_counter_moves_with_every_attempt() -> None:
    from validators import Rules

    job = submit_rotation(_roster(10), get_formation(7), seed=1, max_attempts=25, rules=Rules(max_sitting_quarters=0))

    result = job.result(timeout=60)

    assert result.attempts == 25
    assert job.attempts_completed == 25


def test_preconditions_raise_before_submit() -> None:
    with pytest.raises(RotationError) as ei:
        submit_rotation(_roster(5), get_formation(7))

    assert ei.value.code == ErrorCodes.NOT_ENOUGH_PLAYERS
