"""Run a rotation search off the caller's thread.

The search itself stays synchronous; this only wraps it in a
``concurrent.futures`` executor and exposes a pollable attempt counter.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from roster.formations import Formation, custom_formation
from roster.models import Player
from roster.season import SeasonHistory

from .engine import RotationResult, check_preconditions, generate_rotation, resolve_settings
from .types import RotationSettings


@dataclass
class RotationJob:
    future: Future
    max_attempts: int
    best_violations: int | None = None
    _attempts: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def attempts_completed(self) -> int:
        with self._lock:
            return self._attempts

    def _on_progress(self, attempt: int, max_attempts: int, best_violations: int) -> None:
        with self._lock:
            self._attempts = attempt
            self.best_violations = best_violations

    def _on_done(self, future: Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        result: RotationResult = future.result()
        with self._lock:
            self._attempts = result.attempts
            self.best_violations = len(result.violations)

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> RotationResult:
        return self.future.result(timeout=timeout)


def submit_rotation(
    players: Sequence[Player],
    formation: Formation | Sequence[str],
    *,
    season: SeasonHistory | None = None,
    settings: RotationSettings | None = None,
    executor: Executor | None = None,
    **overrides: Any,
) -> RotationJob:
    """Start a search and return immediately.

    Preconditions are checked on the calling thread, so a bad roster raises
    ``RotationError`` here rather than from ``job.result()``. Without an
    ``executor`` a single-use thread runs the search. Process pools get no
    live progress; the counter is filled in when the result arrives.

    Raises:
        RotationError: if the roster, formation or settings fail preconditions
    """
    if not isinstance(formation, Formation):
        formation = custom_formation(list(formation))
    resolved = resolve_settings(settings, **overrides)
    check_preconditions(players, formation, resolved)

    in_process = isinstance(executor, ProcessPoolExecutor)
    owned = executor is None
    pool: Executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="rotation")

    job = RotationJob(future=Future(), max_attempts=resolved.max_attempts)
    if in_process:
        future = pool.submit(generate_rotation, list(players), formation, season=season, settings=resolved)
    else:
        # report every attempt so pollers see steady movement
        live = resolve_settings(resolved, progress_every=1)
        future = pool.submit(
            generate_rotation,
            list(players),
            formation,
            season=season,
            settings=live,
            on_progress=job._on_progress,
        )
    job.future = future
    future.add_done_callback(job._on_done)
    if owned:
        pool.shutdown(wait=False)
    return job
