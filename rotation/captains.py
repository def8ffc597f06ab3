from __future__ import annotations

from roster.models import Player
from roster.season import SeasonHistory, summary_for

from .randomizer import Randomizer


class CaptainRotator:
    """Pick captains, favoring players who have captained the fewest games."""

    def __init__(self, randomizer: Randomizer, max_captains: int = 2) -> None:
        self.randomizer = randomizer
        self.max_captains = max_captains

    def select(self, players: list[Player], season: SeasonHistory | None = None) -> list[str]:
        tiers: dict[int, list[str]] = {}
        for p in players:
            if not p.is_available:
                continue
            tiers.setdefault(summary_for(season, p.name).captain_games, []).append(p.name)

        captains: list[str] = []
        for count in sorted(tiers):
            group = tiers[count]
            self.randomizer.shuffle(group)
            for name in group:
                if len(captains) >= self.max_captains:
                    return captains
                captains.append(name)
        return captains
