from __future__ import annotations

from collections import Counter

import pytest

from roster.models import Player
from roster.season import SeasonSummary
from rotation.randomizer import Randomizer
from rotation.sitting import SittingScheduler, empty_schedule

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

FIELD_SIZES = [5, 6, 7, 9, 11]


def _roster(n: int) -> list[Player]:
    return [Player(f"P{i:02d}", number=i) for i in range(1, n + 1)]


def _sit_counts(schedule: dict[int, list[str]]) -> Counter:
    return Counter(name for names in schedule.values() for name in names)


def _assert_no_adjacent(schedule: dict[int, list[str]]) -> None:
    for q in range(1, len(schedule)):
        assert not set(schedule[q]) & set(schedule[q + 1]), (q, schedule)


def test_ten_players_seven_on_field() -> None:
    schedule = SittingScheduler(Randomizer(3)).schedule(_roster(10), 7)

    assert all(len(names) == 3 for names in schedule.values())
    counts = Counter(_sit_counts(schedule).values())
    assert counts == {1: 8, 2: 2}
    _assert_no_adjacent(schedule)


def test_full_roster_on_field_means_nobody_sits() -> None:
    schedule = SittingScheduler(Randomizer(1)).schedule(_roster(7), 7)

    assert schedule == empty_schedule(4)


def test_short_roster_returns_empty_schedule() -> None:
    schedule = SittingScheduler(Randomizer(1)).schedule(_roster(5), 7)

    assert schedule == {1: [], 2: [], 3: [], 4: []}


def test_must_rest_players_always_sit() -> None:
    roster = _roster(8)
    roster[5] = Player("Resty", must_rest=True)
    for seed in range(20):
        schedule = SittingScheduler(Randomizer(seed)).schedule(roster, 7)
        assert _sit_counts(schedule)["Resty"] >= 1


def test_season_bias_gives_extra_sit_to_least_rested() -> None:
    # 10 players, 3 sit per quarter: two players sit twice
    roster = _roster(10)
    season = {p.name: SeasonSummary(games_played=4, total_sitting=8) for p in roster}
    season["P01"] = SeasonSummary(games_played=4, total_sitting=0)
    season["P02"] = SeasonSummary(games_played=4, total_sitting=1)

    for seed in range(10):
        schedule = SittingScheduler(Randomizer(seed)).schedule(roster, 7, season)
        counts = _sit_counts(schedule)
        twice = sorted(name for name, c in counts.items() if c == 2)
        assert twice == ["P01", "P02"], seed


def test_same_seed_same_schedule() -> None:
    a = SittingScheduler(Randomizer(11)).schedule(_roster(12), 9)
    b = SittingScheduler(Randomizer(11)).schedule(_roster(12), 9)

    assert a == b


def test_find_quarter_rules() -> None:
    scheduler = SittingScheduler(Randomizer(0))
    schedule = {1: ["A"], 2: [], 3: [], 4: []}

    # quarter 1 full, 2 adjacent to an existing sit at 1
    assert scheduler.find_quarter([1], schedule, 1, [1, 2, 3, 4]) == 3
    assert scheduler.find_quarter([2, 4], schedule, 1, [1, 2, 3, 4]) is None
    assert scheduler.find_quarter([2, 4], schedule, 2, [1, 2, 3, 4]) is None
    assert scheduler.find_quarter([2], schedule, 2, [1, 2, 3, 4], relax_adjacency=True) == 1


@st.composite
def feasible_rosters(draw):
    field_size = draw(st.sampled_from(FIELD_SIZES))
    low = max(8, field_size)
    high = min(30, 2 * field_size)
    size = draw(st.integers(min_value=low, max_value=high))
    must_rest = draw(st.sets(st.integers(min_value=0, max_value=size - 1), max_size=2))
    roster = [
        Player(f"P{i:02d}", must_rest=i in must_rest) for i in range(size)
    ]
    return roster, field_size


@settings(max_examples=150, deadline=None)
@given(case=feasible_rosters(), seed=st.integers(min_value=0, max_value=2**16))
def test_schedule_properties(case, seed) -> None:
    roster, field_size = case
    schedule = SittingScheduler(Randomizer(seed)).schedule(roster, field_size)
    per_quarter = len(roster) - field_size

    assert sorted(schedule) == [1, 2, 3, 4]
    assert all(len(names) == per_quarter for names in schedule.values())
    assert all(len(set(names)) == len(names) for names in schedule.values())
    _assert_no_adjacent(schedule)

    counts = _sit_counts(schedule)
    values = [counts.get(p.name, 0) for p in roster]
    assert max(values) <= 2
    assert max(values) - min(values) <= 1
    for p in roster:
        if p.must_rest and per_quarter > 0:
            assert counts[p.name] >= 1


@pytest.mark.parametrize("field_size", FIELD_SIZES)
def test_every_quarter_full_on_large_rosters(field_size) -> None:
    # past 3x the field size the greedy fill runs out of open quarters
    for size in range(max(8, field_size + 1), 31):
        roster = _roster(size)
        per_quarter = size - field_size
        min_sits, extra = divmod(per_quarter * 4, size)
        for seed in range(5):
            schedule = SittingScheduler(Randomizer(seed)).schedule(roster, field_size)

            assert all(len(names) == per_quarter for names in schedule.values()), (size, seed)
            assert all(len(set(names)) == len(names) for names in schedule.values()), (size, seed)
            counts = Counter(_sit_counts(schedule).get(p.name, 0) for p in roster)
            assert set(counts) <= {min_sits, min_sits + 1}, (size, seed, counts)
            assert counts.get(min_sits + 1, 0) == extra, (size, seed, counts)


def test_swap_makes_room_when_open_quarters_are_taken() -> None:
    # one slot left in Q2, and P1 already sits there
    scheduler = SittingScheduler(Randomizer(0))
    schedule = {1: ["P2", "P3"], 2: ["P1"], 3: ["P4", "P5"], 4: ["P6", "P7"]}
    sits = {"P1": [2], "P2": [1], "P3": [1], "P4": [3], "P5": [3], "P6": [4], "P7": [4]}

    quarter = scheduler._place("P1", sits, schedule, 2, [1, 2, 3, 4])

    assert quarter == 4
    assert "P1" in schedule[4]
    assert all(len(names) == 2 for names in schedule.values())
    assert sorted(sits["P1"]) == [2, 4]
    assert sum(len(v) for v in sits.values()) == 8
