"""
Tests for round-robin schedule generation.
Deterministic; every pair exactly once; at most one game per team per round.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from league_admin.services.scheduling import (
    BYE_ID,
    DuplicateTeamError,
    InsufficientTeamsError,
    InvalidPolicyError,
    SchedulingPolicy,
    TeamRef,
    generate_schedule,
    next_anchor,
    rotation_order,
    round_pairs,
    schedule_to_fixtures,
)

# Wednesday 3 January 2024, mid-morning
WEDNESDAY = datetime(2024, 1, 3, 9, 30, 12, 500)


def _roster(*ids: str) -> list[TeamRef]:
    return [TeamRef(id=i, name=f"Team {i}") for i in ids]


def _pairs(rounds) -> list[tuple[str, str]]:
    return [(m.home.id, m.away.id) for r in rounds for m in r.matchups]


def test_four_teams_three_rounds_two_matchups_each():
    rounds = generate_schedule(_roster("A", "B", "C", "D"), now=WEDNESDAY)
    assert len(rounds) == 3
    assert [r.number for r in rounds] == [1, 2, 3]
    assert all(len(r.matchups) == 2 for r in rounds)
    unordered = [frozenset(p) for p in _pairs(rounds)]
    assert len(unordered) == 6
    assert set(unordered) == {frozenset(p) for p in combinations("ABCD", 2)}


def test_four_teams_exact_home_away_rotation():
    """Seat 0 fixed; last seat moves to index 1 each round."""
    rounds = generate_schedule(_roster("A", "B", "C", "D"), now=WEDNESDAY)
    assert [[(m.home.id, m.away.id) for m in r.matchups] for r in rounds] == [
        [("A", "D"), ("B", "C")],
        [("A", "C"), ("D", "B")],
        [("A", "B"), ("C", "D")],
    ]


def test_three_teams_one_team_sits_out_each_round():
    rounds = generate_schedule(_roster("A", "B", "C"), now=WEDNESDAY)
    assert len(rounds) == 3
    sitting_out = []
    for r in rounds:
        assert len(r.matchups) == 1
        playing = set(r.team_ids())
        idle = {"A", "B", "C"} - playing
        assert len(idle) == 1
        sitting_out.extend(idle)
    assert sorted(sitting_out) == ["A", "B", "C"]
    assert {frozenset(p) for p in _pairs(rounds)} == {
        frozenset(("A", "B")), frozenset(("A", "C")), frozenset(("B", "C")),
    }


def test_two_teams_single_round():
    rounds = generate_schedule(_roster("A", "B"), now=WEDNESDAY)
    assert len(rounds) == 1
    assert _pairs(rounds) == [("A", "B")]


@pytest.mark.parametrize("size", [0, 1])
def test_fewer_than_two_teams_raises(size):
    with pytest.raises(InsufficientTeamsError):
        generate_schedule(_roster(*"AB"[:size]), now=WEDNESDAY)


@pytest.mark.parametrize("n", range(2, 15))
def test_every_pair_exactly_once_and_one_game_per_round(n):
    ids = [f"t{i:02d}" for i in range(n)]
    rounds = generate_schedule(_roster(*ids), now=WEDNESDAY)
    assert len(rounds) == (n - 1 if n % 2 == 0 else n)
    pairs = [frozenset(p) for p in _pairs(rounds)]
    assert len(pairs) == n * (n - 1) // 2
    assert set(pairs) == {frozenset(p) for p in combinations(ids, 2)}
    for r in rounds:
        ids_in_round = r.team_ids()
        assert len(ids_in_round) == len(set(ids_in_round))
        assert len(r.matchups) <= (n + n % 2) // 2
        assert BYE_ID not in ids_in_round
        assert all(m.home.id != m.away.id for m in r.matchups)


def test_deterministic_for_same_inputs():
    roster = _roster("Lions", "Eagles", "Bears", "Wolves", "Hawks")
    policy = SchedulingPolicy(round_interval_days=3)
    first = generate_schedule(roster, policy, now=WEDNESDAY)
    second = generate_schedule(list(roster), policy, now=WEDNESDAY)
    assert first == second
    assert schedule_to_fixtures(first) == schedule_to_fixtures(second)


def test_roster_order_changes_home_away():
    a = generate_schedule(_roster("A", "B", "C", "D"), now=WEDNESDAY)
    b = generate_schedule(_roster("D", "C", "B", "A"), now=WEDNESDAY)
    assert _pairs(a) != _pairs(b)


def test_round_dates_spaced_by_interval():
    policy = SchedulingPolicy(round_interval_days=7)
    rounds = generate_schedule(_roster(*"ABCDEF"), policy, now=WEDNESDAY)
    first = rounds[0].scheduled_at
    assert first == datetime(2024, 1, 6, 10, 0)
    for k, r in enumerate(rounds):
        assert r.scheduled_at == first + timedelta(days=7 * k)
        assert r.scheduled_at.time() == first.time()


def test_zero_interval_puts_every_round_on_anchor_day():
    rounds = generate_schedule(_roster(*"ABCD"), SchedulingPolicy(round_interval_days=0), now=WEDNESDAY)
    assert {r.scheduled_at for r in rounds} == {datetime(2024, 1, 6, 10, 0)}


# ---------- Anchor date ----------


def test_anchor_from_wednesday_is_upcoming_saturday():
    assert next_anchor(WEDNESDAY, SchedulingPolicy()) == datetime(2024, 1, 6, 10, 0, 0, 0)


def test_anchor_on_saturday_at_anchor_time_jumps_a_week():
    saturday = datetime(2024, 1, 6, 10, 0)
    assert next_anchor(saturday, SchedulingPolicy()) == datetime(2024, 1, 13, 10, 0)


def test_anchor_on_saturday_before_anchor_time_still_jumps_a_week():
    early_saturday = datetime(2024, 1, 6, 7, 15)
    assert next_anchor(early_saturday, SchedulingPolicy()) == datetime(2024, 1, 13, 10, 0)


def test_anchor_allow_same_day():
    early_saturday = datetime(2024, 1, 6, 7, 15)
    policy = SchedulingPolicy(allow_same_day=True)
    assert next_anchor(early_saturday, policy) == datetime(2024, 1, 6, 10, 0)


def test_anchor_from_sunday_is_six_days_later():
    sunday = datetime(2024, 1, 7, 22, 0)
    assert next_anchor(sunday, SchedulingPolicy()) == datetime(2024, 1, 13, 10, 0)


def test_anchor_custom_weekday_and_time_keeps_tzinfo():
    now = datetime(2024, 1, 3, 23, 59, tzinfo=timezone.utc)
    policy = SchedulingPolicy(anchor_weekday=0, anchor_hour=18, anchor_minute=30)
    anchor = next_anchor(now, policy)
    assert anchor == datetime(2024, 1, 8, 18, 30, tzinfo=timezone.utc)
    assert anchor.tzinfo is timezone.utc


# ---------- Rotation ----------


def test_rotation_order_round_zero_is_identity():
    assert rotation_order(6, 0) == [0, 1, 2, 3, 4, 5]


def test_rotation_order_moves_last_seat_to_index_one():
    assert rotation_order(6, 1) == [0, 5, 1, 2, 3, 4]
    assert rotation_order(6, 2) == [0, 4, 5, 1, 2, 3]


def test_rotation_order_full_cycle_returns_to_start():
    assert rotation_order(8, 7) == rotation_order(8, 0)


def test_round_pairs_outer_to_inner():
    assert list(round_pairs([0, 5, 1, 2, 3, 4])) == [(0, 4), (5, 3), (1, 2)]


# ---------- Validation ----------


def test_duplicate_team_ids_rejected():
    roster = [TeamRef("A", "Alpha"), TeamRef("B", "Beta"), TeamRef("A", "Alpha again")]
    with pytest.raises(DuplicateTeamError):
        generate_schedule(roster, now=WEDNESDAY)


def test_real_team_named_bye_is_scheduled():
    roster = [TeamRef("A", "Alpha"), TeamRef(BYE_ID, "Bye Bandits"), TeamRef("C", "Gamma")]
    rounds = generate_schedule(roster, now=WEDNESDAY)
    assert len(_pairs(rounds)) == 3


@pytest.mark.parametrize(
    "kwargs",
    [
        {"round_interval_days": -1},
        {"anchor_weekday": 7},
        {"anchor_weekday": -1},
        {"anchor_hour": 24},
        {"anchor_minute": 60},
        {"anchor_weekday": "saturday"},
        {"round_interval_days": 1.5},
        {"allow_same_day": "false"},
        {"allow_same_day": 1},
    ],
)
def test_invalid_policy_rejected(kwargs):
    with pytest.raises(InvalidPolicyError):
        SchedulingPolicy(**kwargs)


def test_scheduling_errors_are_value_errors():
    with pytest.raises(ValueError):
        generate_schedule([], now=WEDNESDAY)


def test_schedule_to_fixtures_rows():
    rows = schedule_to_fixtures(generate_schedule(_roster("A", "B", "C"), now=WEDNESDAY))
    assert [r["round"] for r in rows] == [1, 2, 3]
    assert rows[0] == {
        "round": 1,
        "home": {"id": "B", "name": "Team B"},
        "away": {"id": "C", "name": "Team C"},
        "scheduled_at": "2024-01-06T10:00:00",
    }
