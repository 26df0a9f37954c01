"""
Deterministic round-robin fixture scheduling for leagues.

Every team plays every other team exactly once; a season is N-1 rounds (N even)
or N rounds (N odd). Each team plays at most one match per round.

BYE handling: when the number of teams is odd, a virtual BYE seat is added. The
team seated opposite BYE sits the round out and no matchup is emitted for it.

Circle method: seat 0 is fixed, the remaining seats rotate one step to the right
each round (the last seat moves to index 1). Seat orders are computed with index
arithmetic over an immutable roster snapshot, so the same roster order and policy
always yield the same schedule. The client preview and the persisted generation
rely on that.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterator, Sequence

LOGGER = logging.getLogger(__name__)

BYE_ID = "BYE"


# ---------- Exceptions ----------


class SchedulingError(ValueError):
    """Base class for value-level scheduling failures."""


class InsufficientTeamsError(SchedulingError):
    """Roster has fewer than two teams."""


class InvalidPolicyError(SchedulingError):
    """Scheduling policy value out of range or malformed."""


class DuplicateTeamError(SchedulingError):
    """The same team identifier appears more than once in a roster."""


# ---------- Types ----------


@dataclass(frozen=True)
class TeamRef:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


BYE = TeamRef(id=BYE_ID, name=BYE_ID)


@dataclass(frozen=True)
class Matchup:
    home: TeamRef
    away: TeamRef


@dataclass(frozen=True)
class Round:
    """One round of the schedule. number is 1-based."""
    number: int
    matchups: tuple[Matchup, ...]
    scheduled_at: datetime

    def team_ids(self) -> list[str]:
        ids: list[str] = []
        for m in self.matchups:
            ids.extend((m.home.id, m.away.id))
        return ids


@dataclass(frozen=True)
class SchedulingPolicy:
    """
    When rounds are played.
    anchor_weekday uses date.weekday() numbering (0 = Monday, 5 = Saturday).
    The first round lands on the next anchor weekday strictly after today unless
    allow_same_day is set.
    """
    anchor_weekday: int = 5
    anchor_hour: int = 10
    anchor_minute: int = 0
    round_interval_days: int = 7
    allow_same_day: bool = False

    def __post_init__(self) -> None:
        for name in ("anchor_weekday", "anchor_hour", "anchor_minute", "round_interval_days"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidPolicyError(f"{name} must be an integer, got {value!r}")
        if not isinstance(self.allow_same_day, bool):
            raise InvalidPolicyError(f"allow_same_day must be a bool, got {self.allow_same_day!r}")
        if not 0 <= self.anchor_weekday <= 6:
            raise InvalidPolicyError(f"anchor_weekday must be 0-6, got {self.anchor_weekday}")
        if not 0 <= self.anchor_hour <= 23:
            raise InvalidPolicyError(f"anchor_hour must be 0-23, got {self.anchor_hour}")
        if not 0 <= self.anchor_minute <= 59:
            raise InvalidPolicyError(f"anchor_minute must be 0-59, got {self.anchor_minute}")
        if self.round_interval_days < 0:
            raise InvalidPolicyError(
                f"round_interval_days must be >= 0, got {self.round_interval_days}"
            )


# ---------- Anchor date ----------


def next_anchor(now: datetime, policy: SchedulingPolicy) -> datetime:
    """
    First round date: the next anchor weekday at the anchor time.
    If today already is the anchor weekday the result is one week later, even when
    the anchor time has not passed yet (unless policy.allow_same_day).
    """
    days_ahead = ((policy.anchor_weekday - now.weekday()) + 7) % 7
    if days_ahead == 0 and not policy.allow_same_day:
        days_ahead = 7
    start = now + timedelta(days=days_ahead)
    return start.replace(hour=policy.anchor_hour, minute=policy.anchor_minute, second=0, microsecond=0)


# ---------- Circle method ----------


def rotation_order(size: int, round_index: int) -> list[int]:
    """
    Seat order for a round as indices into the (padded) roster.
    Seat 0 is fixed; seats 1..size-1 are rotated right by round_index.
    """
    if size < 1:
        return []
    moving = size - 1
    order = [0]
    for k in range(1, size):
        order.append(1 + (k - 1 - round_index) % moving)
    return order


def round_pairs(order: Sequence[int]) -> Iterator[tuple[int, int]]:
    """Pair order[i] (home) with order[n-1-i] (away) for the first half of the seats."""
    n = len(order)
    for i in range(n // 2):
        yield order[i], order[n - 1 - i]


def _check_roster(roster: Sequence[TeamRef]) -> None:
    if len(roster) < 2:
        raise InsufficientTeamsError(
            f"At least two teams are required to build a schedule (got {len(roster)})"
        )
    seen: set[str] = set()
    for team in roster:
        if team.id in seen:
            raise DuplicateTeamError(f"Duplicate team id in roster: {team.id}")
        seen.add(team.id)


def generate_schedule(
    roster: Sequence[TeamRef],
    policy: SchedulingPolicy | None = None,
    now: datetime | None = None,
) -> list[Round]:
    """
    Build a single round-robin schedule for roster.
    Returns rounds in order; rounds[k].scheduled_at = first anchor + k * interval.
    Raises InsufficientTeamsError (< 2 teams) or DuplicateTeamError.
    """
    policy = policy or SchedulingPolicy()
    _check_roster(roster)
    seats: tuple[TeamRef, ...] = tuple(roster)
    if len(seats) % 2 == 1:
        seats = seats + (BYE,)
    n = len(seats)
    start = next_anchor(now or datetime.now(), policy)

    rounds: list[Round] = []
    for r in range(n - 1):
        matchups = []
        for a, b in round_pairs(rotation_order(n, r)):
            home, away = seats[a], seats[b]
            if home is BYE or away is BYE:
                continue
            matchups.append(Matchup(home=home, away=away))
        rounds.append(
            Round(
                number=r + 1,
                matchups=tuple(matchups),
                scheduled_at=start + timedelta(days=r * policy.round_interval_days),
            )
        )
    LOGGER.debug(
        "Built round-robin schedule: %d teams, %d rounds, first round %s",
        len(roster), len(rounds), start.isoformat(),
    )
    return rounds


def schedule_to_fixtures(rounds: Sequence[Round]) -> list[dict[str, Any]]:
    """
    Flatten rounds into preview rows:
    { "round": int, "home": {id, name}, "away": {id, name}, "scheduled_at": iso str }.
    """
    return [
        {
            "round": rnd.number,
            "home": m.home.to_dict(),
            "away": m.away.to_dict(),
            "scheduled_at": rnd.scheduled_at.isoformat(),
        }
        for rnd in rounds
        for m in rnd.matchups
    ]
