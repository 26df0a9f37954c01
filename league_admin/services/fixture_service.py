"""
Fixture generation: roster fetch -> round-robin schedule -> one stored fixture per matchup.

The scheduler is pure; this module owns the persistence loop. Fixtures are written
through an injectable create_fixture collaborator (FixtureRepository.create by
default), one call per matchup, each committed on its own. No transaction wraps the
loop: callers needing all-or-nothing must open their own. A failure or cancellation
part-way through is reported together with the fixtures already created.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from time import monotonic
from typing import Any, Callable, Protocol

from league_admin.models import Fixture
from league_admin.persistence.repositories import FixtureRepository, LeagueRepository, TeamRepository
from league_admin.services.league_service import LeagueNotFoundError
from league_admin.services.scheduling import (
    InsufficientTeamsError,
    SchedulingPolicy,
    TeamRef,
    generate_schedule,
    schedule_to_fixtures,
)

LOGGER = logging.getLogger(__name__)


# ---------- Exceptions ----------


class PartialGenerationError(RuntimeError):
    """Persisting a fixture failed mid-loop. created holds the fixtures stored before the failure."""

    def __init__(self, message: str, created: list[Fixture]) -> None:
        super().__init__(message)
        self.created = created


class FixtureGenerationCancelled(RuntimeError):
    """Generation stopped on request. created holds the fixtures stored before cancellation."""

    def __init__(self, message: str, created: list[Fixture]) -> None:
        super().__init__(message)
        self.created = created


def cancel_after(seconds: float | None) -> Callable[[], bool] | None:
    """
    should_cancel callable that turns true once seconds have elapsed from now.
    None or a non-positive value means no deadline.
    """
    if seconds is None or seconds <= 0:
        return None
    deadline = monotonic() + seconds
    return lambda: monotonic() >= deadline


class CreateFixture(Protocol):
    def __call__(
        self,
        league_id: str,
        home_team_id: str,
        away_team_id: str,
        scheduled_at: datetime,
        round_number: int,
    ) -> Fixture: ...


# ---------- FixtureService ----------


class FixtureService:
    """
    Generates and previews league fixtures.
    Roster order is name ascending, which fixes the home/away rotation.
    """

    def __init__(self) -> None:
        self._league_repo = LeagueRepository()
        self._team_repo = TeamRepository()
        self._fixture_repo = FixtureRepository()

    def fetch_roster(self, conn: sqlite3.Connection, league_id: str) -> list[TeamRef]:
        return [TeamRef(id=t.id, name=t.name) for t in self._team_repo.list_by_league(conn, league_id)]

    def _require_league(self, conn: sqlite3.Connection, league_id: str) -> None:
        if self._league_repo.get(conn, league_id) is None:
            raise LeagueNotFoundError(f"League not found: {league_id}")

    def preview(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        policy: SchedulingPolicy | None = None,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        """Preview rows for the league's schedule. Nothing is stored; [] when < 2 teams."""
        self._require_league(conn, league_id)
        roster = self.fetch_roster(conn, league_id)
        if len(roster) < 2:
            return []
        return schedule_to_fixtures(generate_schedule(roster, policy, now=now))

    def generate(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        policy: SchedulingPolicy | None = None,
        now: datetime | None = None,
        create_fixture: CreateFixture | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> list[Fixture]:
        """
        Build the round-robin schedule for league_id and store each matchup as a
        SCHEDULED fixture. Returns created fixtures in round order.
        Raises LeagueNotFoundError, InsufficientTeamsError, FixtureGenerationCancelled
        or PartialGenerationError (original error chained).
        """
        self._require_league(conn, league_id)
        roster = self.fetch_roster(conn, league_id)
        if len(roster) < 2:
            raise InsufficientTeamsError("At least two teams are required")
        rounds = generate_schedule(roster, policy, now=now)

        if create_fixture is None:
            def create_fixture(league_id, home_team_id, away_team_id, scheduled_at, round_number):
                return self._fixture_repo.create(
                    conn, league_id, home_team_id, away_team_id, scheduled_at,
                    round_number=round_number,
                )

        created: list[Fixture] = []
        for rnd in rounds:
            for m in rnd.matchups:
                if should_cancel is not None and should_cancel():
                    LOGGER.warning(
                        "Fixture generation for league %s cancelled after %d fixtures",
                        league_id, len(created),
                    )
                    raise FixtureGenerationCancelled(
                        f"Fixture generation cancelled after {len(created)} fixtures", created
                    )
                try:
                    fixture = create_fixture(league_id, m.home.id, m.away.id, rnd.scheduled_at, rnd.number)
                except Exception as exc:
                    LOGGER.warning(
                        "Fixture generation for league %s failed after %d fixtures: %s",
                        league_id, len(created), exc,
                    )
                    raise PartialGenerationError(
                        f"Failed to store fixture {m.home.id} vs {m.away.id} "
                        f"(round {rnd.number}) after {len(created)} fixtures: {exc}",
                        created,
                    ) from exc
                created.append(fixture)
        LOGGER.info(
            "Generated %d fixtures over %d rounds for league %s",
            len(created), len(rounds), league_id,
        )
        return created

    def list_fixtures(self, conn: sqlite3.Connection, league_id: str) -> list[Fixture]:
        self._require_league(conn, league_id)
        return self._fixture_repo.list_by_league(conn, league_id)
