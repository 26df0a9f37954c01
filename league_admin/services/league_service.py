"""
League-centric service: league creation, team pool, team assignment guards.
Persistence is delegated to repositories.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from league_admin.models import League, Team
from league_admin.persistence.repositories import LeagueRepository, TeamRepository

LOGGER = logging.getLogger(__name__)

# ---------- Exceptions ----------


class LeagueNotFoundError(ValueError):
    """No league with the given id."""


class TeamNotFoundError(ValueError):
    """No team with the given id."""


class DuplicateLeagueError(ValueError):
    """League names are unique."""


class TeamLimitReachedError(ValueError):
    """League already holds team_limit teams."""


# ---------- LeagueService ----------


class LeagueService:
    """
    Domain logic for leagues and teams: validation and assignment guards.
    Drag-and-drop in the admin UI maps onto assign_team / unassign_team.
    """

    def __init__(self) -> None:
        self._league_repo = LeagueRepository()
        self._team_repo = TeamRepository()

    def get_league(self, conn: sqlite3.Connection, league_id: str) -> League:
        league = self._league_repo.get(conn, league_id)
        if league is None:
            raise LeagueNotFoundError(f"League not found: {league_id}")
        return league

    def get_team(self, conn: sqlite3.Connection, team_id: str) -> Team:
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise TeamNotFoundError(f"Team not found: {team_id}")
        return team

    def create_league(
        self,
        conn: sqlite3.Connection,
        name: str,
        team_limit: int | None = None,
        start_date: datetime | None = None,
    ) -> League:
        name = (name or "").strip()
        if not name:
            raise ValueError("Missing league name")
        if team_limit is not None and team_limit < 2:
            raise ValueError("teamLimit must be at least 2")
        if self._league_repo.get_by_name(conn, name) is not None:
            raise DuplicateLeagueError(f"League name already taken: {name}")
        try:
            league = self._league_repo.create(conn, name, team_limit=team_limit, start_date=start_date)
        except sqlite3.IntegrityError as e:
            # a concurrent create won the UNIQUE(name) race
            raise DuplicateLeagueError(f"League name already taken: {name}") from e
        LOGGER.info("Created league %s (%s)", league.id, league.name)
        return league

    def create_team(self, conn: sqlite3.Connection, name: str, league_id: str | None = None) -> Team:
        name = (name or "").strip()
        if not name:
            raise ValueError("Missing team name")
        if league_id is not None:
            self._check_capacity(conn, self.get_league(conn, league_id))
        return self._team_repo.create(conn, name, league_id=league_id)

    def _check_capacity(self, conn: sqlite3.Connection, league: League) -> None:
        if league.team_limit is None:
            return
        if self._team_repo.count_by_league(conn, league.id) >= league.team_limit:
            raise TeamLimitReachedError(
                f"League {league.name} is full ({league.team_limit} teams)"
            )

    def assign_team(self, conn: sqlite3.Connection, league_id: str, team_id: str) -> Team:
        """Move a team into league_id. Re-assigning to the same league is a no-op."""
        league = self.get_league(conn, league_id)
        team = self.get_team(conn, team_id)
        if team.league_id == league_id:
            return team
        if not self._team_repo.assign_to_league(conn, team_id, league_id, team_limit=league.team_limit):
            raise TeamLimitReachedError(
                f"League {league.name} is full ({league.team_limit} teams)"
            )
        LOGGER.info("Assigned team %s to league %s", team_id, league_id)
        return self.get_team(conn, team_id)

    def unassign_team(self, conn: sqlite3.Connection, team_id: str, league_id: str | None = None) -> Team:
        """
        Return a team to the unassigned pool. With league_id the team must currently
        be in that league, otherwise TeamNotFoundError.
        """
        self.get_team(conn, team_id)
        if league_id is not None:
            self.get_league(conn, league_id)
        if not self._team_repo.unassign(conn, team_id, league_id=league_id):
            raise TeamNotFoundError(f"Team {team_id} is not in league {league_id}")
        LOGGER.info("Unassigned team %s", team_id)
        return self.get_team(conn, team_id)

    def list_teams(
        self,
        conn: sqlite3.Connection,
        league_id: str | None = None,
        unassigned: bool = False,
    ) -> list[Team]:
        if unassigned:
            return self._team_repo.list_unassigned(conn)
        if league_id:
            return self._team_repo.list_by_league(conn, league_id)
        return self._team_repo.list_all(conn)
