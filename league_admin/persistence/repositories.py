"""
Repository interfaces for league admin data.
No business logic: only read/write operations.
"""
from __future__ import annotations

import re
import sqlite3
import uuid
from datetime import date, datetime, timezone

from league_admin.models import (
    Fixture,
    FixtureStatus,
    Injury,
    InjurySeverity,
    League,
    Player,
    ReferralStatus,
    Team,
)


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _parse_optional_datetime(s: str | None) -> datetime | None:
    return _parse_datetime(s) if s else None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "team"


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues. No business logic."""

    _COLS = "id, name, team_limit, start_date, created_at, updated_at"

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        team_limit: int | None = None,
        start_date: datetime | None = None,
        id: str | None = None,
    ) -> League:
        lid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO leagues ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (lid, name, team_limit, start_date.isoformat() if start_date else None, now, now),
        )
        conn.commit()
        return League(
            id=lid, name=name, team_limit=team_limit, start_date=start_date,
            created_at=datetime.fromisoformat(now), updated_at=datetime.fromisoformat(now),
        )

    def _from_row(self, row: sqlite3.Row) -> League:
        return League(
            id=row["id"],
            name=row["name"],
            team_limit=row["team_limit"],
            start_date=_parse_optional_datetime(row["start_date"]),
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute(f"SELECT {self._COLS} FROM leagues WHERE id = ?", (league_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_name(self, conn: sqlite3.Connection, name: str) -> League | None:
        row = conn.execute(f"SELECT {self._COLS} FROM leagues WHERE name = ?", (name,)).fetchone()
        return self._from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[League]:
        """Newest first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM leagues ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- TeamRepository ----------


class TeamRepository:
    """CRUD for teams and their league assignment. Lists are ordered by name."""

    _COLS = "id, name, slug, league_id, created_at, updated_at"

    def _unique_slug(self, conn: sqlite3.Connection, name: str) -> str:
        base = slugify(name)
        slug = base
        n = 2
        while conn.execute("SELECT 1 FROM teams WHERE slug = ?", (slug,)).fetchone() is not None:
            slug = f"{base}-{n}"
            n += 1
        return slug

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        league_id: str | None = None,
        id: str | None = None,
    ) -> Team:
        tid = id or str(uuid.uuid4())
        now = _now_iso()
        slug = self._unique_slug(conn, name)
        conn.execute(
            f"INSERT INTO teams ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (tid, name, slug, league_id, now, now),
        )
        conn.commit()
        return Team(
            id=tid, name=name, slug=slug, league_id=league_id,
            created_at=datetime.fromisoformat(now), updated_at=datetime.fromisoformat(now),
        )

    def _from_row(self, row: sqlite3.Row) -> Team:
        return Team(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            league_id=row["league_id"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute(f"SELECT {self._COLS} FROM teams WHERE id = ?", (team_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        """Teams in a league ordered by name. This order drives home/away rotation."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM teams WHERE league_id = ? ORDER BY name ASC, id ASC",
            (league_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_unassigned(self, conn: sqlite3.Connection) -> list[Team]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM teams WHERE league_id IS NULL ORDER BY name ASC, id ASC"
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_all(self, conn: sqlite3.Connection) -> list[Team]:
        rows = conn.execute(f"SELECT {self._COLS} FROM teams ORDER BY name ASC, id ASC").fetchall()
        return [self._from_row(r) for r in rows]

    def count_by_league(self, conn: sqlite3.Connection, league_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM teams WHERE league_id = ?", (league_id,)).fetchone()
        return int(row[0])

    def assign_to_league(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        league_id: str,
        team_limit: int | None = None,
    ) -> bool:
        """
        Move team_id into league_id. With team_limit the capacity check and the
        update are one statement; returns False when the league is already full.
        """
        cur = conn.execute(
            "UPDATE teams SET league_id = ?, updated_at = ? WHERE id = ? "
            "AND (? IS NULL OR (SELECT COUNT(*) FROM teams WHERE league_id = ?) < ?)",
            (league_id, _now_iso(), team_id, team_limit, league_id, team_limit),
        )
        conn.commit()
        return cur.rowcount == 1

    def unassign(self, conn: sqlite3.Connection, team_id: str, league_id: str | None = None) -> bool:
        """Clear the team's league. With league_id only when the team is in that league."""
        if league_id is None:
            cur = conn.execute(
                "UPDATE teams SET league_id = NULL, updated_at = ? WHERE id = ?",
                (_now_iso(), team_id),
            )
        else:
            cur = conn.execute(
                "UPDATE teams SET league_id = NULL, updated_at = ? WHERE id = ? AND league_id = ?",
                (_now_iso(), team_id, league_id),
            )
        conn.commit()
        return cur.rowcount == 1


# ---------- FixtureRepository ----------


class FixtureRepository:
    """CRUD for fixtures. One row per matchup; commits per insert."""

    _COLS = (
        "id, league_id, home_team_id, away_team_id, scheduled_at, round_number, venue, "
        "status, home_score, away_score, created_at, updated_at"
    )

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        home_team_id: str,
        away_team_id: str,
        scheduled_at: datetime,
        round_number: int | None = None,
        status: str = FixtureStatus.SCHEDULED.value,
        venue: str | None = None,
        id: str | None = None,
    ) -> Fixture:
        fid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO fixtures ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL, NULL, ?, ?)",
            (
                fid, league_id, home_team_id, away_team_id, scheduled_at.isoformat(),
                round_number, venue, status, now, now,
            ),
        )
        conn.commit()
        return Fixture(
            id=fid, league_id=league_id, home_team_id=home_team_id, away_team_id=away_team_id,
            scheduled_at=scheduled_at, round_number=round_number, venue=venue, status=status,
            created_at=datetime.fromisoformat(now), updated_at=datetime.fromisoformat(now),
        )

    def _from_row(self, row: sqlite3.Row) -> Fixture:
        return Fixture(
            id=row["id"],
            league_id=row["league_id"],
            home_team_id=row["home_team_id"],
            away_team_id=row["away_team_id"],
            scheduled_at=_parse_datetime(row["scheduled_at"]),
            round_number=row["round_number"],
            venue=row["venue"],
            status=row["status"],
            home_score=row["home_score"],
            away_score=row["away_score"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, fixture_id: str) -> Fixture | None:
        row = conn.execute(f"SELECT {self._COLS} FROM fixtures WHERE id = ?", (fixture_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Fixture]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM fixtures WHERE league_id = ? "
            "ORDER BY scheduled_at ASC, round_number ASC, rowid ASC",
            (league_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- PlayerRepository ----------


class PlayerRepository:
    """CRUD for players. Rosters are ordered by last name, then first name."""

    _COLS = "id, first_name, last_name, dob, team_id, created_at, updated_at"

    def create(
        self,
        conn: sqlite3.Connection,
        first_name: str,
        last_name: str,
        team_id: str | None = None,
        dob: date | None = None,
        id: str | None = None,
    ) -> Player:
        pid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO players ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (pid, first_name, last_name, dob.isoformat() if dob else None, team_id, now, now),
        )
        conn.commit()
        return Player(
            id=pid, first_name=first_name, last_name=last_name, team_id=team_id, dob=dob,
            created_at=datetime.fromisoformat(now), updated_at=datetime.fromisoformat(now),
        )

    def _from_row(self, row: sqlite3.Row) -> Player:
        return Player(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            team_id=row["team_id"],
            dob=date.fromisoformat(row["dob"]) if row["dob"] else None,
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute(f"SELECT {self._COLS} FROM players WHERE id = ?", (player_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[Player]:
        rows = conn.execute(
            f"SELECT {self._COLS} FROM players WHERE team_id = ? "
            "ORDER BY last_name ASC, first_name ASC, id ASC",
            (team_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- InjuryRepository ----------


class InjuryRepository:
    """CRUD for injury reports. No business logic."""

    _COLS = (
        "id, player_id, reported_by_id, injury_type, severity, referral_status, referred_to, "
        "referral_date, referral_reference, notes, created_at, updated_at"
    )

    def create(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        injury_type: str,
        severity: str = InjurySeverity.MEDIUM.value,
        referral_status: str = ReferralStatus.NONE.value,
        reported_by_id: str | None = None,
        referred_to: str | None = None,
        referral_date: datetime | None = None,
        referral_reference: str | None = None,
        notes: str | None = None,
        id: str | None = None,
    ) -> Injury:
        iid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO injuries ({self._COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                iid, player_id, reported_by_id, injury_type, severity, referral_status, referred_to,
                referral_date.isoformat() if referral_date else None, referral_reference, notes,
                now, now,
            ),
        )
        conn.commit()
        return Injury(
            id=iid, player_id=player_id, reported_by_id=reported_by_id, injury_type=injury_type,
            severity=severity, referral_status=referral_status, referred_to=referred_to,
            referral_date=referral_date, referral_reference=referral_reference, notes=notes,
            created_at=datetime.fromisoformat(now), updated_at=datetime.fromisoformat(now),
        )

    def _from_row(self, row: sqlite3.Row) -> Injury:
        return Injury(
            id=row["id"],
            player_id=row["player_id"],
            reported_by_id=row["reported_by_id"],
            injury_type=row["injury_type"],
            severity=row["severity"],
            referral_status=row["referral_status"],
            referred_to=row["referred_to"],
            referral_date=_parse_optional_datetime(row["referral_date"]),
            referral_reference=row["referral_reference"],
            notes=row["notes"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, injury_id: str) -> Injury | None:
        row = conn.execute(f"SELECT {self._COLS} FROM injuries WHERE id = ?", (injury_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_player(self, conn: sqlite3.Connection, player_id: str) -> list[Injury]:
        """Newest first."""
        rows = conn.execute(
            f"SELECT {self._COLS} FROM injuries WHERE player_id = ? ORDER BY created_at DESC, rowid DESC",
            (player_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]
