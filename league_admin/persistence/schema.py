"""
SQLite schema for league admin entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def leagues_schema() -> str:
    """League names are unique. team_limit NULL = unlimited."""
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        team_limit INTEGER,
        start_date TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """


def teams_schema() -> str:
    """league_id NULL = unassigned team (drag-and-drop pool)."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        league_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE SET NULL
    );
    CREATE INDEX IF NOT EXISTS ix_teams_league ON teams(league_id);
    """


def fixtures_schema() -> str:
    """One row per scheduled matchup. status: SCHEDULED | POSTPONED | COMPLETED | CANCELLED."""
    return """
    CREATE TABLE IF NOT EXISTS fixtures (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        scheduled_at TEXT NOT NULL,
        round_number INTEGER,
        venue TEXT,
        status TEXT NOT NULL DEFAULT 'SCHEDULED',
        home_score INTEGER,
        away_score INTEGER,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (home_team_id) REFERENCES teams(id) ON DELETE CASCADE,
        FOREIGN KEY (away_team_id) REFERENCES teams(id) ON DELETE CASCADE,
        CHECK (home_team_id <> away_team_id)
    );
    CREATE INDEX IF NOT EXISTS ix_fixtures_league ON fixtures(league_id);
    """


def players_schema() -> str:
    """team_id NULL = player without a team."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        dob TEXT,
        team_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE SET NULL
    );
    CREATE INDEX IF NOT EXISTS ix_players_team ON players(team_id);
    """


def injuries_schema() -> str:
    """
    Injury reports and their clinic referral.
    severity: LOW | MEDIUM | HIGH | CRITICAL. referral_status: NONE | PENDING | REFERRED | COMPLETED.
    """
    return """
    CREATE TABLE IF NOT EXISTS injuries (
        id TEXT PRIMARY KEY,
        player_id TEXT NOT NULL,
        reported_by_id TEXT,
        injury_type TEXT NOT NULL,
        severity TEXT NOT NULL DEFAULT 'MEDIUM',
        referral_status TEXT NOT NULL DEFAULT 'NONE',
        referred_to TEXT,
        referral_date TEXT,
        referral_reference TEXT UNIQUE,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (player_id) REFERENCES players(id) ON DELETE CASCADE,
        CHECK (severity IN ('LOW', 'MEDIUM', 'HIGH', 'CRITICAL')),
        CHECK (referral_status IN ('NONE', 'PENDING', 'REFERRED', 'COMPLETED'))
    );
    CREATE INDEX IF NOT EXISTS ix_injuries_player ON injuries(player_id);
    """


def all_schema_sql() -> str:
    return leagues_schema() + teams_schema() + fixtures_schema() + players_schema() + injuries_schema()
