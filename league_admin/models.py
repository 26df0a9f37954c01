"""
Data models for the league admin backend.
Domain objects only; no persistence or API logic.

Leagues contain teams; teams may also sit unassigned in the pool until they are
dragged into a league. Fixtures are generated per league by the round-robin
scheduler and stored one row per matchup. Players belong to teams; an injury
record tracks the referral of an injured player to the clinic.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


# ---------- Fixture status ----------
class FixtureStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    POSTPONED = "POSTPONED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# ---------- League ----------
@dataclass
class League:
    """
    Competition container. team_limit None = unlimited.
    start_date is informational; fixture dates come from the scheduling policy.
    """
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    team_limit: int | None = None
    start_date: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "teamLimit": self.team_limit,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


# ---------- Team ----------
@dataclass
class Team:
    """A team. league_id None = unassigned (available for drag-and-drop)."""
    id: str
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime
    league_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "leagueId": self.league_id,
        }


# ---------- Fixture ----------
@dataclass
class Fixture:
    """
    One scheduled game. home_team_id != away_team_id (enforced by schema too).
    Scores stay None until the fixture is played.
    """
    id: str
    league_id: str
    home_team_id: str
    away_team_id: str
    scheduled_at: datetime
    status: str  # FixtureStatus value
    created_at: datetime
    updated_at: datetime
    round_number: int | None = None
    venue: str | None = None
    home_score: int | None = None
    away_score: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "leagueId": self.league_id,
            "homeTeamId": self.home_team_id,
            "awayTeamId": self.away_team_id,
            "scheduledAt": self.scheduled_at.isoformat(),
            "round": self.round_number,
            "venue": self.venue,
            "status": self.status,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }


# ---------- Injury enums ----------
class InjurySeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReferralStatus(str, Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    REFERRED = "REFERRED"
    COMPLETED = "COMPLETED"


# ---------- Player ----------
@dataclass
class Player:
    """Squad member. team_id None = not on a team."""
    id: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
    team_id: str | None = None
    dob: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "teamId": self.team_id,
            "dob": self.dob.isoformat() if self.dob else None,
        }


# ---------- Injury ----------
@dataclass
class Injury:
    """
    Injury report for a player and its clinic referral.
    referral_reference is the ticket number printed on the referral voucher.
    """
    id: str
    player_id: str
    injury_type: str
    severity: str  # InjurySeverity value
    referral_status: str  # ReferralStatus value
    created_at: datetime
    updated_at: datetime
    reported_by_id: str | None = None
    referred_to: str | None = None
    referral_date: datetime | None = None
    referral_reference: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "playerId": self.player_id,
            "reportedById": self.reported_by_id,
            "injuryType": self.injury_type,
            "severity": self.severity,
            "referralStatus": self.referral_status,
            "referredTo": self.referred_to,
            "referralDate": self.referral_date.isoformat() if self.referral_date else None,
            "referralReference": self.referral_reference,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
        }
