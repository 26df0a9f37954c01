"""
Injury reporting and clinic referrals.

A team manager picks an injured player from the team roster, records the injury
type and severity, and the report is referred to the clinic straight away: the
stored injury carries referral status REFERRED, the referral date and a referral
reference for the voucher. Rendering the voucher is left to the client.
"""
from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import date, datetime, timezone

from league_admin.models import Injury, InjurySeverity, Player, ReferralStatus
from league_admin.persistence.repositories import InjuryRepository, PlayerRepository, TeamRepository
from league_admin.services.league_service import TeamNotFoundError

LOGGER = logging.getLogger(__name__)

DEFAULT_REFERRAL_CLINIC = "AO Clinic"

INJURY_TYPES = (
    "Ankle",
    "Muscle",
    "Head",
    "Knee",
    "Shoulder",
    "Back",
    "Fracture",
    "Laceration",
    "Other",
)


# ---------- Exceptions ----------


class PlayerNotFoundError(ValueError):
    """No player with the given id."""


class InvalidInjuryReportError(ValueError):
    """Unknown injury type or severity."""


def referral_reference(now: datetime) -> str:
    """Voucher reference, e.g. REF-20240106-3F9A1C."""
    return f"REF-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


def _injury_type(raw: str) -> str:
    value = (raw or "").strip()
    for known in INJURY_TYPES:
        if known.lower() == value.lower():
            return known
    raise InvalidInjuryReportError(
        f"Unknown injury type {raw!r}; expected one of {', '.join(INJURY_TYPES)}"
    )


def _severity(raw: str | None) -> InjurySeverity:
    if raw is None or raw.strip() == "":
        return InjurySeverity.MEDIUM
    try:
        return InjurySeverity(raw.strip().upper())
    except ValueError:
        raise InvalidInjuryReportError(f"Unknown severity {raw!r}") from None


# ---------- InjuryService ----------


class InjuryService:
    """Team rosters, injury reports and referrals."""

    def __init__(self) -> None:
        self._team_repo = TeamRepository()
        self._player_repo = PlayerRepository()
        self._injury_repo = InjuryRepository()

    def _require_team(self, conn: sqlite3.Connection, team_id: str) -> None:
        if self._team_repo.get(conn, team_id) is None:
            raise TeamNotFoundError(f"Team not found: {team_id}")

    def get_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise PlayerNotFoundError(f"Player not found: {player_id}")
        return player

    def create_player(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        first_name: str,
        last_name: str,
        dob: date | None = None,
    ) -> Player:
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        if not first_name or not last_name:
            raise ValueError("Missing player first or last name")
        self._require_team(conn, team_id)
        return self._player_repo.create(conn, first_name, last_name, team_id=team_id, dob=dob)

    def roster(self, conn: sqlite3.Connection, team_id: str) -> list[Player]:
        """Players of a team ordered by last name, first name."""
        self._require_team(conn, team_id)
        return self._player_repo.list_by_team(conn, team_id)

    def create_referral(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        injury_type: str,
        severity: str | None = None,
        notes: str | None = None,
        reported_by_id: str | None = None,
        referred_to: str | None = None,
        now: datetime | None = None,
    ) -> Injury:
        """
        Record an injury and refer it to the clinic in one step.
        Severity defaults to MEDIUM and the clinic to DEFAULT_REFERRAL_CLINIC.
        Raises PlayerNotFoundError or InvalidInjuryReportError.
        """
        kind = _injury_type(injury_type)
        level = _severity(severity)
        self.get_player(conn, player_id)
        now = now or datetime.now(timezone.utc)
        injury = self._injury_repo.create(
            conn,
            player_id,
            kind,
            severity=level.value,
            referral_status=ReferralStatus.REFERRED.value,
            reported_by_id=reported_by_id,
            referred_to=(referred_to or "").strip() or DEFAULT_REFERRAL_CLINIC,
            referral_date=now,
            referral_reference=referral_reference(now),
            notes=(notes or "").strip() or None,
        )
        LOGGER.info(
            "Referred %s injury of player %s to %s (%s)",
            injury.severity, player_id, injury.referred_to, injury.referral_reference,
        )
        return injury

    def list_injuries(self, conn: sqlite3.Connection, player_id: str) -> list[Injury]:
        self.get_player(conn, player_id)
        return self._injury_repo.list_by_player(conn, player_id)
