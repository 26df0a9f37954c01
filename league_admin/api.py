"""
REST API for the league admin backend.
Thin wrappers around domain services and persistence.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Any, AsyncGenerator, Callable, Generator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from league_admin import config
from league_admin.persistence import LeagueRepository, get_connection, init_db
from league_admin.services.fixture_service import (
    FixtureGenerationCancelled,
    FixtureService,
    PartialGenerationError,
    cancel_after,
)
from league_admin.services.injury_service import (
    InjuryService,
    InvalidInjuryReportError,
    PlayerNotFoundError,
)
from league_admin.services.league_service import (
    LeagueNotFoundError,
    LeagueService,
    TeamNotFoundError,
)
from league_admin.services.scheduling import InvalidPolicyError, SchedulingError, SchedulingPolicy

LOGGER = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config.configure_logging()
    init_db()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="League Admin API",
    description="League and team administration with round-robin fixture generation",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request models ----------


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateLeagueRequest(_CamelModel):
    name: str = ""
    start_date: datetime | None = Field(None, alias="startDate")
    team_limit: int | None = Field(None, alias="teamLimit")


class CreateTeamRequest(_CamelModel):
    name: str = ""
    league_id: str | None = Field(None, alias="leagueId")


class TeamAssignmentRequest(_CamelModel):
    team_id: str | None = Field(None, alias="teamId")


class GenerateFixturesRequest(_CamelModel):
    league_id: str | None = Field(None, alias="leagueId")
    round_interval_days: int | None = Field(
        None, alias="roundIntervalDays", description="Override the configured spacing between rounds"
    )


class CreatePlayerRequest(_CamelModel):
    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    dob: date | None = None


class CreateReferralRequest(_CamelModel):
    player_id: str | None = Field(None, alias="playerId")
    injury_type: str = Field("", alias="injuryType")
    severity: str | None = None
    notes: str | None = None
    referred_to: str | None = Field(None, alias="referredTo")
    reported_by_id: str | None = Field(None, alias="reportedById")


def _configured_policy() -> SchedulingPolicy:
    """Policy from the server environment. A bad setting is a server fault: 500."""
    try:
        return config.default_policy()
    except InvalidPolicyError as e:
        LOGGER.exception("Invalid scheduling configuration")
        raise HTTPException(status_code=500, detail=f"Server misconfigured: {e}") from e


def _policy(round_interval_days: int | None = None) -> SchedulingPolicy:
    """Configured policy, optionally with a per-request round interval (invalid -> 400)."""
    base = _configured_policy()
    if round_interval_days is None:
        return base
    try:
        return replace(base, round_interval_days=round_interval_days)
    except InvalidPolicyError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _generation_deadline() -> Callable[[], bool] | None:
    try:
        return cancel_after(config.generation_timeout_seconds())
    except ValueError as e:
        LOGGER.exception("Invalid generation timeout configuration")
        raise HTTPException(status_code=500, detail=f"Server misconfigured: {e}") from e


# ---------- Health ----------


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ---------- Leagues ----------


@app.get("/leagues")
def list_leagues() -> list[dict[str, Any]]:
    """Leagues, newest first."""
    with db_conn() as conn:
        return [lg.to_dict() for lg in LeagueRepository().list_all(conn)]


@app.post("/leagues")
def create_league(req: CreateLeagueRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            league = LeagueService().create_league(
                conn, req.name, team_limit=req.team_limit, start_date=req.start_date
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return league.to_dict()


@app.get("/leagues/{league_id}")
def get_league(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        svc = LeagueService()
        try:
            league = svc.get_league(conn, league_id)
        except LeagueNotFoundError:
            raise HTTPException(status_code=404, detail="League not found")
        d = league.to_dict()
        d["teams"] = [t.to_dict() for t in svc.list_teams(conn, league_id=league_id)]
        return d


@app.post("/leagues/{league_id}/teams")
def assign_team(league_id: str, req: TeamAssignmentRequest) -> dict[str, Any]:
    """Assign a team to the league (drop onto league column)."""
    if not req.team_id:
        raise HTTPException(status_code=400, detail="Missing teamId")
    with db_conn() as conn:
        try:
            LeagueService().assign_team(conn, league_id, req.team_id)
        except (LeagueNotFoundError, TeamNotFoundError) as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"ok": True}


@app.delete("/leagues/{league_id}/teams")
def unassign_team(league_id: str, req: TeamAssignmentRequest) -> dict[str, Any]:
    """Return a team of this league to the unassigned pool."""
    if not req.team_id:
        raise HTTPException(status_code=400, detail="Missing teamId")
    with db_conn() as conn:
        try:
            LeagueService().unassign_team(conn, req.team_id, league_id=league_id)
        except (LeagueNotFoundError, TeamNotFoundError) as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"ok": True}


@app.get("/leagues/{league_id}/fixtures")
def list_league_fixtures(league_id: str) -> list[dict[str, Any]]:
    with db_conn() as conn:
        try:
            fixtures = FixtureService().list_fixtures(conn, league_id)
        except LeagueNotFoundError:
            raise HTTPException(status_code=404, detail="League not found")
        return [f.to_dict() for f in fixtures]


# ---------- Teams ----------


@app.get("/teams")
def list_teams(
    unassigned: bool = Query(False),
    league_id: str | None = Query(None, alias="leagueId"),
) -> list[dict[str, Any]]:
    """?unassigned=true -> pool; ?leagueId= -> teams in league; otherwise all. Ordered by name."""
    with db_conn() as conn:
        teams = LeagueService().list_teams(conn, league_id=league_id, unassigned=unassigned)
        return [t.to_dict() for t in teams]


@app.post("/teams")
def create_team(req: CreateTeamRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            team = LeagueService().create_team(conn, req.name, league_id=req.league_id)
        except LeagueNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return team.to_dict()


# ---------- Fixtures ----------


@app.get("/fixtures/preview")
def preview_fixtures(league_id: str | None = Query(None, alias="leagueId")) -> list[dict[str, Any]]:
    """Round-robin preview for a league. Nothing is stored."""
    if not league_id:
        raise HTTPException(status_code=400, detail="Missing leagueId")
    policy = _policy()
    with db_conn() as conn:
        try:
            return FixtureService().preview(conn, league_id, policy)
        except LeagueNotFoundError:
            raise HTTPException(status_code=404, detail="League not found")
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))


@app.post("/fixtures/generate")
def generate_fixtures(req: GenerateFixturesRequest | None = None) -> list[dict[str, Any]]:
    """
    Load the league's teams (name order), build the round-robin schedule (weekly,
    first round on the next anchor weekday) and store one SCHEDULED fixture per
    matchup. Returns the created fixtures. Generation running past
    LEAGUE_ADMIN_GENERATION_TIMEOUT_SECONDS stops early and reports what was stored.
    """
    if req is None or not req.league_id:
        raise HTTPException(status_code=400, detail="Missing leagueId")
    policy = _policy(req.round_interval_days)
    should_cancel = _generation_deadline()
    with db_conn() as conn:
        try:
            fixtures = FixtureService().generate(
                conn, req.league_id, policy, should_cancel=should_cancel
            )
        except LeagueNotFoundError:
            raise HTTPException(status_code=404, detail="League not found")
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except (PartialGenerationError, FixtureGenerationCancelled) as e:
            LOGGER.exception("Fixture generation failed for league %s", req.league_id)
            raise HTTPException(
                status_code=500,
                detail={"message": str(e), "created": [f.to_dict() for f in e.created]},
            ) from e
        except Exception as e:
            LOGGER.exception("Fixture generation failed for league %s", req.league_id)
            raise HTTPException(status_code=500, detail=str(e) or "Server error") from e
        return [f.to_dict() for f in fixtures]


# ---------- Players and referrals ----------


@app.get("/teams/{team_id}/roster")
def team_roster(team_id: str) -> dict[str, Any]:
    """Players of a team, for picking the injured player."""
    with db_conn() as conn:
        try:
            players = InjuryService().roster(conn, team_id)
        except TeamNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"players": [p.to_dict() for p in players]}


@app.post("/teams/{team_id}/players")
def create_player(team_id: str, req: CreatePlayerRequest) -> dict[str, Any]:
    with db_conn() as conn:
        try:
            player = InjuryService().create_player(
                conn, team_id, req.first_name, req.last_name, dob=req.dob
            )
        except TeamNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return player.to_dict()


@app.post("/referrals")
def create_referral(req: CreateReferralRequest) -> dict[str, Any]:
    """Report an injury and refer the player to the clinic. Returns the referral for the voucher."""
    if not req.player_id:
        raise HTTPException(status_code=400, detail="Missing playerId")
    with db_conn() as conn:
        try:
            injury = InjuryService().create_referral(
                conn,
                req.player_id,
                req.injury_type,
                severity=req.severity,
                notes=req.notes,
                reported_by_id=req.reported_by_id,
                referred_to=req.referred_to,
            )
        except PlayerNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except InvalidInjuryReportError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return injury.to_dict()


@app.get("/players/{player_id}/injuries")
def list_player_injuries(player_id: str) -> list[dict[str, Any]]:
    """Injury reports for a player, newest first."""
    with db_conn() as conn:
        try:
            injuries = InjuryService().list_injuries(conn, player_id)
        except PlayerNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return [i.to_dict() for i in injuries]


# ---------- Run with: uvicorn league_admin.api:app --reload ----------
