"""
Tests for fixture generation: roster order, persistence loop, cancellation, partial failure.
"""
from __future__ import annotations

from datetime import datetime
from itertools import combinations
from unittest.mock import patch

import pytest

from league_admin.models import FixtureStatus
from league_admin.persistence.db import get_connection, init_db, set_db_path
from league_admin.persistence.repositories import FixtureRepository, LeagueRepository, TeamRepository
from league_admin.services.fixture_service import (
    FixtureGenerationCancelled,
    FixtureService,
    PartialGenerationError,
    cancel_after,
)
from league_admin.services.league_service import LeagueNotFoundError
from league_admin.services.scheduling import InsufficientTeamsError, SchedulingPolicy

WEDNESDAY = datetime(2024, 1, 3, 9, 30)


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "fixtures_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def service():
    return FixtureService()


def _league_with_teams(conn, names: list[str]):
    league = LeagueRepository().create(conn, "Sunday League")
    team_repo = TeamRepository()
    teams = [team_repo.create(conn, n, league_id=league.id) for n in names]
    return league, teams


def test_fetch_roster_is_name_ordered(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["Wolves", "Bears", "Lions"])
    assert [t.name for t in service.fetch_roster(db_conn, league.id)] == ["Bears", "Lions", "Wolves"]


def test_generate_persists_every_matchup(db_conn, service):
    league, teams = _league_with_teams(db_conn, ["Wolves", "Bears", "Lions", "Eagles"])
    created = service.generate(db_conn, league.id, now=WEDNESDAY)
    assert len(created) == 6
    stored = FixtureRepository().list_by_league(db_conn, league.id)
    assert [f.id for f in stored] == [f.id for f in created]
    assert all(f.status == FixtureStatus.SCHEDULED.value for f in stored)
    ids = [t.id for t in teams]
    assert {frozenset((f.home_team_id, f.away_team_id)) for f in stored} == {
        frozenset(p) for p in combinations(ids, 2)
    }
    assert [f.round_number for f in stored] == [1, 1, 2, 2, 3, 3]
    assert stored[0].scheduled_at == datetime(2024, 1, 6, 10, 0)
    assert stored[-1].scheduled_at == datetime(2024, 1, 20, 10, 0)


def test_generate_first_round_follows_name_order(db_conn, service):
    league, teams = _league_with_teams(db_conn, ["D", "C", "B", "A"])
    by_name = {t.name: t.id for t in teams}
    created = service.generate(db_conn, league.id, now=WEDNESDAY)
    assert (created[0].home_team_id, created[0].away_team_id) == (by_name["A"], by_name["D"])
    assert (created[1].home_team_id, created[1].away_team_id) == (by_name["B"], by_name["C"])


def test_generate_odd_roster_skips_bye(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C", "D", "E"])
    created = service.generate(db_conn, league.id, policy=SchedulingPolicy(round_interval_days=1), now=WEDNESDAY)
    assert len(created) == 10
    assert {f.round_number for f in created} == {1, 2, 3, 4, 5}


def test_generate_matches_preview(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C", "D", "E"])
    preview = service.preview(db_conn, league.id, now=WEDNESDAY)
    created = service.generate(db_conn, league.id, now=WEDNESDAY)
    assert [(p["home"]["id"], p["away"]["id"], p["scheduled_at"]) for p in preview] == [
        (f.home_team_id, f.away_team_id, f.scheduled_at.isoformat()) for f in created
    ]


def test_preview_under_two_teams_is_empty(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["Solo"])
    assert service.preview(db_conn, league.id, now=WEDNESDAY) == []


def test_generate_under_two_teams_raises(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["Solo"])
    with pytest.raises(InsufficientTeamsError):
        service.generate(db_conn, league.id, now=WEDNESDAY)
    assert FixtureRepository().list_by_league(db_conn, league.id) == []


def test_generate_unknown_league_raises(db_conn, service):
    with pytest.raises(LeagueNotFoundError):
        service.generate(db_conn, "missing", now=WEDNESDAY)


def test_generate_uses_injected_collaborator(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C"])
    calls = []
    repo = FixtureRepository()

    def create_fixture(league_id, home_team_id, away_team_id, scheduled_at, round_number):
        calls.append((home_team_id, away_team_id, round_number))
        return repo.create(db_conn, league_id, home_team_id, away_team_id, scheduled_at, round_number)

    created = service.generate(db_conn, league.id, now=WEDNESDAY, create_fixture=create_fixture)
    assert len(calls) == 3
    assert [c[2] for c in calls] == [1, 2, 3]
    assert len(created) == 3


def test_partial_failure_reports_created_and_chains_cause(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C", "D"])
    repo = FixtureRepository()
    boom = RuntimeError("database went away")

    def create_fixture(league_id, home_team_id, away_team_id, scheduled_at, round_number):
        if round_number == 2:
            raise boom
        return repo.create(db_conn, league_id, home_team_id, away_team_id, scheduled_at, round_number)

    with pytest.raises(PartialGenerationError) as excinfo:
        service.generate(db_conn, league.id, now=WEDNESDAY, create_fixture=create_fixture)
    assert excinfo.value.__cause__ is boom
    assert len(excinfo.value.created) == 2
    assert len(repo.list_by_league(db_conn, league.id)) == 2


def test_cancellation_stops_issuing_creates(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C", "D"])
    checks = {"n": 0}

    def should_cancel() -> bool:
        checks["n"] += 1
        return checks["n"] > 3

    with pytest.raises(FixtureGenerationCancelled) as excinfo:
        service.generate(db_conn, league.id, now=WEDNESDAY, should_cancel=should_cancel)
    assert len(excinfo.value.created) == 3
    assert len(FixtureRepository().list_by_league(db_conn, league.id)) == 3


def test_cancel_after_without_deadline():
    assert cancel_after(None) is None
    assert cancel_after(0) is None


def test_cancel_after_trips_at_deadline():
    ticks = iter([100.0, 104.0, 105.0])
    with patch("league_admin.services.fixture_service.monotonic", side_effect=lambda: next(ticks)):
        should_cancel = cancel_after(5)
        assert should_cancel() is False
        assert should_cancel() is True


def test_deadline_cancels_generation(db_conn, service):
    league, _ = _league_with_teams(db_conn, ["A", "B", "C", "D"])
    ticks = iter([0.0, 0.0, 0.0, 0.0])
    with patch(
        "league_admin.services.fixture_service.monotonic",
        side_effect=lambda: next(ticks, 60.0),
    ):
        with pytest.raises(FixtureGenerationCancelled) as exc_info:
            service.generate(db_conn, league.id, now=WEDNESDAY, should_cancel=cancel_after(30))
    assert len(exc_info.value.created) == 3
    assert len(FixtureRepository().list_by_league(db_conn, league.id)) == 3


def test_init_db_creates_round_column_and_is_idempotent(tmp_path):
    db_path = tmp_path / "fresh.db"
    init_db(db_path=db_path)
    init_db(db_path=db_path)
    conn = get_connection(db_path)
    try:
        cols = [row[1] for row in conn.execute("PRAGMA table_info(fixtures)").fetchall()]
    finally:
        conn.close()
    assert "round_number" in cols
