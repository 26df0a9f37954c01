"""
Environment-driven settings.
Everything is read at call time so tests can monkeypatch os.environ.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

from league_admin.services.scheduling import InvalidPolicyError, SchedulingPolicy

DB_PATH_ENV = "LEAGUE_ADMIN_DB_PATH"
ANCHOR_WEEKDAY_ENV = "LEAGUE_ADMIN_ANCHOR_WEEKDAY"
ANCHOR_TIME_ENV = "LEAGUE_ADMIN_ANCHOR_TIME"
ROUND_INTERVAL_ENV = "LEAGUE_ADMIN_ROUND_INTERVAL_DAYS"
CORS_ORIGINS_ENV = "LEAGUE_ADMIN_CORS_ORIGINS"
LOG_LEVEL_ENV = "LEAGUE_ADMIN_LOG_LEVEL"
GENERATION_TIMEOUT_ENV = "LEAGUE_ADMIN_GENERATION_TIMEOUT_SECONDS"

DEFAULT_GENERATION_TIMEOUT_SECONDS = 30.0

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def db_path_from_env() -> Path:
    """LEAGUE_ADMIN_DB_PATH or <project root>/data/league_admin.db."""
    raw = os.environ.get(DB_PATH_ENV)
    if raw:
        return Path(raw)
    return project_root() / "data" / "league_admin.db"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidPolicyError(f"{name} must be an integer, got {raw!r}") from None


def _parse_time(raw: str) -> tuple[int, int]:
    parts = raw.strip().split(":")
    if len(parts) != 2:
        raise InvalidPolicyError(f"{ANCHOR_TIME_ENV} must be HH:MM, got {raw!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise InvalidPolicyError(f"{ANCHOR_TIME_ENV} must be HH:MM, got {raw!r}") from None


def default_policy() -> SchedulingPolicy:
    """
    Scheduling policy from the environment. Defaults: Saturday 10:00, weekly.
    Out-of-range values fail in SchedulingPolicy validation.
    """
    hour, minute = _parse_time(os.environ.get(ANCHOR_TIME_ENV) or "10:00")
    return SchedulingPolicy(
        anchor_weekday=_int_env(ANCHOR_WEEKDAY_ENV, 5),
        anchor_hour=hour,
        anchor_minute=minute,
        round_interval_days=_int_env(ROUND_INTERVAL_ENV, 7),
    )


def generation_timeout_seconds() -> float:
    """Deadline for one fixture generation request. 0 disables it."""
    raw = os.environ.get(GENERATION_TIMEOUT_ENV)
    if raw is None or raw.strip() == "":
        return DEFAULT_GENERATION_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{GENERATION_TIMEOUT_ENV} must be a number, got {raw!r}") from None


def cors_origins() -> list[str]:
    raw = os.environ.get(CORS_ORIGINS_ENV)
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
