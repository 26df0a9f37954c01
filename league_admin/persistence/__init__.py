"""
Persistence layer for league admin data.
No business logic, no scheduling: only read/write interfaces.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import (
    LeagueRepository,
    TeamRepository,
    FixtureRepository,
    PlayerRepository,
    InjuryRepository,
)

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "LeagueRepository",
    "TeamRepository",
    "FixtureRepository",
    "PlayerRepository",
    "InjuryRepository",
]
