"""
Service layer: domain logic and the round-robin scheduler.
scheduling is pure; league_service, fixture_service and injury_service orchestrate persistence.
"""
from .scheduling import (
    InsufficientTeamsError,
    InvalidPolicyError,
    DuplicateTeamError,
    SchedulingError,
    SchedulingPolicy,
    TeamRef,
    Matchup,
    Round,
    generate_schedule,
    next_anchor,
)
from .league_service import (
    LeagueService,
    LeagueNotFoundError,
    TeamNotFoundError,
    DuplicateLeagueError,
    TeamLimitReachedError,
)
from .fixture_service import (
    FixtureService,
    PartialGenerationError,
    FixtureGenerationCancelled,
)
from .injury_service import (
    InjuryService,
    PlayerNotFoundError,
    InvalidInjuryReportError,
)

__all__ = [
    "InsufficientTeamsError",
    "InvalidPolicyError",
    "DuplicateTeamError",
    "SchedulingError",
    "SchedulingPolicy",
    "TeamRef",
    "Matchup",
    "Round",
    "generate_schedule",
    "next_anchor",
    "LeagueService",
    "LeagueNotFoundError",
    "TeamNotFoundError",
    "DuplicateLeagueError",
    "TeamLimitReachedError",
    "FixtureService",
    "PartialGenerationError",
    "FixtureGenerationCancelled",
    "InjuryService",
    "PlayerNotFoundError",
    "InvalidInjuryReportError",
]
