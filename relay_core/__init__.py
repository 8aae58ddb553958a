from .config import DEFAULT_CONFIG, ConfigurationError, RaceConfig
from .models import City, Leg, LegResult, Runner, RunnerRef, Team, TeamRef, TeamStanding
from .legs import (
    check_roster,
    legs_for_runner,
    legs_for_van,
    runner_for_leg,
    slot_for_leg,
    slot_in_range,
)
from .standings import (
    InvalidStandingsInput,
    StandingsSnapshot,
    compute_standings,
    group_results_by_team,
    projected_team_time,
    standing_payload,
)
from .pace import (
    format_pace,
    format_pace_diff,
    format_time,
    pace_from_result,
    parse_time_to_seconds,
)
from .leaderboards import (
    RankedLegResult,
    kills_leaderboard,
    leg_results_board,
    rank_leg_results,
    runner_leg_breakdown,
    van_leg_status,
)
from .validation import InputSanitizer, ValidatedTimeEntry
from .store import InMemoryResultStore, RaceSnapshot, ResultRepository
from .notifier import (
    EventBus,
    ResultAccepted,
    ResultRemoved,
    StandingsBroadcaster,
    recompute_standings,
)
from .ingestion import ResultGateway, SubmissionError, SubmissionOutcome, Submitter
from .pins import generate_pin

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigurationError",
    "RaceConfig",
    "City",
    "Leg",
    "LegResult",
    "Runner",
    "RunnerRef",
    "Team",
    "TeamRef",
    "TeamStanding",
    "check_roster",
    "legs_for_runner",
    "legs_for_van",
    "runner_for_leg",
    "slot_for_leg",
    "slot_in_range",
    "InvalidStandingsInput",
    "StandingsSnapshot",
    "compute_standings",
    "group_results_by_team",
    "projected_team_time",
    "standing_payload",
    "format_pace",
    "format_pace_diff",
    "format_time",
    "pace_from_result",
    "parse_time_to_seconds",
    "RankedLegResult",
    "kills_leaderboard",
    "leg_results_board",
    "rank_leg_results",
    "runner_leg_breakdown",
    "van_leg_status",
    "InputSanitizer",
    "ValidatedTimeEntry",
    "InMemoryResultStore",
    "RaceSnapshot",
    "ResultRepository",
    "EventBus",
    "ResultAccepted",
    "ResultRemoved",
    "StandingsBroadcaster",
    "recompute_standings",
    "ResultGateway",
    "SubmissionError",
    "SubmissionOutcome",
    "Submitter",
    "generate_pin",
]
