"""Team standings engine (pure, no storage/transport).

Single source of truth for the live leaderboard:
- Progress first: more completed legs ranks higher.
- Among teams with equal progress, less total elapsed time ranks higher.
- Full ties keep input order; ranks are never shared.
- pace_vs_projected is the gap to the rank-1 team, only for teams that have started.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Mapping, Sequence

from .config import RaceConfig
from .legs import legs_for_runner, runner_for_leg
from .models import Leg, LegResult, Runner, RunnerRef, Team, TeamRef, TeamStanding
from .types import RunnerRefPayload, StandingsPayload, TeamRefPayload, TeamStandingPayload


class InvalidStandingsInput(ValueError):
    """A result reached the engine without passing ingestion checks."""


@dataclass(frozen=True)
class _TeamProgress:
    team: Team
    completed_legs: int
    total_time: int
    total_kills: int
    projected_time: float
    current_leg: int
    current_runner: Runner | None


def _check_results(team: Team, results: Sequence[LegResult]) -> None:
    runner_ids = {runner.id for runner in team.runners}
    for result in results:
        if result.runner_id not in runner_ids:
            raise InvalidStandingsInput(
                f"invalid input: runner {result.runner_id} is not on team {team.name}"
            )
        if not result.clock_time > 0:
            raise InvalidStandingsInput(
                f"invalid input: non-positive clock time for leg {result.leg_number}"
            )


def projected_team_time(
    team: Team,
    config: RaceConfig,
    legs: Mapping[int, Leg] | None = None,
) -> float:
    """Estimated finish time for `team` from each runner's projected pace.

    Uses the real distance of every assigned leg when `legs` is given; otherwise
    (or for legs missing from it) falls back to `config.average_leg_miles`.
    """
    total = 0.0
    for runner in team.runners:
        for leg_number in legs_for_runner(runner, config):
            leg = legs.get(leg_number) if legs else None
            distance = leg.distance if leg is not None else config.average_leg_miles
            total += runner.projected_pace * distance
    return total


def _team_progress(
    team: Team,
    results: Sequence[LegResult],
    config: RaceConfig,
    legs: Mapping[int, Leg] | None,
) -> _TeamProgress:
    _check_results(team, results)
    completed = len(results)
    current_leg = min(completed + 1, config.total_legs)
    current_runner = (
        runner_for_leg(current_leg, team.runners, config)
        if completed < config.total_legs
        else None
    )
    return _TeamProgress(
        team=team,
        completed_legs=completed,
        total_time=sum(result.clock_time for result in results),
        total_kills=sum(result.kills for result in results),
        projected_time=projected_team_time(team, config, legs),
        current_leg=current_leg,
        current_runner=current_runner,
    )


def _standing_sort_key(progress: _TeamProgress) -> tuple[int, int]:
    return (-progress.completed_legs, progress.total_time)


def compute_standings(
    teams: Sequence[Team],
    results_by_team: Mapping[str, Sequence[LegResult]],
    config: RaceConfig,
    legs: Iterable[Leg] | None = None,
) -> list[TeamStanding]:
    """
    Compute the ranked team leaderboard from a results snapshot.

    Args:
      teams: every team, with its runners; order breaks full ties.
      results_by_team: mapping team_id -> that team's leg results. Missing
        teams are treated as not started.
      config: race constants.
      legs: optional leg records; when given, projected_time uses real distances.

    Returns:
      Standings sorted by rank ascending.
    """
    legs_by_number = {leg.leg_number: leg for leg in legs} if legs is not None else None
    progress = [
        _team_progress(team, tuple(results_by_team.get(team.id, ())), config, legs_by_number)
        for team in teams
    ]
    # list.sort is stable: equal keys keep the input team order.
    progress.sort(key=_standing_sort_key)

    leader_time = progress[0].total_time if progress else 0
    standings: list[TeamStanding] = []
    for position, item in enumerate(progress, start=1):
        # Teams that have not started get 0 rather than a misleading gap.
        pace_vs = item.total_time - leader_time if item.completed_legs > 0 else 0
        standings.append(
            TeamStanding(
                team=TeamRef.of(item.team),
                completed_legs=item.completed_legs,
                total_time=item.total_time,
                projected_time=item.projected_time,
                current_leg=item.current_leg,
                current_runner=(
                    RunnerRef(id=item.current_runner.id, name=item.current_runner.name)
                    if item.current_runner is not None
                    else None
                ),
                pace_vs_projected=pace_vs,
                total_kills=item.total_kills,
                rank=position,
                finished=item.completed_legs >= config.total_legs,
            )
        )
    return standings


def group_results_by_team(
    teams: Sequence[Team],
    results: Iterable[LegResult],
) -> dict[str, list[LegResult]]:
    """Flatten a raw result list into the team_id -> results mapping."""
    team_by_runner = {runner.id: team.id for team in teams for runner in team.runners}
    grouped: dict[str, list[LegResult]] = {team.id: [] for team in teams}
    for result in results:
        team_id = team_by_runner.get(result.runner_id)
        if team_id is None:
            raise InvalidStandingsInput(f"invalid input: unknown runner {result.runner_id}")
        grouped[team_id].append(result)
    return grouped


def _team_payload(team: TeamRef) -> TeamRefPayload:
    return {"id": team.id, "name": team.name, "city": team.city.value, "color": team.color}


def _runner_payload(runner: RunnerRef | None) -> RunnerRefPayload | None:
    if runner is None:
        return None
    return {"id": runner.id, "name": runner.name}


def standing_payload(standing: TeamStanding) -> TeamStandingPayload:
    return {
        "team": _team_payload(standing.team),
        "totalTime": standing.total_time,
        "projectedTime": standing.projected_time,
        "completedLegs": standing.completed_legs,
        "currentLeg": standing.current_leg,
        "currentRunner": _runner_payload(standing.current_runner),
        "paceVsProjected": standing.pace_vs_projected,
        "totalKills": standing.total_kills,
        "rank": standing.rank,
        "finished": standing.finished,
    }


@dataclass(frozen=True)
class StandingsSnapshot:
    """A complete leaderboard; any single snapshot replaces a client's whole view."""

    standings: tuple[TeamStanding, ...]
    sequence: int
    last_update: str

    @classmethod
    def build(cls, standings: Sequence[TeamStanding], sequence: int) -> "StandingsSnapshot":
        return cls(
            standings=tuple(standings),
            sequence=sequence,
            last_update=datetime.now(timezone.utc).isoformat(),
        )

    def to_payload(self) -> StandingsPayload:
        return {
            "standings": [standing_payload(s) for s in self.standings],
            "sequence": self.sequence,
            "lastUpdate": self.last_update,
        }
