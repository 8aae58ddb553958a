"""Secondary leaderboard views: leg winners, kills, per-runner and per-van legs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .config import RaceConfig
from .legs import legs_for_runner, legs_for_van
from .models import Leg, LegResult, Runner, Team, TeamStanding
from .pace import pace_from_result
from .types import LegBoardPayload


@dataclass(frozen=True)
class RankedLegResult:
    result: LegResult
    rank: int


@dataclass(frozen=True)
class RunnerLegLine:
    leg_number: int
    distance: float | None
    clock_time: int | None
    kills: int
    pace: float | None


@dataclass(frozen=True)
class VanLegLine:
    leg: Leg
    completed: bool


def _leg_result_sort_key(result: LegResult) -> tuple[float, str]:
    # Identical clock times fall back to runner id so the order never depends on input.
    return (result.clock_time, result.runner_id)


def rank_leg_results(results: Iterable[LegResult]) -> list[RankedLegResult]:
    """Rank one leg's results, fastest first (1-based)."""
    ordered = sorted(results, key=_leg_result_sort_key)
    return [RankedLegResult(result=result, rank=idx) for idx, result in enumerate(ordered, start=1)]


def leg_results_board(
    legs: Sequence[Leg],
    results: Iterable[LegResult],
    teams: Sequence[Team],
) -> list[LegBoardPayload]:
    """Every leg (ascending) with its ranked results, for the leg-winners view."""
    runners: dict[str, Runner] = {}
    team_names: dict[str, str] = {}
    for team in teams:
        team_names[team.id] = team.name
        for runner in team.runners:
            runners[runner.id] = runner

    by_leg: dict[int, list[LegResult]] = {}
    for result in results:
        by_leg.setdefault(result.leg_number, []).append(result)

    board: list[LegBoardPayload] = []
    for leg in sorted(legs, key=lambda item: item.leg_number):
        rows = []
        for ranked in rank_leg_results(by_leg.get(leg.leg_number, ())):
            runner = runners.get(ranked.result.runner_id)
            rows.append(
                {
                    "runnerId": ranked.result.runner_id,
                    "runnerName": runner.name if runner else "",
                    "teamName": team_names.get(runner.team_id, "") if runner else "",
                    "clockTime": ranked.result.clock_time,
                    "pace": pace_from_result(ranked.result.clock_time, leg.distance),
                    "kills": ranked.result.kills,
                    "rank": ranked.rank,
                }
            )
        board.append({"legNumber": leg.leg_number, "distance": leg.distance, "results": rows})
    return board


def kills_leaderboard(standings: Sequence[TeamStanding]) -> list[TeamStanding]:
    """Teams ordered by total kills, most first; equal counts keep rank order."""
    return sorted(standings, key=lambda standing: -standing.total_kills)


def runner_leg_breakdown(
    runner: Runner,
    legs: Mapping[int, Leg],
    results: Iterable[LegResult],
    config: RaceConfig,
) -> list[RunnerLegLine]:
    """The runner's assigned legs with time, kills and pace where run."""
    own = {result.leg_number: result for result in results if result.runner_id == runner.id}
    lines: list[RunnerLegLine] = []
    for leg_number in legs_for_runner(runner, config):
        leg = legs.get(leg_number)
        result = own.get(leg_number)
        pace = None
        if result is not None and leg is not None:
            pace = pace_from_result(result.clock_time, leg.distance)
        lines.append(
            RunnerLegLine(
                leg_number=leg_number,
                distance=leg.distance if leg is not None else None,
                clock_time=result.clock_time if result is not None else None,
                kills=result.kills if result is not None else 0,
                pace=pace,
            )
        )
    return lines


def van_leg_status(
    van: int,
    legs: Mapping[int, Leg],
    team_results: Iterable[LegResult],
    config: RaceConfig,
) -> list[VanLegLine]:
    """Legs of one van with a completed flag (captain view).

    `team_results` must be limited to the captain's team.
    """
    completed = {result.leg_number for result in team_results}
    return [
        VanLegLine(leg=legs[leg_number], completed=leg_number in completed)
        for leg_number in legs_for_van(van, config)
        if leg_number in legs
    ]
