"""Result store contract and an in-memory implementation.

The standings engine never talks to storage directly. Callers read a snapshot
through a `ResultRepository` and hand the plain data to `compute_standings`.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Iterable, Protocol

from .config import DEFAULT_CONFIG, RaceConfig
from .legs import check_roster
from .models import Leg, LegResult, Runner, Team
from .standings import InvalidStandingsInput, group_results_by_team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceSnapshot:
    """Teams, legs and results as of one instant."""

    teams: tuple[Team, ...]
    legs: tuple[Leg, ...]
    results_by_team: dict[str, tuple[LegResult, ...]]


class ResultRepository(Protocol):
    async def snapshot(self) -> RaceSnapshot:
        """Teams, legs and grouped results read together.

        Implementations must return all three from one consistent read (a
        transaction or a single lock hold), never from separate queries that a
        concurrent write could land between.
        """
        ...

    async def list_teams(self) -> tuple[Team, ...]:
        ...

    async def list_legs(self) -> tuple[Leg, ...]:
        ...

    async def list_results_grouped(self) -> dict[str, tuple[LegResult, ...]]:
        """team_id -> every result recorded by that team's runners."""
        ...

    async def get_runner(self, runner_id: str) -> Runner | None:
        ...

    async def get_leg(self, leg_number: int) -> Leg | None:
        ...

    async def upsert_result(self, result: LegResult) -> tuple[LegResult, bool]:
        """Create or overwrite the result for (leg, runner); returns (stored, created)."""
        ...

    async def delete_result(self, leg_number: int, runner_id: str) -> LegResult | None:
        ...


class InMemoryResultStore:
    """Process-local ResultRepository; writes to the same (leg, runner) key are last-write-wins.

    Raises:
        ConfigurationError: if the roster does not fit `config` (see check_roster)
        InvalidStandingsInput: if a seed result belongs to an unknown runner
    """

    def __init__(
        self,
        teams: Iterable[Team] = (),
        legs: Iterable[Leg] = (),
        results: Iterable[LegResult] = (),
        *,
        config: RaceConfig = DEFAULT_CONFIG,
    ) -> None:
        self._teams: tuple[Team, ...] = tuple(teams)
        check_roster(self._teams, config)
        self._legs: dict[int, Leg] = {leg.leg_number: leg for leg in legs}
        self._runners: dict[str, Runner] = {
            runner.id: runner for team in self._teams for runner in team.runners
        }
        self._results: dict[tuple[int, str], LegResult] = {}
        self._lock = asyncio.Lock()
        for result in results:
            if result.runner_id not in self._runners:
                raise InvalidStandingsInput(f"invalid input: unknown runner {result.runner_id}")
            self._results[result.key] = result

    def _grouped(self, results: Iterable[LegResult]) -> dict[str, tuple[LegResult, ...]]:
        grouped = group_results_by_team(self._teams, results)
        return {team_id: tuple(items) for team_id, items in grouped.items()}

    async def snapshot(self) -> RaceSnapshot:
        async with self._lock:
            results = list(self._results.values())
            teams = self._teams
            legs = tuple(self._legs[n] for n in sorted(self._legs))
        return RaceSnapshot(teams=teams, legs=legs, results_by_team=self._grouped(results))

    async def list_teams(self) -> tuple[Team, ...]:
        return self._teams

    async def list_legs(self) -> tuple[Leg, ...]:
        return tuple(self._legs[n] for n in sorted(self._legs))

    async def list_results_grouped(self) -> dict[str, tuple[LegResult, ...]]:
        async with self._lock:
            results = list(self._results.values())
        return self._grouped(results)

    async def list_results(self) -> tuple[LegResult, ...]:
        async with self._lock:
            return tuple(self._results.values())

    async def get_runner(self, runner_id: str) -> Runner | None:
        return self._runners.get(runner_id)

    async def get_leg(self, leg_number: int) -> Leg | None:
        return self._legs.get(leg_number)

    async def upsert_result(self, result: LegResult) -> tuple[LegResult, bool]:
        stamped = replace(result, updated_at=datetime.now(timezone.utc).isoformat())
        async with self._lock:
            created = stamped.key not in self._results
            self._results[stamped.key] = stamped
        logger.debug(
            f"{'Created' if created else 'Updated'} result leg={stamped.leg_number} "
            f"runner={stamped.runner_id}"
        )
        return stamped, created

    async def delete_result(self, leg_number: int, runner_id: str) -> LegResult | None:
        async with self._lock:
            return self._results.pop((leg_number, runner_id), None)
