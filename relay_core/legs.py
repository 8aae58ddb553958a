"""Leg assignment arithmetic.

A runner's legs are never stored: they follow from (van, run_order).
With the default race (2 vans x 6 runners, 36 legs):
- Van 1 runs legs 1-6, 13-18, 25-30
- Van 2 runs legs 7-12, 19-24, 31-36
Runner (van, order) starts at `order + (van - 1) * runners_per_van` and then
repeats every `legs_per_van` legs.
"""
from __future__ import annotations

from typing import Iterable

from .config import ConfigurationError, RaceConfig
from .models import Runner, Team


def base_leg(van: int, run_order: int, config: RaceConfig) -> int:
    return run_order + (van - 1) * config.runners_per_van


def legs_for_runner(runner: Runner, config: RaceConfig) -> tuple[int, ...]:
    """Ascending leg numbers assigned to `runner` (3 for the default race)."""
    base = base_leg(runner.van, runner.run_order, config)
    return tuple(base + k * config.legs_per_van for k in range(config.legs_per_runner))


def slot_for_leg(leg_number: int, config: RaceConfig) -> tuple[int, int] | None:
    """(van, run_order) expected to run `leg_number`, or None if out of range."""
    if isinstance(leg_number, bool) or not isinstance(leg_number, int):
        return None
    if leg_number < 1 or leg_number > config.total_legs:
        return None
    offset = (leg_number - 1) % config.legs_per_van
    van = offset // config.runners_per_van + 1
    run_order = offset % config.runners_per_van + 1
    return van, run_order


def runner_for_leg(
    leg_number: int,
    team_runners: Iterable[Runner],
    config: RaceConfig,
) -> Runner | None:
    """Runner on the team scheduled for `leg_number`, submitted or not."""
    slot = slot_for_leg(leg_number, config)
    if slot is None:
        return None
    van, run_order = slot
    for runner in team_runners:
        if runner.van == van and runner.run_order == run_order:
            return runner
    return None


def legs_for_van(van: int, config: RaceConfig) -> tuple[int, ...]:
    """Every leg covered by `van`, ascending (captain views)."""
    if van < 1 or van > config.vans:
        return ()
    legs: list[int] = []
    for run_order in range(1, config.runners_per_van + 1):
        base = base_leg(van, run_order, config)
        legs.extend(base + k * config.legs_per_van for k in range(config.legs_per_runner))
    return tuple(sorted(legs))


def is_runner_leg(runner: Runner, leg_number: int, config: RaceConfig) -> bool:
    return leg_number in legs_for_runner(runner, config)


def slot_in_range(van: int, run_order: int, config: RaceConfig) -> bool:
    """True when (van, run_order) is a real seat in a van for this race shape."""
    return 1 <= van <= config.vans and 1 <= run_order <= config.runners_per_van


def check_roster(teams: Iterable[Team], config: RaceConfig) -> None:
    """Reject rosters where two runners would share a race position.

    Raises:
        ConfigurationError: on an out-of-range (van, run_order) or a slot used twice in a team
    """
    for team in teams:
        seen: dict[tuple[int, int], str] = {}
        for runner in team.runners:
            slot = (runner.van, runner.run_order)
            if not slot_in_range(runner.van, runner.run_order, config):
                raise ConfigurationError(
                    f"runner {runner.id} on {team.name} has van {runner.van} / order "
                    f"{runner.run_order}, outside {config.vans} vans x {config.runners_per_van}"
                )
            if slot in seen:
                raise ConfigurationError(
                    f"runners {seen[slot]} and {runner.id} on {team.name} share van "
                    f"{runner.van} / order {runner.run_order}"
                )
            seen[slot] = runner.id
