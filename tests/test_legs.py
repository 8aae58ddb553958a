from __future__ import annotations

import pytest

from relay_core import (
    DEFAULT_CONFIG,
    City,
    ConfigurationError,
    RaceConfig,
    Runner,
    Team,
    check_roster,
    legs_for_runner,
    legs_for_van,
    runner_for_leg,
    slot_for_leg,
    slot_in_range,
)


def _runners(team_id: str, config: RaceConfig = DEFAULT_CONFIG) -> list[Runner]:
    return [
        Runner(
            id=f"{team_id}-{van}-{order}",
            name=f"Runner {van}.{order}",
            team_id=team_id,
            van=van,
            run_order=order,
            projected_pace=480,
        )
        for van in range(1, config.vans + 1)
        for order in range(1, config.runners_per_van + 1)
    ]


def test_default_race_leg_assignments():
    runners = {r.id: r for r in _runners("T")}
    assert legs_for_runner(runners["T-1-1"], DEFAULT_CONFIG) == (1, 13, 25)
    assert legs_for_runner(runners["T-1-6"], DEFAULT_CONFIG) == (6, 18, 30)
    assert legs_for_runner(runners["T-2-1"], DEFAULT_CONFIG) == (7, 19, 31)
    assert legs_for_runner(runners["T-2-6"], DEFAULT_CONFIG) == (12, 24, 36)


def test_every_runner_gets_three_distinct_increasing_legs_congruent_to_base():
    for runner in _runners("T"):
        legs = legs_for_runner(runner, DEFAULT_CONFIG)
        assert len(legs) == 3
        assert len(set(legs)) == 3
        assert list(legs) == sorted(legs)
        assert all(a < b for a, b in zip(legs, legs[1:]))
        assert {leg % DEFAULT_CONFIG.legs_per_van for leg in legs} == {
            legs[0] % DEFAULT_CONFIG.legs_per_van
        }


def test_team_legs_cover_the_whole_race_exactly_once():
    covered = [leg for r in _runners("T") for leg in legs_for_runner(r, DEFAULT_CONFIG)]
    assert sorted(covered) == list(range(1, 37))


def test_runner_for_leg_round_trips_legs_for_runner():
    runners = _runners("T")
    for runner in runners:
        for leg in legs_for_runner(runner, DEFAULT_CONFIG):
            assert runner_for_leg(leg, runners, DEFAULT_CONFIG) == runner


def test_runner_for_leg_out_of_range_returns_none():
    runners = _runners("T")
    assert runner_for_leg(0, runners, DEFAULT_CONFIG) is None
    assert runner_for_leg(-3, runners, DEFAULT_CONFIG) is None
    assert runner_for_leg(37, runners, DEFAULT_CONFIG) is None


def test_runner_for_leg_missing_runner_returns_none():
    runners = [r for r in _runners("T") if r.id != "T-2-3"]
    assert runner_for_leg(9, runners, DEFAULT_CONFIG) is None
    assert runner_for_leg(10, runners, DEFAULT_CONFIG).id == "T-2-4"


def test_slot_for_leg():
    assert slot_for_leg(1, DEFAULT_CONFIG) == (1, 1)
    assert slot_for_leg(12, DEFAULT_CONFIG) == (2, 6)
    assert slot_for_leg(25, DEFAULT_CONFIG) == (1, 1)
    assert slot_for_leg(36, DEFAULT_CONFIG) == (2, 6)
    assert slot_for_leg(37, DEFAULT_CONFIG) is None


def test_legs_for_van_matches_captain_views():
    assert legs_for_van(1, DEFAULT_CONFIG) == (
        1, 2, 3, 4, 5, 6, 13, 14, 15, 16, 17, 18, 25, 26, 27, 28, 29, 30,
    )
    assert legs_for_van(2, DEFAULT_CONFIG) == (
        7, 8, 9, 10, 11, 12, 19, 20, 21, 22, 23, 24, 31, 32, 33, 34, 35, 36,
    )
    assert legs_for_van(3, DEFAULT_CONFIG) == ()


def test_custom_race_shape_is_a_config_change():
    # 3 vans of 4 runners, 2 rotations.
    config = RaceConfig(total_legs=24, runners_per_van=4, legs_per_van=12)
    runners = _runners("T", config)
    assert config.vans == 3
    assert config.legs_per_runner == 2
    by_id = {r.id: r for r in runners}
    assert legs_for_runner(by_id["T-3-2"], config) == (10, 22)
    for runner in runners:
        for leg in legs_for_runner(runner, config):
            assert runner_for_leg(leg, runners, config) == runner


@pytest.mark.parametrize(
    "kwargs",
    [
        {"legs_per_van": 0},
        {"total_legs": -1},
        {"runners_per_van": 0},
        {"legs_per_van": 10},
        {"total_legs": 30},
        {"average_leg_miles": 0},
    ],
)
def test_invalid_config_is_rejected_at_construction(kwargs):
    with pytest.raises(ConfigurationError):
        RaceConfig(**kwargs)


def test_team_name_is_uppercase():
    team = Team(id="t1", name=" black ", city=City.HOUSTON)
    assert team.name == "BLACK"


def test_slot_in_range_follows_race_shape():
    assert slot_in_range(1, 6, DEFAULT_CONFIG)
    assert slot_in_range(2, 1, DEFAULT_CONFIG)
    assert not slot_in_range(1, 7, DEFAULT_CONFIG)
    assert not slot_in_range(3, 1, DEFAULT_CONFIG)
    assert not slot_in_range(0, 1, DEFAULT_CONFIG)
    assert slot_in_range(3, 4, RaceConfig(total_legs=24, runners_per_van=4, legs_per_van=12))


def test_check_roster_accepts_full_team():
    check_roster([Team(id="T", name="T", city=City.DALLAS, runners=_runners("T"))], DEFAULT_CONFIG)


def test_check_roster_rejects_seat_outside_the_vans():
    # Van 1 / order 7 would run legs 7, 19, 31, which belong to van 2 / order 1.
    rogue = Runner(id="T-x", name="Rogue", team_id="T", van=1, run_order=7, projected_pace=480)
    assert legs_for_runner(rogue, DEFAULT_CONFIG) == (7, 19, 31)
    team = Team(id="T", name="T", city=City.DALLAS, runners=[*_runners("T"), rogue])
    with pytest.raises(ConfigurationError, match="order 7"):
        check_roster([team], DEFAULT_CONFIG)


def test_check_roster_rejects_shared_seat():
    runners = _runners("T")
    twin = Runner(id="T-twin", name="Twin", team_id="T", van=2, run_order=3, projected_pace=480)
    team = Team(id="T", name="T", city=City.DALLAS, runners=[*runners, twin])
    with pytest.raises(ConfigurationError, match="T-2-3 and T-twin"):
        check_roster([team], DEFAULT_CONFIG)
    # The same seat on two different teams is fine.
    check_roster(
        [
            Team(id="T", name="T", city=City.DALLAS, runners=runners),
            Team(id="U", name="U", city=City.DALLAS, runners=_runners("U")),
        ],
        DEFAULT_CONFIG,
    )
