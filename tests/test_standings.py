from __future__ import annotations

import pytest

from relay_core import (
    DEFAULT_CONFIG,
    City,
    InvalidStandingsInput,
    Leg,
    LegResult,
    Runner,
    StandingsSnapshot,
    Team,
    compute_standings,
    group_results_by_team,
    legs_for_runner,
    projected_team_time,
)


def _team(team_id: str, name: str | None = None, pace: float = 480) -> Team:
    runners = tuple(
        Runner(
            id=f"{team_id}-{van}-{order}",
            name=f"{team_id} runner {van}.{order}",
            team_id=team_id,
            van=van,
            run_order=order,
            projected_pace=pace,
        )
        for van in (1, 2)
        for order in range(1, 7)
    )
    return Team(id=team_id, name=name or team_id, city=City.HOUSTON, runners=runners)


def _results(team: Team, count: int, clock_time: int = 2400, kills: int = 0) -> list[LegResult]:
    """The first `count` legs of the race for `team`, each run by its assignee."""
    out = []
    for runner in team.runners:
        for leg in legs_for_runner(runner, DEFAULT_CONFIG):
            if leg <= count:
                out.append(
                    LegResult(leg_number=leg, runner_id=runner.id, clock_time=clock_time, kills=kills)
                )
    return sorted(out, key=lambda r: r.leg_number)


def _by_team(standings):
    return {s.team.id: s for s in standings}


def test_empty_race_keeps_input_order_and_starts_at_leg_one():
    teams = [_team(name) for name in ("BLACK", "BLUE", "GREY", "WHITE", "RED", "GREEN")]
    standings = compute_standings(teams, {}, DEFAULT_CONFIG)
    assert [s.team.id for s in standings] == ["BLACK", "BLUE", "GREY", "WHITE", "RED", "GREEN"]
    assert [s.rank for s in standings] == [1, 2, 3, 4, 5, 6]
    for s in standings:
        assert s.completed_legs == 0
        assert s.total_time == 0
        assert s.total_kills == 0
        assert s.pace_vs_projected == 0
        assert s.current_leg == 1
        assert s.current_runner is not None
        assert s.current_runner.id == f"{s.team.id}-1-1"


def test_team_without_runners_has_no_current_runner():
    team = Team(id="E", name="empty", city=City.DALLAS)
    (standing,) = compute_standings([team], {}, DEFAULT_CONFIG)
    assert standing.current_leg == 1
    assert standing.current_runner is None
    assert standing.projected_time == 0


def test_single_leg_completed():
    a, b = _team("A"), _team("B")
    results = {"A": [LegResult(leg_number=1, runner_id="A-1-1", clock_time=2400, kills=3)]}
    by_team = _by_team(compute_standings([a, b], results, DEFAULT_CONFIG))
    assert by_team["A"].completed_legs == 1
    assert by_team["A"].total_time == 2400
    assert by_team["A"].total_kills == 3
    assert by_team["A"].current_leg == 2
    assert by_team["A"].current_runner.id == "A-1-2"
    assert by_team["A"].rank == 1
    assert by_team["B"].rank == 2
    assert by_team["B"].pace_vs_projected == 0


def test_equal_progress_breaks_ties_by_less_time():
    a, b = _team("A"), _team("B")
    results = {"A": _results(a, 5, clock_time=2000), "B": _results(b, 5, clock_time=1800)}
    standings = compute_standings([a, b], results, DEFAULT_CONFIG)
    assert [s.team.id for s in standings] == ["B", "A"]
    by_team = _by_team(standings)
    assert by_team["A"].total_time == 10000
    assert by_team["B"].total_time == 9000
    assert by_team["B"].pace_vs_projected == 0
    assert by_team["A"].pace_vs_projected == 1000


def test_progress_beats_time():
    a, b = _team("A"), _team("B")
    results = {"A": _results(a, 6, clock_time=50000 // 6), "B": _results(b, 5, clock_time=20)}
    standings = compute_standings([b, a], results, DEFAULT_CONFIG)
    assert [s.team.id for s in standings] == ["A", "B"]
    assert standings[1].pace_vs_projected == 100 - standings[0].total_time


def test_pace_vs_projected_is_zero_for_teams_not_started():
    a, b, c = _team("A"), _team("B"), _team("C")
    results = {"A": _results(a, 2, clock_time=1000), "B": _results(b, 1, clock_time=1500)}
    by_team = _by_team(compute_standings([a, b, c], results, DEFAULT_CONFIG))
    assert by_team["A"].pace_vs_projected == 0
    assert by_team["B"].pace_vs_projected == -500
    assert by_team["C"].pace_vs_projected == 0
    assert by_team["C"].rank == 3


def test_full_ties_keep_input_order():
    a, b = _team("A"), _team("B")
    results = {"A": _results(a, 3), "B": _results(b, 3)}
    first = compute_standings([a, b], results, DEFAULT_CONFIG)
    second = compute_standings([b, a], results, DEFAULT_CONFIG)
    assert [s.team.id for s in first] == ["A", "B"]
    assert [s.team.id for s in second] == ["B", "A"]
    assert [s.rank for s in second] == [1, 2]


def test_finished_team_has_no_current_runner():
    a = _team("A")
    (standing,) = compute_standings([a], {"A": _results(a, 36, clock_time=2000)}, DEFAULT_CONFIG)
    assert standing.completed_legs == 36
    assert standing.current_leg == 36
    assert standing.current_runner is None
    assert standing.finished is True


def test_compute_standings_is_idempotent():
    teams = [_team("A"), _team("B"), _team("C")]
    results = {
        "A": _results(teams[0], 4, kills=1),
        "B": _results(teams[1], 7, clock_time=2100, kills=2),
    }
    assert compute_standings(teams, results, DEFAULT_CONFIG) == compute_standings(
        teams, results, DEFAULT_CONFIG
    )


def test_adding_a_result_never_decreases_progress_or_time():
    a = _team("A")
    previous = None
    for count in range(0, 13):
        (standing,) = compute_standings([a], {"A": _results(a, count, clock_time=1900)}, DEFAULT_CONFIG)
        if previous is not None:
            assert standing.completed_legs >= previous.completed_legs
            assert standing.total_time >= previous.total_time
        previous = standing


def test_projected_time_uses_leg_distances_when_available():
    a = _team("A", pace=600)
    estimate = projected_team_time(a, DEFAULT_CONFIG)
    assert estimate == 600 * 5.0 * 36
    legs = [Leg(leg_number=n, distance=4.0) for n in range(1, 37)]
    (standing,) = compute_standings([a], {}, DEFAULT_CONFIG, legs=legs)
    assert standing.projected_time == 600 * 4.0 * 36


def test_projected_time_falls_back_for_unknown_legs():
    a = _team("A", pace=600)
    legs = [Leg(leg_number=1, distance=3.0)]
    assert projected_team_time(a, DEFAULT_CONFIG, {1: legs[0]}) == 600 * 3.0 + 600 * 5.0 * 35


def test_result_for_runner_outside_team_is_rejected():
    a = _team("A")
    with pytest.raises(InvalidStandingsInput):
        compute_standings([a], {"A": [LegResult(leg_number=1, runner_id="B-1-1", clock_time=10)]}, DEFAULT_CONFIG)


def test_non_positive_clock_time_is_rejected():
    a = _team("A")
    with pytest.raises(InvalidStandingsInput):
        compute_standings([a], {"A": [LegResult(leg_number=1, runner_id="A-1-1", clock_time=0)]}, DEFAULT_CONFIG)


def test_group_results_by_team():
    a, b = _team("A"), _team("B")
    results = [
        LegResult(leg_number=1, runner_id="A-1-1", clock_time=100),
        LegResult(leg_number=1, runner_id="B-1-1", clock_time=200),
        LegResult(leg_number=2, runner_id="A-1-2", clock_time=300),
    ]
    grouped = group_results_by_team([a, b], results)
    assert [r.runner_id for r in grouped["A"]] == ["A-1-1", "A-1-2"]
    assert [r.runner_id for r in grouped["B"]] == ["B-1-1"]
    with pytest.raises(InvalidStandingsInput):
        group_results_by_team([a], results)


def test_snapshot_payload_is_complete_and_camel_cased():
    a, b = _team("A", name="black"), _team("B", name="blue")
    results = {"A": [LegResult(leg_number=1, runner_id="A-1-1", clock_time=2400, kills=3)]}
    snapshot = StandingsSnapshot.build(compute_standings([a, b], results, DEFAULT_CONFIG), 7)
    payload = snapshot.to_payload()
    assert payload["sequence"] == 7
    assert payload["lastUpdate"]
    first = payload["standings"][0]
    assert first["team"] == {"id": "A", "name": "BLACK", "city": "Houston", "color": "#808080"}
    assert first["completedLegs"] == 1
    assert first["totalTime"] == 2400
    assert first["totalKills"] == 3
    assert first["currentLeg"] == 2
    assert first["currentRunner"] == {"id": "A-1-2", "name": "A runner 1.2"}
    assert first["rank"] == 1
    assert len(payload["standings"]) == 2
