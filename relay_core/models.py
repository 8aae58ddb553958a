"""Configuration and result records consumed by the standings engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class City(str, Enum):
    HOUSTON = "Houston"
    DALLAS = "Dallas"


Provenance = Literal["runner", "captain", "admin", "import"]
Difficulty = Literal["easy", "moderate", "hard"]


@dataclass(frozen=True)
class Runner:
    id: str
    name: str
    team_id: str
    van: int
    run_order: int
    # Seconds per mile.
    projected_pace: float
    pin: str | None = None


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    city: City
    color: str = "#808080"
    runners: tuple[Runner, ...] = ()
    van1_captain: str | None = None
    van2_captain: str | None = None

    def __post_init__(self) -> None:
        # Team names are compared and displayed uppercase (BLACK, BLUE, ...).
        object.__setattr__(self, "name", self.name.strip().upper())
        object.__setattr__(self, "runners", tuple(self.runners))


@dataclass(frozen=True)
class Leg:
    leg_number: int
    distance: float
    difficulty: Difficulty | None = None
    elevation: float | None = None
    start_point: str | None = None
    end_point: str | None = None
    start_lat: float | None = None
    start_lng: float | None = None
    end_lat: float | None = None
    end_lng: float | None = None


@dataclass(frozen=True)
class LegResult:
    leg_number: int
    runner_id: str
    # Seconds elapsed for the runner on this leg.
    clock_time: int
    kills: int = 0
    entered_by: Provenance = "admin"
    updated_at: str | None = None

    @property
    def key(self) -> tuple[int, str]:
        return (self.leg_number, self.runner_id)


@dataclass(frozen=True)
class RunnerRef:
    id: str
    name: str


@dataclass(frozen=True)
class TeamRef:
    id: str
    name: str
    city: City
    color: str

    @classmethod
    def of(cls, team: Team) -> "TeamRef":
        return cls(id=team.id, name=team.name, city=team.city, color=team.color)


@dataclass(frozen=True)
class TeamStanding:
    team: TeamRef
    completed_legs: int
    total_time: int
    projected_time: float
    current_leg: int
    current_runner: RunnerRef | None
    pace_vs_projected: int
    total_kills: int
    rank: int
    finished: bool = False
