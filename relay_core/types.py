"""Wire payload shapes for standings, leg boards and broadcast messages."""
from __future__ import annotations

from typing import List, Optional, TypedDict


class TeamRefPayload(TypedDict):
    id: str
    name: str
    city: str  # 'Houston' | 'Dallas'
    color: str


class RunnerRefPayload(TypedDict):
    id: str
    name: str


class TeamStandingPayload(TypedDict):
    team: TeamRefPayload
    totalTime: int  # seconds
    projectedTime: float  # seconds
    completedLegs: int
    currentLeg: int
    currentRunner: Optional[RunnerRefPayload]
    paceVsProjected: int  # positive = behind the leader
    totalKills: int
    rank: int
    finished: bool


class StandingsPayload(TypedDict):
    """Full leaderboard. Clients replace their whole view with it."""
    standings: List[TeamStandingPayload]
    sequence: int
    lastUpdate: str  # ISO-8601, UTC


class LegResultPayload(TypedDict, total=False):
    legNumber: int
    runnerId: str
    clockTime: int
    kills: int
    enteredBy: str  # 'runner' | 'captain' | 'admin' | 'import'
    updatedAt: Optional[str]


class RankedLegResultPayload(TypedDict):
    runnerId: str
    runnerName: str
    teamName: str
    clockTime: int
    pace: float  # seconds per mile
    kills: int
    rank: int


class LegBoardPayload(TypedDict):
    legNumber: int
    distance: float
    results: List[RankedLegResultPayload]


class BroadcastMessage(TypedDict, total=False):
    """
    Message pushed to observers.

    type is 'leaderboard:update' (carries `payload: StandingsPayload`),
    'time:entered' (carries `legResult`) or 'time:removed'.
    """
    type: str
    room: str
    payload: StandingsPayload
    legResult: LegResultPayload
    teamId: str
