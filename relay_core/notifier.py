"""Result events and the standings broadcaster.

Flow:
- Ingestion publishes ResultAccepted / ResultRemoved on the EventBus after the
  store confirmed the write.
- StandingsBroadcaster reads one snapshot from the repository, recomputes the
  full leaderboard and pushes it to every dashboard observer.
- Observers always receive complete snapshots (never diffs) tagged with a
  monotonically increasing sequence, so any single message replaces their view.
"""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from .config import RaceConfig
from .models import LegResult
from .standings import StandingsSnapshot, compute_standings
from .store import ResultRepository
from .types import BroadcastMessage, LegResultPayload

logger = logging.getLogger(__name__)

DASHBOARD_ROOM = "dashboard"


def team_room(team_id: str) -> str:
    return f"team:{team_id}"


@dataclass(frozen=True)
class ResultAccepted:
    result: LegResult
    team_id: str
    created: bool


@dataclass(frozen=True)
class ResultRemoved:
    result: LegResult
    team_id: str


ResultEvent = Union[ResultAccepted, ResultRemoved]
EventHandler = Callable[[ResultEvent], Awaitable[None]]


class EventBus:
    """In-process async pub/sub for result events."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: ResultEvent) -> None:
        for handler in list(self._handlers.get(type(event), ())):
            try:
                await handler(event)
            except Exception:
                # One broken subscriber must not block the others.
                logger.exception(f"Handler {handler!r} failed for {type(event).__name__}")


def leg_result_payload(result: LegResult) -> LegResultPayload:
    return {
        "legNumber": result.leg_number,
        "runnerId": result.runner_id,
        "clockTime": result.clock_time,
        "kills": result.kills,
        "enteredBy": result.entered_by,
        "updatedAt": result.updated_at,
    }


async def recompute_standings(
    repository: ResultRepository,
    config: RaceConfig,
    sequence: int = 0,
) -> StandingsSnapshot:
    """Read one repository snapshot and compute the full leaderboard from it."""
    snapshot = await repository.snapshot()
    standings = compute_standings(
        snapshot.teams, snapshot.results_by_team, config, legs=snapshot.legs
    )
    return StandingsSnapshot.build(standings, sequence)


class Subscription:
    """Bounded message queue for one observer; the oldest message is dropped on overflow."""

    def __init__(self, room: str, maxsize: int = 64) -> None:
        self.room = room
        self.queue: asyncio.Queue[BroadcastMessage] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def push(self, message: BroadcastMessage) -> None:
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.queue.get_nowait()
            self.dropped += 1
            self.queue.put_nowait(message)

    async def get(self) -> BroadcastMessage:
        return await self.queue.get()

    def get_nowait(self) -> BroadcastMessage:
        return self.queue.get_nowait()

    def pending(self) -> int:
        return self.queue.qsize()


class StandingsBroadcaster:
    """Recompute-and-broadcast subscriber for result events."""

    def __init__(
        self,
        repository: ResultRepository,
        config: RaceConfig,
        *,
        queue_size: int = 64,
    ) -> None:
        self._repository = repository
        self._config = config
        self._queue_size = queue_size
        self._rooms: dict[str, set[Subscription]] = defaultdict(set)
        self._sequence = 0
        self._latest: StandingsSnapshot | None = None
        self._lock = asyncio.Lock()

    @property
    def latest(self) -> StandingsSnapshot | None:
        return self._latest

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(ResultAccepted, self.handle)
        bus.subscribe(ResultRemoved, self.handle)

    def subscribe(self, room: str = DASHBOARD_ROOM) -> Subscription:
        subscription = Subscription(room, maxsize=self._queue_size)
        self._rooms[room].add(subscription)
        # Late joiners start from the current leaderboard instead of waiting for the next write.
        if room == DASHBOARD_ROOM and self._latest is not None:
            subscription.push(self._leaderboard_message(self._latest))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._rooms.get(subscription.room, set()).discard(subscription)

    def _send(self, room: str, message: BroadcastMessage) -> None:
        for subscription in list(self._rooms.get(room, ())):
            subscription.push(message)

    @staticmethod
    def _leaderboard_message(snapshot: StandingsSnapshot) -> BroadcastMessage:
        return {
            "type": "leaderboard:update",
            "room": DASHBOARD_ROOM,
            "payload": snapshot.to_payload(),
        }

    async def refresh(self) -> StandingsSnapshot:
        """Recompute from the repository and push the snapshot to the dashboard room."""
        async with self._lock:
            self._sequence += 1
            snapshot = await recompute_standings(self._repository, self._config, self._sequence)
            self._latest = snapshot
            self._send(DASHBOARD_ROOM, self._leaderboard_message(snapshot))
        logger.info(
            f"Broadcast standings seq={snapshot.sequence} teams={len(snapshot.standings)}"
        )
        return snapshot

    async def handle(self, event: ResultEvent) -> None:
        message_type = "time:entered" if isinstance(event, ResultAccepted) else "time:removed"
        message: BroadcastMessage = {
            "type": message_type,
            "legResult": leg_result_payload(event.result),
            "teamId": event.team_id,
        }
        for room in (DASHBOARD_ROOM, team_room(event.team_id)):
            self._send(room, {**message, "room": room})
        await self.refresh()
