"""Result ingestion gateway.

Who may enter a time:
- runner: only for themselves, only on one of their own legs
- captain: any runner on their team and van
- admin / import: any runner
For every submitter the leg must be one of the runner's assigned legs, so the
standings engine can assume clean input.

Accepted submissions are upserted into the store and only then announced as a
ResultAccepted event (exactly one event per confirmed write).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal

from .config import RaceConfig
from .legs import is_runner_leg, slot_in_range
from .models import LegResult, Runner
from .notifier import EventBus, ResultAccepted, ResultRemoved
from .store import ResultRepository
from .validation import InputSanitizer, ValidatedTimeEntry

logger = logging.getLogger(__name__)

SubmitterKind = Literal["runner", "captain", "admin", "import"]


@dataclass(frozen=True)
class Submitter:
    kind: SubmitterKind
    runner_id: str | None = None
    team_id: str | None = None
    van: int | None = None


@dataclass
class SubmissionError:
    """Rejected submission (pure value; the transport maps status_code)."""

    kind: str
    message: str | None = None
    status_code: int | None = None


@dataclass
class SubmissionOutcome:
    result: LegResult | None
    created: bool = False
    error: SubmissionError | None = None

    @property
    def accepted(self) -> bool:
        return self.error is None


def authorize_submission(
    submitter: Submitter,
    runner: Runner,
    leg_number: int,
    config: RaceConfig,
) -> SubmissionError | None:
    """Check that `submitter` may record `leg_number` for `runner`."""
    if submitter.kind == "runner":
        if submitter.runner_id != runner.id:
            return SubmissionError(
                kind="not_authorized",
                message="Runners can only enter their own times",
                status_code=403,
            )
    elif submitter.kind == "captain":
        if runner.team_id != submitter.team_id or runner.van != submitter.van:
            return SubmissionError(
                kind="not_authorized",
                message="Not authorized for this runner",
                status_code=403,
            )
    elif submitter.kind not in {"admin", "import"}:
        return SubmissionError(kind="not_authorized", status_code=403)

    # An out-of-range seat would map onto another runner's legs.
    if not slot_in_range(runner.van, runner.run_order, config):
        return SubmissionError(
            kind="invalid_runner_slot",
            message=f"{runner.name} has van {runner.van} / order {runner.run_order}, not a race seat",
            status_code=400,
        )
    if not is_runner_leg(runner, leg_number, config):
        return SubmissionError(
            kind="not_runner_leg",
            message=f"Leg {leg_number} is not assigned to {runner.name}",
            status_code=403,
        )
    return None


class ResultGateway:
    """Validate, authorize and persist time entries, then announce them."""

    def __init__(self, repository: ResultRepository, bus: EventBus, config: RaceConfig) -> None:
        self._repository = repository
        self._bus = bus
        self._config = config

    async def submit(self, submitter: Submitter, payload: Dict[str, Any]) -> SubmissionOutcome:
        try:
            entry: ValidatedTimeEntry = InputSanitizer.validate_and_sanitize_entry(payload)
        except ValueError as e:
            return SubmissionOutcome(
                result=None,
                error=SubmissionError(kind="invalid_entry", message=str(e), status_code=400),
            )

        runner_id = submitter.runner_id if submitter.kind == "runner" else entry.runnerId
        if not runner_id:
            return self._reject(
                SubmissionError(kind="missing_fields", message="runnerId is required", status_code=400)
            )

        runner = await self._repository.get_runner(runner_id)
        if runner is None:
            return self._reject(
                SubmissionError(kind="runner_not_found", message="Runner not found", status_code=404)
            )
        leg = await self._repository.get_leg(entry.legNumber)
        if leg is None:
            return self._reject(
                SubmissionError(kind="leg_not_found", message="Leg not found", status_code=404)
            )

        error = authorize_submission(submitter, runner, entry.legNumber, self._config)
        if error is not None:
            return self._reject(error)

        stored, created = await self._repository.upsert_result(
            LegResult(
                leg_number=entry.legNumber,
                runner_id=runner.id,
                clock_time=entry.clockTime,
                kills=entry.kills,
                entered_by=submitter.kind,
            )
        )
        logger.info(
            f"Accepted leg {stored.leg_number} for runner {runner.id} "
            f"({stored.clock_time}s, {stored.kills} kills, by {submitter.kind})"
        )
        await self._bus.publish(ResultAccepted(result=stored, team_id=runner.team_id, created=created))
        return SubmissionOutcome(result=stored, created=created)

    async def remove(self, submitter: Submitter, leg_number: int, runner_id: str) -> SubmissionOutcome:
        """Admin-only delete of one result."""
        if submitter.kind != "admin":
            return self._reject(
                SubmissionError(kind="not_authorized", message="Admin only", status_code=403)
            )
        runner = await self._repository.get_runner(runner_id)
        if runner is None:
            return self._reject(
                SubmissionError(kind="runner_not_found", message="Runner not found", status_code=404)
            )
        removed = await self._repository.delete_result(leg_number, runner_id)
        if removed is None:
            return self._reject(
                SubmissionError(kind="result_not_found", message="Result not found", status_code=404)
            )
        logger.info(f"Removed leg {leg_number} result for runner {runner_id}")
        await self._bus.publish(ResultRemoved(result=removed, team_id=runner.team_id))
        return SubmissionOutcome(result=removed)

    @staticmethod
    def _reject(error: SubmissionError) -> SubmissionOutcome:
        logger.warning(f"Rejected submission: {error.kind} ({error.message})")
        return SubmissionOutcome(result=None, error=error)
