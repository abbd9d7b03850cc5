"""Batch upload handler - turns a user selection into gallery references."""
from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from typing import Iterable, Optional, Tuple

from .. import reference_list
from ..errors import TooManyFiles
from ..models import (
    BatchReport,
    Candidate,
    CandidateOutcome,
    CandidateState,
    EphemeralReference,
    Notification,
    ReferenceList,
    UploadConfig,
)
from ..protocols import IEphemeralStore, INotificationSink, ITransferExecutor, IUploadAuthority
from ..services import notifications
from ..services.ephemeral import EphemeralStore
from ..services.notifications import LoggingNotificationSink
from ..services.validation import ValidationPolicy
from ..use_cases.upload_candidate import UploadCandidateUseCase, describe_exception
from ..utils.events import CandidateProgress, EventEmitter

logger = logging.getLogger(__name__)

_TERMINAL_EVENTS = {
    CandidateState.PERSISTED: "file_complete",
    CandidateState.FALLBACK: "file_fallback",
    CandidateState.REJECTED: "file_rejected",
}


class BatchUploadHandler:
    """
    Coordinates one batch of candidates against a reference list.

    Stateless between calls: the caller owns the list and passes it in,
    a new tuple comes back. Every file gets its own outcome, so one bad
    file never drops or aborts its siblings.

    Events (via ``events``):
        file_start(progress), file_transferring(progress),
        file_complete(progress), file_fallback(progress),
        file_rejected(progress), batch_complete(report),
        batch_rejected(report)
    """

    def __init__(
        self,
        authority: IUploadAuthority,
        transfer: ITransferExecutor,
        ephemeral_store: Optional[IEphemeralStore] = None,
        notifier: Optional[INotificationSink] = None,
        config: Optional[UploadConfig] = None,
        events: Optional[EventEmitter] = None,
    ):
        self._config = config or UploadConfig()
        self._policy = ValidationPolicy.from_config(self._config)
        self._ephemeral_store = ephemeral_store if ephemeral_store is not None else EphemeralStore()
        self._notifier = notifier or LoggingNotificationSink()
        self._events = events or EventEmitter()
        self._upload_candidate = UploadCandidateUseCase(
            self._policy,
            authority,
            transfer,
            self._ephemeral_store,
        )

    @property
    def config(self) -> UploadConfig:
        return self._config

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def ephemeral_store(self) -> IEphemeralStore:
        return self._ephemeral_store

    async def _notify(self, notification: Notification) -> None:
        result = self._notifier.notify(notification)
        if inspect.isawaitable(result):
            await result

    async def _notify_outcome(self, outcome: CandidateOutcome) -> None:
        if outcome.state is CandidateState.REJECTED:
            await self._notify(
                notifications.rejected(outcome.filename, outcome.reject_reason, self._policy.max_bytes)
            )
        elif outcome.state is CandidateState.FALLBACK:
            await self._notify(notifications.fallback(outcome.filename))

    def _release_previews(self, results) -> None:
        release = getattr(self._ephemeral_store, "release", None)
        if not callable(release):
            return
        for result in results:
            if isinstance(result, CandidateOutcome) and isinstance(result.reference, EphemeralReference):
                release(result.reference)

    async def _run_pipelines(self, candidates: Tuple[Candidate, ...]) -> Tuple[CandidateOutcome, ...]:
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        total = len(candidates)

        async def run(index: int, candidate: Candidate) -> CandidateOutcome:
            async with semaphore:
                progress = CandidateProgress(
                    filename=candidate.filename,
                    index=index,
                    total=total,
                    total_bytes=candidate.size,
                )
                await self._events.emit("file_start", progress)

                async def on_state(_: Candidate, state: CandidateState) -> None:
                    progress.status = state.value
                    await self._events.emit("file_transferring", progress)

                outcome = await self._upload_candidate.execute(candidate, on_state=on_state)
                progress.status = outcome.state.value
                progress.locator = outcome.reference.locator if outcome.reference else None
                progress.error = outcome.error
                await self._events.emit(_TERMINAL_EVENTS[outcome.state], progress)
                return outcome

        # gather keeps input order whatever the completion order
        results = await asyncio.gather(
            *(run(index, candidate) for index, candidate in enumerate(candidates, 1)),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            self._release_previews(results)
            raise failures[0]
        return tuple(results)

    async def submit_batch(
        self,
        candidates: Iterable[Candidate],
        current_list: ReferenceList,
        max_allowed: Optional[int] = None,
    ) -> Tuple[ReferenceList, BatchReport]:
        """
        Upload a batch and append its references to the current list.

        Args:
            candidates: Files selected together, in display order
            current_list: Gallery before the batch
            max_allowed: Gallery capacity (defaults to config.max_images)

        Returns:
            (updated_list, report). The list is unchanged when the batch is
            refused up front or fails unexpectedly before the append.
        """
        batch = tuple(candidates)
        current = tuple(current_list)
        if max_allowed is None:
            max_allowed = self._config.max_images

        remaining_slots = max(0, max_allowed - len(current))
        if len(batch) > remaining_slots:
            error = TooManyFiles(remaining_slots, max_allowed)
            logger.info("Batch of %d refused: %s", len(batch), error)
            try:
                await self._notify(notifications.too_many_files(error))
            except Exception:
                logger.exception("Notification sink failed while refusing a batch")
            report = BatchReport.too_many_files(remaining_slots, str(error))
            await self._events.emit("batch_rejected", report)
            return current, report

        if not batch:
            return current, BatchReport()

        logger.debug("Submitting batch of %d file(s), %d slot(s) free", len(batch), remaining_slots)
        updated: Optional[ReferenceList] = None
        report: Optional[BatchReport] = None
        try:
            outcomes = await self._run_pipelines(batch)
            report = BatchReport.from_outcomes(outcomes)
            # single concatenation: observers see all of the batch or none of it
            updated = reference_list.append_batch(
                current,
                [o.reference for o in outcomes if o.reference is not None],
            )
            for outcome in outcomes:
                await self._notify_outcome(outcome)
        except Exception as exc:
            error_msg = describe_exception(exc)
            logger.error("Error uploading images: %s", error_msg, exc_info=True)
            try:
                await self._notify(notifications.batch_failed())
            except Exception:
                logger.exception("Notification sink failed while reporting a batch failure")
            if updated is None:
                return current, BatchReport.failed(error_msg)
            return updated, dataclasses.replace(report, error=error_msg)

        logger.info(
            "Batch done: %d uploaded, %d preview only, %d skipped",
            report.accepted_count,
            report.fallback_count,
            report.rejected_count,
        )
        await self._events.emit("batch_complete", report)
        return updated, report
