"""Use case for the per-candidate pipeline: validate, request destination, transfer."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from gallery_uploader.errors import RemoteUploadError
from gallery_uploader.models import Candidate, CandidateOutcome, CandidateState
from gallery_uploader.protocols import IEphemeralStore, ITransferExecutor, IUploadAuthority
from gallery_uploader.services.validation import ValidationPolicy

logger = logging.getLogger(__name__)

StateHook = Callable[[Candidate, CandidateState], Awaitable[None]]


def describe_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"


class UploadCandidateUseCase:
    """
    Run one candidate to a terminal state.

    Rejected candidates produce no reference. Any remote failure (authority
    or transfer) degrades to a preview handle instead of dropping the file.
    Errors outside the remote taxonomy propagate to the batch boundary.
    """

    def __init__(
        self,
        policy: ValidationPolicy,
        authority: IUploadAuthority,
        transfer: ITransferExecutor,
        ephemeral_store: IEphemeralStore,
    ):
        self._policy = policy
        self._authority = authority
        self._transfer = transfer
        self._ephemeral_store = ephemeral_store

    async def execute(
        self,
        candidate: Candidate,
        on_state: Optional[StateHook] = None,
    ) -> CandidateOutcome:
        verdict = self._policy.validate(candidate)
        if not verdict.accepted:
            logger.debug("Rejected %s: %s", candidate.filename, verdict.reason.value)
            return CandidateOutcome.rejected(candidate.filename, verdict.reason)

        if on_state:
            await on_state(candidate, CandidateState.TRANSFERRING)

        try:
            destination = await self._authority.request_destination()
            reference = await self._transfer.transfer(destination, candidate.data, candidate.media_type)
        except RemoteUploadError as exc:
            error_msg = describe_exception(exc)
            logger.warning("Failed to upload file %s, keeping a preview: %s", candidate.filename, error_msg)
            preview = self._ephemeral_store.store(candidate)
            return CandidateOutcome.fallback(candidate.filename, preview, error_msg)

        logger.debug("Persisted %s as %s", candidate.filename, reference.locator)
        return CandidateOutcome.persisted(candidate.filename, reference)
