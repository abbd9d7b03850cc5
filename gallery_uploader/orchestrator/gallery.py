"""Gallery session - owns one reference list on behalf of its caller."""
from typing import Iterable, List, Optional

from .. import reference_list
from ..errors import BatchInProgress
from ..models import BatchReport, Candidate, EphemeralReference, Reference, ReferenceList
from .batch_upload import BatchUploadHandler


class Gallery:
    """
    Image gallery of one listing, primary image first.

    Single writer: while a batch is being submitted, every other mutation
    (another batch, remove, move) raises BatchInProgress.

    Usage:
        gallery = orchestrator.gallery(max_allowed=10)
        report = await gallery.upload(candidates)
        gallery.move_to(2, 0)
        if not gallery.is_durable:
            ...  # warn before saving
    """

    def __init__(
        self,
        handler: BatchUploadHandler,
        max_allowed: Optional[int] = None,
        references: Iterable[Reference] = (),
    ):
        self._handler = handler
        self._max_allowed = handler.config.max_images if max_allowed is None else max_allowed
        self._references: ReferenceList = tuple(references)
        self._busy = False

    def __len__(self) -> int:
        return len(self._references)

    @property
    def references(self) -> ReferenceList:
        return self._references

    @property
    def max_allowed(self) -> int:
        return self._max_allowed

    @property
    def remaining_slots(self) -> int:
        return max(0, self._max_allowed - len(self._references))

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def primary(self) -> Optional[Reference]:
        return reference_list.primary(self._references)

    @property
    def is_durable(self) -> bool:
        return reference_list.is_durable(self._references)

    @property
    def pending_resave(self) -> List[EphemeralReference]:
        """Preview-only entries that must be uploaded again before saving."""
        return reference_list.ephemeral_entries(self._references)

    def _ensure_idle(self) -> None:
        if self._busy:
            raise BatchInProgress("An upload is already in progress for this gallery")

    async def upload(self, candidates: Iterable[Candidate]) -> BatchReport:
        self._ensure_idle()
        self._busy = True
        try:
            updated, report = await self._handler.submit_batch(
                candidates,
                self._references,
                self._max_allowed,
            )
            self._references = updated
            return report
        finally:
            self._busy = False

    def remove_at(self, index: int) -> ReferenceList:
        self._ensure_idle()
        removed = self._references[index] if 0 <= index < len(self._references) else None
        self._references = reference_list.remove_at(self._references, index)
        if isinstance(removed, EphemeralReference) and removed not in self._references:
            release = getattr(self._handler.ephemeral_store, "release", None)
            if callable(release):
                release(removed)
        return self._references

    def move_to(self, from_index: int, to_index: int) -> ReferenceList:
        self._ensure_idle()
        self._references = reference_list.move_to(self._references, from_index, to_index)
        return self._references

    def move_left(self, index: int) -> ReferenceList:
        return self.move_to(index, index - 1)

    def move_right(self, index: int) -> ReferenceList:
        return self.move_to(index, index + 1)

    def locators(self) -> List[str]:
        return reference_list.to_locators(self._references)
