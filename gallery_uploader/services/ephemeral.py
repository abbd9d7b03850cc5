"""In-memory preview handles used when a file could not be uploaded."""
import uuid
from typing import Dict

from ..models import EPHEMERAL_SCHEME, Candidate, EphemeralReference

BLOB_NAMESPACE = "gallery-uploader"


class EphemeralStore:
    """
    Process-local registry of candidate bytes.

    Handles look like ``blob:gallery-uploader/<uuid>`` and are only
    meaningful inside the process that issued them.
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, reference: object) -> bool:
        return isinstance(reference, EphemeralReference) and reference.locator in self._blobs

    def store(self, candidate: Candidate) -> EphemeralReference:
        locator = f"{EPHEMERAL_SCHEME}{BLOB_NAMESPACE}/{uuid.uuid4()}"
        self._blobs[locator] = candidate.data
        return EphemeralReference(locator)

    def resolve(self, reference: EphemeralReference) -> bytes:
        try:
            return self._blobs[reference.locator]
        except KeyError:
            raise KeyError(f"unknown or released preview handle: {reference.locator}") from None

    def release(self, reference: EphemeralReference) -> None:
        self._blobs.pop(reference.locator, None)

    def clear(self) -> None:
        self._blobs.clear()
