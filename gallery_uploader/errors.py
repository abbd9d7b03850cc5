"""Error taxonomy for gallery uploads."""
from typing import Optional


class UploadError(Exception):
    """Base class for gallery upload errors."""


class RemoteUploadError(UploadError):
    """A remote step failed; the coordinator degrades to a local preview."""


class AuthorityUnavailable(RemoteUploadError):
    """The upload authority did not hand out a destination."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransferError(RemoteUploadError):
    """The object store refused the write (or could not be reached)."""

    def __init__(self, http_status: Optional[int], detail: str = ""):
        message = f"Upload failed: {http_status}" if http_status is not None else "Upload failed"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)
        self.http_status = http_status


class InvalidDestination(RemoteUploadError):
    """The destination locator cannot be parsed or has no path to keep."""

    def __init__(self, locator: str):
        super().__init__(f"Upload URL is missing or invalid: {locator!r}")
        self.locator = locator


class TooManyFiles(UploadError):
    """Batch is larger than the free slots of the gallery."""

    def __init__(self, remaining_slots: int, max_allowed: Optional[int] = None):
        message = f"You can only upload {remaining_slots} more image(s)."
        if max_allowed is not None:
            message = f"{message} Maximum is {max_allowed} images."
        super().__init__(message)
        self.remaining_slots = remaining_slots
        self.max_allowed = max_allowed


class IndexOutOfRange(UploadError, IndexError):
    """Index outside [0, len) of a reference list."""

    def __init__(self, index: int, length: int):
        super().__init__(f"index {index} out of range for list of length {length}")
        self.index = index
        self.length = length


class BatchInProgress(UploadError):
    """A batch is already being submitted against this gallery."""


class EphemeralReferenceError(UploadError):
    """Refusing to persist a gallery that still holds preview-only entries."""

    def __init__(self, count: int):
        super().__init__(
            f"{count} image(s) are preview only and were not uploaded. "
            "Upload them again before saving."
        )
        self.count = count
