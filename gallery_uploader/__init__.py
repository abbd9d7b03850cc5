"""
Gallery uploader - image upload pipeline for marketplace listings.

Files are validated locally, written to one-time pre-signed destinations
handed out by the marketplace API, and collected into an ordered gallery.
When a remote step fails the file is kept as a preview-only handle so the
user still sees it, and is told the gallery must be saved again.

Usage:
    from gallery_uploader import UploadOrchestrator, Candidate, UploadConfig

    async with UploadOrchestrator(api_url, token=token) as uploader:
        gallery = await uploader.open_gallery(listing_id)
        report = await gallery.upload([Candidate.from_path(p) for p in paths])
        if gallery.is_durable:
            await uploader.save_gallery(listing_id, gallery)

    # Stateless form, caller owns the list
    updated, report = await uploader.submit_batch(candidates, current, max_allowed=10)
"""
from .errors import (
    AuthorityUnavailable,
    BatchInProgress,
    EphemeralReferenceError,
    IndexOutOfRange,
    InvalidDestination,
    RemoteUploadError,
    TooManyFiles,
    TransferError,
    UploadError,
)
from .models import (
    BatchReport,
    Candidate,
    CandidateOutcome,
    CandidateState,
    EphemeralReference,
    FileWarning,
    Notification,
    PersistentReference,
    RejectReason,
    Severity,
    UploadConfig,
    UploadDestination,
    Verdict,
    WarningReason,
)
from .orchestrator import BatchUploadHandler, Gallery, UploadOrchestrator
from .reference_list import move_to, remove_at
from .services import (
    CollectingNotificationSink,
    EphemeralStore,
    ListingRepository,
    LoggingNotificationSink,
    TransferExecutor,
    UploadAuthorityClient,
    ValidationPolicy,
)

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    "BatchUploadHandler",
    "Gallery",
    "move_to",
    "remove_at",
    # Models
    "BatchReport",
    "Candidate",
    "CandidateOutcome",
    "CandidateState",
    "EphemeralReference",
    "FileWarning",
    "Notification",
    "PersistentReference",
    "RejectReason",
    "Severity",
    "UploadConfig",
    "UploadDestination",
    "Verdict",
    "WarningReason",
    # Errors
    "AuthorityUnavailable",
    "BatchInProgress",
    "EphemeralReferenceError",
    "IndexOutOfRange",
    "InvalidDestination",
    "RemoteUploadError",
    "TooManyFiles",
    "TransferError",
    "UploadError",
    # Services
    "CollectingNotificationSink",
    "EphemeralStore",
    "ListingRepository",
    "LoggingNotificationSink",
    "TransferExecutor",
    "UploadAuthorityClient",
    "ValidationPolicy",
]
