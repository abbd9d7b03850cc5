"""Services for gallery_uploader module."""
from .api_client import HTTPAPIClient
from .authority import UploadAuthorityClient
from .ephemeral import EphemeralStore
from .notifications import CollectingNotificationSink, LoggingNotificationSink
from .repository import ListingRepository
from .transfer import TransferExecutor, strip_authorization
from .validation import ValidationPolicy

__all__ = [
    "HTTPAPIClient",
    "UploadAuthorityClient",
    "EphemeralStore",
    "CollectingNotificationSink",
    "LoggingNotificationSink",
    "ListingRepository",
    "TransferExecutor",
    "strip_authorization",
    "ValidationPolicy",
]
