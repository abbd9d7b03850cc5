"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces for the collaborators of the upload coordinator.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .models import (
    Candidate,
    EphemeralReference,
    Notification,
    PersistentReference,
    UploadDestination,
)


@runtime_checkable
class IUploadAuthority(Protocol):
    """Hands out one-time write destinations."""

    async def request_destination(self) -> UploadDestination:
        """Request a fresh destination. One round trip, no retry."""
        ...


@runtime_checkable
class ITransferExecutor(Protocol):
    """Writes candidate bytes to a destination."""

    async def transfer(
        self,
        destination: UploadDestination,
        data: bytes,
        media_type: str,
    ) -> PersistentReference:
        """Write the full body and return the durable reference."""
        ...


@runtime_checkable
class IEphemeralStore(Protocol):
    """Keeps candidate bytes available for local preview."""

    def store(self, candidate: Candidate) -> EphemeralReference:
        ...


@runtime_checkable
class INotificationSink(Protocol):
    """Receives human readable events."""

    def notify(self, notification: Notification) -> Any:
        ...


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for marketplace API operations."""

    async def get(self, endpoint: str) -> Any:
        ...

    async def put(self, endpoint: str, json: Dict) -> Any:
        ...

    async def post(self, endpoint: str, json: Optional[Dict] = None) -> Any:
        ...
