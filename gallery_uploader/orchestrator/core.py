"""Core orchestrator - wires HTTP services into the batch upload workflow."""
from typing import Iterable, Optional, Tuple

import httpx

from ..models import BatchReport, Candidate, Reference, ReferenceList, UploadConfig
from ..protocols import IEphemeralStore, INotificationSink
from ..services.api_client import HTTPAPIClient
from ..services.authority import UploadAuthorityClient
from ..services.repository import ListingRepository
from ..services.transfer import TransferExecutor
from ..utils.events import EventEmitter

from .batch_upload import BatchUploadHandler
from .gallery import Gallery


class UploadOrchestrator:
    """
    Orchestrates gallery uploads using injected services.

    Two HTTP clients are opened: one for the marketplace API (base URL and
    credentials, used by the authority and the repository) and a bare one
    for object-store transfers, which must not see the credentials.

    Usage:
        async with UploadOrchestrator(api_url, token=token) as uploader:
            gallery = await uploader.open_gallery(listing_id)
            report = await gallery.upload(candidates)
            await uploader.save_gallery(listing_id, gallery)
    """

    def __init__(
        self,
        api_url: str,
        config: Optional[UploadConfig] = None,
        notifier: Optional[INotificationSink] = None,
        token: Optional[str] = None,
        session_cookie: Optional[str] = None,
        ephemeral_store: Optional[IEphemeralStore] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            api_url: Marketplace API URL
            config: Upload configuration
            notifier: Sink for user-facing notifications (logs when omitted)
            token: Bearer token for the marketplace API
            session_cookie: Session cookie, alternative to a token
            ephemeral_store: Store for preview-only fallbacks
        """
        self._api_url = api_url
        self._config = config or UploadConfig()
        self._notifier = notifier
        self._token = token
        self._session_cookie = session_cookie
        self._ephemeral_store = ephemeral_store
        self._events = EventEmitter()

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._transfer_client: Optional[httpx.AsyncClient] = None
        self._repository: Optional[ListingRepository] = None
        self._batch_handler: Optional[BatchUploadHandler] = None

    async def __aenter__(self):
        """Initialize services and handlers."""
        self._api_client = HTTPAPIClient(
            self._api_url,
            timeout=self._config.timeout,
            token=self._token,
            session_cookie=self._session_cookie,
        )
        await self._api_client.__aenter__()
        self._transfer_client = httpx.AsyncClient(timeout=self._config.timeout)

        authority = UploadAuthorityClient(self._api_client.http, self._config.authority_endpoint)
        transfer = TransferExecutor(self._transfer_client)
        self._repository = ListingRepository(self._api_client)
        self._batch_handler = BatchUploadHandler(
            authority,
            transfer,
            ephemeral_store=self._ephemeral_store,
            notifier=self._notifier,
            config=self._config,
            events=self._events,
        )
        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        if self._transfer_client:
            await self._transfer_client.aclose()
        if self._api_client:
            await self._api_client.__aexit__(*args)

    @property
    def events(self) -> EventEmitter:
        return self._events

    async def submit_batch(
        self,
        candidates: Iterable[Candidate],
        current_list: ReferenceList,
        max_allowed: Optional[int] = None,
    ) -> Tuple[ReferenceList, BatchReport]:
        """Upload a batch against a caller-owned list."""
        assert self._batch_handler is not None
        return await self._batch_handler.submit_batch(candidates, current_list, max_allowed)

    def gallery(
        self,
        references: Iterable[Reference] = (),
        max_allowed: Optional[int] = None,
    ) -> Gallery:
        """Start a gallery session over an existing list."""
        assert self._batch_handler is not None
        return Gallery(self._batch_handler, max_allowed=max_allowed, references=references)

    async def open_gallery(self, listing_id: str, max_allowed: Optional[int] = None) -> Gallery:
        """Start a gallery session from the images stored on a listing."""
        assert self._repository is not None
        references = await self._repository.get_images(listing_id)
        return self.gallery(references, max_allowed=max_allowed)

    async def save_gallery(
        self,
        listing_id: str,
        gallery: Gallery,
        allow_ephemeral: bool = False,
    ) -> None:
        """Persist a gallery on its listing. Refuses preview-only entries by default."""
        assert self._repository is not None
        await self._repository.save_images(listing_id, gallery.references, allow_ephemeral)
