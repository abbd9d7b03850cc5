"""HTTP adapter for the upload-URL authority."""
from __future__ import annotations

import logging

import httpx

from ..errors import AuthorityUnavailable
from ..models import UploadDestination

logger = logging.getLogger(__name__)

DESTINATION_FIELD = "uploadURL"


class UploadAuthorityClient:
    """
    Requests one-time write destinations from the marketplace API.

    Implements IUploadAuthority protocol. The injected client carries the
    base URL and the caller's authentication context.
    """

    def __init__(self, client: httpx.AsyncClient, endpoint: str = "/api/objects/upload"):
        self._client = client
        self._endpoint = endpoint

    async def request_destination(self) -> UploadDestination:
        try:
            response = await self._client.post(self._endpoint)
        except httpx.HTTPError as exc:
            raise AuthorityUnavailable(f"Failed to get upload URL: {exc}") from exc

        if not response.is_success:
            raise AuthorityUnavailable(
                f"Failed to get upload URL: HTTP {response.status_code}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthorityUnavailable(
                "Upload authority returned a non-JSON body",
                status=response.status_code,
            ) from exc

        locator = payload.get(DESTINATION_FIELD) if isinstance(payload, dict) else None
        if not locator or not isinstance(locator, str):
            raise AuthorityUnavailable(
                f"Upload authority response is missing {DESTINATION_FIELD!r}",
                status=response.status_code,
            )

        logger.debug("Destination issued by %s", self._endpoint)
        return UploadDestination(locator=locator)
