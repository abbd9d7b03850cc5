"""
Transfer executor - Single Responsibility: write bytes to a destination.

One direct PUT per destination. A failure here is terminal for the
candidate at this layer; the coordinator decides what happens next.
"""
from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

import httpx

from ..errors import InvalidDestination, TransferError
from ..models import PersistentReference, UploadDestination

logger = logging.getLogger(__name__)

MAX_ERROR_DETAIL = 200


def strip_authorization(locator: str) -> str:
    """
    Drop the query (signature, expiry) and fragment from a destination.

    Raises InvalidDestination when nothing path-like remains.
    """
    parts = urlsplit(locator)
    if not parts.path.strip("/"):
        raise InvalidDestination(locator)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class TransferExecutor:
    """
    Uploads candidate bytes to pre-signed destinations.

    Implements ITransferExecutor protocol. The client must not carry
    marketplace credentials; destinations authorize themselves.
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def transfer(
        self,
        destination: UploadDestination,
        data: bytes,
        media_type: str,
    ) -> PersistentReference:
        try:
            response = await self._client.put(
                destination.locator,
                content=data,
                headers={"Content-Type": media_type},
            )
        except httpx.InvalidURL as exc:
            # not an HTTPError subclass
            raise InvalidDestination(destination.locator) from exc
        except httpx.HTTPError as exc:
            raise TransferError(None, str(exc)) from exc

        if not response.is_success:
            detail = response.text[:MAX_ERROR_DETAIL]
            logger.debug("Transfer refused with %s: %s", response.status_code, detail)
            raise TransferError(response.status_code, detail)

        reference = PersistentReference(strip_authorization(destination.locator))
        logger.debug("Transferred %d bytes to %s", len(data), reference.locator)
        return reference
