"""
Listing Repository - Single Responsibility: persist gallery images via API.

The API stores plain ordered strings and cannot tell a preview handle from
a durable URL, so the durability check happens here, before the request.
"""
import logging
from typing import Any, List, Sequence

from ..errors import EphemeralReferenceError
from ..models import Reference, ReferenceList
from ..protocols import IAPIClient
from ..reference_list import ephemeral_entries, from_locators, to_locators

logger = logging.getLogger(__name__)


class ListingRepository:
    """Reads and writes the image list of a marketplace listing."""

    def __init__(self, api_client: IAPIClient):
        """
        Initialize repository.

        Args:
            api_client: HTTP client for API calls
        """
        self._api = api_client

    @staticmethod
    def _endpoint(listing_id: str) -> str:
        return f"/api/listings/{listing_id}"

    @staticmethod
    def _image_locators(images: Any) -> List[str]:
        locators = []
        for image in images or []:
            if isinstance(image, str):
                locators.append(image)
            elif isinstance(image, dict) and image.get("url"):
                locators.append(image["url"])
        return locators

    async def get_images(self, listing_id: str) -> ReferenceList:
        """
        Load the current gallery of a listing.

        Args:
            listing_id: Listing identifier

        Returns:
            References in stored order
        """
        response = await self._api.get(self._endpoint(listing_id))
        payload = response.json()
        return from_locators(self._image_locators(payload.get("images")))

    async def save_images(
        self,
        listing_id: str,
        references: Sequence[Reference],
        allow_ephemeral: bool = False,
    ) -> None:
        """
        Save the gallery of a listing.

        Args:
            listing_id: Listing identifier
            references: Ordered gallery, primary image first
            allow_ephemeral: Save even if preview-only entries are present

        Raises:
            EphemeralReferenceError: previews present and not allowed
        """
        previews = ephemeral_entries(references)
        if previews and not allow_ephemeral:
            raise EphemeralReferenceError(len(previews))
        if previews:
            logger.warning(
                "Saving listing %s with %d preview-only image(s)", listing_id, len(previews)
            )

        await self._api.put(self._endpoint(listing_id), json={"images": to_locators(references)})
        logger.info("Saved %d image(s) on listing %s", len(references), listing_id)
