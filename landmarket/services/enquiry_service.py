"""Enquiry service - listing browse and enquiry endpoints."""

from typing import Any, Optional

from pydantic import ValidationError

from landmarket.models.enquiry import Enquiry, EnquiryResult, FullEnquiry, GuestEnquiry, LandId
from landmarket.models.listing import Listing
from landmarket.services.api_client import ApiClient, extract_payload
from landmarket.utils.errors import ResponseShapeError
from landmarket.utils.logging import get_structured_logger, mask_phone

logger = get_structured_logger(__name__)


def _parse_listings(items: Any) -> list[Listing]:
    """Parse listing rows, skipping the ones that do not validate."""
    if not isinstance(items, list):
        raise ResponseShapeError("Expected 'lands' to be a list")

    listings = []
    for index, item in enumerate(items):
        try:
            listings.append(Listing.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Skipped malformed listing",
                index=index,
                listing_id=str(item.get("id")) if isinstance(item, dict) else None,
                error_count=e.error_count(),
                fields=sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")}),
            )
    return listings


class EnquiryService:
    """Wraps the /user/enquiries routes."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_available_lands(self, filters: Optional[dict[str, Any]] = None) -> list[Listing]:
        """Public listing search; filters are sent as query parameters."""
        body = await self.client.public_call(
            "/user/enquiries/available-lands",
            method="GET",
            params=filters or None,
        )
        lands = _parse_listings(extract_payload(body, "lands"))
        logger.debug("Available lands loaded", filter_keys=sorted(filters or {}), count=len(lands))
        return lands

    async def get_land_by_id(self, land_id: LandId) -> Listing:
        body = await self.client.public_call(
            "/user/enquiries/land",
            method="GET",
            params={"id": land_id},
        )
        try:
            return Listing.model_validate(extract_payload(body, "land"))
        except ValidationError as e:
            raise ResponseShapeError(f"Malformed listing in response: {e.error_count()} errors") from e

    async def create_enquiry(self, enquiry: FullEnquiry) -> EnquiryResult:
        """Authenticated enquiry with full contact details."""
        body = await self.client.call(
            "/user/enquiries/create",
            method="POST",
            json=enquiry.to_payload(),
        )
        result = EnquiryResult.from_response(body)
        logger.info(
            "Enquiry created",
            land_id=str(enquiry.land_id),
            contact_phone=mask_phone(enquiry.contact_phone),
            duplicate=result.duplicate,
        )
        return result

    async def create_guest_enquiry(self, enquiry: GuestEnquiry) -> EnquiryResult:
        """Phone-only enquiry; no token is sent."""
        body = await self.client.public_call(
            "/user/enquiries/guest-enquiry",
            method="POST",
            json=enquiry.model_dump(mode="json"),
        )
        result = EnquiryResult.from_response(body)
        logger.info(
            "Guest enquiry created",
            land_id=str(enquiry.land_id),
            contact_phone=mask_phone(enquiry.contact_phone),
            duplicate=result.duplicate,
        )
        return result

    async def get_my_enquiries(self) -> list[Enquiry]:
        body = await self.client.call("/user/enquiries/my-enquiries", method="GET")
        items = extract_payload(body, "enquiries")
        if not isinstance(items, list):
            raise ResponseShapeError("Expected 'enquiries' to be a list")
        return [Enquiry.model_validate(item) for item in items]

    async def get_enquiry_by_id(self, enquiry_id: LandId) -> Enquiry:
        body = await self.client.call(
            "/user/enquiries/enquiry",
            method="GET",
            params={"id": enquiry_id},
        )
        return Enquiry.model_validate(extract_payload(body, "enquiry"))

    async def update_enquiry(self, enquiry_id: LandId, updates: dict[str, Any]) -> Any:
        return await self.client.call(
            "/user/enquiries/update",
            method="PUT",
            params={"id": enquiry_id},
            json=updates,
        )

    async def cancel_enquiry(self, enquiry_id: LandId) -> Any:
        logger.info("Cancelling enquiry", enquiry_id=str(enquiry_id))
        return await self.client.call(
            "/user/enquiries/cancel",
            method="PUT",
            params={"id": enquiry_id},
        )
