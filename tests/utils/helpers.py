"""Test doubles and helpers."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from landmarket.models.enquiry import EnquiryResult, FullEnquiry, GuestEnquiry
from landmarket.models.listing import Listing
from landmarket.services.api_client import ApiClient

TEST_BASE_URL = "http://testserver/api"

# Short enough to keep the suite fast, long enough to separate bursts
TEST_DEBOUNCE_SECONDS = 0.05


class RecordingTransport:
    """httpx handler that records requests and answers from a route table."""

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Any]] = None):
        self.routes = routes or {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        answer = self.routes.get(key)
        if answer is None:
            return httpx.Response(404, json={"error": f"No route for {key}"})
        if callable(answer):
            answer = answer(request)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, httpx.Response):
            return answer
        status, body = answer
        return httpx.Response(status, json=body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


def make_api_client(handler: Callable[[httpx.Request], httpx.Response]) -> ApiClient:
    """ApiClient whose requests are served by ``handler``."""
    return ApiClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(handler))


def _matches(listing: Listing, filters: Dict[str, Any]) -> bool:
    property_type = filters.get("property_type")
    if property_type and listing.property_type.value != property_type:
        return False
    search = (filters.get("search") or "").lower()
    if search and search not in listing.title.lower() and search not in listing.location.lower():
        return False
    return True


class FakeLandsService:
    """
    Stand-in for EnquiryService.get_available_lands.

    Individual calls can be held open with ``hold(index)`` so a test decides
    in which order overlapping responses come back.
    """

    def __init__(self, lands: Optional[List[Listing]] = None):
        self.lands = lands or []
        self.calls: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None
        self._gates: Dict[int, asyncio.Event] = {}
        self._fail_calls: Dict[int, Exception] = {}

    def hold(self, index: int) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[index] = gate
        return gate

    def fail_call(self, index: int, error: Exception) -> None:
        self._fail_calls[index] = error

    async def get_available_lands(self, filters: Optional[Dict[str, Any]] = None) -> List[Listing]:
        index = len(self.calls)
        filters = dict(filters or {})
        self.calls.append(filters)

        gate = self._gates.get(index)
        if gate is not None:
            await gate.wait()

        error = self._fail_calls.get(index) or self.fail_with
        if error is not None:
            raise error
        return [listing for listing in self.lands if _matches(listing, filters)]


class FakeEnquiryBackend:
    """Stand-in for the enquiry-creation calls; dedups on listing + phone."""

    def __init__(self):
        self.guest_calls: List[GuestEnquiry] = []
        self.full_calls: List[FullEnquiry] = []
        self.fail_with: Optional[Exception] = None
        self._seen: set = set()

    def _answer(self, land_id: Any, phone: str) -> EnquiryResult:
        if self.fail_with is not None:
            raise self.fail_with
        key = (str(land_id), phone)
        duplicate = key in self._seen
        self._seen.add(key)
        return EnquiryResult(accepted=True, duplicate=duplicate)

    async def create_guest_enquiry(self, enquiry: GuestEnquiry) -> EnquiryResult:
        self.guest_calls.append(enquiry)
        return self._answer(enquiry.land_id, enquiry.contact_phone)

    async def create_enquiry(self, enquiry: FullEnquiry) -> EnquiryResult:
        self.full_calls.append(enquiry)
        return self._answer(enquiry.land_id, enquiry.contact_phone)


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run without advancing any timer."""
    for _ in range(rounds):
        await asyncio.sleep(0)
