"""Shared pytest fixtures and configuration."""

import os
import pytest

# Set test environment variables before landmarket reads them
os.environ.setdefault("LANDMARKET_API_BASE_URL", "http://testserver/api")
os.environ.setdefault("LANDMARKET_SEARCH_DEBOUNCE_MS", "400")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_MASK_SENSITIVE", "true")

from landmarket.models.listing import Listing
from landmarket.services.session_store import SessionStore
from tests.utils.factories import create_listing_data, create_user_data
from tests.utils.helpers import FakeEnquiryBackend, FakeLandsService, RecordingTransport, make_api_client


@pytest.fixture
def sample_listings():
    """One listing per property type with predictable titles."""
    return [
        Listing.model_validate(create_listing_data("farm", title="Coconut Grove Farm", location="Pollachi")),
        Listing.model_validate(create_listing_data("land", title="Corner Plot", location="Coimbatore")),
        Listing.model_validate(create_listing_data("commercial", title="Highway Frontage", location="Salem")),
        Listing.model_validate(create_listing_data("residential", title="Garden House", location="Madurai")),
    ]


@pytest.fixture
def lands_service(sample_listings):
    return FakeLandsService(sample_listings)


@pytest.fixture
def enquiry_backend():
    return FakeEnquiryBackend()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def api_client(transport):
    # httpx.AsyncClient is created lazily on the first request
    return make_api_client(transport)


@pytest.fixture
def guest_session(api_client):
    """Session store with nobody signed in."""
    return SessionStore(api_client)


@pytest.fixture
def signed_in_session(api_client):
    """Session store restored for a regular user."""
    store = SessionStore(api_client)
    store.restore(
        "tok-user-123",
        create_user_data(full_name="Asha", phone="9000000000", email="a@x.com"),
    )
    return store


@pytest.fixture
def sample_user():
    return create_user_data()
