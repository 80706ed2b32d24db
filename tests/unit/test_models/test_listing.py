"""Tests for Listing model."""

import pytest
from pydantic import ValidationError
from landmarket.models.listing import Listing, ListingStatus, PropertyType, SizeUnit
from tests.utils.factories import create_listing_data


@pytest.mark.unit
def test_listing_from_backend_payload():
    """Test listing parsed from an available-lands record."""
    listing = Listing.model_validate(create_listing_data(
        "commercial",
        id=42,
        price="2500000.00",
        images_urls=["https://img/1.jpg", "https://img/2.jpg"],
    ))

    assert listing.id == "42"
    assert listing.property_type == PropertyType.COMMERCIAL
    assert listing.price == 2500000
    assert listing.images == ["https://img/1.jpg", "https://img/2.jpg"]
    assert listing.status == ListingStatus.AVAILABLE


@pytest.mark.unit
def test_listing_size_unit_defaults_by_type():
    """Farms default to acres, everything else to square feet."""
    farm = Listing.model_validate(create_listing_data("farm", size=3))
    plot = Listing.model_validate(create_listing_data("land", size=1200))

    assert farm.size_unit == SizeUnit.ACRES
    assert farm.size_label == "3 acres"
    assert plot.size_unit == SizeUnit.SQFT
    assert plot.size_label == "1200 sqft"


@pytest.mark.unit
def test_listing_explicit_size_unit_kept():
    listing = Listing.model_validate(create_listing_data("farm", size=2.5, size_unit="sqft"))

    assert listing.size_unit == SizeUnit.SQFT
    assert listing.size_label == "2.5 sqft"


@pytest.mark.unit
def test_listing_images_default_empty():
    data = create_listing_data("land")
    data.pop("images_urls")

    assert Listing.model_validate(data).images == []


@pytest.mark.unit
def test_listing_price_label():
    listing = Listing.model_validate(create_listing_data("land", price=1234567))

    assert listing.price_label == "₹12,34,567"


@pytest.mark.unit
@pytest.mark.parametrize("field,value", [
    ("property_type", "castle"),
    ("status", "archived"),
    ("size", 0),
    ("price", "lots"),
])
def test_listing_rejects_invalid_values(field, value):
    data = create_listing_data("land")
    data[field] = value

    with pytest.raises(ValidationError):
        Listing.model_validate(data)


@pytest.mark.unit
@pytest.mark.parametrize("price", [None, ""])
def test_listing_without_price_shows_contact_label(price):
    data = create_listing_data("farm")
    data["price"] = price

    listing = Listing.model_validate(data)

    assert listing.price is None
    assert listing.price_label == "Contact for price"


@pytest.mark.unit
def test_listing_without_size_has_no_size_label():
    data = create_listing_data("land")
    data.pop("size")

    assert Listing.model_validate(data).size_label is None
