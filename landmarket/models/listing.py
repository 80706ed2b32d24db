"""Listing models."""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from landmarket.utils.formatting import format_inr


class PropertyType(str, Enum):
    """Backend property_type values."""
    FARM = "farm"
    LAND = "land"
    COMMERCIAL = "commercial"
    RESIDENTIAL = "residential"


class ListingStatus(str, Enum):
    """Listing lifecycle status."""
    AVAILABLE = "available"
    SOLD = "sold"
    PENDING = "pending"
    REJECTED = "rejected"


class SizeUnit(str, Enum):
    """Units a listing size may be expressed in."""
    SQFT = "sqft"
    ACRES = "acres"


class Listing(BaseModel):
    """Land/property record available for sale."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Listing ID")
    title: str = Field(..., description="Listing title")
    location: str = Field(..., description="Town/area shown on cards")
    address: Optional[str] = Field(None, description="Full street address")
    property_type: PropertyType = Field(..., description="farm, land, commercial or residential")
    price: Optional[int] = Field(None, ge=0, description="Asking price in whole rupees; None means on request")
    size: Optional[float] = Field(None, gt=0, description="Plot size in size_unit")
    size_unit: Optional[SizeUnit] = Field(None, description="sqft or acres")
    images: list[str] = Field(
        default_factory=list,
        alias="images_urls",
        description="Ordered image URLs, possibly empty"
    )
    status: ListingStatus = Field(default=ListingStatus.AVAILABLE, description="Listing status")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    description: Optional[str] = None
    features: set[str] = Field(default_factory=set, description="Amenity tags")

    @model_validator(mode="before")
    @classmethod
    def _coerce_id(cls, data):
        # Backend ids are numeric on some routes and strings on others
        if isinstance(data, dict) and isinstance(data.get("id"), int):
            data = {**data, "id": str(data["id"])}
        return data

    @field_validator("price", mode="before")
    @classmethod
    def _whole_rupees(cls, value):
        # Decimal columns arrive as strings such as "2500000.00"
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return int(Decimal(value.strip()))
            except InvalidOperation:
                raise ValueError(f"price is not a number: {value!r}")
        return value

    @model_validator(mode="after")
    def _default_size_unit(self) -> "Listing":
        if self.size_unit is None:
            self.size_unit = (
                SizeUnit.ACRES if self.property_type == PropertyType.FARM else SizeUnit.SQFT
            )
        return self

    @property
    def price_label(self) -> str:
        return format_inr(self.price)

    @property
    def size_label(self) -> Optional[str]:
        if self.size is None:
            return None
        size = int(self.size) if float(self.size).is_integer() else self.size
        return f"{size} {self.size_unit.value}"
