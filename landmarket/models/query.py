"""Browse query models - filter inputs and the observable result state."""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from landmarket.models.listing import Listing, PropertyType

ALL_TYPES = "all"

# UI type key -> backend property_type (None means no filter)
TYPE_KEYS: dict[str, Optional[str]] = {
    ALL_TYPES: None,
    "farm": PropertyType.FARM.value,
    "land": PropertyType.LAND.value,
    "commercial": PropertyType.COMMERCIAL.value,
    "residential": PropertyType.RESIDENTIAL.value,
}


class QueryFilter(BaseModel):
    """Current browse filters."""
    model_config = ConfigDict(validate_assignment=True)

    active_type: str = Field(default=ALL_TYPES, description="UI type key")
    search_text: str = Field(default="", description="Raw text as typed")
    debounced_search_text: str = Field(default="", description="Search text after the quiet period")
    location: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def _price_range(self) -> "QueryFilter":
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self

    def to_query_params(self) -> dict[str, Any]:
        """Build request parameters from the non-empty filters only."""
        params: dict[str, Any] = {}
        property_type = TYPE_KEYS.get(self.active_type)
        if property_type:
            params["property_type"] = property_type
        if self.debounced_search_text:
            params["search"] = self.debounced_search_text
        if self.location and self.location.strip():
            params["location"] = self.location.strip()
        if self.min_price is not None:
            params["min_price"] = self.min_price
        if self.max_price is not None:
            params["max_price"] = self.max_price
        return params


class QueryState(BaseModel):
    """What the browse view renders: loading flag, error message, listings."""
    model_config = ConfigDict(frozen=True)

    loading: bool = False
    error: Optional[str] = None
    results: tuple[Listing, ...] = ()
