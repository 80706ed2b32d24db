"""Enquiry models - buyer interest in a listing."""

import re
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from landmarket.utils.config import ClientConfig
from landmarket.utils.errors import ResponseShapeError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

LandId = Union[int, str]


def validate_phone(value: str) -> str:
    """Return the phone number if it is exactly PHONE_DIGITS digits."""
    value = (value or "").strip()
    digits = ClientConfig.PHONE_DIGITS
    if len(value) != digits or not value.isascii() or not value.isdigit():
        raise ValueError(f"Enter a valid {digits}-digit mobile number")
    return value


class EnquiryMode(str, Enum):
    """Capture path chosen for an enquiry."""
    GUEST = "guest"
    AUTHENTICATED = "authenticated"


class EnquiryType(str, Enum):
    """Kinds of enquiry the backend accepts."""
    BUY_INTEREST = "buy_interest"


class GuestEnquiry(BaseModel):
    """Payload for a phone-only guest enquiry."""
    land_id: LandId
    contact_phone: str

    @field_validator("contact_phone")
    @classmethod
    def _phone_digits(cls, value: str) -> str:
        return validate_phone(value)


class FullEnquiryForm(BaseModel):
    """Contact form shown to signed-in users."""
    contact_name: str = Field(..., description="Buyer name")
    contact_phone: str = Field(..., description="Mobile number")
    contact_email: str = Field(..., description="Email address")
    message: Optional[str] = Field(None, description="Free-text note to the seller")

    @field_validator("contact_name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Enter your name")
        return value

    @field_validator("contact_phone")
    @classmethod
    def _phone_digits(cls, value: str) -> str:
        return validate_phone(value)

    @field_validator("contact_email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Enter a valid email address")
        return value

    @field_validator("message")
    @classmethod
    def _blank_message_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class FullEnquiry(FullEnquiryForm):
    """Payload for an authenticated enquiry."""
    land_id: LandId
    enquiry_type: EnquiryType = EnquiryType.BUY_INTEREST

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class EnquiryIntent(BaseModel):
    """Transient record of what the user is typing for one listing."""
    listing_id: LandId
    mode: EnquiryMode
    contact_phone: str = ""
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    message: Optional[str] = None


class EnquiryResult(BaseModel):
    """Outcome of an enquiry submission as reported by the backend."""
    accepted: bool = True
    duplicate: bool = False
    message: Optional[str] = None
    enquiry_id: Optional[LandId] = None

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> "EnquiryResult":
        """Read the duplicate flag from the top level or from under data."""
        if not isinstance(body, dict):
            raise ResponseShapeError("Enquiry response is not a JSON object")
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        duplicate = body.get("duplicate", data.get("duplicate", False))
        if not isinstance(duplicate, bool):
            raise ResponseShapeError(f"Enquiry duplicate flag is not a boolean: {duplicate!r}")
        enquiry = data.get("enquiry") or body.get("enquiry") or {}
        try:
            return cls(
                accepted=True,
                duplicate=duplicate,
                message=body.get("message") or data.get("message"),
                enquiry_id=enquiry.get("id") if isinstance(enquiry, dict) else None,
            )
        except ValidationError as e:
            raise ResponseShapeError(f"Malformed enquiry response: {e.error_count()} errors") from e


class Enquiry(BaseModel):
    """Stored enquiry as listed on the buyer's dashboard."""
    model_config = ConfigDict(extra="allow")

    id: LandId
    land_id: Optional[LandId] = None
    enquiry_type: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    message: Optional[str] = None
    status: Optional[str] = Field(None, description="Status: pending, contacted, in_progress, completed")
    land: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
