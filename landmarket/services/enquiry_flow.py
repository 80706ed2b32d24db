"""Enquiry flow controller - guest vs signed-in capture and duplicate handling."""

from enum import Enum
from typing import Any, Awaitable, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from landmarket.models.enquiry import (
    EnquiryIntent,
    EnquiryMode,
    EnquiryResult,
    FullEnquiry,
    FullEnquiryForm,
    GuestEnquiry,
    LandId,
)
from landmarket.services.enquiry_service import EnquiryService
from landmarket.services.session_store import SessionStore
from landmarket.utils.errors import ApiError, EnquiryFlowError, LandMarketError
from landmarket.utils.logging import get_structured_logger, mask_phone

logger = get_structured_logger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to submit enquiry"


class FlowState(str, Enum):
    """Enquiry modal states."""
    IDLE = "idle"
    CAPTURING_GUEST = "capturing_guest"
    CAPTURING_FULL = "capturing_full"
    SUBMITTED = "submitted"
    ALREADY_SUBMITTED = "already_submitted"


CAPTURE_STATE = {
    EnquiryMode.GUEST: FlowState.CAPTURING_GUEST,
    EnquiryMode.AUTHENTICATED: FlowState.CAPTURING_FULL,
}

RESULT_STATES = (FlowState.SUBMITTED, FlowState.ALREADY_SUBMITTED)


class FlowSnapshot(BaseModel):
    """Read-only view of the controller for rendering."""
    model_config = ConfigDict(frozen=True)

    state: FlowState
    intent: Optional[EnquiryIntent] = None
    error: Optional[str] = None
    result: Optional[EnquiryResult] = None
    submitting: bool = False


def first_error_message(exc: ValidationError) -> str:
    """Message of the first failing field, without pydantic's prefix."""
    error = exc.errors()[0]
    cause = (error.get("ctx") or {}).get("error")
    if cause is not None:
        return str(cause)
    return error.get("msg", "Invalid input")


class EnquiryFlowController:
    """
    State machine behind the "contact seller" action.

    Signed-in users get the full contact form prefilled from their profile;
    everyone else is asked for a mobile number only. A ``duplicate`` answer
    from the backend lands in ALREADY_SUBMITTED, never in SUBMITTED, and a
    failed request returns to the capturing state with the typed values
    still in the intent.
    """

    def __init__(self, session_store: SessionStore, service: EnquiryService):
        self.session_store = session_store
        self.service = service
        self.state = FlowState.IDLE
        self.intent: Optional[EnquiryIntent] = None
        self.error: Optional[str] = None
        self.result: Optional[EnquiryResult] = None
        self._submitting = False

    def snapshot(self) -> FlowSnapshot:
        return FlowSnapshot(
            state=self.state,
            intent=self.intent.model_copy() if self.intent else None,
            error=self.error,
            result=self.result,
            submitting=self._submitting,
        )

    def begin(self, listing_id: LandId) -> FlowState:
        """Open the capture path matching the current session."""
        if self.session_store.is_authenticated:
            user = self.session_store.current_user
            self.intent = EnquiryIntent(
                listing_id=listing_id,
                mode=EnquiryMode.AUTHENTICATED,
                contact_name=(user.full_name if user else None) or "",
                contact_phone=(user.phone if user else None) or "",
                contact_email=(user.email if user else None) or "",
            )
        else:
            self.intent = EnquiryIntent(listing_id=listing_id, mode=EnquiryMode.GUEST)

        self.state = CAPTURE_STATE[self.intent.mode]
        self.error = None
        self.result = None
        logger.info("Enquiry flow started", listing_id=str(listing_id), state=self.state.value)
        return self.state

    def cancel(self) -> FlowState:
        """Dismiss the flow; nothing is sent."""
        if self.state != FlowState.IDLE:
            logger.debug("Enquiry flow cancelled", from_state=self.state.value)
        self.state = FlowState.IDLE
        self.intent = None
        self.error = None
        self.result = None
        return self.state

    async def submit_guest(self, phone: str) -> FlowState:
        if self._submitting:
            return self._ignore_repeat_submit()
        self._require_mode(EnquiryMode.GUEST)
        self.intent.contact_phone = phone

        try:
            payload = GuestEnquiry(land_id=self.intent.listing_id, contact_phone=phone)
        except ValidationError as e:
            return self._reject_input(first_error_message(e))

        return await self._submit(self.service.create_guest_enquiry(payload), phone)

    async def submit_full(self, form: Union[FullEnquiryForm, dict[str, Any]]) -> FlowState:
        if self._submitting:
            return self._ignore_repeat_submit()
        self._require_mode(EnquiryMode.AUTHENTICATED)
        fields = form.model_dump() if isinstance(form, FullEnquiryForm) else dict(form)
        self.intent = self.intent.model_copy(update={
            "contact_name": fields.get("contact_name"),
            "contact_phone": fields.get("contact_phone") or "",
            "contact_email": fields.get("contact_email"),
            "message": fields.get("message"),
        })

        try:
            payload = FullEnquiry(
                land_id=self.intent.listing_id,
                contact_name=fields.get("contact_name") or "",
                contact_phone=fields.get("contact_phone") or "",
                contact_email=fields.get("contact_email") or "",
                message=fields.get("message"),
            )
        except ValidationError as e:
            return self._reject_input(first_error_message(e))

        return await self._submit(self.service.create_enquiry(payload), payload.contact_phone)

    def _ignore_repeat_submit(self) -> FlowState:
        logger.debug("Submit ignored while a submission is in flight", state=self.state.value)
        return self.state

    def _require_mode(self, mode: EnquiryMode) -> None:
        if self.intent is None or self.state == FlowState.IDLE:
            raise EnquiryFlowError("Call begin() before submitting an enquiry")
        if self.intent.mode != mode:
            raise EnquiryFlowError(
                f"Flow is capturing a {self.intent.mode.value} enquiry, not {mode.value}"
            )
        if self.state not in (CAPTURE_STATE[mode],) + RESULT_STATES:
            raise EnquiryFlowError(f"Cannot submit from state {self.state.value}")

    def _reject_input(self, message: str) -> FlowState:
        self.state = CAPTURE_STATE[self.intent.mode]
        self.error = message
        logger.debug("Enquiry input rejected", error=message)
        return self.state

    async def _submit(self, request: Awaitable[EnquiryResult], phone: str) -> FlowState:
        intent = self.intent
        self._submitting = True
        self.error = None
        try:
            result = await request
        except LandMarketError as e:
            if self.intent is not intent:
                return self._drop_outcome(intent)
            self.state = CAPTURE_STATE[self.intent.mode]
            if isinstance(e, ApiError) and e.status_code is not None:
                self.error = e.message
            else:
                self.error = SUBMIT_FAILED_MESSAGE
            logger.warning(
                "Enquiry submission failed",
                listing_id=str(self.intent.listing_id),
                mode=self.intent.mode.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return self.state
        finally:
            self._submitting = False

        if self.intent is not intent:
            return self._drop_outcome(intent)

        self.result = result
        self.state = FlowState.ALREADY_SUBMITTED if result.duplicate else FlowState.SUBMITTED
        logger.info(
            "Enquiry submission finished",
            listing_id=str(self.intent.listing_id),
            mode=self.intent.mode.value,
            contact_phone=mask_phone(phone),
            state=self.state.value,
        )
        return self.state

    def _drop_outcome(self, intent: EnquiryIntent) -> FlowState:
        # cancel() or begin() ran while the request was in flight
        logger.debug("Enquiry outcome dropped after flow changed", listing_id=str(intent.listing_id))
        return self.state
