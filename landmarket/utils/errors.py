"""Error handling utilities."""

from typing import Optional


class LandMarketError(Exception):
    """Base exception for the land marketplace client."""
    pass


class ApiError(LandMarketError):
    """HTTP call failed: transport error, non-2xx status, or unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None


class ResponseShapeError(LandMarketError):
    """Response body matched neither the direct nor the data-nested shape."""
    pass


class AuthenticationError(LandMarketError):
    """Login failed or an operation needs a session that does not exist."""
    pass


class EnquiryFlowError(LandMarketError):
    """Enquiry flow operation invoked from a state that does not allow it."""
    pass
