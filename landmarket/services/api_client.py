"""HTTP client for the marketplace REST API."""

from typing import Any, Callable, Optional

import httpx

from landmarket.utils.config import ClientConfig
from landmarket.utils.errors import ApiError, ResponseShapeError
from landmarket.utils.logging import (
    get_structured_logger,
    get_correlation_id,
    log_timing,
)
from landmarket.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

DEFAULT_ERROR_MESSAGE = "Something went wrong"

TokenProvider = Callable[[], Optional[str]]


def extract_payload(body: Any, key: str) -> Any:
    """
    Return ``body[key]`` or ``body["data"][key]``.

    The backend answers some routes with the payload at the top level and
    others wrapped in a ``data`` object. Anything else is a contract break.
    """
    if isinstance(body, dict):
        if key in body:
            return body[key]
        data = body.get("data")
        if isinstance(data, dict) and key in data:
            return data[key]
    raise ResponseShapeError(f"Response has no '{key}' field at top level or under 'data'")


class ApiClient:
    """Async wrapper issuing public and token-authenticated JSON requests."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or ClientConfig.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else ClientConfig.API_TIMEOUT_SECONDS
        self.token_header = ClientConfig.TOKEN_HEADER
        self._token_provider = token_provider
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def bind_token_provider(self, token_provider: Optional[TokenProvider]) -> None:
        self._token_provider = token_provider

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Authenticated call: attaches the session token when one exists."""
        return await self._request(endpoint, method, params=params, json=json, authenticated=True)

    async def public_call(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Public call: never attaches a token."""
        return await self._request(endpoint, method, params=params, json=json, authenticated=False)

    def _build_headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}

        if authenticated and self._token_provider is not None:
            token = self._token_provider()
            if token:
                headers[self.token_header] = token

        correlation_id = get_correlation_id()
        if correlation_id:
            headers[LoggingConfig.LOG_CORRELATION_ID_HEADER] = correlation_id

        return headers

    async def _request(
        self,
        endpoint: str,
        method: str,
        *,
        params: Optional[dict[str, Any]],
        json: Optional[dict[str, Any]],
        authenticated: bool,
    ) -> Any:
        headers = self._build_headers(authenticated)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        with log_timing(
            "api_request",
            logger=logger,
            method=method,
            endpoint=endpoint,
            authenticated=authenticated,
        ):
            try:
                response = await self._get_client().request(
                    method,
                    endpoint,
                    params=params or None,
                    json=json,
                    headers=headers,
                )
            except httpx.HTTPError as e:
                logger.warning(
                    "API request failed in transport",
                    method=method,
                    endpoint=endpoint,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise ApiError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            message = DEFAULT_ERROR_MESSAGE
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            logger.warning(
                "API request returned error status",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                error=message,
            )
            raise ApiError(message, status_code=response.status_code)

        if body is None:
            logger.warning(
                "API response body is not JSON",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise ApiError("Invalid response from server", status_code=response.status_code)

        return body
