"""Client configuration loaded from environment variables."""

import os


class ClientConfig:
    """Defaults for the API client and the browse/enquiry controllers."""

    API_BASE_URL = os.environ.get("LANDMARKET_API_BASE_URL", "http://localhost:5000/api")
    API_TIMEOUT_SECONDS = float(os.environ.get("LANDMARKET_API_TIMEOUT_SECONDS", "15"))
    TOKEN_HEADER = os.environ.get("LANDMARKET_TOKEN_HEADER", "token")
    SEARCH_DEBOUNCE_MS = int(os.environ.get("LANDMARKET_SEARCH_DEBOUNCE_MS", "400"))
    PHONE_DIGITS = int(os.environ.get("LANDMARKET_PHONE_DIGITS", "10"))

    @classmethod
    def search_debounce_seconds(cls) -> float:
        return cls.SEARCH_DEBOUNCE_MS / 1000.0
