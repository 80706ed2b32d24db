"""Session store - login/logout lifecycle and the token used by authenticated calls."""

from typing import Any, Optional

from landmarket.models.session import Session, UserProfile
from landmarket.services.api_client import ApiClient
from landmarket.utils.errors import AuthenticationError
from landmarket.utils.logging import get_structured_logger, mask_token, timed

logger = get_structured_logger(__name__)

ADMIN_ROLE = "admin"


class SessionStore:
    """
    Holds the current session for one user of the client.

    Constructed with the ApiClient it authenticates; the store registers
    itself as that client's token provider so authenticated calls pick up
    whatever token is current at request time.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.session = Session()
        client.bind_token_provider(self.get_token)

    def get_token(self) -> Optional[str]:
        return self.session.token

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def current_user(self) -> Optional[UserProfile]:
        return self.session.user

    @property
    def is_admin(self) -> bool:
        user = self.session.user
        return bool(user and user.role == ADMIN_ROLE)

    @timed("session_login")
    async def login(self, identifier: str, password: str) -> Session:
        """Log in with a username, email or phone and start a session."""
        response = await self.client.call(
            "/login/login",
            method="POST",
            json={"identifier": identifier, "password": password},
        )

        token = response.get("token") if isinstance(response, dict) else None
        if not token:
            logger.warning("Login response carried no token")
            raise AuthenticationError("Login failed: no token returned")

        user_data = response.get("user")
        user = UserProfile.model_validate(user_data) if isinstance(user_data, dict) else None
        self.session = Session.start(token=token, user=user)

        logger.info(
            "Session started",
            token_fingerprint=mask_token(token),
            user_role=user.role if user else None,
        )
        return self.session

    def restore(self, token: str, user: Optional[dict[str, Any]] = None) -> Session:
        """Re-hydrate a session persisted by the embedding application."""
        if not token:
            raise AuthenticationError("Cannot restore a session without a token")
        profile = UserProfile.model_validate(user) if user else None
        self.session = Session.start(token=token, user=profile)
        logger.info("Session restored", token_fingerprint=mask_token(token))
        return self.session

    def logout(self) -> None:
        if self.session.is_authenticated:
            logger.info("Session ended", token_fingerprint=mask_token(self.session.token))
        self.session = Session()

    async def signup(self, user_data: dict[str, Any]) -> Any:
        """Register a new account; does not sign the user in."""
        return await self.client.call("/user/create", method="POST", json=user_data)

    async def change_password(self, username: str, old_password: str, new_password: str) -> Any:
        if not self.is_authenticated:
            raise AuthenticationError("Sign in before changing the password")
        return await self.client.call(
            "/login/change-password",
            method="POST",
            json={
                "username": username,
                "old_password": old_password,
                "new_password": new_password,
            },
        )
