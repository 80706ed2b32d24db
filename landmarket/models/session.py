"""Session models - the signed-in user and their opaque token."""

from typing import Optional, Union
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """User profile returned by login."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = Field(None, description="User ID")
    username: Optional[str] = Field(None, description="Login name")
    full_name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Mobile number")
    role: str = Field(default="user", description="Role: user or admin")


class Session(BaseModel):
    """Current session; empty when nobody is signed in."""
    token: Optional[str] = Field(None, description="Opaque token issued by the backend")
    user: Optional[UserProfile] = None
    created_at: Optional[datetime] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def start(cls, token: str, user: Optional[UserProfile]) -> "Session":
        return cls(token=token, user=user, created_at=datetime.now(timezone.utc))
