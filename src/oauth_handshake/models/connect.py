"""Identity models produced from a completed handshake."""

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """What a provider reports about the authenticated user."""

    id: str = Field(description="Provider-specific user id")
    name: str | None = None
    profile_url: str | None = None
    image_url: str | None = None


class ConnectionData(BaseModel):
    """Caller-facing identity derived from an access grant."""

    provider_id: str
    provider_user_id: str | None = None
    display_name: str | None = None
    profile_url: str | None = None
    image_url: str | None = None
    access_token: str = Field(repr=False)
    secret: str | None = Field(default=None, repr=False)
