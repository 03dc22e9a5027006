"""Pydantic models for tokens and connected identities."""

from oauth_handshake.models.auth import AccessGrant, AuthorizedRequestToken, RequestToken
from oauth_handshake.models.connect import ConnectionData, UserProfile

__all__ = [
    # Tokens
    "AccessGrant",
    "AuthorizedRequestToken",
    "RequestToken",
    # Identity
    "ConnectionData",
    "UserProfile",
]
