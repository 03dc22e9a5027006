"""OAuth token models."""

from pydantic import BaseModel, Field


class RequestToken(BaseModel):
    """OAuth 1 request token (first leg of the handshake)."""

    value: str = Field(description="Request token value sent back to the provider")
    secret: str = Field(description="Request token secret used for signing", repr=False)


class AuthorizedRequestToken(BaseModel):
    """Request token paired with the verifier proving the user approved it."""

    token: RequestToken
    verifier: str = Field(description="Verifier returned on the provider callback")

    @property
    def value(self) -> str:
        return self.token.value

    @property
    def secret(self) -> str:
        return self.token.secret


class AccessGrant(BaseModel):
    """Access credential (final leg of the handshake).

    OAuth 1 grants carry a token secret; bearer grants do not.
    """

    value: str = Field(description="Access token value")
    secret: str | None = Field(default=None, description="Access token secret", repr=False)
