"""Bearer-style authorization headers for the OAuth 2 editions."""

from collections.abc import Callable
from enum import Enum


def _standard(access_token: str) -> str:
    return "BEARER " + access_token


def _draft_10(access_token: str) -> str:
    return "OAuth " + access_token


def _draft_8(access_token: str) -> str:
    return 'Token token="' + access_token + '"'


_FORMATTERS: dict[str, Callable[[str], str]] = {
    "STANDARD": _standard,
    "DRAFT_10": _draft_10,
    "DRAFT_8": _draft_8,
}


class OAuth2Version(Enum):
    """Protocol edition deciding how an access token is encoded in a header.

    Chosen once per provider; the token itself is treated as opaque.
    """

    STANDARD = "STANDARD"
    DRAFT_10 = "DRAFT_10"
    DRAFT_8 = "DRAFT_8"

    def authorization_header_value(self, access_token: str) -> str:
        """Format ``access_token`` as an Authorization header value."""
        return _FORMATTERS[self.value](access_token)


class BearerSigner:
    """Request signer presenting a bearer token.

    Satisfies the same ``sign_request`` contract as the OAuth 1 signer so
    the API client does not care which protocol family produced the grant.
    """

    def __init__(
        self,
        access_token: str,
        version: OAuth2Version = OAuth2Version.STANDARD,
    ) -> None:
        self.version = version
        self._header = version.authorization_header_value(access_token)

    def sign_request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, str]:
        return {"Authorization": self._header}
