"""OAuth 1.0 / 1.0a provider operations over httpx."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import httpx

from oauth_handshake.config import OAuth1Version
from oauth_handshake.exceptions import ConfigurationError, ProviderCallError
from oauth_handshake.models.auth import AccessGrant, AuthorizedRequestToken, RequestToken

if TYPE_CHECKING:
    from oauth_handshake.config import ProviderConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderOperations(Protocol):
    """The remote calls an exchange flow needs from a provider."""

    @property
    def version(self) -> OAuth1Version: ...

    async def fetch_request_token(
        self, callback_url: str, extra_params: dict[str, str] | None = None
    ) -> RequestToken: ...

    def build_authorize_url(
        self, token_value: str, extra_params: dict[str, str] | None = None
    ) -> str: ...

    def build_authenticate_url(
        self, token_value: str, extra_params: dict[str, str] | None = None
    ) -> str: ...

    async def exchange_for_access_token(
        self,
        authorized: AuthorizedRequestToken,
        extra_params: dict[str, str] | None = None,
    ) -> AccessGrant: ...


def percent_encode(value: str) -> str:
    """RFC 3986 percent-encoding as required for OAuth 1 signatures."""
    return quote(value, safe="~")


def build_oauth_params(consumer_key: str) -> dict[str, str]:
    """Build base OAuth protocol parameters with a fresh nonce and timestamp."""
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": secrets.token_hex(16),
        "oauth_signature_method": "HMAC-SHA1",
        "oauth_timestamp": str(int(time.time())),
        "oauth_version": "1.0",
    }


def generate_signature(
    method: str,
    url: str,
    params: dict[str, str],
    consumer_secret: str,
    token_secret: str = "",
) -> str:
    """Generate an OAuth 1 HMAC-SHA1 signature.

    Query parameters already present on ``url`` are folded into the
    signed parameter set, and the base URL is normalized without them.
    """
    parts = urlsplit(url)
    all_params = [*parse_qsl(parts.query, keep_blank_values=True), *params.items()]
    base_url = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))

    # Sort and encode parameters
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in all_params)
    param_string = "&".join(f"{k}={v}" for k, v in encoded)

    # Build signature base string
    base_string = "&".join(
        [
            method.upper(),
            percent_encode(base_url),
            percent_encode(param_string),
        ]
    )

    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"

    signature = hmac.new(
        signing_key.encode(),
        base_string.encode(),
        hashlib.sha1,
    ).digest()

    return base64.b64encode(signature).decode()


def build_auth_header(oauth_params: dict[str, str]) -> str:
    """Build OAuth Authorization header."""
    auth_parts = [f'{k}="{percent_encode(v)}"' for k, v in sorted(oauth_params.items())]
    return "OAuth " + ", ".join(auth_parts)


class OAuth1Operations:
    """OAuth 1 handshake calls against one configured provider.

    Implements the provider side of the three-legged flow:
    1. Get request token
    2. Build the URL the user is sent to for authorization
    3. Exchange the authorized request token for an access token

    Handshake calls are never retried; failures surface as ProviderCallError.
    """

    def __init__(
        self,
        config: ProviderConfig | None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if config is None:
            raise ConfigurationError("Provider configuration is required", setting="config")
        self.config = config
        self._http_client = http_client

    @property
    def version(self) -> OAuth1Version:
        return self.config.version

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    async def fetch_request_token(
        self,
        callback_url: str,
        extra_params: dict[str, str] | None = None,
    ) -> RequestToken:
        """Leg one: obtain a request token.

        Under 1.0a the callback is registered here; under core 1.0 it is
        handed to the provider on the authorization redirect instead.
        """
        oauth_params = build_oauth_params(self.config.consumer_key)
        if self.version == OAuth1Version.CORE_10_REVISION_A:
            oauth_params["oauth_callback"] = callback_url

        data = await self._exchange(
            self.config.request_token_url,
            oauth_params,
            token_secret="",
            stage="request_token",
            extra_params=extra_params,
        )
        return RequestToken(value=data["oauth_token"], secret=data["oauth_token_secret"])

    def build_authorize_url(
        self,
        token_value: str,
        extra_params: dict[str, str] | None = None,
    ) -> str:
        """URL sending the user to authorize ``token_value``."""
        return self._build_redirect_url(self.config.authorize_url, token_value, extra_params)

    def build_authenticate_url(
        self,
        token_value: str,
        extra_params: dict[str, str] | None = None,
    ) -> str:
        """URL sending the user to sign in with ``token_value``.

        Providers without a separate authenticate endpoint use the
        authorize endpoint.
        """
        return self._build_redirect_url(
            self.config.effective_authenticate_url, token_value, extra_params
        )

    async def exchange_for_access_token(
        self,
        authorized: AuthorizedRequestToken,
        extra_params: dict[str, str] | None = None,
    ) -> AccessGrant:
        """Leg three: trade the authorized request token for an access token."""
        oauth_params = build_oauth_params(self.config.consumer_key)
        oauth_params["oauth_token"] = authorized.value
        if self.version == OAuth1Version.CORE_10_REVISION_A:
            oauth_params["oauth_verifier"] = authorized.verifier

        data = await self._exchange(
            self.config.access_token_url,
            oauth_params,
            token_secret=authorized.secret,
            stage="access_token",
            extra_params=extra_params,
        )
        return AccessGrant(value=data["oauth_token"], secret=data["oauth_token_secret"])

    def _build_redirect_url(
        self,
        base_url: str,
        token_value: str,
        extra_params: dict[str, str] | None,
    ) -> str:
        query = {"oauth_token": token_value, **(extra_params or {})}
        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}{urlencode(query, quote_via=quote)}"

    async def _exchange(
        self,
        url: str,
        oauth_params: dict[str, str],
        *,
        token_secret: str,
        stage: str,
        extra_params: dict[str, str] | None,
    ) -> dict[str, str]:
        """POST a signed token request and parse the form-encoded reply."""
        body = extra_params or {}
        oauth_params["oauth_signature"] = generate_signature(
            "POST",
            url,
            {**oauth_params, **body},
            self.config.consumer_secret,
            token_secret,
        )
        headers = {"Authorization": build_auth_header(oauth_params)}

        logger.debug("Token request (%s): POST %s", stage, url)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, headers=headers, data=body or None)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await client.post(url, headers=headers, data=body or None)
        except httpx.HTTPError as e:
            raise ProviderCallError(
                f"Token request to {self.config.provider_id} failed: {e}",
                stage=stage,
            ) from e

        if not response.is_success:
            raise ProviderCallError(
                f"Failed to get {stage.replace('_', ' ')}: {response.status_code} {response.text}",
                stage=stage,
                status_code=response.status_code,
                response_body=response.text,
            )

        data = dict(parse_qsl(response.text))
        if not data.get("oauth_token") or not data.get("oauth_token_secret"):
            raise ProviderCallError(
                f"Invalid {stage.replace('_', ' ')} response",
                stage=stage,
                status_code=response.status_code,
                response_body=response.text,
            )

        return data


class OAuth1Signer:
    """Signs API requests with an OAuth 1 access grant."""

    def __init__(self, config: ProviderConfig, grant: AccessGrant) -> None:
        self.config = config
        self.grant = grant

    def sign_request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, str]:
        """Generate OAuth headers for an API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Full request URL
            params: Additional parameters (query or form body)

        Returns:
            Headers dict with Authorization header
        """
        oauth_params = build_oauth_params(self.config.consumer_key)
        oauth_params["oauth_token"] = self.grant.value

        # Combine OAuth params with request params for signature
        all_params = {**oauth_params}
        if params:
            all_params.update(params)

        oauth_params["oauth_signature"] = generate_signature(
            method,
            url,
            all_params,
            self.config.consumer_secret,
            self.grant.secret or "",
        )

        return {"Authorization": build_auth_header(oauth_params)}
