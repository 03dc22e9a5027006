"""Three-legged OAuth 1 exchange flow.

The flow is a two-state machine driven by the inbound request:

* no ``oauth_verifier`` parameter: fetch a request token, stash it in the
  session and return :class:`Suspend` with the provider URL the user's
  browser must be redirected to;
* ``oauth_verifier`` present: take the stashed request token out of the
  session, exchange it for an access grant and return :class:`Completed`
  with the connected identity.

The caller performs the actual HTTP redirect; the two phases run in
separate requests and share nothing but the session slot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from oauth_handshake.config import OAuth1Version
from oauth_handshake.exceptions import ConfigurationError, MissingSessionTokenError
from oauth_handshake.models.auth import AuthorizedRequestToken
from oauth_handshake.session import OAUTH_TOKEN_ATTRIBUTE

if TYPE_CHECKING:
    from oauth_handshake.connect import ConnectionFactory
    from oauth_handshake.models.connect import ConnectionData
    from oauth_handshake.session import TemporaryTokenStore

logger = logging.getLogger(__name__)

VERIFIER_PARAMETER = "oauth_verifier"


@dataclass(frozen=True, slots=True)
class InboundRequest:
    """The parts of an inbound HTTP request the flow looks at.

    Attributes:
        url: Canonical request URL, without query string.
        params: Request parameters, first value per name.
    """

    url: str
    params: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str) -> InboundRequest:
        """Split a full URL into its canonical part and its query parameters."""
        parts = urlsplit(url)
        params: dict[str, str] = {}
        for name, value in parse_qsl(parts.query, keep_blank_values=True):
            params.setdefault(name, value)
        return cls(url=urlunsplit((*parts[:3], "", "")), params=params)


@dataclass(frozen=True, slots=True)
class Suspend:
    """Phase one finished: redirect the user to ``authorization_url``."""

    authorization_url: str


@dataclass(frozen=True, slots=True)
class Completed:
    """Phase two finished: the user is connected."""

    connection: ConnectionData


FlowResult = Suspend | Completed


class ExchangeFlow:
    """Drives the OAuth 1 exchange for one configured provider.

    Usage:
        flow = ExchangeFlow(factory, return_to_url_parameters=["next"])
        result = await flow.obtain_or_continue(request, SessionTokenStore(session))
        match result:
            case Suspend(url):
                return redirect(url)
            case Completed(connection):
                login(connection)
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory | None,
        *,
        return_to_url_parameters: Iterable[str] = (),
    ) -> None:
        if connection_factory is None:
            raise ConfigurationError(
                "A connection factory is required", setting="connection_factory"
            )
        self.connection_factory = connection_factory
        # Ordered and de-duplicated; never changes after construction
        self.return_to_url_parameters: tuple[str, ...] = tuple(
            dict.fromkeys(return_to_url_parameters)
        )

    @property
    def provider_id(self) -> str:
        return self.connection_factory.provider_id

    async def obtain_or_continue(
        self,
        request: InboundRequest,
        session_store: TemporaryTokenStore,
    ) -> FlowResult:
        """Run whichever phase ``request`` calls for.

        Raises:
            ProviderCallError: A provider call failed. Not retried.
            MissingSessionTokenError: A callback arrived with no stashed token.
        """
        verifier = request.params.get(VERIFIER_PARAMETER) or ""
        # Whitespace only counts as absent; the provider still gets the raw value
        if not verifier.strip():
            return await self._start(request, session_store)
        return await self._complete(verifier, session_store)

    def build_return_to_url(self, request: InboundRequest) -> str:
        """Callback URL echoing the configured parameters present on ``request``."""
        url = request.url + "?"
        for name in self.return_to_url_parameters:
            value = request.params.get(name)
            if value is None:
                continue
            url += f"{name}={value}&"

        # Strip trailing ? or &
        return url[:-1]

    async def _start(
        self,
        request: InboundRequest,
        session_store: TemporaryTokenStore,
    ) -> Suspend:
        operations = self.connection_factory.operations
        return_to_url = self.build_return_to_url(request)

        logger.info("Starting %s authorization", self.provider_id)
        request_token = await operations.fetch_request_token(return_to_url)
        session_store.put(OAUTH_TOKEN_ATTRIBUTE, request_token)

        # Core 1.0 never registered the callback with the request token
        extra_params = (
            {"oauth_callback": return_to_url}
            if operations.version == OAuth1Version.CORE_10
            else None
        )
        authorization_url = operations.build_authenticate_url(request_token.value, extra_params)
        logger.debug("Redirecting to %s", authorization_url)
        return Suspend(authorization_url)

    async def _complete(
        self,
        verifier: str,
        session_store: TemporaryTokenStore,
    ) -> Completed:
        # Cleared before any remote call so a failed exchange cannot be replayed
        request_token = session_store.take_and_clear(OAUTH_TOKEN_ATTRIBUTE)
        if request_token is None:
            raise MissingSessionTokenError(
                f"No {self.provider_id} request token in session; restart authorization",
                key=OAUTH_TOKEN_ATTRIBUTE,
            )

        logger.info("Exchanging %s request token for access token", self.provider_id)
        grant = await self.connection_factory.operations.exchange_for_access_token(
            AuthorizedRequestToken(token=request_token, verifier=verifier)
        )
        connection = await self.connection_factory.create_identity(grant)
        return Completed(connection)
