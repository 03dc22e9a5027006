"""Session-scoped slot for the in-flight request token."""

import logging
from collections.abc import MutableMapping
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from oauth_handshake.exceptions import MissingSessionTokenError
from oauth_handshake.models.auth import RequestToken

logger = logging.getLogger(__name__)

OAUTH_TOKEN_ATTRIBUTE = "oauthToken"


@runtime_checkable
class TemporaryTokenStore(Protocol):
    """Per-session store holding at most one request token per key."""

    def put(self, key: str, token: RequestToken) -> None: ...

    def take_and_clear(self, key: str) -> RequestToken | None: ...


class SessionTokenStore:
    """TemporaryTokenStore backed by a session mapping.

    Tokens are kept as plain dicts so cookie or JSON backed sessions can
    serialize them. Pass the web framework's session object, or nothing
    for a private in-memory slot.
    """

    def __init__(self, mapping: MutableMapping[str, Any] | None = None) -> None:
        self._mapping: MutableMapping[str, Any] = {} if mapping is None else mapping

    def put(self, key: str, token: RequestToken) -> None:
        """Store a token, replacing any previous one."""
        if key in self._mapping:
            # The earlier attempt's provider-side request token is orphaned
            logger.warning("Replacing in-flight request token under %r", key)
        self._mapping[key] = token.model_dump()

    def take_and_clear(self, key: str) -> RequestToken | None:
        """Remove and return the token under ``key``.

        Raises:
            MissingSessionTokenError: The stored entry is not a readable token.
        """
        data = self._mapping.pop(key, None)
        if data is None:
            return None
        try:
            return RequestToken.model_validate(data)
        except ValidationError:
            logger.warning("Discarding unreadable request token under %r", key)
            raise MissingSessionTokenError(
                f"Stored request token under {key!r} is unreadable", key=key
            ) from None

    def __contains__(self, key: object) -> bool:
        return key in self._mapping
