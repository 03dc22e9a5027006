"""Typed exceptions for the OAuth handshake client."""

from typing import Any


class HandshakeError(Exception):
    """Base exception for all handshake client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(HandshakeError):
    """A required collaborator or setting is missing."""

    def __init__(self, message: str, *, setting: str | None = None) -> None:
        self.setting = setting
        super().__init__(message)


class AuthError(HandshakeError):
    """Authentication or authorization error."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        self.stage = stage  # e.g., "request_token", "access_token"
        super().__init__(message)


class ProviderCallError(AuthError):
    """Network or provider-side failure during a handshake call."""

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, stage=stage)


class MissingSessionTokenError(AuthError):
    """Callback arrived with no request token stashed in the session."""

    def __init__(self, message: str, *, key: str) -> None:
        self.key = key
        super().__init__(message, stage="access_token")


class APIError(HandshakeError):
    """API request error with status code and response details."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_code: str | None = None,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.response_body = response_body
        super().__init__(message)


class RateLimitError(APIError):
    """Rate limit exceeded - includes retry information."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        retry_after: int | None = None,
    ) -> None:
        self.retry_after = retry_after  # seconds until retry is allowed
        super().__init__(message, status_code=status_code)
