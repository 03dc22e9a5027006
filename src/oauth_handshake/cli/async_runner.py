"""Async command support for Typer."""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

import typer

from oauth_handshake.exceptions import HandshakeError, MissingSessionTokenError


def _error_hint(e: HandshakeError) -> str | None:
    """Suggest a next step for errors the user can act on."""
    if isinstance(e, MissingSessionTokenError):
        return "The authorization attempt expired. Run 'oauth-handshake auth login' again."
    stage = getattr(e, "stage", None)
    if stage == "request_token":
        return "Check the consumer key, secret and request token URL."
    if stage == "access_token":
        return "Check the verification code and try logging in again."
    return None


T = TypeVar("T")


def async_command(f: Callable[..., Coroutine[Any, Any, T]]) -> Callable[..., T]:
    """Decorator to run async Typer commands.

    Handshake errors are reported on stderr and end the command with exit
    code 1; anything else propagates.

    Usage:
        @app.command()
        @async_command
        async def my_command(ctx: typer.Context):
            flow = get_flow(ctx.obj)
            ...
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        from oauth_handshake.cli.formatters import print_error, print_info

        try:
            return asyncio.run(f(*args, **kwargs))
        except HandshakeError as e:
            print_error(e.message)
            if hint := _error_hint(e):
                print_info(hint)
            raise typer.Exit(1) from None

    return wrapper
