"""oauth-handshake CLI - drive provider handshakes from a terminal."""

from oauth_handshake.cli.app import app

# Import command modules to register them with the app
from oauth_handshake.cli.commands import auth

# Register sub-apps
app.add_typer(auth.app, name="auth", help="Authentication commands.")


def main() -> None:
    """Entry point for the CLI."""
    app()


__all__ = ["app", "main"]
