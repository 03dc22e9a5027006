"""Main Typer application."""

import logging
from pathlib import Path

import typer

from oauth_handshake.cli.config import CLIConfig, _default_config_dir

# Create main app
app = typer.Typer(
    name="oauth-handshake",
    help="Run OAuth handshakes against third-party providers.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    provider: str = typer.Option(
        "default",
        "--provider",
        "-P",
        help="Provider id selecting credentials and stored tokens.",
        envvar="OAUTH_HANDSHAKE_PROVIDER",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    config_dir: Path | None = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Config directory (default: ~/.config/oauth-handshake).",
        envvar="OAUTH_HANDSHAKE_CONFIG_DIR",
    ),
) -> None:
    """Run OAuth handshakes against third-party providers.

    Credentials are read per provider from the config directory,
    overridable with <PROVIDER>_* environment variables.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.obj = CLIConfig(
        provider=provider,
        verbose=verbose,
        config_dir=config_dir or _default_config_dir(),
    )
