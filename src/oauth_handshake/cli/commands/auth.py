"""Authentication commands."""

import webbrowser

import typer

from oauth_handshake.cli.async_runner import async_command
from oauth_handshake.cli.client_factory import get_credential_store, get_flow
from oauth_handshake.cli.config import CLIConfig, OutputFormat
from oauth_handshake.cli.formatters import (
    console,
    format_output,
    print_error,
    print_info,
    print_success,
)
from oauth_handshake.config import OAuth1Version, ProviderConfig
from oauth_handshake.exceptions import AuthError
from oauth_handshake.flow import VERIFIER_PARAMETER, Completed, InboundRequest, Suspend
from oauth_handshake.models.auth import AccessGrant
from oauth_handshake.oauth2 import OAuth2Version
from oauth_handshake.session import SessionTokenStore

app = typer.Typer(no_args_is_help=True)


def _callback_request(callback_url: str, answer: str) -> InboundRequest:
    """Turn the user's answer into the provider's callback request.

    Accepts either the bare verification code or the full URL the
    provider redirected to.
    """
    answer = answer.strip()
    if answer.startswith(("http://", "https://")):
        request = InboundRequest.from_url(answer)
    else:
        request = InboundRequest(url=callback_url, params={VERIFIER_PARAMETER: answer})

    # Without a verifier the flow would start over instead of completing
    if not (request.params.get(VERIFIER_PARAMETER) or "").strip():
        raise AuthError(
            "No verification code in the answer; authorization may have been denied",
            stage="access_token",
        )
    return request


@app.command("login")
@async_command
async def login(
    ctx: typer.Context,
    callback_url: str = typer.Option(
        "oob",
        "--callback-url",
        help="Callback URL registered with the provider ('oob' for out-of-band).",
    ),
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Don't open browser automatically.",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        help="Output format for the connected identity.",
    ),
) -> None:
    """Authenticate with the provider over OAuth 1.

    This command runs the three-legged flow:
    1. Fetches a request token and opens the authorization page
    2. Prompts for the verification code (or the callback URL)
    3. Exchanges it for an access token and saves it
    """
    config: CLIConfig = ctx.obj

    flow = get_flow(config)
    session = SessionTokenStore()

    # Step 1: Get request token
    print_info(f"Starting OAuth flow for {config.provider}...")
    started = await flow.obtain_or_continue(InboundRequest(url=callback_url), session)
    if not isinstance(started, Suspend):
        raise AuthError("Provider did not return an authorization URL", stage="request_token")

    # Step 2: Open browser or show URL
    if no_browser:
        console.print("\nOpen this URL in your browser:")
        console.print(f"[link]{started.authorization_url}[/link]")
    else:
        print_info("Opening browser for authorization...")
        webbrowser.open(started.authorization_url)
        console.print("\n[dim]If browser didn't open, visit:[/dim]")
        console.print(f"[link]{started.authorization_url}[/link]")

    # Step 3: Get verifier from user
    console.print()
    answer = typer.prompt("Enter the verification code (or the URL you were sent to)")

    # Step 4: Exchange for access token
    print_info("Exchanging verification code for access token...")
    completed = await flow.obtain_or_continue(_callback_request(callback_url, answer), session)
    if not isinstance(completed, Completed):
        raise AuthError("Authorization was not completed", stage="access_token")
    connection = completed.connection

    # Step 5: Save grant
    token_store = get_credential_store(config)
    token_store.save(AccessGrant(value=connection.access_token, secret=connection.secret))

    print_success(f"Authenticated successfully! Token saved to {config.token_path}")
    format_output(
        connection.model_dump(exclude={"access_token", "secret"}, exclude_none=True),
        output,
        title="Connection",
    )


@app.command("configure")
def configure(
    ctx: typer.Context,
    request_token_url: str = typer.Option(..., prompt=True),
    authorize_url: str = typer.Option(..., prompt=True),
    access_token_url: str = typer.Option(..., prompt=True),
    consumer_key: str = typer.Option(..., prompt=True),
    consumer_secret: str = typer.Option(..., prompt=True, hide_input=True),
    authenticate_url: str | None = typer.Option(None, help="Separate sign-in endpoint."),
    oauth_version: OAuth1Version = typer.Option(
        OAuth1Version.CORE_10_REVISION_A,
        "--oauth-version",
        help="OAuth 1 edition the provider speaks.",
    ),
) -> None:
    """Save consumer credentials and endpoints for the provider."""
    config: CLIConfig = ctx.obj

    config.save_provider_config(
        ProviderConfig(
            provider_id=config.provider,
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            request_token_url=request_token_url,
            authorize_url=authorize_url,
            access_token_url=access_token_url,
            authenticate_url=authenticate_url,
            version=oauth_version,
        )
    )
    print_success(f"Saved {config.provider} configuration to {config.credentials_path}")


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Check authentication status."""
    config: CLIConfig = ctx.obj

    token_store = get_credential_store(config)

    console.print(f"Provider: [bold]{config.provider}[/bold]")
    console.print(f"Token path: {config.token_path}")

    if token_store.load() is not None:
        print_success("Token found - you are authenticated")
    elif token_store.has_token():
        print_error("Token file is unreadable; run 'oauth-handshake auth logout'")
        raise typer.Exit(1)
    else:
        print_info("Not authenticated - run 'oauth-handshake auth login' to authenticate")


@app.command("logout")
def logout(ctx: typer.Context) -> None:
    """Log out and clear the saved token.

    Only the local token file is removed; the provider is not contacted.
    """
    config: CLIConfig = ctx.obj

    token_store = get_credential_store(config)

    if not token_store.has_token():
        print_info("No token to clear.")
        return

    token_store.clear()
    print_success(f"Logged out from {config.provider}.")


@app.command("header")
def header(
    token: str = typer.Argument(..., help="Access token to present."),
    version: OAuth2Version = typer.Option(
        OAuth2Version.STANDARD,
        "--version",
        help="OAuth 2 edition deciding the header encoding.",
    ),
) -> None:
    """Print the Authorization header value for a bearer token."""
    typer.echo(version.authorization_header_value(token))
