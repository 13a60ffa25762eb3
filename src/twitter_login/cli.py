"""
Click CLI for the Twitter login coordinator.

Drives the same request channel the HTTP server uses, so every command
goes through the coordinator exactly like a remote call would.

Usage:
    twitter-login session            # Show the active session
    twitter-login login              # Log in through the browser
    twitter-login logout             # Remove the active session
    twitter-login serve              # Run the HTTP request channel
"""

import dataclasses
import json
import logging
import sys
from dataclasses import dataclass

import click

from .channel import (
    METHOD_AUTHORIZE,
    METHOD_GET_CURRENT_SESSION,
    METHOD_LOG_OUT,
    LoginMethodHandler,
    MethodCall,
)
from .config import DEFAULT_SESSION_FILE, TwitterLoginConfig
from .coordinator import LoginCoordinator
from .exceptions import ConfigurationError
from .responder import BlockingResponder, ChannelReply
from .twitter_provider import TwitterAuthorizationProvider

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        config: Login configuration
        handler: Request channel handler
        arguments: Consumer credentials as channel arguments
        json: JSON output enabled
    """
    config: TwitterLoginConfig
    handler: LoginMethodHandler
    arguments: dict
    json: bool


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def _call(ctx: CLIContext, method: str, timeout: float = 5) -> ChannelReply:
    responder = BlockingResponder()
    ctx.handler.on_method_call(MethodCall(method, ctx.arguments), responder)
    reply = responder.wait(timeout=timeout)
    if reply is None:
        print_error(f"No response to {method} within {timeout:g}s")
        sys.exit(1)
    if not reply.is_success:
        print_error(reply.message or f"{method} failed")
        sys.exit(1)
    return reply


@click.group()
@click.option(
    "--consumer-key",
    default="",
    envvar="TWITTER_CONSUMER_KEY",
    help="Twitter app API key",
)
@click.option(
    "--consumer-secret",
    default="",
    envvar="TWITTER_CONSUMER_SECRET",
    help="Twitter app API secret",
)
@click.option(
    "--session-file",
    default=DEFAULT_SESSION_FILE,
    envvar="TWITTER_LOGIN_SESSION_FILE",
    help="Session file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "output_json", is_flag=True, help="JSON output (where supported)")
@click.pass_context
def cli(
    ctx: click.Context,
    consumer_key: str,
    consumer_secret: str,
    session_file: str,
    verbose: bool,
    output_json: bool,
) -> None:
    """Log in with Twitter and manage the active session."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = dataclasses.replace(TwitterLoginConfig.from_env(), session_file=session_file)
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)

    provider = TwitterAuthorizationProvider(config)
    provider.on_authorization_url = lambda url: click.echo(
        f"Authorize the app by visiting:\n\n  {url}\n"
    )

    coordinator = LoginCoordinator.from_config(config, provider=provider)
    ctx.obj = CLIContext(
        config=config,
        handler=LoginMethodHandler(coordinator),
        arguments={"consumerKey": consumer_key, "consumerSecret": consumer_secret},
        json=output_json,
    )


@cli.command()
@click.pass_obj
def session(ctx: CLIContext) -> None:
    """Show the active session."""
    record = _call(ctx, METHOD_GET_CURRENT_SESSION).result

    if ctx.json:
        click.echo(json.dumps(record, indent=2))
    elif record is None:
        click.echo("Not logged in")
    else:
        click.echo(f"Logged in as @{record['username']} (id {record['userId']})")


@cli.command()
@click.option(
    "--timeout",
    default=330,
    type=float,
    show_default=True,
    help="Seconds to wait for the browser login",
)
@click.pass_obj
def login(ctx: CLIContext, timeout: float) -> None:
    """Log in through the browser and store the session."""
    click.echo("Waiting for authorization...")
    result = _call(ctx, METHOD_AUTHORIZE, timeout=timeout).result

    if ctx.json:
        click.echo(json.dumps(result, indent=2))

    if result["status"] != "loggedIn":
        print_error(f"Login failed: {result['errorMessage']}")
        sys.exit(1)

    if not ctx.json:
        print_success(f"Logged in as @{result['session']['username']}")


@cli.command()
@click.pass_obj
def logout(ctx: CLIContext) -> None:
    """Remove the active session."""
    _call(ctx, METHOD_LOG_OUT)
    print_success("Logged out")


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
def serve(host: str, port: int) -> None:
    """Run the HTTP request channel."""
    import uvicorn

    from src.server.config import settings

    uvicorn.run(
        "src.server.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level="debug" if settings.debug else "info",
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
