"""Command line interface for the Bee CLI."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from contextlib import contextmanager
from typing import Any, Coroutine, Iterator, Optional, TypeVar

import typer

from .client import ClientUser, fetch_me, require_token
from .config import BeeConfig, Environment, emoji_hash_enabled, load_config
from .errors import BeeError, ValidationError
from .pairing import PairingClient, PairingOrchestrator
from .store import CredentialStore, get_credential_store

T = TypeVar("T")

app = typer.Typer(help="CLI for the Bee developer API")


@dataclass
class CliContext:
    config: BeeConfig
    env: Environment
    store: CredentialStore


def _notify(message: str) -> None:
    typer.echo(message, err=True)


@app.callback()
def main(
    ctx: typer.Context,
    staging: bool = typer.Option(False, "--staging", help="Use the staging environment"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Bee CLI entry point."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    with user_errors():
        config = load_config()
    env = Environment.STAGING if staging else config.environment
    ctx.obj = CliContext(
        config=config, env=env, store=get_credential_store(config, notify=_notify)
    )


@contextmanager
def user_errors() -> Iterator[None]:
    """Report :class:`BeeError` in red and exit with code 1."""
    try:
        yield
    except BeeError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    with user_errors():
        return asyncio.run(coro)


def read_token_from_stdin() -> str:
    if sys.stdin.isatty():
        raise ValidationError("--token-stdin requires input via stdin.")
    return sys.stdin.read().strip()


def mask_token(token: str) -> str:
    trimmed = token.strip()
    if len(trimmed) <= 8:
        return "********"
    return f"{trimmed[:4]}...{trimmed[-4:]}"


def build_orchestrator(cli: CliContext) -> PairingOrchestrator:
    env_config = cli.config.environment_config(cli.env)
    return PairingOrchestrator(
        cli.env,
        env_config,
        cli.store,
        client=PairingClient(env_config, timeout=cli.config.request_timeout),
        poll_interval=cli.config.poll_interval,
        fallback_ttl=cli.config.fallback_ttl,
        show_fingerprint=emoji_hash_enabled(),
    )


def _print_agent_success(user: ClientUser) -> None:
    typer.echo("")
    typer.echo(f"Great news! I'm now connected to the Bee account of {user.display_name}.")
    typer.echo("")
    typer.echo("Everything is set up and I'm ready to help you!")


async def _login(
    cli: CliContext,
    token: Optional[str],
    token_stdin: bool,
    agent: bool,
    skip_verify: bool,
) -> None:
    if token_stdin and token:
        raise ValidationError("Use either --token or --token-stdin, not both.")
    if token_stdin:
        token = read_token_from_stdin()
    token = (token or "").strip()

    if not token:
        if not agent and not sys.stdin.isatty():
            raise ValidationError(
                "Interactive login requires a TTY. Use --token or --token-stdin."
            )
        orchestrator = build_orchestrator(cli)
        if agent:
            token = await orchestrator.login_agent()
        else:
            token = await orchestrator.login_interactive()
        token = token.strip()

    if not token:
        raise ValidationError("Missing token.")

    user = None
    if not skip_verify:
        user = await fetch_me(cli.config.environment_config(cli.env), token)

    cli.store.save_token(cli.env, token)

    if user is None:
        typer.echo("Token stored.")
    elif agent:
        _print_agent_success(user)
    else:
        typer.echo(f"Authenticated as {user.display_name} (id {user.id}).")


@app.command("login")
def login(
    ctx: typer.Context,
    token: Optional[str] = typer.Option(None, help="Store this token instead of pairing"),
    token_stdin: bool = typer.Option(False, "--token-stdin", help="Read the token from stdin"),
    agent: bool = typer.Option(
        False, "--agent", help="Non-interactive pairing that can be resumed after restart"
    ),
    skip_verify: bool = typer.Option(
        False, "--skip-verify", help="Do not verify the token against the API"
    ),
) -> None:
    """
    Authenticate the CLI with your Bee account.

    Without --token/--token-stdin this pairs the CLI with your account: a key
    pair is generated, a pairing link is shown, and the CLI waits until the
    link is approved. The API token is delivered encrypted to that key pair.

    Example:
        bee login
        bee login --agent
        echo "$TOKEN" | bee login --token-stdin
    """
    _run(_login(ctx.obj, token, token_stdin, agent, skip_verify))


@app.command("logout")
def logout(ctx: typer.Context) -> None:
    """Log out and clear stored credentials."""
    cli: CliContext = ctx.obj
    with user_errors():
        cli.store.clear_token(cli.env)
    typer.echo("Logged out.")


@app.command("status")
def status(
    ctx: typer.Context,
    no_verify: bool = typer.Option(False, "--no-verify", help="Skip verifying the token"),
) -> None:
    """Show current authentication status."""
    cli: CliContext = ctx.obj
    env_config = cli.config.environment_config(cli.env)
    with user_errors():
        token = cli.store.load_token(cli.env)

    if not token:
        typer.echo("Not logged in.")
        typer.echo(f"API: {env_config.label} ({env_config.api_url})")
        return

    typer.echo(f"API: {env_config.label} ({env_config.api_url})")
    typer.echo(f"Token: {mask_token(token)}")
    if no_verify:
        return

    user = _run(fetch_me(env_config, token))
    typer.echo(f"Verified as {user.display_name} (id {user.id}).")


@app.command("me")
def me(ctx: typer.Context) -> None:
    """Print the account the stored token belongs to as JSON."""
    cli: CliContext = ctx.obj

    async def _me() -> dict[str, Any]:
        token = require_token(cli.store, cli.env)
        user = await fetch_me(cli.config.environment_config(cli.env), token)
        return user.model_dump()

    typer.echo(json.dumps(_run(_me()), indent=2))


if __name__ == "__main__":
    app()
