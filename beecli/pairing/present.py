"""Terminal presentation of pairing links."""

from __future__ import annotations

import io
import logging
import math
import webbrowser
from datetime import datetime
from enum import Enum
from typing import Optional

import qrcode
import typer

from .models import parse_timestamp

logger = logging.getLogger(__name__)


class PresentationMethod(str, Enum):
    BROWSER = "browser"
    QR = "qr"


class AgentSessionStatus(str, Enum):
    NEW = "new"
    RESUMED = "resumed"
    RESET = "reset"


_SESSION_BANNERS = {
    AgentSessionStatus.NEW: "[Starting new authentication session]",
    AgentSessionStatus.RESUMED: "[Resuming previous authentication session]",
    AgentSessionStatus.RESET: "[Previous authentication expired - starting a new session]",
}


def open_browser(url: str) -> bool:
    """Try to open ``url`` in the user's browser."""
    try:
        return webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.debug("Browser launch failed: %s", exc)
        return False


def render_qr_code(value: str) -> str:
    """Render ``value`` as a QR code drawn with text characters."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(value)
    qr.make(fit=True)
    out = io.StringIO()
    qr.print_ascii(out=out, invert=True)
    return out.getvalue()


def choose_method() -> PresentationMethod:
    typer.echo("How would you like to authenticate?")
    typer.echo("  browser - Open a browser window")
    typer.echo("  qr      - Show a QR code")
    valid = [method.value for method in PresentationMethod]
    while True:
        choice = typer.prompt("Method", default=PresentationMethod.BROWSER.value)
        choice = choice.strip().lower()
        if choice in valid:
            return PresentationMethod(choice)
        typer.echo(f"Please choose one of: {', '.join(valid)}")


def present_pairing(
    method: PresentationMethod,
    pairing_url: str,
    request_id: str,
    fingerprint: Optional[str] = None,
) -> None:
    typer.echo(f"Pairing request: {request_id}")
    typer.echo(f"Open this URL to approve the app: {pairing_url}")
    if fingerprint:
        typer.echo(f"Emoji hash: {fingerprint}")

    if method is PresentationMethod.BROWSER:
        if not open_browser(pairing_url):
            typer.echo("Unable to open the browser automatically.")
        return

    typer.echo(render_qr_code(pairing_url))


def remaining_minutes(expires_at: str, now: datetime) -> int:
    expiry = parse_timestamp(expires_at)
    if expiry is None:
        return 1
    seconds = (expiry - now).total_seconds()
    return max(1, math.ceil(seconds / 60))


def print_agent_welcome(
    pairing_url: str,
    expires_at: str,
    status: AgentSessionStatus,
    now: datetime,
) -> None:
    minutes = remaining_minutes(expires_at, now)
    plural = "" if minutes == 1 else "s"
    lines = [
        "Welcome to Bee AI!",
        "",
        _SESSION_BANNERS[status],
        "",
        "This is an authentication flow for Bee CLI to connect a Bee account to it.",
        "",
        "To complete authentication, the device owner must authorize this connection.",
        "There are two ways to do this:",
        "",
        "  1. Click on the authentication link below to open it in a browser",
        "  2. Or visit the link on any device and scan the QR code shown on the page",
        "",
        f"Authentication link: {pairing_url}",
        "",
        "Once the link is opened, follow the instructions to approve the connection.",
        "",
        f"This authentication request will expire in approximately {minutes} minute{plural}.",
        "You can safely stop this process and restart it later to continue from where you left off,",
        "as long as the request has not expired.",
        "",
        "Now waiting for you to approve the connection using the link above...",
    ]
    for line in lines:
        typer.echo(line)
