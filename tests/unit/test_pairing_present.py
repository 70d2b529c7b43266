from datetime import datetime, timezone

import pytest

from beecli.pairing import present
from beecli.pairing.present import (
    AgentSessionStatus,
    PresentationMethod,
    present_pairing,
    print_agent_welcome,
    remaining_minutes,
    render_qr_code,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_render_qr_code_produces_block_text():
    rendered = render_qr_code("https://bee.computer/connect/r1")
    lines = rendered.strip("\n").splitlines()
    assert len(lines) > 10
    assert any(char in rendered for char in "█▀▄")


@pytest.mark.parametrize(
    "expires_at,minutes",
    [
        ("2026-10-18T12:00:30Z", 1),
        ("2026-10-18T12:04:01+00:00", 5),
        ("2026-10-18T11:00:00Z", 1),
        ("garbage", 1),
    ],
)
def test_remaining_minutes(expires_at, minutes):
    assert remaining_minutes(expires_at, NOW) == minutes


def test_present_browser_reports_failure(monkeypatch, capsys):
    monkeypatch.setattr(present, "open_browser", lambda url: False)
    present_pairing(PresentationMethod.BROWSER, "https://bee.computer/connect/r1", "r1", "🐝 🍯 🌻 🌼")

    out = capsys.readouterr().out
    assert "Pairing request: r1" in out
    assert "Emoji hash: 🐝 🍯 🌻 🌼" in out
    assert "Unable to open the browser automatically." in out


def test_present_qr_prints_code(monkeypatch, capsys):
    monkeypatch.setattr(present, "render_qr_code", lambda url: "<qr>")
    present_pairing(PresentationMethod.QR, "https://bee.computer/connect/r1", "r1")

    out = capsys.readouterr().out
    assert "<qr>" in out
    assert "Emoji hash" not in out


@pytest.mark.parametrize(
    "status,banner",
    [
        (AgentSessionStatus.NEW, "[Starting new authentication session]"),
        (AgentSessionStatus.RESUMED, "[Resuming previous authentication session]"),
        (AgentSessionStatus.RESET, "[Previous authentication expired - starting a new session]"),
    ],
)
def test_agent_welcome_banners(capsys, status, banner):
    print_agent_welcome("https://bee.computer/connect/r1", "2026-10-18T12:10:00Z", status, NOW)

    out = capsys.readouterr().out
    assert banner in out
    assert "Authentication link: https://bee.computer/connect/r1" in out
    assert "expire in approximately 10 minutes." in out


def test_choose_method_reprompts_on_invalid_answer(monkeypatch, capsys):
    answers = iter(["fax", " QR "])
    monkeypatch.setattr(present.typer, "prompt", lambda *args, **kwargs: next(answers))

    assert present.choose_method() is PresentationMethod.QR
    assert "Please choose one of: browser, qr" in capsys.readouterr().out
