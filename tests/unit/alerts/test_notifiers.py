"""Tests for alert notification channels."""

from __future__ import annotations

import json
from decimal import Decimal
from io import StringIO
from typing import TYPE_CHECKING

import httpx
import pytest
import respx
from httpx import Response
from rich.console import Console

from liquidity_desk.alerts.models import AlertKind, AlertSeverity, AlertStatus, RiskAlert
from liquidity_desk.alerts.notifiers import ConsoleNotifier, FileNotifier, WebhookNotifier

if TYPE_CHECKING:
    from pathlib import Path

WEBHOOK_URL = "https://hooks.example.com/desk"


def _alert(severity: AlertSeverity = AlertSeverity.CRITICAL) -> RiskAlert:
    return RiskAlert(
        id="alert-1",
        kind=AlertKind.EMERGENCY_VOLATILITY,
        severity=severity,
        symbol="SFRT/JPY",
        message="Extreme volatility: automatic trading paused",
        value=Decimal("0.55"),
        threshold=Decimal("0.50"),
        context={"price": "150.00"},
    )


def test_alert_record_is_json_ready() -> None:
    record = _alert().to_record()

    assert record["kind"] == "emergency_volatility"
    assert record["severity"] == "critical"
    assert record["value"] == "0.55"
    assert record["threshold"] == "0.50"
    assert record["status"] == AlertStatus.TRIGGERED.value
    json.dumps(record)


async def test_console_notifier_renders_panel() -> None:
    buffer = StringIO()
    notifier = ConsoleNotifier(Console(file=buffer, width=100, color_system=None))

    await notifier.notify(_alert())

    output = buffer.getvalue()
    assert "CRITICAL" in output
    assert "Extreme volatility" in output
    assert "Threshold: 0.50" in output


async def test_file_notifier_appends_jsonl(tmp_path: Path) -> None:
    notifier = FileNotifier(tmp_path / "alerts" / "risk.jsonl")

    await notifier.notify(_alert())
    await notifier.notify(_alert(AlertSeverity.WARNING))

    lines = notifier.path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["severity"] for line in lines] == ["critical", "warning"]


@pytest.mark.asyncio
@respx.mock
async def test_webhook_posts_payload() -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=Response(200))

    await WebhookNotifier(WEBHOOK_URL).notify(_alert())

    assert route.call_count == 1
    payload = json.loads(route.calls.last.request.content)
    assert payload["text"] == "[CRITICAL] Extreme volatility: automatic trading paused"
    assert payload["attachments"][0]["color"] == "danger"
    titles = [f["title"] for f in payload["attachments"][0]["fields"]]
    assert titles == ["Symbol", "Kind", "Value", "Threshold"]


@pytest.mark.asyncio
@respx.mock
async def test_webhook_retries_network_errors() -> None:
    route = respx.post(WEBHOOK_URL)
    route.side_effect = [httpx.ConnectError("connection refused"), Response(200)]

    await WebhookNotifier(WEBHOOK_URL, max_attempts=2).notify(_alert(AlertSeverity.WARNING))

    assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_webhook_http_error_is_not_retried() -> None:
    route = respx.post(WEBHOOK_URL).mock(return_value=Response(500))

    with pytest.raises(httpx.HTTPStatusError):
        await WebhookNotifier(WEBHOOK_URL).notify(_alert())

    assert route.call_count == 1
