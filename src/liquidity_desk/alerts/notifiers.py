"""Alert notification channels."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import httpx
import structlog
from rich.console import Console
from rich.panel import Panel
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from liquidity_desk.alerts.models import AlertSeverity

if TYPE_CHECKING:
    from liquidity_desk.alerts.models import RiskAlert

logger = structlog.get_logger()

_SEVERITY_STYLE = {
    AlertSeverity.INFO: "cyan",
    AlertSeverity.WARNING: "yellow",
    AlertSeverity.CRITICAL: "red",
}


class Notifier(Protocol):
    """Protocol for notification channels."""

    async def notify(self, alert: RiskAlert) -> None:
        """Send notification for an alert."""
        ...


class ConsoleNotifier:
    """Rich console notification output."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    async def notify(self, alert: RiskAlert) -> None:
        style = _SEVERITY_STYLE[alert.severity]
        lines = [
            f"[bold]{alert.message}[/bold]",
            "",
            f"Symbol: {alert.symbol}",
            f"Kind: {alert.kind.value}",
            f"Value: {alert.value}",
        ]
        if alert.threshold is not None:
            lines.append(f"Threshold: {alert.threshold}")
        lines.append(f"Triggered: {alert.triggered_at.isoformat()}")

        self._console.print(
            Panel(
                "\n".join(lines),
                title=f"[{style}]{alert.severity.value.upper()}[/{style}]",
                border_style=style,
            )
        )


class FileNotifier:
    """JSON lines file logging for alerts."""

    def __init__(self, file_path: Path | str) -> None:
        self._file_path = Path(file_path)

    @property
    def path(self) -> Path:
        return self._file_path

    async def notify(self, alert: RiskAlert) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(alert.to_record()) + "\n")


class WebhookNotifier:
    """HTTP webhook notification (for Slack, Discord, etc.).

    Network errors and timeouts are retried with exponential backoff. A non-2xx response or
    an exhausted retry budget raises `httpx.HTTPError` to the caller.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._transport = transport

    def _payload(self, alert: RiskAlert) -> dict[str, object]:
        fields = [
            {"title": "Symbol", "value": alert.symbol, "short": True},
            {"title": "Kind", "value": alert.kind.value, "short": True},
            {"title": "Value", "value": str(alert.value), "short": True},
        ]
        if alert.threshold is not None:
            fields.append({"title": "Threshold", "value": str(alert.threshold), "short": True})
        return {
            "text": f"[{alert.severity.value.upper()}] {alert.message}",
            "attachments": [
                {
                    "color": "danger" if alert.severity == AlertSeverity.CRITICAL else "warning",
                    "fields": fields,
                }
            ],
        }

    async def notify(self, alert: RiskAlert) -> None:
        payload = self._payload(alert)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential(multiplier=0.5, max=5),
                reraise=True,
            ):
                with attempt:
                    response = await client.post(self._webhook_url, json=payload)
                    response.raise_for_status()
        logger.debug("webhook_alert_delivered", alert_id=alert.id, kind=alert.kind.value)
