"""
Risk alerts and notification channels (console, JSONL file, webhook).
"""

from liquidity_desk.alerts.models import AlertKind, AlertSeverity, AlertStatus, RiskAlert
from liquidity_desk.alerts.notifiers import (
    ConsoleNotifier,
    FileNotifier,
    Notifier,
    WebhookNotifier,
)

__all__ = [
    "AlertKind",
    "AlertSeverity",
    "AlertStatus",
    "ConsoleNotifier",
    "FileNotifier",
    "Notifier",
    "RiskAlert",
    "WebhookNotifier",
]
