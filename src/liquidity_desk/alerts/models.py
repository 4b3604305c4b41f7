"""Risk alert definitions."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class AlertKind(str, Enum):
    """What an alert is about."""

    EMERGENCY_VOLATILITY = "emergency_volatility"
    HIGH_VOLATILITY = "high_volatility"
    MARKET_UPDATE = "market_update"
    LIQUIDITY_SHORTFALL = "liquidity_shortfall"
    SUPPLY_REPLENISHMENT = "supply_replenishment"
    CONTINGENCY_PLAN = "contingency_plan"


class AlertSeverity(str, Enum):
    """How urgently an operator should look at an alert."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Alert lifecycle status."""

    TRIGGERED = "triggered"
    ACKNOWLEDGED = "acknowledged"
    CLEARED = "cleared"


@dataclass
class RiskAlert:
    """
    An alert raised by the risk manager.

    Attributes:
        id: Unique alert ID
        kind: What triggered the alert
        severity: Operator urgency
        symbol: Symbol the alert concerns
        message: Human-readable summary
        value: Observed value (volatility, available liquidity, ...)
        threshold: Threshold the value was compared against, if any
        triggered_at: When the alert was raised
        status: Current status
        context: Additional structured context
    """

    id: str
    kind: AlertKind
    severity: AlertSeverity
    symbol: str
    message: str
    value: Decimal
    threshold: Decimal | None = None
    triggered_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: AlertStatus = AlertStatus.TRIGGERED
    context: dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        """JSON-serializable representation."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "symbol": self.symbol,
            "message": self.message,
            "value": str(self.value),
            "threshold": None if self.threshold is None else str(self.threshold),
            "triggered_at": self.triggered_at.isoformat(),
            "status": self.status.value,
            "context": self.context,
        }
