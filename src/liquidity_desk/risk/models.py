"""Risk events and assessments."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RiskLevel(str, Enum):
    """Escalation state of the risk manager."""

    NORMAL = "normal"
    HIGH_ALERT = "high_alert"
    EMERGENCY = "emergency"


class VolatilityEvent(BaseModel):
    """One cross-venue volatility reading."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    volatility: Decimal = Field(ge=0)
    current_price: Decimal
    timestamp: datetime = Field(default_factory=_utc_now)


class RiskAssessment(BaseModel):
    """Situation assessment built when the emergency protocol fires."""

    model_config = ConfigDict(frozen=True)

    price_volatility: Decimal
    market_risk: Decimal
    liquidity_risk: Decimal
    timestamp: datetime = Field(default_factory=_utc_now)


class LiquidityRiskReport(BaseModel):
    """Result of one periodic liquidity-risk check."""

    model_config = ConfigDict(frozen=True)

    available: Decimal
    required: Decimal
    timestamp: datetime = Field(default_factory=_utc_now)

    @property
    def shortfall(self) -> Decimal:
        return max(self.required - self.available, Decimal("0"))

    @property
    def at_risk(self) -> bool:
        return self.available < self.required
