"""Volatility escalation and liquidity-risk monitoring."""

from liquidity_desk.risk.manager import LiquidityEstimator, RiskManager, StaticLiquidityEstimator
from liquidity_desk.risk.models import (
    LiquidityRiskReport,
    RiskAssessment,
    RiskLevel,
    VolatilityEvent,
)

__all__ = [
    "LiquidityEstimator",
    "LiquidityRiskReport",
    "RiskAssessment",
    "RiskLevel",
    "RiskManager",
    "StaticLiquidityEstimator",
    "VolatilityEvent",
]
