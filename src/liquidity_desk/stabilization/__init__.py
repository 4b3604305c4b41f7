"""Price stabilization: trading switch, market snapshots and the liquidity controller."""

from liquidity_desk.stabilization.controller import LiquidityController
from liquidity_desk.stabilization.models import (
    LiquidityAction,
    LiquidityDecision,
    MarketSnapshot,
    ProgramHalt,
    StagedProgramReport,
)
from liquidity_desk.stabilization.switch import AutomaticTradingSwitch

__all__ = [
    "AutomaticTradingSwitch",
    "LiquidityAction",
    "LiquidityController",
    "LiquidityDecision",
    "MarketSnapshot",
    "ProgramHalt",
    "StagedProgramReport",
]
