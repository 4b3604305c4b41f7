"""Liquidity operations, venue dispatch and multi-venue routing."""

from liquidity_desk.execution.audit import OperationAuditLogger
from liquidity_desk.execution.manager import MultiVenueManager
from liquidity_desk.execution.models import (
    ArbitrageExecution,
    LiquidityOperation,
    LiquidityResult,
    OperationType,
)
from liquidity_desk.execution.monitor import ExecutionMonitor

__all__ = [
    "ArbitrageExecution",
    "ExecutionMonitor",
    "LiquidityOperation",
    "LiquidityResult",
    "MultiVenueManager",
    "OperationAuditLogger",
    "OperationType",
]
