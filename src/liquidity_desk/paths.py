"""
Centralized path defaults for the liquidity desk.

All paths are expressed relative to the current working directory. Every path default can be
overridden via configuration or CLI options.
"""

from pathlib import Path

DEFAULT_DATA_DIR = Path("data")
DEFAULT_OPERATION_AUDIT_LOG = DEFAULT_DATA_DIR / "operation_audit.jsonl"
DEFAULT_RISK_ALERT_LOG = DEFAULT_DATA_DIR / "risk_alerts.jsonl"

__all__ = [
    "DEFAULT_DATA_DIR",
    "DEFAULT_OPERATION_AUDIT_LOG",
    "DEFAULT_RISK_ALERT_LOG",
]
