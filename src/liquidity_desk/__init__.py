"""
Liquidity Desk.

Multi-venue liquidity coordination for a single asset: venue scoring and selection,
cross-venue arbitrage, price stabilization programs, and volatility risk controls.
"""

__version__ = "0.1.0"

from liquidity_desk.config import DeskConfig, get_config
from liquidity_desk.engine import LiquidityEngine

# Configure structlog once at import time (quiet by default).
from liquidity_desk.logging import configure_structlog

configure_structlog()

__all__ = [
    "DeskConfig",
    "LiquidityEngine",
    "__version__",
    "get_config",
]
