"""Venue metrics, venue selection and arbitrage detection."""

from liquidity_desk.analysis.arbitrage import ArbitrageAnalyzer, ArbitrageOpportunity
from liquidity_desk.analysis.metrics import MetricsAggregator, VenueMetrics
from liquidity_desk.analysis.selection import (
    DefaultSelectionStrategy,
    SelectionStrategy,
    is_eligible,
)

__all__ = [
    "ArbitrageAnalyzer",
    "ArbitrageOpportunity",
    "DefaultSelectionStrategy",
    "MetricsAggregator",
    "SelectionStrategy",
    "VenueMetrics",
    "is_eligible",
]
