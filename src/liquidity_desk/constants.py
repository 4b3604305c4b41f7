"""Centralized policy constants for the liquidity desk.

Every literal that encodes a trading or risk policy lives here so the defaults in
`liquidity_desk.config` and the fallbacks in individual components cannot drift apart.
All monetary values are denominated in the quote currency of the managed symbol.
"""

from __future__ import annotations

from decimal import Decimal

# =============================================================================
# Market
# =============================================================================

# Trading pair managed by the desk and the quote currency used for price queries.
#
# Used by:
# - config.py: DeskConfig.symbol / AggregationConfig.quote_currency
DEFAULT_SYMBOL: str = "SFRT/JPY"
DEFAULT_QUOTE_CURRENCY: str = "JPY"

# Order book depth (levels per side) requested while aggregating venue metrics.
DEFAULT_ORDER_BOOK_DEPTH: int = 10

# Per-venue timeout (seconds) for any single aggregation or price probe.
#
# A venue that does not answer in time is treated as unavailable for that pass.
DEFAULT_VENUE_TIMEOUT_SECONDS: float = 5.0

# =============================================================================
# Venue Quality Score
# =============================================================================

# Quality score = base + liquidity contribution + latency tier, capped at 100.
#
# Used by:
# - analysis/metrics.py: VenueMetrics.quality_score
#
# Liquidity contributes 1 point per 10,000,000 of book notional, up to 30 points.
# Latency <= 100ms adds 20 points, <= 500ms adds 10 points, slower adds nothing.
QUALITY_BASE_SCORE: Decimal = Decimal("50")
QUALITY_LIQUIDITY_UNIT: Decimal = Decimal("10000000")
QUALITY_LIQUIDITY_CAP: Decimal = Decimal("30")
QUALITY_FAST_LATENCY_MS: Decimal = Decimal("100")
QUALITY_FAST_LATENCY_POINTS: Decimal = Decimal("20")
QUALITY_SLOW_LATENCY_MS: Decimal = Decimal("500")
QUALITY_SLOW_LATENCY_POINTS: Decimal = Decimal("10")
QUALITY_MAX_SCORE: Decimal = Decimal("100")

# =============================================================================
# Venue Selection Weights
# =============================================================================

# Used by:
# - analysis/selection.py: DefaultSelectionStrategy
#
# score = 0.5 * quality + min(liquidity / 1,000,000, 30) + directional bonus (10)
SELECTION_QUALITY_WEIGHT: Decimal = Decimal("0.5")
SELECTION_LIQUIDITY_UNIT: Decimal = Decimal("1000000")
SELECTION_LIQUIDITY_CAP: Decimal = Decimal("30")
SELECTION_DIRECTIONAL_BONUS: Decimal = Decimal("10")

# =============================================================================
# Arbitrage
# =============================================================================

# Accepted profit-rate band for a cross-venue opportunity.
#
# Below the minimum the gap does not cover costs; above the maximum the gap is more
# likely to be stale or corrupted data than a real opportunity.
DEFAULT_MIN_PROFIT_THRESHOLD: Decimal = Decimal("0.01")
DEFAULT_MAX_SPREAD_THRESHOLD: Decimal = Decimal("0.10")

# Fixed notional proposed for every arbitrage trade (not sized to book depth).
DEFAULT_ARBITRAGE_TRADE_AMOUNT: Decimal = Decimal("100000")

# Arbitrage scan period.
DEFAULT_ARBITRAGE_SCAN_INTERVAL_SECONDS: float = 30.0

# =============================================================================
# Price Stabilization
# =============================================================================

DEFAULT_TARGET_PRICE: Decimal = Decimal("150.00")

# Relative deviation from the target tolerated before stabilization kicks in.
DEFAULT_PRICE_TOLERANCE: Decimal = Decimal("0.05")

# Ceiling for the total amount of a single stabilization decision.
DEFAULT_MAX_SINGLE_OPERATION: Decimal = Decimal("1000000")

# Sell amount = 200,000 * (deviation * 10); buy amount = 300,000 * (|deviation| * 8).
DEFAULT_SELL_BASE_AMOUNT: Decimal = Decimal("200000")
DEFAULT_SELL_DEVIATION_MULTIPLIER: Decimal = Decimal("10")
DEFAULT_BUY_BASE_AMOUNT: Decimal = Decimal("300000")
DEFAULT_BUY_DEVIATION_MULTIPLIER: Decimal = Decimal("8")

# Amount proposed when fewer than DEFAULT_MIN_ACTIVE_VENUES venues quote a price.
DEFAULT_PROVIDE_LIQUIDITY_AMOUNT: Decimal = Decimal("500000")
DEFAULT_MIN_ACTIVE_VENUES: int = 2

# Staged programs: sells are split into 10 chunks 30s apart, buys into 8 chunks 45s apart.
DEFAULT_SELL_CHUNKS: int = 10
DEFAULT_BUY_CHUNKS: int = 8
DEFAULT_SELL_CHUNK_DELAY_SECONDS: float = 30.0
DEFAULT_BUY_CHUNK_DELAY_SECONDS: float = 45.0

# Longest single sleep while pacing; the trading switch is re-read between slices.
DEFAULT_PACING_POLL_SECONDS: float = 1.0

# Liquidity control cycle period.
DEFAULT_CYCLE_INTERVAL_SECONDS: float = 60.0

# =============================================================================
# Risk
# =============================================================================

# Volatility escalation thresholds (inclusive).
DEFAULT_HIGH_VOLATILITY_THRESHOLD: Decimal = Decimal("0.20")
DEFAULT_CRITICAL_VOLATILITY_THRESHOLD: Decimal = Decimal("0.50")

DEFAULT_LIQUIDITY_CHECK_INTERVAL_SECONDS: float = 300.0

# Divisor applied to the liquidity check interval while monitoring is enhanced.
DEFAULT_ENHANCED_MONITORING_FACTOR: float = 2.0

# Static liquidity estimates used until balance/demand telemetry is wired in.
DEFAULT_AVAILABLE_LIQUIDITY_ESTIMATE: Decimal = Decimal("5000000")
DEFAULT_REQUIRED_LIQUIDITY_ESTIMATE: Decimal = Decimal("2000000")

# Placeholder components of an emergency RiskAssessment.
DEFAULT_MARKET_RISK: Decimal = Decimal("0.3")
DEFAULT_LIQUIDITY_RISK: Decimal = Decimal("0.2")

# =============================================================================
# Fixed-point Precision
# =============================================================================

# Ratios (profit rate, volatility, deviation) are kept to 4 places; prices and
# chunk sizes to 2 places. Both round half-up.
RATIO_QUANTUM: Decimal = Decimal("0.0001")
PRICE_QUANTUM: Decimal = Decimal("0.01")
