"""Per-venue health records and the concurrent aggregator that builds them."""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from liquidity_desk.constants import (
    DEFAULT_ORDER_BOOK_DEPTH,
    DEFAULT_QUOTE_CURRENCY,
    DEFAULT_SYMBOL,
    DEFAULT_VENUE_TIMEOUT_SECONDS,
    QUALITY_BASE_SCORE,
    QUALITY_FAST_LATENCY_MS,
    QUALITY_FAST_LATENCY_POINTS,
    QUALITY_LIQUIDITY_CAP,
    QUALITY_LIQUIDITY_UNIT,
    QUALITY_MAX_SCORE,
    QUALITY_SLOW_LATENCY_MS,
    QUALITY_SLOW_LATENCY_POINTS,
)
from liquidity_desk.venues.models import ComplianceStatus, TradingLimits, VenueId

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from liquidity_desk.execution.models import LiquidityOperation
    from liquidity_desk.venues.client import VenueClient
    from liquidity_desk.venues.models import Trade

logger = structlog.get_logger()

_TRADE_HISTORY_WINDOW = timedelta(hours=24)


class VenueMetrics(BaseModel):
    """Health and quality snapshot of one venue, rebuilt on every aggregation pass."""

    model_config = ConfigDict(frozen=True)

    venue: VenueId
    available: bool
    price: Decimal | None = None
    liquidity: Decimal = Decimal("0")
    """Bid plus ask notional of the sampled order book."""
    spread: Decimal | None = None
    volume_24h: Decimal = Decimal("0")
    trading_limits: TradingLimits | None = None
    compliance_status: ComplianceStatus | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    response_time_ms: int = 0
    fee_rate: Decimal | None = None

    @classmethod
    def unavailable(cls, venue: VenueId, *, response_time_ms: int = 0) -> VenueMetrics:
        return cls(venue=venue, available=False, response_time_ms=response_time_ms)

    @property
    def trading_enabled(self) -> bool:
        return self.compliance_status is not None and self.compliance_status.trading_enabled

    @property
    def quality_score(self) -> Decimal:
        """
        Heuristic score in [0, 100].

        Unavailable venues score 0. Otherwise 50 base points, one point per 10M of book
        liquidity (at most 30), and 20/10/0 points for latency <= 100ms / <= 500ms / slower.
        """
        if not self.available:
            return Decimal("0")

        liquidity_points = min(self.liquidity / QUALITY_LIQUIDITY_UNIT, QUALITY_LIQUIDITY_CAP)
        score = QUALITY_BASE_SCORE + liquidity_points
        latency = Decimal(self.response_time_ms)
        if latency <= QUALITY_FAST_LATENCY_MS:
            score += QUALITY_FAST_LATENCY_POINTS
        elif latency <= QUALITY_SLOW_LATENCY_MS:
            score += QUALITY_SLOW_LATENCY_POINTS
        return min(score, QUALITY_MAX_SCORE)


def _fee_rate(trades: Sequence[Trade]) -> Decimal | None:
    rates = [t.fee / t.notional for t in trades if t.notional > 0]
    if not rates:
        return None
    return sum(rates, Decimal("0")) / len(rates)


class MetricsAggregator:
    """
    Query every registered venue concurrently and normalize the answers.

    A venue that reports itself unavailable, raises, or exceeds the per-venue timeout is
    recorded as unavailable (quality 0). Every registered venue appears in the result.
    """

    def __init__(
        self,
        clients: Mapping[VenueId, VenueClient],
        *,
        symbol: str = DEFAULT_SYMBOL,
        quote_currency: str = DEFAULT_QUOTE_CURRENCY,
        order_book_depth: int = DEFAULT_ORDER_BOOK_DEPTH,
        venue_timeout: float = DEFAULT_VENUE_TIMEOUT_SECONDS,
    ) -> None:
        self._clients = clients
        self._symbol = symbol
        self._quote_currency = quote_currency
        self._order_book_depth = order_book_depth
        self._venue_timeout = venue_timeout

    async def aggregate(
        self, operation: LiquidityOperation | None = None
    ) -> dict[VenueId, VenueMetrics]:
        """Return metrics for every registered venue, keyed in registration order."""
        if not self._clients:
            logger.warning("metrics_aggregation_no_venues")
            return {}

        symbol = operation.symbol if operation is not None else self._symbol
        venues = list(self._clients)
        results = await asyncio.gather(
            *(self._probe(venue, self._clients[venue], symbol) for venue in venues)
        )
        metrics = dict(zip(venues, results, strict=True))

        logger.debug(
            "metrics_aggregated",
            symbol=symbol,
            venues=len(metrics),
            available=sum(1 for m in metrics.values() if m.available),
        )
        return metrics

    async def _probe(self, venue: VenueId, client: VenueClient, symbol: str) -> VenueMetrics:
        started = time.perf_counter()
        try:
            return await asyncio.wait_for(
                self._collect(venue, client, symbol, started), timeout=self._venue_timeout
            )
        except TimeoutError:
            logger.warning("venue_metrics_timeout", venue=venue.value, timeout=self._venue_timeout)
        except Exception as e:
            logger.warning("venue_metrics_failed", venue=venue.value, error=str(e))
        return VenueMetrics.unavailable(venue, response_time_ms=_elapsed_ms(started))

    async def _collect(
        self, venue: VenueId, client: VenueClient, symbol: str, started: float
    ) -> VenueMetrics:
        if not await client.is_available():
            return VenueMetrics.unavailable(venue, response_time_ms=_elapsed_ms(started))

        since = datetime.now(UTC) - _TRADE_HISTORY_WINDOW
        price, book, limits, compliance, trades = await asyncio.gather(
            client.get_current_price(symbol, self._quote_currency),
            client.get_order_book(symbol, self._order_book_depth),
            client.get_trading_limits(),
            client.get_compliance_status(),
            client.get_trade_history(symbol, since),
        )

        return VenueMetrics(
            venue=venue,
            available=True,
            price=price,
            liquidity=book.total_notional,
            spread=book.spread,
            volume_24h=sum((t.amount for t in trades), Decimal("0")),
            trading_limits=limits,
            compliance_status=compliance,
            response_time_ms=_elapsed_ms(started),
            fee_rate=_fee_rate(trades),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
