"""Cross-venue price divergence detection."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from liquidity_desk.constants import (
    DEFAULT_ARBITRAGE_TRADE_AMOUNT,
    DEFAULT_MAX_SPREAD_THRESHOLD,
    DEFAULT_MIN_PROFIT_THRESHOLD,
    DEFAULT_SYMBOL,
    RATIO_QUANTUM,
)
from liquidity_desk.venues.models import VenueId

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger()


class ArbitrageOpportunity(BaseModel):
    """A threshold-qualified buy/sell gap between two venues."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    buy_venue: VenueId
    sell_venue: VenueId
    buy_price: Decimal = Field(gt=0)
    sell_price: Decimal = Field(gt=0)
    amount: Decimal = Field(gt=0)
    profit_rate: Decimal

    @property
    def expected_profit(self) -> Decimal:
        return (self.sell_price - self.buy_price) * self.amount

    @property
    def is_profitable(self) -> bool:
        return self.profit_rate > 0


def profit_rate(buy_price: Decimal, sell_price: Decimal) -> Decimal:
    """(sell - buy) / buy, kept to four decimal places."""
    return ((sell_price - buy_price) / buy_price).quantize(RATIO_QUANTUM, rounding=ROUND_HALF_UP)


class ArbitrageAnalyzer:
    """Find the cheapest and richest venue and accept the gap if it falls inside the band.

    The upper bound rejects gaps large enough to be stale or corrupted quotes.
    """

    def __init__(
        self,
        *,
        symbol: str = DEFAULT_SYMBOL,
        min_profit_threshold: Decimal = DEFAULT_MIN_PROFIT_THRESHOLD,
        max_spread_threshold: Decimal = DEFAULT_MAX_SPREAD_THRESHOLD,
        trade_amount: Decimal = DEFAULT_ARBITRAGE_TRADE_AMOUNT,
    ) -> None:
        if min_profit_threshold > max_spread_threshold:
            raise ValueError("min_profit_threshold must not exceed max_spread_threshold")
        self.symbol = symbol
        self.min_profit_threshold = min_profit_threshold
        self.max_spread_threshold = max_spread_threshold
        self.trade_amount = trade_amount

    def analyze(self, prices: Mapping[VenueId, Decimal]) -> ArbitrageOpportunity | None:
        if len(prices) < 2:
            return None

        low_venue = high_venue = None
        low_price = high_price = Decimal("0")
        for venue, price in prices.items():
            if price <= 0:
                continue
            if low_venue is None or price < low_price:
                low_venue, low_price = venue, price
            if high_venue is None or price > high_price:
                high_venue, high_price = venue, price

        if low_venue is None or high_venue is None or low_venue == high_venue:
            return None

        rate = profit_rate(low_price, high_price)
        if not self.min_profit_threshold <= rate <= self.max_spread_threshold:
            logger.debug(
                "arbitrage_rejected",
                buy_venue=low_venue.value,
                sell_venue=high_venue.value,
                profit_rate=str(rate),
            )
            return None

        opportunity = ArbitrageOpportunity(
            symbol=self.symbol,
            buy_venue=low_venue,
            sell_venue=high_venue,
            buy_price=low_price,
            sell_price=high_price,
            amount=self.trade_amount,
            profit_rate=rate,
        )
        logger.info(
            "arbitrage_opportunity_found",
            buy_venue=low_venue.value,
            sell_venue=high_venue.value,
            profit_rate=str(rate),
        )
        return opportunity
