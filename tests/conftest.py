"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible. Only fake at system boundaries.
- Real Pydantic models everywhere
- FakeVenueClient stands in for a venue (the external boundary)
- respx ONLY for HTTP boundary
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from liquidity_desk.venues.models import (
    Balance,
    ComplianceStatus,
    OrderBook,
    OrderBookLevel,
    OrderResult,
    OrderSide,
    OrderStatus,
    Trade,
    TradingLimits,
    VenueId,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime


class FakeVenueClient:
    """Scriptable venue client that records every order it receives."""

    def __init__(
        self,
        venue_id: VenueId,
        *,
        price: Decimal | None = Decimal("150"),
        available: bool = True,
        trading_enabled: bool = True,
        book: OrderBook | None = None,
        trades: Iterable[Trade] = (),
        delay: float = 0.0,
        error: Exception | None = None,
        order_outcomes: Iterable[bool] = (),
        on_order: Callable[[], None] | None = None,
    ) -> None:
        self._venue_id = venue_id
        self.price = price
        self.available = available
        self.trading_enabled = trading_enabled
        self.book = book or OrderBook(
            symbol="SFRT/JPY",
            bids=[OrderBookLevel(price=Decimal("149"), size=Decimal("1000"))],
            asks=[OrderBookLevel(price=Decimal("151"), size=Decimal("1000"))],
        )
        self.trades = list(trades)
        self.delay = delay
        self.error = error
        self._outcomes = iter(order_outcomes)
        self.on_order = on_order
        self.orders: list[tuple[str, Decimal, OrderSide, Decimal | None]] = []

    @property
    def venue_id(self) -> VenueId:
        return self._venue_id

    async def _maybe_fail(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def is_available(self) -> bool:
        await self._maybe_fail()
        return self.available

    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal | None:
        await self._maybe_fail()
        return self.price

    def _order(
        self, symbol: str, amount: Decimal, side: OrderSide, price: Decimal | None
    ) -> OrderResult:
        self.orders.append((symbol, amount, side, price))
        if self.on_order is not None:
            self.on_order()
        if not next(self._outcomes, True):
            return OrderResult.failure("Rejected by venue", self._venue_id)
        return OrderResult.filled(
            order_id=f"{self._venue_id.value}-{len(self.orders)}",
            symbol=symbol,
            side=side,
            amount=amount,
            price=price or self.price or Decimal("1"),
            venue=self._venue_id,
        )

    async def place_market_order(
        self, symbol: str, amount: Decimal, side: OrderSide
    ) -> OrderResult:
        await self._maybe_fail()
        return self._order(symbol, amount, side, None)

    async def place_limit_order(
        self, symbol: str, amount: Decimal, price: Decimal, side: OrderSide
    ) -> OrderResult:
        await self._maybe_fail()
        return self._order(symbol, amount, side, price)

    async def get_balance(self, symbol: str) -> Balance | None:
        return Balance(symbol=symbol, available=Decimal("1000000"), venue=self._venue_id)

    async def get_trade_history(self, symbol: str, since: datetime) -> list[Trade]:
        return list(self.trades)

    async def get_order_book(self, symbol: str, depth: int) -> OrderBook:
        return self.book

    async def get_trading_limits(self) -> TradingLimits:
        return TradingLimits(venue=self._venue_id)

    async def get_compliance_status(self) -> ComplianceStatus:
        return ComplianceStatus(trading_enabled=self.trading_enabled, venue=self._venue_id)

    async def cancel_order(self, order_id: str) -> bool:
        return True

    async def get_order_status(self, order_id: str) -> OrderStatus:
        return OrderStatus.FILLED


@pytest.fixture
def make_venue() -> Callable[..., FakeVenueClient]:
    """Factory for FakeVenueClient instances."""

    def _make(venue_id: VenueId = VenueId.BITBANK, **kwargs: object) -> FakeVenueClient:
        return FakeVenueClient(venue_id, **kwargs)  # type: ignore[arg-type]

    return _make


class RecordingSleep:
    """Drop-in for asyncio.sleep that returns immediately and records the requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)
        await asyncio.sleep(0)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()
