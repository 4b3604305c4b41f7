"""In-memory simulated venue used by the CLI demo and integration-style tests."""

from __future__ import annotations

import asyncio
import itertools
import random
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog

from liquidity_desk.constants import DEFAULT_QUOTE_CURRENCY, PRICE_QUANTUM
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
    from datetime import datetime

logger = structlog.get_logger()

FEE_RATE = Decimal("0.001")
BOOK_TICK = Decimal("0.5")
PRICE_FLOOR = Decimal("100")
PRICE_CEILING = Decimal("200")


def _split_symbol(symbol: str) -> tuple[str, str]:
    base, _, quote = symbol.partition("/")
    return base, quote or DEFAULT_QUOTE_CURRENCY


class MockVenueClient:
    """
    Simulated venue with a random-walk price, balances, an order book and trade history.

    Market orders fill immediately at the current price. Limit orders fill immediately when
    marketable and otherwise rest as PENDING. Every fill pays a 0.1% fee in the quote currency.
    Setting `price_jitter` to zero freezes the price, which keeps tests deterministic.
    """

    def __init__(
        self,
        venue_id: VenueId = VenueId.MOCK,
        *,
        base_price: Decimal = Decimal("148.50"),
        price_jitter: Decimal = Decimal("0.02"),
        base_currency: str = "SFRT",
        quote_currency: str = DEFAULT_QUOTE_CURRENCY,
        base_balance: Decimal = Decimal("1000000"),
        quote_balance: Decimal = Decimal("50000000"),
        latency_seconds: float = 0.0,
        available: bool = True,
        seed: int | None = None,
    ) -> None:
        self._venue_id = venue_id
        self._price = base_price
        self._price_jitter = price_jitter
        self._base_currency = base_currency
        self._quote_currency = quote_currency
        self._latency_seconds = latency_seconds
        self._available = available
        self._rng = random.Random(seed)
        self._order_ids = itertools.count(1000)
        self._trade_ids = itertools.count(5000)
        self._balances: dict[str, Decimal] = {
            base_currency: base_balance,
            quote_currency: quote_balance,
        }
        self._orders: dict[str, OrderStatus] = {}
        self._trades: list[Trade] = []

    @property
    def venue_id(self) -> VenueId:
        return self._venue_id

    @property
    def trades(self) -> list[Trade]:
        """Every simulated fill, oldest first."""
        return list(self._trades)

    def set_available(self, available: bool) -> None:
        self._available = available

    def set_price(self, price: Decimal) -> None:
        self._price = price

    async def _simulate_latency(self) -> None:
        if self._latency_seconds > 0:
            await asyncio.sleep(self._latency_seconds)

    def _next_price(self) -> Decimal:
        if self._price_jitter:
            variation = Decimal(str(self._rng.random() - 0.5)) * 2 * self._price_jitter
            moved = self._price + self._price * variation
            self._price = min(max(moved, PRICE_FLOOR), PRICE_CEILING)
        return self._price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)

    def _trades_symbol(self, symbol: str) -> bool:
        base, quote = _split_symbol(symbol)
        return base == self._base_currency and quote == self._quote_currency

    async def is_available(self) -> bool:
        await self._simulate_latency()
        return self._available

    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal | None:
        await self._simulate_latency()
        if not self._available or not self._trades_symbol(symbol):
            return None
        if quote_currency != self._quote_currency:
            return None
        return self._next_price()

    async def place_market_order(
        self, symbol: str, amount: Decimal, side: OrderSide
    ) -> OrderResult:
        await self._simulate_latency()
        logger.debug("mock_market_order", venue=self._venue_id.value, amount=str(amount), side=side)
        rejection = self._reject_reason(symbol, amount)
        if rejection:
            return OrderResult.failure(rejection, self._venue_id)

        price = self._next_price()
        if not self._has_funds(amount, price, side):
            return OrderResult.failure("Insufficient balance", self._venue_id)

        order_id = self._new_order_id()
        self._settle(order_id, symbol, amount, price, side)
        return OrderResult.filled(
            order_id=order_id,
            symbol=symbol,
            side=side,
            amount=amount,
            price=price,
            venue=self._venue_id,
        )

    async def place_limit_order(
        self, symbol: str, amount: Decimal, price: Decimal, side: OrderSide
    ) -> OrderResult:
        await self._simulate_latency()
        logger.debug(
            "mock_limit_order",
            venue=self._venue_id.value,
            amount=str(amount),
            price=str(price),
            side=side,
        )
        rejection = self._reject_reason(symbol, amount)
        if rejection:
            return OrderResult.failure(rejection, self._venue_id)
        if price <= 0:
            return OrderResult.failure("Limit price must be positive", self._venue_id)
        if not self._has_funds(amount, price, side):
            return OrderResult.failure("Insufficient balance", self._venue_id)

        order_id = self._new_order_id()
        current = self._next_price()
        marketable = price >= current if side == OrderSide.BUY else price <= current
        if not marketable:
            self._orders[order_id] = OrderStatus.PENDING
            return OrderResult.accepted(
                order_id=order_id,
                symbol=symbol,
                side=side,
                amount=amount,
                price=price,
                venue=self._venue_id,
            )

        self._settle(order_id, symbol, amount, price, side)
        return OrderResult.filled(
            order_id=order_id,
            symbol=symbol,
            side=side,
            amount=amount,
            price=price,
            venue=self._venue_id,
        )

    async def get_balance(self, symbol: str) -> Balance | None:
        await self._simulate_latency()
        available = self._balances.get(symbol)
        if available is None:
            return None
        return Balance(symbol=symbol, available=available, venue=self._venue_id)

    async def get_trade_history(self, symbol: str, since: datetime) -> list[Trade]:
        await self._simulate_latency()
        matching = [t for t in self._trades if t.symbol == symbol and t.timestamp > since]
        return sorted(matching, key=lambda t: t.timestamp, reverse=True)

    async def get_order_book(self, symbol: str, depth: int) -> OrderBook:
        await self._simulate_latency()
        if not self._trades_symbol(symbol):
            return OrderBook(symbol=symbol, venue=self._venue_id)

        price = self._next_price()
        bids = [
            OrderBookLevel(price=price - BOOK_TICK * i, size=self._level_size())
            for i in range(depth)
        ]
        asks = [
            OrderBookLevel(price=price + BOOK_TICK * i, size=self._level_size())
            for i in range(1, depth + 1)
        ]
        return OrderBook(symbol=symbol, bids=bids, asks=asks, venue=self._venue_id)

    async def get_trading_limits(self) -> TradingLimits:
        await self._simulate_latency()
        return TradingLimits(venue=self._venue_id)

    async def get_compliance_status(self) -> ComplianceStatus:
        await self._simulate_latency()
        return ComplianceStatus.standard(self._venue_id)

    async def cancel_order(self, order_id: str) -> bool:
        await self._simulate_latency()
        status = self._orders.get(order_id)
        if status is None or status.is_terminal:
            return False
        self._orders[order_id] = OrderStatus.CANCELLED
        logger.info("mock_order_cancelled", venue=self._venue_id.value, order_id=order_id)
        return True

    async def get_order_status(self, order_id: str) -> OrderStatus:
        await self._simulate_latency()
        return self._orders.get(order_id, OrderStatus.FAILED)

    def _reject_reason(self, symbol: str, amount: Decimal) -> str | None:
        if not self._available:
            return "Venue unavailable"
        if not self._trades_symbol(symbol):
            return f"Unsupported symbol: {symbol}"
        if amount <= 0:
            return "Order amount must be positive"
        return None

    def _has_funds(self, amount: Decimal, price: Decimal, side: OrderSide) -> bool:
        if side == OrderSide.SELL:
            return self._balances[self._base_currency] >= amount
        return self._balances[self._quote_currency] >= amount * price

    def _new_order_id(self) -> str:
        return f"{self._venue_id.api_prefix.upper()}_{next(self._order_ids)}"

    def _level_size(self) -> Decimal:
        return Decimal(1000 + self._rng.randrange(5000))

    def _settle(
        self, order_id: str, symbol: str, amount: Decimal, price: Decimal, side: OrderSide
    ) -> None:
        notional = amount * price
        if side == OrderSide.SELL:
            self._balances[self._base_currency] -= amount
            self._balances[self._quote_currency] += notional
        else:
            self._balances[self._quote_currency] -= notional
            self._balances[self._base_currency] += amount

        self._orders[order_id] = OrderStatus.FILLED
        self._trades.append(
            Trade(
                trade_id=f"TRADE_{next(self._trade_ids)}",
                order_id=order_id,
                symbol=symbol,
                side=side,
                amount=amount,
                price=price,
                fee=notional * FEE_RATE,
                fee_currency=self._quote_currency,
                venue=self._venue_id,
            )
        )
