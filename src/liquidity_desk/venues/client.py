"""Protocol definition for venue clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime
    from decimal import Decimal

    from liquidity_desk.venues.models import (
        Balance,
        ComplianceStatus,
        OrderBook,
        OrderResult,
        OrderSide,
        OrderStatus,
        Trade,
        TradingLimits,
        VenueId,
    )


class VenueClient(Protocol):
    """Uniform capability set implemented once per trading venue.

    Implementations must be safe to call concurrently. Ordinary "price unavailable" conditions
    are reported through return values (`None`, a failed `OrderResult`); exceptions are reserved
    for programmer errors and transport faults.
    """

    @property
    def venue_id(self) -> VenueId:
        """Identifier of the venue this client talks to."""
        ...

    async def is_available(self) -> bool:
        """Return True if the venue is reachable and accepting requests."""
        ...

    async def get_current_price(self, symbol: str, quote_currency: str) -> Decimal | None:
        """Return the last traded price, or None when no price is available."""
        ...

    async def place_market_order(
        self, symbol: str, amount: Decimal, side: OrderSide
    ) -> OrderResult:
        """Submit a market order."""
        ...

    async def place_limit_order(
        self, symbol: str, amount: Decimal, price: Decimal, side: OrderSide
    ) -> OrderResult:
        """Submit a limit order."""
        ...

    async def get_balance(self, symbol: str) -> Balance | None:
        """Return the balance for a currency, or None if the venue holds none."""
        ...

    async def get_trade_history(self, symbol: str, since: datetime) -> list[Trade]:
        """Return trades for `symbol` executed after `since`, newest first."""
        ...

    async def get_order_book(self, symbol: str, depth: int) -> OrderBook:
        """Return up to `depth` levels per side."""
        ...

    async def get_trading_limits(self) -> TradingLimits:
        """Return the account's trading limits."""
        ...

    async def get_compliance_status(self) -> ComplianceStatus:
        """Return the account's compliance status."""
        ...

    async def cancel_order(self, order_id: str) -> bool:
        """Cancel an order. Returns True if the venue accepted the cancellation."""
        ...

    async def get_order_status(self, order_id: str) -> OrderStatus:
        """Return the current status of an order."""
        ...
