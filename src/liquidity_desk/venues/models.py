"""Normalized venue data models.

Every venue adapter converts its wire format into these immutable records, so nothing
above the venue boundary ever branches on venue identity.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utc_now() -> datetime:
    return datetime.now(UTC)


class VenueRegion(str, Enum):
    """Region tag of a venue (display/audit only)."""

    DOMESTIC = "domestic"
    GLOBAL = "global"
    DECENTRALIZED = "decentralized"
    TEST = "test"


class VenueId(str, Enum):
    """Identifier of a trading venue."""

    BITBANK = "bitbank"
    COINCHECK = "coincheck"
    BITFLYER = "bitflyer"
    GMO_COIN = "gmocoin"
    BINANCE = "binance"
    BYBIT = "bybit"
    OKX = "okx"
    HUOBI = "huobi"
    UNISWAP = "uniswap"
    SUSHISWAP = "sushiswap"
    MOCK = "mock"

    @property
    def display_name(self) -> str:
        """Human-readable venue name."""
        return _VENUE_CATALOG[self][0]

    @property
    def region(self) -> VenueRegion:
        """Region tag used for display and audit."""
        return _VENUE_CATALOG[self][1]

    @property
    def api_prefix(self) -> str:
        """Short prefix used by adapters (config keys, order id namespaces)."""
        return self.value


_VENUE_CATALOG: dict[VenueId, tuple[str, VenueRegion]] = {
    VenueId.BITBANK: ("Bitbank", VenueRegion.DOMESTIC),
    VenueId.COINCHECK: ("Coincheck", VenueRegion.DOMESTIC),
    VenueId.BITFLYER: ("bitFlyer", VenueRegion.DOMESTIC),
    VenueId.GMO_COIN: ("GMO Coin", VenueRegion.DOMESTIC),
    VenueId.BINANCE: ("Binance", VenueRegion.GLOBAL),
    VenueId.BYBIT: ("Bybit", VenueRegion.GLOBAL),
    VenueId.OKX: ("OKX", VenueRegion.GLOBAL),
    VenueId.HUOBI: ("Huobi", VenueRegion.GLOBAL),
    VenueId.UNISWAP: ("Uniswap", VenueRegion.DECENTRALIZED),
    VenueId.SUSHISWAP: ("SushiSwap", VenueRegion.DECENTRALIZED),
    VenueId.MOCK: ("Mock Venue", VenueRegion.TEST),
}


class OrderSide(str, Enum):
    """Side of an order."""

    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Lifecycle status of an order on a venue."""

    PENDING = "pending"
    SUBMITTED = "submitted"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        """True once the order can no longer change state."""
        return self in _TERMINAL_STATUSES

    @property
    def is_success(self) -> bool:
        return self in (OrderStatus.FILLED, OrderStatus.PARTIALLY_FILLED)

    @property
    def is_failure(self) -> bool:
        return self in (OrderStatus.REJECTED, OrderStatus.FAILED)

    @property
    def is_active(self) -> bool:
        return self in (OrderStatus.PENDING, OrderStatus.SUBMITTED, OrderStatus.PARTIALLY_FILLED)


_TERMINAL_STATUSES = frozenset(
    {
        OrderStatus.FILLED,
        OrderStatus.CANCELLED,
        OrderStatus.REJECTED,
        OrderStatus.FAILED,
        OrderStatus.EXPIRED,
    }
)


class OrderResult(BaseModel):
    """Outcome of submitting one order to one venue."""

    model_config = ConfigDict(frozen=True)

    success: bool
    order_id: str | None = None
    symbol: str | None = None
    side: OrderSide | None = None
    amount: Decimal | None = None
    """Requested amount."""
    price: Decimal | None = None
    """Requested price (limit price, or reference price for market orders)."""
    executed_amount: Decimal | None = None
    executed_price: Decimal | None = None
    status: OrderStatus = OrderStatus.PENDING
    error_message: str | None = None
    venue: VenueId | None = None
    timestamp: datetime = Field(default_factory=_utc_now)

    @classmethod
    def accepted(
        cls,
        *,
        order_id: str,
        symbol: str,
        side: OrderSide,
        amount: Decimal,
        price: Decimal | None,
        venue: VenueId,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> OrderResult:
        """Order accepted by the venue but not (yet) executed."""
        return cls(
            success=True,
            order_id=order_id,
            symbol=symbol,
            side=side,
            amount=amount,
            price=price,
            status=status,
            venue=venue,
        )

    @classmethod
    def filled(
        cls,
        *,
        order_id: str,
        symbol: str,
        side: OrderSide,
        amount: Decimal,
        price: Decimal,
        venue: VenueId,
        executed_amount: Decimal | None = None,
    ) -> OrderResult:
        """Order executed, fully unless a smaller `executed_amount` is given."""
        executed = amount if executed_amount is None else executed_amount
        return cls(
            success=True,
            order_id=order_id,
            symbol=symbol,
            side=side,
            amount=amount,
            price=price,
            executed_amount=executed,
            executed_price=price,
            status=OrderStatus.FILLED if executed >= amount else OrderStatus.PARTIALLY_FILLED,
            venue=venue,
        )

    @classmethod
    def failure(cls, error_message: str, venue: VenueId | None) -> OrderResult:
        return cls(
            success=False,
            status=OrderStatus.FAILED,
            error_message=error_message,
            venue=venue,
        )

    @property
    def is_executed(self) -> bool:
        return self.success and self.status.is_success

    @property
    def is_fully_executed(self) -> bool:
        return self.success and self.status == OrderStatus.FILLED

    @property
    def is_partially_executed(self) -> bool:
        return self.success and self.status == OrderStatus.PARTIALLY_FILLED


class Balance(BaseModel):
    """Balance of one currency on one venue."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    available: Decimal
    locked: Decimal = Decimal("0")
    venue: VenueId | None = None
    last_updated: datetime = Field(default_factory=_utc_now)

    @property
    def total(self) -> Decimal:
        return self.available + self.locked

    def covers(self, amount: Decimal) -> bool:
        """Return True if `amount` can be spent from the available balance."""
        return self.available >= amount


class Trade(BaseModel):
    """One executed trade from a venue's history."""

    model_config = ConfigDict(frozen=True)

    trade_id: str
    order_id: str | None = None
    symbol: str
    side: OrderSide
    amount: Decimal
    price: Decimal
    fee: Decimal = Decimal("0")
    fee_currency: str | None = None
    timestamp: datetime = Field(default_factory=_utc_now)
    venue: VenueId | None = None

    @property
    def notional(self) -> Decimal:
        return self.amount * self.price


class OrderBookLevel(BaseModel):
    """One price level of an order book."""

    model_config = ConfigDict(frozen=True)

    price: Decimal
    size: Decimal

    @property
    def notional(self) -> Decimal:
        return self.price * self.size


class OrderBook(BaseModel):
    """
    Order book snapshot.

    Bids are ordered best (highest) first, asks best (lowest) first.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    bids: list[OrderBookLevel] = Field(default_factory=list)
    asks: list[OrderBookLevel] = Field(default_factory=list)
    venue: VenueId | None = None
    timestamp: datetime = Field(default_factory=_utc_now)

    @property
    def best_bid(self) -> Decimal | None:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Decimal | None:
        return self.asks[0].price if self.asks else None

    @property
    def spread(self) -> Decimal | None:
        """Best ask minus best bid, or None when either side is empty."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    @property
    def mid_price(self) -> Decimal | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_bid + self.best_ask) / 2

    @property
    def total_notional(self) -> Decimal:
        """Bid plus ask notional across every level."""
        return sum((level.notional for level in (*self.bids, *self.asks)), Decimal("0"))


class TradingLimits(BaseModel):
    """Per-venue order size and volume caps."""

    model_config = ConfigDict(frozen=True)

    min_order_amount: Decimal = Decimal("100")
    max_order_amount: Decimal = Decimal("10000000")
    daily_trading_limit: Decimal = Decimal("50000000")
    monthly_trading_limit: Decimal = Decimal("1000000000")
    daily_withdrawal_limit: Decimal = Decimal("10000000")
    monthly_withdrawal_limit: Decimal = Decimal("300000000")
    max_active_orders: int = Field(default=100, ge=0)
    venue: VenueId | None = None

    @model_validator(mode="after")
    def validate_order_bounds(self) -> TradingLimits:
        if self.min_order_amount > self.max_order_amount:
            raise ValueError("min_order_amount must not exceed max_order_amount")
        return self

    def is_order_amount_valid(self, amount: Decimal) -> bool:
        return self.min_order_amount <= amount <= self.max_order_amount

    def is_daily_limit_exceeded(self, current_daily_volume: Decimal, amount: Decimal) -> bool:
        return current_daily_volume + amount > self.daily_trading_limit

    def is_monthly_limit_exceeded(self, current_monthly_volume: Decimal, amount: Decimal) -> bool:
        return current_monthly_volume + amount > self.monthly_trading_limit


class ComplianceLevel(str, Enum):
    """Compliance tier of the desk's account on a venue."""

    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    INSTITUTIONAL = "institutional"
    RESTRICTED = "restricted"
    SUSPENDED = "suspended"

    @property
    def is_active(self) -> bool:
        return self != ComplianceLevel.SUSPENDED

    @property
    def is_restricted(self) -> bool:
        return self in (ComplianceLevel.RESTRICTED, ComplianceLevel.SUSPENDED)


# Roughly six months between compliance reviews.
_REVIEW_PERIOD = timedelta(days=182)


class ComplianceStatus(BaseModel):
    """KYC/AML and trading permissions of the desk's account on a venue."""

    model_config = ConfigDict(frozen=True)

    kyc_verified: bool = True
    aml_cleared: bool = True
    trading_enabled: bool = True
    withdrawal_enabled: bool = True
    level: ComplianceLevel = ComplianceLevel.STANDARD
    restrictions: str | None = None
    last_verification: datetime = Field(default_factory=_utc_now)
    next_review: datetime | None = None
    venue: VenueId | None = None

    @classmethod
    def standard(
        cls, venue: VenueId | None = None, *, now: datetime | None = None
    ) -> ComplianceStatus:
        """Fully enabled account with the next review scheduled six months out."""
        verified_at = now or _utc_now()
        return cls(
            last_verification=verified_at,
            next_review=verified_at + _REVIEW_PERIOD,
            venue=venue,
        )

    @property
    def is_fully_enabled(self) -> bool:
        return (
            self.kyc_verified
            and self.aml_cleared
            and self.trading_enabled
            and self.withdrawal_enabled
        )

    @property
    def has_restrictions(self) -> bool:
        return bool(self.restrictions and self.restrictions.strip())

    def is_review_required(self, now: datetime | None = None) -> bool:
        if self.next_review is None:
            return False
        return (now or _utc_now()) > self.next_review
