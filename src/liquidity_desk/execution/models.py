"""Pydantic models for liquidity operations and their outcomes."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from liquidity_desk.analysis.arbitrage import ArbitrageOpportunity
from liquidity_desk.venues.models import OrderResult, OrderSide, VenueId

MIN_PRIORITY = 1
MAX_PRIORITY = 10
DEFAULT_PRIORITY = 5


class OperationType(str, Enum):
    """Kind of order a liquidity operation places."""

    MARKET_BUY = "market_buy"
    MARKET_SELL = "market_sell"
    LIMIT_BUY = "limit_buy"
    LIMIT_SELL = "limit_sell"

    @property
    def side(self) -> OrderSide:
        if self in (OperationType.MARKET_BUY, OperationType.LIMIT_BUY):
            return OrderSide.BUY
        return OrderSide.SELL

    @property
    def is_limit(self) -> bool:
        return self in (OperationType.LIMIT_BUY, OperationType.LIMIT_SELL)


class LiquidityOperation(BaseModel):
    """A requested order, immutable once built. Priority is clamped to [1, 10]."""

    model_config = ConfigDict(frozen=True)

    operation_type: OperationType
    symbol: str
    amount: Decimal = Field(gt=0)
    price: Decimal | None = Field(default=None, gt=0)
    reason: str = ""
    priority: int = DEFAULT_PRIORITY

    @field_validator("priority")
    @classmethod
    def clamp_priority(cls, value: int) -> int:
        return max(MIN_PRIORITY, min(MAX_PRIORITY, value))

    @model_validator(mode="after")
    def validate_limit_price(self) -> LiquidityOperation:
        if self.operation_type.is_limit and self.price is None:
            raise ValueError("limit operations require a price")
        return self

    @classmethod
    def market_buy(
        cls, symbol: str, amount: Decimal, reason: str = "", priority: int = DEFAULT_PRIORITY
    ) -> LiquidityOperation:
        return cls(
            operation_type=OperationType.MARKET_BUY,
            symbol=symbol,
            amount=amount,
            reason=reason,
            priority=priority,
        )

    @classmethod
    def market_sell(
        cls, symbol: str, amount: Decimal, reason: str = "", priority: int = DEFAULT_PRIORITY
    ) -> LiquidityOperation:
        return cls(
            operation_type=OperationType.MARKET_SELL,
            symbol=symbol,
            amount=amount,
            reason=reason,
            priority=priority,
        )

    @classmethod
    def limit_buy(
        cls,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        reason: str = "",
        priority: int = DEFAULT_PRIORITY,
    ) -> LiquidityOperation:
        return cls(
            operation_type=OperationType.LIMIT_BUY,
            symbol=symbol,
            amount=amount,
            price=price,
            reason=reason,
            priority=priority,
        )

    @classmethod
    def limit_sell(
        cls,
        symbol: str,
        amount: Decimal,
        price: Decimal,
        reason: str = "",
        priority: int = DEFAULT_PRIORITY,
    ) -> LiquidityOperation:
        return cls(
            operation_type=OperationType.LIMIT_SELL,
            symbol=symbol,
            amount=amount,
            price=price,
            reason=reason,
            priority=priority,
        )

    @property
    def side(self) -> OrderSide:
        return self.operation_type.side

    @property
    def is_buy(self) -> bool:
        return self.side == OrderSide.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == OrderSide.SELL

    @property
    def is_market(self) -> bool:
        return not self.operation_type.is_limit

    @property
    def is_limit(self) -> bool:
        return self.operation_type.is_limit

    def estimated_value(self, market_price: Decimal) -> Decimal:
        """Notional of the operation at its limit price, or at `market_price` for market orders."""
        return self.amount * (self.price if self.price is not None else market_price)


class LiquidityResult(BaseModel):
    """Outcome of one operation attempt (one staged-program chunk, one arbitrage leg)."""

    model_config = ConfigDict(frozen=True)

    operation: LiquidityOperation
    success: bool
    order_result: OrderResult | None = None
    error_message: str | None = None
    executed_venue: VenueId | None = None
    execution_time_ms: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_order(
        cls,
        operation: LiquidityOperation,
        order_result: OrderResult,
        *,
        venue: VenueId,
        execution_time_ms: int = 0,
    ) -> LiquidityResult:
        return cls(
            operation=operation,
            success=order_result.success,
            order_result=order_result,
            error_message=order_result.error_message,
            executed_venue=venue,
            execution_time_ms=execution_time_ms,
        )

    @classmethod
    def failure(
        cls,
        operation: LiquidityOperation,
        error_message: str,
        *,
        venue: VenueId | None = None,
        execution_time_ms: int = 0,
    ) -> LiquidityResult:
        return cls(
            operation=operation,
            success=False,
            error_message=error_message,
            executed_venue=venue,
            execution_time_ms=execution_time_ms,
        )

    @property
    def is_executed(self) -> bool:
        return self.success and self.order_result is not None and self.order_result.is_executed

    @property
    def is_fully_executed(self) -> bool:
        return (
            self.success
            and self.order_result is not None
            and self.order_result.is_fully_executed
        )

    @property
    def is_partially_executed(self) -> bool:
        return (
            self.success
            and self.order_result is not None
            and self.order_result.is_partially_executed
        )


class ArbitrageExecution(BaseModel):
    """The two legs of one executed arbitrage. `sell` is None when the buy leg failed."""

    model_config = ConfigDict(frozen=True)

    opportunity: ArbitrageOpportunity
    buy: LiquidityResult
    sell: LiquidityResult | None = None

    @property
    def completed(self) -> bool:
        return self.buy.success and self.sell is not None and self.sell.success

    @property
    def unresolved_imbalance(self) -> bool:
        """Bought on one venue but could not sell on the other."""
        return self.buy.success and self.sell is not None and not self.sell.success
