"""Market snapshots, stabilization decisions and staged-program reports."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from liquidity_desk.constants import PRICE_QUANTUM, RATIO_QUANTUM
from liquidity_desk.execution.models import LiquidityResult  # noqa: TC001
from liquidity_desk.venues.models import OrderSide

if TYPE_CHECKING:
    from collections.abc import Mapping

    from liquidity_desk.venues.models import VenueId


def _utc_now() -> datetime:
    return datetime.now(UTC)


class MarketSnapshot(BaseModel):
    """Cross-venue view of one symbol's price."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    average_price: Decimal = Decimal("0")
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("0")
    volatility: Decimal = Decimal("0")
    """(max - min) / min across venues."""
    active_venues: int = 0
    timestamp: datetime = Field(default_factory=_utc_now)

    @classmethod
    def from_prices(cls, symbol: str, prices: Mapping[VenueId, Decimal]) -> MarketSnapshot:
        usable = [p for p in prices.values() if p > 0]
        if not usable:
            return cls(symbol=symbol)

        low, high = min(usable), max(usable)
        average = (sum(usable, Decimal("0")) / len(usable)).quantize(
            PRICE_QUANTUM, rounding=ROUND_HALF_UP
        )
        return cls(
            symbol=symbol,
            average_price=average,
            min_price=low,
            max_price=high,
            volatility=((high - low) / low).quantize(RATIO_QUANTUM, rounding=ROUND_HALF_UP),
            active_venues=len(usable),
        )

    @property
    def is_valid(self) -> bool:
        return self.average_price > 0 and self.active_venues > 0


class LiquidityAction(str, Enum):
    """What the controller decided to do this cycle."""

    STABILIZE_SELL = "stabilize_sell"
    STABILIZE_BUY = "stabilize_buy"
    PROVIDE_LIQUIDITY = "provide_liquidity"
    HOLD_RESERVE = "hold_reserve"

    @property
    def side(self) -> OrderSide | None:
        match self:
            case LiquidityAction.STABILIZE_SELL:
                return OrderSide.SELL
            case LiquidityAction.STABILIZE_BUY:
                return OrderSide.BUY
            case _:
                return None


class LiquidityDecision(BaseModel):
    """Outcome of one decision step."""

    model_config = ConfigDict(frozen=True)

    action: LiquidityAction
    amount: Decimal = Decimal("0")
    reason: str
    priority: int = 5
    deviation: Decimal = Decimal("0")


class ProgramHalt(str, Enum):
    """Why a staged program stopped before consuming its full amount."""

    CHUNK_FAILED = "chunk_failed"
    TRADING_PAUSED = "trading_paused"


class StagedProgramReport(BaseModel):
    """Chunk-by-chunk record of one staged program."""

    model_config = ConfigDict(frozen=True)

    side: OrderSide
    total_amount: Decimal
    chunks_planned: int
    results: list[LiquidityResult] = Field(default_factory=list)
    executed_amount: Decimal = Decimal("0")
    halted: ProgramHalt | None = None
    started_at: datetime = Field(default_factory=_utc_now)
    finished_at: datetime = Field(default_factory=_utc_now)

    @property
    def attempts(self) -> int:
        return len(self.results)

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.executed_amount

    @property
    def completed(self) -> bool:
        return self.halted is None and self.remaining_amount <= 0
