"""Dispatch a liquidity operation to a venue client and wrap the outcome."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from liquidity_desk.constants import DEFAULT_VENUE_TIMEOUT_SECONDS
from liquidity_desk.execution.models import LiquidityResult, OperationType

if TYPE_CHECKING:
    from liquidity_desk.execution.models import LiquidityOperation
    from liquidity_desk.venues.client import VenueClient
    from liquidity_desk.venues.models import OrderResult

logger = structlog.get_logger()


class ExecutionMonitor:
    """Place one operation on one venue.

    Venue exceptions and calls that outlive `timeout` become failed results. Nothing is
    retried here; staged programs decide whether to continue after a failure.
    """

    def __init__(self, timeout: float = DEFAULT_VENUE_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    async def execute(self, client: VenueClient, operation: LiquidityOperation) -> LiquidityResult:
        venue = client.venue_id
        started = time.perf_counter()
        try:
            order = await asyncio.wait_for(self._dispatch(client, operation), self._timeout)
        except TimeoutError:
            logger.warning(
                "operation_timeout",
                venue=venue.value,
                operation=operation.operation_type.value,
                amount=str(operation.amount),
                timeout=self._timeout,
            )
            return LiquidityResult.failure(
                operation,
                f"Order timed out after {self._timeout:g}s",
                venue=venue,
                execution_time_ms=_elapsed_ms(started),
            )
        except Exception as e:
            elapsed = _elapsed_ms(started)
            logger.warning(
                "operation_failed",
                venue=venue.value,
                operation=operation.operation_type.value,
                amount=str(operation.amount),
                error=str(e),
            )
            return LiquidityResult.failure(
                operation, str(e) or type(e).__name__, venue=venue, execution_time_ms=elapsed
            )

        result = LiquidityResult.from_order(
            operation, order, venue=venue, execution_time_ms=_elapsed_ms(started)
        )
        logger.info(
            "operation_executed",
            venue=venue.value,
            operation=operation.operation_type.value,
            amount=str(operation.amount),
            success=result.success,
            status=order.status.value,
            order_id=order.order_id,
            error=order.error_message,
        )
        return result

    async def _dispatch(self, client: VenueClient, operation: LiquidityOperation) -> OrderResult:
        match operation.operation_type:
            case OperationType.MARKET_BUY | OperationType.MARKET_SELL:
                return await client.place_market_order(
                    operation.symbol, operation.amount, operation.side
                )
            case OperationType.LIMIT_BUY | OperationType.LIMIT_SELL:
                if operation.price is None:
                    raise ValueError("limit operation without a price")
                return await client.place_limit_order(
                    operation.symbol, operation.amount, operation.price, operation.side
                )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
