"""Multi-venue execution: pick the best venue, place the order, scan for arbitrage."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from liquidity_desk.analysis.arbitrage import ArbitrageAnalyzer
from liquidity_desk.analysis.metrics import MetricsAggregator
from liquidity_desk.analysis.selection import DefaultSelectionStrategy
from liquidity_desk.constants import (
    DEFAULT_QUOTE_CURRENCY,
    DEFAULT_SYMBOL,
    DEFAULT_VENUE_TIMEOUT_SECONDS,
)
from liquidity_desk.execution.models import (
    ArbitrageExecution,
    LiquidityOperation,
    LiquidityResult,
)
from liquidity_desk.execution.monitor import ExecutionMonitor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from liquidity_desk.analysis.arbitrage import ArbitrageOpportunity
    from liquidity_desk.analysis.selection import SelectionStrategy
    from liquidity_desk.execution.audit import OperationAuditLogger
    from liquidity_desk.stabilization.switch import AutomaticTradingSwitch
    from liquidity_desk.venues.client import VenueClient
    from liquidity_desk.venues.models import VenueId

logger = structlog.get_logger()

NO_SUITABLE_VENUE = "No suitable venue"
ARBITRAGE_PRIORITY = 8


class MultiVenueManager:
    """
    Route liquidity operations across every registered venue.

    The manager depends only on the `SelectionStrategy` protocol, so venue ranking policy
    can be swapped without changes here. Every result it produces is written to the optional
    audit logger.
    """

    def __init__(
        self,
        clients: Mapping[VenueId, VenueClient],
        *,
        aggregator: MetricsAggregator | None = None,
        strategy: SelectionStrategy | None = None,
        monitor: ExecutionMonitor | None = None,
        analyzer: ArbitrageAnalyzer | None = None,
        trading_switch: AutomaticTradingSwitch | None = None,
        audit: OperationAuditLogger | None = None,
        symbol: str = DEFAULT_SYMBOL,
        quote_currency: str = DEFAULT_QUOTE_CURRENCY,
        venue_timeout: float = DEFAULT_VENUE_TIMEOUT_SECONDS,
    ) -> None:
        self._clients = clients
        self._aggregator = aggregator or MetricsAggregator(
            clients, symbol=symbol, quote_currency=quote_currency, venue_timeout=venue_timeout
        )
        self._strategy: SelectionStrategy = strategy or DefaultSelectionStrategy()
        self._monitor = monitor or ExecutionMonitor(timeout=venue_timeout)
        self._analyzer = analyzer or ArbitrageAnalyzer(symbol=symbol)
        self._switch = trading_switch
        self._audit = audit
        self._symbol = symbol
        self._quote_currency = quote_currency
        self._venue_timeout = venue_timeout

    @property
    def venues(self) -> list[VenueId]:
        """Registered venues in registration order."""
        return list(self._clients)

    @property
    def aggregator(self) -> MetricsAggregator:
        return self._aggregator

    @property
    def analyzer(self) -> ArbitrageAnalyzer:
        return self._analyzer

    def client(self, venue: VenueId) -> VenueClient:
        """Return the client registered for `venue` (KeyError if none)."""
        return self._clients[venue]

    async def execute_optimally(self, operation: LiquidityOperation) -> LiquidityResult:
        """Aggregate metrics, select the best venue and place `operation` there."""
        logger.info(
            "liquidity_operation_started",
            operation=operation.operation_type.value,
            symbol=operation.symbol,
            amount=str(operation.amount),
            reason=operation.reason,
        )
        try:
            metrics = await self._aggregator.aggregate(operation)
            venue = self._strategy.select(metrics, operation) if metrics else None
            if venue is None:
                logger.warning(
                    "liquidity_operation_no_venue",
                    operation=operation.operation_type.value,
                    venues=len(metrics),
                )
                result = LiquidityResult.failure(operation, NO_SUITABLE_VENUE)
            else:
                result = await self._monitor.execute(self._clients[venue], operation)
        except Exception as e:
            logger.exception("liquidity_operation_error", operation=operation.operation_type.value)
            result = LiquidityResult.failure(operation, f"Liquidity operation failed: {e}")

        self._record(result)
        return result

    async def execute_on(self, venue: VenueId, operation: LiquidityOperation) -> LiquidityResult:
        """Place `operation` on an explicit venue, bypassing selection."""
        client = self._clients.get(venue)
        if client is None:
            result = LiquidityResult.failure(operation, f"Unknown venue: {venue.value}")
        else:
            result = await self._monitor.execute(client, operation)
        self._record(result)
        return result

    async def current_prices(self, symbol: str | None = None) -> dict[VenueId, Decimal]:
        """
        Query every venue for its current price.

        Only strictly positive prices that arrived within the timeout are kept. Failed venues
        are dropped, never zero-filled.
        """
        resolved = symbol or self._symbol
        venues = list(self._clients)
        answers = await asyncio.gather(*(self._price(venue, resolved) for venue in venues))
        return {
            venue: price
            for venue, price in zip(venues, answers, strict=True)
            if price is not None and price > 0
        }

    async def available_venues(self) -> list[VenueId]:
        venues = list(self._clients)
        flags = await asyncio.gather(*(self._is_available(venue) for venue in venues))
        return [venue for venue, up in zip(venues, flags, strict=True) if up]

    async def scan_arbitrage(self) -> ArbitrageExecution | None:
        """One arbitrage pass: price every venue, analyze, execute a qualifying gap."""
        if self._switch is not None and not self._switch.enabled:
            logger.debug("arbitrage_scan_skipped_paused")
            return None

        prices = await self.current_prices(self._analyzer.symbol)
        if len(prices) < 2:
            logger.debug("arbitrage_scan_insufficient_prices", venues=len(prices))
            return None

        opportunity = self._analyzer.analyze(prices)
        if opportunity is None or not opportunity.is_profitable:
            logger.debug("arbitrage_scan_no_opportunity", venues=len(prices))
            return None

        return await self.execute_arbitrage(opportunity)

    async def execute_arbitrage(self, opportunity: ArbitrageOpportunity) -> ArbitrageExecution:
        """
        Buy on the cheap venue, then sell on the rich one.

        The sell is only attempted after a successful buy. A failed sell leaves an open
        position that is logged and not unwound.
        """
        reason = (
            f"Arbitrage {opportunity.buy_venue.value} -> {opportunity.sell_venue.value} "
            f"({opportunity.profit_rate})"
        )
        buy = await self.execute_on(
            opportunity.buy_venue,
            LiquidityOperation.market_buy(
                opportunity.symbol, opportunity.amount, reason, priority=ARBITRAGE_PRIORITY
            ),
        )
        if not buy.success:
            logger.error(
                "arbitrage_buy_failed",
                venue=opportunity.buy_venue.value,
                error=buy.error_message,
            )
            return ArbitrageExecution(opportunity=opportunity, buy=buy)

        sell = await self.execute_on(
            opportunity.sell_venue,
            LiquidityOperation.market_sell(
                opportunity.symbol, opportunity.amount, reason, priority=ARBITRAGE_PRIORITY
            ),
        )
        execution = ArbitrageExecution(opportunity=opportunity, buy=buy, sell=sell)
        if execution.unresolved_imbalance:
            logger.error(
                "arbitrage_unresolved_imbalance",
                buy_venue=opportunity.buy_venue.value,
                sell_venue=opportunity.sell_venue.value,
                amount=str(opportunity.amount),
                error=sell.error_message,
            )
        else:
            logger.info(
                "arbitrage_completed",
                buy_venue=opportunity.buy_venue.value,
                sell_venue=opportunity.sell_venue.value,
                expected_profit=str(opportunity.expected_profit),
            )
        return execution

    async def _price(self, venue: VenueId, symbol: str) -> Decimal | None:
        try:
            return await asyncio.wait_for(
                self._clients[venue].get_current_price(symbol, self._quote_currency),
                timeout=self._venue_timeout,
            )
        except TimeoutError:
            logger.warning("venue_price_timeout", venue=venue.value)
        except Exception as e:
            logger.warning("venue_price_failed", venue=venue.value, error=str(e))
        return None

    async def _is_available(self, venue: VenueId) -> bool:
        try:
            return await asyncio.wait_for(
                self._clients[venue].is_available(), timeout=self._venue_timeout
            )
        except TimeoutError:
            logger.warning("venue_availability_timeout", venue=venue.value)
        except Exception as e:
            logger.warning("venue_availability_failed", venue=venue.value, error=str(e))
        return False

    def _record(self, result: LiquidityResult) -> None:
        if self._audit is None:
            return
        try:
            self._audit.write(result)
        except OSError as e:
            logger.warning("operation_audit_write_failed", path=str(self._audit.path), error=str(e))
