"""Price stabilization control loop and staged execution programs."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog

from liquidity_desk.config import StabilizationConfig
from liquidity_desk.constants import DEFAULT_SYMBOL, PRICE_QUANTUM, RATIO_QUANTUM
from liquidity_desk.execution.models import LiquidityOperation
from liquidity_desk.stabilization.models import (
    LiquidityAction,
    LiquidityDecision,
    MarketSnapshot,
    ProgramHalt,
    StagedProgramReport,
)
from liquidity_desk.venues.models import OrderSide

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from liquidity_desk.execution.manager import MultiVenueManager
    from liquidity_desk.execution.models import LiquidityResult
    from liquidity_desk.stabilization.switch import AutomaticTradingSwitch

    SnapshotListener = Callable[[MarketSnapshot], Awaitable[None]]

logger = structlog.get_logger()

STABILIZATION_PRIORITY = 7
PROVIDE_LIQUIDITY_PRIORITY = 5
HOLD_RESERVE_PRIORITY = 1


class LiquidityController:
    """
    Keep the average cross-venue price near the target.

    Each cycle builds a market snapshot, decides on an action and, for stabilization, starts
    a staged program in the background so the cycle timer is never blocked. Staged programs
    re-check the automatic-trading switch before every chunk. At most one program per side
    runs at a time; a cycle that wants another one on the same side is a no-op until it ends.
    """

    def __init__(
        self,
        manager: MultiVenueManager,
        trading_switch: AutomaticTradingSwitch,
        *,
        config: StabilizationConfig | None = None,
        symbol: str = DEFAULT_SYMBOL,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._manager = manager
        self._switch = trading_switch
        self._config = config or StabilizationConfig()
        self._symbol = symbol
        self._sleep = sleep or asyncio.sleep
        self._listeners: list[SnapshotListener] = []
        self._programs: dict[asyncio.Task[StagedProgramReport], OrderSide] = {}

    @property
    def config(self) -> StabilizationConfig:
        return self._config

    @property
    def active_programs(self) -> int:
        return sum(1 for task in self._programs if not task.done())

    def program_running(self, side: OrderSide) -> bool:
        return any(s == side and not t.done() for t, s in self._programs.items())

    # Operator control points

    def is_automatic_trading_enabled(self) -> bool:
        return self._switch.enabled

    def pause_automatic_trading(self, reason: str = "operator") -> bool:
        return self._switch.pause(reason)

    def resume_automatic_trading(self, reason: str = "operator") -> bool:
        return self._switch.resume(reason)

    def add_snapshot_listener(self, listener: SnapshotListener) -> None:
        """Register a coroutine called with every valid market snapshot."""
        self._listeners.append(listener)

    async def build_snapshot(self) -> MarketSnapshot:
        prices = await self._manager.current_prices(self._symbol)
        return MarketSnapshot.from_prices(self._symbol, prices)

    async def run_cycle(self) -> LiquidityDecision | None:
        """Run one control cycle. Returns the decision, or None if the cycle was skipped."""
        if not self._switch.enabled:
            logger.debug("liquidity_cycle_skipped_paused")
            return None

        snapshot = await self.build_snapshot()
        if not snapshot.is_valid:
            logger.warning("liquidity_cycle_invalid_snapshot", symbol=self._symbol)
            return None

        await self._publish(snapshot)
        if not self._switch.enabled:
            logger.warning("liquidity_cycle_stopped_after_snapshot", symbol=self._symbol)
            return None

        decision = self.decide(snapshot)
        logger.info(
            "liquidity_decision",
            action=decision.action.value,
            amount=str(decision.amount),
            deviation=str(decision.deviation),
            average_price=str(snapshot.average_price),
            active_venues=snapshot.active_venues,
        )
        self.execute_decision(decision)
        return decision

    def decide(self, snapshot: MarketSnapshot) -> LiquidityDecision:
        """Map a snapshot onto a stabilization action. Pure; no orders are placed."""
        cfg = self._config
        deviation = ((snapshot.average_price - cfg.target_price) / cfg.target_price).quantize(
            RATIO_QUANTUM, rounding=ROUND_HALF_UP
        )

        if abs(deviation) > cfg.price_tolerance:
            if deviation > 0:
                amount = cfg.sell_base_amount * deviation * cfg.sell_deviation_multiplier
                return LiquidityDecision(
                    action=LiquidityAction.STABILIZE_SELL,
                    amount=self._cap(amount),
                    reason="Price above target; stabilizing by selling",
                    priority=STABILIZATION_PRIORITY,
                    deviation=deviation,
                )
            amount = cfg.buy_base_amount * abs(deviation) * cfg.buy_deviation_multiplier
            return LiquidityDecision(
                action=LiquidityAction.STABILIZE_BUY,
                amount=self._cap(amount),
                reason="Price below target; stabilizing by buying",
                priority=STABILIZATION_PRIORITY,
                deviation=deviation,
            )

        if snapshot.active_venues < cfg.min_active_venues:
            return LiquidityDecision(
                action=LiquidityAction.PROVIDE_LIQUIDITY,
                amount=cfg.provide_liquidity_amount,
                reason="Too few active venues; providing liquidity",
                priority=PROVIDE_LIQUIDITY_PRIORITY,
                deviation=deviation,
            )

        return LiquidityDecision(
            action=LiquidityAction.HOLD_RESERVE,
            reason="Price within tolerance; holding reserve",
            priority=HOLD_RESERVE_PRIORITY,
            deviation=deviation,
        )

    def execute_decision(
        self, decision: LiquidityDecision
    ) -> asyncio.Task[StagedProgramReport] | None:
        """Act on a decision. Stabilization starts a background staged program unless one is
        already running on the same side."""
        match decision.action:
            case LiquidityAction.STABILIZE_SELL | LiquidityAction.STABILIZE_BUY:
                side = decision.action.side
                if side is not None and self.program_running(side):
                    logger.info(
                        "staged_program_already_running",
                        side=side.value,
                        amount=str(decision.amount),
                    )
                    return None
                return self.start_staged_program(decision)
            case LiquidityAction.PROVIDE_LIQUIDITY:
                # TODO: route to a market-making venue adapter once one exists.
                logger.info("provide_liquidity_requested", amount=str(decision.amount))
            case LiquidityAction.HOLD_RESERVE:
                logger.debug("reserve_held")
        return None

    def start_staged_program(
        self, decision: LiquidityDecision
    ) -> asyncio.Task[StagedProgramReport]:
        side = decision.action.side
        if side is None:
            raise ValueError(f"{decision.action.value} does not start a staged program")

        cfg = self._config
        if side == OrderSide.SELL:
            chunks, delay = cfg.sell_chunks, cfg.sell_chunk_delay_seconds
        else:
            chunks, delay = cfg.buy_chunks, cfg.buy_chunk_delay_seconds

        task = asyncio.create_task(
            self.run_staged_program(
                side,
                decision.amount,
                chunks=chunks,
                chunk_delay=delay,
                reason=decision.reason,
                priority=decision.priority,
            ),
            name=f"staged-{side.value}",
        )
        self._programs[task] = side
        task.add_done_callback(lambda t: self._programs.pop(t, None))
        return task

    async def run_staged_program(
        self,
        side: OrderSide,
        total_amount: Decimal,
        *,
        chunks: int,
        chunk_delay: float,
        reason: str = "",
        priority: int = STABILIZATION_PRIORITY,
    ) -> StagedProgramReport:
        """
        Execute `total_amount` as `chunks` paced market orders.

        Each chunk is the remaining amount divided by the remaining chunk count. A failed
        chunk halts the program; chunks already executed stay executed.
        """
        started_at = datetime.now(UTC)
        remaining = total_amount
        intervals = chunks
        results: list[LiquidityResult] = []
        halted: ProgramHalt | None = None

        logger.info(
            "staged_program_started",
            side=side.value,
            total_amount=str(total_amount),
            chunks=chunks,
        )

        while remaining > 0 and intervals > 0:
            if not self._switch.enabled:
                halted = ProgramHalt.TRADING_PAUSED
                logger.warning("staged_program_paused", side=side.value, remaining=str(remaining))
                break

            chunk = (remaining / intervals).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
            if chunk <= 0 or intervals == 1:
                chunk = remaining

            label = f"{reason} (chunk {chunks - intervals + 1}/{chunks})"
            if side == OrderSide.SELL:
                operation = LiquidityOperation.market_sell(self._symbol, chunk, label, priority)
            else:
                operation = LiquidityOperation.market_buy(self._symbol, chunk, label, priority)

            result = await self._manager.execute_optimally(operation)
            results.append(result)
            if not result.success:
                halted = ProgramHalt.CHUNK_FAILED
                logger.error(
                    "staged_program_chunk_failed",
                    side=side.value,
                    chunk=str(chunk),
                    remaining=str(remaining),
                    error=result.error_message,
                )
                break

            remaining -= chunk
            intervals -= 1
            logger.info(
                "staged_program_chunk_executed",
                side=side.value,
                chunk=str(chunk),
                remaining=str(remaining),
                venue=result.executed_venue.value if result.executed_venue else None,
            )

            if remaining > 0 and intervals > 0:
                await self._pace(chunk_delay)

        report = StagedProgramReport(
            side=side,
            total_amount=total_amount,
            chunks_planned=chunks,
            results=results,
            executed_amount=total_amount - remaining,
            halted=halted,
            started_at=started_at,
        )
        logger.info(
            "staged_program_finished",
            side=side.value,
            executed=str(report.executed_amount),
            attempts=report.attempts,
            halted=halted.value if halted else None,
        )
        return report

    async def wait_for_programs(self) -> list[StagedProgramReport]:
        """Wait for every running staged program and return the reports that completed."""
        tasks = list(self._programs)
        if not tasks:
            return []
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        return [o for o in outcomes if isinstance(o, StagedProgramReport)]

    async def cancel_programs(self) -> None:
        tasks = list(self._programs)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("staged_programs_cancelled", count=len(tasks))

    def _cap(self, amount: Decimal) -> Decimal:
        return min(amount, self._config.max_single_operation).quantize(
            PRICE_QUANTUM, rounding=ROUND_HALF_UP
        )

    async def _pace(self, delay: float) -> None:
        """Sleep `delay` seconds in short slices, returning early if trading is paused."""
        remaining = delay
        while remaining > 0 and self._switch.enabled:
            step = min(self._config.pacing_poll_seconds, remaining)
            await self._sleep(step)
            remaining -= step

    async def _publish(self, snapshot: MarketSnapshot) -> None:
        for listener in self._listeners:
            try:
                await listener(snapshot)
            except Exception:
                logger.exception("snapshot_listener_failed")
