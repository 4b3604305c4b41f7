"""Tests for the liquidity controller and staged programs."""

from __future__ import annotations

from decimal import Decimal

import pytest

from liquidity_desk.config import StabilizationConfig
from liquidity_desk.execution.manager import MultiVenueManager
from liquidity_desk.stabilization.controller import LiquidityController
from liquidity_desk.stabilization.models import LiquidityAction, MarketSnapshot, ProgramHalt
from liquidity_desk.stabilization.switch import AutomaticTradingSwitch
from liquidity_desk.venues.models import OrderSide, VenueId
from liquidity_desk.venues.registry import VenueRegistry


def _snapshot(average: str, active_venues: int = 3) -> MarketSnapshot:
    return MarketSnapshot(
        symbol="SFRT/JPY", average_price=Decimal(average), active_venues=active_venues
    )


def _controller(
    venues, fake_sleep=None, *, switch=None, config=None
) -> tuple[LiquidityController, AutomaticTradingSwitch]:
    switch = switch or AutomaticTradingSwitch()
    manager = MultiVenueManager(VenueRegistry(venues), trading_switch=switch)
    controller = LiquidityController(manager, switch, config=config, sleep=fake_sleep)
    return controller, switch


class TestDecide:
    @pytest.fixture
    def controller(self, make_venue) -> LiquidityController:
        return _controller([make_venue(VenueId.BITBANK)])[0]

    def test_far_above_target_sells_formula_amount(self, controller) -> None:
        decision = controller.decide(_snapshot("200"))

        assert decision.action == LiquidityAction.STABILIZE_SELL
        assert decision.deviation == Decimal("0.3333")
        assert decision.amount == Decimal("666600.00")
        assert decision.priority == 7

    def test_sell_amount_is_capped(self, controller) -> None:
        decision = controller.decide(_snapshot("300"))
        # deviation 1.0 -> 2,000,000 before the cap
        assert decision.amount == Decimal("1000000.00")

    def test_below_target_buys(self, controller) -> None:
        decision = controller.decide(_snapshot("140"))

        assert decision.action == LiquidityAction.STABILIZE_BUY
        assert decision.deviation == Decimal("-0.0667")
        assert decision.amount == Decimal("160080.00")

    def test_tolerance_boundary_holds(self, controller) -> None:
        decision = controller.decide(_snapshot("157.50"))
        assert decision.deviation == Decimal("0.0500")
        assert decision.action == LiquidityAction.HOLD_RESERVE
        assert decision.amount == 0
        assert decision.priority == 1

    def test_too_few_venues_provides_liquidity(self, controller) -> None:
        decision = controller.decide(_snapshot("150", active_venues=1))
        assert decision.action == LiquidityAction.PROVIDE_LIQUIDITY
        assert decision.amount == Decimal("500000")
        assert decision.priority == 5

    def test_deviation_wins_over_thin_market(self, controller) -> None:
        decision = controller.decide(_snapshot("200", active_venues=1))
        assert decision.action == LiquidityAction.STABILIZE_SELL

    def test_custom_target(self, make_venue) -> None:
        config = StabilizationConfig(target_price=Decimal("100"), price_tolerance=Decimal("0.01"))
        controller = _controller([make_venue(VenueId.BITBANK)], config=config)[0]
        assert controller.decide(_snapshot("102")).action == LiquidityAction.STABILIZE_SELL


class TestStagedProgram:
    async def test_chunks_consume_the_whole_amount(self, make_venue, fake_sleep) -> None:
        venue = make_venue(VenueId.BITBANK)
        controller, _ = _controller([venue], fake_sleep)

        report = await controller.run_staged_program(
            OrderSide.SELL, Decimal("1000"), chunks=3, chunk_delay=30.0
        )

        amounts = [amount for _, amount, _, _ in venue.orders]
        assert amounts == [Decimal("333.33"), Decimal("333.34"), Decimal("333.33")]
        assert sum(amounts) == Decimal("1000")
        assert report.completed
        assert report.attempts == 3
        assert report.executed_amount == Decimal("1000")
        assert all(side == OrderSide.SELL for _, _, side, _ in venue.orders)

    async def test_pacing_between_chunks_only(self, make_venue, fake_sleep) -> None:
        controller, _ = _controller(
            [make_venue(VenueId.BITBANK)],
            fake_sleep,
            config=StabilizationConfig(pacing_poll_seconds=10.0),
        )

        await controller.run_staged_program(
            OrderSide.BUY, Decimal("800"), chunks=8, chunk_delay=45.0
        )

        assert fake_sleep.total == pytest.approx(45.0 * 7)
        assert max(fake_sleep.calls) <= 10.0

    async def test_failed_chunk_halts_program(self, make_venue, fake_sleep) -> None:
        venue = make_venue(VenueId.BITBANK, order_outcomes=[True, True, False])
        controller, _ = _controller([venue], fake_sleep)

        report = await controller.run_staged_program(
            OrderSide.SELL, Decimal("1000"), chunks=10, chunk_delay=30.0
        )

        assert len(venue.orders) == 3
        assert report.attempts == 3
        assert report.halted == ProgramHalt.CHUNK_FAILED
        assert report.executed_amount == Decimal("200")
        assert not report.completed

    async def test_pause_stops_program_before_next_chunk(self, make_venue, fake_sleep) -> None:
        switch = AutomaticTradingSwitch()
        venue = make_venue(VenueId.BITBANK)

        def pause_after_second_order() -> None:
            if len(venue.orders) == 2:
                switch.pause("test")

        venue.on_order = pause_after_second_order
        controller, _ = _controller([venue], fake_sleep, switch=switch)

        report = await controller.run_staged_program(
            OrderSide.SELL, Decimal("1000"), chunks=10, chunk_delay=30.0
        )

        assert len(venue.orders) == 2
        assert report.halted == ProgramHalt.TRADING_PAUSED
        assert report.executed_amount == Decimal("200")
        assert fake_sleep.total < 60.0

    async def test_no_venue_halts_on_first_chunk(self, make_venue, fake_sleep) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK, available=False)], fake_sleep)

        report = await controller.run_staged_program(
            OrderSide.BUY, Decimal("100"), chunks=4, chunk_delay=1.0
        )

        assert report.attempts == 1
        assert report.halted == ProgramHalt.CHUNK_FAILED
        assert report.executed_amount == 0

    async def test_chunk_labels_and_priority(self, make_venue, fake_sleep) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK)], fake_sleep)

        report = await controller.run_staged_program(
            OrderSide.BUY, Decimal("10"), chunks=2, chunk_delay=0.0, reason="Stabilize"
        )

        assert [r.operation.reason for r in report.results] == [
            "Stabilize (chunk 1/2)",
            "Stabilize (chunk 2/2)",
        ]
        assert {r.operation.priority for r in report.results} == {7}


class TestRunCycle:
    async def test_cycle_starts_background_sell_program(self, make_venue, fake_sleep) -> None:
        venues = [
            make_venue(VenueId.BITBANK, price=Decimal("200")),
            make_venue(VenueId.COINCHECK, price=Decimal("200")),
        ]
        controller, _ = _controller(venues, fake_sleep)

        decision = await controller.run_cycle()

        assert decision is not None
        assert decision.action == LiquidityAction.STABILIZE_SELL
        reports = await controller.wait_for_programs()
        assert len(reports) == 1
        assert reports[0].executed_amount == Decimal("666600.00")
        assert reports[0].attempts == 10
        assert controller.active_programs == 0

    async def test_cycle_skipped_while_paused(self, make_venue, fake_sleep) -> None:
        venue = make_venue(VenueId.BITBANK, price=Decimal("200"))
        controller, switch = _controller([venue], fake_sleep)
        controller.pause_automatic_trading()

        assert await controller.run_cycle() is None
        assert venue.orders == []
        assert not controller.is_automatic_trading_enabled()
        assert controller.resume_automatic_trading()
        assert switch.enabled

    async def test_cycle_skipped_without_prices(self, make_venue, fake_sleep) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK, price=None)], fake_sleep)
        assert await controller.run_cycle() is None

    async def test_hold_reserve_places_nothing(self, make_venue, fake_sleep) -> None:
        venues = [make_venue(VenueId.BITBANK), make_venue(VenueId.OKX)]
        controller, _ = _controller(venues, fake_sleep)

        decision = await controller.run_cycle()

        assert decision is not None
        assert decision.action == LiquidityAction.HOLD_RESERVE
        assert controller.active_programs == 0
        assert all(v.orders == [] for v in venues)

    async def test_listeners_receive_snapshot_and_failures_are_contained(
        self, make_venue, fake_sleep
    ) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK)], fake_sleep)
        seen: list[MarketSnapshot] = []

        async def failing(snapshot: MarketSnapshot) -> None:
            raise RuntimeError("listener broke")

        async def recording(snapshot: MarketSnapshot) -> None:
            seen.append(snapshot)

        controller.add_snapshot_listener(failing)
        controller.add_snapshot_listener(recording)

        decision = await controller.run_cycle()

        assert decision is not None
        assert len(seen) == 1
        assert seen[0].average_price == Decimal("150.00")

    async def test_cancel_programs(self, make_venue) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK, price=Decimal("200"))])

        await controller.run_cycle()
        assert controller.active_programs == 1
        await controller.cancel_programs()

        assert controller.active_programs == 0

    async def test_cycle_stops_when_snapshot_listener_pauses_trading(
        self, make_venue, fake_sleep
    ) -> None:
        venue = make_venue(VenueId.BITBANK, price=Decimal("200"))
        controller, switch = _controller([venue], fake_sleep)

        async def emergency(snapshot: MarketSnapshot) -> None:
            switch.pause("emergency")

        controller.add_snapshot_listener(emergency)

        assert await controller.run_cycle() is None
        assert controller.active_programs == 0
        assert venue.orders == []

    async def test_one_program_per_side(self, make_venue) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK, price=Decimal("200"))])

        await controller.run_cycle()
        assert controller.program_running(OrderSide.SELL)
        second = await controller.run_cycle()

        assert second is not None
        assert second.action == LiquidityAction.STABILIZE_SELL
        assert controller.active_programs == 1
        assert not controller.program_running(OrderSide.BUY)
        await controller.cancel_programs()

    async def test_hold_reserve_cannot_start_program(self, make_venue) -> None:
        controller, _ = _controller([make_venue(VenueId.BITBANK)])
        decision = controller.decide(_snapshot("150"))
        with pytest.raises(ValueError, match="hold_reserve"):
            controller.start_staged_program(decision)
