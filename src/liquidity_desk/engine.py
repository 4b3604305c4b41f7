"""Wire every component together and run the periodic tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from liquidity_desk.alerts.notifiers import ConsoleNotifier, FileNotifier, WebhookNotifier
from liquidity_desk.analysis.arbitrage import ArbitrageAnalyzer
from liquidity_desk.analysis.metrics import MetricsAggregator
from liquidity_desk.config import DeskConfig, get_config
from liquidity_desk.execution.audit import OperationAuditLogger
from liquidity_desk.execution.manager import MultiVenueManager
from liquidity_desk.risk.manager import RiskManager
from liquidity_desk.scheduling import PeriodicTask
from liquidity_desk.stabilization.controller import LiquidityController
from liquidity_desk.stabilization.switch import AutomaticTradingSwitch
from liquidity_desk.venues.mock import MockVenueClient
from liquidity_desk.venues.registry import VenueRegistry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from liquidity_desk.alerts.notifiers import Notifier
    from liquidity_desk.analysis.selection import SelectionStrategy
    from liquidity_desk.venues.client import VenueClient

logger = structlog.get_logger()


def build_notifiers(config: DeskConfig, *, console: bool = False) -> list[Notifier]:
    """Notifiers implied by the risk configuration."""
    notifiers: list[Notifier] = []
    if console:
        notifiers.append(ConsoleNotifier())
    if config.risk.alert_log_path is not None:
        notifiers.append(FileNotifier(config.risk.alert_log_path))
    if config.risk.webhook_url:
        notifiers.append(WebhookNotifier(config.risk.webhook_url))
    return notifiers


def build_simulated_venues(config: DeskConfig) -> list[MockVenueClient]:
    quote = config.aggregation.quote_currency
    base = config.symbol.partition("/")[0]
    return [
        MockVenueClient(
            venue.venue,
            base_price=venue.base_price,
            price_jitter=venue.price_jitter,
            base_currency=base,
            quote_currency=quote,
            latency_seconds=venue.latency_seconds,
            available=venue.available,
            seed=venue.seed,
        )
        for venue in config.simulated_venues
    ]


class LiquidityEngine:
    """
    The assembled desk: registry, manager, controller, risk manager and their timers.

    Usage:
        engine = LiquidityEngine(clients, config=config)
        await engine.start()
        ...
        await engine.stop()
    """

    def __init__(
        self,
        clients: Iterable[VenueClient],
        *,
        config: DeskConfig | None = None,
        notifiers: Iterable[Notifier] | None = None,
        strategy: SelectionStrategy | None = None,
        trading_switch: AutomaticTradingSwitch | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.config = config or get_config()
        cfg = self.config

        self.registry = VenueRegistry(clients)
        self.trading_switch = trading_switch or AutomaticTradingSwitch()

        audit = OperationAuditLogger(cfg.audit_log_path) if cfg.audit_log_path else None
        self.manager = MultiVenueManager(
            self.registry,
            aggregator=MetricsAggregator(
                self.registry,
                symbol=cfg.symbol,
                quote_currency=cfg.aggregation.quote_currency,
                order_book_depth=cfg.aggregation.order_book_depth,
                venue_timeout=cfg.aggregation.venue_timeout_seconds,
            ),
            strategy=strategy,
            analyzer=ArbitrageAnalyzer(
                symbol=cfg.symbol,
                min_profit_threshold=cfg.arbitrage.min_profit_threshold,
                max_spread_threshold=cfg.arbitrage.max_spread_threshold,
                trade_amount=cfg.arbitrage.trade_amount,
            ),
            trading_switch=self.trading_switch,
            audit=audit,
            symbol=cfg.symbol,
            quote_currency=cfg.aggregation.quote_currency,
            venue_timeout=cfg.aggregation.venue_timeout_seconds,
        )

        self.controller = LiquidityController(
            self.manager,
            self.trading_switch,
            config=cfg.stabilization,
            symbol=cfg.symbol,
            sleep=sleep,
        )
        self.risk = RiskManager(
            self.trading_switch,
            config=cfg.risk,
            notifiers=build_notifiers(cfg) if notifiers is None else notifiers,
            symbol=cfg.symbol,
        )
        self.controller.add_snapshot_listener(self.risk.on_snapshot)

        self.tasks = [
            PeriodicTask(
                "arbitrage_scan",
                self.manager.scan_arbitrage,
                cfg.arbitrage.scan_interval_seconds,
            ),
            PeriodicTask(
                "liquidity_cycle",
                self.controller.run_cycle,
                cfg.stabilization.cycle_interval_seconds,
            ),
            PeriodicTask(
                "liquidity_risk_check",
                self.risk.check_liquidity_risk,
                lambda: self.risk.liquidity_check_interval,
            ),
        ]

    @classmethod
    def simulated(
        cls,
        config: DeskConfig | None = None,
        *,
        notifiers: Iterable[Notifier] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> LiquidityEngine:
        """Engine over the in-memory venues listed in `config.simulated_venues`."""
        cfg = config or get_config()
        return cls(build_simulated_venues(cfg), config=cfg, notifiers=notifiers, sleep=sleep)

    def is_automatic_trading_enabled(self) -> bool:
        return self.trading_switch.enabled

    def pause_automatic_trading(self, reason: str = "operator") -> bool:
        return self.controller.pause_automatic_trading(reason)

    def resume_automatic_trading(self, reason: str = "operator") -> bool:
        return self.controller.resume_automatic_trading(reason)

    async def run_once(self) -> None:
        """Run every periodic task body exactly once, in a fixed order."""
        for task in self.tasks:
            await task.tick()

    async def start(self) -> None:
        logger.info(
            "liquidity_engine_starting",
            symbol=self.config.symbol,
            venues=[v.value for v in self.registry],
        )
        for task in self.tasks:
            task.start()

    async def stop(self, *, cancel_programs: bool = True) -> None:
        for task in self.tasks:
            await task.stop()
        if cancel_programs:
            await self.controller.cancel_programs()
        else:
            await self.controller.wait_for_programs()
        logger.info("liquidity_engine_stopped")
