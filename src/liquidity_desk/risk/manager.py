"""Volatility escalation and periodic liquidity-risk monitoring."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

import structlog

from liquidity_desk.alerts.models import AlertKind, AlertSeverity, RiskAlert
from liquidity_desk.config import RiskConfig
from liquidity_desk.constants import (
    DEFAULT_AVAILABLE_LIQUIDITY_ESTIMATE,
    DEFAULT_LIQUIDITY_RISK,
    DEFAULT_MARKET_RISK,
    DEFAULT_REQUIRED_LIQUIDITY_ESTIMATE,
    DEFAULT_SYMBOL,
)
from liquidity_desk.risk.models import (
    LiquidityRiskReport,
    RiskAssessment,
    RiskLevel,
    VolatilityEvent,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from liquidity_desk.alerts.notifiers import Notifier
    from liquidity_desk.stabilization.models import MarketSnapshot
    from liquidity_desk.stabilization.switch import AutomaticTradingSwitch

logger = structlog.get_logger()


class LiquidityEstimator(Protocol):
    """Source of available and required liquidity figures."""

    async def available_liquidity(self) -> Decimal: ...

    async def required_liquidity(self) -> Decimal: ...


class StaticLiquidityEstimator:
    """Fixed estimates, used until balance and demand telemetry are wired in."""

    def __init__(
        self,
        available: Decimal = DEFAULT_AVAILABLE_LIQUIDITY_ESTIMATE,
        required: Decimal = DEFAULT_REQUIRED_LIQUIDITY_ESTIMATE,
    ) -> None:
        self._available = available
        self._required = required

    async def available_liquidity(self) -> Decimal:
        return self._available

    async def required_liquidity(self) -> Decimal:
        return self._required


class RiskManager:
    """
    Escalate on volatility and watch liquidity.

    Volatility at or above the critical threshold triggers the emergency protocol, which
    pauses automatic trading. Volatility at or above the high threshold tightens monitoring
    without pausing. Leaving EMERGENCY requires `acknowledge_emergency()` followed by an
    explicit trading resume.
    """

    def __init__(
        self,
        trading_switch: AutomaticTradingSwitch,
        *,
        config: RiskConfig | None = None,
        notifiers: Iterable[Notifier] = (),
        estimator: LiquidityEstimator | None = None,
        symbol: str = DEFAULT_SYMBOL,
    ) -> None:
        self._switch = trading_switch
        self._config = config or RiskConfig()
        self._notifiers: list[Notifier] = list(notifiers)
        self._estimator: LiquidityEstimator = estimator or StaticLiquidityEstimator(
            self._config.available_liquidity_estimate, self._config.required_liquidity_estimate
        )
        self._symbol = symbol
        self._level = RiskLevel.NORMAL
        self._enhanced_monitoring = False
        self._last_assessment: RiskAssessment | None = None
        self._alerts: list[RiskAlert] = []

    @property
    def level(self) -> RiskLevel:
        return self._level

    @property
    def enhanced_monitoring(self) -> bool:
        return self._enhanced_monitoring

    @property
    def last_assessment(self) -> RiskAssessment | None:
        return self._last_assessment

    @property
    def alerts(self) -> list[RiskAlert]:
        """Every alert raised so far, oldest first."""
        return list(self._alerts)

    @property
    def liquidity_check_interval(self) -> float:
        """Current liquidity check period in seconds (shorter while monitoring is enhanced)."""
        interval = self._config.liquidity_check_interval_seconds
        if self._enhanced_monitoring:
            return interval / self._config.enhanced_monitoring_factor
        return interval

    def add_notifier(self, notifier: Notifier) -> None:
        self._notifiers.append(notifier)

    async def on_snapshot(self, snapshot: MarketSnapshot) -> None:
        """Snapshot listener: turn every market snapshot into a volatility event."""
        await self.on_volatility_event(
            VolatilityEvent(
                symbol=snapshot.symbol,
                volatility=snapshot.volatility,
                current_price=snapshot.average_price,
            )
        )

    async def on_volatility_event(self, event: VolatilityEvent) -> RiskLevel:
        """Handle one volatility reading and return the resulting risk level."""
        if event.volatility >= self._config.critical_volatility_threshold:
            await self._activate_emergency_protocol(event)
        elif event.volatility >= self._config.high_volatility_threshold:
            await self._activate_high_alert_protocol(event)
        elif self._level == RiskLevel.HIGH_ALERT:
            self._level = RiskLevel.NORMAL
            self._enhanced_monitoring = False
            logger.info("risk_level_normalized", volatility=str(event.volatility))
        return self._level

    def acknowledge_emergency(self, operator: str = "operator") -> bool:
        """Clear the EMERGENCY level. Trading stays paused until explicitly resumed."""
        if self._level != RiskLevel.EMERGENCY:
            return False
        self._level = RiskLevel.NORMAL
        self._enhanced_monitoring = False
        logger.warning("emergency_acknowledged", operator=operator)
        return True

    async def check_liquidity_risk(self) -> LiquidityRiskReport:
        """Compare available against required liquidity; alert and request supply if short."""
        report = LiquidityRiskReport(
            available=await self._estimator.available_liquidity(),
            required=await self._estimator.required_liquidity(),
        )
        if not report.at_risk:
            logger.debug(
                "liquidity_risk_ok",
                available=str(report.available),
                required=str(report.required),
            )
            return report

        logger.warning(
            "liquidity_shortfall",
            available=str(report.available),
            required=str(report.required),
        )
        await self._raise_alert(
            AlertKind.LIQUIDITY_SHORTFALL,
            AlertSeverity.WARNING,
            "Available liquidity below requirement",
            value=report.available,
            threshold=report.required,
        )
        await self._request_liquidity_supply(report.shortfall)
        return report

    def assess(self, event: VolatilityEvent) -> RiskAssessment:
        # Market and liquidity risk are fixed until a real risk model is connected.
        return RiskAssessment(
            price_volatility=event.volatility,
            market_risk=DEFAULT_MARKET_RISK,
            liquidity_risk=DEFAULT_LIQUIDITY_RISK,
        )

    async def _activate_emergency_protocol(self, event: VolatilityEvent) -> None:
        logger.error(
            "emergency_protocol_activated",
            symbol=event.symbol,
            volatility=str(event.volatility),
            price=str(event.current_price),
        )
        self._level = RiskLevel.EMERGENCY
        self._enhanced_monitoring = True
        self._switch.pause(f"emergency volatility {event.volatility}")

        await self._raise_alert(
            AlertKind.EMERGENCY_VOLATILITY,
            AlertSeverity.CRITICAL,
            "Extreme volatility: automatic trading paused",
            value=event.volatility,
            threshold=self._config.critical_volatility_threshold,
            context={"price": str(event.current_price)},
        )
        await self._raise_alert(
            AlertKind.MARKET_UPDATE,
            AlertSeverity.INFO,
            "Market update: trading paused due to extreme volatility",
            value=event.current_price,
        )

        assessment = self.assess(event)
        self._last_assessment = assessment
        await self._execute_contingency_plan(assessment)

    async def _activate_high_alert_protocol(self, event: VolatilityEvent) -> None:
        logger.warning(
            "high_alert_protocol_activated",
            symbol=event.symbol,
            volatility=str(event.volatility),
        )
        if self._level != RiskLevel.EMERGENCY:
            self._level = RiskLevel.HIGH_ALERT
        if not self._enhanced_monitoring:
            self._enhanced_monitoring = True
            logger.info("enhanced_monitoring_enabled", interval=self.liquidity_check_interval)

        await self._raise_alert(
            AlertKind.HIGH_VOLATILITY,
            AlertSeverity.WARNING,
            "High volatility: monitoring tightened",
            value=event.volatility,
            threshold=self._config.high_volatility_threshold,
        )

    async def _execute_contingency_plan(self, assessment: RiskAssessment) -> None:
        logger.info(
            "contingency_plan_executed",
            price_volatility=str(assessment.price_volatility),
            market_risk=str(assessment.market_risk),
            liquidity_risk=str(assessment.liquidity_risk),
        )
        await self._raise_alert(
            AlertKind.CONTINGENCY_PLAN,
            AlertSeverity.CRITICAL,
            "Contingency plan engaged",
            value=assessment.price_volatility,
            context={
                "market_risk": str(assessment.market_risk),
                "liquidity_risk": str(assessment.liquidity_risk),
            },
        )

    async def _request_liquidity_supply(self, amount: Decimal) -> None:
        logger.info("liquidity_supply_requested", amount=str(amount))
        await self._raise_alert(
            AlertKind.SUPPLY_REPLENISHMENT,
            AlertSeverity.INFO,
            "Liquidity supply requested",
            value=amount,
        )

    async def _raise_alert(
        self,
        kind: AlertKind,
        severity: AlertSeverity,
        message: str,
        *,
        value: Decimal,
        threshold: Decimal | None = None,
        context: dict[str, str] | None = None,
    ) -> RiskAlert:
        alert = RiskAlert(
            id=str(uuid.uuid4()),
            kind=kind,
            severity=severity,
            symbol=self._symbol,
            message=message,
            value=value,
            threshold=threshold,
            context=dict(context or {}),
        )
        self._alerts.append(alert)
        for notifier in self._notifiers:
            try:
                await notifier.notify(alert)
            except Exception:
                logger.exception(
                    "alert_notification_failed",
                    notifier=type(notifier).__name__,
                    kind=kind.value,
                )
        return alert
