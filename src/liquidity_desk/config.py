"""
Configuration for the liquidity desk.

Defaults come from `liquidity_desk.constants`. A JSON file can override any field, and a
few `LIQUIDITY_DESK_*` environment variables override the most frequently tuned values.
"""

from __future__ import annotations

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from liquidity_desk import constants
from liquidity_desk.venues.models import VenueId

if TYPE_CHECKING:
    from collections.abc import Mapping

CONFIG_PATH_ENV = "LIQUIDITY_DESK_CONFIG"
SYMBOL_ENV = "LIQUIDITY_DESK_SYMBOL"
TARGET_PRICE_ENV = "LIQUIDITY_DESK_TARGET_PRICE"
PRICE_TOLERANCE_ENV = "LIQUIDITY_DESK_PRICE_TOLERANCE"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or parsed."""


class AggregationConfig(BaseModel):
    """Venue polling settings."""

    model_config = ConfigDict(frozen=True)

    quote_currency: str = constants.DEFAULT_QUOTE_CURRENCY
    order_book_depth: int = Field(default=constants.DEFAULT_ORDER_BOOK_DEPTH, ge=1)
    venue_timeout_seconds: float = Field(default=constants.DEFAULT_VENUE_TIMEOUT_SECONDS, gt=0)


class ArbitrageConfig(BaseModel):
    """Arbitrage scan settings."""

    model_config = ConfigDict(frozen=True)

    min_profit_threshold: Decimal = Field(default=constants.DEFAULT_MIN_PROFIT_THRESHOLD, ge=0)
    max_spread_threshold: Decimal = Field(default=constants.DEFAULT_MAX_SPREAD_THRESHOLD, gt=0)
    trade_amount: Decimal = Field(default=constants.DEFAULT_ARBITRAGE_TRADE_AMOUNT, gt=0)
    scan_interval_seconds: float = Field(
        default=constants.DEFAULT_ARBITRAGE_SCAN_INTERVAL_SECONDS, gt=0
    )

    @model_validator(mode="after")
    def validate_band(self) -> ArbitrageConfig:
        if self.min_profit_threshold > self.max_spread_threshold:
            raise ValueError("min_profit_threshold must not exceed max_spread_threshold")
        return self


class StabilizationConfig(BaseModel):
    """Price stabilization policy and staged-program pacing."""

    model_config = ConfigDict(frozen=True)

    target_price: Decimal = Field(default=constants.DEFAULT_TARGET_PRICE, gt=0)
    price_tolerance: Decimal = Field(default=constants.DEFAULT_PRICE_TOLERANCE, ge=0)
    max_single_operation: Decimal = Field(default=constants.DEFAULT_MAX_SINGLE_OPERATION, gt=0)
    sell_base_amount: Decimal = constants.DEFAULT_SELL_BASE_AMOUNT
    sell_deviation_multiplier: Decimal = constants.DEFAULT_SELL_DEVIATION_MULTIPLIER
    buy_base_amount: Decimal = constants.DEFAULT_BUY_BASE_AMOUNT
    buy_deviation_multiplier: Decimal = constants.DEFAULT_BUY_DEVIATION_MULTIPLIER
    provide_liquidity_amount: Decimal = constants.DEFAULT_PROVIDE_LIQUIDITY_AMOUNT
    min_active_venues: int = Field(default=constants.DEFAULT_MIN_ACTIVE_VENUES, ge=1)
    sell_chunks: int = Field(default=constants.DEFAULT_SELL_CHUNKS, ge=1)
    buy_chunks: int = Field(default=constants.DEFAULT_BUY_CHUNKS, ge=1)
    sell_chunk_delay_seconds: float = Field(
        default=constants.DEFAULT_SELL_CHUNK_DELAY_SECONDS, ge=0
    )
    buy_chunk_delay_seconds: float = Field(default=constants.DEFAULT_BUY_CHUNK_DELAY_SECONDS, ge=0)
    pacing_poll_seconds: float = Field(default=constants.DEFAULT_PACING_POLL_SECONDS, gt=0)
    cycle_interval_seconds: float = Field(default=constants.DEFAULT_CYCLE_INTERVAL_SECONDS, gt=0)


class RiskConfig(BaseModel):
    """Volatility escalation and liquidity-risk monitoring."""

    model_config = ConfigDict(frozen=True)

    high_volatility_threshold: Decimal = Field(
        default=constants.DEFAULT_HIGH_VOLATILITY_THRESHOLD, gt=0
    )
    critical_volatility_threshold: Decimal = Field(
        default=constants.DEFAULT_CRITICAL_VOLATILITY_THRESHOLD, gt=0
    )
    liquidity_check_interval_seconds: float = Field(
        default=constants.DEFAULT_LIQUIDITY_CHECK_INTERVAL_SECONDS, gt=0
    )
    enhanced_monitoring_factor: float = Field(
        default=constants.DEFAULT_ENHANCED_MONITORING_FACTOR, ge=1
    )
    available_liquidity_estimate: Decimal = constants.DEFAULT_AVAILABLE_LIQUIDITY_ESTIMATE
    required_liquidity_estimate: Decimal = constants.DEFAULT_REQUIRED_LIQUIDITY_ESTIMATE
    alert_log_path: Path | None = None
    webhook_url: str | None = None

    @model_validator(mode="after")
    def validate_thresholds(self) -> RiskConfig:
        if self.high_volatility_threshold > self.critical_volatility_threshold:
            raise ValueError("high_volatility_threshold must not exceed the critical threshold")
        return self


class SimulatedVenueConfig(BaseModel):
    """One in-memory venue started by the CLI."""

    model_config = ConfigDict(frozen=True)

    venue: VenueId
    base_price: Decimal = Field(gt=0)
    price_jitter: Decimal = Field(default=Decimal("0.005"), ge=0)
    latency_seconds: float = Field(default=0.0, ge=0)
    available: bool = True
    seed: int | None = None


def _default_simulated_venues() -> list[SimulatedVenueConfig]:
    return [
        SimulatedVenueConfig(venue=VenueId.BITBANK, base_price=Decimal("148.50"), seed=1),
        SimulatedVenueConfig(venue=VenueId.COINCHECK, base_price=Decimal("149.80"), seed=2),
        SimulatedVenueConfig(venue=VenueId.BINANCE, base_price=Decimal("151.20"), seed=3),
    ]


class DeskConfig(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(frozen=True)

    symbol: str = constants.DEFAULT_SYMBOL
    audit_log_path: Path | None = None
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    arbitrage: ArbitrageConfig = Field(default_factory=ArbitrageConfig)
    stabilization: StabilizationConfig = Field(default_factory=StabilizationConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    simulated_venues: list[SimulatedVenueConfig] = Field(
        default_factory=_default_simulated_venues
    )


def _read_config_file(path: Path) -> dict[str, object]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file is not valid JSON: {path} ({e})") from None
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")
    return raw


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> DeskConfig:
    """Build a DeskConfig from an optional JSON file and environment overrides.

    Args:
        path: JSON file to read. Falls back to `$LIQUIDITY_DESK_CONFIG` when omitted.
        env: Environment to read overrides from (defaults to `os.environ`).

    Raises:
        ConfigError: If the file is missing or not a JSON object.
        pydantic.ValidationError: If a value is out of range.
    """
    environ = os.environ if env is None else env

    config_path = path
    if config_path is None and environ.get(CONFIG_PATH_ENV):
        config_path = Path(environ[CONFIG_PATH_ENV])
    data: dict[str, object] = _read_config_file(config_path) if config_path else {}

    if symbol := environ.get(SYMBOL_ENV):
        data["symbol"] = symbol

    stabilization = dict(data.get("stabilization") or {})  # type: ignore[call-overload]
    if target_price := environ.get(TARGET_PRICE_ENV):
        stabilization["target_price"] = target_price
    if tolerance := environ.get(PRICE_TOLERANCE_ENV):
        stabilization["price_tolerance"] = tolerance
    if stabilization:
        data["stabilization"] = stabilization

    return DeskConfig.model_validate(data)


# Singleton for global access
_config = DeskConfig()


def get_config() -> DeskConfig:
    """Get the current global configuration."""
    return _config


def set_config(config: DeskConfig) -> None:
    """Replace the global configuration."""
    global _config  # noqa: PLW0603 - intentional singleton for CLI state
    _config = config
