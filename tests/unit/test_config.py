"""Tests for configuration loading."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from liquidity_desk.config import (
    CONFIG_PATH_ENV,
    PRICE_TOLERANCE_ENV,
    SYMBOL_ENV,
    TARGET_PRICE_ENV,
    ArbitrageConfig,
    ConfigError,
    DeskConfig,
    RiskConfig,
    get_config,
    load_config,
    set_config,
)
from liquidity_desk.venues.models import VenueId

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults() -> None:
    config = load_config(env={})

    assert config.symbol == "SFRT/JPY"
    assert config.stabilization.target_price == Decimal("150.00")
    assert config.stabilization.sell_chunks == 10
    assert config.stabilization.buy_chunks == 8
    assert config.stabilization.sell_chunk_delay_seconds == 30.0
    assert config.stabilization.buy_chunk_delay_seconds == 45.0
    assert config.arbitrage.min_profit_threshold == Decimal("0.01")
    assert config.arbitrage.max_spread_threshold == Decimal("0.10")
    assert config.risk.high_volatility_threshold == Decimal("0.20")
    assert config.risk.critical_volatility_threshold == Decimal("0.50")
    assert [v.venue for v in config.simulated_venues] == [
        VenueId.BITBANK,
        VenueId.COINCHECK,
        VenueId.BINANCE,
    ]
    assert config.audit_log_path is None


def test_file_overrides(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text(
        json.dumps(
            {
                "symbol": "SFRT/USDT",
                "arbitrage": {"trade_amount": "2500"},
                "stabilization": {"sell_chunks": 4, "pacing_poll_seconds": 0.5},
                "simulated_venues": [{"venue": "okx", "base_price": "1.01"}],
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path, env={})

    assert config.symbol == "SFRT/USDT"
    assert config.arbitrage.trade_amount == Decimal("2500")
    assert config.stabilization.sell_chunks == 4
    assert config.stabilization.buy_chunks == 8
    assert config.simulated_venues[0].venue == VenueId.OKX


def test_env_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text(json.dumps({"stabilization": {"target_price": "120"}}), encoding="utf-8")

    config = load_config(
        path,
        env={SYMBOL_ENV: "SFRT/USD", TARGET_PRICE_ENV: "100", PRICE_TOLERANCE_ENV: "0.02"},
    )

    assert config.symbol == "SFRT/USD"
    assert config.stabilization.target_price == Decimal("100")
    assert config.stabilization.price_tolerance == Decimal("0.02")


def test_config_path_from_env(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text(json.dumps({"symbol": "SFRT/EUR"}), encoding="utf-8")

    assert load_config(env={CONFIG_PATH_ENV: str(path)}).symbol == "SFRT/EUR"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.json", env={})


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config(path, env={})


def test_non_object_json(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(path, env={})


def test_out_of_range_values_fail_validation() -> None:
    with pytest.raises(ValidationError):
        load_config(env={TARGET_PRICE_ENV: "-5"})


def test_inverted_arbitrage_band_rejected() -> None:
    with pytest.raises(ValidationError):
        ArbitrageConfig(min_profit_threshold=Decimal("0.2"), max_spread_threshold=Decimal("0.1"))


def test_inverted_volatility_thresholds_rejected() -> None:
    with pytest.raises(ValidationError):
        RiskConfig(
            high_volatility_threshold=Decimal("0.6"),
            critical_volatility_threshold=Decimal("0.5"),
        )


def test_set_config_replaces_singleton() -> None:
    original = get_config()
    try:
        custom = DeskConfig(symbol="SFRT/GBP")
        set_config(custom)
        assert get_config() is custom
    finally:
        set_config(original)
