from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from liquidity_desk.cli import app
from liquidity_desk.config import DeskConfig, set_config

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch):
    monkeypatch.delenv("LIQUIDITY_DESK_CONFIG", raising=False)
    yield
    set_config(DeskConfig())


def _frozen_config(tmp_path: Path) -> Path:
    path = tmp_path / "desk.json"
    path.write_text(
        json.dumps(
            {
                "simulated_venues": [
                    {"venue": "bitbank", "base_price": "100", "price_jitter": "0"},
                    {"venue": "binance", "base_price": "105", "price_jitter": "0"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "liquidity-desk v0.1.0" in result.stdout


def test_missing_config_file_exits(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.json"), "version"])
    assert result.exit_code == 1
    assert "Config file not found" in result.stdout


def test_invalid_config_value_exits(tmp_path: Path) -> None:
    path = tmp_path / "desk.json"
    path.write_text(json.dumps({"stabilization": {"sell_chunks": 0}}), encoding="utf-8")

    result = runner.invoke(app, ["--config", str(path), "version"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout


def test_prices_json(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(_frozen_config(tmp_path)), "prices", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["prices"] == {"bitbank": "100.00", "binance": "105.00"}
    assert payload["snapshot"]["average_price"] == "102.50"
    assert payload["snapshot"]["volatility"] == "0.0500"


def test_prices_table() -> None:
    result = runner.invoke(app, ["prices"])
    assert result.exit_code == 0
    assert "Bitbank" in result.stdout
    assert "Average" in result.stdout


def test_metrics_json() -> None:
    result = runner.invoke(app, ["metrics", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert set(payload) == {"bitbank", "coincheck", "binance"}
    assert all(entry["available"] for entry in payload.values())


def test_execute_market_buy_json() -> None:
    result = runner.invoke(app, ["execute", "buy", "100", "--reason", "manual test", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["operation"]["operation_type"] == "market_buy"
    assert payload["operation"]["reason"] == "manual test"


def test_execute_resting_limit_sell(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "--config",
            str(_frozen_config(tmp_path)),
            "execute",
            "sell",
            "10",
            "--limit-price",
            "180",
            "--json",
        ],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["operation"]["operation_type"] == "limit_sell"
    assert payload["order_result"]["status"] == "pending"


def test_execute_rejects_bad_amount() -> None:
    result = runner.invoke(app, ["execute", "buy", "lots"])
    assert result.exit_code == 2
    assert "must be a number" in result.stdout


def test_execute_failure_exits_nonzero() -> None:
    result = runner.invoke(app, ["execute", "sell", "99999999"])
    assert result.exit_code == 1
    assert "Failed" in result.stdout


def test_arbitrage_reports_opportunity(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(_frozen_config(tmp_path)), "arbitrage"])

    assert result.exit_code == 0
    assert "Opportunity" in result.stdout
    assert "Binance" in result.stdout


def test_arbitrage_execute(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["--config", str(_frozen_config(tmp_path)), "arbitrage", "--execute"]
    )

    assert result.exit_code == 0
    assert "Both legs executed" in result.stdout


def test_decide_json_sells_above_target() -> None:
    result = runner.invoke(app, ["decide", "200", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["action"] == "stabilize_sell"
    assert payload["amount"] == "666600.00"


def test_decide_table_buy() -> None:
    result = runner.invoke(app, ["decide", "140"])
    assert result.exit_code == 0
    assert "stabilize_buy" in result.stdout


def test_run_once_writes_audit_log(tmp_path: Path) -> None:
    audit_log = tmp_path / "operations.jsonl"
    result = runner.invoke(
        app,
        [
            "--config",
            str(_frozen_config(tmp_path)),
            "run",
            "--once",
            "--audit-log",
            str(audit_log),
            "--alert-log",
            str(tmp_path / "alerts.jsonl"),
        ],
    )

    assert result.exit_code == 0
    assert "Desk Summary" in result.stdout
    assert len(audit_log.read_text(encoding="utf-8").splitlines()) >= 2
