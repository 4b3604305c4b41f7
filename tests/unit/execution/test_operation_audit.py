"""Tests for the JSONL operation audit log."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING

from liquidity_desk.execution.audit import OperationAuditLogger
from liquidity_desk.execution.models import LiquidityOperation, LiquidityResult
from liquidity_desk.venues.models import VenueId

if TYPE_CHECKING:
    from pathlib import Path


def test_write_appends_one_line_per_result(tmp_path: Path) -> None:
    log = OperationAuditLogger(tmp_path / "nested" / "operations.jsonl")
    op = LiquidityOperation.market_buy("SFRT/JPY", Decimal("10"), "stabilize")

    log.write(LiquidityResult.failure(op, "No suitable venue"))
    log.write(LiquidityResult.failure(op, "boom", venue=VenueId.OKX))

    lines = log.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["success"] is False
    assert first["error_message"] == "No suitable venue"
    assert first["operation"]["operation_type"] == "market_buy"
    assert first["operation"]["amount"] == "10"
    assert json.loads(lines[1])["executed_venue"] == "okx"


def test_read_returns_entries_in_order(tmp_path: Path) -> None:
    log = OperationAuditLogger(tmp_path / "operations.jsonl")
    op = LiquidityOperation.market_sell("SFRT/JPY", Decimal("1"))
    log.write(LiquidityResult.failure(op, "first"))
    log.write(LiquidityResult.failure(op, "second"))

    assert [entry["error_message"] for entry in log.read()] == ["first", "second"]


def test_read_missing_log_is_empty(tmp_path: Path) -> None:
    assert OperationAuditLogger(tmp_path / "missing.jsonl").read() == []
