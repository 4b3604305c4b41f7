"""Stabilization commands: preview a decision and run the desk."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from liquidity_desk.cli.utils import (
    console,
    format_decimal,
    parse_decimal,
    run_async,
    simulated_engine,
)
from liquidity_desk.paths import DEFAULT_OPERATION_AUDIT_LOG, DEFAULT_RISK_ALERT_LOG
from liquidity_desk.stabilization.models import MarketSnapshot

if TYPE_CHECKING:
    from liquidity_desk.engine import LiquidityEngine


def decide(
    average_price: Annotated[str, typer.Argument(help="Average cross-venue price")],
    active_venues: Annotated[
        int, typer.Option("--active-venues", "-n", help="Venues quoting a price", min=1)
    ] = 3,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Preview the stabilization decision for a given average price. Places no orders."""
    price = parse_decimal(average_price, "average price")
    engine = simulated_engine()
    snapshot = MarketSnapshot(
        symbol=engine.config.symbol,
        average_price=price,
        min_price=price,
        max_price=price,
        active_venues=active_venues,
    )
    decision = engine.controller.decide(snapshot)

    if output_json:
        typer.echo(json.dumps(decision.model_dump(mode="json"), indent=2, default=str))
        return

    cfg = engine.controller.config
    table = Table(title="Stabilization Decision")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Target", format_decimal(cfg.target_price))
    table.add_row("Average", format_decimal(price))
    table.add_row("Deviation", f"{decision.deviation:.2%}")
    table.add_row("Action", decision.action.value)
    table.add_row("Amount", format_decimal(decision.amount))
    table.add_row("Reason", decision.reason)
    console.print(table)


def _render_summary(engine: LiquidityEngine) -> None:
    table = Table(title="Desk Summary")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    enabled = engine.is_automatic_trading_enabled()
    table.add_row("Automatic trading", "enabled" if enabled else "[red]paused[/red]")
    table.add_row("Risk level", engine.risk.level.value)
    table.add_row("Alerts raised", str(len(engine.risk.alerts)))
    table.add_row("Audit log", str(engine.config.audit_log_path or "-"))
    table.add_row("Staged programs running", str(engine.controller.active_programs))
    for task in engine.tasks:
        table.add_row(f"{task.name} runs", f"{task.runs} (skipped {task.skipped})")
    console.print(table)


def run(
    duration: Annotated[
        float, typer.Option("--duration", "-d", help="Seconds to run before stopping", min=0)
    ] = 60.0,
    once: Annotated[bool, typer.Option("--once", help="Run every task once and exit")] = False,
    audit_log: Annotated[
        Path,
        typer.Option("--audit-log", help="Operation audit log (unless set in config)"),
    ] = DEFAULT_OPERATION_AUDIT_LOG,
    alert_log: Annotated[
        Path,
        typer.Option("--alert-log", help="Risk alert log (unless set in config)"),
    ] = DEFAULT_RISK_ALERT_LOG,
) -> None:
    """Run the desk over the simulated venues."""
    from liquidity_desk.config import get_config
    from liquidity_desk.engine import LiquidityEngine, build_notifiers

    cfg = get_config()
    cfg = cfg.model_copy(
        update={
            "audit_log_path": cfg.audit_log_path or audit_log,
            "risk": cfg.risk.model_copy(
                update={"alert_log_path": cfg.risk.alert_log_path or alert_log}
            ),
        }
    )
    engine = LiquidityEngine.simulated(cfg, notifiers=build_notifiers(cfg, console=True))

    async def _run() -> None:
        try:
            if once:
                await engine.run_once()
            else:
                await engine.start()
                console.print(
                    f"[dim]Running on {len(engine.registry)} venues for {duration:g}s "
                    "(Ctrl+C to stop)...[/dim]"
                )
                await asyncio.sleep(duration)
            _render_summary(engine)
        finally:
            await engine.stop()

    run_async(_run())
