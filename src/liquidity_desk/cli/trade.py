"""Order commands: single operations and arbitrage scans."""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from liquidity_desk.cli.utils import (
    console,
    format_decimal,
    parse_decimal,
    run_async,
    simulated_engine,
)
from liquidity_desk.execution.models import LiquidityOperation, LiquidityResult, OperationType


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


def _operation_type(side: Side, limit: bool) -> OperationType:
    match side, limit:
        case Side.BUY, False:
            return OperationType.MARKET_BUY
        case Side.SELL, False:
            return OperationType.MARKET_SELL
        case Side.BUY, True:
            return OperationType.LIMIT_BUY
        case _:
            return OperationType.LIMIT_SELL


def _render_result(result: LiquidityResult) -> None:
    if not result.success:
        console.print(f"[red]Failed:[/red] {result.error_message}")
        return

    order = result.order_result
    table = Table(title="Operation Result")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Venue", result.executed_venue.display_name if result.executed_venue else "-")
    table.add_row("Operation", result.operation.operation_type.value)
    table.add_row("Amount", format_decimal(result.operation.amount))
    if order is not None:
        table.add_row("Order ID", order.order_id or "-")
        table.add_row("Status", order.status.value)
        table.add_row("Executed", format_decimal(order.executed_amount))
        table.add_row("Price", format_decimal(order.executed_price or order.price))
    table.add_row("Elapsed", f"{result.execution_time_ms}ms")
    console.print(table)


def execute(
    side: Annotated[Side, typer.Argument(help="buy or sell")],
    amount: Annotated[str, typer.Argument(help="Amount in base units")],
    limit_price: Annotated[
        str | None, typer.Option("--limit-price", help="Place a limit order at this price")
    ] = None,
    reason: Annotated[str, typer.Option("--reason", help="Free-text reason")] = "manual",
    priority: Annotated[int, typer.Option("--priority", help="Priority 1-10")] = 5,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Execute one operation on the best venue."""
    parsed_amount = parse_decimal(amount, "amount")
    parsed_price = parse_decimal(limit_price, "limit price") if limit_price is not None else None

    engine = simulated_engine()
    operation = LiquidityOperation(
        operation_type=_operation_type(side, parsed_price is not None),
        symbol=engine.config.symbol,
        amount=parsed_amount,
        price=parsed_price,
        reason=reason,
        priority=priority,
    )
    result = run_async(engine.manager.execute_optimally(operation))

    if output_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2, default=str))
    else:
        _render_result(result)

    if not result.success:
        raise typer.Exit(1)


def arbitrage(
    do_execute: Annotated[
        bool, typer.Option("--execute", help="Execute the opportunity if one is found")
    ] = False,
) -> None:
    """Scan venues for a cross-venue price gap."""
    engine = simulated_engine()

    async def _scan() -> None:
        venue_prices = await engine.manager.current_prices()
        if len(venue_prices) < 2:
            console.print("[yellow]Fewer than two venues quoted a price.[/yellow]")
            return

        opportunity = engine.manager.analyzer.analyze(venue_prices)
        if opportunity is None:
            console.print("[dim]No arbitrage opportunity inside the configured band.[/dim]")
            return

        console.print(
            f"[green]Opportunity:[/green] buy on {opportunity.buy_venue.display_name} "
            f"@ {format_decimal(opportunity.buy_price)}, sell on "
            f"{opportunity.sell_venue.display_name} @ {format_decimal(opportunity.sell_price)} "
            f"({opportunity.profit_rate:.2%}, expected "
            f"{format_decimal(opportunity.expected_profit)})"
        )
        if not do_execute:
            return

        execution = await engine.manager.execute_arbitrage(opportunity)
        if execution.completed:
            console.print("[green]✓[/green] Both legs executed")
        elif execution.unresolved_imbalance and execution.sell is not None:
            console.print(
                f"[red]Sell leg failed:[/red] {execution.sell.error_message} "
                "(open position left unwound)"
            )
            raise typer.Exit(1)
        else:
            console.print(f"[red]Buy leg failed:[/red] {execution.buy.error_message}")
            raise typer.Exit(1)

    run_async(_scan())
