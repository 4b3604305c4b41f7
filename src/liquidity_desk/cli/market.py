"""Market view commands: per-venue prices and aggregated venue metrics."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.table import Table

from liquidity_desk.cli.utils import console, format_decimal, run_async, simulated_engine
from liquidity_desk.stabilization.models import MarketSnapshot


def prices(
    symbol: Annotated[
        str | None, typer.Option("--symbol", "-s", help="Symbol (defaults to config)")
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the current price on every venue."""
    engine = simulated_engine()
    resolved = symbol or engine.config.symbol
    venue_prices = run_async(engine.manager.current_prices(resolved))
    snapshot = MarketSnapshot.from_prices(resolved, venue_prices)

    if output_json:
        payload = {
            "symbol": resolved,
            "prices": {venue.value: str(price) for venue, price in venue_prices.items()},
            "snapshot": snapshot.model_dump(mode="json"),
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    if not venue_prices:
        console.print(f"[yellow]No venue returned a price for {resolved}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Prices: {resolved}")
    table.add_column("Venue", style="cyan")
    table.add_column("Region", style="dim")
    table.add_column("Price", justify="right", style="green")
    for venue, price in venue_prices.items():
        table.add_row(venue.display_name, venue.region.value, format_decimal(price))
    console.print(table)

    console.print(
        f"Average: [bold]{format_decimal(snapshot.average_price)}[/bold]  "
        f"Volatility: [bold]{snapshot.volatility:.2%}[/bold]  "
        f"Venues: {snapshot.active_venues}"
    )


def metrics(
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Aggregate health and quality metrics for every venue."""
    engine = simulated_engine()
    venue_metrics = run_async(engine.manager.aggregator.aggregate())

    if output_json:
        payload = {
            venue.value: {**m.model_dump(mode="json"), "quality_score": str(m.quality_score)}
            for venue, m in venue_metrics.items()
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    table = Table(title="Venue Metrics")
    table.add_column("Venue", style="cyan")
    table.add_column("Up")
    table.add_column("Price", justify="right")
    table.add_column("Liquidity", justify="right")
    table.add_column("Spread", justify="right")
    table.add_column("24h Vol", justify="right")
    table.add_column("Latency", justify="right")
    table.add_column("Quality", justify="right", style="bold")
    for venue, m in venue_metrics.items():
        table.add_row(
            venue.display_name,
            "[green]yes[/green]" if m.available else "[red]no[/red]",
            format_decimal(m.price),
            format_decimal(m.liquidity, 0),
            format_decimal(m.spread),
            format_decimal(m.volume_24h, 0),
            f"{m.response_time_ms}ms",
            format_decimal(m.quality_score, 1),
        )
    console.print(table)
