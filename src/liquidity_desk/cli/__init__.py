"""
Operator CLI for the liquidity desk.

Every command runs against the simulated venues listed in the configuration.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import Annotated

import typer
from dotenv import find_dotenv, load_dotenv

from liquidity_desk.cli.desk import decide, run
from liquidity_desk.cli.market import metrics, prices
from liquidity_desk.cli.trade import arbitrage, execute
from liquidity_desk.cli.utils import console

app = typer.Typer(
    name="liquidity-desk",
    help="Multi-venue liquidity desk: prices, venue metrics, arbitrage and stabilization.",
    add_completion=False,
)

app.command("prices")(prices)
app.command("metrics")(metrics)
app.command("execute")(execute)
app.command("arbitrage")(arbitrage)
app.command("decide")(decide)
app.command("run")(run)


@app.callback()
def main(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="JSON config file. Defaults to LIQUIDITY_DESK_CONFIG if set.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Liquidity desk CLI."""
    from pydantic import ValidationError

    from liquidity_desk.config import ConfigError, load_config, set_config

    load_dotenv(find_dotenv(usecwd=True))

    try:
        set_config(load_config(config_path))
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid configuration:\n{e}")
        raise typer.Exit(1) from None


@app.command()
def version() -> None:
    """Show version information."""
    from liquidity_desk import __version__

    console.print(f"liquidity-desk v{__version__}")


__all__ = ["app"]
