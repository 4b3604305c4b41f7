"""Shared utilities for CLI commands (console output, argument parsing, async helpers)."""

from __future__ import annotations

import asyncio
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, TypeVar

import typer
from rich.console import Console

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from liquidity_desk.engine import LiquidityEngine

console = Console()

T = TypeVar("T")


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a coroutine from a sync CLI command.

    Raises:
        typer.Exit: With code 130 on KeyboardInterrupt (standard SIGINT exit code).
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130) from None


def parse_decimal(value: str, name: str, *, positive: bool = True) -> Decimal:
    """Parse a CLI string as a Decimal, exiting with a readable error if it is not one."""
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        console.print(f"[red]Error:[/red] {name} must be a number, got '{value}'")
        raise typer.Exit(2) from None
    if not parsed.is_finite() or (positive and parsed <= 0):
        console.print(f"[red]Error:[/red] {name} must be a positive number, got '{value}'")
        raise typer.Exit(2)
    return parsed


def simulated_engine() -> LiquidityEngine:
    """Engine over the simulated venues from the active configuration."""
    from liquidity_desk.config import get_config
    from liquidity_desk.engine import LiquidityEngine

    return LiquidityEngine.simulated(get_config())


def format_decimal(value: Decimal | None, places: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:,.{places}f}"
