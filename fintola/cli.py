"""
Command-line interface for fintola.

Runs the web service and renders charts, demo trades and model signals in
the terminal.
"""

from __future__ import annotations

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

from fintola.core.chart import build_overlay, indicator_summary, process_chart_data
from fintola.core.config import ConfigManager
from fintola.core.exceptions import FintolaError
from fintola.core.market_data import PriceHistoryClient
from fintola.core.mock_data import format_trade_history, generate_signals, generate_trade_history

app = typer.Typer(
    name="fintola",
    help="fintola - trading dashboard backend",
    add_completion=False,
)
console = Console()


def _price_client() -> PriceHistoryClient:
    return PriceHistoryClient()


@app.command()
def version() -> None:
    """Show fintola version information."""
    from fintola import __version__

    console.print(f"fintola version: {__version__}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the web service with uvicorn."""
    import uvicorn

    config = ConfigManager().get_config()
    uvicorn.run(
        "fintola.web.app:create_app",
        factory=True,
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload or config.server.reload,
        log_level="info",
    )


@app.command()
def chart(
    symbol: str = typer.Argument("BTC-USD", help="Ticker symbol"),
    days: int = typer.Option(365, "--days", "-d", help="Lookback window in days"),
    interval: str = typer.Option("1h", "--interval", "-i", help="Candle interval"),
    short: int = typer.Option(9, "--short", help="Short EMA period"),
    long: int = typer.Option(21, "--long", help="Long EMA period"),
    limit: int = typer.Option(10, "--limit", "-l", help="Markers to show"),
) -> None:
    """Fetch candles and summarise the indicator overlay."""
    try:
        payload = asyncio.run(_price_client().chart(symbol, lookback_days=days, interval=interval))
        candles = process_chart_data(payload)
        overlay = build_overlay(candles, short_period=short, long_period=long)
    except FintolaError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        if e.details:
            console.print(f"[yellow]Details: {e.details}[/yellow]")
        raise typer.Exit(1)

    if not candles:
        console.print("[yellow]No candles returned[/yellow]")
        return

    last = candles[-1]
    console.print(f"[bold]{symbol}[/bold] {len(candles)} candles, last close {last.close:.2f}")

    def last_value(series: list[dict]) -> str:
        return f"{series[-1]['value']:.2f}" if series else "-"

    summary = Table(title="Indicators")
    summary.add_column("Series", style="cyan")
    summary.add_column("Last", justify="right")
    summary.add_row("SMA(20)", last_value(overlay["sma"]))
    summary.add_row(f"EMA({short})", last_value(overlay["shortEma"]))
    summary.add_row(f"EMA({long})", last_value(overlay["longEma"]))

    snapshot = indicator_summary(candles)
    bands = snapshot["bollinger"]
    summary.add_row("RSI(14)", f"{snapshot['rsi']:.2f}")
    summary.add_row("MACD(12,26,9)", f"{snapshot['macd']['macdLine']:.2f} / {snapshot['macd']['signalLine']:.2f}")
    summary.add_row("Bollinger(20)", f"{bands['lower']:.2f} - {bands['upper']:.2f}")
    summary.add_row("ATR(14)", f"{snapshot['atr']:.2f}")
    summary.add_row("OBV", f"{snapshot['obv']:.0f}")
    console.print(summary)

    markers = overlay["markers"][-limit:]
    table = Table(title=f"Signals ({len(overlay['markers'])} total)")
    table.add_column("Time", style="cyan")
    table.add_column("Signal")
    table.add_column("Position")
    for marker in markers:
        color = "green" if marker["position"] == "belowBar" else "red"
        table.add_row(str(marker["time"]), f"[{color}]{marker['text']}[/{color}]", marker["position"])
    console.print(table)


@app.command()
def trades(
    count: int = typer.Option(30, "--count", "-n", help="Number of trades"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
) -> None:
    """Show a mock trade history."""
    rows = format_trade_history(generate_trade_history(count))

    if output_format == "json":
        console.print_json(json.dumps(rows))
        return
    if output_format != "table":
        console.print(f"[red]Unsupported format: {output_format}[/red]")
        raise typer.Exit(1)

    table = Table(title="Trade History")
    for column in ("Order", "Symbol", "Action", "Qty", "Price", "Total", "Status", "P/L"):
        table.add_column(column)
    for row in rows:
        table.add_row(
            row["orderId"],
            row["symbol"],
            row["action"],
            str(row["quantity"]),
            f"{row['price']:.2f}",
            f"{row['total']:.2f}",
            row["status"],
            f"{row['profitLoss']:.2f}",
        )
    console.print(table)


@app.command()
def signals(
    symbols: str = typer.Argument(..., help="Comma-separated symbols"),
) -> None:
    """Show mock model signals for the given symbols."""
    names = [s.strip() for s in symbols.split(",") if s.strip()]
    if not names:
        console.print("[red]Error: No symbols provided[/red]")
        raise typer.Exit(1)

    table = Table(title="Model Signals")
    table.add_column("Symbol", style="cyan")
    table.add_column("Action")
    table.add_column("Price", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Reasoning")
    for symbol, signal in generate_signals(names).items():
        table.add_row(
            symbol,
            signal.action.value,
            f"{signal.price:.2f}",
            f"{signal.confidence:.0%}",
            "; ".join(signal.reasoning),
        )
    console.print(table)


if __name__ == "__main__":
    app()
