"""
Command-line interface for dividend-tracker.

Usage:
    dividend-tracker refresh [--owner ID]     # Refresh cached valuations
    dividend-tracker valuation KO 10          # Value a position, nothing stored
    dividend-tracker add KO 10 [--owner ID]   # Register a holding
    dividend-tracker init-db                  # Create the holdings table
    dividend-tracker health                   # Check dependencies
    dividend-tracker serve                    # Run the API server
"""

import asyncio
import json
import signal
import sys

import click

from dividend_tracker.config.settings import get_settings
from dividend_tracker.observability.logging import setup_logging
from dividend_tracker.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Dividend Tracker - portfolio valuation and dividend income."""
    setup_logging(level="DEBUG" if debug else None)


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


@main.command()
@click.option("--owner", default=None, help="Only refresh this owner's holdings")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
def refresh(owner: str | None, as_json: bool) -> None:
    """Refresh price and yield for every holding in scope."""
    from dividend_tracker.context import ServiceContext
    from dividend_tracker.holdings.schemas import Scope

    async def run():
        cancel_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            pass  # no signal support on this platform/thread

        context = await ServiceContext.create()
        try:
            return await context.holdings.refresh(Scope(owner_id=owner), cancel_event)
        finally:
            await context.close()

    summary = asyncio.run(run())

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    for result in summary.results:
        marker = "*" if result.changed else " "
        click.echo(
            f" {marker} {result.ticker:<8} price {result.old_price:.2f} -> "
            f"{result.new_price:.2f}  yield {result.old_yield:.2f}% -> "
            f"{result.new_yield:.2f}%"
        )
    for ticker in summary.failed:
        click.echo(click.style(f" ! {ticker:<8} refresh failed", fg="red"))

    click.echo("-" * 40)
    click.echo(
        f"Processed: {summary.processed}  Updated: {summary.updated}  "
        f"Unchanged: {summary.unchanged}  Failed: {len(summary.failed)}"
    )
    if summary.cancelled:
        click.echo(click.style("Refresh cancelled before completion", fg="yellow"))


@main.command()
@click.argument("symbol")
@click.argument("shares", type=click.IntRange(min=1))
def valuation(symbol: str, shares: int) -> None:
    """Value SHARES of SYMBOL without storing anything."""
    from dividend_tracker.errors import DataUnavailable
    from dividend_tracker.market_data.client import MarketDataClient
    from dividend_tracker.valuation.composer import ValuationComposer

    async def run():
        async with MarketDataClient() as client:
            return await ValuationComposer(client).compose(symbol, shares)

    try:
        result = asyncio.run(run())
    except (DataUnavailable, ValueError) as e:
        _fail(str(e))
        return

    click.echo(f"{result.ticker} - {result.company}")
    click.echo(f"  Shares:           {result.shares}")
    click.echo(f"  Price:            ${result.price:.2f}")
    click.echo(f"  Total value:      ${result.total_value:.2f}")
    click.echo(f"  Annual dividend:  ${result.annual_dividend:.4f}")
    click.echo(f"  Dividend yield:   {result.dividend_yield:.2f}%")
    click.echo(f"  Monthly dividend: ${result.monthly_dividend:.2f}")


@main.command()
@click.argument("symbol")
@click.argument("shares", type=click.IntRange(min=1))
@click.option("--owner", default=None, help="Owner id for the holding")
def add(symbol: str, shares: int, owner: str | None) -> None:
    """Register SHARES of SYMBOL as a holding."""
    from dividend_tracker.context import ServiceContext
    from dividend_tracker.errors import Conflict, DataUnavailable
    from dividend_tracker.holdings.schemas import Scope

    async def run():
        context = await ServiceContext.create()
        try:
            return await context.holdings.create_holding(
                symbol, shares, Scope(owner_id=owner)
            )
        finally:
            await context.close()

    try:
        holding = asyncio.run(run())
    except (Conflict, DataUnavailable, ValueError) as e:
        _fail(str(e))
        return

    click.echo(
        f"Added {holding.ticker} ({holding.company}): {holding.shares} shares, "
        f"value ${holding.total_value:.2f}, yield {holding.dividend_yield:.2f}%"
    )
    click.echo(f"Holding id: {holding.id}")


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from dividend_tracker.holdings.repository import HoldingRepository
    from dividend_tracker.holdings.schemas import Scope
    from dividend_tracker.storage.database import Database

    async def run():
        db = Database()
        await db.connect()
        try:
            repo = HoldingRepository(db)
            await repo.create_table()
            existing = await repo.count(Scope.everyone())
        finally:
            await db.close()

        click.echo(f"Database initialized successfully ({existing} holdings)")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import asyncpg
    import structlog

    from dividend_tracker.auth.config import AuthConfig
    from dividend_tracker.market_data.config import MarketDataConfig
    from dividend_tracker.storage.database import Database

    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            db = Database()
            await db.connect()
            results["postgres"] = await db.health_check()
            await db.close()
        except (asyncpg.PostgresError, OSError) as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        results["fmp_configured"] = bool(MarketDataConfig().api_key)
        results["auth_configured"] = AuthConfig().is_configured

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))

        click.echo("-" * 40)

        if results["postgres"]:
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "dividend_tracker.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
