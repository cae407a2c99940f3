"""Click-based CLI for market-returns.

Thin wrapper around library modules. Commands hold no business logic and
delegate to the orchestrator, snapshot, or registry modules.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from market_returns.core.models import PeriodType, ReturnSet

console = Console(stderr=True)

_EMPTY = ReturnSet.empty()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from market_returns.core import ConfigError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigError as e:
            raise click.ClickException(f"Configuration error: {e}") from e
        _configure_logging(ctx.obj["config"].logging.level, ctx.obj.get("verbose", False))
    return ctx.obj["config"]


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _return_style(return_pct: float | None) -> str:
    if return_pct is None:
        return "dim"
    return "green" if return_pct >= 0 else "red"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="MARKET_RETURNS_CONFIG",
    default=None,
    help="Path to market-returns.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="market-returns")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Market Returns: periodic return heatmap data for tracked markets."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console


# ---------------------------------------------------------------------------
# fetch
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Snapshot path (default: snapshot.path from config).",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Deadline in seconds for the whole batch.",
)
@click.pass_context
def fetch(ctx: click.Context, output: str | None, timeout: float | None) -> None:
    """Fetch all markets, compute returns, and write the snapshot."""
    from market_returns.core import ConfigError, SnapshotError
    from market_returns.engine import BatchOrchestrator
    from market_returns.snapshot import save_snapshot

    config = _load_config(ctx)
    try:
        orchestrator = BatchOrchestrator(config.sources, registry=config.registry())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"Fetching [bold]{len(orchestrator.registry)}[/bold] markets...")
    try:
        report = _run_async(orchestrator.run_detailed(timeout=timeout))
    except TimeoutError as e:
        raise click.ClickException(f"Batch exceeded {timeout}s deadline") from e

    path = output or config.snapshot.path
    try:
        save_snapshot(report.dataset, path)
    except SnapshotError as e:
        raise click.ClickException(str(e)) from e

    _output_fetch_summary(report)
    console.print(f"[green]Snapshot saved to {path}[/green]")


def _output_fetch_summary(report) -> None:
    """Per-source success counts, failures, and the display range."""
    totals = Counter(o.source for o in report.outcomes)
    failed = Counter(o.source for o in report.failures)

    table = Table(title="Fetch Summary")
    table.add_column("Source", style="bold")
    table.add_column("Markets", justify="right")
    table.add_column("OK", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    for source, total in totals.items():
        table.add_row(str(source), str(total), str(total - failed[source]), str(failed[source]))
    console.print(table)

    for outcome in report.failures:
        console.print(f"[red]  ✗ {outcome.instrument_id}: {outcome.error}[/red]")

    meta = report.dataset.metadata
    if meta.data_start:
        console.print(f"Date range: {meta.data_start} → {meta.data_end}")
    else:
        console.print("[yellow]No market produced any data.[/yellow]")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--snapshot",
    "-s",
    "snapshot_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Snapshot to read (default: snapshot.path from config).",
)
@click.option(
    "--period",
    "-p",
    type=click.Choice([p.value for p in PeriodType], case_sensitive=False),
    default=PeriodType.YEARLY.value,
    help="Return granularity.",
)
@click.option("--market", "-m", type=str, default=None, help="Show a single market id.")
@click.option("--last", "-n", type=int, default=5, help="Number of most recent periods.")
@click.option("--from-year", type=int, default=None, help="Earliest year to include.")
@click.option("--to-year", type=int, default=None, help="Latest year to include.")
@click.pass_context
def show(
    ctx: click.Context,
    snapshot_path: str | None,
    period: str,
    market: str | None,
    last: int,
    from_year: int | None,
    to_year: int | None,
) -> None:
    """Render a returns table from the persisted snapshot."""
    from market_returns.core import SnapshotError
    from market_returns.display import format_return, period_year, year_range
    from market_returns.registry import get_market
    from market_returns.snapshot import load_snapshot

    config = _load_config(ctx)
    path = snapshot_path or config.snapshot.path
    try:
        dataset = load_snapshot(path)
    except SnapshotError as e:
        raise click.ClickException(str(e)) from e

    markets = dataset.markets
    if market is not None:
        selected = get_market(markets, market)
        if selected is None:
            raise click.UsageError(f"Unknown market id: {market}")
        markets = [selected]

    period_type = PeriodType(period.lower())
    all_periods = sorted(
        {
            r.period
            for m in markets
            for r in dataset.returns.get(m.id, _EMPTY).for_period(period_type)
        }
    )
    if all_periods:
        first, final = year_range(all_periods)
        first = max(first, from_year) if from_year is not None else first
        final = min(final, to_year) if to_year is not None else final
        all_periods = [p for p in all_periods if first <= period_year(p) <= final]
    periods = all_periods[-last:] if last > 0 else []

    table = Table(title=f"{period_type.value.title()} Returns")
    table.add_column("Market", style="bold")
    for p in periods:
        table.add_column(p, justify="right")

    for m in markets:
        by_period = {
            r.period: r.return_pct
            for r in dataset.returns.get(m.id, _EMPTY).for_period(period_type)
        }
        cells = []
        for p in periods:
            pct = by_period.get(p)
            cells.append(f"[{_return_style(pct)}]{format_return(pct)}[/]")
        table.add_row(m.name, *cells)

    console.print(table)
    meta = dataset.metadata
    console.print(
        f"Last updated {meta.last_updated.isoformat()} "
        f"({meta.data_start or 'N/A'} → {meta.data_end or 'N/A'})"
    )


# ---------------------------------------------------------------------------
# markets
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def markets(ctx: click.Context) -> None:
    """List the active market registry by category."""
    from market_returns.registry import sorted_categories

    config = _load_config(ctx)
    registry = config.registry()

    table = Table(title="Tracked Markets")
    table.add_column("Category", style="bold")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Series")

    for key, info in sorted_categories():
        for m in registry:
            if m.category == key:
                table.add_row(info.label, m.id, m.name, str(m.source), m.source_id)

    console.print(table)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default: api.host).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default: api.port).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting market-returns API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "market_returns.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
