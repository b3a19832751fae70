"""Unified CLI entry point for the energy price dashboard.

Provides a single command-line interface with subcommands:
dashboard (all panels for a date), prices (one source to CSV) and check
(publication monitoring).
"""

import datetime as dt
import json
from pathlib import Path

from loguru import logger
import typer

from var_energy.config import DISPLAY_TZ, FIGURES_DIR

app = typer.Typer(help="Electricity spot-price dashboard CLI.")


def _parse_date(value: str | None) -> dt.date:
    from var_energy.dashboard import to_date, today

    if value is None or value == "today":
        return today(DISPLAY_TZ)
    try:
        return to_date(value, DISPLAY_TZ)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def _print_panel(panel) -> None:
    from var_energy.data.series import get_warnings
    from var_energy.features.units import CANONICAL_UNIT

    header = f"{panel.title} | {panel.target_date:%d.%m.%Y} | Source: {panel.source}"
    typer.echo(header)
    if not panel.has_data:
        typer.echo(f"  No data available. {panel.error or ''}".rstrip())
        return
    values = panel.series["value"]
    typer.echo(
        f"  {len(values)} points, min {values.min():.2f}, mean {values.mean():.2f}, "
        f"max {values.max():.2f} {CANONICAL_UNIT}"
    )
    if panel.source == "derived":
        return
    for warning in get_warnings(panel.series):
        typer.echo(f"  Warning: {warning}")


@app.command()
def dashboard(
    date: str = typer.Option(None, "--date", "-d", help="Day to show (YYYY-MM-DD, default today)."),
    prev: bool = typer.Option(False, "--prev", help="Show the day before --date."),
    next_: bool = typer.Option(False, "--next", help="Show the day after --date."),
    overhead: float = typer.Option(None, help="Retail overhead in ct/kWh for simulated prices."),
    zone: str = typer.Option("DE-LU", help="ENTSO-E bidding zone."),
    delta_mode: str = typer.Option("timestamp", help="Delta alignment: 'timestamp' or 'position'."),
    plot: Path = typer.Option(None, "--plot", "-p", help="Write the charts to this PNG file."),
    table: bool = typer.Option(False, "--table", help="Print the combined price table."),
):
    """Fetch all panels for a date and print them (optionally render the charts)."""
    from var_energy.dashboard import DashboardSession
    from var_energy.plots import combined_table, plot_dashboard

    session = DashboardSession(
        _parse_date(date), overhead=overhead, zone=zone, delta_mode=delta_mode
    )
    if prev:
        session.prev_day()
    if next_:
        session.next_day()

    try:
        session.refresh()
    except Exception as e:
        logger.exception("Dashboard failed")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    result = session.result
    typer.echo(f"Energy Overview {result.selected_date:%d.%m.%Y}")
    for panel in result.panels.values():
        _print_panel(panel)

    if table:
        combined = combined_table(result, DISPLAY_TZ)
        if combined.empty:
            typer.echo("No combined data available")
        else:
            typer.echo(combined.round(2).to_string())

    if plot is not None:
        plot_dashboard(result, plot)

    if result.errors:
        logger.warning(f"{len(result.errors)} panel(s) without data: {list(result.errors)}")
    else:
        logger.success("Dashboard complete.")


@app.command()
def prices(
    source: str = typer.Argument("entsoe", help="Data source: 'entsoe' or 'octopus'."),
    date: str = typer.Option(None, "--date", "-d", help="Day to fetch (YYYY-MM-DD, default today)."),
    zone: str = typer.Option("DE-LU", help="ENTSO-E bidding zone (entsoe only)."),
    raw: bool = typer.Option(False, "--raw", help="Keep source units instead of ct/kWh."),
    output: Path = typer.Option(None, "--output", "-o", help="Output path."),
    as_json: bool = typer.Option(False, "--json", help="Write chart rows as JSON instead of CSV."),
):
    """Fetch one source for one day and write it as CSV (or chart-ready JSON)."""
    from var_energy.config import entsoe as entsoe_config
    from var_energy.config import octopus as octopus_config
    from var_energy.data.errors import PriceSourceError
    from var_energy.features.units import normalize_series

    target_date = _parse_date(date)

    try:
        if source == "entsoe":
            from var_energy.data.entsoe import fetch_day_ahead_prices

            df = fetch_day_ahead_prices(target_date, zone=zone)
            unit = entsoe_config.PRICE_UNIT
        elif source == "octopus":
            from var_energy.data.octopus import fetch_octopus_prices

            df = fetch_octopus_prices(target_date)
            unit = octopus_config.PRICE_UNIT
        else:
            raise typer.BadParameter(f"Unknown source '{source}'. Use 'entsoe' or 'octopus'.")
    except PriceSourceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not raw:
        df = normalize_series(df, unit)

    if output is None:
        suffix = "json" if as_json else "csv"
        output = FIGURES_DIR.parent / f"{source}_{target_date:%Y%m%d}.{suffix}"
    output.parent.mkdir(parents=True, exist_ok=True)
    if as_json:
        from var_energy.plots import to_chart_data

        output.write_text(json.dumps(to_chart_data(df, DISPLAY_TZ), indent=2))
    else:
        df.to_csv(output)
    logger.success(f"Saved {len(df)} {source} prices to {output}")


@app.command()
def check(
    date: str = typer.Option(None, "--date", "-d", help="Day to check (default tomorrow)."),
):
    """Check whether prices for a day are published."""
    from var_energy.monitoring import monitor_publication

    target_date = _parse_date(date) if date is not None else None
    raise typer.Exit(code=monitor_publication(target_date))


if __name__ == "__main__":
    app()
