"""nestegg project: print the net-worth series for a portfolio file."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import date

import click
from loguru import logger


def _parse_targets(values: tuple[str, ...]) -> dict[str, float]:
    targets = {}
    for value in values:
        asset_id, sep, price = value.partition("=")
        if not sep or not asset_id:
            raise click.BadParameter(f"expected ASSET=PRICE, got {value!r}", param_hint="--target")
        try:
            targets[asset_id.strip()] = float(price)
        except ValueError:
            raise click.BadParameter(f"price must be a number in {value!r}", param_hint="--target") from None
    return targets


@click.command()
@click.argument("portfolio_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="Config file (YAML or JSON).")
@click.option("--today", type=click.DateTime(formats=["%Y-%m-%d"]), help="Pivot date (defaults to today).")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), help="Project up to this date.")
@click.option("--years", type=click.IntRange(min=1), help="Project N years ahead with suggested target prices.")
@click.option("--target", "targets", multiple=True, metavar="ASSET=PRICE", help="Target price for an asset.")
@click.option("--monthly", type=float, help="Keep contributing this amount every month.")
@click.option("--growth", type=float, help="Annual growth of the monthly contribution (0.05 = 5%).")
@click.option("--currency", help="Display currency (e.g. EUR).")
@click.option("--fetch-prices", is_flag=True, help="Download historical prices before computing.")
@click.option("--json", "as_json", is_flag=True, help="Print the series as JSON.")
@click.option("--output", type=click.Path(dir_okay=False), help="Also write the JSON series to this file.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def project(
    portfolio_file: str,
    config_file: str | None,
    today,
    until,
    years: int | None,
    targets: tuple[str, ...],
    monthly: float | None,
    growth: float | None,
    currency: str | None,
    fetch_prices: bool,
    as_json: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Show historical, current and projected net worth for a portfolio."""
    from nestegg.core.cli.common import configure_logging, load_config
    from nestegg.core.exceptions import NestEggError
    from nestegg.core.utils.file_io import safe_write
    from nestegg.financial.loader import load_portfolio
    from nestegg.financial.market_data import create_client, load_price_history_sync
    from nestegg.financial.projection import apply_horizon_preset, compute_series

    if until and years:
        raise click.UsageError("Use either --until or --years, not both.")

    config = load_config(config_file)
    configure_logging(config, verbose)

    pivot: date = today.date() if today else date.today()
    try:
        portfolio = load_portfolio(portfolio_file, today=pivot)
    except NestEggError as e:
        raise click.ClickException(str(e)) from e

    prices = portfolio.prices
    if fetch_prices:
        client = create_client(config.get("market_data.provider", "yahoo"), config.get_int("market_data.timeout", 20))
        fetched = load_price_history_sync(
            portfolio.transactions, pivot, client, config.get_int("market_data.max_concurrency", 8)
        )
        for symbol in fetched.symbols:
            prices.add(symbol, fetched.get(symbol) or {})

    settings = portfolio.projection
    if until:
        settings = replace(settings, projection_date=until.date())
    if years:
        settings = apply_horizon_preset(settings, years, portfolio.transactions, prices, pivot)
    if targets:
        settings = replace(settings, target_prices={**settings.target_prices, **_parse_targets(targets)})
    funding = settings.funding
    if monthly is not None:
        funding = replace(funding, enabled=monthly > 0, monthly_amount=monthly)
    if growth is not None:
        funding = replace(funding, progressive_growth=growth > 0, annual_growth_rate=growth)
    settings = replace(settings, funding=funding)
    settings = settings.reconcile(set(portfolio.assets))

    if settings.projection_date and settings.effective_end(pivot) is None:
        logger.warning(f"Projection date {settings.projection_date} is not after {pivot}; showing history only")

    display_currency = (currency or config.get("display.currency") or portfolio.base_currency).upper()
    series = compute_series(
        portfolio.transactions,
        prices,
        portfolio.rates,
        settings,
        today=pivot,
        currency=display_currency,
        base_currency=portfolio.base_currency,
    )

    payload = {
        "currency": series.currency,
        "today_net_worth": series.today_net_worth,
        "projected_end_net_worth": series.projected_end_net_worth,
        "assets": [{"id": a.asset_id, "name": a.name, "symbol": a.symbol, "color": a.color} for a in series.assets],
        "points": series.to_records(),
    }
    if output:
        safe_write(output, json.dumps(payload, indent=2))
        logger.info(f"Wrote {len(series)} points to {output}")

    if as_json:
        click.echo(json.dumps(payload, indent=2))
        return

    if not series.points:
        click.echo("No investment data available.")
        return

    _print_table(series)


def _print_table(series) -> None:  # type: ignore[no-untyped-def]
    try:
        from rich.console import Console
        from rich.table import Table
    except ImportError:
        raise click.ClickException("Install rich: pip install rich")

    from nestegg.financial.currency import format_currency

    table = Table(title=f"Net worth ({series.currency})")
    table.add_column("Date")
    table.add_column("Kind")
    table.add_column("Net worth", justify="right")
    table.add_column("Contributions", justify="right")
    for point in series.points:
        style = "cyan" if point.is_projected else None
        table.add_row(
            point.date.isoformat(),
            str(point.kind),
            format_currency(point.net_worth, series.currency),
            format_currency(point.contributions, series.currency),
            style=style,
        )

    Console().print(table)
    click.echo(f"Today: {format_currency(series.today_net_worth, series.currency)}")
    if series.projected_end_net_worth is not None:
        click.echo(f"Projected: {format_currency(series.projected_end_net_worth, series.currency)}")
