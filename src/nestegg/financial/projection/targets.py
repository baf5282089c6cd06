"""Suggested target prices for projection horizons.

When the user picks a horizon preset (1, 5, 10 years, ...) each selected
asset gets a target price grown at its trailing one-year rate, falling back
to a flat 10% a year when there is not enough price history.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date, timedelta

from loguru import logger

from ..models import PriceHistory, ProjectionConfig, Transaction
from .interpolator import current_prices
from .series import unique_assets

DEFAULT_ANNUAL_GROWTH = 0.10
MIN_ANNUAL_GROWTH = -0.5
MAX_ANNUAL_GROWTH = 2.0

# How far back to search for the "now" and "one year ago" prices
_RECENT_WINDOW_DAYS = 30
_YEAR_AGO_WINDOW_DAYS = 60


def _latest_price(history: dict[date, float], anchor: date, window_days: int) -> float | None:
    for offset in range(window_days):
        price = history.get(anchor - timedelta(days=offset))
        if price is not None:
            return price
    return None


def historical_growth_rate(history: dict[date, float] | None, today: date) -> float:
    """Trailing one-year growth rate, clamped to [-50%, +200%]."""
    if not history:
        return DEFAULT_ANNUAL_GROWTH

    recent = _latest_price(history, today, _RECENT_WINDOW_DAYS)
    year_ago = _latest_price(history, today - timedelta(days=365), _YEAR_AGO_WINDOW_DAYS)
    if not recent or not year_ago or year_ago <= 0:
        return DEFAULT_ANNUAL_GROWTH

    growth = (recent - year_ago) / year_ago
    return max(MIN_ANNUAL_GROWTH, min(MAX_ANNUAL_GROWTH, growth))


def suggest_target_price(
    current_price: float | None,
    years: float,
    history: dict[date, float] | None,
    today: date,
    currency_like: bool = False,
) -> float | None:
    """Compound the current price over ``years`` at the historical rate."""
    if not current_price or currency_like:
        return current_price
    rate = historical_growth_rate(history, today)
    return current_price * (1 + rate) ** years


def add_years(day: date, years: int) -> date:
    """Same calendar day ``years`` later (Feb 29 maps to Feb 28)."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def apply_horizon_preset(
    config: ProjectionConfig,
    years: int,
    transactions: Sequence[Transaction],
    prices: PriceHistory,
    today: date,
) -> ProjectionConfig:
    """Set the projection ``years`` ahead and suggest targets for selected assets.

    Targets already set for unselected assets are kept.
    """
    if years <= 0:
        raise ValueError(f"Horizon must be at least one year, got {years}")

    live = current_prices(sorted((tx for tx in transactions if tx.purchase_date), key=lambda tx: tx.purchase_date))
    targets = dict(config.target_prices)
    for asset in unique_assets(transactions):
        if not config.is_selected(asset.asset_id):
            continue
        current = live.get(asset.asset_id)
        if current is None:
            logger.debug(f"No current price for {asset.name}; leaving its target unset")
            continue
        targets[asset.asset_id] = suggest_target_price(
            current, years, prices.get(asset.price_key), today, asset.is_currency_like
        )

    return replace(config, projection_date=add_years(today, years), target_prices=targets)
