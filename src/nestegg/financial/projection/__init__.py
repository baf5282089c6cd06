"""Net-worth projection engine: history, today and future in one series."""

from .axis import build_date_axis, classify, month_starts, sample_interval
from .contributions import (
    AVG_DAYS_PER_MONTH,
    asset_contributions_at,
    contribution_at,
    contribution_up_to,
    months_elapsed,
    projected_contribution,
)
from .interpolator import ProjectionModel, current_prices
from .series import compute_series, unique_assets
from .targets import apply_horizon_preset, historical_growth_rate, suggest_target_price
from .valuation import historical_worth, resolve_worth

__all__ = [
    "AVG_DAYS_PER_MONTH",
    "ProjectionModel",
    "apply_horizon_preset",
    "asset_contributions_at",
    "build_date_axis",
    "classify",
    "compute_series",
    "contribution_at",
    "contribution_up_to",
    "current_prices",
    "historical_growth_rate",
    "historical_worth",
    "month_starts",
    "months_elapsed",
    "projected_contribution",
    "resolve_worth",
    "sample_interval",
    "suggest_target_price",
    "unique_assets",
]
