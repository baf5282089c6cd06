"""Financial models, currency conversion and the net-worth projection engine."""

from .currency import convert_currency, format_currency
from .models import (
    Asset,
    FundingPlan,
    PointKind,
    PriceHistory,
    ProjectionConfig,
    ProjectionSeries,
    SeriesPoint,
    Transaction,
)
from .projection import compute_series

__all__ = [
    "Asset",
    "FundingPlan",
    "PointKind",
    "PriceHistory",
    "ProjectionConfig",
    "ProjectionSeries",
    "SeriesPoint",
    "Transaction",
    "compute_series",
    "convert_currency",
    "format_currency",
]
