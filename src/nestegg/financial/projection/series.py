"""Assemble the full net-worth series.

``compute_series`` is a pure function of its inputs: identical transactions,
prices, rates and settings always yield an identical series, so callers
simply recompute whenever any input changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from loguru import logger

from ..models import (
    Asset,
    PointKind,
    PriceHistory,
    ProjectionConfig,
    ProjectionSeries,
    SeriesPoint,
    Transaction,
)
from .axis import build_date_axis, classify
from .contributions import asset_contributions_at, contribution_at, sum_by_asset
from .interpolator import ProjectionModel
from .valuation import resolve_worth


def unique_assets(transactions: Iterable[Transaction]) -> list[Asset]:
    """Assets in order of first appearance."""
    seen: dict[str, Asset] = {}
    for tx in transactions:
        if tx.asset is not None and tx.asset.asset_id not in seen:
            seen[tx.asset.asset_id] = tx.asset
    return list(seen.values())


def _valued_point(
    day: date,
    kind: PointKind,
    transactions: Sequence[Transaction],
    prices: PriceHistory,
) -> tuple[float, dict[str, float]]:
    """Net worth and clamped per-asset worth for a historical or today date."""
    worth = [
        (tx, resolve_worth(tx, day, kind, prices))
        for tx in transactions
        if tx.purchase_date is not None and tx.purchase_date <= day
    ]
    net_worth = sum(value for _, value in worth)
    by_asset = sum_by_asset((tx.asset_id, max(0.0, value)) for tx, value in worth)
    return net_worth, by_asset


def compute_series(
    transactions: Iterable[Transaction],
    prices: PriceHistory | dict[str, dict[date, float]] | None = None,
    rates: dict[str, float] | None = None,
    config: ProjectionConfig | None = None,
    *,
    today: date | None = None,
    currency: str | None = None,
    base_currency: str = "USD",
) -> ProjectionSeries:
    """Compute the historical, today and projected net-worth series.

    Args:
        transactions: Purchases and sales with asset metadata. Entries without
            a purchase date or quantity are ignored.
        prices: Historical prices keyed by uppercase symbol. Missing or
            partial data falls back to recorded amounts.
        rates: Base-pivoted exchange rates used for ``currency``.
        config: Projection settings; defaults to no projection.
        today: Pivot date (defaults to the current date).
        currency: Display currency; amounts stay in ``base_currency`` when None.
        base_currency: Currency the transactions are recorded in.

    Returns:
        A ProjectionSeries; empty (zero points) when there is nothing to value.
    """
    config = config or ProjectionConfig()
    today = today or date.today()
    if not isinstance(prices, PriceHistory):
        prices = PriceHistory(prices)

    usable = sorted(
        (tx for tx in transactions if tx.purchase_date is not None and tx.quantity is not None),
        key=lambda tx: tx.purchase_date,
    )
    assets = [a for a in unique_assets(usable) if config.is_selected(a.asset_id)]
    selected_ids = [a.asset_id for a in assets]

    if not usable:
        logger.debug("No dated transactions; returning an empty series")
        return ProjectionSeries(assets=assets, currency=base_currency, base_currency=base_currency)

    model = ProjectionModel.build(usable, today, config, prices)
    axis = build_date_axis((tx.purchase_date for tx in usable), today, model.end)

    points = []
    for day in axis:
        kind = classify(day, today)
        if kind == PointKind.PROJECTED:
            net_worth = model.net_worth_at(day)
            by_asset = model.asset_worth_at(day)
        else:
            net_worth, by_asset = _valued_point(day, kind, usable, prices)

        points.append(
            SeriesPoint(
                date=day,
                kind=kind,
                net_worth=net_worth,
                contributions=contribution_at(usable, day, today, config.funding),
                asset_worth={aid: by_asset.get(aid, 0.0) for aid in selected_ids},
                asset_contributions=asset_contributions_at(usable, day, today, config.funding, selected_ids),
            )
        )

    series = ProjectionSeries(
        points=points,
        today_net_worth=model.today_net_worth,
        projected_end_net_worth=model.projected_end_net_worth,
        assets=assets,
        currency=base_currency,
        base_currency=base_currency,
    )
    logger.debug(f"Computed {len(points)} points from {len(usable)} transactions")

    if currency and currency.upper() != base_currency.upper():
        return series.in_currency(currency.upper(), rates, base_currency=base_currency)
    return series
