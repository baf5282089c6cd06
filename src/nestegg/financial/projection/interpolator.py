"""Future worth between today's valuation and a projected end state.

Two reference points are computed once per series:

- today: every held position at live prices (signs preserved)
- end: every position at its target price, plus future contributions
  allocated across non-cash assets by today's holdings weight

Dates in between are linearly interpolated. The portfolio total is never
clamped so that sales reduce it; per-asset values are clamped at zero for
stacked display.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from loguru import logger

from ..models import PointKind, PriceHistory, ProjectionConfig, Transaction
from .contributions import months_elapsed, projected_contribution, sum_by_asset
from .valuation import resolve_worth

# Positions worth less than this today are not projected forward
_MIN_HELD_WORTH = 0.01


def current_prices(transactions: Sequence[Transaction]) -> dict[str, float]:
    """Latest known live price per asset (transactions in date order)."""
    prices: dict[str, float] = {}
    for tx in transactions:
        price = tx.live_price
        if tx.asset_id is not None and price is not None:
            prices[tx.asset_id] = price
    return prices


@dataclass(frozen=True)
class ProjectionModel:
    """Reference valuations and interpolation over the projection segment.

    Attributes:
        today: Pivot date.
        end: Projection end date, or None when there is no projection.
        today_net_worth: Total worth of held positions today.
        projected_end_net_worth: Total worth at ``end`` (None without projection).
        asset_today_worth: Per-asset worth today, positions clamped at zero.
        asset_end_worth: Per-asset worth at ``end``, positions clamped at zero.
    """

    today: date
    end: date | None
    today_net_worth: float
    projected_end_net_worth: float | None = None
    asset_today_worth: dict[str, float] = field(default_factory=dict)
    asset_end_worth: dict[str, float] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        transactions: Sequence[Transaction],
        today: date,
        config: ProjectionConfig,
        prices: PriceHistory,
    ) -> ProjectionModel:
        """Compute both reference points for dated, date-sorted transactions."""
        held = [tx for tx in transactions if tx.purchase_date is not None and tx.purchase_date <= today]
        today_worth = [(tx, resolve_worth(tx, today, PointKind.TODAY, prices)) for tx in held]
        today_net_worth = sum(worth for _, worth in today_worth)
        asset_today = sum_by_asset((tx.asset_id, max(0.0, worth)) for tx, worth in today_worth)

        end = config.effective_end(today)
        if end is None:
            return cls(today=today, end=None, today_net_worth=today_net_worth, asset_today_worth=asset_today)

        end_worth = [(tx, _end_worth(tx, worth, config)) for tx, worth in today_worth]
        allocation = _funding_allocation(today_worth, transactions, today, end, config)

        projected_end_net_worth = sum(worth for _, worth in end_worth) + sum(allocation.values())

        asset_end = sum_by_asset((tx.asset_id, max(0.0, worth)) for tx, worth in end_worth)
        for asset_id, amount in allocation.items():
            asset_end[asset_id] = asset_end.get(asset_id, 0.0) + amount

        logger.debug(
            f"Projection {today} -> {end}: {today_net_worth:,.2f} -> {projected_end_net_worth:,.2f} "
            f"({len(allocation)} assets funded)"
        )
        return cls(
            today=today,
            end=end,
            today_net_worth=today_net_worth,
            projected_end_net_worth=projected_end_net_worth,
            asset_today_worth=asset_today,
            asset_end_worth=asset_end,
        )

    def progress(self, day: date) -> float:
        """Fraction of the projection horizon elapsed at ``day``, in [0, 1]."""
        if self.end is None:
            return 0.0
        fraction = (day - self.today).days / (self.end - self.today).days
        return max(0.0, min(1.0, fraction))

    def net_worth_at(self, day: date) -> float:
        """Portfolio total at ``day``; exact end value on the end date."""
        if self.end is None or self.projected_end_net_worth is None:
            return self.today_net_worth
        if day == self.end:
            return self.projected_end_net_worth
        return _lerp(self.today_net_worth, self.projected_end_net_worth, self.progress(day))

    def asset_worth_at(self, day: date) -> dict[str, float]:
        """Per-asset worth at ``day``, each clamped at zero.

        Assets not held today stay at zero for the whole projection.
        """
        progress = self.progress(day)
        at_end = self.end is not None and day == self.end

        worth: dict[str, float] = {}
        for asset_id, today_value in self.asset_today_worth.items():
            if abs(today_value) < _MIN_HELD_WORTH:
                worth[asset_id] = 0.0
                continue
            end_value = self.asset_end_worth.get(asset_id, today_value)
            value = end_value if at_end else _lerp(today_value, end_value, progress)
            worth[asset_id] = max(0.0, value)
        return worth


def _lerp(start: float, end: float, fraction: float) -> float:
    return start + (end - start) * fraction


def _end_worth(tx: Transaction, today_worth: float, config: ProjectionConfig) -> float:
    """Worth of one position at the projection end, before new contributions."""
    if tx.is_currency_like:
        return today_worth
    target = config.target_price(tx.asset_id)
    if target is None:
        # No target means "stays at the current price"
        return today_worth
    return tx.worth_at_price(target)


def _funding_allocation(
    today_worth: Sequence[tuple[Transaction, float]],
    transactions: Sequence[Transaction],
    today: date,
    end: date,
    config: ProjectionConfig,
) -> dict[str, float]:
    """End-date value of future contributions, per asset.

    Contributions are split by each asset's share of today's positive
    non-cash holdings and grown by ``target / current`` price, assuming new
    money buys along the average growth path.
    """
    total = projected_contribution(config.funding, months_elapsed(end, today))
    if total <= 0:
        return {}

    weights = sum_by_asset(
        (tx.asset_id, worth) for tx, worth in today_worth if not tx.is_currency_like and worth > 0
    )
    weight_total = sum(weights.values())
    if weight_total <= 0:
        logger.debug("No appreciating holdings to allocate future contributions to")
        return {}

    live = current_prices(transactions)
    allocation = {}
    for asset_id, weight in weights.items():
        portion = total * weight / weight_total
        current = live.get(asset_id)
        target = config.target_price(asset_id)
        if current and current > 0 and target and target > 0:
            portion *= target / current
        allocation[asset_id] = portion
    return allocation
