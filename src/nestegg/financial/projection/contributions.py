"""Cumulative principal invested, independent of market prices.

Contributions only depend on what was paid for each trade, so the series is
stable while historical prices are still loading.
"""

import math
from collections.abc import Iterable, Sequence
from datetime import date
from itertools import groupby
from operator import itemgetter

from ..models import FundingPlan, Transaction

AVG_DAYS_PER_MONTH = 30.44


def sum_by_asset(items: Iterable[tuple[str | None, float]]) -> dict[str, float]:
    """Group ``(asset_id, amount)`` pairs and sum each group.

    Pairs without an asset id are dropped. Order within a group is preserved,
    so identical inputs always give identical floating-point sums.
    """
    keyed = sorted(((aid, amount) for aid, amount in items if aid is not None), key=itemgetter(0))
    return {aid: sum(amount for _, amount in group) for aid, group in groupby(keyed, key=itemgetter(0))}


def months_elapsed(day: date, today: date) -> float:
    """Fractional months from today to ``day``; zero for past dates."""
    return max(0.0, (day - today).days / AVG_DAYS_PER_MONTH)


def projected_contribution(plan: FundingPlan, months: float) -> float:
    """Total future contributions over ``months`` under a funding plan.

    Progressive plans grow the monthly amount by ``annual_growth_rate / 12``
    each month (one payment per started month); flat plans scale linearly.
    """
    if not plan.is_active or months <= 0:
        return 0.0
    if plan.progressive_growth and plan.annual_growth_rate > 0:
        factor = 1 + plan.annual_growth_rate / 12
        return sum(plan.monthly_amount * factor**month for month in range(math.ceil(months)))
    return plan.monthly_amount * months


def contribution_up_to(transactions: Iterable[Transaction], day: date) -> float:
    """Signed principal of every transaction dated on or before ``day``."""
    return sum(tx.cost_basis for tx in transactions if tx.purchase_date is not None and tx.purchase_date <= day)


def contributions_by_asset(transactions: Iterable[Transaction], day: date) -> dict[str, float]:
    """Signed principal per asset up to ``day``."""
    return sum_by_asset(
        (tx.asset_id, tx.cost_basis)
        for tx in transactions
        if tx.purchase_date is not None and tx.purchase_date <= day
    )


def contribution_at(
    transactions: Sequence[Transaction],
    day: date,
    today: date,
    plan: FundingPlan,
) -> float:
    """Cumulative contribution on ``day``, extended by the funding plan after today."""
    total = contribution_up_to(transactions, day)
    if day > today:
        total += projected_contribution(plan, months_elapsed(day, today))
    return total


def asset_contributions_at(
    transactions: Sequence[Transaction],
    day: date,
    today: date,
    plan: FundingPlan,
    asset_ids: Iterable[str],
) -> dict[str, float]:
    """Per-asset cumulative contributions for display, clamped at zero.

    Future funding is split by each asset's share of today's total
    contribution.
    """
    totals = contributions_by_asset(transactions, day)

    extra = projected_contribution(plan, months_elapsed(day, today)) if day > today else 0.0
    if extra:
        today_totals = contributions_by_asset(transactions, today)
        grand_total = sum(today_totals.values())
        if grand_total > 0:
            totals = {
                aid: totals.get(aid, 0.0) + extra * today_totals.get(aid, 0.0) / grand_total
                for aid in totals.keys() | today_totals.keys()
            }

    return {aid: max(0.0, totals.get(aid, 0.0)) for aid in asset_ids}
