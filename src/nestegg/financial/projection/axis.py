"""Date axis for the net-worth series.

The historical segment is sampled at a density chosen by its span so the
number of points stays bounded; the projection segment is monthly only,
anchored on today and the exact projection end date.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from ..models import PointKind

# (exclusive upper bound on span in days, sampling interval in days)
_SAMPLING_STEPS = (
    (90, 1),
    (365, 3),
    (730, 7),
)
_LONG_SPAN_INTERVAL = 14


def sample_interval(span_days: int) -> int:
    """Sampling interval for a historical segment of ``span_days`` days."""
    for bound, interval in _SAMPLING_STEPS:
        if span_days < bound:
            return interval
    return _LONG_SPAN_INTERVAL


def month_starts(after: date, until: date) -> list[date]:
    """First-of-month dates strictly after ``after`` and on or before ``until``."""
    year, month = after.year, after.month
    starts = []
    while True:
        month += 1
        if month > 12:
            year, month = year + 1, 1
        current = date(year, month, 1)
        if current > until:
            return starts
        starts.append(current)


def build_date_axis(
    transaction_dates: Iterable[date],
    today: date,
    projection_end: date | None = None,
) -> list[date]:
    """Build the sorted, deduplicated list of sample dates.

    Args:
        transaction_dates: Purchase dates of every dated transaction.
        today: The pivot between history and projection.
        projection_end: End of the projection; ignored unless after today.

    Returns:
        Dates covering ``[min(transaction_dates), max(today, projection_end)]``,
        or an empty list when there are no transactions. When every
        transaction is dated after today, nothing before the first one is
        sampled, so the list is empty unless the projection reaches it.
    """
    dates = sorted(set(transaction_dates))
    if not dates:
        return []
    if projection_end is not None and projection_end <= today:
        projection_end = None

    start = dates[0]
    # Today belongs to the projection segment when there is one
    historical_end = today - timedelta(days=1) if projection_end else today

    if start > today and (projection_end is None or start > projection_end):
        return []

    axis: set[date] = {today} if start <= today else {start}
    if start <= historical_end:
        span = (historical_end - start).days + 1
        step = sample_interval(span)
        axis.update(start + timedelta(days=offset) for offset in range(0, span, step))
        axis.add(historical_end)
        axis.update(d for d in dates if d <= historical_end)

    if projection_end:
        axis.update(d for d in month_starts(today, projection_end) if d >= start)
        axis.add(projection_end)

    return sorted(axis)


def classify(day: date, today: date) -> PointKind:
    """Tag an axis date as historical, today or projected."""
    if day < today:
        return PointKind.HISTORICAL
    if day == today:
        return PointKind.TODAY
    return PointKind.PROJECTED
