"""Core financial data models.

Generic representations of assets, investment transactions, market price
history and the projection configuration. Any data source (Notion, a
spreadsheet export, manual YAML) can produce these models.

Amounts are plain floats in the portfolio's base currency; conversion to a
display currency happens on the finished series only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any

from loguru import logger

from nestegg.core.types import PriceMap

# Fiat codes that are held as cash rather than priced from market history
FIAT_SYMBOLS = frozenset({"USD", "EUR", "GBP", "JPY", "CAD", "AUD"})

# Historical lookups step back at most this many extra days
PRICE_LOOKBACK_DAYS = 6


def to_date(value: Any) -> date | None:
    """Normalise an ISO string, datetime or date to a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            logger.warning(f"Ignoring unparseable date: {value!r}")
            return None
    raise TypeError(f"Cannot interpret {type(value).__name__} as a date")


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass
class Asset:
    """A tradeable or cash-like instrument.

    Attributes:
        asset_id: Unique identifier (string for portability).
        name: Human-readable name.
        symbol: Ticker or currency code (optional).
        color: Fixed display color for charts (optional).
        currency_like: Explicit cash classification. When None it is
            inferred from the symbol being a known fiat code.
    """

    asset_id: str
    name: str
    symbol: str | None = None
    color: str | None = None
    currency_like: bool | None = None

    def __post_init__(self):
        if not self.asset_id:
            raise ValueError("Asset id cannot be empty")
        if self.symbol is not None:
            self.symbol = self.symbol.strip() or None

    @property
    def price_key(self) -> str | None:
        """Uppercase symbol used to key price history."""
        return self.symbol.upper() if self.symbol else None

    @property
    def is_currency_like(self) -> bool:
        """Cash-equivalent assets never appreciate."""
        if self.currency_like is not None:
            return self.currency_like
        return self.price_key in FIAT_SYMBOLS


@dataclass
class Transaction:
    """A single purchase or sale of an asset.

    Sales are expressed with a negative quantity and/or negative price.
    Worth magnitudes are computed from absolute values; the disposal sign is
    applied afterwards so that totals are reduced by sales.

    Attributes:
        transaction_id: Unique identifier.
        asset: The asset bought or sold.
        quantity: Signed number of units.
        purchase_price: Price per unit at purchase.
        purchase_date: Calendar date of the trade.
        current_price: Live market price per unit.
        current_value: Live market value of the position.
        current_worth: Pre-computed live worth (takes precedence).
        recorded_amount: Explicitly recorded total cost of the trade.
        currency: Currency the amounts are recorded in.
    """

    transaction_id: str
    asset: Asset | None
    quantity: float | None
    purchase_price: float | None = None
    purchase_date: date | None = None
    current_price: float | None = None
    current_value: float | None = None
    current_worth: float | None = None
    recorded_amount: float | None = None
    currency: str = "USD"

    def __post_init__(self):
        self.purchase_date = to_date(self.purchase_date)
        for field_name in [
            "quantity",
            "purchase_price",
            "current_price",
            "current_value",
            "current_worth",
            "recorded_amount",
        ]:
            setattr(self, field_name, _to_float(getattr(self, field_name)))

    @property
    def asset_id(self) -> str | None:
        return self.asset.asset_id if self.asset else None

    @property
    def is_currency_like(self) -> bool:
        return bool(self.asset and self.asset.is_currency_like)

    @property
    def is_disposal(self) -> bool:
        """True for sales: any of quantity, price or recorded amount negative."""
        return any(v is not None and v < 0 for v in (self.quantity, self.purchase_price, self.recorded_amount))

    def signed(self, magnitude: float) -> float:
        """Apply this transaction's direction to an absolute amount."""
        return -abs(magnitude) if self.is_disposal else abs(magnitude)

    @property
    def cost_basis(self) -> float:
        """Signed amount paid (or received, negative) for this trade.

        Prefers the recorded total over ``|price| x |quantity|``. This is the
        transaction's contribution and never depends on market data.
        """
        if self.recorded_amount is not None:
            return self.signed(self.recorded_amount)
        if self.purchase_price is not None and self.quantity is not None:
            return self.signed(self.purchase_price * self.quantity)
        return 0.0

    @property
    def live_worth(self) -> float | None:
        """Signed present-day worth from live market data, if any."""
        if self.current_worth is not None:
            return self.signed(self.current_worth)
        if self.current_value is not None:
            return self.signed(self.current_value)
        if self.current_price and self.quantity:
            return self.signed(self.current_price * self.quantity)
        return None

    @property
    def live_price(self) -> float | None:
        """Live price per unit, derived from live worth when not given."""
        if self.current_price:
            return abs(self.current_price)
        worth = self.current_worth if self.current_worth is not None else self.current_value
        if worth and self.quantity:
            return abs(worth) / abs(self.quantity)
        return None

    def worth_at_price(self, price: float) -> float:
        """Signed worth of this position at a given unit price."""
        return self.signed(price * (self.quantity or 0.0))


class PriceHistory:
    """Per-symbol historical prices (date -> price), keyed by uppercase ticker.

    The series is sparse: weekends, holidays and not-yet-loaded data are
    simply missing. ``price_on`` walks backward to bridge short gaps.
    """

    def __init__(self, series: dict[str, PriceMap] | None = None):
        self._series: dict[str, PriceMap] = {}
        for symbol, prices in (series or {}).items():
            self.add(symbol, prices)

    @classmethod
    def from_records(cls, records: dict[str, list[dict[str, Any]]]) -> PriceHistory:
        """Build from ``{symbol: [{"date": "YYYY-MM-DD", "price": 1.0}, ...]}``."""
        history = cls()
        for symbol, rows in records.items():
            prices = {}
            for row in rows:
                day = to_date(row.get("date"))
                if day is not None and row.get("price") is not None:
                    prices[day] = float(row["price"])
            history.add(symbol, prices)
        return history

    def add(self, symbol: str, prices: dict[Any, float]) -> None:
        if not prices:
            return
        normalised = {to_date(d): float(p) for d, p in prices.items()}
        self._series.setdefault(symbol.upper(), {}).update({d: p for d, p in normalised.items() if d is not None})

    def get(self, symbol: str | None) -> PriceMap | None:
        if not symbol:
            return None
        return self._series.get(symbol.upper())

    def price_on(self, symbol: str | None, day: date, lookback_days: int = PRICE_LOOKBACK_DAYS) -> float | None:
        """Price at ``day``, else the closest earlier price within the lookback."""
        prices = self.get(symbol)
        if not prices:
            return None
        for offset in range(lookback_days + 1):
            price = prices.get(day - timedelta(days=offset))
            if price is not None:
                return price
        return None

    @property
    def symbols(self) -> list[str]:
        return sorted(self._series)

    def __contains__(self, symbol: str) -> bool:
        return symbol.upper() in self._series

    def __len__(self) -> int:
        return len(self._series)


@dataclass
class FundingPlan:
    """Recurring future contributions.

    Attributes:
        enabled: Whether contributions continue after today.
        monthly_amount: Amount contributed each month.
        progressive_growth: Grow the monthly amount by ``annual_growth_rate``.
        annual_growth_rate: Annual growth of the contribution (e.g., 0.05 for 5%).
    """

    enabled: bool = False
    monthly_amount: float = 0.0
    progressive_growth: bool = False
    annual_growth_rate: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.enabled and self.monthly_amount > 0


@dataclass
class ProjectionConfig:
    """User-adjustable projection settings.

    Persistence belongs to the caller: ``to_dict`` / ``from_dict`` produce
    plain values suitable for any key/value store.
    """

    projection_date: date | None = None
    target_prices: dict[str, float] = field(default_factory=dict)
    funding: FundingPlan = field(default_factory=FundingPlan)
    selected_asset_ids: frozenset[str] = frozenset()

    def __post_init__(self):
        self.projection_date = to_date(self.projection_date)
        self.selected_asset_ids = frozenset(self.selected_asset_ids)

    def effective_end(self, today: date) -> date | None:
        """The projection date, or None when it is not strictly in the future."""
        if self.projection_date is None or self.projection_date <= today:
            return None
        return self.projection_date

    def is_selected(self, asset_id: str | None) -> bool:
        if asset_id is None:
            return False
        return not self.selected_asset_ids or asset_id in self.selected_asset_ids

    def target_price(self, asset_id: str | None) -> float | None:
        if asset_id is None:
            return None
        price = self.target_prices.get(asset_id)
        if price is None or price < 0:
            return None
        return price

    def reconcile(self, asset_ids: set[str]) -> ProjectionConfig:
        """Drop settings for assets that no longer exist.

        When none of the selected assets survive, everything is selected.
        """
        targets = {k: v for k, v in self.target_prices.items() if k in asset_ids}
        selected = self.selected_asset_ids & asset_ids
        if not selected:
            selected = frozenset(asset_ids)
        return replace(self, target_prices=targets, selected_asset_ids=selected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "projection_date": self.projection_date.isoformat() if self.projection_date else None,
            "target_prices": dict(self.target_prices),
            "continue_funding": self.funding.enabled,
            "monthly_contribution": self.funding.monthly_amount,
            "progressive_growth": self.funding.progressive_growth,
            "growth_rate": self.funding.annual_growth_rate,
            "selected_assets": sorted(self.selected_asset_ids),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, today: date | None = None) -> ProjectionConfig:
        """Rebuild settings from stored values, dropping anything malformed."""
        data = data or {}
        today = today or date.today()

        projection_date = None
        try:
            projection_date = to_date(data.get("projection_date"))
        except TypeError as e:
            logger.warning(f"Dropping stored projection date: {e}")
        if projection_date is not None and projection_date <= today:
            logger.debug(f"Stored projection date {projection_date} is not in the future; ignoring")
            projection_date = None

        targets: dict[str, float] = {}
        raw_targets = data.get("target_prices") or {}
        if isinstance(raw_targets, dict):
            for asset_id, value in raw_targets.items():
                try:
                    targets[str(asset_id)] = float(value)
                except (TypeError, ValueError):
                    logger.warning(f"Dropping stored target price for {asset_id}: {value!r}")
        else:
            logger.warning("Stored target prices are not a mapping; ignoring")

        selected = data.get("selected_assets") or []
        if not isinstance(selected, list | tuple | set | frozenset):
            logger.warning("Stored asset selection is not a list; ignoring")
            selected = []

        funding = FundingPlan(
            enabled=_to_bool(data.get("continue_funding")),
            monthly_amount=_safe_float(data.get("monthly_contribution")),
            progressive_growth=_to_bool(data.get("progressive_growth")),
            annual_growth_rate=_safe_float(data.get("growth_rate")),
        )
        return cls(
            projection_date=projection_date,
            target_prices=targets,
            funding=funding,
            selected_asset_ids=frozenset(str(s) for s in selected),
        )


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _safe_float(value: Any) -> float:
    try:
        return float(value) if value not in (None, "") else 0.0
    except (TypeError, ValueError):
        logger.warning(f"Dropping non-numeric stored value: {value!r}")
        return 0.0


class PointKind(StrEnum):
    """Classification of an axis date relative to today."""

    HISTORICAL = "historical"
    TODAY = "today"
    PROJECTED = "projected"


@dataclass
class SeriesPoint:
    """One sample of the net-worth series.

    ``asset_worth`` and ``asset_contributions`` only hold selected assets and
    are clamped at zero for stacked display; ``net_worth`` is unclamped.
    """

    date: date
    kind: PointKind
    net_worth: float
    contributions: float
    asset_worth: dict[str, float] = field(default_factory=dict)
    asset_contributions: dict[str, float] = field(default_factory=dict)

    @property
    def is_projected(self) -> bool:
        return self.kind == PointKind.PROJECTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "kind": str(self.kind),
            "is_projected": self.is_projected,
            "net_worth": self.net_worth,
            "contributions": self.contributions,
            "asset_worth": dict(self.asset_worth),
            "asset_contributions": dict(self.asset_contributions),
        }


@dataclass
class ProjectionSeries:
    """The assembled series plus the reference scalars and legend metadata."""

    points: list[SeriesPoint] = field(default_factory=list)
    today_net_worth: float = 0.0
    projected_end_net_worth: float | None = None
    assets: list[Asset] = field(default_factory=list)
    currency: str = "USD"
    base_currency: str = "USD"

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def point_on(self, day: date) -> SeriesPoint | None:
        for point in self.points:
            if point.date == day:
                return point
        return None

    def in_currency(
        self,
        currency: str,
        rates: dict[str, float] | None,
        base_currency: str | None = None,
    ) -> ProjectionSeries:
        """Return a copy with every amount converted for display.

        ``rates`` are pivoted on ``base_currency``, which defaults to the
        currency the series was computed in, so converted series can be
        converted again.
        """
        from .currency import convert_currency

        pivot = base_currency or self.base_currency

        def conv(amount: float) -> float:
            return convert_currency(amount, currency, rates, from_currency=self.currency, base_currency=pivot)

        points = [
            replace(
                p,
                net_worth=conv(p.net_worth),
                contributions=conv(p.contributions),
                asset_worth={k: conv(v) for k, v in p.asset_worth.items()},
                asset_contributions={k: conv(v) for k, v in p.asset_contributions.items()},
            )
            for p in self.points
        ]
        end = self.projected_end_net_worth
        return replace(
            self,
            points=points,
            today_net_worth=conv(self.today_net_worth),
            projected_end_net_worth=conv(end) if end is not None else None,
            currency=currency.upper(),
            base_currency=pivot.upper(),
        )

    def to_records(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.points]
