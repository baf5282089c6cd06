"""Portfolio documents (YAML or JSON) to models.

Expected layout::

    base_currency: USD
    assets:
      - {id: vti, name: Vanguard Total Market, symbol: VTI}
      - {id: cash, name: Cash, symbol: USD}
    transactions:
      - {id: t1, asset: vti, quantity: 10, purchase_price: 200,
         purchase_date: 2024-03-01, current_price: 260}
    prices:                 # optional, symbol -> {date: price} or [{date, price}]
      VTI: {2024-03-01: 200.0}
    rates: {EUR: 0.92}      # optional, pivoted on base_currency
    projection:             # optional, ProjectionConfig.to_dict() layout
      projection_date: 2030-01-01
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from loguru import logger

from nestegg.core.exceptions import DataProcessingError
from nestegg.core.types import ExchangeRates
from nestegg.core.utils.file_io import load_structured

from .models import Asset, PriceHistory, ProjectionConfig, Transaction


@dataclass
class Portfolio:
    """Everything the projection engine needs, as loaded from one document."""

    assets: dict[str, Asset] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    prices: PriceHistory = field(default_factory=PriceHistory)
    rates: ExchangeRates = field(default_factory=dict)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    base_currency: str = "USD"


def _section(data: dict[str, Any], key: str, expected: type) -> Any:
    value = data.get(key)
    if value is None:
        return expected()
    if not isinstance(value, expected):
        raise DataProcessingError(f"'{key}' must be a {expected.__name__}, got {type(value).__name__}")
    return value


def parse_asset(row: dict[str, Any]) -> Asset:
    try:
        return Asset(
            asset_id=str(row["id"]),
            name=str(row.get("name") or row["id"]),
            symbol=row.get("symbol"),
            color=row.get("color"),
            currency_like=row.get("currency_like"),
        )
    except (KeyError, ValueError) as e:
        raise DataProcessingError(f"Invalid asset entry {row!r}: {e}") from e


def parse_transaction(row: dict[str, Any], assets: dict[str, Asset], index: int) -> Transaction:
    asset_ref = row.get("asset")
    asset = None
    if asset_ref is not None:
        asset = assets.get(str(asset_ref))
        if asset is None:
            raise DataProcessingError(f"Transaction {row.get('id', index)} references unknown asset {asset_ref!r}")
    try:
        return Transaction(
            transaction_id=str(row.get("id", f"tx-{index}")),
            asset=asset,
            quantity=row.get("quantity"),
            purchase_price=row.get("purchase_price"),
            purchase_date=row.get("purchase_date"),
            current_price=row.get("current_price"),
            current_value=row.get("current_value"),
            current_worth=row.get("current_worth"),
            recorded_amount=row.get("amount"),
            currency=str(row.get("currency") or "USD"),
        )
    except (TypeError, ValueError) as e:
        raise DataProcessingError(f"Invalid transaction {row.get('id', index)}: {e}") from e


def parse_prices(raw: dict[str, Any]) -> PriceHistory:
    history = PriceHistory()
    for symbol, series in raw.items():
        if isinstance(series, list):
            history.add(str(symbol), {row["date"]: row["price"] for row in series if row.get("price") is not None})
        elif isinstance(series, dict):
            history.add(str(symbol), series)
        else:
            raise DataProcessingError(f"Prices for {symbol} must be a mapping or list")
    return history


def parse_portfolio(data: dict[str, Any], today: date | None = None) -> Portfolio:
    """Build a Portfolio from an already-parsed document."""
    assets: dict[str, Asset] = {}
    for row in _section(data, "assets", list):
        asset = parse_asset(row)
        if asset.asset_id in assets:
            logger.warning(f"Duplicate asset id {asset.asset_id}; keeping the first")
            continue
        assets[asset.asset_id] = asset

    transactions = [parse_transaction(row, assets, i) for i, row in enumerate(_section(data, "transactions", list))]
    rates = {str(k).upper(): float(v) for k, v in _section(data, "rates", dict).items()}

    return Portfolio(
        assets=assets,
        transactions=transactions,
        prices=parse_prices(_section(data, "prices", dict)),
        rates=rates,
        projection=ProjectionConfig.from_dict(_section(data, "projection", dict), today=today),
        base_currency=str(data.get("base_currency") or "USD").upper(),
    )


def load_portfolio(path: str, today: date | None = None) -> Portfolio:
    """Load a portfolio document from ``path``."""
    portfolio = parse_portfolio(load_structured(path), today=today)
    logger.info(f"Loaded {len(portfolio.transactions)} transactions across {len(portfolio.assets)} assets from {path}")
    return portfolio
