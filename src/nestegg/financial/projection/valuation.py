"""Point-in-time worth of a single transaction.

Resolution order:
- currency-like assets: recorded amount, always (cash does not appreciate)
- today: live worth supplied with the transaction
- past dates: historical price x quantity, bridging gaps of up to a week
- otherwise: the recorded amount of the trade
"""

from datetime import date

from loguru import logger

from ..models import PointKind, PriceHistory, Transaction


def historical_worth(transaction: Transaction, day: date, prices: PriceHistory) -> float | None:
    """Worth from the price series, or None when no price is known near ``day``."""
    asset = transaction.asset
    if asset is None or asset.price_key is None:
        return None
    price = prices.price_on(asset.price_key, day)
    if price is None:
        return None
    return transaction.worth_at_price(price)


def resolve_worth(
    transaction: Transaction,
    day: date,
    kind: PointKind,
    prices: PriceHistory,
) -> float:
    """Best-known signed worth of ``transaction`` on ``day``.

    Never raises for missing data; the recorded cost basis is the final
    fallback.
    """
    if transaction.is_currency_like:
        return transaction.cost_basis

    if kind == PointKind.TODAY:
        live = transaction.live_worth
        if live is not None:
            return live

    worth = historical_worth(transaction, day, prices)
    if worth is not None:
        return worth

    if kind == PointKind.TODAY:
        logger.debug(f"No live or historical price for {transaction.transaction_id}; using recorded amount")
    return transaction.cost_basis
