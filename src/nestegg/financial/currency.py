"""Currency conversion through a base-currency-pivoted rate table.

Rates map a currency code to the number of units of that currency per one
unit of the base currency (``{"EUR": 0.92, "GBP": 0.79}`` for a USD base).
The base currency itself is implicitly 1.

Conversion never fails; a missing rate echoes the amount.
"""

from loguru import logger

from nestegg.core.types import ExchangeRates

_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
}


def _rate(code: str, rates: ExchangeRates, base_currency: str) -> float | None:
    rate = rates.get(code)
    if rate:
        return float(rate)
    if code == base_currency:
        return 1.0
    return None


def convert_currency(
    amount: float,
    to_currency: str,
    rates: ExchangeRates | None,
    from_currency: str = "USD",
    base_currency: str = "USD",
) -> float:
    """Convert ``amount`` from one currency to another via the base currency.

    Args:
        amount: Amount in ``from_currency``.
        to_currency: Target display currency.
        rates: Base-pivoted exchange rates, or None when unavailable.
        from_currency: Currency of ``amount``.
        base_currency: Pivot currency of ``rates``.

    Returns:
        The converted amount, or ``amount`` unchanged when a rate is missing.
    """
    to_currency = to_currency.upper()
    from_currency = from_currency.upper()
    base_currency = base_currency.upper()

    if amount == 0 or not rates or to_currency == from_currency:
        return amount

    to_rate = _rate(to_currency, rates, base_currency)
    if from_currency == base_currency:
        if to_rate is None:
            logger.debug(f"No exchange rate for {to_currency}; showing {from_currency} amount")
            return amount
        return amount * to_rate

    from_rate = _rate(from_currency, rates, base_currency)
    if from_rate is None or to_rate is None:
        logger.debug(f"No exchange rate for {from_currency}->{to_currency}; showing original amount")
        return amount
    return amount / from_rate * to_rate


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format a whole-unit display amount, e.g. ``$1,500`` or ``-€250``."""
    code = currency.upper()
    symbol = _SYMBOLS.get(code)
    sign = "-" if round(amount) < 0 else ""
    body = f"{abs(amount):,.0f}"
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body} {code}"
