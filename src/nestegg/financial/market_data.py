"""Historical market prices for the projection engine.

Fetches daily closing prices per symbol from free public endpoints and
assembles them into a PriceHistory before the engine runs. Symbols are
fetched concurrently; a symbol that fails or returns nothing is simply left
out, and the engine falls back to recorded amounts for it.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable
from datetime import UTC, date, datetime, time
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from nestegg.core.exceptions import MarketDataError
from nestegg.core.types import PriceMap
from nestegg.core.utils.async_helpers import run_async_safely

from .models import FIAT_SYMBOLS, PriceHistory, Transaction

YAHOO_API_BASE = "https://query1.finance.yahoo.com/v8/finance/chart"
COINGECKO_API_BASE = "https://api.coingecko.com/api/v3"
_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Tickers CoinGecko knows under a different id
COINGECKO_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDT": "tether",
    "BNB": "binancecoin",
    "SOL": "solana",
    "XRP": "ripple",
    "USDC": "usd-coin",
    "DOGE": "dogecoin",
    "ADA": "cardano",
    "TRX": "tron",
}


@runtime_checkable
class PriceClient(Protocol):
    """Anything that can return daily prices for a symbol."""

    def fetch_history(self, symbol: str, start: date, end: date) -> PriceMap:
        """Daily prices for ``symbol`` between ``start`` and ``end`` inclusive."""
        ...


def _timestamp(day: date) -> int:
    return int(datetime.combine(day, time.min, tzinfo=UTC).timestamp())


def _get_json(url: str, headers: dict[str, str], timeout: int, provider: str) -> Any:
    req = urllib.request.Request(url=url, method="GET", headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except urllib.error.HTTPError as e:
        raise MarketDataError(f"{provider} API {e.code}: {e.reason}") from e
    except urllib.error.URLError as e:
        raise MarketDataError(f"{provider} API request failed: {e}") from e

    if not raw:
        return {}
    try:
        return json.loads(raw.decode("utf-8", errors="ignore"))
    except json.JSONDecodeError as e:
        raise MarketDataError(f"{provider} returned invalid JSON") from e


class YahooFinanceClient:
    """Daily closes from Yahoo Finance's public chart endpoint (no API key)."""

    def __init__(self, timeout: int = 20, api_base: str = YAHOO_API_BASE):
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")

    def fetch_history(self, symbol: str, start: date, end: date) -> PriceMap:
        query = urllib.parse.urlencode(
            {"period1": _timestamp(start), "period2": _timestamp(end), "interval": "1d"}
        )
        url = f"{self.api_base}/{urllib.parse.quote(symbol)}?{query}"
        data = _get_json(url, {"User-Agent": _USER_AGENT}, self.timeout, "Yahoo Finance")

        results = (data.get("chart") or {}).get("result") or []
        if not results:
            return {}
        result = results[0]
        timestamps = result.get("timestamp") or []
        quotes = (result.get("indicators") or {}).get("quote") or [{}]
        closes = quotes[0].get("close") or []

        prices: PriceMap = {}
        for ts, close in zip(timestamps, closes):
            if close is None:
                continue
            prices[datetime.fromtimestamp(ts, tz=UTC).date()] = float(close)
        return prices


class CoinGeckoClient:
    """Daily crypto prices (USD) from CoinGecko's free market-chart endpoint."""

    def __init__(self, timeout: int = 20, api_base: str = COINGECKO_API_BASE):
        self.timeout = timeout
        self.api_base = api_base.rstrip("/")

    def fetch_history(self, symbol: str, start: date, end: date) -> PriceMap:
        coin_id = COINGECKO_IDS.get(symbol.upper(), symbol.lower())
        query = urllib.parse.urlencode({"vs_currency": "usd", "from": _timestamp(start), "to": _timestamp(end)})
        url = f"{self.api_base}/coins/{urllib.parse.quote(coin_id)}/market_chart/range?{query}"
        data = _get_json(url, {"Accept": "application/json"}, self.timeout, "CoinGecko")

        # Several samples per day; keep the first of each day
        prices: PriceMap = {}
        for ts_ms, price in data.get("prices") or []:
            day = datetime.fromtimestamp(ts_ms / 1000, tz=UTC).date()
            if day not in prices and price is not None:
                prices[day] = float(price)
        return prices


_PROVIDERS = {
    "yahoo": YahooFinanceClient,
    "coingecko": CoinGeckoClient,
}


def create_client(provider: str = "yahoo", timeout: int = 20) -> PriceClient:
    """Build a price client by provider name."""
    try:
        client_cls = _PROVIDERS[provider.lower()]
    except KeyError:
        raise ValueError(f"Unknown market data provider {provider!r}; choose from {sorted(_PROVIDERS)}") from None
    return client_cls(timeout=timeout)


def price_requests(transactions: Iterable[Transaction]) -> dict[str, date]:
    """Earliest purchase date per symbol that needs market prices.

    Cash-like assets and fiat codes are skipped.
    """
    requests: dict[str, date] = {}
    for tx in transactions:
        asset = tx.asset
        if asset is None or asset.price_key is None or tx.purchase_date is None:
            continue
        if asset.is_currency_like or asset.price_key in FIAT_SYMBOLS:
            continue
        earliest = requests.get(asset.price_key)
        if earliest is None or tx.purchase_date < earliest:
            requests[asset.price_key] = tx.purchase_date
    return requests


async def load_price_history(
    transactions: Iterable[Transaction],
    today: date,
    client: PriceClient,
    max_concurrency: int = 8,
) -> PriceHistory:
    """Fetch history for every priced symbol concurrently.

    Always completes: failures are logged and the symbol is left absent.
    """
    requests = price_requests(transactions)
    history = PriceHistory()
    if not requests:
        return history

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def fetch(symbol: str, start: date) -> tuple[str, PriceMap]:
        async with semaphore:
            try:
                prices = await asyncio.to_thread(client.fetch_history, symbol, start, today)
            except MarketDataError as e:
                logger.warning(f"Price history for {symbol} unavailable: {e}")
                return symbol, {}
        if not prices:
            logger.info(f"No price history returned for {symbol}")
        return symbol, prices

    results = await asyncio.gather(*(fetch(symbol, start) for symbol, start in requests.items()))
    for symbol, prices in results:
        history.add(symbol, prices)

    logger.debug(f"Loaded price history for {len(history)}/{len(requests)} symbols")
    return history


def load_price_history_sync(
    transactions: Iterable[Transaction],
    today: date,
    client: PriceClient,
    max_concurrency: int = 8,
) -> PriceHistory:
    """Blocking wrapper around load_price_history."""
    return run_async_safely(load_price_history(list(transactions), today, client, max_concurrency))
