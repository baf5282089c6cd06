"""Shared test fixtures for nestegg."""

import os
import tempfile
from datetime import date

import pytest

from nestegg.financial.models import Asset, Transaction


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def today():
    return date(2025, 6, 15)


@pytest.fixture
def stock():
    return Asset(asset_id="vti", name="Vanguard Total Market", symbol="VTI", color="#c0392b")


@pytest.fixture
def crypto():
    return Asset(asset_id="btc", name="Bitcoin", symbol="btc")


@pytest.fixture
def cash():
    return Asset(asset_id="cash", name="Dollars", symbol="USD")


@pytest.fixture
def stock_buy(stock):
    """10 units bought at 100, worth 150 each today."""
    return Transaction(
        transaction_id="t-stock",
        asset=stock,
        quantity=10,
        purchase_price=100,
        purchase_date=date(2025, 1, 2),
        current_price=150,
    )


@pytest.fixture
def tmp_portfolio_file(tmp_dir):
    """Write a small YAML portfolio document."""
    content = """
base_currency: USD
assets:
  - {id: vti, name: Vanguard Total Market, symbol: VTI, color: "#c0392b"}
  - {id: cash, name: Dollars, symbol: USD}
transactions:
  - {id: t1, asset: vti, quantity: 10, purchase_price: 100, purchase_date: 2025-01-02, current_price: 150}
  - {id: t2, asset: cash, quantity: 500, purchase_price: 1, purchase_date: 2025-03-01}
prices:
  VTI:
    2025-01-02: 100
    2025-03-03: 120
rates:
  EUR: 0.5
projection:
  projection_date: 2026-06-15
  target_prices: {vti: 200}
"""
    path = os.path.join(tmp_dir, "portfolio.yaml")
    with open(path, "w") as f:
        f.write(content)
    return path
