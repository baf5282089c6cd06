"""Shared type aliases used across nestegg."""

from datetime import date
from pathlib import Path
from typing import Any

# Config value types
ConfigDict = dict[str, Any]

# Path types
PathLike = str | Path

# Market data
PriceMap = dict[date, float]
ExchangeRates = dict[str, float]
