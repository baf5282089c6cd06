"""
nestegg exception hierarchy.

All nestegg exceptions inherit from NestEggError, making it easy for consumers
to catch library-level errors while still distinguishing specific failure modes.

The projection engine itself never raises for missing or partial data; these
are raised at the I/O boundaries (config files, portfolio files, market data).
"""


class NestEggError(Exception):
    """Base exception class for all nestegg errors."""


class ConfigurationError(NestEggError):
    """Raised for configuration errors (missing keys, invalid values)."""


class APIError(NestEggError):
    """Raised for API communication errors."""


class MarketDataError(APIError):
    """Raised when a market-data provider request fails."""


class DataProcessingError(NestEggError):
    """Raised for data processing errors (malformed portfolio documents)."""
