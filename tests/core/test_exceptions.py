"""Tests for nestegg.core.exceptions."""

from nestegg.core.exceptions import (
    APIError,
    ConfigurationError,
    DataProcessingError,
    MarketDataError,
    NestEggError,
)


def test_hierarchy():
    """All exceptions should inherit from NestEggError."""
    for exc_cls in [ConfigurationError, APIError, DataProcessingError, MarketDataError]:
        assert issubclass(exc_cls, NestEggError)


def test_market_data_error_is_api_error():
    assert issubclass(MarketDataError, APIError)


def test_exception_message():
    err = ConfigurationError("market_data.timeout must be an integer")
    assert "must be an integer" in str(err)


def test_catch_base():
    """Catching NestEggError should catch all subtypes."""
    try:
        raise MarketDataError("rate limited")
    except NestEggError as e:
        assert "rate limited" in str(e)
