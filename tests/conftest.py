"""
Shared fixtures for domain and provider tests.
"""

import pytest
from datetime import UTC, date, datetime
from decimal import Decimal

from domain.models.currency import Currency, CurrencyPair, ExchangeRate


@pytest.fixture
def eur():
    return Currency.of('EUR')


@pytest.fixture
def usd():
    return Currency.of('USD')


@pytest.fixture
def gbp():
    return Currency.of('GBP')


@pytest.fixture
def eurusd(eur, usd):
    return CurrencyPair(eur, usd)


@pytest.fixture
def timestamp():
    return datetime(2025, 3, 14, 16, 0, tzinfo=UTC)


@pytest.fixture
def make_rate():
    """Factory for rates stamped at midnight UTC of the given day."""
    def _make_rate(pair_text: str, value: str, day: date) -> ExchangeRate:
        return ExchangeRate(
            CurrencyPair.parse(pair_text),
            Decimal(value),
            datetime(day.year, day.month, day.day, tzinfo=UTC),
        )
    return _make_rate
