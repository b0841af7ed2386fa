# nosec B101


import random
from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.exceptions.currency import InvalidArgumentError, NullArgumentError
from domain.models.currency import CurrencyPair, ExchangeRate, available_currencies


ALL_CURRENCIES = list(available_currencies())


# ============================================================================
# TEST: Construction and validation
# ============================================================================

def test_valid_rate(eurusd, timestamp):
    rate = ExchangeRate(eurusd, Decimal('1.0956'), timestamp)

    assert rate.currency_pair == eurusd
    assert rate.value == Decimal('1.0956')
    assert rate.timestamp == timestamp


@pytest.mark.parametrize('value', [Decimal('0'), Decimal('-1'), Decimal('-0.0001'), 0, -1])
def test_non_positive_value_raises(eurusd, timestamp, value):
    with pytest.raises(InvalidArgumentError) as exc_info:
        ExchangeRate(eurusd, value, timestamp)

    assert 'positive' in str(exc_info.value)


@pytest.mark.parametrize('value', [Decimal('NaN'), Decimal('Infinity'), Decimal('sNaN')])
def test_non_finite_value_raises(eurusd, timestamp, value):
    with pytest.raises(InvalidArgumentError):
        ExchangeRate(eurusd, value, timestamp)


def test_int_and_str_values_are_converted(eurusd, timestamp):
    assert ExchangeRate(eurusd, 1, timestamp).value == Decimal('1')
    assert ExchangeRate(eurusd, '0.00001234', timestamp).value == Decimal('0.00001234')
    assert isinstance(ExchangeRate(eurusd, 1, timestamp).value, Decimal)


@pytest.mark.parametrize('value', [1.5, True, 'abc', [1]])
def test_unsupported_value_types_raise(eurusd, timestamp, value):
    with pytest.raises(InvalidArgumentError):
        ExchangeRate(eurusd, value, timestamp)


def test_none_fields_raise_null_argument(eurusd, timestamp):
    with pytest.raises(NullArgumentError):
        ExchangeRate(None, Decimal('1'), timestamp)
    with pytest.raises(NullArgumentError):
        ExchangeRate(eurusd, None, timestamp)
    with pytest.raises(NullArgumentError):
        ExchangeRate(eurusd, Decimal('1'), None)


def test_none_check_runs_before_value_check(timestamp):
    with pytest.raises(NullArgumentError):
        ExchangeRate(None, Decimal('-1'), timestamp)


def test_naive_timestamp_raises(eurusd):
    with pytest.raises(InvalidArgumentError):
        ExchangeRate(eurusd, Decimal('1'), datetime(2025, 3, 14, 16, 0))


def test_date_instead_of_timestamp_raises(eurusd):
    with pytest.raises(InvalidArgumentError):
        ExchangeRate(eurusd, Decimal('1'), datetime(2025, 3, 14).date())


def test_non_pair_raises(timestamp):
    with pytest.raises(InvalidArgumentError):
        ExchangeRate('EURUSD', Decimal('1'), timestamp)


def test_timestamp_is_normalised_to_utc(eurusd):
    tokyo = timezone(timedelta(hours=9))
    rate = ExchangeRate(eurusd, Decimal('1'), datetime(2025, 3, 15, 1, 0, tzinfo=tokyo))

    assert rate.timestamp.tzinfo == UTC
    assert rate.timestamp == datetime(2025, 3, 14, 16, 0, tzinfo=UTC)


def test_rate_is_immutable(eurusd, timestamp):
    rate = ExchangeRate(eurusd, Decimal('1'), timestamp)

    with pytest.raises(AttributeError):
        rate.value = Decimal('2')


# ============================================================================
# TEST: Scale-independent equality
# ============================================================================

def test_trailing_zeros_do_not_affect_equality(eurusd, timestamp):
    a = ExchangeRate(eurusd, Decimal('1.50'), timestamp)
    b = ExchangeRate(eurusd, Decimal('1.5'), timestamp)

    assert a == b
    assert hash(a) == hash(b)


@pytest.mark.parametrize('left,right', [
    ('1', '1.000000'),
    ('100', '1E+2'),
    ('0.10', '0.1'),
    ('123.4500', '123.45'),
])
def test_equal_numeric_values_with_different_scales(eurusd, timestamp, left, right):
    a = ExchangeRate(eurusd, Decimal(left), timestamp)
    b = ExchangeRate(eurusd, Decimal(right), timestamp)

    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_different_values_are_not_equal(eurusd, timestamp):
    assert ExchangeRate(eurusd, Decimal('1.5'), timestamp) != ExchangeRate(eurusd, Decimal('1.51'), timestamp)


def test_same_instant_in_other_zone_is_equal(eurusd, timestamp):
    berlin = timezone(timedelta(hours=1))
    a = ExchangeRate(eurusd, Decimal('1'), timestamp)
    b = ExchangeRate(eurusd, Decimal('1'), timestamp.astimezone(berlin))

    assert a == b
    assert hash(a) == hash(b)


@pytest.mark.parametrize('seed', range(10))
def test_equality_contract_under_field_substitution(seed):
    rng = random.Random(seed)
    base, quote, other = rng.sample(ALL_CURRENCIES, 3)
    pair = CurrencyPair(base, quote)
    value = Decimal(rng.randint(1, 10**6)).scaleb(-rng.randint(0, 6))
    when = datetime(2000, 1, 1, tzinfo=UTC) + timedelta(seconds=rng.randint(0, 10**9))

    a = ExchangeRate(pair, value, when)
    b = ExchangeRate(CurrencyPair(base, quote), value.quantize(Decimal(1).scaleb(-8)), when)
    c = ExchangeRate(CurrencyPair.parse(str(pair)), Decimal(str(value)), when)

    assert a == a
    assert (a == b) and (b == a)
    assert (a == b) and (b == c) and (a == c)
    assert hash(a) == hash(b) == hash(c)

    substitutions = [
        ExchangeRate(CurrencyPair(other, quote), value, when),
        ExchangeRate(pair.swapped(), value, when),
        ExchangeRate(pair, value + 1, when),
        ExchangeRate(pair, value, when + timedelta(microseconds=1)),
    ]
    for different in substitutions:
        assert a != different
        assert different != a


# ============================================================================
# TEST: str()
# ============================================================================

def test_str_contains_pair_plain_value_and_timestamp(eurusd, timestamp):
    rate = ExchangeRate(eurusd, Decimal('1.0956'), timestamp)

    assert str(rate) == 'EURUSD 1.0956 2025-03-14T16:00:00Z'


def test_str_uses_plain_notation(eurusd, timestamp):
    rate = ExchangeRate(eurusd, Decimal('1E+3'), timestamp)

    assert str(rate).split(' ')[1] == '1000'
