import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from functools import lru_cache

import pycountry

from domain.exceptions.currency import (
	InvalidArgumentError,
	InvalidCurrencyError,
	require_not_none,
)

_ISO_CODE = re.compile(r'[A-Z]{3}')


@dataclass(frozen=True)
class Currency:
	"""An ISO 4217 currency. Two currencies are equal when their codes are equal."""

	code: str
	name: str = field(default='', compare=False)
	numeric: str | None = field(default=None, compare=False, repr=False)

	def __post_init__(self):
		require_not_none(self.code, 'currency code cannot be None')
		if not isinstance(self.code, str) or not _ISO_CODE.fullmatch(self.code):
			raise InvalidCurrencyError(f'Malformed ISO 4217 currency code: {self.code!r}')

	@classmethod
	def of(cls, code: str) -> 'Currency':
		"""Resolve an uppercase three-letter code against the ISO 4217 registry."""
		require_not_none(code, 'currency code cannot be None')
		if not isinstance(code, str) or not _ISO_CODE.fullmatch(code):
			raise InvalidCurrencyError(f'Malformed ISO 4217 currency code: {code!r}')
		return _lookup(code)

	def __str__(self) -> str:
		return self.code


@lru_cache(maxsize=None)
def _lookup(code: str) -> Currency:
	entry = pycountry.currencies.get(alpha_3=code)
	if entry is None:
		raise InvalidCurrencyError(f'Unsupported ISO 4217 currency code: {code}')
	return _from_registry(entry)


def _from_registry(entry) -> Currency:
	return Currency(code=entry.alpha_3, name=entry.name, numeric=getattr(entry, 'numeric', None))


def available_currencies() -> Iterator[Currency]:
	"""Every currency known to the ISO 4217 registry."""
	return (_from_registry(entry) for entry in pycountry.currencies)


@dataclass(frozen=True)
class CurrencyPair:
	"""A pair of currencies in an exchange.

	The base currency is the one being sold, the quote currency the one being
	bought. Base and quote are never equal, and order matters: EURUSD and
	USDEUR are different pairs.
	"""

	base: Currency
	quote: Currency

	def __post_init__(self):
		require_not_none(self.base, 'currency pair cannot contain a None base currency')
		require_not_none(self.quote, 'currency pair cannot contain a None quote currency')
		if not isinstance(self.base, Currency) or not isinstance(self.quote, Currency):
			raise InvalidArgumentError('currency pair members must be Currency instances')
		if self.base == self.quote:
			raise InvalidArgumentError('currency pair base and quote cannot be identical')

	@classmethod
	def from_iso_codes(cls, base_code: str, quote_code: str) -> 'CurrencyPair':
		return cls(Currency.of(base_code), Currency.of(quote_code))

	@classmethod
	def parse(cls, text: str) -> 'CurrencyPair':
		"""Inverse of ``str(pair)``: ``CurrencyPair.parse('EURUSD')``."""
		require_not_none(text, 'currency pair text cannot be None')
		if not isinstance(text, str) or len(text) != 6:
			raise InvalidArgumentError(f'Expected six letters such as EURUSD, got {text!r}')
		return cls.from_iso_codes(text[:3], text[3:])

	def swapped(self) -> 'CurrencyPair':
		return CurrencyPair(self.quote, self.base)

	def involves(self, currency: Currency | None) -> bool:
		return currency is not None and currency in (self.base, self.quote)

	def position_of(self, currency: Currency | None) -> int | None:
		"""0 for the base currency, 1 for the quote, None otherwise."""
		if currency is None:
			return None
		if currency == self.base:
			return 0
		if currency == self.quote:
			return 1
		return None

	def __str__(self) -> str:
		# Forex convention for APIs and terminals: always six uppercase letters.
		return f'{self.base.code}{self.quote.code}'


@dataclass(frozen=True)
class ExchangeRate:
	"""An exchange rate between two currencies at a specific instant.

	``value`` is compared numerically, so ``Decimal('1.50')`` and
	``Decimal('1.5')`` give equal rates with equal hashes. ``timestamp`` must be
	timezone-aware and is stored in UTC.
	"""

	currency_pair: CurrencyPair
	value: Decimal
	timestamp: datetime

	def __post_init__(self):
		require_not_none(self.currency_pair, 'an exchange rate cannot be of a None currency pair')
		require_not_none(self.value, 'an exchange rate cannot have a None numeric value')
		require_not_none(self.timestamp, 'an exchange rate cannot have a None timestamp')

		if not isinstance(self.currency_pair, CurrencyPair):
			raise InvalidArgumentError('an exchange rate needs a CurrencyPair')

		value = _to_decimal(self.value)
		if not value.is_finite() or value <= 0:
			raise InvalidArgumentError('the value of an exchange rate must be positive')
		object.__setattr__(self, 'value', value)

		if not isinstance(self.timestamp, datetime) or self.timestamp.utcoffset() is None:
			raise InvalidArgumentError('an exchange rate timestamp must be a timezone-aware datetime')
		object.__setattr__(self, 'timestamp', self.timestamp.astimezone(UTC))

	def __str__(self) -> str:
		timestamp = self.timestamp.isoformat().replace('+00:00', 'Z')
		return f'{self.currency_pair} {self.value:f} {timestamp}'


def _to_decimal(value) -> Decimal:
	if isinstance(value, Decimal):
		return value
	if isinstance(value, bool) or not isinstance(value, (int, str)):
		raise InvalidArgumentError(
			f'an exchange rate value must be a Decimal, int or str, got {type(value).__name__}'
		)
	try:
		return Decimal(value)
	except InvalidOperation as e:
		raise InvalidArgumentError(f'Not a decimal number: {value!r}') from e
