import logging
from collections.abc import Iterable, Iterator
from datetime import date

from domain.exceptions.currency import InvalidArgumentError, require_not_none
from domain.models.currency import Currency, CurrencyPair, ExchangeRate
from infrastructure.providers.base import ForexDataProvider

logger = logging.getLogger(__name__)


class InMemoryForexDataProvider(ForexDataProvider):
	"""
	Provider backed by a fixed collection of exchange rates.
	Useful for:
	- Testing code that consumes a ForexDataProvider
	- Serving rates loaded from a file or fixture
	- Development without network access

	A rate belongs to the UTC calendar date of its timestamp.
	"""

	def __init__(self, rates: Iterable[ExchangeRate]):
		require_not_none(rates, 'exchange rates cannot be None')
		stored = list(rates)
		for rate in stored:
			require_not_none(rate, 'exchange rates cannot contain None')
			if not isinstance(rate, ExchangeRate):
				raise InvalidArgumentError(f'Expected an ExchangeRate, got {type(rate).__name__}')

		self._rates = tuple(sorted(stored, key=lambda r: (r.timestamp, str(r.currency_pair))))
		logger.debug(f'{self.name}: loaded {len(self._rates)} exchange rates')

	@property
	def name(self) -> str:
		return 'memory'

	def _fetch_rates(
		self, pairs: frozenset[CurrencyPair], start: date, end: date
	) -> Iterator[ExchangeRate]:
		for rate in self._rates:
			if rate.currency_pair in pairs and start <= rate.timestamp.date() <= end:
				yield rate

	def supported_currencies(self) -> Iterator[Currency]:
		currencies = {c for rate in self._rates for c in (rate.currency_pair.base, rate.currency_pair.quote)}
		return iter(sorted(currencies, key=lambda c: c.code))

	def earliest_supported_date(self) -> date:
		if not self._rates:
			return date.min
		return self._rates[0].timestamp.date()

	def __len__(self) -> int:
		return len(self._rates)
