import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Set
from datetime import date, datetime

from domain.exceptions.currency import InvalidArgumentError, NullArgumentError, require_not_none
from domain.models.currency import Currency, CurrencyPair, ExchangeRate, available_currencies

logger = logging.getLogger(__name__)


class ForexDataProvider(ABC):
	"""Abstract provider of currency and exchange rate data.

	The query methods behave like a SQL ``SELECT``: they return whatever
	matches and may omit pairs or dates that have no data. Asking for
	``USDCAD`` and ``EURCHF`` on a day where only ``USDCAD`` exists yields a
	single rate. An empty result is the answer to "nothing found"; errors are
	reserved for invalid arguments and for a failing data source.

	Arguments are validated when the method is called, before any data is
	fetched. The returned iterators are fresh per call and may fetch lazily.
	"""

	@property
	def name(self) -> str:
		return type(self).__name__

	def exchange_rates(self, pairs: Set[CurrencyPair], on: date) -> Iterator[ExchangeRate]:
		"""Rates of the given pairs on a single date, if available.

		Args:
			pairs: currency pairs to look up (copied before use)
			on: the date of the rates

		Raises:
			NullArgumentError: if an argument is None or ``pairs`` contains None
		"""
		require_not_none(on, 'date cannot be None')
		requested = _copy_pairs(pairs)
		_require_date(on, 'date')
		return self._query(requested, on, on)

	def exchange_rates_between(
		self, pairs: Set[CurrencyPair], start: date, end: date
	) -> Iterator[ExchangeRate]:
		"""Rates of the given pairs within an inclusive date range, if available.

		The order of the bounds does not matter, and equal bounds are the same
		query as :meth:`exchange_rates`.
		"""
		require_not_none(start, 'start date cannot be None')
		require_not_none(end, 'end date cannot be None')
		requested = _copy_pairs(pairs)
		_require_date(start, 'start date')
		_require_date(end, 'end date')
		if start > end:
			start, end = end, start
		return self._query(requested, start, end)

	def find_exchange_rate(self, pair: CurrencyPair, on: date) -> ExchangeRate | None:
		require_not_none(pair, 'currency pair cannot be None')
		require_not_none(on, 'date cannot be None')
		if not isinstance(pair, CurrencyPair):
			raise InvalidArgumentError(f'Expected a CurrencyPair, got {type(pair).__name__}')
		_require_date(on, 'date')
		return next(
			(rate for rate in self._query(frozenset({pair}), on, on) if rate.currency_pair == pair),
			None,
		)

	def supported_currencies(self) -> Iterator[Currency]:
		"""All currencies this provider serves. Defaults to the whole ISO 4217 registry."""
		return available_currencies()

	def earliest_supported_date(self) -> date:
		"""Earliest date with data, or ``date.min`` when there is no known lower bound.

		Advisory only: the query methods do not reject earlier dates.
		"""
		return date.min

	@abstractmethod
	def _fetch_rates(
		self, pairs: frozenset[CurrencyPair], start: date, end: date
	) -> Iterable[ExchangeRate]:
		"""Fetch rates for ``pairs`` dated from ``start`` to ``end`` inclusive.

		``pairs`` is non-empty and ``start <= end``. Missing data is omitted,
		transport and payload failures raise ``DataSourceError``.
		"""
		...

	def _query(
		self, pairs: frozenset[CurrencyPair], start: date, end: date
	) -> Iterator[ExchangeRate]:
		if not pairs:
			return iter(())
		logger.debug(f'{self.name}: querying {sorted(map(str, pairs))} from {start} to {end}')
		return iter(self._fetch_rates(pairs, start, end))

	def __repr__(self):
		return f'<{self.__class__.__name__}(name={self.name})>'


def _copy_pairs(pairs: Set[CurrencyPair]) -> frozenset[CurrencyPair]:
	require_not_none(pairs, 'currency pairs cannot be None')
	if isinstance(pairs, (str, bytes, CurrencyPair)) or not isinstance(pairs, Iterable):
		raise InvalidArgumentError(f'Expected a set of currency pairs, got {type(pairs).__name__}')
	copied = frozenset(pairs)
	if None in copied:
		raise NullArgumentError('currency pairs cannot contain None')
	for pair in copied:
		if not isinstance(pair, CurrencyPair):
			raise InvalidArgumentError(f'Expected a CurrencyPair, got {type(pair).__name__}')
	return copied


def _require_date(value: date, label: str) -> None:
	require_not_none(value, f'{label} cannot be None')
	# datetime is a date subclass but names an instant, not a calendar day
	if not isinstance(value, date) or isinstance(value, datetime):
		raise InvalidArgumentError(f'{label} must be a date, got {type(value).__name__}')
