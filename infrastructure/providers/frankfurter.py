import logging
from collections import defaultdict
from collections.abc import Iterator
from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config.settings import Settings, get_settings
from domain.exceptions.currency import (
	DataSourceError,
	DataSourceUnavailableError,
	InvalidCurrencyError,
)
from domain.models.currency import Currency, CurrencyPair, ExchangeRate
from infrastructure.providers.base import ForexDataProvider

logger = logging.getLogger(__name__)


class FrankfurterProvider(ForexDataProvider):
	"""ECB reference rates served by the Frankfurter API.

	Frankfurter publishes one rate per business day. Weekends and holidays are
	answered with the previous business day, and those rows are dropped here so
	a query only ever returns rates dated inside the requested range. Rates
	are stamped at midnight UTC of their date.
	"""

	BASE_URL = 'https://api.frankfurter.app'
	EARLIEST_DATE = date(1999, 1, 4)

	def __init__(
		self,
		base_url: str = BASE_URL,
		client: httpx.Client | None = None,
		timeout: float = 10,
		retry_attempts: int = 3,
		retry_backoff: float = 1,
	):
		self.base_url = base_url.rstrip('/')
		self.timeout = timeout
		self.retry_attempts = retry_attempts
		self.retry_backoff = retry_backoff
		self._owns_client = client is None
		self._client = client or httpx.Client(
			timeout=httpx.Timeout(timeout),
			headers={'accept': 'application/json'},
			follow_redirects=True,
		)

	@classmethod
	def from_settings(cls, settings: Settings | None = None) -> 'FrankfurterProvider':
		settings = settings or get_settings()
		return cls(
			base_url=settings.FRANKFURTER_BASE_URL,
			timeout=settings.HTTP_TIMEOUT,
			retry_attempts=settings.HTTP_RETRY_ATTEMPTS,
		)

	@property
	def name(self) -> str:
		return 'frankfurter'

	def _send(self, url: str, params: dict | None) -> httpx.Response:
		for attempt in Retrying(
			stop=stop_after_attempt(self.retry_attempts),
			wait=wait_exponential(multiplier=self.retry_backoff, max=10),
			retry=retry_if_exception_type(httpx.TransportError),
			reraise=True,
		):
			with attempt:
				logger.debug(f'GET {url} {params or {}} (attempt {attempt.retry_state.attempt_number})')
				return self._client.get(url, params=params)

	def _request(self, endpoint: str, params: dict | None = None) -> dict | None:
		"""Decoded JSON body of ``endpoint``, or None when Frankfurter has no such data."""
		url = f'{self.base_url}/{endpoint}'

		try:
			response = self._send(url, params)
			response.raise_for_status()
			data = response.json()

		except httpx.HTTPStatusError as e:
			if e.response.status_code == 404:
				logger.info(f'Frankfurter has no data for {endpoint} {params or {}}')
				return None
			logger.error(f'Frankfurter HTTP error {e.response.status_code} for {endpoint}')
			raise DataSourceError(
				f'Frankfurter HTTP error {e.response.status_code}: {e.response.text[:200]}'
			) from e
		except httpx.RequestError as e:
			logger.error(f'Frankfurter request failed for {endpoint}: {e.__class__.__name__}')
			raise DataSourceUnavailableError(f'Frankfurter request failed: {e.__class__.__name__}') from e
		except ValueError as e:
			raise DataSourceError(f'Frankfurter response parsing error: {str(e)}') from e

		if not isinstance(data, dict):
			raise DataSourceError(f'Frankfurter response parsing error: expected an object, got {type(data).__name__}')
		return data

	def _fetch_rates(
		self, pairs: frozenset[CurrencyPair], start: date, end: date
	) -> Iterator[ExchangeRate]:
		quotes_by_base: dict[Currency, set[Currency]] = defaultdict(set)
		for pair in pairs:
			quotes_by_base[pair.base].add(pair.quote)

		for base in sorted(quotes_by_base, key=lambda c: c.code):
			quotes = sorted(quotes_by_base[base], key=lambda c: c.code)
			yield from self._fetch_base(base, quotes, start, end)

	def _fetch_base(
		self, base: Currency, quotes: list[Currency], start: date, end: date
	) -> Iterator[ExchangeRate]:
		endpoint = start.isoformat() if start == end else f'{start.isoformat()}..{end.isoformat()}'
		data = self._request(endpoint, {'from': base.code, 'to': ','.join(q.code for q in quotes)})
		if data is None:
			return

		for rate_date, rates in self._parse_rates(data):
			if not start <= rate_date <= end:
				logger.debug(f'Dropping {base} rates dated {rate_date}, outside {start}..{end}')
				continue

			timestamp = datetime.combine(rate_date, time.min, tzinfo=UTC)
			for quote in quotes:
				raw = rates.get(quote.code)
				if raw is None:
					continue
				yield ExchangeRate(CurrencyPair(base, quote), self._parse_value(raw), timestamp)

	def _parse_rates(self, data: dict) -> list[tuple[date, dict]]:
		# Single-date payloads carry "date"; range payloads key "rates" by date.
		try:
			if 'date' in data:
				parsed = [(date.fromisoformat(data['date']), data['rates'])]
			else:
				parsed = sorted(
					((date.fromisoformat(day), rates) for day, rates in data['rates'].items()),
					key=lambda item: item[0],
				)
		except (KeyError, TypeError, ValueError, AttributeError) as e:
			raise DataSourceError(f'Frankfurter response parsing error: {str(e)}') from e

		for rate_date, rates in parsed:
			if not isinstance(rates, dict):
				raise DataSourceError(f'Frankfurter response parsing error: malformed rates for {rate_date}')
		return parsed

	def _parse_value(self, raw) -> Decimal:
		try:
			value = Decimal(str(raw))
		except InvalidOperation as e:
			raise DataSourceError(f'Frankfurter returned a non-numeric rate: {raw!r}') from e
		if not value.is_finite() or value <= 0:
			raise DataSourceError(f'Frankfurter returned a non-positive rate: {raw!r}')
		return value

	def supported_currencies(self) -> Iterator[Currency]:
		data = self._request('currencies')
		if data is None:
			return iter(())

		currencies = []
		for code in sorted(data):
			try:
				currencies.append(Currency.of(code))
			except InvalidCurrencyError:
				logger.warning(f'Skipping {code!r}: not an ISO 4217 currency')
		return iter(currencies)

	def earliest_supported_date(self) -> date:
		return self.EARLIEST_DATE

	def close(self) -> None:
		if self._owns_client:
			self._client.close()

	def __enter__(self) -> 'FrankfurterProvider':
		return self

	def __exit__(self, *exc_info) -> None:
		self.close()
