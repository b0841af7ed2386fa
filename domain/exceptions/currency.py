class CurrencyException(Exception):
	pass


class NullArgumentError(CurrencyException, TypeError):
	"""A required argument, or an element of a required collection, is None."""


class InvalidArgumentError(CurrencyException, ValueError):
	"""An argument is present but semantically invalid."""


class InvalidCurrencyError(InvalidArgumentError):
	pass


class DataSourceError(CurrencyException):
	"""The backing data source failed: bad status, malformed payload, rate limiting."""


class DataSourceUnavailableError(DataSourceError):
	pass


def require_not_none(value, message: str):
	if value is None:
		raise NullArgumentError(message)
	return value
