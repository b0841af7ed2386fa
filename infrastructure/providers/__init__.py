from .base import ForexDataProvider
from .frankfurter import FrankfurterProvider
from .memory import InMemoryForexDataProvider

__all__ = ['ForexDataProvider', 'FrankfurterProvider', 'InMemoryForexDataProvider']
