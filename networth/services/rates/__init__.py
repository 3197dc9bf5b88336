"""
Exchange Rate Services Package

Cache, remote providers and the chain that tries them in order.
"""

from networth.services.rates.cache import CachedRate, RateCache
from networth.services.rates.chain import RateSourceChain, utc_today
from networth.services.rates.interface import (
    ProviderUnavailableError,
    RateNotFoundError,
    RateProviderError,
    RateProviderInterface,
)
from networth.services.rates.providers import (
    PRIMARY_CURRENCIES,
    ExchangeRateApiProvider,
    FrankfurterProvider,
    HttpRateProvider,
    TransientProviderError,
)

__all__ = [
    # Cache
    "CachedRate",
    "RateCache",
    # Chain
    "RateSourceChain",
    "utc_today",
    # Interface
    "RateProviderInterface",
    # Exceptions
    "ProviderUnavailableError",
    "RateNotFoundError",
    "RateProviderError",
    "TransientProviderError",
    # HTTP implementations
    "PRIMARY_CURRENCIES",
    "ExchangeRateApiProvider",
    "FrankfurterProvider",
    "HttpRateProvider",
]
