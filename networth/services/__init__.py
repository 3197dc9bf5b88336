"""Services package."""

from networth.services.rates import (
    ExchangeRateApiProvider,
    FrankfurterProvider,
    ProviderUnavailableError,
    RateCache,
    RateNotFoundError,
    RateProviderError,
    RateProviderInterface,
    RateSourceChain,
)

__all__ = [
    "ExchangeRateApiProvider",
    "FrankfurterProvider",
    "ProviderUnavailableError",
    "RateCache",
    "RateNotFoundError",
    "RateProviderError",
    "RateProviderInterface",
    "RateSourceChain",
]
