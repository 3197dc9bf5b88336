"""
Abstract Rate Provider Interface

DESIGN DECISION: Each remote rate source sits behind the same small
interface. This allows us to:
1. Chain providers in order without caring which one answers
2. Use fake providers in tests (no real network calls)
3. Add or swap a provider without touching conversion logic

Providers are blocking and raise RateProviderError on any failure.
Falling back is the chain's job, not the provider's.
"""

from abc import ABC, abstractmethod
from datetime import date

from networth.models.currency import CurrencyPair


class RateProviderInterface(ABC):
    """Any remote exchange rate source."""

    name: str = "provider"

    @abstractmethod
    def supports(self, pair: CurrencyPair) -> bool:
        """
        Whether this provider can serve the pair at all.

        Unsupported pairs are never sent to the provider.
        """
        pass

    @abstractmethod
    def fetch_rate(self, pair: CurrencyPair, on_date: date, today: date) -> float:
        """
        Fetch the rate for a pair.

        Args:
            pair: Currency pair to price
            on_date: Date the rate is wanted for (never after today)
            today: The caller's notion of today

        Returns:
            A finite, positive rate

        Raises:
            RateNotFoundError: If the response carries no usable rate
            ProviderUnavailableError: If the provider cannot be reached
        """
        pass


class RateProviderError(Exception):
    """Base exception for rate provider errors."""
    pass


class RateNotFoundError(RateProviderError):
    """Provider answered but had no usable rate for the pair."""
    pass


class ProviderUnavailableError(RateProviderError):
    """Provider could not be reached, timed out or answered with an error."""
    pass
