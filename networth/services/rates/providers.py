"""
Remote Rate Providers

Two HTTP sources, tried in order by the RateSourceChain:

1. Frankfurter (primary) - ECB reference rates for a fixed list of about
   30 major currencies, with true historical rates per date.
2. ExchangeRate-API (secondary) - 160+ currencies, latest rates only.
   Used for everything outside the primary's list, and as the fallback
   when the primary fails. A same-day rate standing in for a historical
   one is accepted as a degraded result.

TRADEOFFS:
- requests is blocking; the chain runs calls in a worker thread
- Transient transport failures (connection errors, timeouts, 5xx) are
  retried with backoff; 4xx and missing rates are not
"""

from datetime import date
from typing import Any, Optional

import requests
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from networth.config import RateProviderSettings, get_settings
from networth.models.currency import CurrencyPair, is_valid_rate
from networth.services.rates.interface import (
    ProviderUnavailableError,
    RateNotFoundError,
    RateProviderInterface,
)


logger = structlog.get_logger(__name__)


# Currencies served by Frankfurter
PRIMARY_CURRENCIES = frozenset({
    "AUD", "BGN", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK",
    "EUR", "GBP", "HKD", "HUF", "IDR", "ILS", "INR", "ISK",
    "JPY", "KRW", "MXN", "MYR", "NOK", "NZD", "PHP", "PLN",
    "RON", "SEK", "SGD", "THB", "TRY", "USD", "ZAR",
})


class TransientProviderError(ProviderUnavailableError):
    """A failure worth retrying (network error, timeout, 5xx)."""
    pass


class HttpRateProvider(RateProviderInterface):
    """
    Shared HTTP plumbing for JSON rate APIs.

    Handles timeouts, retry logic and "rates" payload parsing.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        retry_attempts: int = 2,
        retry_wait_min_seconds: float = 0.5,
        retry_wait_max_seconds: float = 4.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._retry_attempts = retry_attempts
        self._wait_min = retry_wait_min_seconds
        self._wait_max = retry_wait_max_seconds
        self._session = session or requests.Session()

    @classmethod
    def _base_url_from(cls, settings: RateProviderSettings) -> str:
        raise NotImplementedError

    @classmethod
    def from_settings(
        cls,
        settings: Optional[RateProviderSettings] = None,
        session: Optional[requests.Session] = None,
    ) -> "HttpRateProvider":
        settings = settings or get_settings().rates
        return cls(
            base_url=cls._base_url_from(settings),
            timeout_seconds=settings.request_timeout_seconds,
            retry_attempts=settings.retry_attempts,
            retry_wait_min_seconds=settings.retry_wait_min_seconds,
            retry_wait_max_seconds=settings.retry_wait_max_seconds,
            session=session,
        )

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        """GET a JSON document, retrying transient failures."""
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=1, min=self._wait_min, max=self._wait_max),
            retry=retry_if_exception_type(TransientProviderError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self._request(url, params)

    def _request(self, url: str, params: Optional[dict]) -> Any:
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise TransientProviderError(f"{self.name} request failed: {e}") from e

        if response.status_code >= 500:
            raise TransientProviderError(
                f"{self.name} request failed: {response.status_code}"
            )
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ProviderUnavailableError(
                f"{self.name} request failed: {response.status_code}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailableError(f"{self.name} returned malformed JSON") from e

    def _extract_rate(self, payload: Any, pair: CurrencyPair) -> float:
        """Pull rates[target] out of a payload, rejecting unusable values."""
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise RateNotFoundError(f"{self.name} response has no rates for {pair}")

        rate = rates.get(pair.target)
        if not is_valid_rate(rate):
            raise RateNotFoundError(f"Rate not found in {self.name} for {pair}")
        return float(rate)


class FrankfurterProvider(HttpRateProvider):
    """Primary provider: historical ECB rates for major currencies."""

    name = "frankfurter"

    @classmethod
    def _base_url_from(cls, settings: RateProviderSettings) -> str:
        return settings.primary_base_url

    def supports(self, pair: CurrencyPair) -> bool:
        return pair.source in PRIMARY_CURRENCIES and pair.target in PRIMARY_CURRENCIES

    def fetch_rate(self, pair: CurrencyPair, on_date: date, today: date) -> float:
        # Today's rate comes from the latest endpoint, anything older by date
        path = "latest" if on_date >= today else on_date.isoformat()
        payload = self._get_json(
            f"{self._base_url}/{path}",
            params={"from": pair.source, "to": pair.target},
        )
        rate = self._extract_rate(payload, pair)
        logger.debug("rate_received", provider=self.name, pair=pair.key, date=path, rate=rate)
        return rate


class ExchangeRateApiProvider(HttpRateProvider):
    """Secondary provider: broad coverage, latest rates only."""

    name = "exchangerate-api"

    @classmethod
    def _base_url_from(cls, settings: RateProviderSettings) -> str:
        return settings.secondary_base_url

    def supports(self, pair: CurrencyPair) -> bool:
        return True

    def fetch_rate(self, pair: CurrencyPair, on_date: date, today: date) -> float:
        payload = self._get_json(f"{self._base_url}/latest/{pair.source}")
        rate = self._extract_rate(payload, pair)
        if on_date < today:
            logger.info(
                "historical_rate_approximated",
                provider=self.name,
                pair=pair.key,
                requested_date=on_date.isoformat(),
            )
        return rate
