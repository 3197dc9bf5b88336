"""
Rate Source Chain

Resolves a rate for (from, to, date) through, in order:

1. Identity - same currency is 1.0, no lookup at all
2. Cache - a rate fetched within the freshness window
3. Primary provider - only when both currencies are on its list
4. Secondary provider - everything else, and primary failures
5. Degraded fallback - 1.0, flagged UNCONVERTED, never cached

CRITICAL: This never raises for provider problems. A caller always gets
a number, and the quote's source says whether it is a real rate.
"""

import asyncio
from datetime import date, datetime, timezone
from typing import Callable, Iterator, Optional, Union
from uuid import UUID

import structlog

from networth.audit import AuditLogger
from networth.config import get_settings
from networth.models.audit import AuditEventBuilder
from networth.models.currency import CurrencyPair, RateQuote, RateSource, as_date
from networth.services.rates.cache import RateCache
from networth.services.rates.interface import RateProviderInterface
from networth.services.rates.providers import ExchangeRateApiProvider, FrankfurterProvider


logger = structlog.get_logger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class RateSourceChain:
    """
    Ordered primary/secondary providers in front of a shared cache.

    Blocking provider calls run in a worker thread and are bounded by
    fetch_timeout_seconds, so a hung request cannot stall a valuation.
    """

    def __init__(
        self,
        primary: RateProviderInterface,
        secondary: RateProviderInterface,
        cache: Optional[RateCache] = None,
        audit_logger: Optional[AuditLogger] = None,
        today: Callable[[], date] = utc_today,
        fetch_timeout_seconds: Optional[float] = None,
    ):
        self._primary = primary
        self._secondary = secondary
        self._cache = cache if cache is not None else RateCache()
        self._audit_logger = audit_logger or AuditLogger()
        self._today = today
        self._fetch_timeout = fetch_timeout_seconds

    @classmethod
    def from_settings(cls, audit_logger: Optional[AuditLogger] = None) -> "RateSourceChain":
        """Build the production chain from configuration."""
        settings = get_settings()
        rates = settings.rates
        cache_settings = settings.cache
        return cls(
            primary=FrankfurterProvider.from_settings(rates),
            secondary=ExchangeRateApiProvider.from_settings(rates),
            cache=RateCache(
                ttl_seconds=cache_settings.ttl_seconds,
                max_entries=cache_settings.max_entries,
            ),
            audit_logger=audit_logger,
            fetch_timeout_seconds=rates.fetch_timeout_seconds,
        )

    @property
    def cache(self) -> RateCache:
        return self._cache

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def today(self) -> date:
        return self._today()

    def _candidates(
        self,
        pair: CurrencyPair,
    ) -> Iterator[tuple[RateSource, RateProviderInterface]]:
        if self._primary.supports(pair):
            yield RateSource.PRIMARY, self._primary
        if self._secondary.supports(pair):
            yield RateSource.SECONDARY, self._secondary

    async def _call(
        self,
        provider: RateProviderInterface,
        pair: CurrencyPair,
        on_date: date,
        today: date,
    ) -> float:
        call = asyncio.to_thread(provider.fetch_rate, pair, on_date, today)
        if self._fetch_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._fetch_timeout)

    async def fetch_quote(
        self,
        source: str,
        target: str,
        on_date: Optional[Union[date, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RateQuote:
        """Resolve a rate with its provenance. Never raises for provider failures."""
        pair = CurrencyPair.of(source, target)
        today = self._today()
        day = today if on_date is None else as_date(on_date)

        if pair.is_identity:
            return RateQuote(pair=pair, as_of=day, rate=1.0, source=RateSource.IDENTITY)

        # Historical providers only serve past and present dates
        if day > today:
            day = today

        cached = self._cache.get(pair.source, pair.target, day)
        if cached is not None:
            self._audit_logger.log(AuditEventBuilder.rate_cache_hit(
                pair=pair.key,
                on_date=day.isoformat(),
                rate=cached,
                correlation_id=correlation_id,
            ))
            return RateQuote(pair=pair, as_of=day, rate=cached, source=RateSource.CACHE)

        for rate_source, provider in self._candidates(pair):
            try:
                rate = await self._call(provider, pair, day, today)
            except Exception as e:
                # Any provider failure moves on to the next source
                logger.warning(
                    "rate_provider_failed",
                    provider=provider.name,
                    pair=pair.key,
                    date=day.isoformat(),
                    error=str(e) or type(e).__name__,
                )
                self._audit_logger.log(AuditEventBuilder.provider_failed(
                    pair=pair.key,
                    on_date=day.isoformat(),
                    provider=provider.name,
                    error_message=str(e) or type(e).__name__,
                    correlation_id=correlation_id,
                ))
                continue

            self._cache.put(pair.source, pair.target, day, rate)
            self._audit_logger.log(AuditEventBuilder.rate_fetched(
                pair=pair.key,
                on_date=day.isoformat(),
                rate=rate,
                provider=provider.name,
                correlation_id=correlation_id,
            ))
            return RateQuote(pair=pair, as_of=day, rate=rate, source=rate_source)

        logger.warning(
            "exchange_rate_unavailable",
            pair=pair.key,
            date=day.isoformat(),
            fallback_rate=1.0,
        )
        self._audit_logger.log(AuditEventBuilder.degraded_fallback(
            pair=pair.key,
            on_date=day.isoformat(),
            correlation_id=correlation_id,
        ))
        return RateQuote(pair=pair, as_of=day, rate=1.0, source=RateSource.UNCONVERTED)

    async def fetch_rate(
        self,
        source: str,
        target: str,
        on_date: Optional[Union[date, str]] = None,
    ) -> float:
        """Just the rate. A degraded result is 1.0."""
        quote = await self.fetch_quote(source, target, on_date)
        return quote.rate
