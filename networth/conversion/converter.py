"""
Currency Converter

Three ways to convert, for three kinds of caller:

- convert            async, asks the chain (cache, then network), always resolves
- convert_sync       never waits; uses today's cached rate or leaves the amount as-is
- convert_with_pin   async, for saved entries: a pinned rate beats everything

CRITICAL: convert_with_pin is the ONLY correct way to re-derive totals of
a saved entry. Editing one balance must not move the rate of its siblings.

Each function has a *_detailed twin returning a ConversionResult, so
callers can see whether the amount was really converted.
"""

from datetime import date
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from networth.models.audit import AuditEventBuilder
from networth.models.currency import (
    ConversionResult,
    CurrencyPair,
    PinnedRates,
    RateQuote,
    RateSource,
    as_date,
    find_pinned_value,
    is_valid_rate,
)
from networth.services.rates import RateSourceChain


logger = structlog.get_logger(__name__)


class CurrencyConverter:
    """Conversion entry points over an injected RateSourceChain."""

    def __init__(self, chain: RateSourceChain):
        self._chain = chain

    @classmethod
    def from_settings(cls) -> "CurrencyConverter":
        return cls(RateSourceChain.from_settings())

    @property
    def chain(self) -> RateSourceChain:
        return self._chain

    def apply_quote(self, amount: float, quote: RateQuote) -> ConversionResult:
        """Multiply an amount by a quote; identity quotes leave it untouched."""
        converted = amount if quote.source == RateSource.IDENTITY else amount * quote.rate
        return ConversionResult(amount=amount, converted=converted, quote=quote)

    # =========================================================================
    # Rates
    # =========================================================================

    async def get_exchange_rate(
        self,
        source: str,
        target: str,
        on_date: Optional[Union[date, str]] = None,
    ) -> float:
        """Rate for a date (today when omitted). 1.0 if nothing is available."""
        return await self._chain.fetch_rate(source, target, on_date)

    async def get_current_exchange_rate(self, source: str, target: str) -> float:
        return await self._chain.fetch_rate(source, target)

    # =========================================================================
    # Authoritative async conversion
    # =========================================================================

    async def convert_detailed(
        self,
        amount: float,
        source: str,
        target: str,
        on_date: Optional[Union[date, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ConversionResult:
        quote = await self._chain.fetch_quote(source, target, on_date, correlation_id)
        return self.apply_quote(amount, quote)

    async def convert(
        self,
        amount: float,
        source: str,
        target: str,
        on_date: Optional[Union[date, str]] = None,
    ) -> float:
        result = await self.convert_detailed(amount, source, target, on_date)
        return result.converted

    # =========================================================================
    # Synchronous best-effort conversion
    # =========================================================================

    def convert_sync_detailed(self, amount: float, source: str, target: str) -> ConversionResult:
        """
        Convert with today's cached rate, without waiting on anything.

        A missing rate leaves the amount unconverted (flagged UNCONVERTED).
        """
        pair = CurrencyPair.of(source, target)
        today = self._chain.today()

        if pair.is_identity:
            quote = RateQuote(pair=pair, as_of=today, rate=1.0, source=RateSource.IDENTITY)
            return self.apply_quote(amount, quote)

        rate = self._chain.cache.peek(pair.source, pair.target, today)
        if rate is not None:
            quote = RateQuote(pair=pair, as_of=today, rate=rate, source=RateSource.CACHE)
            return self.apply_quote(amount, quote)

        logger.warning("no_cached_rate", pair=pair.key, amount=amount)
        self._chain.audit_logger.log(
            AuditEventBuilder.sync_conversion_skipped(pair=pair.key, amount=amount)
        )
        quote = RateQuote(pair=pair, as_of=today, rate=1.0, source=RateSource.UNCONVERTED)
        return ConversionResult(amount=amount, converted=amount, quote=quote)

    def convert_sync(self, amount: float, source: str, target: str) -> float:
        return self.convert_sync_detailed(amount, source, target).converted

    # =========================================================================
    # Pinned conversion
    # =========================================================================

    def _pinned_quote(
        self,
        pair: CurrencyPair,
        day: date,
        pinned_rates: Optional[PinnedRates],
        correlation_id: Optional[UUID],
    ) -> Optional[RateQuote]:
        value: Any = find_pinned_value(pinned_rates, pair)
        if value is None:
            return None
        if not is_valid_rate(value):
            logger.warning("pinned_rate_rejected", pair=pair.key, value=repr(value))
            self._chain.audit_logger.log(AuditEventBuilder.pinned_rate_rejected(
                pair=pair.key,
                value=value,
                correlation_id=correlation_id,
            ))
            return None
        return RateQuote(pair=pair, as_of=day, rate=float(value), source=RateSource.PINNED)

    async def quote_with_pin(
        self,
        pair: CurrencyPair,
        on_date: Union[date, str],
        pinned_rates: Optional[PinnedRates] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RateQuote:
        """
        Resolve the rate a saved entry uses for a pair.

        Order: identity, valid pinned rate, fresh cache entry, network.
        Pinned values that are zero, negative or not finite are ignored.
        The cache lookup respects the freshness window, so a stale cached
        rate triggers a refetch here (unlike convert_sync).
        """
        day = as_date(on_date)

        if pair.is_identity:
            return RateQuote(pair=pair, as_of=day, rate=1.0, source=RateSource.IDENTITY)

        quote = self._pinned_quote(pair, day, pinned_rates, correlation_id)
        if quote is None:
            quote = await self._chain.fetch_quote(pair.source, pair.target, day, correlation_id)
        return quote

    async def convert_with_pin_detailed(
        self,
        amount: float,
        source: str,
        target: str,
        on_date: Union[date, str],
        pinned_rates: Optional[PinnedRates] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ConversionResult:
        """
        Convert for a saved (or about to be saved) entry.

        See quote_with_pin for the order of precedence. A stale cache
        entry is refetched, not reused.
        """
        quote = await self.quote_with_pin(
            CurrencyPair.of(source, target), on_date, pinned_rates, correlation_id
        )
        return self.apply_quote(amount, quote)

    async def convert_with_pin(
        self,
        amount: float,
        source: str,
        target: str,
        on_date: Union[date, str],
        pinned_rates: Optional[PinnedRates] = None,
    ) -> float:
        result = await self.convert_with_pin_detailed(
            amount, source, target, on_date, pinned_rates
        )
        return result.converted

    # =========================================================================
    # Cache maintenance
    # =========================================================================

    def clear_cache(self) -> None:
        self._chain.cache.clear()

    def cache_stats(self) -> dict:
        return self._chain.cache.stats()
