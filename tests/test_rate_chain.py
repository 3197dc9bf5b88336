"""Tests for the rate source chain (providers are fakes)."""

import asyncio
import time
from datetime import timedelta

import pytest

from networth.models.audit import AuditEventType
from networth.models.currency import RateSource
from networth.services.rates import (
    PRIMARY_CURRENCIES,
    ProviderUnavailableError,
    RateSourceChain,
)

from tests.conftest import TODAY, FakeProvider


YESTERDAY = TODAY - timedelta(days=1)


def _chain(primary, secondary, cache, **kwargs) -> RateSourceChain:
    return RateSourceChain(
        primary=primary,
        secondary=secondary,
        cache=cache,
        today=lambda: TODAY,
        **kwargs,
    )


class TestIdentity:
    """Same currency never touches cache or network."""

    @pytest.mark.asyncio
    async def test_identity_rate(self, chain, primary, secondary, cache):
        """Test identity pairs resolve to 1.0 with no calls."""
        quote = await chain.fetch_quote("EUR", "EUR", YESTERDAY)
        assert quote.rate == 1.0
        assert quote.source == RateSource.IDENTITY
        assert primary.calls == []
        assert secondary.calls == []
        assert len(cache) == 0


class TestRouting:
    """Which provider is asked, and in which order."""

    @pytest.mark.asyncio
    async def test_primary_serves_major_pairs(self, chain, primary, secondary):
        """Test both currencies on the allow-list go to the primary."""
        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.rate == 0.9
        assert quote.source == RateSource.PRIMARY
        assert primary.calls == [("USD-EUR", YESTERDAY)]
        assert secondary.calls == []

    @pytest.mark.asyncio
    async def test_unlisted_currency_skips_primary(self, chain, primary, secondary):
        """Test a pair outside the allow-list never attempts the primary."""
        assert "TWD" not in PRIMARY_CURRENCIES

        quote = await chain.fetch_quote("TWD", "USD", YESTERDAY)
        assert quote.rate == 0.031
        assert quote.source == RateSource.SECONDARY
        assert primary.calls == []
        assert secondary.calls == [("TWD-USD", YESTERDAY)]

    @pytest.mark.asyncio
    async def test_primary_failure_falls_back(self, secondary, cache, audit_logger):
        """Test the secondary answers when the primary errors."""
        primary = FakeProvider(
            "primary",
            currencies=PRIMARY_CURRENCIES,
            error=ProviderUnavailableError("primary request failed: 503"),
        )
        chain = _chain(primary, secondary, cache, audit_logger=audit_logger)

        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.rate == 0.91
        assert quote.source == RateSource.SECONDARY
        assert len(primary.calls) == 1
        failures = audit_logger.recent_events(AuditEventType.PROVIDER_FAILED)
        assert [e.details["provider"] for e in failures] == ["primary"]

    @pytest.mark.asyncio
    async def test_missing_rate_falls_back(self, secondary, cache):
        """Test a primary response without the rate falls through."""
        primary = FakeProvider("primary", rates={}, currencies=PRIMARY_CURRENCIES)
        chain = _chain(primary, secondary, cache)

        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.source == RateSource.SECONDARY

    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(self, secondary, cache):
        """Test even an unexpected provider exception is contained."""
        primary = FakeProvider(
            "primary", currencies=PRIMARY_CURRENCIES, error=KeyError("rates")
        )
        chain = _chain(primary, secondary, cache)

        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.source == RateSource.SECONDARY

    @pytest.mark.asyncio
    async def test_hung_provider_times_out(self, secondary, cache):
        """Test a provider that never answers is abandoned after the timeout."""
        class SlowProvider(FakeProvider):
            def fetch_rate(self, pair, on_date, today):
                time.sleep(0.5)
                return 0.5

        primary = SlowProvider("slow", currencies=PRIMARY_CURRENCIES)
        chain = _chain(primary, secondary, cache, fetch_timeout_seconds=0.05)

        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.rate == 0.91
        assert quote.source == RateSource.SECONDARY


class TestDegradedFallback:
    """All providers down still yields a number, flagged as unconverted."""

    @pytest.mark.asyncio
    async def test_all_providers_down(self, cache, audit_logger):
        """Test 1.0 is returned, not an exception, and it is observable."""
        error = ProviderUnavailableError("down")
        primary = FakeProvider("primary", currencies=PRIMARY_CURRENCIES, error=error)
        secondary = FakeProvider("secondary", error=error)
        chain = _chain(primary, secondary, cache, audit_logger=audit_logger)

        quote = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        assert quote.rate == 1.0
        assert quote.source == RateSource.UNCONVERTED
        assert quote.is_degraded is True
        assert len(audit_logger.recent_events(AuditEventType.DEGRADED_FALLBACK)) == 1

    @pytest.mark.asyncio
    async def test_degraded_rate_is_not_cached(self, cache):
        """Test a later call retries the network instead of reusing 1.0."""
        error = ProviderUnavailableError("down")
        primary = FakeProvider("primary", currencies=PRIMARY_CURRENCIES, error=error)
        secondary = FakeProvider("secondary", error=error)
        chain = _chain(primary, secondary, cache)

        await chain.fetch_rate("USD", "EUR", YESTERDAY)
        await chain.fetch_rate("USD", "EUR", YESTERDAY)
        assert len(cache) == 0
        assert len(primary.calls) == 2


class TestCachingAndDates:
    """Cache write-through and date handling."""

    @pytest.mark.asyncio
    async def test_successful_fetch_is_cached(self, chain, primary, cache):
        """Test the second call is served from cache."""
        first = await chain.fetch_quote("USD", "EUR", YESTERDAY)
        second = await chain.fetch_quote("USD", "EUR", YESTERDAY)

        assert first.source == RateSource.PRIMARY
        assert second.source == RateSource.CACHE
        assert second.rate == 0.9
        assert len(primary.calls) == 1
        assert cache.get("USD", "EUR", YESTERDAY) == 0.9

    @pytest.mark.asyncio
    async def test_stale_cache_refetches(self, chain, primary, clock):
        """Test an entry past its freshness window triggers a new fetch."""
        await chain.fetch_rate("USD", "EUR", YESTERDAY)
        clock.advance(5 * 60 + 1)
        await chain.fetch_rate("USD", "EUR", YESTERDAY)
        assert len(primary.calls) == 2

    @pytest.mark.asyncio
    async def test_future_date_is_clamped_to_today(self, chain, primary, cache):
        """Test providers are never asked for a future date."""
        quote = await chain.fetch_quote("USD", "EUR", TODAY + timedelta(days=30))
        assert quote.as_of == TODAY
        assert primary.calls == [("USD-EUR", TODAY)]
        assert cache.get("USD", "EUR", TODAY) == 0.9

    @pytest.mark.asyncio
    async def test_missing_date_means_today(self, chain, primary):
        """Test the default date is today."""
        await chain.fetch_rate("USD", "EUR")
        assert primary.calls == [("USD-EUR", TODAY)]

    @pytest.mark.asyncio
    async def test_concurrent_fetches_resolve(self, chain):
        """Test parallel fetches of the same key all resolve to the same rate."""
        rates = await asyncio.gather(*(
            chain.fetch_rate("USD", "EUR", YESTERDAY) for _ in range(5)
        ))
        assert rates == [0.9] * 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
