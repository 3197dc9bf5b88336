"""
Shared fixtures.

No real network calls: providers are fakes that record every call, and
time is driven by a fake clock and a fixed "today".
"""

from datetime import date
from typing import Optional

import pytest

from networth.audit import AuditLogger
from networth.conversion import CurrencyConverter
from networth.models.account import Account, AccountType
from networth.models.currency import CurrencyPair
from networth.services.rates import (
    PRIMARY_CURRENCIES,
    RateCache,
    RateNotFoundError,
    RateProviderInterface,
    RateSourceChain,
)
from networth.valuation import EntryValuator


TODAY = date(2024, 6, 15)


class FakeClock:
    """Epoch seconds that only move when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(RateProviderInterface):
    """In-memory provider that records every call."""

    def __init__(
        self,
        name: str,
        rates: Optional[dict[str, float]] = None,
        currencies: Optional[frozenset] = None,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self.rates = dict(rates or {})
        self.currencies = currencies
        self.error = error
        self.calls: list[tuple[str, date]] = []

    def supports(self, pair: CurrencyPair) -> bool:
        if self.currencies is None:
            return True
        return pair.source in self.currencies and pair.target in self.currencies

    def fetch_rate(self, pair: CurrencyPair, on_date: date, today: date) -> float:
        self.calls.append((pair.key, on_date))
        if self.error is not None:
            raise self.error
        if pair.key not in self.rates:
            raise RateNotFoundError(f"{self.name} has no rate for {pair.key}")
        return self.rates[pair.key]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> RateCache:
    return RateCache(ttl_seconds=300, max_entries=100, clock=clock)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def primary() -> FakeProvider:
    return FakeProvider(
        "primary",
        rates={"USD-EUR": 0.9, "EUR-USD": 1.1, "USD-GBP": 0.8, "GBP-USD": 1.25},
        currencies=PRIMARY_CURRENCIES,
    )


@pytest.fixture
def secondary() -> FakeProvider:
    return FakeProvider(
        "secondary",
        rates={"USD-EUR": 0.91, "TWD-USD": 0.031, "USD-TWD": 32.0, "AED-USD": 0.27},
    )


@pytest.fixture
def chain(primary, secondary, cache, audit_logger) -> RateSourceChain:
    return RateSourceChain(
        primary=primary,
        secondary=secondary,
        cache=cache,
        audit_logger=audit_logger,
        today=lambda: TODAY,
        fetch_timeout_seconds=5.0,
    )


@pytest.fixture
def converter(chain) -> CurrencyConverter:
    return CurrencyConverter(chain)


@pytest.fixture
def valuator(converter) -> EntryValuator:
    return EntryValuator(converter)


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(id="checking", name="Checking", type=AccountType.ASSET, category="cash", currency="USD"),
        Account(id="brokerage", name="Brokerage", type=AccountType.ASSET, category="stocks", currency="EUR"),
        Account(id="savings", name="Savings", type=AccountType.ASSET, category="cash", currency="TWD"),
        Account(id="card", name="Credit Card", type=AccountType.LIABILITY, category="credit-card-debt", currency="USD"),
        Account(id="mortgage", name="Mortgage", type=AccountType.LIABILITY, category="mortgage", currency="GBP"),
    ]
