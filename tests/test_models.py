"""
Tests for Net Worth models

Test strategy:
1. Unit tests for value types and validators (this module)
2. Component tests for cache, chain, converter and valuation (fakes only)
3. No real API calls in tests (providers are faked or the session is mocked)
"""

import pytest
from datetime import date, datetime
from uuid import uuid4

from networth.audit import AuditLogger
from networth.models.account import (
    Account,
    AccountCategory,
    AccountType,
    NetWorthEntry,
    category_label,
)
from networth.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from networth.models.currency import (
    CurrencyPair,
    RateQuote,
    RateSource,
    as_date,
    find_pinned_value,
    is_valid_rate,
)


class TestCurrencyModels:
    """Tests for currency pairs, quotes and rate validity."""

    def test_pair_is_normalized(self):
        """Test codes are upper-cased and stripped."""
        pair = CurrencyPair.of(" usd", "eur ")
        assert pair.source == "USD"
        assert pair.target == "EUR"
        assert pair.key == "USD-EUR"
        assert str(pair) == "USD-EUR"

    def test_pair_is_a_value(self):
        """Test equal pairs hash alike and can key dicts."""
        assert CurrencyPair.of("USD", "EUR") == CurrencyPair.of("usd", "eur")
        assert {CurrencyPair.of("USD", "EUR"): 1}[CurrencyPair.of("USD", "EUR")] == 1

    def test_pair_from_key(self):
        """Test parsing the persisted form."""
        assert CurrencyPair.from_key("GBP-JPY") == CurrencyPair.of("GBP", "JPY")
        with pytest.raises(ValueError):
            CurrencyPair.from_key("GBPJPY")

    def test_identity_and_inverse(self):
        """Test identity detection and direction swap."""
        assert CurrencyPair.of("SGD", "sgd").is_identity is True
        assert CurrencyPair.of("USD", "EUR").inverse() == CurrencyPair.of("EUR", "USD")

    @pytest.mark.parametrize("value, expected", [
        (0.9, True),
        (150, True),
        (0, False),
        (-1.0, False),
        (float("nan"), False),
        (float("inf"), False),
        (None, False),
        ("0.9", False),
        (True, False),
    ])
    def test_rate_validity(self, value, expected):
        """Test only finite positive numbers are usable rates."""
        assert is_valid_rate(value) is expected

    def test_find_pinned_value_accepts_both_key_styles(self):
        """Test lookups by pair object or by "FROM-TO" string."""
        pair = CurrencyPair.of("USD", "EUR")
        assert find_pinned_value({"USD-EUR": 0.9}, pair) == 0.9
        assert find_pinned_value({pair: 0.8}, pair) == 0.8
        assert find_pinned_value(None, pair) is None
        assert find_pinned_value({"EUR-USD": 1.1}, pair) is None

    def test_find_pinned_value_ignores_key_case(self):
        """Test persisted keys are matched after normalization."""
        pair = CurrencyPair.of("USD", "EUR")
        assert find_pinned_value({"usd-eur": 0.9}, pair) == 0.9
        assert find_pinned_value({" Usd-Eur ": 0.8}, pair) == 0.8

    def test_as_date(self):
        """Test dates, datetimes and ISO strings are accepted."""
        assert as_date("2024-06-14") == date(2024, 6, 14)
        assert as_date(datetime(2024, 6, 14, 23, 59)) == date(2024, 6, 14)
        assert as_date(date(2024, 6, 14)) == date(2024, 6, 14)

    def test_quote_provenance(self):
        """Test degraded and live flags."""
        pair = CurrencyPair.of("USD", "EUR")
        day = date(2024, 6, 14)
        degraded = RateQuote(pair=pair, as_of=day, rate=1.0, source=RateSource.UNCONVERTED)
        cached = RateQuote(pair=pair, as_of=day, rate=0.9, source=RateSource.CACHE)
        pinned = RateQuote(pair=pair, as_of=day, rate=0.9, source=RateSource.PINNED)

        assert degraded.is_degraded is True
        assert degraded.is_live is False
        assert cached.is_live is True
        assert pinned.is_live is False


class TestAccountModels:
    """Tests for accounts, categories and entries."""

    def test_account_creation(self):
        """Test Account model creation and normalization."""
        account = Account(
            id="acc-1",
            name="  Savings  ",
            type=AccountType.ASSET,
            category=AccountCategory.CASH,
            currency="sgd",
        )
        assert account.name == "Savings"
        assert account.category == "cash"
        assert account.currency == "SGD"
        assert account.is_asset is True

    def test_custom_category_is_kept(self):
        """Test categories outside the predefined list are allowed."""
        account = Account(id="a", name="Wine", type="asset", category="wine-cellar", currency="EUR")
        assert account.category == "wine-cellar"
        assert category_label("wine-cellar") == "wine-cellar"

    def test_category_labels_and_sides(self):
        """Test predefined labels and which side each category belongs to."""
        assert AccountCategory.CREDIT_CARD_DEBT.label == "Credit Card Debt"
        assert category_label("other-assets") == "Other Assets"
        assert AccountCategory.MORTGAGE.account_type == AccountType.LIABILITY
        assert AccountCategory.CRYPTO.account_type == AccountType.ASSET

    def test_entry_defaults(self):
        """Test a new entry gets an ID and no pinned rates."""
        entry = NetWorthEntry(date=date(2024, 6, 14))
        assert entry.id.startswith("entry-")
        assert entry.exchange_rates is None
        assert entry.account_values == {}

    def test_entry_accepts_iso_date(self):
        """Test the date parses from its persisted form."""
        entry = NetWorthEntry(date="2024-06-14", account_values={"a": 1.0})
        assert entry.date == date(2024, 6, 14)

    def test_entry_pinned_rate(self):
        """Test only usable stored rates are returned."""
        entry = NetWorthEntry(
            date=date(2024, 6, 14),
            exchange_rates={"USD-EUR": 0.9, "USD-GBP": 0.0},
        )
        assert entry.pinned_rate(CurrencyPair.of("USD", "EUR")) == 0.9
        assert entry.pinned_rate(CurrencyPair.of("USD", "GBP")) is None
        assert entry.pinned_rate(CurrencyPair.of("USD", "JPY")) is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RATE_FETCHED,
            severity=AuditSeverity.DEBUG,
            description="Rate fetched",
        )
        assert event.event_type == AuditEventType.RATE_FETCHED
        assert event.event_id is not None
        assert event.timestamp is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to a structured log dictionary."""
        correlation_id = uuid4()
        event = AuditEventBuilder.provider_failed(
            pair="USD-EUR",
            on_date="2024-06-14",
            provider="frankfurter",
            error_message="timeout",
            correlation_id=correlation_id,
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "provider_failed"
        assert log_dict["severity"] == "warning"
        assert log_dict["entity_id"] == "USD-EUR"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["error_message"] == "timeout"

    def test_degraded_fallback_builder(self):
        """Test the 1:1 fallback is a warning."""
        event = AuditEventBuilder.degraded_fallback("TWD-USD", "2024-06-14")
        assert event.event_type == AuditEventType.DEGRADED_FALLBACK
        assert event.severity == AuditSeverity.WARNING

    def test_entry_valued_severity(self):
        """Test an entry with unconverted pairs is flagged."""
        clean = AuditEventBuilder.entry_valued("2024-06-14", "USD", 700.0, [])
        degraded = AuditEventBuilder.entry_valued("2024-06-14", "USD", 700.0, ["XAU-USD"])
        assert clean.severity == AuditSeverity.INFO
        assert degraded.severity == AuditSeverity.WARNING


class TestAuditLogger:
    """Tests for the in-memory audit history."""

    def test_history_is_filtered_and_bounded(self):
        """Test filtering by type and correlation, and the size bound."""
        audit = AuditLogger(history_size=2)
        correlation_id = uuid4()

        audit.log(AuditEventBuilder.rate_cache_hit("USD-EUR", "2024-06-14", 0.9))
        audit.log(AuditEventBuilder.degraded_fallback("TWD-USD", "2024-06-14", correlation_id))
        audit.log(AuditEventBuilder.rate_fetched("USD-GBP", "2024-06-14", 0.8, "primary"))

        assert len(audit.recent_events()) == 2
        assert audit.recent_events(AuditEventType.RATE_CACHE_HIT) == []
        assert len(audit.recent_events(correlation_id=correlation_id)) == 1

        audit.clear()
        assert audit.recent_events() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
