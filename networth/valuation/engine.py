"""
Entry Valuation

Turns a balance snapshot into totals in the preferred currency:

    total_assets      = sum of converted asset balances
    total_liabilities = sum of converted liability balances
    net_worth         = total_assets - total_liabilities

GUARANTEES:
- Same inputs (including pinned rates) give bit-identical totals.
  Rates are resolved in parallel, one per currency pair, and summing
  happens afterwards in account order.
- Rates fetched live while building an entry are pinned on it, so the
  entry re-values to the same totals later (write-through pinning).
- A degraded (1:1) conversion is reported, never pinned.
"""

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Optional, Union

import structlog

from networth.audit import create_correlation_id
from networth.conversion import CurrencyConverter
from networth.models.account import Account, AccountType, NetWorthEntry
from networth.models.audit import AuditEventBuilder
from networth.models.currency import (
    CurrencyPair,
    PinnedRates,
    RateQuote,
    as_date,
    find_pinned_value,
    is_valid_rate,
    normalize_code,
)
from networth.models.valuation import ValuationResult


logger = structlog.get_logger(__name__)


def _pin_key(key: Union[str, CurrencyPair]) -> str:
    return key.key if isinstance(key, CurrencyPair) else normalize_code(key)


class EntryValuator:
    """Values balance snapshots and builds entries with pinned rates."""

    def __init__(self, converter: CurrencyConverter):
        self._converter = converter

    @property
    def converter(self) -> CurrencyConverter:
        return self._converter

    async def value_entry(
        self,
        accounts: Sequence[Account],
        balances: Mapping[str, float],
        preferred_currency: str,
        on_date: Union[date, str],
        pinned_rates: Optional[PinnedRates] = None,
    ) -> ValuationResult:
        """
        Compute totals for one snapshot.

        Accounts without a balance count as 0. One quote is resolved per
        distinct currency pair (pinned rates first) and shared by every
        account in that currency, so siblings never mix rates.
        """
        preferred = normalize_code(preferred_currency)
        day = as_date(on_date)
        correlation_id = create_correlation_id()

        pairs = list(dict.fromkeys(
            CurrencyPair.of(account.currency, preferred) for account in accounts
        ))
        quotes: list[RateQuote] = await asyncio.gather(*(
            self._converter.quote_with_pin(pair, day, pinned_rates, correlation_id)
            for pair in pairs
        ))
        quote_for = dict(zip(pairs, quotes))

        total_assets = 0.0
        total_liabilities = 0.0
        converted_values: dict[str, float] = {}
        captured_rates: dict[str, float] = {}
        unconverted: list[str] = []

        for account in accounts:
            quote = quote_for[CurrencyPair.of(account.currency, preferred)]
            result = self._converter.apply_quote(float(balances.get(account.id, 0.0)), quote)
            converted_values[account.id] = result.converted
            if account.type == AccountType.ASSET:
                total_assets += result.converted
            else:
                total_liabilities += result.converted

        for pair, quote in quote_for.items():
            if quote.is_live:
                captured_rates[pair.key] = quote.rate
            elif quote.is_degraded:
                unconverted.append(pair.key)

        valuation = ValuationResult(
            preferred_currency=preferred,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            net_worth=total_assets - total_liabilities,
            converted_values=converted_values,
            captured_rates=captured_rates,
            unconverted_pairs=unconverted,
        )

        self._converter.chain.audit_logger.log(AuditEventBuilder.entry_valued(
            on_date=day.isoformat(),
            preferred_currency=preferred,
            net_worth=valuation.net_worth,
            unconverted_pairs=unconverted,
            correlation_id=correlation_id,
        ))
        return valuation

    async def build_entry(
        self,
        accounts: Sequence[Account],
        balances: Mapping[str, float],
        preferred_currency: str,
        on_date: Union[date, str],
        pinned_rates: Optional[PinnedRates] = None,
        entry_id: Optional[str] = None,
    ) -> NetWorthEntry:
        """
        Value a snapshot and return it as an entry ready to persist.

        exchange_rates = valid pinned rates + rates fetched during this pass.
        """
        day = as_date(on_date)
        valuation = await self.value_entry(
            accounts, balances, preferred_currency, day, pinned_rates
        )

        exchange_rates: dict[str, float] = {}
        for key, value in (pinned_rates or {}).items():
            if is_valid_rate(value):
                exchange_rates[_pin_key(key)] = float(value)
        for key, rate in valuation.captured_rates.items():
            exchange_rates.setdefault(key, rate)

        if valuation.unconverted_pairs:
            logger.warning(
                "entry_saved_with_unconverted_balances",
                date=day.isoformat(),
                pairs=valuation.unconverted_pairs,
            )

        fields = dict(
            date=day,
            account_values={account.id: float(balances.get(account.id, 0.0)) for account in accounts},
            total_assets=valuation.total_assets,
            total_liabilities=valuation.total_liabilities,
            net_worth=valuation.net_worth,
            exchange_rates=exchange_rates or None,
        )
        if entry_id is not None:
            fields["id"] = entry_id
        return NetWorthEntry(**fields)

    async def revalue_entry(
        self,
        entry: NetWorthEntry,
        accounts: Sequence[Account],
        preferred_currency: str,
    ) -> ValuationResult:
        """
        Re-derive a saved entry's totals with its own pinned rates.

        Balances of accounts that no longer exist are ignored.
        """
        present = [account for account in accounts if account.id in entry.account_values]
        return await self.value_entry(
            present,
            entry.account_values,
            preferred_currency,
            entry.date,
            entry.exchange_rates,
        )

    async def value_history(
        self,
        entries: Iterable[NetWorthEntry],
        accounts: Sequence[Account],
        preferred_currency: str,
    ) -> list[tuple[date, ValuationResult]]:
        """Trend series: every entry re-valued, oldest first."""
        ordered = sorted(entries, key=lambda entry: entry.date)
        series = []
        for entry in ordered:
            valuation = await self.revalue_entry(entry, accounts, preferred_currency)
            series.append((entry.date, valuation))
        return series


def recalculate_totals_sync(
    entry: NetWorthEntry,
    accounts: Sequence[Account],
    preferred_currency: str,
    converter: CurrencyConverter,
) -> ValuationResult:
    """
    Non-blocking re-valuation of a saved entry.

    Uses the entry's pinned rate where usable, otherwise today's cached
    rate, otherwise leaves the balance unconverted. Never touches the network.
    """
    preferred = normalize_code(preferred_currency)
    by_id = {account.id: account for account in accounts}

    total_assets = 0.0
    total_liabilities = 0.0
    converted_values: dict[str, float] = {}
    unconverted: list[str] = []

    for account_id, value in entry.account_values.items():
        account = by_id.get(account_id)
        if account is None:
            continue

        pair = CurrencyPair.of(account.currency, preferred)
        if pair.is_identity:
            converted = value
        else:
            rate = find_pinned_value(entry.exchange_rates, pair)
            if is_valid_rate(rate):
                converted = value * rate
            else:
                result = converter.convert_sync_detailed(value, account.currency, preferred)
                converted = result.converted
                if result.is_degraded and pair.key not in unconverted:
                    unconverted.append(pair.key)

        converted_values[account_id] = converted
        if account.type == AccountType.ASSET:
            total_assets += converted
        else:
            total_liabilities += converted

    return ValuationResult(
        preferred_currency=preferred,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        converted_values=converted_values,
        unconverted_pairs=unconverted,
    )
