"""
Currency and Rate Models

A currency pair is a value type, not a "FROM-TO" string. The string form
only exists at the persistence boundary (NetWorthEntry.exchange_rates).

DESIGN DECISION: Every rate carries where it came from (RateSource).
A 1:1 rate produced because every provider failed is NOT the same thing
as a genuine parity, and callers can tell them apart.
"""

import math
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


PAIR_SEPARATOR = "-"


def normalize_code(code: str) -> str:
    """Currency codes are compared upper-case, without surrounding spaces."""
    return code.strip().upper()


def as_date(value: Union[date, str]) -> date:
    """Accept a date or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def is_valid_rate(value: Any) -> bool:
    """A usable rate is a real number that is finite and strictly positive."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


class CurrencyPair(BaseModel):
    """
    An ordered (source, target) currency pair.

    Frozen, so it hashes and compares structurally and can key dicts.
    """
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1, description="Currency converted from")
    target: str = Field(..., min_length=1, description="Currency converted to")

    @field_validator('source', 'target')
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_code(v)

    @classmethod
    def of(cls, source: str, target: str) -> "CurrencyPair":
        return cls(source=source, target=target)

    @classmethod
    def from_key(cls, key: str) -> "CurrencyPair":
        """Parse the persisted "FROM-TO" form."""
        source, sep, target = key.partition(PAIR_SEPARATOR)
        if not sep or not source or not target:
            raise ValueError(f"Invalid currency pair key: {key!r}")
        return cls(source=source, target=target)

    @property
    def key(self) -> str:
        """The persisted "FROM-TO" form."""
        return f"{self.source}{PAIR_SEPARATOR}{self.target}"

    @property
    def is_identity(self) -> bool:
        return self.source == self.target

    def inverse(self) -> "CurrencyPair":
        return CurrencyPair(source=self.target, target=self.source)

    def __str__(self) -> str:
        return self.key


PinnedRates = Mapping[Union[str, CurrencyPair], float]


def find_pinned_value(
    pinned_rates: Optional[PinnedRates],
    pair: CurrencyPair,
) -> Optional[Any]:
    """
    Return the raw pinned value for a pair, valid or not.

    Accepts maps keyed by CurrencyPair or by the "FROM-TO" string, the
    latter in any case ("usd-eur" matches USD-EUR).
    """
    if not pinned_rates:
        return None
    if pair in pinned_rates:
        return pinned_rates[pair]
    if pair.key in pinned_rates:
        return pinned_rates[pair.key]
    for key, value in pinned_rates.items():
        if isinstance(key, str) and normalize_code(key) == pair.key:
            return value
    return None


class RateSource(str, Enum):
    """Where a rate came from."""
    IDENTITY = "identity"        # same currency, rate 1.0 by definition
    PINNED = "pinned"            # stored on a saved entry
    CACHE = "cache"              # in-memory cache, fetched earlier
    PRIMARY = "primary"          # primary provider
    SECONDARY = "secondary"      # secondary provider
    UNCONVERTED = "unconverted"  # every source failed, 1.0 stand-in


class RateQuote(BaseModel):
    """A rate for a pair on a date, with its provenance."""
    model_config = ConfigDict(frozen=True)

    pair: CurrencyPair
    as_of: date
    rate: float = Field(..., description="Multiply a source amount by this")
    source: RateSource

    @property
    def is_degraded(self) -> bool:
        """True when the rate is a 1:1 stand-in, not a real rate."""
        return self.source == RateSource.UNCONVERTED

    @property
    def is_live(self) -> bool:
        """True when the rate came from the market (now or earlier this session)."""
        return self.source in (RateSource.CACHE, RateSource.PRIMARY, RateSource.SECONDARY)


class ConversionResult(BaseModel):
    """An amount converted with a quote."""
    model_config = ConfigDict(frozen=True)

    amount: float
    converted: float
    quote: RateQuote

    @property
    def rate(self) -> float:
        return self.quote.rate

    @property
    def source(self) -> RateSource:
        return self.quote.source

    @property
    def is_degraded(self) -> bool:
        return self.quote.is_degraded
