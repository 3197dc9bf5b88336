"""
Account and Entry Models

These models describe what the user tracks: accounts (assets and
liabilities) and dated net-worth entries holding one balance per account.

CRITICAL: Balances in an entry are stored in each account's OWN currency.
Totals are derived in the preferred currency, and the rates used for that
are pinned on the entry (exchange_rates) so re-valuing it never drifts.
"""

from datetime import date
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from networth.models.currency import (
    CurrencyPair,
    find_pinned_value,
    is_valid_rate,
    normalize_code,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Which side of the balance sheet an account sits on."""
    ASSET = "asset"
    LIABILITY = "liability"


class AccountCategory(str, Enum):
    """
    Predefined account categories.

    Accounts may still carry a custom category string; these are the
    ones with known labels.
    """
    CASH = "cash"
    STOCKS = "stocks"
    CRYPTO = "crypto"
    PROPERTIES = "properties"
    OTHER_ASSETS = "other-assets"
    MORTGAGE = "mortgage"
    LOANS = "loans"
    CREDIT_CARD_DEBT = "credit-card-debt"
    OTHER_LIABILITIES = "other-liabilities"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @property
    def account_type(self) -> AccountType:
        if self in LIABILITY_CATEGORIES:
            return AccountType.LIABILITY
        return AccountType.ASSET


_CATEGORY_LABELS = {
    AccountCategory.CASH: "Cash",
    AccountCategory.STOCKS: "Stocks",
    AccountCategory.CRYPTO: "Crypto",
    AccountCategory.PROPERTIES: "Properties",
    AccountCategory.OTHER_ASSETS: "Other Assets",
    AccountCategory.MORTGAGE: "Mortgage",
    AccountCategory.LOANS: "Loans",
    AccountCategory.CREDIT_CARD_DEBT: "Credit Card Debt",
    AccountCategory.OTHER_LIABILITIES: "Other Liabilities",
}

ASSET_CATEGORIES = (
    AccountCategory.CASH,
    AccountCategory.STOCKS,
    AccountCategory.CRYPTO,
    AccountCategory.PROPERTIES,
    AccountCategory.OTHER_ASSETS,
)

LIABILITY_CATEGORIES = (
    AccountCategory.MORTGAGE,
    AccountCategory.LOANS,
    AccountCategory.CREDIT_CARD_DEBT,
    AccountCategory.OTHER_LIABILITIES,
)


def category_label(category: str) -> str:
    """Human label for a category; custom categories are shown as-is."""
    try:
        return AccountCategory(category).label
    except ValueError:
        return category


# =============================================================================
# CORE MODELS
# =============================================================================

class Account(BaseModel):
    """
    A tracked account.

    Editing name, category or currency never touches rates already
    pinned on historical entries.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Stable account identifier")
    name: str = Field(..., max_length=200, description="Display name")
    type: AccountType = Field(..., description="Asset or liability")
    category: str = Field(
        default=AccountCategory.OTHER_ASSETS.value,
        description="Category value (predefined or custom)"
    )
    currency: str = Field(..., min_length=1, description="Native currency code")

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return normalize_code(v)

    @field_validator('category', mode='before')
    @classmethod
    def category_value(cls, v):
        if isinstance(v, AccountCategory):
            return v.value
        return v

    @property
    def is_asset(self) -> bool:
        return self.type == AccountType.ASSET


class NetWorthEntry(BaseModel):
    """
    A saved snapshot of all balances on one calendar date.

    exchange_rates maps "FROM-TO" to the rate used when the totals were
    computed. A positive finite stored rate always wins over a fresh one.
    """

    id: str = Field(
        default_factory=lambda: f"entry-{uuid4().hex}",
        description="Unique entry ID"
    )
    date: date  # one entry per calendar date, enforced by callers
    account_values: dict[str, float] = Field(
        default_factory=dict,
        description="Balance per account ID, in the account's own currency"
    )
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    net_worth: float = 0.0
    exchange_rates: Optional[dict[str, float]] = Field(
        default=None,
        description="Pinned rates keyed by 'FROM-TO'"
    )

    def pinned_rate(self, pair: CurrencyPair) -> Optional[float]:
        """The stored rate for a pair, only if it is usable."""
        value = find_pinned_value(self.exchange_rates, pair)
        return float(value) if is_valid_rate(value) else None
