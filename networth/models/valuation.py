"""
Valuation Result Models

Outputs of the valuation engine. None of these are persisted; they are
recomputed from an entry, the accounts and the rates every time.
"""

from pydantic import BaseModel, Field

from networth.models.account import AccountType


class ValuationResult(BaseModel):
    """
    Totals for one entry in the preferred currency.

    captured_rates holds the rates fetched from the market during this
    valuation, keyed "FROM-TO", ready to be pinned on the entry.
    """

    preferred_currency: str
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    net_worth: float = 0.0
    converted_values: dict[str, float] = Field(
        default_factory=dict,
        description="Account ID -> balance in the preferred currency"
    )
    captured_rates: dict[str, float] = Field(default_factory=dict)
    unconverted_pairs: list[str] = Field(
        default_factory=list,
        description="Pairs valued at a 1:1 stand-in because no rate was available"
    )

    @property
    def is_fully_converted(self) -> bool:
        return not self.unconverted_pairs


# =============================================================================
# PORTFOLIO AGGREGATES
# =============================================================================

class AllocationItem(BaseModel):
    """One account's share of its side of the balance sheet."""

    account_id: str
    name: str
    category: str
    type: AccountType
    value: float
    percentage: float


class CategoryBreakdown(BaseModel):
    """Accounts of one category, summed."""

    category: str
    label: str
    type: AccountType
    total: float
    percentage: float
    accounts: list[AllocationItem] = Field(default_factory=list)


class PortfolioSummary(BaseModel):
    """Allocation view of one valued entry."""

    total_assets: float
    total_liabilities: float
    net_worth: float
    asset_allocation: list[AllocationItem] = Field(default_factory=list)
    liability_allocation: list[AllocationItem] = Field(default_factory=list)
    asset_categories: list[CategoryBreakdown] = Field(default_factory=list)
    liability_categories: list[CategoryBreakdown] = Field(default_factory=list)
