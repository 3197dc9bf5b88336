"""
Data Models Package

This package contains all Pydantic models used by the valuation engine.
"""

from networth.models.account import (
    ASSET_CATEGORIES,
    LIABILITY_CATEGORIES,
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
    ConversionResult,
    CurrencyPair,
    PinnedRates,
    RateQuote,
    RateSource,
    is_valid_rate,
)
from networth.models.valuation import (
    AllocationItem,
    CategoryBreakdown,
    PortfolioSummary,
    ValuationResult,
)

__all__ = [
    # Account models
    "ASSET_CATEGORIES",
    "LIABILITY_CATEGORIES",
    "Account",
    "AccountCategory",
    "AccountType",
    "NetWorthEntry",
    "category_label",
    # Currency models
    "ConversionResult",
    "CurrencyPair",
    "PinnedRates",
    "RateQuote",
    "RateSource",
    "is_valid_rate",
    # Valuation models
    "AllocationItem",
    "CategoryBreakdown",
    "PortfolioSummary",
    "ValuationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
