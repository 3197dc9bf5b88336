"""
Portfolio aggregates: allocation per account and per category.

Pure functions of (accounts, converted values). Nothing is stored and the
same inputs always give the same output, including ordering.
"""

from collections.abc import Mapping, Sequence

from networth.models.account import Account, AccountType, category_label
from networth.models.valuation import (
    AllocationItem,
    CategoryBreakdown,
    PortfolioSummary,
)


def _percentage(value: float, total: float) -> float:
    return (value / total) * 100 if total > 0 else 0.0


def allocation(
    accounts: Sequence[Account],
    converted_values: Mapping[str, float],
    account_type: AccountType,
) -> list[AllocationItem]:
    """Accounts of one type with a positive value, largest first."""
    held = [
        (account, converted_values[account.id])
        for account in accounts
        if account.type == account_type and converted_values.get(account.id, 0.0) > 0
    ]
    total = sum(value for _, value in held)

    items = [
        AllocationItem(
            account_id=account.id,
            name=account.name,
            category=account.category,
            type=account.type,
            value=value,
            percentage=_percentage(value, total),
        )
        for account, value in held
    ]
    return sorted(items, key=lambda item: item.value, reverse=True)


def category_breakdown(
    accounts: Sequence[Account],
    converted_values: Mapping[str, float],
    account_type: AccountType,
) -> list[CategoryBreakdown]:
    """Allocation grouped by category, largest category first."""
    items = allocation(accounts, converted_values, account_type)
    total = sum(item.value for item in items)

    grouped: dict[str, list[AllocationItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)

    breakdown = []
    for category, members in grouped.items():
        category_total = sum(item.value for item in members)
        breakdown.append(CategoryBreakdown(
            category=category,
            label=category_label(category),
            type=account_type,
            total=category_total,
            percentage=_percentage(category_total, total),
            accounts=members,
        ))
    return sorted(breakdown, key=lambda entry: entry.total, reverse=True)


def summarize_portfolio(
    accounts: Sequence[Account],
    converted_values: Mapping[str, float],
) -> PortfolioSummary:
    """Totals, per-account allocation and per-category breakdown for both sides."""
    total_assets = 0.0
    total_liabilities = 0.0
    for account in accounts:
        value = converted_values.get(account.id, 0.0)
        if account.type == AccountType.ASSET:
            total_assets += value
        else:
            total_liabilities += value

    return PortfolioSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        asset_allocation=allocation(accounts, converted_values, AccountType.ASSET),
        liability_allocation=allocation(accounts, converted_values, AccountType.LIABILITY),
        asset_categories=category_breakdown(accounts, converted_values, AccountType.ASSET),
        liability_categories=category_breakdown(accounts, converted_values, AccountType.LIABILITY),
    )
