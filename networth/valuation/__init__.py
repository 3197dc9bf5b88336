"""Valuation package: entry totals and portfolio aggregates."""

from networth.valuation.engine import EntryValuator, recalculate_totals_sync
from networth.valuation.portfolio import (
    allocation,
    category_breakdown,
    summarize_portfolio,
)

__all__ = [
    "EntryValuator",
    "allocation",
    "category_breakdown",
    "recalculate_totals_sync",
    "summarize_portfolio",
]
