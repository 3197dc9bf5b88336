"""
Net Worth - Valuation Package

The multi-currency valuation engine behind a personal net-worth tracker.
Account balances recorded in many currencies are converted into one
preferred currency, consistently across time.

DESIGN PRINCIPLES:
1. A saved entry always re-values to the same totals (pinned rates win)
2. Network failures degrade, they never crash the caller
3. Degraded results are visible, not silent
4. No ambient state - caches and sources are injected
"""

__version__ = "1.0.0"
__author__ = "Net Worth Team"
