"""Currency conversion package."""

from networth.conversion.converter import CurrencyConverter

__all__ = ["CurrencyConverter"]
