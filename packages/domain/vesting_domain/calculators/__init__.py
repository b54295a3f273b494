"""Calculators composing the engines into full results.

- calculate_forward: vesting schedule + growth projection from a live price
- calculate_historical: vesting schedule + cost basis against yearly price bands
"""

from .forward import calculate_forward
from .historical import annualized_return, calculate_historical, require_price_years

__all__ = [
    "calculate_forward",
    "calculate_historical",
    "annualized_return",
    "require_price_years",
]
