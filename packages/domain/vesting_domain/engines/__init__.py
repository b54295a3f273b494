"""Calculation engines.

- VestingScheduleEngine: grant accrual and vesting per month
- CostBasisEngine: fiat acquisition cost against historical price bands
- GrowthProjector: compounding price projections and scenario sweeps
"""

from .vesting import VestingScheduleEngine, resolve_vesting_policy
from .cost_basis import (
    CostBasisEngine,
    price_for_method,
    validate_price_band,
    validate_price_table,
)
from .growth import (
    GrowthProjector,
    compound_annual_growth_rate,
    default_scenarios,
)

__all__ = [
    "VestingScheduleEngine",
    "resolve_vesting_policy",
    "CostBasisEngine",
    "price_for_method",
    "validate_price_band",
    "validate_price_table",
    "GrowthProjector",
    "compound_annual_growth_rate",
    "default_scenarios",
]
