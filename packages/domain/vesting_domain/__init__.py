"""Vesting Domain Engine - Core models and calculators for asset-denominated vesting.

This package models employer schemes that grant an appreciating asset
(e.g. Bitcoin) on a schedule and vest it by milestones:
- Scheme definitions, milestone and custom vesting policies
- Fixed-precision asset and fiat arithmetic
- Forward projections from a live price and a growth rate
- Historical reconstructions against yearly price bands

The domain layer is designed to be:
- Framework-agnostic (no web or UI dependencies)
- Testable (pure Python with Pydantic validation)
- Deterministic (explicit ending year, no wall-clock reads)
"""

import logging

from .schemas import *  # noqa: F403, F401
from .errors import (
    VestingDomainError,
    InvalidAmount,
    InvalidScheme,
    InvalidPriceBand,
    MissingPriceData,
)
from .catalog import (
    SchemeCatalog,
    FORWARD_CATALOG,
    HISTORICAL_CATALOG,
    REFERENCE_PRICE_BANDS,
    capabilities_for,
    reference_price_table,
)
from .engines import VestingScheduleEngine, CostBasisEngine, GrowthProjector
from .calculators import calculate_forward, calculate_historical

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
