"""Calculation configuration.

Options that shape a calculation without being part of the scheme or the
market data. Calculators accept an optional CFG and fall back to the defaults
below.
"""

from decimal import Decimal
from typing import Optional, Tuple
from pydantic import Field

from .base import DomainModel, CalendarMonth, MonthOffset


class GrowthScenarioCFG(DomainModel):
    """One named growth scenario, expressed as a multiple of the base rate."""

    name: str
    rate_multiplier: Decimal = Field(
        description="Scenario rate = base annual rate x multiplier (0.5 = half-rate)"
    )


DEFAULT_SCENARIOS: Tuple[GrowthScenarioCFG, ...] = (
    GrowthScenarioCFG(name="Conservative", rate_multiplier=Decimal("0.5")),
    GrowthScenarioCFG(name="Base Case", rate_multiplier=Decimal("1")),
    GrowthScenarioCFG(name="Optimistic", rate_multiplier=Decimal("1.5")),
)


class ForwardCalculationCFG(DomainModel):
    """Configuration for forward projections.

    Example:
        ForwardCalculationCFG(
            horizon_months=180,        # look past the last milestone
            include_scenarios=True,
        )
    """

    horizon_months: Optional[MonthOffset] = Field(
        default=None,
        description="Months to project. None = latest milestone or custom vesting event"
    )

    include_scenarios: bool = Field(
        default=False,
        description="Attach a half/base/1.5x growth-rate sweep to the summary"
    )

    scenarios: Tuple[GrowthScenarioCFG, ...] = Field(
        default=DEFAULT_SCENARIOS,
        description="Scenarios used when include_scenarios is True"
    )


class HistoricalCalculationCFG(DomainModel):
    """Configuration for historical reconstructions."""

    ending_month: CalendarMonth = Field(
        default=12,
        description="Month summarized by the ending year's timeline point (12 = full year)"
    )

    include_breakdown: bool = Field(
        default=True,
        description="Attach the per-year cost-basis breakdown to the summary"
    )
