"""Calculation outputs.

All result models are created fresh per invocation and are frozen. Field
names are stable; presentation and report layers consume them directly (or
through `model_dump()` / the computation blocks).

Forward results answer "what will this scheme cost and be worth?"; historical
results answer "what would this scheme have cost, and what is it worth
today?".
"""

from decimal import Decimal
from typing import Optional, Tuple
from pydantic import Field

from .base import DomainModel, AssetQuantity, FiatAmount, MonthOffset, VestedPercent
from .grants import GrantEvent
from .prices import CostBasisMethod


# =============================================================================
# Vesting schedule rows
# =============================================================================

class VestingTimelineRow(DomainModel):
    """Vesting state at one month offset."""

    month: MonthOffset
    cumulative_granted: AssetQuantity
    vested_percent: VestedPercent
    bonus_amount: AssetQuantity = Decimal("0")
    vested_amount: AssetQuantity


# =============================================================================
# Timeline points
# =============================================================================

class TimelinePoint(DomainModel):
    """One point on a forward or historical timeline.

    Forward points are keyed by month offset only. Historical points also
    carry the calendar (year, month) they summarize and the grants that
    landed in that year.
    """

    month_offset: MonthOffset = Field(
        description="Months after the initial grant"
    )

    year: Optional[int] = Field(
        default=None,
        description="Calendar year (historical timelines only)"
    )

    month: Optional[int] = Field(
        default=None,
        description="Calendar month (historical timelines only)"
    )

    cumulative_asset: AssetQuantity = Field(
        description="Asset held at this point (forward: grants plus bonuses; historical: grants only)"
    )

    cumulative_cost_basis: FiatAmount = Field(
        description="Fiat cost of the grants so far"
    )

    current_value: FiatAmount = Field(
        description="Fiat value of cumulative_asset at this point's valuation price"
    )

    vested_amount: AssetQuantity = Field(
        description="Asset unconditionally owned at this point"
    )

    unit_price: Optional[Decimal] = Field(
        default=None,
        description="Projected price used for current_value (forward timelines only)"
    )

    grants: Tuple[GrantEvent, ...] = Field(
        default=(),
        description="Grants that landed in this period"
    )

    @property
    def period(self):
        """(year, month) for historical points, (None, month_offset) for forward points."""
        if self.year is None:
            return (None, self.month_offset)
        return (self.year, self.month)


# =============================================================================
# Growth projections
# =============================================================================

class GrowthProjection(DomainModel):
    """Projected price at a month offset."""

    month: MonthOffset
    price: Decimal
    growth_from_start: Decimal = Field(
        description="Percent growth relative to the starting price"
    )


class ScenarioOutcome(DomainModel):
    """Result of projecting a fixed amount under one growth scenario."""

    scenario: str
    growth_rate: Decimal = Field(description="Annual growth rate in percent")
    final_price: Decimal
    final_value: FiatAmount
    growth_multiple: Decimal


class OutcomeRange(DomainModel):
    """Spread of final values across a scenario sweep."""

    months: MonthOffset
    low: ScenarioOutcome
    high: ScenarioOutcome

    @property
    def spread(self) -> Decimal:
        return self.high.final_value - self.low.final_value


# =============================================================================
# Forward result
# =============================================================================

class ForwardSummary(DomainModel):
    max_commitment: FiatAmount = Field(
        description="Fiat cost of all grants at the starting price"
    )
    average_vesting_period: Decimal = Field(
        description="Milestone months weighted by vested percent"
    )
    horizon_months: MonthOffset
    final_value: FiatAmount
    final_vested_amount: AssetQuantity
    total_bonus: AssetQuantity = Decimal("0")
    growth_scenarios: Tuple[ScenarioOutcome, ...] = ()


class ForwardCalculationResult(DomainModel):
    """Forward projection of a scheme from a live price."""

    timeline: Tuple[TimelinePoint, ...]
    total_asset_needed: AssetQuantity
    total_cost: FiatAmount
    summary: ForwardSummary


# =============================================================================
# Historical result
# =============================================================================

class CostBasisYear(DomainModel):
    """Per-year cost-basis audit row."""

    year: int
    asset_granted: AssetQuantity
    cost: FiatAmount
    grant_count: int
    unit_price: Decimal = Field(description="Price selected by the cost-basis method")


class HistoricalSummary(DomainModel):
    starting_year: int
    ending_year: int
    years_analyzed: int
    cost_basis_method: CostBasisMethod
    average_periodic_grant: AssetQuantity
    cost_basis_breakdown: Tuple[CostBasisYear, ...] = ()


class HistoricalCalculationResult(DomainModel):
    """Backward reconstruction of a scheme against historical prices.

    current_total_value uses the live price; total_cost_basis uses the
    selected historical valuation policy.
    """

    timeline: Tuple[TimelinePoint, ...]
    total_asset_granted: AssetQuantity
    total_cost_basis: FiatAmount
    current_total_value: FiatAmount
    total_return: Decimal = Field(description="current_total_value - total_cost_basis (may be negative)")
    annualized_return: float = Field(description="Compound annual return as a fraction (0.1 = 10%)")
    grant_breakdown: Tuple[GrantEvent, ...]
    summary: HistoricalSummary
