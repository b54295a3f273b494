"""Compensation scheme definitions.

A scheme describes how an employer grants the asset over time and when those
grants become unconditionally owned:
- An initial grant at month 0
- An optional periodic grant at every cadence boundary (yearly by default)
- A milestone table mapping month offsets to cumulative vested percent
- Optional milestone bonuses paid on top of the running balance
- Optional custom vesting events that replace the milestone table outright

Schemes are declarative and read-only. Structural rules that span several
fields (milestone ordering, percent ranges) are checked by the vesting engine
when it resolves a scheme's vesting policy, so that they surface as
InvalidScheme rather than as generic validation errors.
"""

from typing import Literal, Optional, Tuple, Union
from pydantic import Field

from .base import (
    DomainModel,
    AssetQuantity,
    MonthOffset,
    SchemeId,
    VestedPercent,
)


# =============================================================================
# Milestones, bonuses and custom events
# =============================================================================

class VestingMilestone(DomainModel):
    """Point in time at which a cumulative percentage of grants has vested.

    Example:
        VestingMilestone(month_offset=60, vested_percent=50,
                         description="50% vested at 5 years")
    """

    month_offset: MonthOffset = Field(
        description="Months after the initial grant"
    )

    vested_percent: VestedPercent = Field(
        description="Cumulative percent vested once this milestone is reached"
    )

    description: str = Field(
        default="",
        description="Human-readable label"
    )


class VestingBonus(DomainModel):
    """Bonus paid once a milestone month is reached.

    Bonuses are additive: each reached bonus adds `bonus_percent` of the
    running granted balance. They never compound on each other.
    """

    month_offset: MonthOffset = Field(
        description="Month at which the bonus starts to apply"
    )

    bonus_percent: VestedPercent = Field(
        description="Percent of the granted balance paid as bonus"
    )

    description: str = Field(default="")


class CustomVestingEvent(DomainModel):
    """User-defined vesting point (e.g. 25% after 90 days).

    When a scheme carries any custom events they fully replace its default
    milestones for vested-percent lookups.
    """

    time_period: MonthOffset = Field(
        description="Months after the initial grant (3 for 90 days, 12 for 1 year)"
    )

    percentage_vested: VestedPercent = Field(
        description="Cumulative percent vested at this point"
    )

    label: str = Field(default="")


# =============================================================================
# Scheme definition
# =============================================================================

class SchemeDefinition(DomainModel):
    """Declarative compensation scheme.

    `id` also selects the scheme's cadence capabilities in the catalog
    (how many periodic grants it issues and how often).

    Example:
        SchemeDefinition(
            id="steady-builder",
            name="Dollar Cost Advantage",
            initial_grant=Decimal("0.015"),
            periodic_grant=Decimal("0.001"),
            milestones=[
                VestingMilestone(month_offset=0, vested_percent=0),
                VestingMilestone(month_offset=60, vested_percent=50),
                VestingMilestone(month_offset=120, vested_percent=100),
            ],
        )
    """

    id: SchemeId = Field(
        description="Scheme identifier; selects the cadence policy"
    )

    name: str = Field(
        default="",
        description="Display name"
    )

    description: str = Field(default="")

    initial_grant: AssetQuantity = Field(
        description="Amount granted at month 0"
    )

    periodic_grant: Optional[AssetQuantity] = Field(
        default=None,
        description="Amount granted at every cadence boundary (None = no periodic grants)"
    )

    max_periodic_grants: Optional[int] = Field(
        default=None,
        ge=0,
        description="Explicit cap on periodic grants; overrides the catalog capability"
    )

    milestones: Tuple[VestingMilestone, ...] = Field(
        description="Default vesting table, ordered by month_offset"
    )

    bonuses: Tuple[VestingBonus, ...] = Field(
        default=(),
        description="Milestone-triggered bonuses"
    )

    custom_vesting_events: Tuple[CustomVestingEvent, ...] = Field(
        default=(),
        description="If non-empty, replaces milestones for vesting lookups"
    )

    @property
    def milestone_horizon(self) -> int:
        """Latest milestone month (0 for an empty table)."""
        return max((m.month_offset for m in self.milestones), default=0)

    @property
    def has_periodic_grant(self) -> bool:
        return self.periodic_grant is not None and self.periodic_grant > 0


class SchemeCapabilities(DomainModel):
    """Cadence rules attached to a scheme id.

    Resolved once when a catalog is built, so calculators never branch on
    scheme identifiers themselves.
    """

    max_periodic_grants: Optional[int] = Field(
        default=None,
        ge=0,
        description="Maximum periodic grants (None = derive from the milestone horizon)"
    )

    cadence_months: int = Field(
        default=12,
        gt=0,
        description="Months between periodic grants"
    )


# =============================================================================
# Vesting policy (tagged variant)
# =============================================================================

class VestingStep(DomainModel):
    """One row of a resolved vesting table."""

    month_offset: MonthOffset
    vested_percent: VestedPercent


class DefaultMilestones(DomainModel):
    """Vesting policy backed by the scheme's milestone table."""

    kind: Literal["default_milestones"] = "default_milestones"
    steps: Tuple[VestingStep, ...]


class CustomEvents(DomainModel):
    """Vesting policy backed by custom vesting events."""

    kind: Literal["custom_events"] = "custom_events"
    steps: Tuple[VestingStep, ...]


VestingPolicy = Union[DefaultMilestones, CustomEvents]
