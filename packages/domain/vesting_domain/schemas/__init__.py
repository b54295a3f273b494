"""Vesting domain schemas.

This package contains all Pydantic models for the vesting domain layer:
- Base types and conventions
- Scheme definitions, milestones and vesting policies
- Historical price bands
- Grant events
- Calculation configuration
- Calculation results

Usage:
    from vesting_domain.schemas import (
        SchemeDefinition, VestingMilestone, YearlyPriceBand,
        ForwardCalculationCFG, HistoricalCalculationResult,
    )
"""

# Base types
from .base import (
    DomainModel,
    AssetQuantity,
    FiatAmount,
    PricePoint,
    VestedPercent,
    MonthOffset,
    CalendarYear,
    CalendarMonth,
    SchemeId,
)

# Schemes
from .schemes import (
    VestingMilestone,
    VestingBonus,
    CustomVestingEvent,
    SchemeDefinition,
    SchemeCapabilities,
    VestingStep,
    DefaultMilestones,
    CustomEvents,
    VestingPolicy,
)

# Prices
from .prices import (
    YearlyPriceBand,
    CostBasisMethod,
    COST_BASIS_METHODS,
    PriceTable,
)

# Grants
from .grants import GrantEvent, GrantKind

# Configuration
from .config import (
    GrowthScenarioCFG,
    DEFAULT_SCENARIOS,
    ForwardCalculationCFG,
    HistoricalCalculationCFG,
)

# Results
from .results import (
    VestingTimelineRow,
    TimelinePoint,
    GrowthProjection,
    ScenarioOutcome,
    OutcomeRange,
    ForwardSummary,
    ForwardCalculationResult,
    CostBasisYear,
    HistoricalSummary,
    HistoricalCalculationResult,
)

__all__ = [
    # Base types
    "DomainModel",
    "AssetQuantity",
    "FiatAmount",
    "PricePoint",
    "VestedPercent",
    "MonthOffset",
    "CalendarYear",
    "CalendarMonth",
    "SchemeId",
    # Schemes
    "VestingMilestone",
    "VestingBonus",
    "CustomVestingEvent",
    "SchemeDefinition",
    "SchemeCapabilities",
    "VestingStep",
    "DefaultMilestones",
    "CustomEvents",
    "VestingPolicy",
    # Prices
    "YearlyPriceBand",
    "CostBasisMethod",
    "COST_BASIS_METHODS",
    "PriceTable",
    # Grants
    "GrantEvent",
    "GrantKind",
    # Configuration
    "GrowthScenarioCFG",
    "DEFAULT_SCENARIOS",
    "ForwardCalculationCFG",
    "HistoricalCalculationCFG",
    # Results
    "VestingTimelineRow",
    "TimelinePoint",
    "GrowthProjection",
    "ScenarioOutcome",
    "OutcomeRange",
    "ForwardSummary",
    "ForwardCalculationResult",
    "CostBasisYear",
    "HistoricalSummary",
    "HistoricalCalculationResult",
]
