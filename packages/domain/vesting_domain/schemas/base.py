"""Base classes and type system for vesting domain models.

This module provides the foundational types and the base model used
throughout the schema system.
"""

from decimal import Decimal
from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the domain layer:
    - Frozen instances (schemes, price bands and results are read-only)
    - Strict field set (typos in configuration fail loudly)
    - Enum/literal value serialization
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

# Range checks for asset quantities live in the precision module so that
# calculators can report them as InvalidAmount with the operation context.
AssetQuantity = Annotated[
    Decimal,
    Field(description="Asset amount in whole units (validated at subunit resolution on use)")
]

FiatAmount = Annotated[
    Decimal,
    Field(description="Fiat currency amount, rounded to cents")
]

PricePoint = Annotated[
    Decimal,
    Field(gt=0, description="Fiat price per whole unit (strictly positive)")
]

VestedPercent = Annotated[
    Decimal,
    Field(description="Percent vested, 0 to 100 (validated when the policy is resolved)")
]

MonthOffset = Annotated[
    int,
    Field(ge=0, description="Months elapsed since the initial grant")
]

CalendarYear = Annotated[
    int,
    Field(ge=2009, le=9999, description="Calendar year (the asset has no price history before 2009)")
]

CalendarMonth = Annotated[
    int,
    Field(ge=1, le=12, description="Calendar month, 1 = January")
]


# =============================================================================
# ID Conventions
# =============================================================================

SchemeId = Annotated[
    str,
    Field(
        pattern=r'^[a-z][a-z0-9-]*$',
        description="Kebab-case identifier for vesting schemes (e.g., 'steady-builder')"
    )
]

# =============================================================================
# ID Examples
# =============================================================================
#
# Scheme IDs:
#   - "accelerator"    - single upfront grant, no periodic grants
#   - "steady-builder" - upfront grant plus five yearly grants
#   - "slow-burn"      - no upfront grant, nine yearly grants
#   - "custom"         - user-defined schedule, up to ten yearly grants
#
# =============================================================================
