"""Grant events.

A GrantEvent is an immutable record of the employer granting an amount of the
asset. The vesting engine produces them from a scheme; the cost-basis engine
prices them.

Forward schedules only know month offsets. Historical schedules anchor the
offsets to a starting calendar year; grants are assumed to land in January.
"""

from typing import Literal, Optional
from pydantic import Field

from .base import DomainModel, AssetQuantity, CalendarMonth, MonthOffset


GrantKind = Literal["initial", "periodic"]


class GrantEvent(DomainModel):
    """Single grant of the asset.

    Example timeline for steady-builder starting in 2020:
        1. initial  0.015 at offset 0  (2020-01)
        2. periodic 0.001 at offset 12 (2021-01)
        ...
        6. periodic 0.001 at offset 60 (2025-01)
    """

    month_offset: MonthOffset = Field(
        description="Months after the initial grant"
    )

    amount: AssetQuantity = Field(
        description="Granted amount at subunit resolution"
    )

    kind: GrantKind = Field(
        description="'initial' for the month-0 grant, 'periodic' for cadence grants"
    )

    year: Optional[int] = Field(
        default=None,
        description="Calendar year when the schedule is anchored to a starting year"
    )

    month: CalendarMonth = Field(
        default=1,
        description="Calendar month of the grant"
    )

    @property
    def period(self):
        """(year, month) pair; year is None for unanchored schedules."""
        return (self.year, self.month)
