"""Historical price reference data.

A YearlyPriceBand summarizes one calendar year of prices. Bands are supplied
by collaborators (price-fetch clients, static reference tables) and are
read-only inside the engine.

The ordering invariant low <= average <= high is checked by the cost-basis
engine before a band is used (see engines.cost_basis.validate_price_band), so
a bad band fails the calculation with InvalidPriceBand.
"""

from typing import Dict, Literal
from pydantic import Field

from .base import DomainModel, CalendarYear, PricePoint


CostBasisMethod = Literal["high", "low", "average"]

COST_BASIS_METHODS = ("high", "low", "average")


class YearlyPriceBand(DomainModel):
    """Yearly price summary for the asset.

    Example:
        YearlyPriceBand(year=2020, high=28994, low=4106, average=11111,
                        open=7179, close=28994)
    """

    year: CalendarYear = Field(description="Calendar year the band covers")
    high: PricePoint = Field(description="Highest price of the year")
    low: PricePoint = Field(description="Lowest price of the year")
    average: PricePoint = Field(description="Average price over the year")
    open: PricePoint = Field(description="First price of the year")
    close: PricePoint = Field(description="Last price of the year")

    def price_for(self, method: CostBasisMethod):
        """Select the price field matching a cost-basis method."""
        if method == "high":
            return self.high
        if method == "low":
            return self.low
        if method == "average":
            return self.average
        raise ValueError(
            f"Invalid cost basis method: {method}. Must be one of: {', '.join(COST_BASIS_METHODS)}"
        )


# Year -> band. Keys must agree with each band's `year`.
PriceTable = Dict[int, YearlyPriceBand]
