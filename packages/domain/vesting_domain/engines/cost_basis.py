"""Cost-basis engine.

Computes the fiat acquisition cost of grants against historical yearly price
bands under a selectable valuation policy:
- high:    every grant priced at its year's high (most conservative gain)
- low:     every grant priced at its year's low
- average: every grant priced at its year's average

For each grant:
    1. Look up the band for the grant's calendar year (MissingPriceData)
    2. Check low <= average <= high (InvalidPriceBand)
    3. cost = value_at(amount, selected price)
Totals are accumulated with the precision module's exact fiat sum.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from ..errors import InvalidPriceBand, MissingPriceData
from ..precision import sum_amounts, sum_fiat, value_at
from ..schemas import (
    COST_BASIS_METHODS,
    CostBasisMethod,
    CostBasisYear,
    GrantEvent,
    YearlyPriceBand,
)

logger = logging.getLogger(__name__)


def validate_price_band(band: YearlyPriceBand, year: Optional[int] = None) -> YearlyPriceBand:
    """Check a band's ordering invariant and, optionally, its year.

    Raises:
        InvalidPriceBand: low > high, average outside [low, high], or the
            band's year differs from `year`
    """
    if year is not None and band.year != year:
        raise InvalidPriceBand(year, f"price data year ({band.year}) does not match requested year ({year})")
    if band.low > band.high:
        raise InvalidPriceBand(
            band.year, f"low price ({band.low}) cannot be greater than high price ({band.high})"
        )
    if band.average < band.low or band.average > band.high:
        raise InvalidPriceBand(
            band.year,
            f"average price ({band.average}) must be between low ({band.low}) and high ({band.high})",
        )
    return band


def validate_price_table(price_table: Mapping[int, YearlyPriceBand]) -> None:
    """Validate every band in a table, including key/year agreement."""
    for year, band in price_table.items():
        validate_price_band(band, year)


def price_for_method(band: YearlyPriceBand, method: CostBasisMethod) -> Decimal:
    """Price selected by a cost-basis method."""
    return band.price_for(method)


class CostBasisEngine:
    """Prices grants against a year -> YearlyPriceBand table.

    Example:
        engine = CostBasisEngine(prices, "average")
        total = engine.total_cost_basis(grants)
        rows = engine.breakdown(grants)
    """

    def __init__(self, price_table: Mapping[int, YearlyPriceBand], method: CostBasisMethod):
        if method not in COST_BASIS_METHODS:
            raise ValueError(
                f"Invalid cost basis method: {method}. Must be one of: {', '.join(COST_BASIS_METHODS)}"
            )
        self.price_table = price_table
        self.method = method

    def band_for(self, year: int) -> YearlyPriceBand:
        """Validated band for a year.

        Raises:
            MissingPriceData: If the table has no band for `year`
            InvalidPriceBand: If the band breaks its ordering invariant
        """
        band = self.price_table.get(year)
        if band is None:
            raise MissingPriceData([year])
        return validate_price_band(band, year)

    def unit_price(self, year: int) -> Decimal:
        return price_for_method(self.band_for(year), self.method)

    def grant_cost(self, grant: GrantEvent) -> Decimal:
        """Fiat cost of one grant at its year's selected price."""
        if grant.year is None:
            raise ValueError(
                f"Grant at month {grant.month_offset} has no calendar year; "
                "anchor the schedule to a starting year before pricing it"
            )
        return value_at(grant.amount, self.unit_price(grant.year), f"cost basis for {grant.year}")

    def total_cost_basis(self, grants: Iterable[GrantEvent]) -> Decimal:
        grants = list(grants)
        self.require_years(grant.year for grant in grants)
        return sum_fiat(self.grant_cost(grant) for grant in grants)

    def breakdown(self, grants: Iterable[GrantEvent]) -> List[CostBasisYear]:
        """Per-year asset granted and cost, ordered by year."""
        grants = list(grants)
        self.require_years(grant.year for grant in grants)

        priced = [(grant, self.grant_cost(grant)) for grant in grants]

        by_year: Dict[int, List[tuple]] = OrderedDict()
        for grant, cost in sorted(priced, key=lambda item: (item[0].year, item[0].month)):
            by_year.setdefault(grant.year, []).append((grant, cost))

        rows = []
        for year, entries in by_year.items():
            rows.append(
                CostBasisYear(
                    year=year,
                    asset_granted=sum_amounts(grant.amount for grant, _ in entries),
                    cost=sum_fiat(cost for _, cost in entries),
                    grant_count=len(entries),
                    unit_price=self.unit_price(year),
                )
            )
        return rows

    def require_years(self, years: Iterable[int]) -> None:
        """Fail with every missing year at once rather than the first one."""
        missing = [year for year in years if year is not None and year not in self.price_table]
        if missing:
            logger.warning("Cost basis requested for years without price data: %s", sorted(set(missing)))
            raise MissingPriceData(missing)
