"""Historical calculator.

Reconstructs what a scheme would have cost and what it is worth today, had
it started in a past year.

Two price bases are used on purpose and must not be mixed up:
- cost basis:    each grant is priced at its own year's band, using the
                 selected valuation policy (high / low / average)
- current value: everything granted so far is valued at today's live price

Milestone bonuses only raise the vested amount. Cumulative asset and current
value cover granted units, so a flat price shows no gain over cost.

Grant schedule:
    month offset 0 is January of the starting year; the initial grant lands
    there and periodic grants land every cadence boundary after it, capped by
    the scheme's cadence rules and by the ending year.

Every year from the starting year to the ending year must have a price band.
Gaps are reported as MissingPriceData; nothing is forward-filled.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Mapping, Optional

from ..engines import CostBasisEngine, VestingScheduleEngine, validate_price_band
from ..errors import MissingPriceData
from ..precision import from_subunits, sum_amounts, sum_fiat, to_subunits, validate_price, value_at
from ..schemas import (
    CostBasisMethod,
    GrantEvent,
    HistoricalCalculationCFG,
    HistoricalCalculationResult,
    HistoricalSummary,
    SchemeCapabilities,
    SchemeDefinition,
    TimelinePoint,
    YearlyPriceBand,
)

logger = logging.getLogger(__name__)

FIRST_PRICE_YEAR = 2009


def annualized_return(current_value, cost_basis, years: int) -> float:
    """(current / cost) ** (1 / years) - 1, or 0 when it is undefined.

    Returns 0 rather than NaN/Infinity when the cost basis is 0 or no full
    year has elapsed.
    """
    if years <= 0 or cost_basis <= 0:
        return 0.0
    ratio = float(current_value) / float(cost_basis)
    if ratio <= 0:
        return -1.0
    return ratio ** (1.0 / years) - 1.0


def require_price_years(
    historical_prices: Mapping[int, YearlyPriceBand],
    starting_year: int,
    ending_year: int,
) -> None:
    """Check that every year in [starting_year, ending_year] has a valid band.

    Raises:
        MissingPriceData: Lists every year without a band
        InvalidPriceBand: A band breaks low <= average <= high or its key
    """
    missing = [
        year for year in range(starting_year, ending_year + 1) if year not in historical_prices
    ]
    if missing:
        logger.warning(
            "Historical calculation %d-%d is missing price data for %s",
            starting_year, ending_year, missing,
        )
        raise MissingPriceData(missing)
    for year in range(starting_year, ending_year + 1):
        validate_price_band(historical_prices[year], year)


def calculate_historical(
    scheme: SchemeDefinition,
    starting_year: int,
    ending_year: int,
    cost_basis_method: CostBasisMethod,
    historical_prices: Mapping[int, YearlyPriceBand],
    current_price,
    cfg: Optional[HistoricalCalculationCFG] = None,
    capabilities: Optional[SchemeCapabilities] = None,
) -> HistoricalCalculationResult:
    """Reconstruct a scheme between two calendar years.

    Args:
        scheme: Scheme to reconstruct
        starting_year: Year of the initial grant
        ending_year: "Present" year; the last timeline point summarizes it
        cost_basis_method: Valuation policy for grant cost ('high', 'low', 'average')
        historical_prices: Year -> YearlyPriceBand table (cost basis only)
        current_price: Live price per whole unit (current value only)
        cfg: Ending month and breakdown options
        capabilities: Cadence capabilities; looked up by scheme id when omitted

    Returns:
        HistoricalCalculationResult with one timeline point per year

    Raises:
        MissingPriceData: A year in [starting_year, ending_year] has no band
        InvalidPriceBand: A required band is malformed
        InvalidAmount: Bad grant size or live price
        InvalidScheme: Malformed milestone table
        ValueError: Years out of order or before the asset existed
    """
    if cfg is None:
        cfg = HistoricalCalculationCFG()

    if starting_year < FIRST_PRICE_YEAR:
        raise ValueError(f"Invalid starting year: {starting_year}. Must be >= {FIRST_PRICE_YEAR}.")
    if ending_year < starting_year:
        raise ValueError(
            f"Invalid year range: ending year {ending_year} is before starting year {starting_year}"
        )

    live_price = validate_price(current_price, "current price")
    require_price_years(historical_prices, starting_year, ending_year)

    engine = VestingScheduleEngine(scheme, capabilities)
    cost_engine = CostBasisEngine(historical_prices, cost_basis_method)

    last_offset = _offset(starting_year, ending_year, cfg.ending_month)
    grants = engine.grant_events(last_offset, starting_year=starting_year)
    grant_costs = [cost_engine.grant_cost(grant) for grant in grants]

    logger.debug(
        "Historical calculation for '%s': %d-%d, method=%s, %d grants",
        scheme.id, starting_year, ending_year, cost_basis_method, len(grants),
    )

    timeline = []
    for year in range(starting_year, ending_year + 1):
        month = cfg.ending_month if year == ending_year else 12
        offset = _offset(starting_year, year, month)
        row = engine.row(offset)

        granted_so_far = [g for g in grants if g.year <= year]
        cost_so_far = [cost for g, cost in zip(grants, grant_costs) if g.year <= year]
        balance = sum_amounts((g.amount for g in granted_so_far), "historical balance")

        timeline.append(
            TimelinePoint(
                month_offset=offset,
                year=year,
                month=month,
                cumulative_asset=balance,
                cumulative_cost_basis=sum_fiat(cost_so_far),
                current_value=value_at(balance, live_price, f"current value for {year}"),
                vested_amount=row.vested_amount,
                grants=tuple(g for g in grants if g.year == year),
            )
        )

    total_asset_granted = sum_amounts(g.amount for g in grants)
    total_cost_basis = sum_fiat(grant_costs)
    current_total_value = timeline[-1].current_value
    years_analyzed = ending_year - starting_year

    summary = HistoricalSummary(
        starting_year=starting_year,
        ending_year=ending_year,
        years_analyzed=years_analyzed,
        cost_basis_method=cost_basis_method,
        average_periodic_grant=_average_periodic_grant(grants),
        cost_basis_breakdown=tuple(cost_engine.breakdown(grants)) if cfg.include_breakdown else (),
    )

    return HistoricalCalculationResult(
        timeline=tuple(timeline),
        total_asset_granted=total_asset_granted,
        total_cost_basis=total_cost_basis,
        current_total_value=current_total_value,
        total_return=current_total_value - total_cost_basis,
        annualized_return=annualized_return(current_total_value, total_cost_basis, years_analyzed),
        grant_breakdown=tuple(grants),
        summary=summary,
    )


def _offset(starting_year: int, year: int, month: int) -> int:
    return (year - starting_year) * 12 + (month - 1)


def _average_periodic_grant(grants: List[GrantEvent]) -> Decimal:
    periodic = [g for g in grants if g.kind == "periodic"]
    if not periodic:
        return Decimal("0")
    total = sum(to_subunits(g.amount, "average periodic grant") for g in periodic)
    average = (Decimal(total) / len(periodic)).to_integral_value(rounding=ROUND_HALF_UP)
    return from_subunits(int(average))
