"""Forward calculator.

Combines the vesting schedule with a growth projection:

    for each month m in 0..horizon:
        balance(m)  = cumulative granted + bonuses
        price(m)    = live price compounded at the annual growth rate
        value(m)    = value_at(balance(m), price(m))

Totals:
    total_asset_needed = cumulative granted at the horizon
    total_cost         = value_at(total_asset_needed, live price)

The calculation is a pure function of its inputs; running it twice yields
equal results.
"""

import logging
from typing import Optional

from ..engines import GrowthProjector, VestingScheduleEngine, default_scenarios
from ..precision import sum_amounts, value_at
from ..schemas import (
    ForwardCalculationCFG,
    ForwardCalculationResult,
    ForwardSummary,
    SchemeCapabilities,
    SchemeDefinition,
    TimelinePoint,
)

logger = logging.getLogger(__name__)


def calculate_forward(
    scheme: SchemeDefinition,
    current_price,
    annual_growth_rate,
    cfg: Optional[ForwardCalculationCFG] = None,
    capabilities: Optional[SchemeCapabilities] = None,
) -> ForwardCalculationResult:
    """Project a scheme's cost and value forward from a live price.

    Args:
        scheme: Scheme to project
        current_price: Live price per whole unit (non-negative, finite)
        annual_growth_rate: Expected annual price growth in percent (may be negative)
        cfg: Horizon and scenario options (defaults: scheme horizon, no scenarios)
        capabilities: Cadence capabilities; looked up by scheme id when omitted

    Returns:
        ForwardCalculationResult with one timeline point per month

    Raises:
        InvalidAmount: Bad grant size or price
        InvalidScheme: Malformed milestone table
        ValueError: Non-finite growth rate
    """
    if cfg is None:
        cfg = ForwardCalculationCFG()

    engine = VestingScheduleEngine(scheme, capabilities)
    projector = GrowthProjector(current_price, annual_growth_rate)
    horizon = engine.default_horizon() if cfg.horizon_months is None else cfg.horizon_months

    logger.debug(
        "Forward calculation for '%s': price=%s, growth=%s%%, horizon=%d months",
        scheme.id, projector.start_price, projector.annual_rate, horizon,
    )

    timeline = []
    for row in engine.generate_timeline(horizon):
        price = projector.project_price(row.month)
        balance = sum_amounts([row.cumulative_granted, row.bonus_amount], "forward balance")
        timeline.append(
            TimelinePoint(
                month_offset=row.month,
                cumulative_asset=balance,
                cumulative_cost_basis=value_at(
                    row.cumulative_granted, projector.start_price, f"cost at month {row.month}"
                ),
                current_value=value_at(balance, price, f"value at month {row.month}"),
                vested_amount=row.vested_amount,
                unit_price=price,
            )
        )

    final = timeline[-1]
    total_asset_needed = engine.cumulative_granted(horizon)
    total_cost = value_at(total_asset_needed, projector.start_price, "total cost")

    scenarios = ()
    if cfg.include_scenarios:
        scenarios = tuple(
            projector.scenario_analysis(
                total_asset_needed,
                horizon,
                default_scenarios(projector.annual_rate, cfg.scenarios),
            )
        )

    summary = ForwardSummary(
        max_commitment=total_cost,
        average_vesting_period=engine.average_vesting_period(),
        horizon_months=horizon,
        final_value=final.current_value,
        final_vested_amount=final.vested_amount,
        total_bonus=engine.row(horizon).bonus_amount,
        growth_scenarios=scenarios,
    )

    logger.debug(
        "Forward calculation for '%s' done: total_asset_needed=%s, total_cost=%s",
        scheme.id, total_asset_needed, total_cost,
    )

    return ForwardCalculationResult(
        timeline=tuple(timeline),
        total_asset_needed=total_asset_needed,
        total_cost=total_cost,
        summary=summary,
    )
