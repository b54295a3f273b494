"""Growth projection engine.

Projects a price forward with monthly compounding of an annual rate:

    price(m) = start_price x (1 + annual_rate / 100 / 12) ** m

Everything is computed in Decimal so identical inputs give identical digits.
Projected prices are snapped to 8 decimal places.

Scenario sweeps build an independent projector per scenario, so callers can
fan them out across threads or processes freely.
"""

import math
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..precision import validate_price, value_at
from ..schemas import (
    DEFAULT_SCENARIOS,
    GrowthProjection,
    GrowthScenarioCFG,
    OutcomeRange,
    ScenarioOutcome,
)

Rate = Union[int, float, Decimal]

PRICE_QUANTUM = Decimal("0.00000001")

# 100% per month down; anything lower flips the sign of the price
MIN_ANNUAL_RATE = Decimal("-1200")


def _as_rate(rate: Rate) -> Decimal:
    if isinstance(rate, bool):
        raise ValueError(f"Growth rate must be a number, got {rate!r}")
    if isinstance(rate, float):
        if not math.isfinite(rate):
            raise ValueError(f"Growth rate must be finite, got {rate!r}")
        rate = Decimal(repr(rate))
    elif isinstance(rate, int):
        rate = Decimal(rate)
    elif not isinstance(rate, Decimal) or not rate.is_finite():
        raise ValueError(f"Growth rate must be a finite number, got {rate!r}")
    if rate < MIN_ANNUAL_RATE:
        raise ValueError(f"Annual growth rate {rate}% is below {MIN_ANNUAL_RATE}%")
    return rate


class GrowthProjector:
    """Monthly-compounding price projector.

    Args:
        start_price: Live price per whole unit (non-negative, finite)
        annual_rate: Annual growth rate in percent (may be negative)

    Example:
        projector = GrowthProjector(100_000, 15)
        projector.project_price(12)    # ~116075.45
    """

    def __init__(self, start_price: Rate, annual_rate: Rate):
        self.start_price = validate_price(start_price, "starting price")
        self.annual_rate = _as_rate(annual_rate)

    def monthly_rate(self) -> Decimal:
        return self.annual_rate / 100 / 12

    def project_price(self, month: int) -> Decimal:
        if isinstance(month, bool) or not isinstance(month, int) or month < 0:
            raise ValueError(f"Month offset must be a non-negative integer, got {month!r}")
        if month == 0:
            return self.start_price.quantize(PRICE_QUANTUM)
        with localcontext() as ctx:
            ctx.prec = 40
            price = self.start_price * (1 + self.monthly_rate()) ** month
            return price.quantize(PRICE_QUANTUM)

    def growth_multiple(self, month: int) -> Decimal:
        """price(month) / start_price (0 when the start price is 0)."""
        if self.start_price == 0:
            return Decimal("0")
        return self.project_price(month) / self.start_price

    def projections(self, months: Iterable[int]) -> List[GrowthProjection]:
        return [
            GrowthProjection(
                month=month,
                price=self.project_price(month),
                growth_from_start=(self.growth_multiple(month) - 1) * 100 if self.start_price else Decimal("0"),
            )
            for month in months
        ]

    def project_future_value(self, amount, month: int) -> Decimal:
        """Fiat value of `amount` at the projected price for `month`."""
        return value_at(amount, self.project_price(month), f"projected value at month {month}")

    def months_to_reach_target(self, current_value: Rate, target_value: Rate) -> Optional[float]:
        """Months of growth needed to turn current_value into target_value.

        None when the rate is not positive or the target is already reached.
        """
        current = validate_price(current_value, "current value")
        target = validate_price(target_value, "target value")
        if self.annual_rate <= 0 or target <= current or current == 0:
            return None
        return math.log(float(target / current)) / math.log1p(float(self.monthly_rate()))

    # -------------------------------------------------------------------------
    # Scenario sweeps
    # -------------------------------------------------------------------------

    def scenario_analysis(
        self,
        amount,
        months: int,
        scenarios: Sequence[Tuple[str, Rate]],
    ) -> List[ScenarioOutcome]:
        """Project `amount` under each (name, annual_rate) scenario."""
        outcomes = []
        for name, rate in scenarios:
            projector = GrowthProjector(self.start_price, rate)
            final_price = projector.project_price(months)
            outcomes.append(
                ScenarioOutcome(
                    scenario=name,
                    growth_rate=projector.annual_rate,
                    final_price=final_price,
                    final_value=value_at(amount, final_price, f"scenario '{name}'"),
                    growth_multiple=projector.growth_multiple(months),
                )
            )
        return outcomes

    def outcome_range(
        self,
        amount,
        months: int,
        scenarios: Optional[Sequence[Tuple[str, Rate]]] = None,
    ) -> OutcomeRange:
        """Lowest and highest final value across a sweep (default: half/base/1.5x)."""
        if scenarios is None:
            scenarios = default_scenarios(self.annual_rate)
        outcomes = self.scenario_analysis(amount, months, scenarios)
        if not outcomes:
            raise ValueError("Outcome range needs at least one scenario")
        ordered = sorted(outcomes, key=lambda outcome: outcome.final_value)
        return OutcomeRange(months=months, low=ordered[0], high=ordered[-1])


def default_scenarios(
    annual_rate: Rate,
    scenarios: Iterable[GrowthScenarioCFG] = DEFAULT_SCENARIOS,
) -> List[Tuple[str, Decimal]]:
    """Named rates scaled from a base rate (Conservative 0.5x, Base 1x, Optimistic 1.5x)."""
    base = _as_rate(annual_rate)
    return [(scenario.name, base * scenario.rate_multiplier) for scenario in scenarios]


def compound_annual_growth_rate(end_value: Rate, start_value: Rate, years: Rate) -> float:
    """CAGR in percent: ((end / start) ** (1 / years) - 1) x 100."""
    start = float(start_value)
    end = float(end_value)
    span = float(years)
    if start <= 0 or span <= 0 or end < 0:
        raise ValueError(
            f"CAGR needs a positive start value and period (start={start_value}, years={years})"
        )
    return ((end / start) ** (1.0 / span) - 1.0) * 100.0
