"""Historical reconstruction computation blocks.

- HistoricalTimelineBlock: runs the historical calculator
- CostBasisBlock: per-year cost audit and a comparison of valuation policies
"""

from typing import List, Optional
import pandas as pd

from .base import Block, BlockContext
from ..calculators import calculate_historical
from ..engines import CostBasisEngine
from ..schemas import HistoricalCalculationResult


class HistoricalTimelineBlock(Block):
    """Historical reconstruction of a scheme.

    Inputs (from context):
        - scheme, starting_year, ending_year, cost_basis_method,
          historical_prices, current_price
        - historical_cfg: HistoricalCalculationCFG (only when cfg_key is set)

    Outputs (to context):
        - historical_result: HistoricalCalculationResult
        - historical_timeline: DataFrame, one row per year:
            * year, month, cumulative_asset, cumulative_cost_basis,
              current_value, vested_amount, grants_in_year
        - historical_summary: DataFrame with a single row:
            * total_asset_granted, total_cost_basis, current_total_value,
              total_return, annualized_return, years_analyzed
    """

    INPUT_KEYS = [
        "scheme",
        "starting_year",
        "ending_year",
        "cost_basis_method",
        "historical_prices",
        "current_price",
    ]

    def __init__(self, cfg_key: Optional[str] = None):
        self.cfg_key = cfg_key

    def inputs(self) -> List[str]:
        keys = list(self.INPUT_KEYS)
        if self.cfg_key:
            keys.append(self.cfg_key)
        return keys

    def outputs(self) -> List[str]:
        return ["historical_result", "historical_timeline", "historical_summary"]

    def execute(self, context: BlockContext) -> None:
        result = calculate_historical(
            scheme=context.get("scheme"),
            starting_year=context.get("starting_year"),
            ending_year=context.get("ending_year"),
            cost_basis_method=context.get("cost_basis_method"),
            historical_prices=context.get("historical_prices"),
            current_price=context.get("current_price"),
            cfg=context.get(self.cfg_key) if self.cfg_key else None,
        )
        context.set("historical_result", result)
        context.set("historical_timeline", self._timeline_frame(result))
        context.set("historical_summary", self._summary_frame(result))

    def _timeline_frame(self, result: HistoricalCalculationResult) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "year": point.year,
                "month": point.month,
                "cumulative_asset": float(point.cumulative_asset),
                "cumulative_cost_basis": float(point.cumulative_cost_basis),
                "current_value": float(point.current_value),
                "vested_amount": float(point.vested_amount),
                "grants_in_year": len(point.grants),
            }
            for point in result.timeline
        ])

    def _summary_frame(self, result: HistoricalCalculationResult) -> pd.DataFrame:
        return pd.DataFrame([{
            "total_asset_granted": float(result.total_asset_granted),
            "total_cost_basis": float(result.total_cost_basis),
            "current_total_value": float(result.current_total_value),
            "total_return": float(result.total_return),
            "annualized_return": result.annualized_return,
            "years_analyzed": result.summary.years_analyzed,
        }])


class CostBasisBlock(Block):
    """Cost-basis audit for the grants of a historical result.

    Inputs (from context):
        - historical_result: HistoricalCalculationResult
        - historical_prices: Year -> YearlyPriceBand table

    Outputs (to context):
        - cost_basis_by_year: DataFrame, one row per grant year:
            * year, asset_granted, unit_price, cost, grant_count
          priced with the result's own valuation policy
        - cost_basis_by_method: DataFrame, one row per policy (low, average, high):
            * method, total_cost_basis
    """

    def __init__(self, result_key: str = "historical_result", prices_key: str = "historical_prices"):
        self.result_key = result_key
        self.prices_key = prices_key

    def inputs(self) -> List[str]:
        return [self.result_key, self.prices_key]

    def outputs(self) -> List[str]:
        return ["cost_basis_by_year", "cost_basis_by_method"]

    def execute(self, context: BlockContext) -> None:
        result: HistoricalCalculationResult = context.get(self.result_key)
        prices = context.get(self.prices_key)
        grants = list(result.grant_breakdown)

        engine = CostBasisEngine(prices, result.summary.cost_basis_method)
        by_year = pd.DataFrame(
            [
                {
                    "year": row.year,
                    "asset_granted": float(row.asset_granted),
                    "unit_price": float(row.unit_price),
                    "cost": float(row.cost),
                    "grant_count": row.grant_count,
                }
                for row in engine.breakdown(grants)
            ],
            columns=["year", "asset_granted", "unit_price", "cost", "grant_count"],
        )
        context.set("cost_basis_by_year", by_year)

        by_method = pd.DataFrame([
            {
                "method": method,
                "total_cost_basis": float(CostBasisEngine(prices, method).total_cost_basis(grants)),
            }
            for method in ("low", "average", "high")
        ])
        context.set("cost_basis_by_method", by_method)
