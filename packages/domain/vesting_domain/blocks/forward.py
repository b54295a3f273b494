"""Forward projection computation blocks.

- ForwardTimelineBlock: runs the forward calculator, emits timeline and summary
- ScenarioBlock: sweeps growth rates over the forward result's total grant
"""

from typing import List, Optional
import pandas as pd

from .base import Block, BlockContext
from ..calculators import calculate_forward
from ..engines import GrowthProjector, default_scenarios
from ..schemas import DEFAULT_SCENARIOS, ForwardCalculationResult


class ForwardTimelineBlock(Block):
    """Forward projection of a scheme from a live price.

    Inputs (from context):
        - scheme: SchemeDefinition
        - current_price: Live price per whole unit
        - annual_growth_rate: Annual growth in percent
        - forward_cfg: ForwardCalculationCFG (only when cfg_key is set)

    Outputs (to context):
        - forward_result: ForwardCalculationResult
        - forward_timeline: DataFrame, one row per month:
            * month, unit_price, cumulative_asset, vested_amount,
              cumulative_cost_basis, current_value
        - forward_summary: DataFrame with a single row:
            * total_asset_needed, total_cost, final_value,
              average_vesting_period, horizon_months
    """

    def __init__(
        self,
        scheme_key: str = "scheme",
        price_key: str = "current_price",
        rate_key: str = "annual_growth_rate",
        cfg_key: Optional[str] = None,
    ):
        self.scheme_key = scheme_key
        self.price_key = price_key
        self.rate_key = rate_key
        self.cfg_key = cfg_key

    def inputs(self) -> List[str]:
        keys = [self.scheme_key, self.price_key, self.rate_key]
        if self.cfg_key:
            keys.append(self.cfg_key)
        return keys

    def outputs(self) -> List[str]:
        return ["forward_result", "forward_timeline", "forward_summary"]

    def execute(self, context: BlockContext) -> None:
        cfg = context.get(self.cfg_key) if self.cfg_key else None
        result = calculate_forward(
            context.get(self.scheme_key),
            context.get(self.price_key),
            context.get(self.rate_key),
            cfg,
        )
        context.set("forward_result", result)
        context.set("forward_timeline", self._timeline_frame(result))
        context.set("forward_summary", self._summary_frame(result))

    def _timeline_frame(self, result: ForwardCalculationResult) -> pd.DataFrame:
        return pd.DataFrame([
            {
                "month": point.month_offset,
                "unit_price": float(point.unit_price),
                "cumulative_asset": float(point.cumulative_asset),
                "vested_amount": float(point.vested_amount),
                "cumulative_cost_basis": float(point.cumulative_cost_basis),
                "current_value": float(point.current_value),
            }
            for point in result.timeline
        ])

    def _summary_frame(self, result: ForwardCalculationResult) -> pd.DataFrame:
        return pd.DataFrame([{
            "total_asset_needed": float(result.total_asset_needed),
            "total_cost": float(result.total_cost),
            "final_value": float(result.summary.final_value),
            "average_vesting_period": float(result.summary.average_vesting_period),
            "horizon_months": result.summary.horizon_months,
        }])


class ScenarioBlock(Block):
    """Growth-rate sweep over the total grant of a forward result.

    Inputs (from context):
        - forward_result: ForwardCalculationResult (from ForwardTimelineBlock)
        - current_price: Live price per whole unit
        - annual_growth_rate: Base annual growth in percent

    Outputs (to context):
        - growth_scenarios: DataFrame, one row per scenario:
            * scenario, growth_rate, final_price, final_value, growth_multiple
          sorted by growth_rate ascending
    """

    def __init__(
        self,
        result_key: str = "forward_result",
        price_key: str = "current_price",
        rate_key: str = "annual_growth_rate",
        scenarios=DEFAULT_SCENARIOS,
    ):
        self.result_key = result_key
        self.price_key = price_key
        self.rate_key = rate_key
        self.scenarios = scenarios

    def inputs(self) -> List[str]:
        return [self.result_key, self.price_key, self.rate_key]

    def outputs(self) -> List[str]:
        return ["growth_scenarios"]

    def execute(self, context: BlockContext) -> None:
        result: ForwardCalculationResult = context.get(self.result_key)
        projector = GrowthProjector(context.get(self.price_key), context.get(self.rate_key))
        outcomes = projector.scenario_analysis(
            result.total_asset_needed,
            result.summary.horizon_months,
            default_scenarios(projector.annual_rate, self.scenarios),
        )

        df = pd.DataFrame([
            {
                "scenario": outcome.scenario,
                "growth_rate": float(outcome.growth_rate),
                "final_price": float(outcome.final_price),
                "final_value": float(outcome.final_value),
                "growth_multiple": float(outcome.growth_multiple),
            }
            for outcome in outcomes
        ])
        if not df.empty:
            df = df.sort_values("growth_rate").reset_index(drop=True)
        context.set("growth_scenarios", df)
