"""Tests for blocks architecture.

Tests cover:
- BlockContext get/set/has operations
- Topological sort and dependency resolution
- BlockExecutor validation and execution
- VestingScheduleBlock, ForwardTimelineBlock, ScenarioBlock,
  HistoricalTimelineBlock, CostBasisBlock integration
"""

import pytest
from decimal import Decimal

from vesting_domain.blocks import (
    Block,
    BlockContext,
    BlockExecutor,
    CostBasisBlock,
    ForwardTimelineBlock,
    HistoricalTimelineBlock,
    ScenarioBlock,
    VestingScheduleBlock,
)
from vesting_domain.blocks.base import topological_sort, CircularDependencyError
from vesting_domain.catalog import FORWARD_CATALOG, HISTORICAL_CATALOG, REFERENCE_PRICE_BANDS
from vesting_domain.errors import MissingPriceData
from vesting_domain.schemas import ForwardCalculationCFG


# =============================================================================
# BlockContext Tests
# =============================================================================

def test_block_context_get_set():
    context = BlockContext()
    context.set("current_price", 100_000)
    assert context.get("current_price") == 100_000


def test_block_context_has_and_keys():
    context = BlockContext()
    assert not context.has("scheme")
    context.set("scheme", FORWARD_CATALOG.get("accelerator"))
    context.set("annual_growth_rate", 15)
    assert context.has("scheme")
    assert set(context.keys()) == {"scheme", "annual_growth_rate"}


def test_block_context_get_missing_key():
    """Test that getting missing key raises KeyError."""
    context = BlockContext()
    with pytest.raises(KeyError, match="Key 'scheme' not found"):
        context.get("scheme")


# =============================================================================
# Topological Sort Tests
# =============================================================================

class StubBlock(Block):
    """Block that writes a marker string to each output."""

    def __init__(self, name, inputs, outputs):
        self.name = name
        self._inputs = inputs
        self._outputs = outputs

    def inputs(self):
        return self._inputs

    def outputs(self):
        return self._outputs

    def execute(self, context):
        for output in self._outputs:
            context.set(output, f"{self.name}_output")

    def __repr__(self):
        return f"StubBlock({self.name})"


def test_topological_sort_linear_chain():
    """A -> B -> C given in reverse order."""
    block_a = StubBlock("A", [], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    block_c = StubBlock("C", ["data_b"], ["data_c"])

    assert topological_sort([block_c, block_b, block_a]) == [block_a, block_b, block_c]


def test_topological_sort_fan_out():
    block_a = StubBlock("A", [], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])
    block_c = StubBlock("C", ["data_a"], ["data_c"])

    sorted_blocks = topological_sort([block_c, block_b, block_a])

    assert sorted_blocks[0] == block_a
    assert set(sorted_blocks[1:]) == {block_b, block_c}


def test_topological_sort_circular_dependency():
    block_a = StubBlock("A", ["data_b"], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])

    with pytest.raises(CircularDependencyError, match="Circular dependency detected"):
        topological_sort([block_a, block_b])


def test_topological_sort_duplicate_output():
    block_a = StubBlock("A", [], ["forward_result"])
    block_b = StubBlock("B", [], ["forward_result"])

    with pytest.raises(ValueError, match="Multiple blocks produce"):
        topological_sort([block_a, block_b])


def test_topological_sort_external_inputs():
    """Inputs no block produces are left for the initial context."""
    block_a = StubBlock("A", ["scheme"], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])

    assert topological_sort([block_b, block_a]) == [block_a, block_b]


def test_forward_blocks_sorted_by_dependency():
    forward = ForwardTimelineBlock()
    scenarios = ScenarioBlock()
    assert topological_sort([scenarios, forward]) == [forward, scenarios]


# =============================================================================
# BlockExecutor Tests
# =============================================================================

def test_block_executor_simple_chain():
    block_a = StubBlock("A", [], ["data_a"])
    block_b = StubBlock("B", ["data_a"], ["data_b"])

    context = BlockExecutor([block_b, block_a]).execute(BlockContext())

    assert context.get("data_a") == "A_output"
    assert context.get("data_b") == "B_output"


def test_block_executor_missing_input():
    context = BlockContext()
    executor = BlockExecutor([ForwardTimelineBlock()])

    with pytest.raises(KeyError, match="requires input 'scheme'"):
        executor.execute(context)


def test_block_executor_missing_output():

    class ForgetfulBlock(Block):
        def inputs(self):
            return []

        def outputs(self):
            return ["output"]

        def execute(self, context):
            pass

    with pytest.raises(ValueError, match="declared output 'output' but didn't write"):
        BlockExecutor([ForgetfulBlock()]).execute(BlockContext())


# =============================================================================
# VestingScheduleBlock Tests
# =============================================================================

def test_vesting_schedule_block():
    context = BlockContext()
    context.set("scheme", FORWARD_CATALOG.get("steady-builder"))

    VestingScheduleBlock().execute(context)

    df = context.get("vesting_schedule")
    assert len(df) == 121
    assert list(df.columns) == [
        "month", "cumulative_granted", "vested_percent", "bonus_amount", "vested_amount", "grant_kind",
    ]
    assert df.iloc[0]["grant_kind"] == "initial"
    assert df.iloc[12]["grant_kind"] == "periodic"
    assert df.iloc[72]["grant_kind"] is None
    assert df.iloc[60]["vested_percent"] == 50.0
    assert df.iloc[120]["vested_amount"] == pytest.approx(0.02)


def test_vesting_schedule_block_custom_key_and_horizon():
    context = BlockContext()
    context.set("plan", FORWARD_CATALOG.get("accelerator"))

    block = VestingScheduleBlock(scheme_key="plan", horizon_months=24)
    assert block.inputs() == ["plan"]
    block.execute(context)

    assert len(context.get("vesting_schedule")) == 25


# =============================================================================
# Forward Block Tests
# =============================================================================

def test_forward_blocks_end_to_end():
    context = BlockContext()
    context.set("scheme", FORWARD_CATALOG.get("accelerator"))
    context.set("current_price", 100_000)
    context.set("annual_growth_rate", 20)

    BlockExecutor([ScenarioBlock(), ForwardTimelineBlock()]).execute(context)

    timeline_df = context.get("forward_timeline")
    assert len(timeline_df) == 121
    assert timeline_df.iloc[0]["current_value"] == 2000.0

    summary_df = context.get("forward_summary")
    assert summary_df.iloc[0]["total_asset_needed"] == pytest.approx(0.02)
    assert summary_df.iloc[0]["total_cost"] == 2000.0
    assert summary_df.iloc[0]["horizon_months"] == 120

    scenarios_df = context.get("growth_scenarios")
    assert list(scenarios_df["scenario"]) == ["Conservative", "Base Case", "Optimistic"]
    assert list(scenarios_df["growth_rate"]) == [10.0, 20.0, 30.0]
    base_case = scenarios_df[scenarios_df["scenario"] == "Base Case"].iloc[0]
    assert base_case["final_value"] == pytest.approx(summary_df.iloc[0]["final_value"])


def test_forward_block_with_cfg():
    context = BlockContext()
    context.set("scheme", FORWARD_CATALOG.get("steady-builder"))
    context.set("current_price", 50_000)
    context.set("annual_growth_rate", 10)
    context.set("forward_cfg", ForwardCalculationCFG(horizon_months=36))

    block = ForwardTimelineBlock(cfg_key="forward_cfg")
    assert "forward_cfg" in block.inputs()
    BlockExecutor([block]).execute(context)

    assert len(context.get("forward_timeline")) == 37
    assert context.get("forward_result").summary.horizon_months == 36


# =============================================================================
# Historical Block Tests
# =============================================================================

def _historical_context(scheme_id="steady-builder", starting_year=2018, ending_year=2024):
    context = BlockContext()
    context.set("scheme", HISTORICAL_CATALOG.get(scheme_id))
    context.set("starting_year", starting_year)
    context.set("ending_year", ending_year)
    context.set("cost_basis_method", "average")
    context.set("historical_prices", REFERENCE_PRICE_BANDS)
    context.set("current_price", 100_000)
    return context


def test_historical_blocks_end_to_end():
    context = _historical_context()

    BlockExecutor([CostBasisBlock(), HistoricalTimelineBlock()]).execute(context)

    timeline_df = context.get("historical_timeline")
    assert list(timeline_df["year"]) == list(range(2018, 2025))
    assert timeline_df["grants_in_year"].sum() == 6

    summary_df = context.get("historical_summary")
    assert summary_df.iloc[0]["total_asset_granted"] == pytest.approx(0.1)
    assert summary_df.iloc[0]["current_total_value"] == 10000.0
    assert summary_df.iloc[0]["years_analyzed"] == 6

    by_year_df = context.get("cost_basis_by_year")
    assert list(by_year_df["year"]) == [2018, 2019, 2020, 2021, 2022, 2023]
    assert by_year_df["cost"].sum() == pytest.approx(summary_df.iloc[0]["total_cost_basis"])

    assert list(context.get("cost_basis_by_method")["method"]) == ["low", "average", "high"]
    by_method_df = context.get("cost_basis_by_method").set_index("method")["total_cost_basis"]
    assert by_method_df["low"] <= by_method_df["average"] <= by_method_df["high"]


def test_cost_basis_block_without_grants():
    context = _historical_context(scheme_id="slow-burn", starting_year=2020, ending_year=2020)

    BlockExecutor([HistoricalTimelineBlock(), CostBasisBlock()]).execute(context)

    assert context.get("cost_basis_by_year").empty
    by_method = context.get("cost_basis_by_method")
    assert list(by_method["total_cost_basis"]) == [0.0, 0.0, 0.0]


def test_historical_block_propagates_missing_data():
    context = _historical_context(starting_year=2012, ending_year=2016)

    with pytest.raises(MissingPriceData) as exc_info:
        BlockExecutor([HistoricalTimelineBlock()]).execute(context)
    assert exc_info.value.years == [2012, 2013, 2014]
