"""Computation blocks for vesting analysis.

This package contains the computation layer that turns calculator results into
DataFrames suitable for reports, notebooks or other consumption.

Architecture:
    Schemas (data models) → Calculators (results) → Blocks → DataFrames (output)

Key concepts:
- Blocks are reusable computation units with explicit dependencies
- Each block declares its inputs and outputs
- Dependency graph enables topological execution
- Tabular outputs are pandas DataFrames for downstream consumption

Available blocks:
- VestingScheduleBlock: Month-by-month vesting schedule of a scheme
- ForwardTimelineBlock: Forward projection timeline and summary
- ScenarioBlock: Growth-rate sweep over the forward total
- HistoricalTimelineBlock: Historical reconstruction timeline and summary
- CostBasisBlock: Per-year cost audit and valuation policy comparison

Usage:
    from vesting_domain.blocks import BlockExecutor, BlockContext, ForwardTimelineBlock

    context = BlockContext()
    context.set("scheme", scheme)
    context.set("current_price", 100_000)
    context.set("annual_growth_rate", 15)

    BlockExecutor([ForwardTimelineBlock(), ScenarioBlock()]).execute(context)
    timeline_df = context.get("forward_timeline")
"""

from .base import Block, BlockExecutor, BlockContext, CircularDependencyError, topological_sort
from .vesting import VestingScheduleBlock
from .forward import ForwardTimelineBlock, ScenarioBlock
from .historical import HistoricalTimelineBlock, CostBasisBlock

__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "CircularDependencyError",
    "topological_sort",
    "VestingScheduleBlock",
    "ForwardTimelineBlock",
    "ScenarioBlock",
    "HistoricalTimelineBlock",
    "CostBasisBlock",
]
