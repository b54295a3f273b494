"""Base classes for computation blocks.

Blocks wrap the calculators and turn their results into pandas DataFrames for
report layers. A block declares the context keys it reads and writes; the
executor orders blocks by those declarations.

- Block: abstract computation unit
- BlockContext: key/value store passed between blocks
- BlockExecutor: validates and runs blocks in dependency order
- topological_sort: Kahn's algorithm over declared inputs/outputs
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Key/value store shared by the blocks of one run.

    Example:
        context = BlockContext()
        context.set("scheme", FORWARD_CATALOG.get("steady-builder"))
        context.set("current_price", 100_000)
        context.set("annual_growth_rate", 15)

        ForwardTimelineBlock().execute(context)
        timeline_df = context.get("forward_timeline")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Get value from context.

        Raises:
            KeyError: If key not found in context
        """
        if key not in self._data:
            raise KeyError(f"Key '{key}' not found in context. Available keys: {list(self._data.keys())}")
        return self._data[key]

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """Abstract base class for computation blocks.

    Subclasses declare what they read (inputs) and write (outputs) and
    implement execute(). Blocks hold no state between runs beyond their
    configured context keys.
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys this block reads."""
        pass

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys this block writes."""
        pass

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context, compute, write outputs to context."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Raised when blocks have circular dependencies."""
    pass


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Sort blocks so every block runs after the producers of its inputs.

    Inputs nobody produces are expected in the initial context.

    Raises:
        CircularDependencyError: If blocks depend on each other in a cycle
        ValueError: If two blocks declare the same output
    """
    producers: Dict[str, Block] = {}
    for block in blocks:
        for output_key in block.outputs():
            if output_key in producers:
                raise ValueError(
                    f"Multiple blocks produce '{output_key}': "
                    f"{producers[output_key]} and {block}"
                )
            producers[output_key] = block

    in_degree: Dict[Block, int] = {block: 0 for block in blocks}
    dependents: Dict[Block, List[Block]] = {block: [] for block in blocks}

    for block in blocks:
        for input_key in block.inputs():
            if input_key in producers:
                dependents[producers[input_key]].append(block)
                in_degree[block] += 1

    ready: List[Block] = [block for block in blocks if in_degree[block] == 0]
    ordered: List[Block] = []

    while ready:
        current = ready.pop(0)
        ordered.append(current)
        for dependent in dependents[current]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                ready.append(dependent)

    if len(ordered) != len(blocks):
        remaining = [block for block in blocks if in_degree[block] > 0]
        raise CircularDependencyError(
            f"Circular dependency detected among blocks: {remaining}"
        )

    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Executes blocks in dependency order.

    Example:
        executor = BlockExecutor([HistoricalTimelineBlock(), CostBasisBlock()])
        context = BlockContext()
        context.set("scheme", HISTORICAL_CATALOG.get("steady-builder"))
        context.set("starting_year", 2018)
        context.set("ending_year", 2024)
        context.set("cost_basis_method", "average")
        context.set("historical_prices", REFERENCE_PRICE_BANDS)
        context.set("current_price", 100_000)

        executor.execute(context)
        by_year_df = context.get("cost_basis_by_year")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = blocks
        self._sorted_blocks: Optional[List[Block]] = None

    def execute(self, context: BlockContext) -> BlockContext:
        """Run all blocks, validating declared inputs and outputs.

        Raises:
            CircularDependencyError: If blocks have circular dependencies
            KeyError: If a required input is not in context
            ValueError: If a block did not write a declared output
        """
        if self._sorted_blocks is None:
            self._sorted_blocks = topological_sort(self.blocks)

        for block in self._sorted_blocks:
            self._validate_inputs(block, context)
            logger.debug("Executing %r", block)
            block.execute(context)
            self._validate_outputs(block, context)

        return context

    def _validate_inputs(self, block: Block, context: BlockContext) -> None:
        for input_key in block.inputs():
            if not context.has(input_key):
                raise KeyError(
                    f"Block {block} requires input '{input_key}' but it's not in context. "
                    f"Available keys: {context.keys()}"
                )

    def _validate_outputs(self, block: Block, context: BlockContext) -> None:
        for output_key in block.outputs():
            if not context.has(output_key):
                raise ValueError(
                    f"Block {block} declared output '{output_key}' but didn't write it to context"
                )
