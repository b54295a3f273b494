"""Vesting schedule computation block.

Converts a scheme's month-by-month vesting schedule into a DataFrame.
"""

from typing import List, Optional
import pandas as pd

from .base import Block, BlockContext
from ..engines import VestingScheduleEngine
from ..schemas import SchemeDefinition


class VestingScheduleBlock(Block):
    """Month-by-month vesting schedule for one scheme.

    Inputs (from context):
        - scheme: SchemeDefinition

    Outputs (to context):
        - vesting_schedule: DataFrame with columns:
            * month: Month offset (0..horizon)
            * cumulative_granted: Asset granted so far
            * vested_percent: Percent vested (0-100)
            * bonus_amount: Reached bonuses
            * vested_amount: Asset unconditionally owned
            * grant_kind: 'initial' / 'periodic' when a grant lands that month, else None
    """

    def __init__(self, scheme_key: str = "scheme", horizon_months: Optional[int] = None):
        self.scheme_key = scheme_key
        self.horizon_months = horizon_months

    def inputs(self) -> List[str]:
        return [self.scheme_key]

    def outputs(self) -> List[str]:
        return ["vesting_schedule"]

    def execute(self, context: BlockContext) -> None:
        scheme: SchemeDefinition = context.get(self.scheme_key)
        engine = VestingScheduleEngine(scheme)
        rows = engine.generate_timeline(self.horizon_months)
        grant_kinds = {g.month_offset: g.kind for g in engine.grant_events(rows[-1].month)}

        df = pd.DataFrame([
            {
                "month": row.month,
                "cumulative_granted": float(row.cumulative_granted),
                "vested_percent": float(row.vested_percent),
                "bonus_amount": float(row.bonus_amount),
                "vested_amount": float(row.vested_amount),
                "grant_kind": grant_kinds.get(row.month),
            }
            for row in rows
        ])
        context.set("vesting_schedule", df)
