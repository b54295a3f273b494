"""Vesting schedule engine.

Computes, for every month offset m >= 0:
- cumulative granted amount (initial grant + periodic grants so far)
- vested percent (step function over the scheme's vesting policy)
- bonus amount (reached milestone bonuses, additive)
- vested amount = cumulative granted x percent / 100 + bonus

Grant accrual:
    The initial grant applies at month 0. If a periodic grant is defined, one
    more is added at every cadence boundary (12, 24, ... months) up to a cap:
        1. latest custom vesting event // cadence, if custom events exist
        2. the scheme's explicit max_periodic_grants, else the capability
           table's limit for the scheme id
        3. milestone horizon // cadence

Vested-percent lookup:
    The scheme's milestones, or its custom vesting events when it has any,
    are resolved once into a VestingPolicy. Lookup picks the step with the
    largest month offset <= m (0% if none qualify).
"""

import logging
from bisect import bisect_right
from decimal import Decimal
from typing import List, Optional

from ..catalog import capabilities_for
from ..errors import InvalidScheme
from ..precision import apply_percent, from_subunits, sum_amounts, to_subunits
from ..schemas import (
    CustomEvents,
    DefaultMilestones,
    GrantEvent,
    SchemeCapabilities,
    SchemeDefinition,
    VestingPolicy,
    VestingStep,
    VestingTimelineRow,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Policy resolution
# =============================================================================

def _check_percent(scheme_id: str, percent: Decimal, what: str) -> None:
    if not percent.is_finite() or percent < 0 or percent > 100:
        raise InvalidScheme(scheme_id, f"{what} percent must be between 0 and 100, got {percent}")


def _check_monotone(scheme_id: str, steps: List[VestingStep], what: str) -> None:
    for previous, current in zip(steps, steps[1:]):
        if current.month_offset == previous.month_offset:
            raise InvalidScheme(
                scheme_id, f"duplicate {what} at month {current.month_offset}"
            )
        if current.vested_percent < previous.vested_percent:
            raise InvalidScheme(
                scheme_id,
                f"{what} percent decreases from {previous.vested_percent} "
                f"to {current.vested_percent} at month {current.month_offset}",
            )


def resolve_vesting_policy(scheme: SchemeDefinition) -> VestingPolicy:
    """Resolve a scheme into a DefaultMilestones or CustomEvents policy.

    Custom vesting events, when present, fully replace the milestone table.
    They are user-entered and are sorted here; milestones must already be in
    ascending month order.

    Raises:
        InvalidScheme: unsorted milestones, duplicate months, percent outside
            [0, 100] or a percent that decreases over time
    """
    if scheme.custom_vesting_events:
        for event in scheme.custom_vesting_events:
            _check_percent(scheme.id, event.percentage_vested, "custom vesting event")
        steps = sorted(
            (
                VestingStep(month_offset=event.time_period, vested_percent=event.percentage_vested)
                for event in scheme.custom_vesting_events
            ),
            key=lambda step: step.month_offset,
        )
        _check_monotone(scheme.id, steps, "custom vesting event")
        return CustomEvents(steps=tuple(steps))

    steps = []
    for milestone in scheme.milestones:
        _check_percent(scheme.id, milestone.vested_percent, "milestone")
        if steps and milestone.month_offset < steps[-1].month_offset:
            raise InvalidScheme(
                scheme.id,
                f"milestones are not sorted by month (month {milestone.month_offset} "
                f"follows month {steps[-1].month_offset})",
            )
        steps.append(
            VestingStep(month_offset=milestone.month_offset, vested_percent=milestone.vested_percent)
        )
    _check_monotone(scheme.id, steps, "milestone")
    return DefaultMilestones(steps=tuple(steps))


# =============================================================================
# Engine
# =============================================================================

class VestingScheduleEngine:
    """Computes grant accrual and vesting for one scheme.

    The scheme is validated and its policy resolved on construction; every
    lookup afterwards is a pure function of the month offset.

    Example:
        engine = VestingScheduleEngine(scheme)
        engine.vested_amount(60)          # Decimal('0.01000000')
        rows = engine.generate_timeline() # months 0..120
    """

    def __init__(self, scheme: SchemeDefinition, capabilities: Optional[SchemeCapabilities] = None):
        self.scheme = scheme
        self.capabilities = capabilities if capabilities is not None else capabilities_for(scheme.id)
        self.policy = resolve_vesting_policy(scheme)

        for bonus in scheme.bonuses:
            _check_percent(scheme.id, bonus.bonus_percent, "bonus")

        self._initial_subunits = to_subunits(scheme.initial_grant, f"initial grant of '{scheme.id}'")
        self._periodic_subunits = (
            to_subunits(scheme.periodic_grant, f"periodic grant of '{scheme.id}'")
            if scheme.periodic_grant is not None
            else 0
        )
        self._step_offsets = [step.month_offset for step in self.policy.steps]
        self._step_percents = [step.vested_percent for step in self.policy.steps]

    # -------------------------------------------------------------------------
    # Horizon and cadence
    # -------------------------------------------------------------------------

    @property
    def cadence_months(self) -> int:
        return self.capabilities.cadence_months

    def default_horizon(self) -> int:
        """Latest month any vesting step refers to."""
        custom_horizon = max((e.time_period for e in self.scheme.custom_vesting_events), default=0)
        return max(self.scheme.milestone_horizon, custom_horizon)

    def periodic_grant_cap(self) -> int:
        """Maximum number of periodic grants this scheme issues."""
        if self._periodic_subunits == 0:
            return 0
        if self.scheme.custom_vesting_events:
            latest = max(e.time_period for e in self.scheme.custom_vesting_events)
            return latest // self.cadence_months
        if self.scheme.max_periodic_grants is not None:
            return self.scheme.max_periodic_grants
        if self.capabilities.max_periodic_grants is not None:
            return self.capabilities.max_periodic_grants
        return self.scheme.milestone_horizon // self.cadence_months

    def periodic_grants_by(self, month: int) -> int:
        """Number of periodic grants issued at or before `month`."""
        return min(self.periodic_grant_cap(), month // self.cadence_months)

    # -------------------------------------------------------------------------
    # Per-month lookups
    # -------------------------------------------------------------------------

    def vested_percent(self, month: int) -> Decimal:
        """Vested percent at `month` (0-100)."""
        _check_month(month)
        index = bisect_right(self._step_offsets, month) - 1
        if index < 0:
            return Decimal("0")
        return self._step_percents[index]

    def cumulative_granted(self, month: int) -> Decimal:
        _check_month(month)
        subunits = self._initial_subunits + self._periodic_subunits * self.periodic_grants_by(month)
        return from_subunits(subunits)

    def bonus_amount(self, month: int, balance: Decimal) -> Decimal:
        """Sum of reached bonuses, each a percent of `balance` (no compounding)."""
        return sum_amounts(
            apply_percent(balance, bonus.bonus_percent, "vesting bonus")
            for bonus in self.scheme.bonuses
            if month >= bonus.month_offset
        )

    def vested_amount(self, month: int) -> Decimal:
        return self.row(month).vested_amount

    def row(self, month: int) -> VestingTimelineRow:
        """Full vesting state at one month offset."""
        cumulative = self.cumulative_granted(month)
        percent = self.vested_percent(month)
        bonus = self.bonus_amount(month, cumulative)
        vested = sum_amounts([apply_percent(cumulative, percent, "vested amount"), bonus])
        return VestingTimelineRow(
            month=month,
            cumulative_granted=cumulative,
            vested_percent=percent,
            bonus_amount=bonus,
            vested_amount=vested,
        )

    # -------------------------------------------------------------------------
    # Schedules
    # -------------------------------------------------------------------------

    def generate_timeline(self, max_months: Optional[int] = None) -> List[VestingTimelineRow]:
        """Rows for m = 0..max_months (default: the scheme's vesting horizon)."""
        horizon = self.default_horizon() if max_months is None else max_months
        _check_month(horizon)
        logger.debug("Generating vesting timeline for '%s' over %d months", self.scheme.id, horizon)
        return [self.row(month) for month in range(horizon + 1)]

    def grant_events(self, max_months: int, starting_year: Optional[int] = None) -> List[GrantEvent]:
        """Grants issued within [0, max_months].

        Args:
            max_months: Last month offset to include
            starting_year: Calendar year of month 0; when given, events carry
                calendar (year, month) periods

        Returns:
            Grant events ordered by month offset
        """
        _check_month(max_months)
        offsets = []
        if self._initial_subunits > 0:
            offsets.append((0, self._initial_subunits, "initial"))
        for index in range(1, self.periodic_grants_by(max_months) + 1):
            offsets.append((index * self.cadence_months, self._periodic_subunits, "periodic"))

        events = []
        for offset, subunits, kind in offsets:
            year = None
            month = 1
            if starting_year is not None:
                year = starting_year + offset // 12
                month = offset % 12 + 1
            events.append(
                GrantEvent(
                    month_offset=offset,
                    amount=from_subunits(subunits),
                    kind=kind,
                    year=year,
                    month=month,
                )
            )
        return events

    def average_vesting_period(self) -> Decimal:
        """Vesting step months weighted by their vested percent (0 if no weight)."""
        total_weight = sum(self._step_percents, Decimal("0"))
        if total_weight == 0:
            return Decimal("0")
        weighted = sum(
            (Decimal(offset) * percent for offset, percent in zip(self._step_offsets, self._step_percents)),
            Decimal("0"),
        )
        return weighted / total_weight


def _check_month(month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or month < 0:
        raise ValueError(f"Month offset must be a non-negative integer, got {month!r}")
