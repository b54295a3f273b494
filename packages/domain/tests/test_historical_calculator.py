"""Tests for the historical calculator.

Tests cover:
1. Cost basis per valuation policy against yearly price bands
2. Current value at the live price
3. One timeline point per year, with the configurable ending month
4. Missing years and malformed bands
5. Annualized return edge cases
"""

import pytest
from decimal import Decimal

from vesting_domain.calculators import annualized_return, calculate_historical, require_price_years
from vesting_domain.calculators.historical import _average_periodic_grant
from vesting_domain.catalog import HISTORICAL_CATALOG, STANDARD_MILESTONES
from vesting_domain.errors import InvalidPriceBand, MissingPriceData
from vesting_domain.schemas import (
    GrantEvent,
    HistoricalCalculationCFG,
    SchemeDefinition,
    VestingBonus,
    VestingMilestone,
    YearlyPriceBand,
)


def band(year, low, average, high) -> YearlyPriceBand:
    return YearlyPriceBand(
        year=year,
        high=Decimal(high),
        low=Decimal(low),
        average=Decimal(average),
        open=Decimal(low),
        close=Decimal(high),
    )


PRICES = {
    2018: band(2018, 3000, 7500, 17000),
    2019: band(2019, 3500, 7000, 13000),
    2020: band(2020, 4000, 11000, 29000),
    2021: band(2021, 29000, 47000, 69000),
    2022: band(2022, 15500, 31500, 48000),
    2023: band(2023, 15500, 29000, 44500),
    2024: band(2024, 38000, 65000, 108000),
}

HALF_UNIT_UPFRONT = SchemeDefinition(
    id="half-unit",
    name="Half Unit Upfront",
    initial_grant=Decimal("0.5"),
    milestones=STANDARD_MILESTONES,
)


# =============================================================================
# Single-year reconstruction
# =============================================================================

class TestSingleYear:

    def test_half_unit_in_2020_at_average(self):
        """0.5 granted in 2020 with an average of 11,000 has a cost basis of 5,500.00."""
        result = calculate_historical(
            HALF_UNIT_UPFRONT,
            starting_year=2020,
            ending_year=2020,
            cost_basis_method="average",
            historical_prices=PRICES,
            current_price=50_000,
        )

        assert result.total_asset_granted == Decimal("0.5")
        assert result.total_cost_basis == Decimal("5500.00")
        assert result.current_total_value == Decimal("25000.00")
        assert result.total_return == Decimal("19500.00")
        # No full year elapsed
        assert result.annualized_return == 0.0
        assert result.summary.years_analyzed == 0

    def test_single_point_summarizes_december(self):
        result = calculate_historical(HALF_UNIT_UPFRONT, 2020, 2020, "average", PRICES, 50_000)
        assert len(result.timeline) == 1
        point = result.timeline[0]
        assert point.period == (2020, 12)
        assert point.month_offset == 11
        assert len(point.grants) == 1


# =============================================================================
# Multi-year reconstruction
# =============================================================================

class TestMultiYear:

    @pytest.fixture
    def steady_builder_result(self):
        return calculate_historical(
            HISTORICAL_CATALOG.get("steady-builder"),
            starting_year=2018,
            ending_year=2024,
            cost_basis_method="average",
            historical_prices=PRICES,
            current_price=100_000,
        )

    def test_grants_follow_cadence_cap(self, steady_builder_result):
        grants = steady_builder_result.grant_breakdown
        assert [g.year for g in grants] == [2018, 2019, 2020, 2021, 2022, 2023]
        assert [g.kind for g in grants] == ["initial"] + ["periodic"] * 5
        assert steady_builder_result.total_asset_granted == Decimal("0.10")
        assert steady_builder_result.summary.average_periodic_grant == Decimal("0.01")

    def test_cost_basis_uses_each_years_band(self, steady_builder_result):
        # 0.05 x 7500 + 0.01 x (7000 + 11000 + 47000 + 31500 + 29000)
        assert steady_builder_result.total_cost_basis == Decimal("1630.00")

    def test_current_value_uses_live_price(self, steady_builder_result):
        assert steady_builder_result.current_total_value == Decimal("10000.00")
        assert steady_builder_result.total_return == Decimal("8370.00")

    def test_annualized_return(self, steady_builder_result):
        expected = (10000 / 1630) ** (1 / 6) - 1
        assert steady_builder_result.annualized_return == pytest.approx(expected)

    def test_one_point_per_year(self, steady_builder_result):
        timeline = steady_builder_result.timeline
        assert [p.year for p in timeline] == list(range(2018, 2025))
        assert [p.month_offset for p in timeline] == [11, 23, 35, 47, 59, 71, 83]

    def test_timeline_accumulates(self, steady_builder_result):
        timeline = steady_builder_result.timeline
        assert timeline[0].cumulative_asset == Decimal("0.05")
        assert timeline[0].cumulative_cost_basis == Decimal("375.00")
        assert timeline[-1].cumulative_cost_basis == steady_builder_result.total_cost_basis

        costs = [p.cumulative_cost_basis for p in timeline]
        assert costs == sorted(costs)

    def test_vesting_along_timeline(self, steady_builder_result):
        timeline = steady_builder_result.timeline
        # Offset 59 is still before the 5-year milestone
        assert timeline[4].vested_amount == 0
        assert timeline[5].vested_amount == Decimal("0.05")

    def test_breakdown_in_summary(self, steady_builder_result):
        breakdown = steady_builder_result.summary.cost_basis_breakdown
        assert [row.year for row in breakdown] == [2018, 2019, 2020, 2021, 2022, 2023]
        assert breakdown[0].cost == Decimal("375.00")

    def test_breakdown_can_be_skipped(self):
        result = calculate_historical(
            HISTORICAL_CATALOG.get("steady-builder"), 2018, 2020, "average", PRICES, 100_000,
            cfg=HistoricalCalculationCFG(include_breakdown=False),
        )
        assert result.summary.cost_basis_breakdown == ()

    def test_ending_year_caps_grants(self):
        result = calculate_historical(
            HISTORICAL_CATALOG.get("slow-burn"), 2020, 2022, "low", PRICES, 100_000
        )
        assert [g.year for g in result.grant_breakdown] == [2021, 2022]
        assert result.total_asset_granted == Decimal("0.04")
        # 0.02 x 29000 + 0.02 x 15500
        assert result.total_cost_basis == Decimal("890.00")

    def test_ending_month(self):
        result = calculate_historical(
            HISTORICAL_CATALOG.get("steady-builder"), 2018, 2020, "average", PRICES, 100_000,
            cfg=HistoricalCalculationCFG(ending_month=6),
        )
        assert result.timeline[-1].period == (2020, 6)
        assert result.timeline[-1].month_offset == 29
        assert result.timeline[0].period == (2018, 12)

    def test_policy_ordering(self):
        scheme = HISTORICAL_CATALOG.get("steady-builder")
        totals = {
            method: calculate_historical(scheme, 2018, 2024, method, PRICES, 100_000).total_cost_basis
            for method in ("low", "average", "high")
        }
        assert totals["low"] <= totals["average"] <= totals["high"]

    def test_live_price_does_not_affect_cost(self):
        scheme = HISTORICAL_CATALOG.get("steady-builder")
        cheap = calculate_historical(scheme, 2018, 2024, "high", PRICES, 10_000)
        dear = calculate_historical(scheme, 2018, 2024, "high", PRICES, 200_000)
        assert cheap.total_cost_basis == dear.total_cost_basis
        assert cheap.current_total_value < dear.current_total_value


# =============================================================================
# Zero cost basis
# =============================================================================

def test_zero_cost_basis_reports_zero_return():
    scheme = SchemeDefinition(id="empty", initial_grant=Decimal("0"), milestones=STANDARD_MILESTONES)
    result = calculate_historical(scheme, 2018, 2024, "average", PRICES, 100_000)

    assert result.total_cost_basis == 0
    assert result.annualized_return == 0.0
    assert result.grant_breakdown == ()


# =============================================================================
# Bonuses
# =============================================================================

def test_bonus_raises_vested_amount_but_not_value():
    """Flat price: a 10% bonus is vested but is not counted as a gain over cost."""
    scheme = SchemeDefinition(
        id="bonus-plan",
        initial_grant=Decimal("1"),
        milestones=[VestingMilestone(month_offset=0, vested_percent=100)],
        bonuses=[VestingBonus(month_offset=0, bonus_percent=10)],
    )
    prices = {2020: band(2020, 90, 100, 110), 2021: band(2021, 90, 100, 110)}

    result = calculate_historical(scheme, 2020, 2021, "average", prices, 100)

    assert result.total_asset_granted == Decimal("1")
    assert result.total_cost_basis == Decimal("100.00")
    assert result.current_total_value == Decimal("100.00")
    assert result.total_return == 0
    assert result.annualized_return == 0.0

    final = result.timeline[-1]
    assert final.cumulative_asset == Decimal("1")
    assert final.current_value == Decimal("100.00")
    assert final.vested_amount == Decimal("1.1")


# =============================================================================
# Average periodic grant
# =============================================================================

def test_average_periodic_grant_rounds_half_up():
    """1 and 2 subunits average to 1.5 subunits, which rounds up to 2."""
    grants = [
        GrantEvent(month_offset=12, amount=Decimal("0.00000001"), kind="periodic", year=2021),
        GrantEvent(month_offset=24, amount=Decimal("0.00000002"), kind="periodic", year=2022),
    ]
    assert _average_periodic_grant(grants) == Decimal("0.00000002")


def test_average_periodic_grant_ignores_initial_grant():
    grants = [GrantEvent(month_offset=0, amount=Decimal("0.5"), kind="initial", year=2020)]
    assert _average_periodic_grant(grants) == 0


# =============================================================================
# Errors
# =============================================================================

class TestHistoricalErrors:

    def test_missing_intermediate_year(self):
        prices = {year: b for year, b in PRICES.items() if year != 2021}
        with pytest.raises(MissingPriceData) as exc_info:
            calculate_historical(HALF_UNIT_UPFRONT, 2018, 2024, "average", prices, 100_000)
        assert exc_info.value.years == [2021]

    def test_every_missing_year_listed(self):
        prices = {year: b for year, b in PRICES.items() if year not in (2019, 2022)}
        with pytest.raises(MissingPriceData) as exc_info:
            calculate_historical(HALF_UNIT_UPFRONT, 2018, 2024, "average", prices, 100_000)
        assert exc_info.value.years == [2019, 2022]

    def test_ending_year_beyond_data(self):
        with pytest.raises(MissingPriceData) as exc_info:
            calculate_historical(HALF_UNIT_UPFRONT, 2023, 2026, "average", PRICES, 100_000)
        assert exc_info.value.years == [2025, 2026]

    def test_malformed_band_in_range(self):
        prices = dict(PRICES)
        prices[2020] = band(2020, 4000, 30000, 29000)
        with pytest.raises(InvalidPriceBand):
            calculate_historical(HALF_UNIT_UPFRONT, 2018, 2024, "average", prices, 100_000)

    def test_starting_year_before_price_history(self):
        with pytest.raises(ValueError, match="starting year"):
            calculate_historical(HALF_UNIT_UPFRONT, 2008, 2020, "average", PRICES, 100_000)

    def test_ending_before_starting(self):
        with pytest.raises(ValueError, match="year range"):
            calculate_historical(HALF_UNIT_UPFRONT, 2022, 2020, "average", PRICES, 100_000)

    def test_invalid_method(self):
        with pytest.raises(ValueError, match="cost basis method"):
            calculate_historical(HALF_UNIT_UPFRONT, 2020, 2020, "close", PRICES, 100_000)

    def test_require_price_years_passes_for_complete_table(self):
        require_price_years(PRICES, 2018, 2024)


# =============================================================================
# annualized_return
# =============================================================================

@pytest.mark.parametrize(
    "current,cost,years,expected",
    [
        (200, 100, 1, 1.0),
        (400, 100, 2, 1.0),
        (100, 0, 5, 0.0),
        (100, 100, 0, 0.0),
        (0, 100, 3, -1.0),
    ],
)
def test_annualized_return(current, cost, years, expected):
    assert annualized_return(current, cost, years) == pytest.approx(expected)
