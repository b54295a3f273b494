"""Scheme catalog.

Declarative scheme definitions plus the cadence capability table. Two
catalogs ship with the package:
- FORWARD_CATALOG: grant sizes used for forward projections
- HISTORICAL_CATALOG: larger grants used for historical reconstructions

Cadence rules are looked up by scheme id once, when a SchemeCatalog is
built. Calculators receive the resolved SchemeCapabilities and never branch
on scheme ids themselves.

A static table of yearly reference prices (REFERENCE_PRICE_BANDS) is also
provided. The engine never falls back to it on its own; callers that want it
pass it in explicitly.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import InvalidScheme
from .schemas import (
    SchemeCapabilities,
    SchemeDefinition,
    VestingMilestone,
    YearlyPriceBand,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Capability table
# =============================================================================

DEFAULT_CAPABILITIES = SchemeCapabilities()

# Grants land at months 12, 24, ... up to the cap
SCHEME_CAPABILITIES: Dict[str, SchemeCapabilities] = {
    "steady-builder": SchemeCapabilities(max_periodic_grants=5, cadence_months=12),
    "slow-burn": SchemeCapabilities(max_periodic_grants=9, cadence_months=12),
    "custom": SchemeCapabilities(max_periodic_grants=10, cadence_months=12),
}


def capabilities_for(scheme_id: str) -> SchemeCapabilities:
    """Cadence capabilities for a scheme id (defaults for unknown ids)."""
    return SCHEME_CAPABILITIES.get(scheme_id, DEFAULT_CAPABILITIES)


# =============================================================================
# Catalog
# =============================================================================

class SchemeCatalog:
    """Read-only collection of schemes with their capabilities resolved.

    Example:
        catalog = SchemeCatalog([scheme_a, scheme_b])
        scheme = catalog.get("steady-builder")
        caps = catalog.capabilities("steady-builder")
    """

    def __init__(
        self,
        schemes: Iterable[SchemeDefinition],
        capability_table: Optional[Mapping[str, SchemeCapabilities]] = None,
    ):
        table = SCHEME_CAPABILITIES if capability_table is None else capability_table
        entries: Dict[str, Tuple[SchemeDefinition, SchemeCapabilities]] = {}
        for scheme in schemes:
            if scheme.id in entries:
                raise InvalidScheme(scheme.id, "duplicate scheme id in catalog")
            entries[scheme.id] = (scheme, table.get(scheme.id, DEFAULT_CAPABILITIES))
        self._entries = entries

    def get(self, scheme_id: str) -> SchemeDefinition:
        """Look up a scheme by id.

        Raises:
            InvalidScheme: If the id is not in the catalog
        """
        return self._entry(scheme_id)[0]

    def capabilities(self, scheme_id: str) -> SchemeCapabilities:
        return self._entry(scheme_id)[1]

    def ids(self) -> List[str]:
        return list(self._entries.keys())

    def schemes(self) -> List[SchemeDefinition]:
        return [scheme for scheme, _ in self._entries.values()]

    def __contains__(self, scheme_id: object) -> bool:
        return scheme_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _entry(self, scheme_id: str) -> Tuple[SchemeDefinition, SchemeCapabilities]:
        if scheme_id not in self._entries:
            raise InvalidScheme(
                scheme_id,
                f"not in catalog. Available schemes: {self.ids()}",
            )
        return self._entries[scheme_id]


# =============================================================================
# Scheme definitions
# =============================================================================

# 0% at start, 50% at 5 years, 100% at 10 years
STANDARD_MILESTONES: Tuple[VestingMilestone, ...] = (
    VestingMilestone(month_offset=0, vested_percent=Decimal("0"),
                     description="Immediate access to contributions"),
    VestingMilestone(month_offset=60, vested_percent=Decimal("50"),
                     description="50% vested at 5 years"),
    VestingMilestone(month_offset=120, vested_percent=Decimal("100"),
                     description="100% vested at 10 years"),
)

FORWARD_SCHEMES: Tuple[SchemeDefinition, ...] = (
    SchemeDefinition(
        id="accelerator",
        name="Bitcoin Pioneer",
        description="Immediate upfront grant; no yearly grants.",
        initial_grant=Decimal("0.02"),
        milestones=STANDARD_MILESTONES,
    ),
    SchemeDefinition(
        id="steady-builder",
        name="Dollar Cost Advantage",
        description="Upfront grant plus yearly grants for five years.",
        initial_grant=Decimal("0.015"),
        periodic_grant=Decimal("0.001"),
        milestones=STANDARD_MILESTONES,
    ),
    SchemeDefinition(
        id="slow-burn",
        name="Wealth Builder",
        description="No upfront grant; yearly grants for nine years.",
        initial_grant=Decimal("0"),
        periodic_grant=Decimal("0.002"),
        milestones=STANDARD_MILESTONES,
    ),
)

# Historical analysis uses larger grants so the figures are meaningful
HISTORICAL_SCHEMES: Tuple[SchemeDefinition, ...] = (
    SchemeDefinition(
        id="accelerator",
        name="Bitcoin Pioneer",
        description="Historical result of lump sum funding.",
        initial_grant=Decimal("0.1"),
        milestones=STANDARD_MILESTONES,
    ),
    SchemeDefinition(
        id="steady-builder",
        name="Stacking Sats",
        description="Historical result of five year funding.",
        initial_grant=Decimal("0.05"),
        periodic_grant=Decimal("0.01"),
        milestones=STANDARD_MILESTONES,
    ),
    SchemeDefinition(
        id="slow-burn",
        name="Wealth Builder",
        description="Historical result of yearly funding.",
        initial_grant=Decimal("0"),
        periodic_grant=Decimal("0.02"),
        milestones=STANDARD_MILESTONES,
    ),
)

FORWARD_CATALOG = SchemeCatalog(FORWARD_SCHEMES)
HISTORICAL_CATALOG = SchemeCatalog(HISTORICAL_SCHEMES)


# =============================================================================
# Reference price bands
# =============================================================================

def _band(year: int, high: int, low: int, average: int, open_: int, close: int) -> YearlyPriceBand:
    return YearlyPriceBand(
        year=year,
        high=Decimal(high),
        low=Decimal(low),
        average=Decimal(average),
        open=Decimal(open_),
        close=Decimal(close),
    )


# USD yearly bands, rounded to whole dollars
REFERENCE_PRICE_BANDS: Dict[int, YearlyPriceBand] = {
    band.year: band
    for band in (
        _band(2015, 504, 152, 264, 314, 430),
        _band(2016, 975, 365, 574, 430, 963),
        _band(2017, 19783, 775, 4951, 963, 13880),
        _band(2018, 17527, 3191, 7532, 13880, 3742),
        _band(2019, 13016, 3391, 7179, 3742, 7179),
        _band(2020, 28994, 4106, 11111, 7179, 28994),
        _band(2021, 68789, 28994, 47686, 28994, 46306),
        _band(2022, 48086, 15460, 31717, 46306, 16547),
        _band(2023, 44700, 15460, 29234, 16547, 42258),
        _band(2024, 108000, 38000, 65000, 42258, 95000),
        _band(2025, 120000, 95000, 105000, 95000, 110000),
    )
}


def reference_price_table(start_year: int, end_year: int) -> Dict[int, YearlyPriceBand]:
    """Slice of REFERENCE_PRICE_BANDS covering [start_year, end_year].

    Years without a reference band are simply absent; the calculators report
    them as MissingPriceData.
    """
    table = {
        year: band
        for year, band in REFERENCE_PRICE_BANDS.items()
        if start_year <= year <= end_year
    }
    missing = [year for year in range(start_year, end_year + 1) if year not in table]
    if missing:
        logger.debug("Reference price table has no bands for %s", missing)
    return table
