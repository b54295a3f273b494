"""Tests for the scheme catalog and reference price data."""

import pytest
from decimal import Decimal

from vesting_domain.catalog import (
    DEFAULT_CAPABILITIES,
    FORWARD_CATALOG,
    HISTORICAL_CATALOG,
    REFERENCE_PRICE_BANDS,
    SchemeCatalog,
    capabilities_for,
    reference_price_table,
)
from vesting_domain.engines import validate_price_table
from vesting_domain.errors import InvalidScheme
from vesting_domain.schemas import SchemeCapabilities


# =============================================================================
# Capability table
# =============================================================================

def test_capabilities_by_scheme_id():
    assert capabilities_for("steady-builder").max_periodic_grants == 5
    assert capabilities_for("slow-burn").max_periodic_grants == 9
    assert capabilities_for("custom").max_periodic_grants == 10


def test_unknown_scheme_gets_default_capabilities():
    caps = capabilities_for("accelerator")
    assert caps == DEFAULT_CAPABILITIES
    assert caps.max_periodic_grants is None
    assert caps.cadence_months == 12


# =============================================================================
# Catalog lookups
# =============================================================================

class TestSchemeCatalog:

    def test_shipped_catalogs(self):
        assert FORWARD_CATALOG.ids() == ["accelerator", "steady-builder", "slow-burn"]
        assert HISTORICAL_CATALOG.ids() == ["accelerator", "steady-builder", "slow-burn"]
        assert len(FORWARD_CATALOG) == 3
        assert "slow-burn" in FORWARD_CATALOG
        assert "custom" not in FORWARD_CATALOG

    def test_forward_and_historical_grant_sizes_differ(self):
        assert FORWARD_CATALOG.get("accelerator").initial_grant == Decimal("0.02")
        assert HISTORICAL_CATALOG.get("accelerator").initial_grant == Decimal("0.1")
        assert HISTORICAL_CATALOG.get("slow-burn").periodic_grant == Decimal("0.02")

    def test_capabilities_resolved_at_build_time(self):
        assert FORWARD_CATALOG.capabilities("steady-builder").max_periodic_grants == 5
        assert FORWARD_CATALOG.capabilities("accelerator") == DEFAULT_CAPABILITIES

    def test_unknown_id(self):
        with pytest.raises(InvalidScheme, match="not in catalog"):
            FORWARD_CATALOG.get("moonshot")

    def test_duplicate_ids_rejected(self):
        scheme = FORWARD_CATALOG.get("accelerator")
        with pytest.raises(InvalidScheme, match="duplicate"):
            SchemeCatalog([scheme, scheme])

    def test_custom_capability_table(self):
        catalog = SchemeCatalog(
            FORWARD_CATALOG.schemes(),
            capability_table={"accelerator": SchemeCapabilities(max_periodic_grants=1, cadence_months=6)},
        )
        assert catalog.capabilities("accelerator").cadence_months == 6
        assert catalog.capabilities("steady-builder") == DEFAULT_CAPABILITIES


# =============================================================================
# Reference prices
# =============================================================================

def test_reference_bands_are_valid():
    validate_price_table(REFERENCE_PRICE_BANDS)


def test_reference_price_table_slice():
    table = reference_price_table(2014, 2016)
    assert sorted(table) == [2015, 2016]
    assert table[2016] is REFERENCE_PRICE_BANDS[2016]
