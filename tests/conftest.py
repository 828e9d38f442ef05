"""
Pytest configuration and fixtures for climatequote tests.

Provides reusable test fixtures for:
- Configuration snapshots with and without tier tables
- Sample rooms and products
- A fully filled commissioning checklist
"""

import json
import shutil
import tempfile
from datetime import date
from pathlib import Path

import pytest

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from climatequote.pricing import (
    CapacityPricingRow,
    ConfigurationSnapshot,
    PipeDiameterPricingRow,
    ProductPrice,
    Room,
    RoomType,
    default_snapshot,
)
from climatequote.commissioning import (
    CommissioningChecklist,
    CommissioningStep,
    InstallationDetails,
    STEP_ORDER,
)


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs, cleaned up after test."""
    tmp = tempfile.mkdtemp(prefix="climatequote_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def airco_config() -> ConfigurationSnapshot:
    """Airco snapshot holding the standard fallbacks, no tier tables."""
    return default_snapshot("airco")


@pytest.fixture
def capacity_table():
    return (
        CapacityPricingRow(0.0, 3.5, extra_hours=0, extra_materials=0, notes="Standaard"),
        CapacityPricingRow(3.6, 5.0, extra_hours=1, extra_materials=50),
        CapacityPricingRow(5.1, 7.0, extra_hours=2, extra_materials=100),
    )


@pytest.fixture
def pipe_table():
    return (
        PipeDiameterPricingRow(0.0, 3.5, '1/4"', '3/8"', price_per_meter=35),
        PipeDiameterPricingRow(3.6, 7.0, '1/4"', '1/2"', price_per_meter=45),
        PipeDiameterPricingRow(7.1, 12.0, '3/8"', '5/8"', price_per_meter=60),
    )


@pytest.fixture
def tiered_config(capacity_table, pipe_table) -> ConfigurationSnapshot:
    """Snapshot with category and global settings plus both tier tables."""
    return ConfigurationSnapshot(
        category="airco",
        settings={
            "base_installation_small": 350,
            "base_installation_large": 450,
            "multisplit_per_room": 200,
            "extra_unit_discount": 0.8,
            "pipe_included_meters": 3,
            "electrical_group": 185,
        },
        global_settings={
            "hourly_rate": 55,
            "travel_cost": 35,
            "vat_rate": 21,
            "margin_percent": 30,
            "pipe_per_meter": 35,
            "small_materials": 45,
            "vacuum_nitrogen": 35,
        },
        capacity_pricing=capacity_table,
        pipe_pricing=pipe_table,
    )


@pytest.fixture
def snapshot_document() -> dict:
    """Snapshot as exported by the back office."""
    return {
        "category": "airco",
        "settings": {
            "hourly_rate": {"value": 60, "unit": "EUR/uur", "description": "Uurtarief monteur"},
            "pipe_per_meter": 40,
        },
        "global": {"vat_rate": {"value": 21, "unit": "%"}},
        "capacity_pricing": [
            {"min_capacity": 0, "max_capacity": 3.5, "extra_hours": 0, "extra_materials": 0},
            {"min_capacity": 3.6, "max_capacity": 5.0, "extra_hours": 1, "extra_materials": 50},
        ],
        "pipe_pricing": [
            {"min_capacity": 0, "max_capacity": 3.5, "liquid_line": '1/4"', "suction_line": '3/8"', "price_per_meter": 35},
        ],
    }


@pytest.fixture
def snapshot_file(temp_dir, snapshot_document) -> Path:
    path = temp_dir / "airco.json"
    path.write_text(json.dumps(snapshot_document), encoding="utf-8")
    return path


# =============================================================================
# QUOTE INPUT FIXTURES
# =============================================================================

@pytest.fixture
def living_room() -> Room:
    """35 m² living room with a standard ceiling: 3.5 kW at average insulation."""
    return Room("Woonkamer", size_m2=35, ceiling_height_m=2.5, room_type=RoomType.LIVING)


@pytest.fixture
def bedroom() -> Room:
    return Room("Slaapkamer", size_m2=14, ceiling_height_m=2.5, room_type=RoomType.BEDROOM)


@pytest.fixture
def airco_price() -> ProductPrice:
    return ProductPrice(base_price=1499)


@pytest.fixture
def airco_product_data() -> dict:
    """Catalogue entry as returned by the products endpoint."""
    return {
        "id": "daikin-perfera-25",
        "name": "Perfera 2.5 kW",
        "brand": "Daikin",
        "category": "airco",
        "base_price": 1499,
        "expected_hours": 5,
        "specs": {"capacity": "2.5 kW", "min_m2": 15, "max_m2": 35, "energy_label": "A+++"},
    }


# =============================================================================
# COMMISSIONING FIXTURES
# =============================================================================

@pytest.fixture
def installation_details() -> InstallationDetails:
    return InstallationDetails(
        customer_id="cust-42",
        installed_by_technician_id="tech-7",
        name="Woonkamer airco",
        brand="Daikin",
        model="FTXM25R",
        refrigerant_type="R32",
        refrigerant_charge_kg=0.9,
        installation_date=date(2024, 5, 1),
    )


@pytest.fixture
def complete_checklist(installation_details) -> CommissioningChecklist:
    """Checklist with every step at 100% and all details filled."""
    checklist = CommissioningChecklist(installation_details)
    for step in STEP_ORDER:
        if step is CommissioningStep.TOOLING:
            checklist.set_tool("manometer", brand="Testo", serial="TS-550-001")
            continue
        for name in checklist.get_step(step).check_names():
            checklist.set_check(step, name)
    return checklist
