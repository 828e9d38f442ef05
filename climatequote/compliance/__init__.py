"""
Compliance Module - EU F-gas (517/2014) figures for refrigerant installations.

Features:
- CO₂-equivalent and leak-check flag per refrigerant charge
- Statutory leak-check intervals
- F-gas logbook replay and fleet summary
"""

from .refrigerant import (
    REFRIGERANT_GWP,
    LEAK_CHECK_THRESHOLD_TONS,
    RefrigerantSpec,
    ComplianceResult,
    lookup_gwp,
    co2_equivalent_tons,
    leak_check_interval_months,
    evaluate_refrigerant_compliance,
)
from .fgas import (
    FGasActivityType,
    DUTCH_ACTIVITY_CODES,
    FGasLogEntry,
    FleetInstallation,
    FleetSummary,
    add_months,
    current_charge,
    last_leak_check,
    next_leak_check_date,
    summarize_installations,
)

__all__ = [
    'REFRIGERANT_GWP', 'LEAK_CHECK_THRESHOLD_TONS',
    'RefrigerantSpec', 'ComplianceResult',
    'lookup_gwp', 'co2_equivalent_tons', 'leak_check_interval_months',
    'evaluate_refrigerant_compliance',
    'FGasActivityType', 'DUTCH_ACTIVITY_CODES', 'FGasLogEntry', 'FleetInstallation', 'FleetSummary',
    'add_months', 'current_charge', 'last_leak_check', 'next_leak_check_date',
    'summarize_installations',
]
