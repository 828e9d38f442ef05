"""
Tests for the F-gas logbook and fleet summary.
"""

from datetime import date

import pytest

from climatequote.compliance import (
    FGasActivityType,
    FGasLogEntry,
    FleetInstallation,
    RefrigerantSpec,
    add_months,
    current_charge,
    evaluate_refrigerant_compliance,
    next_leak_check_date,
    summarize_installations,
)


def entry(activity, day, quantity=0.0, **kwargs):
    return FGasLogEntry(activity, day, refrigerant_type="R410A", quantity_kg=quantity, **kwargs)


class TestAddMonths:
    """Calendar month arithmetic."""

    def test_simple(self):
        assert add_months(date(2024, 3, 15), 12) == date(2025, 3, 15)

    def test_year_rollover(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_month_end_clamp(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)


class TestCurrentCharge:
    """Replaying the logbook."""

    def test_additions_and_removals(self):
        log = [
            entry(FGasActivityType.TOP_UP, date(2024, 6, 1), 0.5),
            entry(FGasActivityType.RECOVERY, date(2024, 7, 1), 0.3),
            entry(FGasActivityType.LEAK_CHECK, date(2024, 8, 1)),
        ]
        assert current_charge(3.0, log) == pytest.approx(3.2)

    def test_measured_total_overrides(self):
        log = [
            entry(FGasActivityType.TOP_UP, date(2024, 6, 1), 0.5),
            entry(FGasActivityType.REPAIR, date(2024, 7, 1), new_total_charge_kg=2.8),
        ]
        assert current_charge(3.0, log) == pytest.approx(2.8)

    def test_entries_replayed_in_date_order(self):
        log = [
            entry(FGasActivityType.TOP_UP, date(2024, 9, 1), 1.0),
            entry(FGasActivityType.REPAIR, date(2024, 7, 1), new_total_charge_kg=2.0),
        ]
        assert current_charge(3.0, log) == pytest.approx(3.0)

    def test_explicit_addition_flag(self):
        log = [entry(FGasActivityType.REPAIR, date(2024, 7, 1), 0.4, is_addition=True)]
        assert current_charge(1.0, log) == pytest.approx(1.4)

    def test_never_negative(self):
        log = [entry(FGasActivityType.DECOMMISSIONING, date(2024, 7, 1), 10)]
        assert current_charge(3.0, log) == 0

    def test_entry_co2(self):
        assert entry(FGasActivityType.TOP_UP, date(2024, 6, 1), 1.0).co2_equivalent_tons == pytest.approx(2.088)

    def test_from_dict(self):
        log_entry = FGasLogEntry.from_dict({
            "activity_type": "leak_check",
            "activity_date": "2024-05-01",
            "refrigerant_type": "R32",
            "quantity_kg": None,
        })

        assert log_entry.activity_type is FGasActivityType.LEAK_CHECK
        assert log_entry.activity_date == date(2024, 5, 1)
        assert log_entry.quantity_kg == 0

    def test_from_backend_row(self):
        log_entry = FGasLogEntry.from_dict({
            "activity_type": "lekcontrole",
            "performed_at": "2024-05-01T09:30:00.000Z",
            "refrigerant_type": "R32",
            "refrigerant_gwp": 675,
            "quantity_kg": None,
            "is_addition": 0,
            "leak_detected": 1,
            "technician_id": 12,
        })

        assert log_entry.activity_type is FGasActivityType.LEAK_CHECK
        assert log_entry.activity_date == date(2024, 5, 1)
        assert log_entry.gwp == 675
        assert log_entry.leak_found is True
        assert log_entry.is_addition is False
        assert log_entry.technician_id == "12"

    @pytest.mark.parametrize("code, expected", [
        ("installatie", FGasActivityType.INSTALLATION),
        ("bijvullen", FGasActivityType.TOP_UP),
        ("terugwinnen", FGasActivityType.RECOVERY),
        ("reparatie", FGasActivityType.REPAIR),
        ("onderhoud", FGasActivityType.MAINTENANCE),
        ("verwijdering", FGasActivityType.DECOMMISSIONING),
        ("Top_Up", FGasActivityType.TOP_UP),
    ])
    def test_activity_codes(self, code, expected):
        assert FGasActivityType.parse(code) is expected

    def test_unknown_activity(self):
        with pytest.raises(ValueError):
            FGasActivityType.parse("schoonmaak")

    def test_backend_rows_replay(self):
        rows = [
            {"activity_type": "installatie", "performed_at": "2024-01-10", "quantity_kg": 2.0, "is_addition": True},
            {"activity_type": "bijvullen", "performed_at": "2024-06-01", "quantity_kg": 0.4, "is_addition": True},
            {"activity_type": "lekcontrole", "performed_at": "2024-07-01", "is_addition": False, "leak_detected": None},
        ]
        log = [FGasLogEntry.from_dict(row) for row in rows]

        assert current_charge(0.0, log) == pytest.approx(2.4)
        assert log[2].leak_found is False
        assert next_leak_check_date(log, 12.0) == date(2025, 7, 1)


class TestNextLeakCheck:
    """Last check plus the statutory interval."""

    def test_from_last_leak_check(self):
        log = [
            entry(FGasActivityType.LEAK_CHECK, date(2023, 4, 1)),
            entry(FGasActivityType.LEAK_CHECK, date(2024, 4, 1)),
        ]
        assert next_leak_check_date(log, 12.0) == date(2025, 4, 1)

    def test_from_start_date(self):
        assert next_leak_check_date([], 60.0, start=date(2024, 1, 10)) == date(2024, 7, 10)

    def test_from_installation_entry(self):
        log = [entry(FGasActivityType.INSTALLATION, date(2024, 2, 1), 3.0)]
        assert next_leak_check_date(log, 6.3) == date(2025, 2, 1)

    def test_not_required(self):
        assert next_leak_check_date([], 1.2, start=date(2024, 1, 1)) is None

    def test_nothing_to_count_from(self):
        assert next_leak_check_date([], 12.0) is None


class TestFleetSummary:
    """Totals and due checks over several installations."""

    def test_summary(self):
        big = evaluate_refrigerant_compliance(RefrigerantSpec(type="R410A", charge_kg=3.0))      # 6.26 t
        small = evaluate_refrigerant_compliance(RefrigerantSpec(type="R32", charge_kg=0.9))      # 0.61 t
        other = evaluate_refrigerant_compliance(RefrigerantSpec(type="R404A", charge_kg=2.0))    # 7.84 t

        fleet = [
            FleetInstallation("inst-1", big, installation_date=date(2023, 6, 1),
                              log=(entry(FGasActivityType.LEAK_CHECK, date(2024, 1, 20)),)),
            FleetInstallation("inst-2", small, installation_date=date(2024, 1, 1)),
            FleetInstallation("inst-3", other, installation_date=date(2023, 1, 5)),
        ]
        summary = summarize_installations(fleet, today=date(2025, 1, 10))

        assert summary.installation_count == 3
        assert summary.total_charge_kg == pytest.approx(5.9)
        assert summary.total_co2_equivalent_tons == pytest.approx(6.264 + 0.6075 + 7.844)
        assert summary.leak_check_required_count == 2
        assert summary.due == {"inst-1": date(2025, 1, 20)}
        assert summary.overdue == {"inst-3": date(2024, 1, 5)}
        assert summary.to_dict()["due"] == {"inst-1": "2025-01-20"}

    def test_leak_detection_extends_interval(self):
        big = evaluate_refrigerant_compliance(RefrigerantSpec(type="R404A", charge_kg=2.0), leak_detection_system=True)
        fleet = [FleetInstallation("inst-3", big, installation_date=date(2023, 1, 5), leak_detection_system=True)]

        summary = summarize_installations(fleet, today=date(2025, 1, 10))
        # 24 months from installation: 2025-01-05 is already past
        assert summary.overdue == {"inst-3": date(2025, 1, 5)}
        assert summary.due == {}
