"""
Tests for the BRL commissioning checklist.

Tests:
- Step completion percentages
- The Tooling serial-number rule
- Free navigation
- The finish gate and the audit record
"""

from datetime import date

import pytest

from climatequote.commissioning import (
    CommissioningChecklist,
    CommissioningStep,
    InstallationDetails,
    InstallationType,
    PreparationChecks,
    SERIAL_FIELDS,
    STEP_ORDER,
    ToolRegistration,
    checklist_template,
    expiring_calibrations,
)


class TestSteps:
    """Step definitions."""

    def test_eight_steps_in_order(self):
        assert [step.value for step in STEP_ORDER] == [
            "preparation",
            "tooling",
            "materials",
            "outdoor_unit",
            "indoor_unit",
            "piping",
            "evacuation_charging",
            "handover",
        ]
        assert CommissioningStep.HANDOVER.number == 8
        assert CommissioningStep.PREPARATION.title == "Voorbereiding"

    def test_four_checks_per_step(self):
        checklist = CommissioningChecklist()
        for step in STEP_ORDER:
            if step is CommissioningStep.TOOLING:
                assert checklist.get_step(step).check_names() == ()
            else:
                assert len(checklist.get_step(step).check_names()) == 4

    def test_check_names(self):
        assert PreparationChecks.check_names() == (
            "customer_informed",
            "location_inspected",
            "electrical_capacity_checked",
            "condensate_drain_planned",
        )

    def test_serial_fields(self):
        assert "manometer_serial" in SERIAL_FIELDS
        assert len(SERIAL_FIELDS) == 5

    def test_template(self):
        template = checklist_template()

        assert len(template) == 8
        assert template[1]["rule"] == "at least one serial"
        assert "vacuum_held" in template[6]["checks"]


class TestStepCompletion:
    """Percent of required checks, half-up rounded."""

    def test_empty_step(self):
        assert CommissioningChecklist().get_step_completion(CommissioningStep.PIPING) == 0

    @pytest.mark.parametrize("ticked, percent", [(1, 25), (2, 50), (3, 75), (4, 100)])
    def test_partial_steps(self, ticked, percent):
        checklist = CommissioningChecklist()
        step = CommissioningStep.PIPING
        for name in checklist.get_step(step).check_names()[:ticked]:
            checklist.set_check(step, name)

        assert checklist.get_step_completion(step) == percent
        assert checklist.is_step_complete(step) is (percent == 100)

    def test_unticking(self):
        checklist = CommissioningChecklist()
        checklist.set_check("handover", "cooling_tested")
        checklist.set_check("handover", "cooling_tested", False)
        assert checklist.get_step_completion("handover") == 0

    def test_notes_do_not_count(self):
        checklist = CommissioningChecklist()
        checklist.set_note(CommissioningStep.PREPARATION, "Klant niet thuis, buurman ingelicht")

        assert checklist.get_step_completion(CommissioningStep.PREPARATION) == 0
        assert checklist.get_step(CommissioningStep.PREPARATION).notes.startswith("Klant")

    def test_unknown_check_raises(self):
        checklist = CommissioningChecklist()
        with pytest.raises(KeyError):
            checklist.set_check(CommissioningStep.PREPARATION, "customer_informd")

    def test_tooling_has_no_checks_to_set(self):
        with pytest.raises(KeyError):
            CommissioningChecklist().set_check(CommissioningStep.TOOLING, "manometer_serial")

    def test_overall_completion(self):
        checklist = CommissioningChecklist()
        for name in checklist.get_step(CommissioningStep.PREPARATION).check_names():
            checklist.set_check(CommissioningStep.PREPARATION, name)
        # 4 of 29 required items
        assert checklist.overall_completion() == 14


class TestTooling:
    """At least one serial number completes the step."""

    def test_no_serial(self):
        checklist = CommissioningChecklist()
        checklist.set_tool("manometer", brand="Testo")
        assert checklist.get_step_completion(CommissioningStep.TOOLING) == 0

    def test_blank_serial(self):
        checklist = CommissioningChecklist()
        checklist.set_tool("vacuum_pump", serial="   ")
        assert checklist.get_step_completion(CommissioningStep.TOOLING) == 0

    def test_one_serial_is_enough(self):
        checklist = CommissioningChecklist()
        checklist.set_tool("recovery_unit", serial="RU-1")
        assert checklist.get_step_completion(CommissioningStep.TOOLING) == 100

    def test_calibration_date(self):
        checklist = CommissioningChecklist()
        checklist.set_tool("leak_detector", serial="LD-9", calibration_date=date(2024, 3, 1))
        assert checklist.get_step(CommissioningStep.TOOLING).leak_detector_calibration_date == date(2024, 3, 1)

    def test_calibration_date_on_uncalibrated_tool(self):
        with pytest.raises(KeyError):
            CommissioningChecklist().set_tool("vacuum_pump", calibration_date=date(2024, 3, 1))

    def test_unknown_tool(self):
        with pytest.raises(KeyError):
            CommissioningChecklist().set_tool("hammer", serial="1")


class TestCalibrationExpiry:
    """Calibrations expire twelve months after the calibration date."""

    def test_valid_until(self):
        tools = ToolRegistration(manometer_calibration_date=date(2024, 2, 29))
        assert tools.calibration_valid_until("manometer") == date(2025, 2, 28)
        assert tools.calibration_valid_until("leak_detector") is None

    def test_uncalibrated_tool_raises(self):
        with pytest.raises(KeyError):
            ToolRegistration().calibration_valid_until("vacuum_pump")

    def test_expiring_within_window(self):
        tools = ToolRegistration(
            manometer_calibration_date=date(2024, 6, 20),        # valid until 2025-06-20
            leak_detector_calibration_date=date(2024, 5, 1),     # expired 2025-05-01
            refrigerant_scale_calibration_date=date(2024, 9, 1), # valid until 2025-09-01
        )
        expiring = expiring_calibrations(tools, today=date(2025, 6, 1))

        assert expiring == {"leak_detector": date(2025, 5, 1), "manometer": date(2025, 6, 20)}
        assert list(expiring) == ["leak_detector", "manometer"]

    def test_window_edge_is_included(self):
        tools = ToolRegistration(refrigerant_scale_calibration_date=date(2024, 7, 1))

        assert expiring_calibrations(tools, today=date(2025, 6, 1), days_ahead=30) == {
            "refrigerant_scale": date(2025, 7, 1),
        }
        assert expiring_calibrations(tools, today=date(2025, 6, 1), days_ahead=29) == {}

    def test_no_dates(self):
        assert expiring_calibrations(ToolRegistration(), today=date(2025, 6, 1)) == {}


class TestNavigation:
    """The current step is a cursor, not a gate."""

    def test_starts_at_preparation(self):
        assert CommissioningChecklist().current_step is CommissioningStep.PREPARATION

    def test_free_jump(self):
        checklist = CommissioningChecklist()
        assert checklist.go_to(CommissioningStep.HANDOVER) is CommissioningStep.HANDOVER
        assert checklist.previous_step() is CommissioningStep.EVACUATION_CHARGING

    def test_bounds(self):
        checklist = CommissioningChecklist()
        assert checklist.previous_step() is CommissioningStep.PREPARATION
        checklist.go_to("handover")
        assert checklist.next_step() is CommissioningStep.HANDOVER

    def test_next_step_not_gated(self):
        checklist = CommissioningChecklist()
        assert checklist.next_step() is CommissioningStep.TOOLING


class TestFinishGate:
    """Top-level fields plus every step at 100%."""

    def test_complete_checklist(self, complete_checklist):
        assert all(complete_checklist.is_step_complete(step) for step in STEP_ORDER)
        assert complete_checklist.can_complete() is True
        assert complete_checklist.missing_requirements() == []

    def test_one_step_at_75_percent(self, complete_checklist):
        """Seven steps at 100% and one at 75% cannot complete."""
        complete_checklist.set_check(CommissioningStep.HANDOVER, "documentation_handed", False)

        assert complete_checklist.get_step_completion(CommissioningStep.HANDOVER) == 75
        assert complete_checklist.can_complete() is False
        assert complete_checklist.missing_requirements() == ["handover.documentation_handed"]

    def test_missing_tool_serial(self, complete_checklist):
        complete_checklist.set_tool("manometer", serial="")

        assert complete_checklist.can_complete() is False
        assert "tooling.serial_number" in complete_checklist.missing_requirements()

    @pytest.mark.parametrize("field_name, value", [
        ("customer_id", None),
        ("installed_by_technician_id", ""),
        ("name", "  "),
        ("brand", ""),
        ("model", ""),
        ("refrigerant_charge_kg", 0),
    ])
    def test_missing_details(self, complete_checklist, field_name, value):
        complete_checklist.update_details(**{field_name: value})

        assert complete_checklist.can_complete() is False
        assert f"details.{field_name}" in complete_checklist.missing_requirements()

    def test_unknown_detail_field(self, complete_checklist):
        with pytest.raises(KeyError):
            complete_checklist.update_details(colour="white")

    def test_rejected_finish_changes_nothing(self, complete_checklist):
        complete_checklist.set_check(CommissioningStep.PIPING, "pipes_protected", False)
        complete_checklist.go_to(CommissioningStep.PIPING)
        before = complete_checklist.get_step(CommissioningStep.PIPING)
        before_state = (before.pipes_protected, before.pipes_insulated)

        assert complete_checklist.finish() is None
        assert complete_checklist.current_step is CommissioningStep.PIPING
        after = complete_checklist.get_step(CommissioningStep.PIPING)
        assert (after.pipes_protected, after.pipes_insulated) == before_state


class TestInstallationRecord:
    """The audit record produced on sign-off."""

    def test_record_carries_refrigerant_figures(self, complete_checklist):
        record = complete_checklist.finish(completed_on=date(2024, 5, 2))

        assert record is not None
        assert record.completed_on == date(2024, 5, 2)
        assert record.co2_equivalent_tons == pytest.approx(0.9 * 675 / 1000)
        assert record.leak_check_required is False
        assert record.next_leak_check_date is None
        assert record.tools == {"manometer": "TS-550-001"}

    def test_large_charge_schedules_leak_check(self, complete_checklist):
        complete_checklist.update_details(refrigerant_type="R410A", refrigerant_charge_kg=3.0)
        record = complete_checklist.finish(completed_on=date(2024, 5, 2))

        assert record.leak_check_required is True
        assert record.next_leak_check_date == date(2025, 5, 1)

    def test_record_is_detached_from_checklist(self, complete_checklist):
        record = complete_checklist.finish(completed_on=date(2024, 5, 2))
        complete_checklist.update_details(name="Changed")
        assert record.details.name == "Woonkamer airco"

    def test_to_dict(self, complete_checklist):
        complete_checklist.set_tool("refrigerant_scale", serial="SC-1", calibration_date=date(2024, 1, 15))
        data = complete_checklist.finish(completed_on=date(2024, 5, 2)).to_dict()

        assert data["details"]["installation_type"] == InstallationType.AIRCO.value
        assert data["details"]["installation_date"] == "2024-05-01"
        assert data["checklist"]["tooling"]["refrigerant_scale_calibration_date"] == "2024-01-15"
        assert data["checklist"]["piping"]["pipes_insulated"] is True
        assert data["compliance"]["refrigerant_type"] == "R32"

    def test_details_missing_fields(self):
        details = InstallationDetails(name="Airco", brand="Daikin", model="X")
        assert details.missing_fields() == (
            "customer_id",
            "installed_by_technician_id",
            "refrigerant_charge_kg",
        )
