"""
BRL 100/200 commissioning checklist.

The technician walks through the steps in any order; the current step is a
cursor, not a gate. The only gate is ``finish()``, which requires the
top-level installation fields and every step at 100%.

Step completion:
    percent = round(100 * completed / required)     (half-up)

Tooling has no boolean checks and is the declared exception: it is complete
as soon as at least one instrument serial number is registered.

Usage:
    checklist = CommissioningChecklist(InstallationDetails(customer_id="c1", ...))
    checklist.set_check(CommissioningStep.PREPARATION, "customer_informed")
    checklist.set_tool("manometer", brand="Testo", serial="55012345")
    ...
    record = checklist.finish()     # None while anything is missing
"""

from dataclasses import asdict, fields, replace
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import math

from .record import InstallationDetails, InstallationRecord
from .steps import (
    CALIBRATED_TOOLS,
    STEP_CHECK_TYPES,
    STEP_ORDER,
    TOOLS,
    CommissioningStep,
    StepChecks,
    ToolRegistration,
)
from ..compliance.fgas import next_leak_check_date
from ..compliance.refrigerant import evaluate_refrigerant_compliance

logger = logging.getLogger(__name__)


StepRef = Union[CommissioningStep, str]


def _percent(completed: int, total: int) -> int:
    """Half-up rounded percentage; 0 for an empty step."""
    if total <= 0:
        return 0
    return int(math.floor(100 * completed / total + 0.5))


def _as_step(step: StepRef) -> CommissioningStep:
    if isinstance(step, CommissioningStep):
        return step
    return CommissioningStep(step)


class CommissioningChecklist:
    """Checklist state for one installation."""

    def __init__(self, details: Optional[InstallationDetails] = None):
        self.details = details or InstallationDetails()
        self.steps: Dict[CommissioningStep, StepChecks] = {
            step: STEP_CHECK_TYPES[step]() for step in STEP_ORDER
        }
        self._cursor = 0

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def current_step(self) -> CommissioningStep:
        return STEP_ORDER[self._cursor]

    def go_to(self, step: StepRef) -> CommissioningStep:
        self._cursor = STEP_ORDER.index(_as_step(step))
        return self.current_step

    def next_step(self) -> CommissioningStep:
        """Move forward; stays on the last step."""
        self._cursor = min(self._cursor + 1, len(STEP_ORDER) - 1)
        return self.current_step

    def previous_step(self) -> CommissioningStep:
        """Move back; stays on the first step."""
        self._cursor = max(self._cursor - 1, 0)
        return self.current_step

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def get_step(self, step: StepRef) -> StepChecks:
        return self.steps[_as_step(step)]

    def set_check(self, step: StepRef, name: str, value: bool = True) -> None:
        """
        Tick or untick a required check.

        Raises:
            KeyError: If the step has no check of that name
        """
        checks = self.get_step(step)
        if name not in checks.check_names():
            raise KeyError(f"Step '{_as_step(step).value}' has no check '{name}'")
        setattr(checks, name, bool(value))

    def set_note(self, step: StepRef, text: str) -> None:
        self.get_step(step).notes = text or ""

    def set_tool(
        self,
        tool: str,
        brand: Optional[str] = None,
        serial: Optional[str] = None,
        calibration_date: Optional[date] = None,
    ) -> None:
        """
        Register a measuring instrument on the Tooling step.

        Raises:
            KeyError: For an unknown tool, or a calibration date on a tool
                that does not carry one
        """
        if tool not in TOOLS:
            raise KeyError(f"Unknown tool '{tool}'")
        registration = self.steps[CommissioningStep.TOOLING]
        if brand is not None:
            setattr(registration, f"{tool}_brand", brand)
        if serial is not None:
            setattr(registration, f"{tool}_serial", serial)
        if calibration_date is not None:
            if tool not in CALIBRATED_TOOLS:
                raise KeyError(f"Tool '{tool}' has no calibration date")
            setattr(registration, f"{tool}_calibration_date", calibration_date)

    def update_details(self, **values: Any) -> InstallationDetails:
        """
        Update top-level installation fields.

        Raises:
            KeyError: For an unknown field name
        """
        known = InstallationDetails.field_names()
        for name in values:
            if name not in known:
                raise KeyError(f"Unknown installation field '{name}'")
        self.details = replace(self.details, **values)
        return self.details

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def _step_counts(self, step: CommissioningStep) -> Tuple[int, int]:
        checks = self.steps[step]
        if step is CommissioningStep.TOOLING:
            # At least one serial number, not all-of-N
            return (1 if checks.registered_serials() else 0), 1
        return len(checks.completed_checks()), len(checks.check_names())

    def get_step_completion(self, step: StepRef) -> int:
        """Percentage 0..100 of the step's required checks."""
        completed, total = self._step_counts(_as_step(step))
        return _percent(completed, total)

    def is_step_complete(self, step: StepRef) -> bool:
        return self.get_step_completion(step) == 100

    def overall_completion(self) -> int:
        completed = total = 0
        for step in STEP_ORDER:
            done, required = self._step_counts(step)
            completed += done
            total += required
        return _percent(completed, total)

    def missing_checks(self) -> Dict[CommissioningStep, Tuple[str, ...]]:
        """Open items per incomplete step."""
        missing = {}
        for step in STEP_ORDER:
            if self.is_step_complete(step):
                continue
            if step is CommissioningStep.TOOLING:
                missing[step] = ("serial_number",)
            else:
                missing[step] = self.steps[step].open_checks()
        return missing

    def missing_requirements(self) -> List[str]:
        """Everything that blocks ``finish()``, as readable keys."""
        items = [f"details.{name}" for name in self.details.missing_fields()]
        for step, names in self.missing_checks().items():
            items.extend(f"{step.value}.{name}" for name in names)
        return items

    def can_complete(self) -> bool:
        if self.details.missing_fields():
            return False
        return all(self.is_step_complete(step) for step in STEP_ORDER)

    def finish(self, completed_on: Optional[date] = None) -> Optional[InstallationRecord]:
        """
        Sign off the installation.

        Returns:
            InstallationRecord with the refrigerant figures, or None when a
            gate fails. A rejected finish leaves the checklist untouched.
        """
        if not self.can_complete():
            logger.info(f"Installation cannot be completed yet: {', '.join(self.missing_requirements())}")
            return None

        completed_on = completed_on or date.today()
        details = replace(self.details)
        compliance = evaluate_refrigerant_compliance(
            details.refrigerant_spec(),
            leak_detection_system=details.leak_detection_system,
            hermetically_sealed=details.hermetically_sealed,
        )
        next_check = next_leak_check_date(
            [],
            compliance.co2_equivalent_tons,
            leak_detection_system=details.leak_detection_system,
            hermetically_sealed=details.hermetically_sealed,
            start=details.installation_date or completed_on,
        )
        tooling = self.steps[CommissioningStep.TOOLING]

        record = InstallationRecord(
            details=details,
            checklist={step.value: _export(self.steps[step]) for step in STEP_ORDER},
            compliance=compliance,
            completed_on=completed_on,
            next_leak_check_date=next_check,
            tools=tooling.registered_serials(),
        )
        logger.info(
            f"Installation '{details.name}' signed off, "
            f"{compliance.co2_equivalent_tons:.2f} t CO2-eq"
        )
        return record


def _export(checks: StepChecks) -> Dict[str, Any]:
    data = asdict(checks)
    for f in fields(checks):
        if isinstance(data[f.name], date):
            data[f.name] = data[f.name].isoformat()
    return data


def checklist_template() -> List[Dict[str, Any]]:
    """Step titles and check labels in wizard order."""
    template = []
    for step in STEP_ORDER:
        check_type = STEP_CHECK_TYPES[step]
        if check_type is ToolRegistration:
            items = {f"{tool}_serial": f"Serienummer {tool.replace('_', ' ')}" for tool in TOOLS}
        else:
            items = check_type.check_labels()
        template.append({
            "step": step.value,
            "number": step.number,
            "title": step.title,
            "checks": items,
            "rule": "at least one serial" if step is CommissioningStep.TOOLING else "all checks",
        })
    return template
