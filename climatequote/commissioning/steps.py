"""
BRL 100/200 commissioning steps.

Each step of the installation sign-off owns a typed set of required boolean
checks plus free-form notes. The Tooling step is different: it registers the
measuring instruments used (brand, serial number, calibration date) and has
no boolean checks at all.
"""

from dataclasses import dataclass, field, fields
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple, Type

from ..compliance.fgas import add_months


class CommissioningStep(Enum):
    """Commissioning steps in wizard order."""
    PREPARATION = "preparation"                     # Voorbereiding
    TOOLING = "tooling"                             # Gereedschap
    MATERIALS = "materials"                         # Materiaal
    OUTDOOR_UNIT = "outdoor_unit"                   # Buitenunit
    INDOOR_UNIT = "indoor_unit"                     # Binnenunit
    PIPING = "piping"                               # Leidingwerk
    EVACUATION_CHARGING = "evacuation_charging"     # Vacuüm & Vullen
    HANDOVER = "handover"                           # Oplevering

    @property
    def title(self) -> str:
        return STEP_TITLES[self]

    @property
    def number(self) -> int:
        """1-based position in the wizard."""
        return STEP_ORDER.index(self) + 1


STEP_ORDER: Tuple[CommissioningStep, ...] = tuple(CommissioningStep)

STEP_TITLES: Dict[CommissioningStep, str] = {
    CommissioningStep.PREPARATION: "Voorbereiding",
    CommissioningStep.TOOLING: "Gereedschap",
    CommissioningStep.MATERIALS: "Materiaal",
    CommissioningStep.OUTDOOR_UNIT: "Buitenunit",
    CommissioningStep.INDOOR_UNIT: "Binnenunit",
    CommissioningStep.PIPING: "Leidingwerk",
    CommissioningStep.EVACUATION_CHARGING: "Vacuüm & Vullen",
    CommissioningStep.HANDOVER: "Oplevering",
}


def check(label: str):
    """A required boolean check, unset until ticked."""
    return field(default=False, metadata={"required": True, "label": label})


@dataclass
class StepChecks:
    """Base for a step's checks."""

    notes: str = ""

    @classmethod
    def check_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.metadata.get("required"))

    @classmethod
    def check_labels(cls) -> Dict[str, str]:
        return {f.name: f.metadata["label"] for f in fields(cls) if f.metadata.get("required")}

    def completed_checks(self) -> Tuple[str, ...]:
        return tuple(name for name in self.check_names() if getattr(self, name) is True)

    def open_checks(self) -> Tuple[str, ...]:
        return tuple(name for name in self.check_names() if getattr(self, name) is not True)


@dataclass
class PreparationChecks(StepChecks):
    customer_informed: bool = check("Klant geïnformeerd over werkzaamheden")
    location_inspected: bool = check("Locatie geïnspecteerd")
    electrical_capacity_checked: bool = check("Elektrische capaciteit gecontroleerd")
    condensate_drain_planned: bool = check("Condensafvoer gepland")


@dataclass
class MaterialsChecks(StepChecks):
    equipment_checked: bool = check("Apparatuur gecontroleerd op schade")
    refrigerant_verified: bool = check("Koudemiddel type en hoeveelheid geverifieerd")
    tools_calibrated: bool = check("Gereedschap gekalibreerd")
    safety_equipment_present: bool = check("Veiligheidsmiddelen aanwezig")


@dataclass
class OutdoorUnitChecks(StepChecks):
    outdoor_location_suitable: bool = check("Locatie geschikt")
    outdoor_mounted_level: bool = check("Waterpas gemonteerd")
    outdoor_clearance_ok: bool = check("Vrije ruimte voldoende")
    outdoor_vibration_dampened: bool = check("Trillingsdempers geplaatst")


@dataclass
class IndoorUnitChecks(StepChecks):
    indoor_location_suitable: bool = check("Locatie geschikt")
    indoor_mounted_level: bool = check("Waterpas gemonteerd")
    indoor_airflow_ok: bool = check("Luchtstroming vrij")
    condensate_connected: bool = check("Condensafvoer aangesloten")


@dataclass
class PipingChecks(StepChecks):
    pipes_insulated: bool = check("Leidingen geïsoleerd")
    pipes_protected: bool = check("Leidingen beschermd")
    pipes_leak_tested: bool = check("Lektest uitgevoerd")
    electrical_connected: bool = check("Elektrisch aangesloten")


@dataclass
class EvacuationChargingChecks(StepChecks):
    vacuum_achieved: bool = check("Vacuüm bereikt")
    vacuum_held: bool = check("Vacuüm gehouden")
    refrigerant_charged: bool = check("Koudemiddel bijgevuld")
    charge_recorded: bool = check("Vulling geregistreerd")


@dataclass
class HandoverChecks(StepChecks):
    cooling_tested: bool = check("Koelen getest")
    heating_tested: bool = check("Verwarmen getest")
    controls_explained: bool = check("Bediening uitgelegd")
    documentation_handed: bool = check("Documentatie overhandigd")


# =============================================================================
# TOOLING
# =============================================================================

TOOLS: Tuple[str, ...] = (
    "manometer",
    "vacuum_pump",
    "leak_detector",
    "refrigerant_scale",
    "recovery_unit",
)

# Instruments that carry a calibration date
CALIBRATED_TOOLS: Tuple[str, ...] = ("manometer", "leak_detector", "refrigerant_scale")

# A calibration stays valid this long after the calibration date
CALIBRATION_VALIDITY_MONTHS = 12

SERIAL_FIELDS: Tuple[str, ...] = tuple(f"{tool}_serial" for tool in TOOLS)


@dataclass
class ToolRegistration(StepChecks):
    """Instruments used on this installation. Has no boolean checks."""

    manometer_brand: str = ""
    manometer_serial: str = ""
    manometer_calibration_date: Optional[date] = None
    vacuum_pump_brand: str = ""
    vacuum_pump_serial: str = ""
    leak_detector_brand: str = ""
    leak_detector_serial: str = ""
    leak_detector_calibration_date: Optional[date] = None
    refrigerant_scale_brand: str = ""
    refrigerant_scale_serial: str = ""
    refrigerant_scale_calibration_date: Optional[date] = None
    recovery_unit_brand: str = ""
    recovery_unit_serial: str = ""

    def registered_serials(self) -> Dict[str, str]:
        """Tools with a non-blank serial number."""
        registered = {}
        for tool in TOOLS:
            serial = getattr(self, f"{tool}_serial") or ""
            if serial.strip():
                registered[tool] = serial.strip()
        return registered

    def calibration_valid_until(self, tool: str) -> Optional[date]:
        """Expiry of a calibrated tool, or None when no date is registered."""
        if tool not in CALIBRATED_TOOLS:
            raise KeyError(f"Tool '{tool}' has no calibration date")
        calibrated = getattr(self, f"{tool}_calibration_date")
        if calibrated is None:
            return None
        return add_months(calibrated, CALIBRATION_VALIDITY_MONTHS)


def expiring_calibrations(
    registration: ToolRegistration,
    today: date,
    days_ahead: int = 30,
) -> Dict[str, date]:
    """
    Calibrated tools whose calibration expires within ``days_ahead`` days.

    Already expired calibrations are included. Tools without a calibration
    date are skipped.

    Returns:
        Tool name to expiry date, soonest first
    """
    horizon = today + timedelta(days=max(0, int(days_ahead)))
    expiring = {}
    for tool in CALIBRATED_TOOLS:
        valid_until = registration.calibration_valid_until(tool)
        if valid_until is not None and valid_until <= horizon:
            expiring[tool] = valid_until
    return dict(sorted(expiring.items(), key=lambda item: item[1]))


STEP_CHECK_TYPES: Dict[CommissioningStep, Type[StepChecks]] = {
    CommissioningStep.PREPARATION: PreparationChecks,
    CommissioningStep.TOOLING: ToolRegistration,
    CommissioningStep.MATERIALS: MaterialsChecks,
    CommissioningStep.OUTDOOR_UNIT: OutdoorUnitChecks,
    CommissioningStep.INDOOR_UNIT: IndoorUnitChecks,
    CommissioningStep.PIPING: PipingChecks,
    CommissioningStep.EVACUATION_CHARGING: EvacuationChargingChecks,
    CommissioningStep.HANDOVER: HandoverChecks,
}
