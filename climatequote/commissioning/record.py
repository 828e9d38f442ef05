"""
Installation details and the audit record produced on sign-off.
"""

from dataclasses import dataclass, asdict, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..compliance.refrigerant import ComplianceResult, RefrigerantSpec
from ..utils.validation import non_negative


class InstallationType(Enum):
    """Kind of installed system."""
    AIRCO = "airco"
    HEAT_PUMP = "warmtepomp"
    REFRIGERATION = "koeling"
    VENTILATION = "ventilatie"
    OTHER = "overig"


# Text fields that must be filled before sign-off
REQUIRED_TEXT_FIELDS: Tuple[str, ...] = (
    "customer_id",
    "installed_by_technician_id",
    "name",
    "brand",
    "model",
)


@dataclass
class InstallationDetails:
    """Top-level installation data collected alongside the checklist."""

    customer_id: Optional[str] = None
    installed_by_technician_id: Optional[str] = None
    name: str = ""
    brand: str = ""
    model: str = ""
    installation_type: InstallationType = InstallationType.AIRCO
    serial_number: str = ""
    location_description: str = ""

    # Refrigerant
    refrigerant_type: str = "R32"
    refrigerant_gwp: Optional[float] = None     # looked up by type when None
    refrigerant_charge_kg: float = 0.0
    additional_charge_kg: float = 0.0
    leak_detection_system: bool = False
    hermetically_sealed: bool = False

    installation_date: Optional[date] = None
    notes: str = ""

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def missing_fields(self) -> Tuple[str, ...]:
        """Fields that block sign-off: blank required text or a zero charge."""
        missing = [
            name for name in REQUIRED_TEXT_FIELDS
            if not str(getattr(self, name) or "").strip()
        ]
        if non_negative(self.refrigerant_charge_kg) <= 0:
            missing.append("refrigerant_charge_kg")
        return tuple(missing)

    def refrigerant_spec(self) -> RefrigerantSpec:
        return RefrigerantSpec(
            type=self.refrigerant_type,
            gwp=self.refrigerant_gwp,
            charge_kg=self.refrigerant_charge_kg,
            additional_charge_kg=self.additional_charge_kg,
        )


@dataclass(frozen=True)
class InstallationRecord:
    """
    Signed-off installation.

    Carries the installation details, the filled checklist per step and the
    F-gas figures at the moment of sign-off.
    """

    details: InstallationDetails
    checklist: Dict[str, Dict[str, Any]]
    compliance: ComplianceResult
    completed_on: date
    next_leak_check_date: Optional[date] = None
    tools: Dict[str, str] = field(default_factory=dict)

    @property
    def co2_equivalent_tons(self) -> float:
        return self.compliance.co2_equivalent_tons

    @property
    def leak_check_required(self) -> bool:
        return self.compliance.leak_check_required

    def to_dict(self) -> Dict[str, Any]:
        details = asdict(self.details)
        details["installation_type"] = self.details.installation_type.value
        if self.details.installation_date is not None:
            details["installation_date"] = self.details.installation_date.isoformat()
        return {
            "details": details,
            "checklist": self.checklist,
            "tools": dict(self.tools),
            "compliance": self.compliance.to_dict(),
            "completed_on": self.completed_on.isoformat(),
            "next_leak_check_date": (
                self.next_leak_check_date.isoformat() if self.next_leak_check_date else None
            ),
        }
