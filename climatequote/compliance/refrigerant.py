"""
Refrigerant compliance - EU F-gas regulation 517/2014.

Converts a refrigerant charge into CO₂-equivalent tonnes and flags the
statutory periodic leak-check obligation:

    co2_equivalent_tons = total_charge_kg * gwp / 1000
    leak_check_required = co2_equivalent_tons >= 5.0

The flag is advisory metadata for a quote or installation; nothing is blocked
on it. Downstream scheduling uses ``leak_check_interval_months`` to plan the
next check.

Leak-check intervals (Article 4):
    >=   5 t CO₂-eq  every 12 months
    >=  50 t CO₂-eq  every  6 months
    >= 500 t CO₂-eq  every  3 months
Intervals double when a leak detection system is installed. Hermetically
sealed equipment is exempt below 10 t CO₂-eq.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
import logging

from ..utils.validation import non_negative, to_float

logger = logging.getLogger(__name__)


# GWP (AR4, as used by 517/2014 Annex I) per refrigerant type code
REFRIGERANT_GWP: Dict[str, int] = {
    "R32": 675,
    "R410A": 2088,
    "R290": 3,
    "R134a": 1430,
    "R404A": 3922,
    "R407C": 1774,
    "R22": 1810,
    "R717": 0,      # Ammonia
    "R744": 1,      # CO₂
}

LEAK_CHECK_THRESHOLD_TONS = 5.0
HERMETIC_THRESHOLD_TONS = 10.0

# (threshold in t CO₂-eq, interval in months), highest first
LEAK_CHECK_INTERVALS = [
    (500.0, 3),
    (50.0, 6),
    (5.0, 12),
]


def lookup_gwp(refrigerant_type: Optional[str]) -> float:
    """GWP for a refrigerant code (case-insensitive); 0 when unknown or missing."""
    if not refrigerant_type:
        return 0.0
    key = str(refrigerant_type).strip().upper().replace("-", "")
    for code, gwp in REFRIGERANT_GWP.items():
        if code.upper() == key:
            return float(gwp)
    logger.warning(f"No GWP known for refrigerant {refrigerant_type!r}, assuming 0")
    return 0.0


@dataclass(frozen=True)
class RefrigerantSpec:
    """
    Refrigerant in an installation.

    ``charge_kg`` is the factory (standard) charge; ``additional_charge_kg`` is
    the field top-up for extra piping. When ``gwp`` is None it is looked up
    from REFRIGERANT_GWP by type.
    """

    type: Optional[str] = None
    gwp: Optional[float] = None
    charge_kg: float = 0.0
    additional_charge_kg: float = 0.0

    @property
    def effective_gwp(self) -> float:
        if self.gwp is None:
            return lookup_gwp(self.type)
        return non_negative(self.gwp)

    @property
    def total_charge_kg(self) -> float:
        return non_negative(self.charge_kg) + non_negative(self.additional_charge_kg)

    @classmethod
    def from_type(cls, refrigerant_type: str, charge_kg: float, additional_charge_kg: float = 0.0) -> "RefrigerantSpec":
        return cls(
            type=refrigerant_type,
            gwp=lookup_gwp(refrigerant_type),
            charge_kg=charge_kg,
            additional_charge_kg=additional_charge_kg,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RefrigerantSpec":
        gwp = data.get("gwp", data.get("refrigerant_gwp"))
        return cls(
            type=data.get("type", data.get("refrigerant_type")),
            gwp=None if gwp is None else to_float(gwp),
            charge_kg=to_float(data.get("charge_kg", data.get("refrigerant_charge_kg"))),
            additional_charge_kg=to_float(data.get("additional_charge_kg")),
        )


@dataclass(frozen=True)
class ComplianceResult:
    """F-gas figures for one installation."""

    refrigerant_type: Optional[str]
    gwp: float
    total_charge_kg: float
    co2_equivalent_tons: float
    leak_check_required: bool
    leak_check_interval_months: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "refrigerant_type": self.refrigerant_type,
            "gwp": self.gwp,
            "total_charge_kg": self.total_charge_kg,
            "co2_equivalent_tons": self.co2_equivalent_tons,
            "leak_check_required": self.leak_check_required,
            "leak_check_interval_months": self.leak_check_interval_months,
        }


def co2_equivalent_tons(charge_kg: Any, gwp: Any) -> float:
    """CO₂-equivalent in tonnes; bad or missing numbers count as zero."""
    return non_negative(charge_kg) * non_negative(gwp) / 1000


def leak_check_interval_months(
    co2_tons: float,
    leak_detection_system: bool = False,
    hermetically_sealed: bool = False,
) -> Optional[int]:
    """
    Months between mandatory leak checks, or None when not required.

    Args:
        co2_tons: CO₂-equivalent of the charge in tonnes
        leak_detection_system: Installation has automatic leak detection
        hermetically_sealed: Equipment is hermetically sealed and labelled so
    """
    tons = non_negative(co2_tons)
    if hermetically_sealed and tons < HERMETIC_THRESHOLD_TONS:
        return None
    for threshold, months in LEAK_CHECK_INTERVALS:
        if tons >= threshold:
            return months * 2 if leak_detection_system else months
    return None


def evaluate_refrigerant_compliance(
    spec: Union[RefrigerantSpec, Mapping[str, Any]],
    leak_detection_system: bool = False,
    hermetically_sealed: bool = False,
) -> ComplianceResult:
    """
    Compute CO₂-equivalent and leak-check flags for a refrigerant charge.

    A GWP of 0 or an unknown/missing refrigerant type yields 0 tonnes and no
    obligation; some refrigerants are legitimately zero-GWP.

    Returns:
        ComplianceResult with ``co2_equivalent_tons`` and ``leak_check_required``
    """
    if not isinstance(spec, RefrigerantSpec):
        spec = RefrigerantSpec.from_dict(spec)

    gwp = spec.effective_gwp
    total_charge = spec.total_charge_kg
    tons = co2_equivalent_tons(total_charge, gwp)
    required = tons >= LEAK_CHECK_THRESHOLD_TONS
    interval = leak_check_interval_months(
        tons,
        leak_detection_system=leak_detection_system,
        hermetically_sealed=hermetically_sealed,
    )

    if required:
        logger.info(
            f"{spec.type or 'refrigerant'} {total_charge:.2f} kg = {tons:.2f} t CO2-eq, "
            f"periodic leak check required"
        )

    return ComplianceResult(
        refrigerant_type=spec.type,
        gwp=gwp,
        total_charge_kg=total_charge,
        co2_equivalent_tons=tons,
        leak_check_required=required,
        leak_check_interval_months=interval,
    )
