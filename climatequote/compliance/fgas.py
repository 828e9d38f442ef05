"""
F-gas logbook - refrigerant handling records per installation.

Every handling of refrigerant (installation, top-up, recovery, leak check,
repair, maintenance, decommissioning) is logged with the quantity handled.
The current charge is replayed from the log and the next mandatory leak
check follows from the last logged check plus the statutory interval.
"""

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from .refrigerant import (
    ComplianceResult,
    co2_equivalent_tons,
    leak_check_interval_months,
    lookup_gwp,
)
from ..utils.validation import non_negative, to_bool, to_float

logger = logging.getLogger(__name__)


class FGasActivityType(Enum):
    """Kind of refrigerant handling."""
    INSTALLATION = "installation"           # Installatie
    TOP_UP = "top_up"                       # Bijvullen
    RECOVERY = "recovery"                   # Terugwinnen
    LEAK_CHECK = "leak_check"               # Lekcontrole
    REPAIR = "repair"                       # Reparatie
    MAINTENANCE = "maintenance"             # Onderhoud
    DECOMMISSIONING = "decommissioning"     # Verwijdering

    @property
    def adds_refrigerant(self) -> bool:
        return self in (FGasActivityType.INSTALLATION, FGasActivityType.TOP_UP)

    @property
    def removes_refrigerant(self) -> bool:
        return self in (FGasActivityType.RECOVERY, FGasActivityType.DECOMMISSIONING)

    @classmethod
    def parse(cls, value: Any) -> "FGasActivityType":
        """
        Accept an enum member, its value or the Dutch logbook code.

        Raises:
            ValueError: For an unknown activity
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key in DUTCH_ACTIVITY_CODES:
            return DUTCH_ACTIVITY_CODES[key]
        return cls(key)


# Activity codes as stored by the installations backend
DUTCH_ACTIVITY_CODES: Dict[str, FGasActivityType] = {
    "installatie": FGasActivityType.INSTALLATION,
    "bijvullen": FGasActivityType.TOP_UP,
    "terugwinnen": FGasActivityType.RECOVERY,
    "lekcontrole": FGasActivityType.LEAK_CHECK,
    "reparatie": FGasActivityType.REPAIR,
    "onderhoud": FGasActivityType.MAINTENANCE,
    "verwijdering": FGasActivityType.DECOMMISSIONING,
}


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's end."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    return date(year, month, day)


@dataclass(frozen=True)
class FGasLogEntry:
    """One logbook line."""

    activity_type: FGasActivityType
    activity_date: date
    refrigerant_type: Optional[str] = None
    quantity_kg: float = 0.0
    gwp: Optional[float] = None
    is_addition: Optional[bool] = None
    new_total_charge_kg: Optional[float] = None
    leak_found: bool = False
    technician_id: Optional[str] = None
    notes: str = ""

    @property
    def effective_gwp(self) -> float:
        if self.gwp is None:
            return lookup_gwp(self.refrigerant_type)
        return non_negative(self.gwp)

    @property
    def adds_refrigerant(self) -> bool:
        if self.is_addition is not None:
            return self.is_addition and self.quantity_kg > 0
        return self.activity_type.adds_refrigerant

    @property
    def removes_refrigerant(self) -> bool:
        if self.is_addition is not None:
            return not self.is_addition and self.quantity_kg > 0
        return self.activity_type.removes_refrigerant

    @property
    def co2_equivalent_tons(self) -> float:
        """CO₂-equivalent of the quantity handled in this entry."""
        return co2_equivalent_tons(self.quantity_kg, self.effective_gwp)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FGasLogEntry":
        """
        Build an entry from a logbook row.

        Accepts the backend row shape as well: Dutch activity codes,
        ``performed_at`` timestamps, ``refrigerant_gwp`` and ``leak_detected``.
        """
        activity = FGasActivityType.parse(data.get("activity_type"))
        activity_date = data.get("activity_date") or data.get("performed_at")
        if isinstance(activity_date, datetime):
            activity_date = activity_date.date()
        elif isinstance(activity_date, str):
            # "2024-05-01" or a full "2024-05-01T09:30:00.000Z" timestamp
            activity_date = date.fromisoformat(activity_date.strip()[:10])
        total = data.get("new_total_charge_kg")
        gwp = data.get("gwp", data.get("refrigerant_gwp"))
        leak = data.get("leak_found")
        if leak is None:
            leak = data.get("leak_detected")
        return cls(
            activity_type=activity,
            activity_date=activity_date,
            refrigerant_type=data.get("refrigerant_type"),
            quantity_kg=to_float(data.get("quantity_kg")),
            gwp=None if gwp is None else to_float(gwp),
            is_addition=None if data.get("is_addition") is None else to_bool(data["is_addition"]),
            new_total_charge_kg=None if total is None else to_float(total),
            leak_found=to_bool(leak),
            technician_id=None if data.get("technician_id") is None else str(data["technician_id"]),
            notes=str(data.get("notes") or ""),
        )


def _chronological(entries: Iterable[FGasLogEntry]) -> List[FGasLogEntry]:
    # sorted() is stable, so same-day entries keep their logged order
    return sorted(entries, key=lambda e: e.activity_date)


def current_charge(initial_kg: float, entries: Iterable[FGasLogEntry]) -> float:
    """
    Replay the logbook onto an initial charge.

    Additions (installation, top-up) add their quantity, recoveries and
    decommissioning subtract it, unless ``is_addition`` says otherwise. An
    entry with ``new_total_charge_kg`` states the measured charge outright and
    overrides the running total.
    """
    charge = non_negative(initial_kg)
    for entry in _chronological(entries):
        if entry.new_total_charge_kg is not None:
            charge = non_negative(entry.new_total_charge_kg)
        elif entry.adds_refrigerant:
            charge += non_negative(entry.quantity_kg)
        elif entry.removes_refrigerant:
            charge = max(0.0, charge - non_negative(entry.quantity_kg))
    return charge


def last_leak_check(entries: Iterable[FGasLogEntry]) -> Optional[date]:
    checks = [e.activity_date for e in entries if e.activity_type == FGasActivityType.LEAK_CHECK]
    return max(checks) if checks else None


def next_leak_check_date(
    entries: Sequence[FGasLogEntry],
    co2_tons: float,
    leak_detection_system: bool = False,
    hermetically_sealed: bool = False,
    start: Optional[date] = None,
) -> Optional[date]:
    """
    Date of the next mandatory leak check.

    Counts from the last logged leak check, else from ``start`` (usually the
    installation date), else from the first installation entry.

    Returns:
        The due date, or None when no periodic check is required or there is
        nothing to count from
    """
    interval = leak_check_interval_months(
        co2_tons,
        leak_detection_system=leak_detection_system,
        hermetically_sealed=hermetically_sealed,
    )
    if interval is None:
        return None

    base = last_leak_check(entries)
    if base is None:
        base = start
    if base is None:
        installs = [e.activity_date for e in entries if e.activity_type == FGasActivityType.INSTALLATION]
        base = min(installs) if installs else None
    if base is None:
        logger.debug("No leak check or installation date logged, next check unknown")
        return None
    return add_months(base, interval)


@dataclass(frozen=True)
class FleetInstallation:
    """One installation as seen by the fleet summary."""

    installation_id: str
    compliance: ComplianceResult
    installation_date: Optional[date] = None
    log: Sequence[FGasLogEntry] = field(default_factory=tuple)
    leak_detection_system: bool = False
    hermetically_sealed: bool = False


@dataclass(frozen=True)
class FleetSummary:
    """F-gas totals over a set of installations."""

    installation_count: int
    total_charge_kg: float
    total_co2_equivalent_tons: float
    leak_check_required_count: int
    due: Dict[str, date]
    overdue: Dict[str, date]

    @property
    def due_count(self) -> int:
        return len(self.due)

    @property
    def overdue_count(self) -> int:
        return len(self.overdue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "installation_count": self.installation_count,
            "total_charge_kg": self.total_charge_kg,
            "total_co2_equivalent_tons": self.total_co2_equivalent_tons,
            "leak_check_required_count": self.leak_check_required_count,
            "due": {k: v.isoformat() for k, v in self.due.items()},
            "overdue": {k: v.isoformat() for k, v in self.overdue.items()},
        }


def summarize_installations(
    installations: Iterable[FleetInstallation],
    today: date,
    horizon_days: int = 30,
) -> FleetSummary:
    """
    Summarise the F-gas obligations of a fleet of installations.

    Args:
        installations: Installations with their compliance figures and logbook
        today: Reference date
        horizon_days: Checks due within this many days count as due

    Returns:
        FleetSummary; ``overdue`` holds checks before ``today``, ``due`` holds
        checks from ``today`` up to the horizon
    """
    count = 0
    total_charge = 0.0
    total_co2 = 0.0
    required = 0
    due: Dict[str, date] = {}
    overdue: Dict[str, date] = {}

    for item in installations:
        count += 1
        total_charge += item.compliance.total_charge_kg
        total_co2 += item.compliance.co2_equivalent_tons
        if not item.compliance.leak_check_required:
            continue
        required += 1

        next_check = next_leak_check_date(
            item.log,
            item.compliance.co2_equivalent_tons,
            leak_detection_system=item.leak_detection_system,
            hermetically_sealed=item.hermetically_sealed,
            start=item.installation_date,
        )
        if next_check is None:
            continue
        days_left = (next_check - today).days
        if days_left < 0:
            overdue[item.installation_id] = next_check
        elif days_left <= horizon_days:
            due[item.installation_id] = next_check

    if overdue:
        logger.warning(f"{len(overdue)} installation(s) overdue for a leak check")

    return FleetSummary(
        installation_count=count,
        total_charge_kg=total_charge,
        total_co2_equivalent_tons=total_co2,
        leak_check_required_count=required,
        due=due,
        overdue=overdue,
    )
