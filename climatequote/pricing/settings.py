"""
Pricing settings and the immutable configuration snapshot.

The admin back office stores installation settings per category
(``airco``, ``warmtepomp``, ...) next to a ``global`` category, plus two
capacity-tiered tables. A host reads all of that once, builds a
``ConfigurationSnapshot`` and passes it into every calculation. The engine
never fetches or mutates settings itself.

Lookup order for a key: category settings, global settings, the caller's
default. Values that are not finite numbers are treated as absent.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
import logging

from .tiers import CapacityPricingRow, PipeDiameterPricingRow
from ..utils.validation import to_float

logger = logging.getLogger(__name__)


# =============================================================================
# SETTING KEYS AND FALLBACKS
# =============================================================================

GLOBAL_CATEGORY = "global"

# Named fallbacks, in EUR unless noted. Used when a snapshot lacks a key.
DEFAULT_SETTINGS: Dict[str, float] = {
    # Labour
    "hourly_rate": 55.0,
    "travel_cost": 35.0,
    "min_hours": 0.0,                 # hours; 0 disables the floor
    # Pipes & ducts
    "pipe_per_meter": 35.0,
    "pipe_included_meters": 3.0,      # metres
    "cable_duct_per_meter": 12.5,
    # Mounting
    "mounting_bracket": 65.0,
    "wall_bracket": 25.0,
    "condensate_pump": 95.0,
    # Electrical
    "electrical_group": 185.0,
    "fuse_upgrade": 125.0,
    # Other
    "small_materials": 45.0,
    "vacuum_nitrogen": 35.0,
    "vat_rate": 21.0,                 # percent
    "margin_percent": 30.0,           # percent
    # Quote calculator
    "base_installation_small": 350.0,
    "base_installation_large": 450.0,
    "multisplit_per_room": 200.0,
    "extra_unit_discount": 0.8,       # factor on base price per extra unit
}

SETTING_KEYS: Tuple[str, ...] = tuple(DEFAULT_SETTINGS)


def _freeze_settings(values: Optional[Mapping[str, Any]]) -> Mapping[str, float]:
    """Keep only finite numeric values, behind a read-only proxy."""
    frozen: Dict[str, float] = {}
    for key, raw in (values or {}).items():
        # Backend responses wrap values as {"value": .., "unit": .., "description": ..}
        if isinstance(raw, Mapping):
            raw = raw.get("value")
        number = to_float(raw, default=float("nan"))
        if number != number:  # NaN
            logger.warning(f"Ignoring non-numeric setting {key}={raw!r}")
            continue
        frozen[str(key)] = number
    return MappingProxyType(frozen)


# =============================================================================
# SNAPSHOT
# =============================================================================

@dataclass(frozen=True)
class ConfigurationSnapshot:
    """
    Immutable bundle of pricing settings and tier tables.

    Build one per calculation (read-then-pass). Instances are safe to share
    between threads because nothing in them can change.
    """

    category: str = "airco"
    settings: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    global_settings: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    capacity_pricing: Tuple[CapacityPricingRow, ...] = ()
    pipe_pricing: Tuple[PipeDiameterPricingRow, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "settings", _freeze_settings(self.settings))
        object.__setattr__(self, "global_settings", _freeze_settings(self.global_settings))
        object.__setattr__(self, "capacity_pricing", tuple(self.capacity_pricing or ()))
        object.__setattr__(self, "pipe_pricing", tuple(self.pipe_pricing or ()))

    def get(self, key: str, default: Optional[float] = None) -> float:
        """
        Read a setting.

        Falls back to the global category, then to ``default``, then to the
        named fallback in DEFAULT_SETTINGS, then to 0.0. Never raises.
        """
        if key in self.settings:
            return self.settings[key]
        if key in self.global_settings:
            return self.global_settings[key]
        if default is not None:
            return float(default)
        return DEFAULT_SETTINGS.get(key, 0.0)

    def has(self, key: str) -> bool:
        return key in self.settings or key in self.global_settings

    def missing_keys(self) -> Tuple[str, ...]:
        """Known setting keys that will resolve to a fallback."""
        return tuple(key for key in SETTING_KEYS if not self.has(key))

    def effective_settings(self) -> Dict[str, float]:
        """All known keys with the values a calculation would see."""
        return {key: self.get(key) for key in SETTING_KEYS}

    def with_settings(self, **overrides: float) -> "ConfigurationSnapshot":
        """Return a new snapshot with category settings overridden."""
        merged = dict(self.settings)
        merged.update(overrides)
        return ConfigurationSnapshot(
            category=self.category,
            settings=merged,
            global_settings=self.global_settings,
            capacity_pricing=self.capacity_pricing,
            pipe_pricing=self.pipe_pricing,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigurationSnapshot":
        """
        Build a snapshot from plain dictionaries.

        Accepted keys: ``category``, ``settings``, ``global`` (or
        ``global_settings``), ``capacity_pricing``, ``pipe_pricing``.
        Use ``climatequote.core.models.SnapshotDocument`` for strict parsing
        of untrusted files.
        """
        return cls(
            category=str(data.get("category") or "airco"),
            settings=data.get("settings") or {},
            global_settings=data.get(GLOBAL_CATEGORY) or data.get("global_settings") or {},
            capacity_pricing=_rows(CapacityPricingRow, data.get("capacity_pricing")),
            pipe_pricing=_rows(PipeDiameterPricingRow, data.get("pipe_pricing")),
        )


def _rows(row_type, raw_rows: Optional[Iterable[Any]]) -> Tuple:
    rows = []
    for raw in raw_rows or ():
        rows.append(raw if isinstance(raw, row_type) else row_type.from_dict(raw))
    return tuple(rows)


def default_snapshot(category: str = "airco") -> ConfigurationSnapshot:
    """Snapshot holding only the named fallbacks and no tier tables."""
    return ConfigurationSnapshot(category=category, settings=dict(DEFAULT_SETTINGS))
