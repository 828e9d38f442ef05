"""
Room aggregation - required cooling/heating capacity from room dimensions.

    required_watts = size_m2 * ceiling_height_m * insulation_factor * room_type_factor

summed over rooms and divided by 1000 for kW. Insulation factors are W/m³.
Rows that cannot contribute (zero, negative or unparseable dimensions) add
nothing rather than failing the calculation; hosts that want stricter
validation reject such rows before calling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Union
import logging

from ..utils.validation import non_negative, to_float

logger = logging.getLogger(__name__)


DEFAULT_CEILING_HEIGHT_M = 2.5


class InsulationClass(Enum):
    """Building insulation quality, valued in W per m³ of room volume."""
    GOOD = 30
    AVERAGE = 40
    POOR = 50


class RoomType(Enum):
    """Room usage types offered by the airco calculator."""
    LIVING = "living"       # Woonkamer
    BEDROOM = "bedroom"     # Slaapkamer
    OFFICE = "office"       # Kantoor
    ATTIC = "attic"         # Zolder


ROOM_TYPE_FACTORS: Dict[str, float] = {
    RoomType.LIVING.value: 1.0,
    RoomType.BEDROOM.value: 0.9,
    RoomType.OFFICE.value: 1.1,
    RoomType.ATTIC.value: 1.3,
}


@dataclass(frozen=True)
class Room:
    """A room as entered by the customer. Never mutated by the engine."""

    name: str = ""
    size_m2: float = 0.0
    ceiling_height_m: Optional[float] = DEFAULT_CEILING_HEIGHT_M
    room_type: Union[RoomType, str] = RoomType.LIVING

    @property
    def room_type_key(self) -> str:
        if isinstance(self.room_type, RoomType):
            return self.room_type.value
        return str(self.room_type or "").strip().lower()

    @classmethod
    def from_dict(cls, data: Mapping) -> "Room":
        return cls(
            name=str(data.get("name") or ""),
            size_m2=data.get("size_m2", 0.0),
            ceiling_height_m=data.get("ceiling_height_m", DEFAULT_CEILING_HEIGHT_M),
            room_type=data.get("room_type") or RoomType.LIVING,
        )


@dataclass(frozen=True)
class RoomAggregate:
    """Totals used downstream by the quote calculator."""

    required_watts: float
    required_kw: float
    total_area_m2: float
    room_count: int


def insulation_factor_of(insulation: Union[InsulationClass, float, int, str, None]) -> float:
    """Resolve an insulation class or raw W/m³ value to a factor."""
    if isinstance(insulation, InsulationClass):
        return float(insulation.value)
    if isinstance(insulation, str):
        try:
            return float(InsulationClass[insulation.strip().upper()].value)
        except KeyError:
            pass
    factor = non_negative(insulation, default=float(InsulationClass.AVERAGE.value))
    return factor


def room_watts(
    room: Room,
    insulation_factor: float,
    room_type_factors: Mapping[str, float] = ROOM_TYPE_FACTORS,
) -> float:
    """Required watts for a single room; 0 for rows that cannot contribute."""
    size = non_negative(room.size_m2)
    # Missing or unparseable heights fall back to the standard ceiling
    height = to_float(room.ceiling_height_m, default=DEFAULT_CEILING_HEIGHT_M)
    type_factor = non_negative(room_type_factors.get(room.room_type_key, 1.0), default=1.0)

    if size <= 0 or height <= 0:
        return 0.0
    return size * height * max(0.0, insulation_factor) * type_factor


def aggregate_rooms(
    rooms: Sequence[Room],
    insulation: Union[InsulationClass, float, int, str, None] = InsulationClass.AVERAGE,
    room_type_factors: Optional[Mapping[str, float]] = None,
) -> RoomAggregate:
    """
    Reduce rooms to one required-capacity figure.

    Args:
        rooms: Room specifications
        insulation: Insulation class or raw factor in W/m³
        room_type_factors: Override for the room-type factor table

    Returns:
        RoomAggregate with required kW, total floor area and the number of
        rooms with a positive floor area
    """
    factors = ROOM_TYPE_FACTORS if room_type_factors is None else room_type_factors
    insulation_factor = insulation_factor_of(insulation)

    total_watts = 0.0
    total_area = 0.0
    counted = 0
    for room in rooms or ():
        size = non_negative(room.size_m2)
        if size <= 0:
            logger.debug(f"Room '{room.name}' has no usable floor area, skipped")
            continue
        total_area += size
        counted += 1
        total_watts += room_watts(room, insulation_factor, factors)

    return RoomAggregate(
        required_watts=total_watts,
        required_kw=total_watts / 1000,
        total_area_m2=total_area,
        room_count=counted,
    )
