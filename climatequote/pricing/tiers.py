"""
Capacity-tiered pricing tables.

Two tables are keyed by required cooling/heating capacity (kW):

- CapacityPricingRow: extra labour hours and materials for bigger units
- PipeDiameterPricingRow: liquid/suction line sizes and the price per metre

Rows are banded ``[min_capacity, max_capacity]`` (both ends inclusive, as the
pricing backend queries them). The table owner keeps rows ordered and
non-overlapping; gaps are allowed. The resolver never sorts and never raises:
a capacity outside every band simply has no tier.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar, Union
import logging
import math

from ..utils.validation import to_float, non_negative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapacityPricingRow:
    """Extra labour and materials for a capacity band."""

    min_capacity: float
    max_capacity: float
    extra_hours: float = 0.0
    extra_materials: float = 0.0
    notes: str = ""

    def contains(self, capacity_kw: float) -> bool:
        return self.min_capacity <= capacity_kw <= self.max_capacity

    @classmethod
    def from_dict(cls, data: dict) -> "CapacityPricingRow":
        return cls(
            min_capacity=to_float(data.get("min_capacity")),
            max_capacity=to_float(data.get("max_capacity")),
            extra_hours=non_negative(data.get("extra_hours")),
            extra_materials=non_negative(data.get("extra_materials")),
            notes=data.get("notes") or "",
        )


@dataclass(frozen=True)
class PipeDiameterPricingRow:
    """Refrigerant line sizes and pipe price for a capacity band."""

    min_capacity: float
    max_capacity: float
    liquid_line: str = '1/4"'
    suction_line: str = '3/8"'
    price_per_meter: float = 0.0
    notes: str = ""

    def contains(self, capacity_kw: float) -> bool:
        return self.min_capacity <= capacity_kw <= self.max_capacity

    @classmethod
    def from_dict(cls, data: dict) -> "PipeDiameterPricingRow":
        return cls(
            min_capacity=to_float(data.get("min_capacity")),
            max_capacity=to_float(data.get("max_capacity")),
            liquid_line=data.get("liquid_line") or '1/4"',
            suction_line=data.get("suction_line") or '3/8"',
            price_per_meter=non_negative(data.get("price_per_meter")),
            notes=data.get("notes") or "",
        )


TierRow = TypeVar("TierRow", CapacityPricingRow, PipeDiameterPricingRow)


def resolve_capacity_tier(
    capacity_kw: Union[float, int, str, None],
    table: Sequence[TierRow],
) -> Optional[TierRow]:
    """
    Find the first row whose band contains the capacity.

    Args:
        capacity_kw: Target capacity in kW
        table: Rows, pre-sorted by the table owner

    Returns:
        The matching row, or None when no band matches (the caller then
        applies zero extra cost)
    """
    capacity = to_float(capacity_kw, default=float("nan"))
    if math.isnan(capacity):
        return None

    for row in table or ():
        if row.contains(capacity):
            return row

    logger.debug(f"No pricing tier for {capacity:.2f} kW in {len(table or ())} rows")
    return None


def resolve_pipe_tier(
    capacity_kw: Union[float, int, str, None],
    table: Sequence[PipeDiameterPricingRow],
) -> Optional[PipeDiameterPricingRow]:
    """Typed alias of ``resolve_capacity_tier`` for pipe-diameter tables."""
    return resolve_capacity_tier(capacity_kw, table)
