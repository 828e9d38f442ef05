"""
Quote Calculator - room/unit/option inputs to an itemised price.

Combines the room aggregate, the selected product's price, the system type
(single units per room vs. one multi-split system) and a configuration
snapshot into a ``QuoteBreakdown``:

    base_installation   area > 40 m² ? base_installation_large : base_installation_small
    room_surcharge      multisplit, rooms > 1: rooms * multisplit_per_room
    extra_unit_cost     single, rooms > 1: (rooms - 1) * base_price * extra_unit_discount
    pipe_overage_cost   max(0, pipe_length - pipe_included_meters) * price_per_meter
    electrical_cost     separate group ? electrical_group : 0
    capacity extras     tier extra_hours * hourly_rate + tier extra_materials
    optional extras     cable duct, condensate pump, fuse upgrade, brackets

    total_incl_vat = total_excl_vat * (1 + vat_rate / 100)

The calculation is total: absent, negative or NaN numbers count as zero and
every setting has a named fallback, so a half-filled form still gets a price.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
import logging

from .rooms import InsulationClass, Room, RoomAggregate, aggregate_rooms
from .settings import ConfigurationSnapshot
from .tiers import (
    CapacityPricingRow,
    PipeDiameterPricingRow,
    resolve_capacity_tier,
    resolve_pipe_tier,
)
from ..utils.validation import non_negative, to_bool, to_float

logger = logging.getLogger(__name__)


# Floor area above which the large base installation applies
LARGE_INSTALLATION_AREA_M2 = 40.0


class SystemType(Enum):
    """How multiple rooms are served."""
    SINGLE = "single"           # One split unit per room
    MULTISPLIT = "multisplit"   # One outdoor unit, several indoor units

    @classmethod
    def parse(cls, value: Union["SystemType", str, None]) -> "SystemType":
        """Lenient parse; unknown values fall back to SINGLE."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value == key:
                return member
        if value:
            logger.warning(f"Unknown system type {value!r}, using single")
        return cls.SINGLE


def _money(value: float) -> float:
    """Round to cents; an amount that overflowed to inf becomes 0."""
    if not math.isfinite(value):
        logger.warning(f"Amount {value} is not finite, using 0")
        return 0.0
    return round(value, 2)


# =============================================================================
# INPUTS
# =============================================================================

@dataclass(frozen=True)
class QuoteOptions:
    """Installation options chosen in the calculator."""

    system_type: Union[SystemType, str] = SystemType.SINGLE
    separate_group: bool = False
    pipe_length_m: float = 0.0

    # Optional extras (all off by default)
    cable_duct_m: float = 0.0
    condensate_pump: bool = False
    fuse_upgrade: bool = False
    mounting_bracket: bool = False
    wall_bracket: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QuoteOptions":
        """Accepts snake_case keys and the calculator's camelCase keys."""
        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            system_type=pick("system_type", "systemType", default=SystemType.SINGLE),
            separate_group=to_bool(pick("separate_group", "separateGroup", default=False)),
            pipe_length_m=pick("pipe_length_m", "pipeLengthMeters", default=0.0),
            cable_duct_m=pick("cable_duct_m", "cableDuctMeters", default=0.0),
            condensate_pump=to_bool(pick("condensate_pump", "condensatePump", default=False)),
            fuse_upgrade=to_bool(pick("fuse_upgrade", "fuseUpgrade", default=False)),
            mounting_bracket=to_bool(pick("mounting_bracket", "mountingBracket", default=False)),
            wall_bracket=to_bool(pick("wall_bracket", "wallBracket", default=False)),
        )


@dataclass(frozen=True)
class ProductPrice:
    """
    Pricing fields of the selected product.

    When a purchase price is known, the selling price is derived from it with
    the product margin (or the configured ``margin_percent``); otherwise the
    catalogue base price is used as-is.
    """

    base_price: float = 0.0
    purchase_price: Optional[float] = None
    margin_percent: Optional[float] = None

    def selling_price(self, config: Optional[ConfigurationSnapshot] = None) -> float:
        purchase = to_float(self.purchase_price, default=float("nan"))
        if purchase == purchase and purchase > 0:
            default_margin = config.get("margin_percent") if config is not None else 30.0
            margin = to_float(self.margin_percent, default=default_margin)
            return purchase * (1 + margin / 100)
        return non_negative(self.base_price)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductPrice":
        return cls(
            base_price=non_negative(data.get("base_price", data.get("basePrice"))),
            purchase_price=data.get("purchase_price"),
            margin_percent=data.get("margin_percent"),
        )


# =============================================================================
# RESULT
# =============================================================================

@dataclass(frozen=True)
class QuoteBreakdown:
    """Itemised result of one quote calculation. Produced fresh, never mutated."""

    system_type: SystemType
    room_count: int
    total_area_m2: float
    required_kw: float

    base_price: float
    base_installation: float
    room_surcharge: float
    extra_unit_cost: float
    pipe_overage_m: float
    pipe_price_per_meter: float
    pipe_overage_cost: float
    electrical_cost: float
    capacity_extra_hours: float
    capacity_labor_cost: float
    capacity_materials_cost: float
    extras: Dict[str, float] = field(default_factory=dict)

    subtotal: float = 0.0           # total excluding VAT
    vat_rate: float = 0.0
    vat_amount: float = 0.0
    total_incl_vat: float = 0.0

    capacity_tier: Optional[CapacityPricingRow] = None
    pipe_tier: Optional[PipeDiameterPricingRow] = None

    @property
    def total_excl_vat(self) -> float:
        return self.subtotal

    @property
    def extras_total(self) -> float:
        return _money(sum(self.extras.values()))

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        data = asdict(self)
        data["system_type"] = self.system_type.value
        data["total_excl_vat"] = self.subtotal
        data["extras_total"] = self.extras_total
        return data

    def summary(self, currency: str = "€") -> str:
        """Human-readable summary."""
        lines = [
            f"Quote: {self.room_count} room(s), {self.total_area_m2:.1f} m², "
            f"{self.required_kw:.2f} kW ({self.system_type.value})",
            f"  Unit price: {currency}{self.base_price:,.2f}",
            f"  Base installation: {currency}{self.base_installation:,.2f}",
        ]
        if self.room_surcharge > 0:
            lines.append(f"  Multi-split surcharge: {currency}{self.room_surcharge:,.2f}")
        if self.extra_unit_cost > 0:
            lines.append(f"  Additional units: {currency}{self.extra_unit_cost:,.2f}")
        if self.pipe_overage_cost > 0:
            lines.append(
                f"  Extra piping ({self.pipe_overage_m:.1f} m): {currency}{self.pipe_overage_cost:,.2f}"
            )
        if self.electrical_cost > 0:
            lines.append(f"  Electrical group: {currency}{self.electrical_cost:,.2f}")
        if self.capacity_labor_cost > 0 or self.capacity_materials_cost > 0:
            lines.append(
                f"  Capacity extras: {currency}{self.capacity_labor_cost + self.capacity_materials_cost:,.2f}"
            )
        for name, amount in self.extras.items():
            lines.append(f"  {name.replace('_', ' ').capitalize()}: {currency}{amount:,.2f}")
        lines.extend([
            f"  ─────────────────────",
            f"  Total excl. VAT: {currency}{self.subtotal:,.2f}",
            f"  VAT {self.vat_rate:g}%: {currency}{self.vat_amount:,.2f}",
            f"  Total incl. VAT: {currency}{self.total_incl_vat:,.2f}",
        ])
        return "\n".join(lines)


# =============================================================================
# CALCULATOR
# =============================================================================

class QuoteCalculator:
    """
    Quote calculator bound to one configuration snapshot.

    Usage:
        calc = QuoteCalculator(snapshot)
        quote = calc.calculate(
            rooms=[Room("Woonkamer", 35, 2.5, "living")],
            options=QuoteOptions(system_type="single"),
            product=ProductPrice(base_price=1499),
        )
        print(quote.summary())
    """

    def __init__(
        self,
        config: ConfigurationSnapshot,
        insulation: Union[InsulationClass, float, int, str, None] = InsulationClass.AVERAGE,
        room_type_factors: Optional[Mapping[str, float]] = None,
    ):
        self.config = config
        self.insulation = insulation
        self.room_type_factors = room_type_factors

    def calculate(
        self,
        rooms: Sequence[Room],
        options: Optional[QuoteOptions] = None,
        product: Union[ProductPrice, float, int, None] = None,
    ) -> QuoteBreakdown:
        aggregate = aggregate_rooms(rooms, self.insulation, self.room_type_factors)
        return self.calculate_from_aggregate(aggregate, options, product)

    def calculate_from_aggregate(
        self,
        aggregate: RoomAggregate,
        options: Optional[QuoteOptions] = None,
        product: Union[ProductPrice, float, int, None] = None,
    ) -> QuoteBreakdown:
        """Price a quote from an already aggregated room set."""
        config = self.config
        options = options or QuoteOptions()
        system_type = SystemType.parse(options.system_type)

        if isinstance(product, ProductPrice):
            base_price = non_negative(product.selling_price(config))
        else:
            base_price = non_negative(product)

        area = non_negative(aggregate.total_area_m2)
        rooms = max(0, int(aggregate.room_count or 0))
        required_kw = non_negative(aggregate.required_kw)

        # 1. Base installation by floor area
        if area > LARGE_INSTALLATION_AREA_M2:
            base_installation = non_negative(config.get("base_installation_large"))
        else:
            base_installation = non_negative(config.get("base_installation_small"))

        # 2./3. Multiple rooms
        room_surcharge = 0.0
        extra_unit_cost = 0.0
        if rooms > 1 and system_type is SystemType.MULTISPLIT:
            room_surcharge = rooms * non_negative(config.get("multisplit_per_room"))
        elif rooms > 1 and system_type is SystemType.SINGLE:
            discount = non_negative(config.get("extra_unit_discount"))
            if discount > 1:
                logger.warning(f"extra_unit_discount {discount} is above 1 and acts as a markup")
            extra_unit_cost = (rooms - 1) * base_price * discount

        # 4. Pipe overage, priced by the diameter tier for this capacity
        pipe_tier = resolve_pipe_tier(required_kw, config.pipe_pricing)
        if pipe_tier is not None and pipe_tier.price_per_meter > 0:
            price_per_meter = pipe_tier.price_per_meter
        else:
            price_per_meter = non_negative(config.get("pipe_per_meter"))
        included = non_negative(config.get("pipe_included_meters"))
        overage_m = max(0.0, non_negative(options.pipe_length_m) - included)
        pipe_overage_cost = overage_m * price_per_meter

        # 5. Separate electrical group
        electrical_cost = non_negative(config.get("electrical_group")) if to_bool(options.separate_group) else 0.0

        # Capacity tier extras
        capacity_tier = resolve_capacity_tier(required_kw, config.capacity_pricing)
        extra_hours = capacity_tier.extra_hours if capacity_tier is not None else 0.0
        capacity_labor = non_negative(extra_hours) * non_negative(config.get("hourly_rate"))
        capacity_materials = non_negative(capacity_tier.extra_materials) if capacity_tier is not None else 0.0

        extras = self._optional_extras(options)

        # 6. Total excluding VAT
        subtotal = (
            base_price
            + base_installation
            + room_surcharge
            + extra_unit_cost
            + pipe_overage_cost
            + electrical_cost
            + capacity_labor
            + capacity_materials
            + sum(extras.values())
        )

        # 7. VAT
        vat_rate = non_negative(config.get("vat_rate"))
        subtotal = _money(subtotal)
        vat_amount = _money(subtotal * vat_rate / 100)
        total_incl = _money(subtotal + vat_amount)

        quote = QuoteBreakdown(
            system_type=system_type,
            room_count=rooms,
            total_area_m2=area,
            required_kw=required_kw,
            base_price=_money(base_price),
            base_installation=_money(base_installation),
            room_surcharge=_money(room_surcharge),
            extra_unit_cost=_money(extra_unit_cost),
            pipe_overage_m=overage_m,
            pipe_price_per_meter=price_per_meter,
            pipe_overage_cost=_money(pipe_overage_cost),
            electrical_cost=_money(electrical_cost),
            capacity_extra_hours=non_negative(extra_hours),
            capacity_labor_cost=_money(capacity_labor),
            capacity_materials_cost=_money(capacity_materials),
            extras={name: _money(amount) for name, amount in extras.items()},
            subtotal=subtotal,
            vat_rate=vat_rate,
            vat_amount=vat_amount,
            total_incl_vat=total_incl,
            capacity_tier=capacity_tier,
            pipe_tier=pipe_tier,
        )
        logger.debug(
            f"Quote {rooms} room(s) {required_kw:.2f} kW: "
            f"{quote.subtotal:.2f} excl. / {quote.total_incl_vat:.2f} incl. VAT"
        )
        return quote

    def _optional_extras(self, options: QuoteOptions) -> Dict[str, float]:
        config = self.config
        extras: Dict[str, float] = {}
        duct_m = non_negative(options.cable_duct_m)
        if duct_m > 0:
            extras["cable_duct"] = duct_m * non_negative(config.get("cable_duct_per_meter"))
        if to_bool(options.condensate_pump):
            extras["condensate_pump"] = non_negative(config.get("condensate_pump"))
        if to_bool(options.fuse_upgrade):
            extras["fuse_upgrade"] = non_negative(config.get("fuse_upgrade"))
        if to_bool(options.mounting_bracket):
            extras["mounting_bracket"] = non_negative(config.get("mounting_bracket"))
        if to_bool(options.wall_bracket):
            extras["wall_bracket"] = non_negative(config.get("wall_bracket"))
        return extras


def calculate_quote(
    rooms: Sequence[Room],
    options: Optional[QuoteOptions],
    product: Union[ProductPrice, float, int, None],
    config: ConfigurationSnapshot,
    insulation: Union[InsulationClass, float, int, str, None] = InsulationClass.AVERAGE,
    room_type_factors: Optional[Mapping[str, float]] = None,
) -> QuoteBreakdown:
    """
    Price a quote for a set of rooms.

    Args:
        rooms: Rooms to condition
        options: System type, separate group, pipe length and extras
        product: Selected product price (or a bare base price)
        config: Configuration snapshot for this call
        insulation: Insulation class or W/m³ factor
        room_type_factors: Override for the room-type factor table

    Returns:
        QuoteBreakdown with all cost components
    """
    calc = QuoteCalculator(config, insulation=insulation, room_type_factors=room_type_factors)
    return calc.calculate(rooms, options, product)


def recommend_airco_units(products: Iterable[Any], area_m2: float) -> List[Any]:
    """
    Catalogue airco products suited to a floor area.

    A product qualifies when its specs declare ``min_m2 <= area <= max_m2``.
    Products without airco specs are ignored.
    """
    area = non_negative(area_m2)
    suitable = []
    for product in products:
        specs = getattr(product, "specs", None)
        if getattr(specs, "category", None) != "airco":
            continue
        low = to_float(getattr(specs, "min_m2", None), default=float("nan"))
        high = to_float(getattr(specs, "max_m2", None), default=float("nan"))
        if low <= area <= high:
            suitable.append(product)
    return suitable
