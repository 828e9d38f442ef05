"""
Installation price for a single catalogue product.

This is the back-office price calculation used when preparing an offer for a
known product (rather than from customer room input). Labour, travel,
piping and consumables are itemised separately:

    hours      = max(expected_hours + tier extra_hours, min_hours)
    labour     = hours * hourly_rate + travel_cost
    materials  = pipe overage + cable duct + electrical group + condensate pump
                 + small_materials + vacuum_nitrogen + tier extra_materials
    subtotal   = selling_price * quantity + labour + materials

The capacity and pipe tiers are keyed on the product's rated cooling
capacity. Without a pipe tier the lines default to 1/4" liquid and 3/8"
suction at the configured ``pipe_per_meter``.
"""

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Mapping, Optional
import logging

from .quote import ProductPrice
from .settings import ConfigurationSnapshot
from .tiers import resolve_capacity_tier, resolve_pipe_tier
from ..utils.validation import non_negative, to_bool, to_float

logger = logging.getLogger(__name__)


DEFAULT_EXPECTED_HOURS = 4.0
DEFAULT_COOLING_CAPACITY_KW = 2.5
DEFAULT_LIQUID_LINE = '1/4"'
DEFAULT_SUCTION_LINE = '3/8"'


@dataclass(frozen=True)
class InstallationProduct:
    """Product fields needed for an installation price."""

    price: ProductPrice = field(default_factory=ProductPrice)
    expected_hours: Optional[float] = None
    cooling_capacity_kw: Optional[float] = None

    @property
    def hours(self) -> float:
        hours = to_float(self.expected_hours, default=0.0)
        return hours if hours > 0 else DEFAULT_EXPECTED_HOURS

    @property
    def capacity_kw(self) -> float:
        capacity = to_float(self.cooling_capacity_kw, default=0.0)
        return capacity if capacity > 0 else DEFAULT_COOLING_CAPACITY_KW


@dataclass(frozen=True)
class InstallationRequest:
    """Options for the installation."""

    pipe_length_m: float = 3.0
    electrical_group: bool = False
    cable_duct_m: float = 0.0
    condensate_pump: bool = False
    quantity: int = 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InstallationRequest":
        return cls(
            pipe_length_m=data.get("pipe_length_m", data.get("pipeLength", 3.0)),
            electrical_group=to_bool(data.get("electrical_group", data.get("needsElectricalGroup", False))),
            cable_duct_m=data.get("cable_duct_m", data.get("needsCableDuct", 0.0)),
            condensate_pump=to_bool(data.get("condensate_pump", data.get("needsCondensatePump", False))),
            quantity=data.get("quantity", 1),
        )


@dataclass(frozen=True)
class InstallationPriceBreakdown:
    """Product, labour and materials totals for one installation."""

    product_price: float
    quantity: int
    product_total: float

    hours: float
    hourly_rate: float
    travel_cost: float
    labor_total: float

    pipe_cost: float
    pipe_price_per_meter: float
    liquid_line: str
    suction_line: str
    duct_cost: float
    electrical_cost: float
    pump_cost: float
    consumables_cost: float
    materials_total: float

    subtotal_excl_vat: float
    vat_rate: float
    vat_amount: float
    total_incl_vat: float

    def to_dict(self) -> Dict[str, Any]:
        """Nested export matching the offer layout."""
        flat = asdict(self)
        return {
            "product": {
                "price": flat["product_price"],
                "quantity": flat["quantity"],
                "total": flat["product_total"],
            },
            "labor": {
                "hours": flat["hours"],
                "rate": flat["hourly_rate"],
                "travel": flat["travel_cost"],
                "total": flat["labor_total"],
            },
            "materials": {
                "pipes": flat["pipe_cost"],
                "pipe_per_meter": flat["pipe_price_per_meter"],
                "pipe_diameter": {"liquid": flat["liquid_line"], "suction": flat["suction_line"]},
                "duct": flat["duct_cost"],
                "electrical": flat["electrical_cost"],
                "pump": flat["pump_cost"],
                "small": flat["consumables_cost"],
                "total": flat["materials_total"],
            },
            "totals": {
                "subtotal_excl": flat["subtotal_excl_vat"],
                "vat_rate": flat["vat_rate"],
                "vat_amount": flat["vat_amount"],
                "total_incl": flat["total_incl_vat"],
            },
        }


def calculate_installation_price(
    product: InstallationProduct,
    request: Optional[InstallationRequest],
    config: ConfigurationSnapshot,
) -> InstallationPriceBreakdown:
    """
    Price the installation of a catalogue product.

    Args:
        product: Product price, expected hours and cooling capacity
        request: Pipe length, extras and quantity
        config: Configuration snapshot for this call

    Returns:
        InstallationPriceBreakdown with product, labour and materials totals
    """
    request = request or InstallationRequest()
    capacity = product.capacity_kw

    capacity_tier = resolve_capacity_tier(capacity, config.capacity_pricing)
    pipe_tier = resolve_pipe_tier(capacity, config.pipe_pricing)

    # Labour
    extra_hours = capacity_tier.extra_hours if capacity_tier is not None else 0.0
    hours = product.hours + non_negative(extra_hours)
    min_hours = non_negative(config.get("min_hours"))
    if min_hours > 0 and hours < min_hours:
        logger.debug(f"Raising {hours:.1f} h to the {min_hours:.1f} h minimum")
        hours = min_hours
    hourly_rate = non_negative(config.get("hourly_rate"))
    travel_cost = non_negative(config.get("travel_cost"))
    labor_total = hours * hourly_rate + travel_cost

    # Materials
    if pipe_tier is not None and pipe_tier.price_per_meter > 0:
        pipe_per_meter = pipe_tier.price_per_meter
    else:
        pipe_per_meter = non_negative(config.get("pipe_per_meter"))
    extra_pipe = max(0.0, non_negative(request.pipe_length_m) - non_negative(config.get("pipe_included_meters")))
    pipe_cost = extra_pipe * pipe_per_meter
    duct_cost = non_negative(request.cable_duct_m) * non_negative(config.get("cable_duct_per_meter"))
    electrical_cost = non_negative(config.get("electrical_group")) if to_bool(request.electrical_group) else 0.0
    pump_cost = non_negative(config.get("condensate_pump")) if to_bool(request.condensate_pump) else 0.0
    consumables = (
        non_negative(config.get("small_materials"))
        + non_negative(config.get("vacuum_nitrogen"))
        + (non_negative(capacity_tier.extra_materials) if capacity_tier is not None else 0.0)
    )
    materials_total = pipe_cost + duct_cost + electrical_cost + pump_cost + consumables

    # Product
    quantity = max(1, int(non_negative(request.quantity, default=1)))
    unit_price = non_negative(product.price.selling_price(config))
    product_total = unit_price * quantity

    subtotal = product_total + labor_total + materials_total
    vat_rate = non_negative(config.get("vat_rate"))
    vat_amount = subtotal * vat_rate / 100

    return InstallationPriceBreakdown(
        product_price=round(unit_price, 2),
        quantity=quantity,
        product_total=round(product_total, 2),
        hours=hours,
        hourly_rate=hourly_rate,
        travel_cost=travel_cost,
        labor_total=round(labor_total, 2),
        pipe_cost=round(pipe_cost, 2),
        pipe_price_per_meter=pipe_per_meter,
        liquid_line=pipe_tier.liquid_line if pipe_tier is not None else DEFAULT_LIQUID_LINE,
        suction_line=pipe_tier.suction_line if pipe_tier is not None else DEFAULT_SUCTION_LINE,
        duct_cost=round(duct_cost, 2),
        electrical_cost=round(electrical_cost, 2),
        pump_cost=round(pump_cost, 2),
        consumables_cost=round(consumables, 2),
        materials_total=round(materials_total, 2),
        subtotal_excl_vat=round(subtotal, 2),
        vat_rate=vat_rate,
        vat_amount=round(vat_amount, 2),
        total_incl_vat=round(subtotal + vat_amount, 2),
    )
