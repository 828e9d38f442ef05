"""
Pydantic models for climatequote input documents.

Covers the product catalogue (with per-category specs as a tagged union),
pricing snapshot documents as exported by the back office, and the quote
request files the CLI reads. Parsing here is strict: malformed documents
raise pydantic ``ValidationError``. The engine itself works on the frozen
dataclasses these models convert to.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from ..pricing.installation import InstallationProduct, InstallationRequest
from ..pricing.quote import ProductPrice, QuoteOptions
from ..pricing.rooms import Room, RoomType
from ..pricing.settings import ConfigurationSnapshot
from ..pricing.tiers import CapacityPricingRow, PipeDiameterPricingRow
from ..utils.validation import validate_pricing_table


_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


def _parse_quantity(value: Any) -> Any:
    """Leading number of a spec value such as "2.5 kW" or "21%"; empty text is None."""
    if value is None or isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    match = _NUMBER.search(text)
    if match is None:
        return value  # let pydantic report it
    return float(match.group(0).replace(",", "."))


Quantity = Annotated[Union[float, None], BeforeValidator(_parse_quantity)]


# =============================================================================
# PRODUCT SPECS (tagged by category)
# =============================================================================


class AircoSpecs(BaseModel):
    """Air conditioner. ``capacity`` is the rated cooling capacity in kW."""

    category: Literal["airco"] = "airco"
    capacity: Quantity = None
    min_m2: float = 0
    max_m2: float = 0
    energy_label: str | None = "A++"
    refrigerant: str | None = None


class UnifiRouterSpecs(BaseModel):
    category: Literal["unifi_router"] = "unifi_router"
    ports: Quantity = None
    wan: str | None = None
    throughput: str | None = None


class UnifiSwitchSpecs(BaseModel):
    category: Literal["unifi_switch"] = "unifi_switch"
    ports: Quantity = 8
    poe_ports: Quantity = 0
    poe_budget: Quantity = None  # W


class UnifiAccessPointSpecs(BaseModel):
    category: Literal["unifi_accesspoint"] = "unifi_accesspoint"
    wifi: str | None = "WiFi 6"
    speed: str | None = None
    devices: Quantity = 0


class UnifiCameraSpecs(BaseModel):
    category: Literal["unifi_camera"] = "unifi_camera"
    resolution: str | None = "4MP"
    ip_rating: str | None = None
    night_vision: str | None = None


class BatterySpecs(BaseModel):
    """Home battery. ``capacity`` in kWh."""

    category: Literal["battery"] = "battery"
    capacity: Quantity = 0
    warranty: str | None = "10 jaar"
    cycles: Quantity = 0


class ChargerSpecs(BaseModel):
    """EV charger. ``power`` in kW."""

    category: Literal["charger"] = "charger"
    power: Quantity = 22
    type: Literal["home", "business"] = "home"
    connectivity: str | None = None


class SolarSpecs(BaseModel):
    """Solar panel. ``efficiency`` in percent."""

    category: Literal["solar"] = "solar"
    watt_peak: Quantity = 400
    efficiency: Quantity = 21
    warranty: str | None = "25 jaar"


ProductSpecs = Annotated[
    Union[
        AircoSpecs,
        UnifiRouterSpecs,
        UnifiSwitchSpecs,
        UnifiAccessPointSpecs,
        UnifiCameraSpecs,
        BatterySpecs,
        ChargerSpecs,
        SolarSpecs,
    ],
    Field(discriminator="category"),
]

PRODUCT_CATEGORIES = (
    "airco",
    "unifi_router",
    "unifi_switch",
    "unifi_accesspoint",
    "unifi_camera",
    "battery",
    "charger",
    "solar",
)


class Product(BaseModel):
    """Catalogue product."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    brand: str | None = None
    base_price: float = Field(default=0, ge=0)
    purchase_price: float | None = Field(default=None, ge=0)
    margin_percent: float | None = None
    expected_hours: float | None = Field(default=None, ge=0)
    is_active: bool = True
    specs: ProductSpecs | None = None

    @model_validator(mode="before")
    @classmethod
    def _specs_category(cls, data: Any) -> Any:
        # The catalogue stores category next to the specs, not inside them
        if isinstance(data, dict) and isinstance(data.get("specs"), dict) and data.get("category"):
            if "category" not in data["specs"]:
                data = dict(data)
                data["specs"] = {**data["specs"], "category": data["category"]}
        return data

    @property
    def category(self) -> str | None:
        return self.specs.category if self.specs is not None else None

    @property
    def cooling_capacity_kw(self) -> float | None:
        if isinstance(self.specs, AircoSpecs):
            return self.specs.capacity
        return None

    def to_price(self) -> ProductPrice:
        return ProductPrice(
            base_price=self.base_price,
            purchase_price=self.purchase_price,
            margin_percent=self.margin_percent,
        )

    def to_installation_product(self) -> InstallationProduct:
        return InstallationProduct(
            price=self.to_price(),
            expected_hours=self.expected_hours,
            cooling_capacity_kw=self.cooling_capacity_kw,
        )


# =============================================================================
# PRICING SNAPSHOT DOCUMENTS
# =============================================================================


class SettingValue(BaseModel):
    """Setting as returned by the settings endpoint."""

    value: float
    unit: str | None = None
    description: str | None = None


class CapacityPricingPayload(BaseModel):
    min_capacity: float
    max_capacity: float
    extra_hours: float = Field(default=0, ge=0)
    extra_materials: float = Field(default=0, ge=0)
    notes: str | None = None

    def to_row(self) -> CapacityPricingRow:
        return CapacityPricingRow(
            min_capacity=self.min_capacity,
            max_capacity=self.max_capacity,
            extra_hours=self.extra_hours,
            extra_materials=self.extra_materials,
            notes=self.notes or "",
        )


class PipePricingPayload(BaseModel):
    min_capacity: float
    max_capacity: float
    liquid_line: str = '1/4"'
    suction_line: str = '3/8"'
    price_per_meter: float = Field(default=0, ge=0)
    notes: str | None = None

    def to_row(self) -> PipeDiameterPricingRow:
        return PipeDiameterPricingRow(
            min_capacity=self.min_capacity,
            max_capacity=self.max_capacity,
            liquid_line=self.liquid_line,
            suction_line=self.suction_line,
            price_per_meter=self.price_per_meter,
            notes=self.notes or "",
        )


class SnapshotDocument(BaseModel):
    """
    Pricing snapshot file.

    Settings are plain numbers or ``{value, unit, description}`` objects.
    Tier tables must be ordered and non-overlapping.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    category: str = "airco"
    settings: dict[str, Union[float, SettingValue]] = Field(default_factory=dict)
    global_settings: dict[str, Union[float, SettingValue]] = Field(default_factory=dict, alias="global")
    capacity_pricing: list[CapacityPricingPayload] = Field(default_factory=list)
    pipe_pricing: list[PipePricingPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_tables(self) -> SnapshotDocument:
        validate_pricing_table(self.capacity_pricing, name="capacity_pricing")
        validate_pricing_table(self.pipe_pricing, name="pipe_pricing")
        return self

    def to_snapshot(self) -> ConfigurationSnapshot:
        def plain(values: dict[str, Union[float, SettingValue]]) -> dict[str, float]:
            return {k: v.value if isinstance(v, SettingValue) else v for k, v in values.items()}

        return ConfigurationSnapshot(
            category=self.category,
            settings=plain(self.settings),
            global_settings=plain(self.global_settings),
            capacity_pricing=tuple(row.to_row() for row in self.capacity_pricing),
            pipe_pricing=tuple(row.to_row() for row in self.pipe_pricing),
        )


def load_snapshot(path: Path | str) -> ConfigurationSnapshot:
    """Read and validate a snapshot JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return SnapshotDocument.model_validate(data).to_snapshot()


# =============================================================================
# QUOTE REQUEST DOCUMENTS
# =============================================================================


class RoomInput(BaseModel):
    name: str = ""
    size_m2: float = Field(ge=0)
    ceiling_height_m: float = Field(default=2.5, gt=0)
    room_type: RoomType = RoomType.LIVING

    def to_room(self) -> Room:
        return Room(
            name=self.name,
            size_m2=self.size_m2,
            ceiling_height_m=self.ceiling_height_m,
            room_type=self.room_type,
        )


class QuoteOptionsInput(BaseModel):
    system_type: Literal["single", "multisplit"] = "single"
    separate_group: bool = False
    pipe_length_m: float = Field(default=0, ge=0)
    cable_duct_m: float = Field(default=0, ge=0)
    condensate_pump: bool = False
    fuse_upgrade: bool = False
    mounting_bracket: bool = False
    wall_bracket: bool = False

    def to_options(self) -> QuoteOptions:
        return QuoteOptions.from_dict(self.model_dump())


class QuoteRequest(BaseModel):
    """Quote request file: rooms, options and the selected product."""

    model_config = ConfigDict(extra="forbid")

    quote_id: str | None = None
    insulation: Literal["good", "average", "poor"] | None = None
    rooms: list[RoomInput] = Field(min_length=1)
    options: QuoteOptionsInput = Field(default_factory=QuoteOptionsInput)
    product: Product

    def to_rooms(self) -> list[Room]:
        return [room.to_room() for room in self.rooms]


class InstallationPriceInput(BaseModel):
    """Installation price request file."""

    model_config = ConfigDict(extra="forbid")

    product: Product
    pipe_length_m: float = Field(default=3, ge=0)
    electrical_group: bool = False
    cable_duct_m: float = Field(default=0, ge=0)
    condensate_pump: bool = False
    quantity: int = Field(default=1, ge=1)

    def to_request(self) -> InstallationRequest:
        return InstallationRequest(
            pipe_length_m=self.pipe_length_m,
            electrical_group=self.electrical_group,
            cable_duct_m=self.cable_duct_m,
            condensate_pump=self.condensate_pump,
            quantity=self.quantity,
        )
