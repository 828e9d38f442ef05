"""
EV charging station calculator.

    yearly kWh   = km / 100 * consumption (default 18 kWh/100 km)
    yearly cost  = kWh * electricity price, 30% less with solar panels
    fuel savings = km / 100 * 7 l * 1.95 per litre - yearly cost
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import logging

from ..utils.validation import non_negative

logger = logging.getLogger(__name__)


DEFAULT_CONSUMPTION_KWH_PER_100KM = 18.0
DEFAULT_ELECTRICITY_PRICE = 0.25
SOLAR_DISCOUNT = 0.7  # pay 70% with solar panels
FUEL_PRICE_PER_LITRE = 1.95
FUEL_LITRES_PER_100KM = 7.0

INSTALLATION_TYPES: Dict[str, float] = {
    "standard": 350.0,  # Meterkast binnen 10m, geen graafwerk
    "extended": 550.0,  # Meterkast 10-20m, kleine aanpassingen
    "complex": 850.0,   # Graafwerk, lange afstand, verzwaring
}


@dataclass(frozen=True)
class ChargingResult:
    yearly_kwh: float
    yearly_cost: float
    fuel_cost: float
    fuel_savings: float
    installation_cost: float
    total_price: float
    payback_years: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_charging(
    yearly_km: float,
    station_price: float,
    installation_type: str = "standard",
    consumption_kwh_per_100km: float = DEFAULT_CONSUMPTION_KWH_PER_100KM,
    electricity_price: float = DEFAULT_ELECTRICITY_PRICE,
    has_solar_panels: bool = False,
) -> ChargingResult:
    """
    Running costs and price of a home charging station.

    A zero or missing consumption or electricity price falls back to the
    defaults. An unknown installation type is priced at 0.

    Returns:
        ChargingResult; ``payback_years`` is None without fuel savings
    """
    km = non_negative(yearly_km)
    consumption = non_negative(consumption_kwh_per_100km) or DEFAULT_CONSUMPTION_KWH_PER_100KM
    price = non_negative(electricity_price) or DEFAULT_ELECTRICITY_PRICE

    yearly_kwh = km / 100 * consumption
    yearly_cost = yearly_kwh * price * (SOLAR_DISCOUNT if has_solar_panels else 1.0)
    fuel_cost = km / 100 * FUEL_LITRES_PER_100KM * FUEL_PRICE_PER_LITRE
    fuel_savings = fuel_cost - yearly_cost

    installation = INSTALLATION_TYPES.get(installation_type)
    if installation is None:
        logger.warning(f"Unknown installation type {installation_type!r}, priced at 0")
        installation = 0.0
    total = non_negative(station_price) + installation

    return ChargingResult(
        yearly_kwh=yearly_kwh,
        yearly_cost=round(yearly_cost, 2),
        fuel_cost=round(fuel_cost, 2),
        fuel_savings=round(fuel_savings, 2),
        installation_cost=installation,
        total_price=round(total, 2),
        payback_years=total / fuel_savings if fuel_savings > 0 else None,
    )
