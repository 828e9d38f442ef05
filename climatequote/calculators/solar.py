"""
Solar PV calculator.

Sizes a panel array for a household's yearly usage, limited by roof area,
and estimates investment, yearly savings, payback and 25-year profit.

    yield per panel  = watt_peak / 1000 * 900 sun hours * orientation factor
    panel count      = min(ceil(usage / yield per panel), floor(roof / 1.7 m²))
    investment       = panels * (panel price + 80 inverter + 40 installation) + 500
                       + battery price
    direct use       = 30% of production (70% with a battery), capped at usage
    savings          = direct use * electricity price + rest * 0.07 feed-in
    25-year profit   = sum of savings with 0.5%/year degradation - investment
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import logging
import math

from ..utils.validation import non_negative

logger = logging.getLogger(__name__)


SUN_HOURS = 900  # Average for the Netherlands
PANEL_AREA_M2 = 1.7
INVERTER_PER_PANEL = 80.0
INSTALLATION_BASE = 500.0
INSTALLATION_PER_PANEL = 40.0
FEED_IN_RATE = 0.07
DIRECT_USE = 0.3
DIRECT_USE_WITH_BATTERY = 0.7
DEGRADATION_PER_YEAR = 0.005
LIFETIME_YEARS = 25

ORIENTATION_FACTORS: Dict[str, float] = {
    "south": 1.0,        # Zuid
    "south-east": 0.95,  # Zuid-Oost
    "south-west": 0.95,  # Zuid-West
    "east": 0.85,        # Oost
    "west": 0.85,        # West
    "flat": 0.9,         # Plat dak
}


@dataclass(frozen=True)
class SolarResult:
    panel_count: int
    yearly_production_kwh: float
    investment: float
    yearly_savings: float
    payback_years: Optional[float]
    profit_25_years: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def orientation_factor(orientation: str) -> float:
    factor = ORIENTATION_FACTORS.get(str(orientation or "").strip().lower())
    if factor is None:
        logger.warning(f"Unknown roof orientation {orientation!r}, assuming south")
        return 1.0
    return factor


def panel_count(yearly_usage_kwh: float, roof_area_m2: float, watt_peak: float, orientation: str = "south") -> int:
    """Panels needed for the usage, limited by what fits on the roof."""
    per_panel = non_negative(watt_peak) / 1000 * SUN_HOURS * orientation_factor(orientation)
    if per_panel <= 0:
        return 0
    needed = math.ceil(non_negative(yearly_usage_kwh) / per_panel)
    fits = math.floor(non_negative(roof_area_m2) / PANEL_AREA_M2)
    return min(needed, fits)


def calculate_solar(
    yearly_usage_kwh: float,
    roof_area_m2: float,
    price_per_panel: float,
    watt_peak: float = 400,
    orientation: str = "south",
    electricity_price: float = 0.30,
    battery_price: float = 0.0,
    battery_capacity_kwh: float = 0.0,
) -> SolarResult:
    """
    Estimate a solar installation.

    Args:
        yearly_usage_kwh: Household consumption per year
        roof_area_m2: Usable roof area
        price_per_panel: Selling price of one panel
        watt_peak: Panel rating in Wp
        orientation: Roof orientation key from ORIENTATION_FACTORS
        electricity_price: Price per kWh
        battery_price: Price of an optional home battery
        battery_capacity_kwh: Battery capacity; > 0 raises direct use

    Returns:
        SolarResult; ``payback_years`` is None when there are no savings
    """
    panels = panel_count(yearly_usage_kwh, roof_area_m2, watt_peak, orientation)
    production = panels * non_negative(watt_peak) / 1000 * SUN_HOURS * orientation_factor(orientation)

    investment = (
        panels * non_negative(price_per_panel)
        + panels * INVERTER_PER_PANEL
        + INSTALLATION_BASE + panels * INSTALLATION_PER_PANEL
        + non_negative(battery_price)
    )

    has_battery = non_negative(battery_capacity_kwh) > 0
    direct_fraction = DIRECT_USE_WITH_BATTERY if has_battery else DIRECT_USE
    direct_use = min(production * direct_fraction, non_negative(yearly_usage_kwh))
    feed_in = production - direct_use
    savings = direct_use * non_negative(electricity_price) + feed_in * FEED_IN_RATE

    payback = investment / savings if savings > 0 else None
    lifetime_savings = sum(
        savings * (1 - DEGRADATION_PER_YEAR) ** (year - 1)
        for year in range(1, LIFETIME_YEARS + 1)
    )

    return SolarResult(
        panel_count=panels,
        yearly_production_kwh=production,
        investment=round(investment, 2),
        yearly_savings=round(savings, 2),
        payback_years=payback,
        profit_25_years=round(lifetime_savings - investment, 2),
    )
