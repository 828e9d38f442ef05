"""
Home battery calculator.

A battery raises the share of solar production used directly:

    without battery: 30% direct use
    with battery:    min(0.85, 0.5 + capacity_kwh / 20)

both capped at the household's usage. The rest is fed in at the feed-in rate.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict
import logging

from ..utils.validation import non_negative

logger = logging.getLogger(__name__)


DIRECT_USE_WITHOUT_BATTERY = 0.3
MAX_DIRECT_USE = 0.85
INSTALLATION_COST = 500.0
LIFETIME_YEARS = 15
NO_PAYBACK_YEARS = 99.0


@dataclass(frozen=True)
class BatteryResult:
    direct_use_fraction: float
    savings_without_battery: float
    savings_with_battery: float
    extra_savings: float
    total_cost: float
    payback_years: float
    roi_15_years: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def direct_use_fraction(capacity_kwh: float) -> float:
    capacity = non_negative(capacity_kwh)
    if capacity <= 0:
        return DIRECT_USE_WITHOUT_BATTERY
    return min(MAX_DIRECT_USE, 0.5 + capacity / 20)


def calculate_battery(
    yearly_usage_kwh: float,
    solar_production_kwh: float,
    capacity_kwh: float,
    battery_price: float,
    electricity_price: float = 0.30,
    feed_in_rate: float = 0.07,
) -> BatteryResult:
    """
    Savings from adding a battery to an existing solar installation.

    Returns:
        BatteryResult; ``payback_years`` is 99 when the battery adds nothing
    """
    usage = non_negative(yearly_usage_kwh)
    production = non_negative(solar_production_kwh)
    price = non_negative(electricity_price)
    feed_in = non_negative(feed_in_rate)

    def savings(fraction: float) -> float:
        direct = min(production * fraction, usage)
        return direct * price + (production - direct) * feed_in

    fraction = direct_use_fraction(capacity_kwh)
    without = savings(DIRECT_USE_WITHOUT_BATTERY)
    with_battery = savings(fraction)
    extra = with_battery - without

    total_cost = non_negative(battery_price) + INSTALLATION_COST
    payback = total_cost / extra if extra > 0 else NO_PAYBACK_YEARS

    return BatteryResult(
        direct_use_fraction=fraction,
        savings_without_battery=round(without, 2),
        savings_with_battery=round(with_battery, 2),
        extra_savings=round(extra, 2),
        total_cost=round(total_cost, 2),
        payback_years=payback,
        roi_15_years=round(extra * LIFETIME_YEARS - total_cost, 2),
    )
