"""
Product calculators for the non-airco catalogue: solar, battery, EV charging
and UniFi networks.
"""

from .solar import SolarResult, ORIENTATION_FACTORS, panel_count, calculate_solar
from .battery import BatteryResult, direct_use_fraction, calculate_battery
from .charging import ChargingResult, INSTALLATION_TYPES, calculate_charging
from .network import (
    NetworkItem,
    NetworkQuote,
    NetworkRecommendation,
    recommend_network,
    network_installation_cost,
    calculate_network_quote,
)

__all__ = [
    'SolarResult', 'ORIENTATION_FACTORS', 'panel_count', 'calculate_solar',
    'BatteryResult', 'direct_use_fraction', 'calculate_battery',
    'ChargingResult', 'INSTALLATION_TYPES', 'calculate_charging',
    'NetworkItem', 'NetworkQuote', 'NetworkRecommendation',
    'recommend_network', 'network_installation_cost', 'calculate_network_quote',
]
