"""
Pricing Module - quote pricing for climate installations.

Features:
- Immutable configuration snapshots with named fallbacks
- Capacity-tiered extras and pipe-diameter pricing
- Required capacity from room dimensions
- Quote breakdowns for single and multi-split systems
- Installation price for catalogue products
"""

from .settings import (
    ConfigurationSnapshot,
    DEFAULT_SETTINGS,
    SETTING_KEYS,
    GLOBAL_CATEGORY,
    default_snapshot,
)
from .tiers import (
    CapacityPricingRow,
    PipeDiameterPricingRow,
    resolve_capacity_tier,
    resolve_pipe_tier,
)
from .rooms import (
    Room,
    RoomType,
    RoomAggregate,
    InsulationClass,
    ROOM_TYPE_FACTORS,
    aggregate_rooms,
)
from .quote import (
    SystemType,
    QuoteOptions,
    ProductPrice,
    QuoteBreakdown,
    QuoteCalculator,
    calculate_quote,
    recommend_airco_units,
)
from .installation import (
    InstallationProduct,
    InstallationRequest,
    InstallationPriceBreakdown,
    calculate_installation_price,
)

__all__ = [
    'ConfigurationSnapshot', 'DEFAULT_SETTINGS', 'SETTING_KEYS', 'GLOBAL_CATEGORY',
    'default_snapshot',
    'CapacityPricingRow', 'PipeDiameterPricingRow', 'resolve_capacity_tier', 'resolve_pipe_tier',
    'Room', 'RoomType', 'RoomAggregate', 'InsulationClass', 'ROOM_TYPE_FACTORS', 'aggregate_rooms',
    'SystemType', 'QuoteOptions', 'ProductPrice', 'QuoteBreakdown', 'QuoteCalculator',
    'calculate_quote', 'recommend_airco_units',
    'InstallationProduct', 'InstallationRequest', 'InstallationPriceBreakdown',
    'calculate_installation_price',
]
