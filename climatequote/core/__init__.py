"""Core models and host configuration."""

from .models import (
    Product,
    ProductSpecs,
    AircoSpecs,
    UnifiRouterSpecs,
    UnifiSwitchSpecs,
    UnifiAccessPointSpecs,
    UnifiCameraSpecs,
    BatterySpecs,
    ChargerSpecs,
    SolarSpecs,
    PRODUCT_CATEGORIES,
    SnapshotDocument,
    QuoteRequest,
    InstallationPriceInput,
    load_snapshot,
)
from .config import Settings

__all__ = [
    "Product",
    "ProductSpecs",
    "AircoSpecs",
    "UnifiRouterSpecs",
    "UnifiSwitchSpecs",
    "UnifiAccessPointSpecs",
    "UnifiCameraSpecs",
    "BatterySpecs",
    "ChargerSpecs",
    "SolarSpecs",
    "PRODUCT_CATEGORIES",
    "SnapshotDocument",
    "QuoteRequest",
    "InstallationPriceInput",
    "load_snapshot",
    "Settings",
]
