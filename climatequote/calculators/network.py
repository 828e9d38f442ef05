"""
UniFi network calculator.

Access points are recommended at roughly one per 80 m² of floor area. The
installation is priced per device on top of a base call-out.
"""

from dataclasses import dataclass
from typing import Iterable
import logging
import math

from ..utils.validation import non_negative

logger = logging.getLogger(__name__)


AREA_PER_ACCESS_POINT_M2 = 80.0
INSTALLATION_BASE = 150.0
PER_ACCESS_POINT = 50.0
PER_CAMERA = 75.0
PER_OTHER_DEVICE = 25.0

ACCESS_POINT_CATEGORIES = ("accesspoint", "unifi_accesspoint")
CAMERA_CATEGORIES = ("camera", "unifi_camera")


@dataclass(frozen=True)
class NetworkRecommendation:
    access_points: int
    needs_switch: bool
    needs_outdoor_ap: bool


@dataclass(frozen=True)
class NetworkItem:
    """A selected network product."""

    category: str
    price: float
    quantity: int = 1


@dataclass(frozen=True)
class NetworkQuote:
    product_total: float
    installation_cost: float
    total: float


def recommend_network(building_area_m2: float = 100, floors: int = 1, outdoor_coverage: bool = False) -> NetworkRecommendation:
    """
    Recommended access points for a building.

    Missing or zero area and floor count fall back to 100 m² and one floor.
    """
    area = non_negative(building_area_m2) or 100.0
    floor_count = int(non_negative(floors)) or 1
    access_points = math.ceil(area * floor_count / AREA_PER_ACCESS_POINT_M2)
    return NetworkRecommendation(
        access_points=access_points,
        needs_switch=access_points > 2 or floor_count > 1,
        needs_outdoor_ap=bool(outdoor_coverage),
    )


def network_installation_cost(items: Iterable[NetworkItem]) -> float:
    access_points = cameras = others = 0
    for item in items:
        quantity = int(non_negative(item.quantity))
        if item.category in ACCESS_POINT_CATEGORIES:
            access_points += quantity
        elif item.category in CAMERA_CATEGORIES:
            cameras += quantity
        else:
            others += quantity
    return (
        INSTALLATION_BASE
        + access_points * PER_ACCESS_POINT
        + cameras * PER_CAMERA
        + others * PER_OTHER_DEVICE
    )


def calculate_network_quote(items: Iterable[NetworkItem]) -> NetworkQuote:
    items = list(items)
    product_total = sum(non_negative(i.price) * int(non_negative(i.quantity)) for i in items)
    installation = network_installation_cost(items)
    return NetworkQuote(
        product_total=round(product_total, 2),
        installation_cost=round(installation, 2),
        total=round(product_total + installation, 2),
    )
