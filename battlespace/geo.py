"""Great-circle distance, coarse terrain and polygon containment."""
import math
from typing import Any, List, Sequence, Tuple
from shapely.errors import GEOSException
from shapely.geometry import Point, Polygon
from .model import Coordinates, UnitDomain

EARTH_RADIUS_KM = 6371.0
ARRIVAL_THRESHOLD_DEG = 0.01
DEFAULT_STEP_DEG = 0.01

# (min_lat, max_lat, min_lng, max_lng); anything outside these is water
LAND_REGIONS: List[Tuple[float, float, float, float]] = [
    (15, 72, -170, -50),   # North America
    (-56, 12, -82, -34),   # South America
    (35, 71, -10, 60),     # Europe
    (-35, 37, -18, 52),    # Africa
    (5, 77, 25, 180),      # Asia
    (-45, -10, 110, 155),  # Australia
]

UNCONSTRAINED_DOMAINS = ("air", "space", "cyber", "special")

def distance(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in km."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)

    x = math.sin(d_lat / 2) ** 2 + math.sin(d_lon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    c = 2 * math.atan2(math.sqrt(x), math.sqrt(1 - x))
    return EARTH_RADIUS_KM * c

def planar_distance(a: Coordinates, b: Coordinates) -> float:
    """Straight-line distance in degrees, used by the movement model."""
    dx = b.longitude - a.longitude
    dy = b.latitude - a.latitude
    return math.sqrt(dx * dx + dy * dy)

def is_water(lat: float, lng: float) -> bool:
    for min_lat, max_lat, min_lng, max_lng in LAND_REGIONS:
        if min_lat <= lat <= max_lat and min_lng <= lng <= max_lng:
            return False
    return True

def is_land(lat: float, lng: float) -> bool:
    return not is_water(lat, lng)

def can_traverse(domain: UnitDomain, lat: float, lng: float) -> bool:
    if domain == "naval":
        return is_water(lat, lng)
    if domain == "land":
        return is_land(lat, lng)
    return True

def next_position(current: Coordinates, destination: Coordinates, domain: UnitDomain,
                  step: float = DEFAULT_STEP_DEG) -> Tuple[Coordinates, bool]:
    """Step toward destination; returns (position, blocked).

    Land and naval units hold position when the stepped point is on the
    wrong terrain. No rerouting is attempted.
    """
    dx = destination.longitude - current.longitude
    dy = destination.latitude - current.latitude
    dist = math.sqrt(dx * dx + dy * dy)

    if dist < ARRIVAL_THRESHOLD_DEG:
        return destination, False

    ratio = min(step / dist, 1.0)
    stepped = Coordinates(latitude=current.latitude + dy * ratio,
                          longitude=current.longitude + dx * ratio)

    if not can_traverse(domain, stepped.latitude, stepped.longitude):
        return current, True
    return stepped, False

def polygons_from_rings(coordinates: Sequence[Any]) -> List[Polygon]:
    """Build shapely polygons from MultiPolygon rings ([lng, lat] pairs).

    The first ring of each polygon is the shell, the rest are holes.
    Degenerate polygons are dropped so containment fails closed.
    """
    polygons: List[Polygon] = []
    for rings in coordinates or []:
        try:
            shell, *holes = rings
            poly = Polygon(shell, holes)
            if poly.is_empty or poly.area == 0:
                continue
        except (TypeError, ValueError, IndexError, GEOSException):
            continue
        polygons.append(poly)
    return polygons

def point_in_polygons(lat: float, lng: float, polygons: Sequence[Polygon]) -> bool:
    point = Point(lng, lat)
    for poly in polygons:
        try:
            if poly.contains(point):
                return True
        except GEOSException:
            continue
    return False
