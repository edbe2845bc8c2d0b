import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
import structlog
from shapely.geometry import Polygon
from shapely.ops import unary_union
from .geo import point_in_polygons, polygons_from_rings
from .model import Coordinates
from .rng import DRNG

logger = structlog.get_logger()

DEFAULT_COUNTRIES_PATH = Path(__file__).resolve().parent / "data" / "countries.geojson"
MAX_SAMPLES_PER_CELL = 10

# Military power rating, keyed by ISO 3166-1 numeric id (5 = superpower)
COUNTRY_POWER: Dict[str, int] = {
    "840": 5, "156": 5, "643": 5,  # USA, China, Russia
    "356": 4, "392": 4, "276": 4, "826": 4, "250": 4,  # India, Japan, Germany, UK, France
    "410": 3, "380": 3, "076": 3, "792": 3, "818": 3, "682": 3, "364": 3, "586": 3,
    "704": 3, "360": 3, "036": 3, "124": 3, "616": 3, "724": 3,
    "484": 2, "032": 2, "710": 2, "804": 2, "608": 2, "764": 2, "458": 2, "566": 2,
    "012": 2, "504": 2, "604": 2, "152": 2, "170": 2, "862": 2,
}

def get_country_power(country_id: str) -> int:
    """Power rating 1-5; unknown countries are 1."""
    return COUNTRY_POWER.get(country_id, 1)

@dataclass
class Country:
    id: str
    name: str
    coordinates: List[Any]  # MultiPolygon rings of [lng, lat]
    polygons: List[Polygon] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.polygons = polygons_from_rings(self.coordinates)

    def contains(self, lat: float, lng: float) -> bool:
        return point_in_polygons(lat, lng, self.polygons)

    @property
    def centroid(self) -> Optional[Coordinates]:
        if not self.polygons:
            return None
        c = unary_union(self.polygons).centroid
        return Coordinates(latitude=c.y, longitude=c.x)

def point_in_country(lat: float, lng: float, country: Country) -> bool:
    return country.contains(lat, lng)

def _coordinates_from_geometry(geom: Optional[Dict[str, Any]]) -> List[Any]:
    if not geom:
        return []
    if geom.get("type") == "Polygon":
        return [geom.get("coordinates", [])]
    if geom.get("type") == "MultiPolygon":
        return list(geom.get("coordinates", []))
    return []

class CountryRegistry:
    """Ordered set of country polygons; first containing country wins."""

    def __init__(self, countries: Iterable[Country]):
        self.countries: List[Country] = list(countries)
        self._by_id: Dict[str, Country] = {c.id: c for c in self.countries}

    @classmethod
    def from_geojson(cls, path: Union[str, Path]) -> "CountryRegistry":
        """Load a GeoJSON FeatureCollection (e.g. an exported world atlas)."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Country data not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if data.get("type") != "FeatureCollection":
            raise ValueError(f"Expected a GeoJSON FeatureCollection in {path}")

        countries = []
        for feature in data.get("features", []):
            props = feature.get("properties") or {}
            name = props.get("name") or "Unknown"
            country_id = str(feature.get("id") or name)
            countries.append(Country(id=country_id, name=name,
                                     coordinates=_coordinates_from_geometry(feature.get("geometry"))))
        logger.info("Loaded countries", count=len(countries), path=str(path))
        return cls(countries)

    @classmethod
    def load_default(cls) -> "CountryRegistry":
        return cls.from_geojson(DEFAULT_COUNTRIES_PATH)

    def get(self, country_id: str) -> Optional[Country]:
        return self._by_id.get(country_id)

    def name_of(self, country_id: str) -> str:
        c = self._by_id.get(country_id)
        return c.name if c else f"Nation {country_id}"

    def find_country_at_position(self, lat: float, lng: float) -> Optional[Country]:
        for country in self.countries:
            if country.contains(lat, lng):
                return country
        return None

    def random_points_in_country(self, country: Country, count: int, rng: DRNG,
                                 max_attempts: int = MAX_SAMPLES_PER_CELL) -> List[Coordinates]:
        """Spread count points over the country's bounding-box grid.

        Each cell gets up to max_attempts samples checked against the
        polygon; a cell with no hit falls back to the centroid.
        """
        if count <= 0:
            return []
        centroid = country.centroid
        if centroid is None:
            return []

        min_lng, min_lat, max_lng, max_lat = unary_union(country.polygons).bounds
        cols = math.ceil(math.sqrt(count))
        rows = math.ceil(count / cols)
        cell_w = (max_lng - min_lng) / cols
        cell_h = (max_lat - min_lat) / rows

        points: List[Coordinates] = []
        for i in range(count):
            row, col = divmod(i, cols)
            cell_lng = min_lng + col * cell_w
            cell_lat = min_lat + row * cell_h
            found = None
            for _ in range(max_attempts):
                lat = rng.uniform(cell_lat, cell_lat + cell_h)
                lng = rng.uniform(cell_lng, cell_lng + cell_w)
                if country.contains(lat, lng):
                    found = Coordinates(latitude=lat, longitude=lng)
                    break
            points.append(found or centroid)
        return points
