"""Shared fixtures: a scripted RNG and a small world of rectangular countries."""
from typing import Iterable, List, Optional
import pytest
from battlespace.countries import Country, CountryRegistry
from battlespace.model import Base, Coordinates, SimulationState, Unit
from battlespace.rng import DRNG


class ScriptedRNG(DRNG):
    """DRNG whose random() replays a fixed script, then a constant."""

    def __init__(self, values: Iterable[float] = (), default: float = 0.5, seed: int = 0):
        super().__init__(seed)
        self.values: List[float] = list(values)
        self.default = default

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return self.default


def rect(min_lat, max_lat, min_lng, max_lng):
    """Single rectangular ring in [lng, lat] order."""
    return [[min_lng, min_lat], [max_lng, min_lat], [max_lng, max_lat], [min_lng, max_lat], [min_lng, min_lat]]


def make_unit(uid: str, template_type: str = "infantry", lat: float = 45.0, lng: float = 5.0,
              faction: str = "player", health: float = 100.0, status: str = "idle",
              destination: Optional[Coordinates] = None, parent_base_id: Optional[str] = None) -> Unit:
    return Unit(id=uid, template_type=template_type, name=uid, position=Coordinates(lat, lng),
                faction=faction, health=health, max_health=100.0, status=status,
                destination=destination, parent_base_id=parent_base_id)


def make_base(bid: str, base_type: str = "army", lat: float = 45.0, lng: float = 5.0,
              faction: str = "player", health: float = 500.0) -> Base:
    return Base(id=bid, name=bid, type=base_type, position=Coordinates(lat, lng), faction=faction,
                health=health, max_health=health, production_capacity=1, influence_radius=75,
                created_at=0)


@pytest.fixture
def registry() -> CountryRegistry:
    # All three sit on land in the coarse terrain model (Europe / Africa)
    return CountryRegistry([
        Country(id="900", name="Homeland", coordinates=[[rect(40, 50, 0, 10)]]),
        Country(id="840", name="Testland", coordinates=[[rect(40, 50, 10, 20)]]),
        Country(id="901", name="Ringland", coordinates=[[rect(0, 10, 20, 30), rect(4, 6, 24, 26)]]),
    ])


@pytest.fixture
def home_state() -> SimulationState:
    """Player HQ inside Homeland, nothing else."""
    hq = make_base("hq-1", "hq", 45.0, 5.0, health=1000.0)
    return SimulationState(bases=[hq], home_country_id="900")
