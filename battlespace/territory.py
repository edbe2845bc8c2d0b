from typing import List, Optional, Sequence
from .geo import distance
from .model import Coordinates, TerritoryInfluence

def is_within_territory(position: Coordinates,
                        territories: Sequence[TerritoryInfluence]) -> Optional[TerritoryInfluence]:
    for territory in territories:
        if distance(position, territory.position) <= territory.radius:
            return territory
    return None

def calculate_contested(territories: Sequence[TerritoryInfluence]) -> List[Coordinates]:
    """Midpoints of overlapping influences held by different factions."""
    contested: List[Coordinates] = []
    for i, a in enumerate(territories):
        for b in territories[i + 1:]:
            if a.faction == b.faction:
                continue
            overlap = a.radius + b.radius - distance(a.position, b.position)
            if overlap > 0:
                contested.append(Coordinates(
                    latitude=(a.position.latitude + b.position.latitude) / 2,
                    longitude=(a.position.longitude + b.position.longitude) / 2,
                ))
    return contested
