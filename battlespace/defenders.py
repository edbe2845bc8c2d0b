"""Spawns opposing bases and units inside a country the player has entered."""
import math
from typing import Dict, List, Optional, Tuple
from .catalog import BASE_CONFIG, UNIT_HEALTH
from .countries import Country, CountryRegistry, get_country_power
from .model import Base, Coordinates, Unit
from .rng import DRNG

REGULAR_BASE_TYPES = ["army", "navy", "airforce", "intelligence"]
HQ_HEALTH = 800.0
MAX_REGULAR_BASES = 5
MAX_UNITS_PER_BASE = 8
UNIT_PLACEMENT_RETRIES = 5

UNIT_TYPES_FOR_BASE: Dict[str, List[str]] = {
    "hq": ["infantry", "armor"],
    "army": ["infantry", "armor", "artillery", "air_defense"],
    "navy": ["destroyer", "frigate", "submarine", "carrier", "amphibious"],
    "airforce": ["fighter", "bomber", "helicopter", "drone"],
    "intelligence": ["special_forces", "intel_team", "drone"],
    "missile": ["infantry", "air_defense"],
}

def defender_prefix(country_id: str) -> str:
    return f"defender-{country_id}-"

def defender_hq_id(country_id: str) -> str:
    return f"defender-{country_id}-hq"

def country_of_defender(entity_id: Optional[str]) -> Optional[str]:
    """Country id encoded in a defender base id, or None."""
    if not entity_id or not entity_id.startswith("defender-"):
        return None
    rest = entity_id[len("defender-"):]
    if rest.endswith("-hq"):
        return rest[:-len("-hq")]
    if "-base-" in rest:
        return rest.rsplit("-base-", 1)[0]
    return None

def regular_base_count(power: int) -> int:
    return min(MAX_REGULAR_BASES, 1 + power)

def units_per_base(power: int) -> int:
    return min(MAX_UNITS_PER_BASE, 1 + power)

def get_expected_defender_count(country_id: str) -> Dict[str, int]:
    power = get_country_power(country_id)
    bases = regular_base_count(power) + 1
    return {"bases": bases, "units": bases * units_per_base(power)}

def _make_base(country: Country, base_id: str, base_type: str, position: Coordinates,
               current_tick: int) -> Base:
    if base_type == "hq":
        health = HQ_HEALTH
        name = f"{country.name} Defense Headquarters"
    else:
        health = 500.0 if base_type == "army" else 400.0
        name = f"{country.name} {BASE_CONFIG[base_type].name}"
    return Base(
        id=base_id,
        name=name,
        type=base_type,
        position=position,
        faction="ai",
        health=health,
        max_health=health,
        production_capacity=2 if base_type == "hq" else 1,
        influence_radius=BASE_CONFIG[base_type].influence_radius,
        created_at=current_tick,
    )

def _unit_position(country: Country, base: Base, rng: DRNG) -> Coordinates:
    # Small offset so units don't stack, kept inside the border
    for _ in range(UNIT_PLACEMENT_RETRIES):
        offset = rng.uniform(0.1, 0.3)
        angle = rng.uniform(0, math.pi * 2)
        lat = base.position.latitude + math.sin(angle) * offset
        lng = base.position.longitude + math.cos(angle) * offset
        if country.contains(lat, lng):
            return Coordinates(latitude=lat, longitude=lng)
    return base.position

def generate_units_for_base(country: Country, base: Base, power: int, existing_count: int,
                            current_tick: int, rng: DRNG) -> List[Unit]:
    available = UNIT_TYPES_FOR_BASE.get(base.type, ["infantry"])
    units = []
    for i in range(units_per_base(power)):
        unit_type = available[i % len(available)]
        units.append(Unit(
            id=rng.uuid4(),
            template_type=unit_type,
            name=f"{country.name} {unit_type.replace('_', ' ')} {existing_count + i + 1}",
            position=_unit_position(country, base, rng),
            faction="ai",
            health=UNIT_HEALTH,
            max_health=UNIT_HEALTH,
            status="defending",
            parent_base_id=base.id,
            created_at=current_tick,
        ))
    return units

def generate_country_defenses(country: Country, current_tick: int, registry: CountryRegistry,
                              rng: DRNG) -> Tuple[List[Base], List[Unit]]:
    """One HQ plus min(5, 1 + power) regular bases, each with its garrison."""
    power = get_country_power(country.id)
    num_regular = regular_base_count(power)
    positions = registry.random_points_in_country(country, num_regular + 1, rng)
    if not positions:
        return [], []

    base_types = rng.shuffle(REGULAR_BASE_TYPES)
    bases = [_make_base(country, defender_hq_id(country.id), "hq", positions[0], current_tick)]
    for i in range(num_regular):
        bases.append(_make_base(country, f"defender-{country.id}-base-{i}",
                                base_types[i % len(base_types)], positions[i + 1], current_tick))

    units: List[Unit] = []
    for base in bases:
        units.extend(generate_units_for_base(country, base, power, len(units), current_tick, rng))
    return bases, units

def has_defenders(country_id: str, bases: List[Base]) -> bool:
    prefix = defender_prefix(country_id)
    return any(b.id.startswith(prefix) for b in bases)

def is_country_conquered(country_id: str, bases: List[Base]) -> bool:
    """True once every defender base of the country is gone from the live list."""
    return not has_defenders(country_id, bases)

def get_invaded_country_ids(bases: List[Base]) -> List[str]:
    """Countries that currently have defender bases, in first-seen order."""
    ids: List[str] = []
    for b in bases:
        cid = country_of_defender(b.id)
        if cid is not None and cid not in ids:
            ids.append(cid)
    return ids
