"""Opposing-side decisions: when to strike back and with what."""
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence
from .catalog import UNIT_HEALTH
from .countries import CountryRegistry
from .geo import distance
from .model import Base, Coordinates, Unit
from .rng import DRNG

AGGRESSION_LEVEL: Dict[str, float] = {
    "peace": 0.0,
    "tense": 0.1,
    "hostile": 0.4,
    "war": 0.8,
    "allied": 0.0,
}

RETALIATION_COOLDOWN_TICKS = 20
RANDOM_ATTACK_COOLDOWN_TICKS = 50
RANDOM_ATTACK_CHANCE: Dict[str, float] = {
    "peace": 0.02,
    "vigilant": 0.05,
    "hostile": 0.1,
    "war": 0.15,
}
ADVANCE_RADIUS_KM = 500.0
RAID_RADIUS_KM = 2000.0
REINFORCE_CHANCE = 0.2

REINFORCEMENT_TYPES: Dict[str, List[str]] = {
    "army": ["infantry", "armor"],
    "airforce": ["fighter", "drone"],
    "navy": ["destroyer", "frigate"],
    "missile": ["air_defense"],
    "intelligence": ["special_forces"],
    "hq": ["infantry"],
}
RAID_UNIT_TYPES = ["infantry", "armor", "fighter", "helicopter", "special_forces"]

@dataclass
class RetaliationTarget:
    position: Coordinates
    target_type: str  # unit | base
    target_id: str

@dataclass
class RetaliationOutcome:
    moved_units: List[Unit] = field(default_factory=list)
    reinforcements: List[Unit] = field(default_factory=list)
    raid_force: List[Unit] = field(default_factory=list)
    random_attack: List[Unit] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)

    @property
    def acted(self) -> bool:
        return bool(self.moved_units or self.reinforcements or self.raid_force or self.random_attack)

def should_retaliate(diplomatic_status: str, alert_level: str, ticks_since_last_action: int,
                     rng: DRNG) -> bool:
    if ticks_since_last_action < RETALIATION_COOLDOWN_TICKS:
        return False
    war_bonus = 0.3 if alert_level == "war" else 0.15 if alert_level == "hostile" else 0.0
    chance = AGGRESSION_LEVEL.get(diplomatic_status, 0.0) + war_bonus
    return rng.random() < chance

def should_launch_random_attack(alert_level: str, ticks_since_last_action: int,
                                unit_count: int, base_count: int, rng: DRNG) -> bool:
    """Unprovoked offensive, independent of diplomatic status."""
    if ticks_since_last_action < RANDOM_ATTACK_COOLDOWN_TICKS:
        return False
    if unit_count == 0 or base_count == 0:
        return False
    strength_bonus = min(0.1, unit_count * 0.005)
    return rng.random() < RANDOM_ATTACK_CHANCE.get(alert_level, 0.02) + strength_bonus

def find_retaliation_target(ai_units: Sequence[Unit], ai_bases: Sequence[Base],
                            player_units: Sequence[Unit],
                            player_bases: Sequence[Base]) -> Optional[RetaliationTarget]:
    # Nearby player units first, then the closest player base
    for ai_unit in ai_units:
        for unit in player_units:
            if distance(ai_unit.position, unit.position) < 200:
                return RetaliationTarget(position=unit.position, target_type="unit", target_id=unit.id)

    nearest: Optional[Base] = None
    nearest_dist = math.inf
    for ai_base in ai_bases:
        for base in player_bases:
            d = distance(ai_base.position, base.position)
            if d < nearest_dist:
                nearest, nearest_dist = base, d
    if nearest is not None and nearest_dist < 1000:
        return RetaliationTarget(position=nearest.position, target_type="base", target_id=nearest.id)
    return None

def get_retaliation_movements(ai_units: Sequence[Unit], player_units: Sequence[Unit],
                              player_bases: Sequence[Base], max_units: int = 5) -> List[Unit]:
    """Greedy: each free unit heads for its nearest player target within range."""
    moved: List[Unit] = []
    for ai_unit in ai_units:
        if len(moved) >= max_units:
            break
        if ai_unit.status == "moving":
            continue

        target: Optional[Coordinates] = None
        best = math.inf
        for p in list(player_units) + list(player_bases):
            d = distance(ai_unit.position, p.position)
            if d < best:
                best, target = d, p.position

        if target is not None and best < ADVANCE_RADIUS_KM:
            moved.append(replace(ai_unit, destination=target, status="moving"))
    return moved

def _offset(position: Coordinates, rng: DRNG) -> Coordinates:
    offset = rng.uniform(0.1, 0.3)
    angle = rng.uniform(0, math.pi * 2)
    return Coordinates(latitude=position.latitude + math.sin(angle) * offset,
                       longitude=position.longitude + math.cos(angle) * offset)

def generate_reinforcements(base: Base, country_name: str, current_tick: int,
                            existing_count: int, rng: DRNG) -> List[Unit]:
    """1-3 idle units next to base."""
    count = 1 + rng.randint(3)
    types = REINFORCEMENT_TYPES.get(base.type, ["infantry"])
    return [
        Unit(
            id=rng.uuid4(),
            template_type=types[i % len(types)],
            name=f"{country_name} Reinforcement {existing_count + i + 1}",
            position=_offset(base.position, rng),
            faction="ai",
            health=UNIT_HEALTH,
            max_health=UNIT_HEALTH,
            status="idle",
            parent_base_id=base.id,
            created_at=current_tick,
        )
        for i in range(count)
    ]

def generate_raid_force(source: Base, target: Coordinates, current_tick: int,
                        existing_count: int, rng: DRNG) -> List[Unit]:
    """2-5 units leaving source, already moving toward target."""
    size = 2 + rng.randint(4)
    return [
        Unit(
            id=rng.uuid4(),
            template_type=rng.choice(RAID_UNIT_TYPES),
            name=f"Enemy Raider {existing_count + i + 1}",
            position=source.position,
            destination=target,
            faction="ai",
            health=UNIT_HEALTH,
            max_health=UNIT_HEALTH,
            status="moving",
            parent_base_id=source.id,
            created_at=current_tick,
        )
        for i in range(size)
    ]

def _place_name(position: Coordinates, registry: Optional[CountryRegistry], default: str) -> str:
    if registry is None:
        return default
    country = registry.find_country_at_position(position.latitude, position.longitude)
    return country.name if country else default

def process_retaliation(ai_units: List[Unit], ai_bases: List[Base],
                        player_units: List[Unit], player_bases: List[Base],
                        diplomatic_status: str, alert_level: str,
                        ticks_since_last: int, current_tick: int, rng: DRNG,
                        registry: Optional[CountryRegistry] = None) -> RetaliationOutcome:
    """One tick of opposing-side decisions. The caller merges the returned units."""
    out = RetaliationOutcome()

    if not should_retaliate(diplomatic_status, alert_level, ticks_since_last, rng):
        if should_launch_random_attack(alert_level, ticks_since_last, len(ai_units), len(ai_bases), rng) \
                and player_bases:
            target = rng.choice(player_bases)
            source = rng.choice(ai_bases)
            out.random_attack = generate_raid_force(source, target.position, current_tick,
                                                    len(ai_units), rng)
            name = _place_name(target.position, registry, "your base")
            out.logs.append(f"ENEMY OFFENSIVE! {len(out.random_attack)} units attacking {name}!")
        return out

    out.moved_units = get_retaliation_movements(ai_units, player_units, player_bases, max_units=3)
    if out.moved_units:
        out.logs.append(f"Enemy forces advancing! {len(out.moved_units)} units moving toward your positions!")

    at_war = diplomatic_status == "war" or alert_level == "war"
    if at_war and rng.bernoulli(REINFORCE_CHANCE):
        active = next((b for b in ai_bases if b.health > 0), None)
        if active is not None:
            out.reinforcements = generate_reinforcements(active, "Enemy", current_tick, len(ai_units), rng)
            out.logs.append(f"Enemy reinforcements deployed from {active.name}!")

    if at_war and player_bases and ai_bases:
        raid_chance = 0.15 if alert_level == "war" else 0.08
        if rng.bernoulli(raid_chance):
            target = rng.choice(player_bases)
            source = min(ai_bases, key=lambda b: distance(b.position, target.position))
            if distance(source.position, target.position) < RAID_RADIUS_KM:
                out.raid_force = generate_raid_force(source, target.position, current_tick,
                                                     len(ai_units), rng)
                name = _place_name(target.position, registry, "your territory")
                out.logs.append(f"ENEMY RAID INCOMING! {len(out.raid_force)} hostile units launched toward {name}!")
    return out
