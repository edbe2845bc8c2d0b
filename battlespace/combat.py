import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set
from .catalog import UNIT_TEMPLATES
from .geo import distance
from .model import Base, Unit
from .rng import DRNG

ENGAGEMENT_RANGE_KM = 50.0
BASE_DEFENSE = 50.0
FALLBACK_ATTACK = 50.0
FALLBACK_DEFENSE = 30.0

@dataclass
class CombatResult:
    attacker_id: str
    defender_id: str
    attacker_damage: float
    defender_damage: float
    attacker_destroyed: bool
    defender_destroyed: bool

@dataclass
class CombatOutcome:
    player_units: List[Unit]
    player_bases: List[Base]
    enemy_units: List[Unit]
    enemy_bases: List[Base]
    logs: List[str] = field(default_factory=list)

def domain_bonus(attacker_domain: Optional[str], defender_domain: Optional[str]) -> float:
    """Damage multiplier for the attacker's domain against the defender's."""
    if not attacker_domain or not defender_domain:
        return 1.0
    # Air dominance over land
    if attacker_domain == "air" and defender_domain == "land":
        return 1.3
    if attacker_domain == "land" and defender_domain == "air":
        return 0.7
    # Amphibious operations
    if attacker_domain == "naval" and defender_domain == "land":
        return 0.9
    if attacker_domain == "special":
        return 1.2
    return 1.0

def units_in_range(a: Unit, b: Unit) -> bool:
    return distance(a.position, b.position) <= ENGAGEMENT_RANGE_KM

def unit_in_base_range(unit: Unit, base: Base) -> bool:
    return distance(unit.position, base.position) <= ENGAGEMENT_RANGE_KM

def resolve_unit_combat(attacker: Unit, defender: Unit, rng: DRNG) -> CombatResult:
    """Damage report for one engagement; inputs are not mutated."""
    a_type = UNIT_TEMPLATES.get(attacker.template_type)
    d_type = UNIT_TEMPLATES.get(defender.template_type)

    attacker_attack = a_type.attack if a_type else FALLBACK_ATTACK
    attacker_defense = a_type.defense if a_type else FALLBACK_DEFENSE
    defender_attack = d_type.attack if d_type else FALLBACK_ATTACK
    defender_defense = d_type.defense if d_type else FALLBACK_DEFENSE

    bonus = domain_bonus(a_type.domain if a_type else None, d_type.domain if d_type else None)

    # damage = attack * bonus * (1 - defense/200) * variance
    to_defender = math.floor(attacker_attack * bonus * (1 - defender_defense / 200) * rng.uniform(0.7, 1.3))
    to_attacker = math.floor(defender_attack * (1 / bonus) * (1 - attacker_defense / 200) * rng.uniform(0.7, 1.3))
    to_defender = max(0, to_defender)
    to_attacker = max(0, to_attacker)

    return CombatResult(
        attacker_id=attacker.id,
        defender_id=defender.id,
        attacker_damage=to_attacker,
        defender_damage=to_defender,
        attacker_destroyed=attacker.health - to_attacker <= 0,
        defender_destroyed=defender.health - to_defender <= 0,
    )

def resolve_unit_vs_base(attacker: Unit, base: Base, rng: DRNG) -> float:
    """Damage dealt to a base. Bases do not shoot back here."""
    a_type = UNIT_TEMPLATES.get(attacker.template_type)
    attack = a_type.attack if a_type else FALLBACK_ATTACK
    return max(0, math.floor(attack * (1 - BASE_DEFENSE / 200) * rng.uniform(0.8, 1.2)))

def _engage(attackers: List[Unit], defenders: List[Unit], defender_bases: List[Base],
            fought: Set[str], rng: DRNG, logs: List[str], enemy_side: bool) -> None:
    # First target found in iteration order is engaged; no nearest-first sort.
    for attacker in attackers:
        if attacker.id in fought or attacker.health <= 0:
            continue

        targets = [d for d in defenders if d.health > 0 and units_in_range(attacker, d)]
        if targets:
            target = targets[0]
            result = resolve_unit_combat(attacker, target, rng)
            attacker.health = max(0, attacker.health - result.attacker_damage)
            target.health = max(0, target.health - result.defender_damage)
            fought.add(attacker.id)
            fought.add(target.id)

            if enemy_side:
                if result.defender_destroyed:
                    logs.append(f"Enemy {attacker.name} destroyed your {target.name}!")
            elif result.defender_destroyed:
                logs.append(f"{attacker.name} destroyed enemy {target.name}!")
            elif result.attacker_destroyed:
                logs.append(f"{attacker.name} was destroyed by {target.name}!")
            else:
                logs.append(f"Combat: {attacker.name} vs {target.name} - both damaged")

        if attacker.id in fought:
            continue
        bases = [b for b in defender_bases if b.health > 0 and unit_in_base_range(attacker, b)]
        if bases:
            target_base = bases[0]
            target_base.health = max(0, target_base.health - resolve_unit_vs_base(attacker, target_base, rng))
            if target_base.health <= 0:
                if enemy_side:
                    logs.append(f"Enemy {attacker.name} destroyed your {target_base.name}!")
                else:
                    logs.append(f"{attacker.name} destroyed enemy {target_base.name}!")

def process_combat_tick(player_units: List[Unit], player_bases: List[Base],
                        enemy_units: List[Unit], enemy_bases: List[Base],
                        rng: DRNG) -> CombatOutcome:
    """Resolve one tick of engagements between the player and the opposing side."""
    p_units = [replace(u) for u in player_units]
    p_bases = [replace(b) for b in player_bases]
    e_units = [replace(u) for u in enemy_units]
    e_bases = [replace(b) for b in enemy_bases]

    logs: List[str] = []
    fought: Set[str] = set()

    _engage(p_units, e_units, e_bases, fought, rng, logs, enemy_side=False)
    _engage(e_units, p_units, p_bases, fought, rng, logs, enemy_side=True)

    return CombatOutcome(
        player_units=[u for u in p_units if u.health > 0],
        player_bases=[b for b in p_bases if b.health > 0],
        enemy_units=[u for u in e_units if u.health > 0],
        enemy_bases=[b for b in e_bases if b.health > 0],
        logs=logs,
    )
