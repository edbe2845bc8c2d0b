"""The per-tick update.

``run_tick`` advances a ``SimulationState`` by one tick. Phases run in a fixed
order and each reads the previous phase's output:

    movement -> missiles/explosions -> defender spawning -> missile strikes
    -> AI reaction -> combat -> diplomacy -> retaliation -> conquest -> economy

All randomness goes through the supplied DRNG, so the same state, RNG seed
and registry always produce the same next state.
"""
import copy
from collections import Counter
from typing import Dict, List, Optional, Tuple

import structlog

from .catalog import get_domain
from .combat import process_combat_tick
from .countries import CountryRegistry, get_country_power
from .defenders import (
    country_of_defender,
    generate_country_defenses,
    get_invaded_country_ids,
    has_defenders,
    is_country_conquered,
)
from .diplomacy import (
    create_nation_relation,
    get_nations_at_war,
    get_opinion_change,
    modify_opinion,
    update_war_score,
)
from .economy import net_income
from .geo import ARRIVAL_THRESHOLD_DEG, DEFAULT_STEP_DEG, next_position, planar_distance
from .intel import calculate_ai_reaction, check_border_violation, check_missile_strikes
from .model import ALERT_LEVELS, Base, Explosion, SimulationState, Unit
from .retaliation import process_retaliation
from .rng import DRNG

logger = structlog.get_logger()

MISSILE_BASE_DAMAGE = 200.0

# Least to most severe; picks the status handed to the retaliation gate
STATUS_SEVERITY = ["allied", "peace", "tense", "hostile", "war"]

def _power_desc(country_id: str) -> str:
    power = get_country_power(country_id)
    return "MAJOR" if power >= 4 else "MODERATE" if power >= 2 else "LIGHT"

def _raise_alert(current: str, new: str) -> str:
    """Alert never goes down."""
    return new if ALERT_LEVELS.index(new) > ALERT_LEVELS.index(current) else current

def _step_unit(unit: Unit, step: float) -> bool:
    """Move one unit in place; True when it arrived this tick."""
    if unit.status != "moving" or unit.destination is None:
        return False

    if planar_distance(unit.position, unit.destination) < ARRIVAL_THRESHOLD_DEG:
        unit.position = unit.destination
        unit.status = "idle"
        unit.destination = None
        return True

    position, blocked = next_position(unit.position, unit.destination,
                                      get_domain(unit.template_type), step)
    if not blocked:
        unit.position = position
    return False

def _move_units(state: SimulationState, registry: CountryRegistry, previously_occupied: List[str]):
    step = DEFAULT_STEP_DEG * state.speed
    for unit in state.units:
        if unit.status != "moving" or unit.destination is None:
            continue
        _step_unit(unit, step)

        country = registry.find_country_at_position(unit.position.latitude, unit.position.longitude)
        if (country and country.id != state.home_country_id
                and country.id not in previously_occupied
                and country.id not in state.occupied_country_ids):
            state.occupied_country_ids.append(country.id)
            state.add_log("combat", f"Forces entered {country.name}!", unit.position)

    for unit in state.ai_enemy.units:
        _step_unit(unit, step)

def _land_missiles(state: SimulationState, rng: DRNG, registry: CountryRegistry) -> List[Explosion]:
    arrived = [m for m in state.missiles_in_flight if state.tick >= m.arrival_tick]
    state.missiles_in_flight = [m for m in state.missiles_in_flight if state.tick < m.arrival_tick]

    new_explosions = [Explosion(id=rng.uuid4(), position=m.target_position, start_tick=state.tick)
                      for m in arrived]
    for explosion in new_explosions:
        country = registry.find_country_at_position(explosion.position.latitude,
                                                    explosion.position.longitude)
        state.add_log("combat", f"Missile impact at {country.name if country else 'target'}!",
                      explosion.position)

    state.explosions = [e for e in state.explosions + new_explosions
                        if state.tick - e.start_tick < e.duration]
    return new_explosions

def _spawn_defenders(state: SimulationState, country_id: str, rng: DRNG,
                     registry: CountryRegistry) -> Optional[Tuple[int, int]]:
    country = registry.get(country_id)
    if country is None:
        return None
    bases, units = generate_country_defenses(country, state.tick, registry, rng)
    if not bases:
        return None

    ai = state.ai_enemy
    ai.bases.extend(bases)
    ai.units.extend(units)
    ai.revealed_base_ids.extend(b.id for b in bases if b.id not in ai.revealed_base_ids)
    logger.info("Defenders spawned", country=country_id, bases=len(bases), units=len(units))
    return len(bases), len(units)

def _player_countries(state: SimulationState, registry: CountryRegistry) -> List[str]:
    """Foreign countries holding player units, in unit order."""
    ids: List[str] = []
    for unit in state.units:
        if unit.faction != "player":
            continue
        country = registry.find_country_at_position(unit.position.latitude, unit.position.longitude)
        if country and country.id != state.home_country_id and country.id not in ids:
            ids.append(country.id)
    return ids

def _relation(state: SimulationState, country_id: str, registry: CountryRegistry):
    if country_id not in state.diplomacy:
        state.diplomacy[country_id] = create_nation_relation(country_id, registry.name_of(country_id))
    return state.diplomacy[country_id]

def _apply_opinion(state: SimulationState, country_id: str, event: str, reason: str,
                   registry: CountryRegistry):
    change = modify_opinion(_relation(state, country_id, registry), get_opinion_change(event), reason)
    state.diplomacy[country_id] = change.relation
    if change.status_changed:
        name = change.relation.nation_name
        if change.new_status == "war":
            state.add_log("intel", f"{name} has declared WAR!")
        else:
            state.add_log("intel", f"Relations with {name} are now {change.new_status}.")

def _retaliation_status(state: SimulationState) -> str:
    if get_nations_at_war(state.diplomacy) or state.ai_enemy.alert_level == "war":
        return "war"
    statuses = [r.status for r in state.diplomacy.values()]
    if not statuses:
        return "peace"
    return max(statuses, key=STATUS_SEVERITY.index)

def run_tick(state: SimulationState, rng: DRNG, registry: CountryRegistry) -> SimulationState:
    """Advance one tick. A paused state (speed 0) is returned unchanged."""
    if state.speed == 0:
        return state

    income = net_income(state)
    previously_occupied = list(state.occupied_country_ids)
    defenders_before = get_invaded_country_ids(state.ai_enemy.bases)

    state = copy.deepcopy(state)
    state.tick += 1
    ai = state.ai_enemy

    # Movement and border crossings
    _move_units(state, registry, previously_occupied)

    # Missiles and explosions
    new_explosions = _land_missiles(state, rng, registry)

    # Defenders for countries entered for the first time
    invaded = _player_countries(state, registry)
    for country_id in invaded:
        if (country_id in previously_occupied or country_id in state.captured_country_ids
                or has_defenders(country_id, ai.bases)):
            continue
        # Units produced abroad occupy without crossing a border
        if country_id not in state.occupied_country_ids:
            state.occupied_country_ids.append(country_id)
        spawned = _spawn_defenders(state, country_id, rng, registry)
        if spawned is None:
            continue
        n_bases, n_units = spawned
        state.add_log("combat",
                      f"{registry.name_of(country_id)} DEFENDERS DETECTED! {_power_desc(country_id)} "
                      f"resistance - {n_bases} bases, {n_units} units!")
        if ai.alert_level == "peace":
            ai.alert_level = "vigilant"
        elif ai.alert_level == "vigilant":
            ai.alert_level = "hostile"

    # Strikes hit only bases that stood before this tick's strike-triggered spawns
    struck = check_missile_strikes([e.position for e in new_explosions], ai.bases)
    struck_countries: List[str] = []
    for explosion in new_explosions:
        pos = explosion.position
        country = registry.find_country_at_position(pos.latitude, pos.longitude)
        if country is None or country.id == state.home_country_id:
            continue
        struck_countries.append(country.id)
        if has_defenders(country.id, ai.bases):
            continue
        spawned = _spawn_defenders(state, country.id, rng, registry)
        if spawned is None:
            continue
        n_bases, n_units = spawned
        ai.alert_level = "war"
        state.add_log("intel",
                      f"{country.name} MOBILIZING! {_power_desc(country.id)} military response - "
                      f"{n_bases} bases, {n_units} units detected!", pos)

    bases_destroyed: List[Base] = []
    if struck:
        struck_ids = [b.id for b in struck]
        for base in ai.bases:
            if base.id in struck_ids:
                base.health = max(0, base.health - MISSILE_BASE_DAMAGE)
                if base.health == 0:
                    bases_destroyed.append(base)
                    state.add_log("combat", f"Enemy {base.name} destroyed!", base.position)
        ai.bases = [b for b in ai.bases if b.health > 0]

    # AI reaction to incursions and strikes
    violated_base, _ = check_border_violation(state.units, ai.bases)
    reactions = calculate_ai_reaction(ai, violated_base is not None, struck, state.tick)
    for reaction in reactions:
        if reaction.type == "increase_alert" and reaction.alert_level:
            ai.alert_level = _raise_alert(ai.alert_level, reaction.alert_level)
        elif reaction.type == "reveal_bases":
            ai.revealed_base_ids.extend(i for i in reaction.revealed_base_ids
                                        if i not in ai.revealed_base_ids)
        state.add_log("intel", reaction.message)
    if reactions:
        ai.last_reaction_tick = state.tick

    # Combat
    player_units_before = [u for u in state.units if u.faction == "player"]
    player_bases_before = list(state.bases)
    enemy_units_before = list(ai.units)
    enemy_bases_before = list(ai.bases)

    outcome = process_combat_tick(player_units_before, player_bases_before,
                                  enemy_units_before, enemy_bases_before, rng)
    for line in outcome.logs:
        state.add_log("combat", line)

    surviving = {u.id for u in outcome.enemy_units}
    enemy_killed = [u for u in enemy_units_before if u.id not in surviving]
    surviving = {b.id for b in outcome.enemy_bases}
    bases_destroyed.extend(b for b in enemy_bases_before if b.id not in surviving)
    surviving = {u.id for u in outcome.player_units}
    player_lost = [u for u in player_units_before if u.id not in surviving]
    surviving = {b.id for b in outcome.player_bases}
    player_bases_lost = sum(1 for b in player_bases_before if b.id not in surviving)

    state.units = outcome.player_units
    state.bases = outcome.player_bases
    ai.units = outcome.enemy_units
    ai.bases = outcome.enemy_bases

    # Diplomacy
    for country_id in invaded:
        _apply_opinion(state, country_id, "border_violation", "border violation", registry)
    for country_id in struck_countries:
        _apply_opinion(state, country_id, "missile_strike", "missile strike", registry)

    kills: Dict[str, int] = Counter()
    for unit in enemy_killed:
        country_id = country_of_defender(unit.parent_base_id)
        if country_id is not None:
            kills[country_id] += 1
            _apply_opinion(state, country_id, "unit_killed", "unit killed", registry)
    razed: Dict[str, int] = Counter()
    for base in bases_destroyed:
        country_id = country_of_defender(base.id)
        if country_id is not None:
            razed[country_id] += 1
            _apply_opinion(state, country_id, "base_destroyed", "base destroyed", registry)
    losses: Dict[str, int] = Counter()
    for unit in player_lost:
        country = registry.find_country_at_position(unit.position.latitude, unit.position.longitude)
        if country is not None:
            losses[country.id] += 1

    for country_id, relation in list(state.diplomacy.items()):
        if relation.status == "war":
            state.diplomacy[country_id] = update_war_score(
                relation, kills[country_id], losses[country_id], razed[country_id], player_bases_lost)

    # Retaliation
    if ai.bases:
        outcome = process_retaliation(
            ai.units, ai.bases, state.units, state.bases,
            _retaliation_status(state), ai.alert_level,
            state.tick - state.last_retaliation_tick, state.tick, rng, registry,
        )
        if outcome.acted:
            state.last_retaliation_tick = state.tick
            for line in outcome.logs:
                state.add_log("intel", line)
            moved = {u.id: u for u in outcome.moved_units}
            ai.units = ([moved.get(u.id, u) for u in ai.units]
                        + outcome.reinforcements + outcome.raid_force + outcome.random_attack)

    # Conquest: defended before this tick, no defender bases left now
    for country_id in defenders_before:
        if is_country_conquered(country_id, ai.bases) and country_id not in state.captured_country_ids:
            state.captured_country_ids.append(country_id)
            state.add_log("combat", f"{registry.name_of(country_id)} CONQUERED! "
                                    f"All enemy forces eliminated. Territory secured.")

    # Economy, from the pre-tick holdings
    state.resources += income
    return state
