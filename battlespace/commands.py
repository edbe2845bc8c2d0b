"""Player commands, applied between ticks.

Each command takes a state and returns a new one. Rejected commands return
a copy carrying a single warning entry; they never raise.
"""
import copy
from typing import Optional, Sequence
from .catalog import BASE_CONFIG, MISSILE_TEMPLATES, UNIT_HEALTH, UNIT_TEMPLATES
from .countries import CountryRegistry
from .model import Base, Coordinates, MissileInFlight, SimulationState, TerritoryInfluence, Unit
from .rng import DRNG

PLAYER_HQ_HEALTH = 1000.0
PLAYER_BASE_HEALTH = 500.0
TICKS_PER_SECOND = 10
MAX_SPEED = 3

def _fmt(position: Coordinates) -> str:
    return f"{position.latitude:.4f}°, {position.longitude:.4f}°"

def place_hq(state: SimulationState, position: Coordinates, rng: DRNG,
             registry: Optional[CountryRegistry] = None) -> SimulationState:
    state = copy.deepcopy(state)
    if state.hq:
        state.add_log("warning", "HQ already placed. Only one HQ allowed.")
        return state

    hq = Base(
        id=rng.uuid4(),
        name="Command Headquarters",
        type="hq",
        position=position,
        faction="player",
        health=PLAYER_HQ_HEALTH,
        max_health=PLAYER_HQ_HEALTH,
        production_capacity=2,
        influence_radius=BASE_CONFIG["hq"].influence_radius,
        created_at=state.tick,
    )
    state.bases.append(hq)
    state.territories.append(TerritoryInfluence(position=position, faction="player",
                                                strength=100, radius=hq.influence_radius))

    home = registry.find_country_at_position(position.latitude, position.longitude) if registry else None
    state.home_country_id = home.id if home else None
    where = f" in {home.name}" if home else ""
    state.add_log("info", f"HQ established{where} at {_fmt(position)}", position)
    return state

def place_base(state: SimulationState, base_type: str, position: Coordinates, rng: DRNG,
               registry: Optional[CountryRegistry] = None) -> SimulationState:
    if base_type == "hq":
        return place_hq(state, position, rng, registry)

    state = copy.deepcopy(state)
    config = BASE_CONFIG.get(base_type)
    if config is None:
        state.add_log("warning", f"Unknown base type: {base_type}")
        return state
    if not state.hq:
        state.add_log("warning", "Must place HQ first before building bases.")
        return state
    if state.resources < config.cost:
        state.add_log("warning", f"Insufficient resources for {config.name}. "
                                 f"Need {config.cost}, have {state.resources}.")
        return state

    count = sum(1 for b in state.bases if b.type == base_type)
    base = Base(
        id=rng.uuid4(),
        name=f"{config.name} {count + 1}",
        type=base_type,
        position=position,
        faction="player",
        health=PLAYER_BASE_HEALTH,
        max_health=PLAYER_BASE_HEALTH,
        production_capacity=1,
        influence_radius=config.influence_radius,
        created_at=state.tick,
    )
    state.bases.append(base)
    state.territories.append(TerritoryInfluence(position=position, faction="player",
                                                strength=80, radius=config.influence_radius))
    state.resources -= config.cost
    state.add_log("production", f"{config.name} constructed at {_fmt(position)}", position)
    return state

def produce_unit(state: SimulationState, base_id: str, unit_type: str, rng: DRNG) -> SimulationState:
    state = copy.deepcopy(state)
    base = next((b for b in state.bases if b.id == base_id), None)
    if base is None:
        state.add_log("warning", f"Unknown base: {base_id}")
        return state
    template = UNIT_TEMPLATES.get(unit_type)
    if template is None:
        state.add_log("warning", f"Unknown unit type: {unit_type}")
        return state
    if state.resources < template.cost:
        state.add_log("warning", f"Insufficient resources for {template.name}.")
        return state

    count = sum(1 for u in state.units if u.template_type == unit_type)
    unit = Unit(
        id=rng.uuid4(),
        template_type=unit_type,
        name=f"{template.name} {count + 1}",
        position=base.position,
        faction="player",
        health=UNIT_HEALTH,
        max_health=UNIT_HEALTH,
        status="idle",
        parent_base_id=base.id,
        created_at=state.tick,
    )
    state.units.append(unit)
    state.resources -= template.cost
    state.add_log("production", f"{unit.name} produced at {base.name}", base.position)
    return state

def deploy_units(state: SimulationState, unit_ids: Sequence[str],
                 destination: Coordinates) -> SimulationState:
    state = copy.deepcopy(state)
    wanted = set(unit_ids)
    moving = [u for u in state.units if u.id in wanted]
    if not moving:
        state.add_log("warning", "No matching units to deploy.")
        return state

    for u in moving:
        u.destination = destination
        u.status = "moving"
        u.parent_base_id = None
    state.add_log("movement", f"Deploying {len(moving)} units to {_fmt(destination)}", destination)
    return state

def move_unit(state: SimulationState, unit_id: str, destination: Coordinates) -> SimulationState:
    state = copy.deepcopy(state)
    for u in state.units:
        if u.id == unit_id:
            u.destination = destination
            u.status = "moving"
            u.parent_base_id = None
    return state

def fire_missile(state: SimulationState, base_id: str, missile_type: str, target: Coordinates,
                 rng: DRNG, registry: Optional[CountryRegistry] = None) -> SimulationState:
    state = copy.deepcopy(state)
    base = next((b for b in state.bases if b.id == base_id), None)
    if base is None:
        state.add_log("warning", f"Unknown launch base: {base_id}")
        return state
    template = MISSILE_TEMPLATES.get(missile_type)
    if template is None:
        state.add_log("warning", f"Unknown missile type: {missile_type}")
        return state
    if state.resources < template.cost:
        state.add_log("warning", f"Insufficient resources for {template.name}")
        return state

    state.missiles_in_flight.append(MissileInFlight(
        id=rng.uuid4(),
        start_position=base.position,
        target_position=target,
        missile_type=template.type,
        launch_tick=state.tick,
        arrival_tick=state.tick + int(template.flight_time * TICKS_PER_SECOND),
    ))
    state.resources -= template.cost

    country = registry.find_country_at_position(target.latitude, target.longitude) if registry else None
    if country and country.id not in state.struck_country_ids:
        state.struck_country_ids.append(country.id)
    state.add_log("combat", f"{template.name} launched at {country.name if country else 'target location'}!",
                  target)
    return state

def set_speed(state: SimulationState, speed: int) -> SimulationState:
    state = copy.deepcopy(state)
    state.speed = max(0, min(MAX_SPEED, int(speed)))
    return state
