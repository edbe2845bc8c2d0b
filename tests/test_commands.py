"""Player commands: validation is reported through the journal, never raised."""
import pytest
from battlespace import commands
from battlespace.countries import CountryRegistry
from battlespace.model import Coordinates, SimulationState
from battlespace.rng import DRNG

NEW_YORK = Coordinates(40.7, -74.0)


@pytest.fixture(scope="module")
def world() -> CountryRegistry:
    return CountryRegistry.load_default()


def _warnings(state):
    return [e for e in state.logs if e.category == "warning"]


def test_new_york_scenario(world):
    rng = DRNG(1)
    state = SimulationState(resources=1_000_000_000_000)

    state = commands.place_hq(state, NEW_YORK, rng, world)
    assert state.hq is not None
    assert state.hq.health == 1000
    assert state.home_country_id == "840"
    assert len(state.territories) == 1 and state.territories[0].strength == 100

    state = commands.place_base(state, "army", Coordinates(41.0, -75.0), rng, world)
    assert state.resources == 1_000_000_000_000 - 500
    army = state.bases[-1]
    assert army.type == "army" and army.health == 500 and army.name == "Army Base 1"
    assert state.territories[-1].radius == 75

    again = commands.place_hq(state, Coordinates(34.0, -118.0), rng, world)
    assert len(again.bases) == len(state.bases)
    assert again.logs[0].category == "warning"
    assert "HQ already placed" in again.logs[0].message


def test_commands_do_not_mutate_input(world):
    state = SimulationState()
    after = commands.place_hq(state, NEW_YORK, DRNG(1), world)
    assert state.bases == [] and state.logs == []
    assert len(after.bases) == 1


def test_base_requires_hq():
    state = commands.place_base(SimulationState(), "army", NEW_YORK, DRNG(1))
    assert state.bases == []
    assert len(_warnings(state)) == 1


def test_base_rejected_without_funds(home_state):
    home_state.resources = 100
    state = commands.place_base(home_state, "airforce", Coordinates(45, 6), DRNG(1))
    assert len(state.bases) == 1
    assert state.resources == 100
    assert "Insufficient resources" in state.logs[0].message


def test_unknown_types_rejected(home_state):
    rng = DRNG(1)
    assert "Unknown base type" in commands.place_base(home_state, "castle", Coordinates(45, 6), rng).logs[0].message
    assert "Unknown unit type" in commands.produce_unit(home_state, "hq-1", "dragon", rng).logs[0].message
    assert "Unknown base" in commands.produce_unit(home_state, "nope", "infantry", rng).logs[0].message
    assert "Unknown missile type" in commands.fire_missile(
        home_state, "hq-1", "railgun", Coordinates(0, 0), rng).logs[0].message


def test_produce_unit(home_state):
    state = commands.produce_unit(home_state, "hq-1", "infantry", DRNG(1))
    unit = state.units[0]
    assert unit.template_type == "infantry"
    assert unit.position == state.bases[0].position
    assert unit.parent_base_id == "hq-1"
    assert unit.health == 100 and unit.status == "idle"
    assert state.resources == home_state.resources - 100
    assert state.logs[0].category == "production"


def test_deploy_units(home_state):
    rng = DRNG(1)
    state = commands.produce_unit(home_state, "hq-1", "armor", rng)
    state = commands.produce_unit(state, "hq-1", "fighter", rng)
    dest = Coordinates(45, 15)
    state = commands.deploy_units(state, [state.units[0].id], dest)
    assert state.units[0].status == "moving"
    assert state.units[0].destination == dest
    assert state.units[0].parent_base_id is None
    assert state.units[1].status == "idle"
    assert state.logs[0].category == "movement"

    state = commands.move_unit(state, state.units[1].id, dest)
    assert state.units[1].status == "moving"


def test_deploy_unknown_units_warns(home_state):
    state = commands.deploy_units(home_state, ["ghost"], Coordinates(45, 15))
    assert [e.message for e in _warnings(state)] == ["No matching units to deploy."]
    assert state.units == []


def test_fire_missile(home_state, registry):
    home_state.tick = 7
    state = commands.fire_missile(home_state, "hq-1", "cruise", Coordinates(45, 15), DRNG(1), registry)
    missile = state.missiles_in_flight[0]
    assert missile.launch_tick == 7
    assert missile.arrival_tick == 57
    assert state.resources == home_state.resources - 300
    assert state.struck_country_ids == ["840"]


def test_set_speed_clamped(home_state):
    assert commands.set_speed(home_state, 5).speed == 3
    assert commands.set_speed(home_state, -1).speed == 0
    assert commands.set_speed(home_state, 2).speed == 2
