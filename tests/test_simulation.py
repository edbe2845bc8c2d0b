"""Tick-level scenarios on the small fixture world."""
from battlespace import commands
from battlespace.model import Coordinates, MissileInFlight, NationRelation
from battlespace.rng import DRNG
from battlespace.simulation import run_tick
from conftest import ScriptedRNG, make_base, make_unit


def test_paused_state_is_unchanged(home_state, registry):
    home_state.speed = 0
    assert run_tick(home_state, DRNG(1), registry) is home_state


def test_tick_advances_and_pays_income(home_state, registry):
    after = run_tick(home_state, DRNG(1), registry)
    assert after.tick == 1
    # HQ income minus one base's upkeep
    assert after.resources == home_state.resources + 10_000_000 - 100_000
    assert home_state.tick == 0


def test_unit_arrives_in_one_tick(home_state, registry):
    dest = Coordinates(45.0, 5.001)
    home_state.units.append(make_unit("u1", lat=45.0, lng=5.0, status="moving", destination=dest))
    after = run_tick(home_state, DRNG(1), registry)
    unit = after.units[0]
    assert unit.status == "idle"
    assert unit.destination is None
    assert unit.position == dest


def test_unit_steps_toward_destination(home_state, registry):
    home_state.speed = 2
    home_state.units.append(make_unit("u1", lat=45.0, lng=5.0, status="moving",
                                      destination=Coordinates(45.0, 6.0)))
    after = run_tick(home_state, DRNG(1), registry)
    assert abs(after.units[0].position.longitude - 5.02) < 1e-9
    assert after.units[0].status == "moving"


def test_entering_power_five_country_spawns_defenders(home_state, registry):
    home_state.units.append(make_unit("u1", lat=45.0, lng=9.995, status="moving",
                                      destination=Coordinates(45.0, 10.5)))
    # Mid-cell draws put every garrison well beyond engagement range
    after = run_tick(home_state, ScriptedRNG(default=0.5), registry)

    assert after.occupied_country_ids == ["840"]
    bases = [b for b in after.ai_enemy.bases if b.id.startswith("defender-840-")]
    assert len(bases) == 6
    garrisons = {b.id: [u for u in after.ai_enemy.units
                        if u.parent_base_id == b.id and u.status == "defending"] for b in bases}
    assert all(len(units) == 6 for units in garrisons.values())
    assert len(after.ai_enemy.units) == 36
    assert after.units[0].health == 100.0
    assert set(after.ai_enemy.revealed_base_ids) >= {b.id for b in bases}
    assert after.ai_enemy.alert_level in ("vigilant", "hostile", "war")
    assert any("DEFENDERS DETECTED" in e.message for e in after.logs)
    assert any("Forces entered Testland" in e.message for e in after.logs)

    relation = after.diplomacy["840"]
    assert relation.nation_name == "Testland"
    assert relation.opinion <= -20


def test_no_second_spawn_for_occupied_country(home_state, registry):
    home_state.units.append(make_unit("u1", lat=45.0, lng=9.995, status="moving",
                                      destination=Coordinates(45.0, 10.5)))
    rng = DRNG(5)
    state = run_tick(home_state, rng, registry)
    spawned = len(state.ai_enemy.bases)
    state = run_tick(state, rng, registry)
    assert len([b for b in state.ai_enemy.bases if b.id.endswith("-hq")]) == 1
    assert len(state.ai_enemy.bases) <= spawned


def test_unit_produced_abroad_occupies_once(home_state, registry):
    home_state.bases.append(make_base("b-abroad", "army", 45.0, 15.0))
    home_state.units.append(make_unit("u1", lat=45.0, lng=15.0, parent_base_id="b-abroad"))
    rng = ScriptedRNG(default=0.5)
    state = run_tick(home_state, rng, registry)
    assert state.occupied_country_ids == ["840"]
    assert len(state.ai_enemy.bases) == 6

    state.ai_enemy.bases = []
    state.ai_enemy.units = []
    state = run_tick(state, rng, registry)
    assert state.ai_enemy.bases == []
    assert state.ai_enemy.units == []


def test_captured_country_gets_no_new_garrison(home_state, registry):
    home_state.units.append(make_unit("u1", lat=45.0, lng=15.0))
    home_state.captured_country_ids = ["840"]
    after = run_tick(home_state, ScriptedRNG(default=0.5), registry)
    assert after.ai_enemy.bases == []
    assert not any("DEFENDERS DETECTED" in e.message for e in after.logs)


def test_missile_lifecycle(home_state, registry):
    state = commands.fire_missile(home_state, "hq-1", "cruise", Coordinates(0, -30), DRNG(1), registry)
    rng = DRNG(2)
    for _ in range(49):
        state = run_tick(state, rng, registry)
    assert state.tick == 49
    assert len(state.missiles_in_flight) == 1
    assert state.explosions == []

    state = run_tick(state, rng, registry)
    assert state.missiles_in_flight == []
    assert len(state.explosions) == 1
    assert state.explosions[0].start_tick == 50
    assert state.explosions[0].duration == 30

    for _ in range(29):
        state = run_tick(state, rng, registry)
    assert state.tick == 79 and len(state.explosions) == 1
    state = run_tick(state, rng, registry)
    assert state.explosions == []


def test_missile_strike_damages_and_declares_war(home_state, registry):
    target = Coordinates(45.0, 15.0)
    home_state.ai_enemy.bases = [make_base("defender-840-hq", "hq", 45.0, 15.0, faction="ai", health=800),
                                 make_base("defender-840-base-0", "army", 45.0, 15.5, faction="ai", health=150)]
    home_state.ai_enemy.last_reaction_tick = -100
    home_state.missiles_in_flight.append(MissileInFlight(
        id="m1", start_position=Coordinates(45, 5), target_position=target,
        missile_type="cruise", launch_tick=0, arrival_tick=1))

    after = run_tick(home_state, ScriptedRNG(default=0.99), registry)
    hq = next(b for b in after.ai_enemy.bases if b.id == "defender-840-hq")
    assert hq.health == 600
    assert all(b.id != "defender-840-base-0" for b in after.ai_enemy.bases)
    assert after.ai_enemy.alert_level == "war"
    assert after.diplomacy["840"].status == "war"
    # Reveal covers what is still standing after the blast
    assert after.ai_enemy.revealed_base_ids == ["defender-840-hq"]


def test_conquest_when_last_defender_base_falls(home_state, registry):
    home_state.ai_enemy.bases = [make_base("defender-840-hq", "hq", 45.0, 15.0, faction="ai", health=10)]
    home_state.units.append(make_unit("u1", lat=45.0, lng=15.0))
    home_state.occupied_country_ids = ["840"]

    after = run_tick(home_state, ScriptedRNG(default=0.99), registry)
    assert after.ai_enemy.bases == []
    assert after.captured_country_ids == ["840"]
    assert any("CONQUERED" in e.message for e in after.logs)


def test_war_score_tracks_kills(home_state, registry):
    home_state.diplomacy["840"] = NationRelation(nation_id="840", nation_name="Testland", status="war",
                                                 opinion=-100)
    home_state.ai_enemy.bases = [make_base("defender-840-hq", "hq", 45.0, 18.0, faction="ai", health=800)]
    home_state.ai_enemy.units = [make_unit("e1", lat=45.0, lng=15.0, faction="ai", health=1,
                                           parent_base_id="defender-840-hq")]
    home_state.units.append(make_unit("u1", lat=45.0, lng=15.0))
    home_state.occupied_country_ids = ["840"]

    after = run_tick(home_state, ScriptedRNG(default=0.99), registry)
    assert all(u.id != "e1" for u in after.ai_enemy.units)
    assert after.diplomacy["840"].war_score == 5
