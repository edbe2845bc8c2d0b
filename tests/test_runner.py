"""Tick loop driver and journal storage."""
import asyncio
import pytest
from battlespace.engine import Engine, Order
from battlespace.model import Coordinates, GameLog, SimulationState
from runtime.eventlog import EventLog
from runtime.runner import PAUSED_POLL_S, TickRunner


def _runner(registry, speed: int = 1, tick_ms: int = 1000) -> TickRunner:
    return TickRunner(Engine(3, SimulationState(speed=speed), registry), tick_ms=tick_ms)


def test_sleep_scales_with_speed(registry):
    r = _runner(registry, speed=2)
    assert r.sleep_s == 0.5
    r.engine.state.speed = 3
    assert r.sleep_s == pytest.approx(1 / 3)
    r.engine.state.speed = 0
    assert r.sleep_s == PAUSED_POLL_S


@pytest.mark.asyncio
async def test_no_tick_without_hq(registry):
    r = _runner(registry)
    await r.tick_once()
    assert r.engine.state.tick == 0


@pytest.mark.asyncio
async def test_queued_orders_applied_before_tick(registry):
    r = _runner(registry)
    await r.enqueue_orders([Order(kind="place_hq", position=Coordinates(45.0, 5.0))])
    entries = await r.tick_once()
    state = await r.snapshot()
    assert state.hq is not None
    assert state.tick == 1
    assert entries[0].message.startswith("HQ established")
    assert len(r.events) == 1


@pytest.mark.asyncio
async def test_paused_game_still_takes_orders(registry):
    r = _runner(registry, speed=0)
    entries = await r.execute([Order(kind="place_hq", position=Coordinates(45.0, 5.0))])
    assert entries[0].category == "info"
    await r.tick_once()
    assert r.engine.state.tick == 0
    assert r.engine.state.hq is not None


@pytest.mark.asyncio
async def test_loop_start_stop(registry):
    r = _runner(registry, tick_ms=10)
    await r.execute([Order(kind="place_hq", position=Coordinates(45.0, 5.0))])
    await r.start()
    assert r.running
    await asyncio.sleep(0.2)
    await r.stop()
    assert not r.running
    ticks = r.engine.state.tick
    assert ticks > 0
    await asyncio.sleep(0.05)
    assert r.engine.state.tick == ticks


def test_eventlog_paging():
    log = EventLog()
    entries = [GameLog(id=i, tick=0, category="info", message=str(i)) for i in range(1, 6)]
    assert log.append_many(entries[:3]) == (0, 2)
    assert log.append_many(entries[3:]) == (3, 4)

    chunk, nxt = log.since(1, limit=2)
    assert [e.id for e in chunk] == [2, 3]
    assert nxt == 3
    chunk, nxt = log.since(nxt)
    assert [e.id for e in chunk] == [4, 5]
    assert log.since(nxt) == ([], 5)
