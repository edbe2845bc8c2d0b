import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from battlespace.config import settings
from battlespace.countries import CountryRegistry
from battlespace.diplomacy import get_diplomatic_summary, get_nations_at_war
from battlespace.economy import calculate_income, net_income
from battlespace.engine import Engine, Order
from battlespace.intel import get_visible_enemy_bases, get_visible_enemy_units, has_intelligence_capability
from battlespace.model import GameLog, SimulationState
from battlespace.territory import calculate_contested
from runtime.runner import TickRunner
from .schemas import (
    BaseRequest,
    CommandResponse,
    DeployRequest,
    EventsResponse,
    HQRequest,
    MissileRequest,
    ProduceRequest,
    SpeedRequest,
    StartRequest,
)

def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    renderer = structlog.dev.ConsoleRenderer() if fmt == "console" else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

configure_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

runner: Optional[TickRunner] = None
registry: Optional[CountryRegistry] = None

def _registry() -> CountryRegistry:
    global registry
    if registry is None:
        if settings.countries_path:
            registry = CountryRegistry.from_geojson(settings.countries_path)
        else:
            registry = CountryRegistry.load_default()
    return registry

async def _stop_runner():
    global runner
    if runner:
        await runner.stop()
        runner = None

@asynccontextmanager
async def lifespan(app: FastAPI):
    countries = _registry()
    logger.info("API ready", countries=len(countries.countries))
    try:
        yield
    finally:
        await _stop_runner()

app = FastAPI(title="Battlespace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _require_runner() -> TickRunner:
    if not runner:
        raise HTTPException(400, "Game not started")
    return runner

def _log_dict(e: GameLog) -> dict:
    return asdict(e)

async def _command(order: Order) -> CommandResponse:
    r = _require_runner()
    entries = await r.execute([order])
    s = r.engine.state
    return CommandResponse(tick=s.tick, resources=s.resources, logs=[_log_dict(e) for e in entries])

@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "message": "Battlespace API",
        "docs": "/docs",
        "version": "1.0"
    }

@app.post("/game/start")
async def start_game(req: StartRequest):
    """Start a new game, replacing any running one."""
    await _stop_runner()
    global runner
    seed = req.seed if req.seed is not None else settings.seed
    speed = req.speed if req.speed is not None else settings.initial_speed
    state = SimulationState(speed=speed, resources=settings.starting_resources)
    eng = Engine(seed=seed, initial_state=state, registry=_registry())
    runner = TickRunner(eng, tick_ms=settings.tick_ms)
    await runner.start()
    logger.info("Game started", seed=seed, speed=speed)
    return {"game_id": "local", "seed": seed, "speed": speed}

@app.get("/game/state")
async def get_state():
    """Player-side state snapshot; the opposing force is only visible through /game/intel."""
    s = await _require_runner().snapshot()
    data = asdict(s)
    data.pop("ai_enemy")
    data.pop("journal")
    data["alert_level"] = s.ai_enemy.alert_level
    data["net_income"] = net_income(s)
    data["base_yield"] = calculate_income(s.bases)
    return data

@app.get("/game/events")
async def get_events(since: int = 0, limit: int = 500):
    """Get journal entries since offset."""
    r = _require_runner()
    entries, next_offset = r.events.since(since, limit)
    return EventsResponse(next_offset=next_offset, events=[_log_dict(e) for e in entries])

@app.post("/game/speed")
async def set_speed(req: SpeedRequest):
    """Set simulation speed (0 pauses)."""
    r = _require_runner()
    await r.execute([Order(kind="set_speed", speed=req.speed)])
    return {"speed": r.engine.state.speed}

@app.post("/game/hq", response_model=CommandResponse)
async def place_hq(req: HQRequest):
    return await _command(Order(kind="place_hq", position=req.position.to_coordinates()))

@app.post("/game/bases", response_model=CommandResponse)
async def place_base(req: BaseRequest):
    return await _command(Order(kind="place_base", base_type=req.base_type,
                                position=req.position.to_coordinates()))

@app.post("/game/units/produce", response_model=CommandResponse)
async def produce_unit(req: ProduceRequest):
    return await _command(Order(kind="produce_unit", base_id=req.base_id, unit_type=req.unit_type))

@app.post("/game/units/deploy", response_model=CommandResponse)
async def deploy_units(req: DeployRequest):
    return await _command(Order(kind="deploy", unit_ids=list(req.unit_ids),
                                position=req.destination.to_coordinates()))

@app.post("/game/missiles", response_model=CommandResponse)
async def fire_missile(req: MissileRequest):
    return await _command(Order(kind="fire_missile", base_id=req.base_id,
                                missile_type=req.missile_type, position=req.target.to_coordinates()))

@app.get("/game/intel")
async def get_intel():
    """Opposing bases and units the player can currently see."""
    s = await _require_runner().snapshot()
    return {
        "alert_level": s.ai_enemy.alert_level,
        "has_intelligence": has_intelligence_capability(s.bases),
        "bases": [asdict(b) for b in get_visible_enemy_bases(s)],
        "units": [asdict(u) for u in get_visible_enemy_units(s)],
    }

@app.get("/game/diplomacy")
async def get_diplomacy():
    s = await _require_runner().snapshot()
    return {
        "relations": [asdict(r) for r in s.diplomacy.values()],
        "summary": get_diplomatic_summary(s.diplomacy),
        "at_war": get_nations_at_war(s.diplomacy),
    }

@app.get("/game/territory")
async def get_territory():
    s = await _require_runner().snapshot()
    contested: List[dict] = [asdict(c) for c in calculate_contested(s.territories)]
    return {
        "territories": [asdict(t) for t in s.territories],
        "contested": contested,
        "occupied_country_ids": s.occupied_country_ids,
        "captured_country_ids": s.captured_country_ids,
    }
