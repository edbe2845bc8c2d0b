from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional
import structlog

logger = structlog.get_logger()

Faction = Literal["player", "ai", "neutral"]
BaseType = Literal["hq", "army", "navy", "airforce", "intelligence", "missile"]
UnitDomain = Literal["land", "air", "naval", "cyber", "space", "special"]
UnitStatus = Literal["idle", "moving", "attacking", "defending", "retreating"]
MissileType = Literal["tactical", "cruise", "icbm"]
DiplomaticStatus = Literal["peace", "tense", "hostile", "war", "allied"]
AlertLevel = Literal["peace", "vigilant", "hostile", "war"]
LogCategory = Literal["info", "warning", "combat", "intel", "production", "movement"]

ALERT_LEVELS: List[str] = ["peace", "vigilant", "hostile", "war"]
MAX_LOGS = 100

@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float
    altitude: Optional[float] = None

@dataclass
class Base:
    id: str
    name: str
    type: BaseType
    position: Coordinates
    faction: Faction
    health: float
    max_health: float
    production_capacity: int
    influence_radius: float  # km
    created_at: int

@dataclass
class Unit:
    id: str
    template_type: str  # Key into UNIT_TEMPLATES
    name: str
    position: Coordinates
    faction: Faction
    health: float
    max_health: float
    status: UnitStatus = "idle"
    destination: Optional[Coordinates] = None
    parent_base_id: Optional[str] = None
    created_at: int = 0

@dataclass
class TerritoryInfluence:
    """Passive overlay, not consumed by combat."""
    position: Coordinates
    faction: Faction
    strength: float  # 0-100
    radius: float  # km

@dataclass
class MissileInFlight:
    id: str
    start_position: Coordinates
    target_position: Coordinates
    missile_type: MissileType
    launch_tick: int
    arrival_tick: int

@dataclass
class Explosion:
    id: str
    position: Coordinates
    start_tick: int
    duration: int = 30  # ticks

@dataclass
class GameLog:
    id: int
    tick: int
    category: LogCategory
    message: str
    position: Optional[Coordinates] = None

@dataclass
class NationRelation:
    nation_id: str
    nation_name: str
    status: DiplomaticStatus = "peace"
    opinion: float = 0  # -100 to 100
    war_score: float = 0  # 0 to 100, for peace negotiations
    treaties_active: List[str] = field(default_factory=list)

@dataclass
class AIEnemyState:
    bases: List[Base] = field(default_factory=list)
    units: List[Unit] = field(default_factory=list)
    alert_level: AlertLevel = "peace"
    revealed_base_ids: List[str] = field(default_factory=list)  # Bases the player can see
    last_reaction_tick: int = 0

@dataclass
class SimulationState:
    tick: int = 0
    speed: int = 1  # 0 = paused
    resources: float = 1_000_000_000_000
    bases: List[Base] = field(default_factory=list)  # player bases
    units: List[Unit] = field(default_factory=list)  # player units
    territories: List[TerritoryInfluence] = field(default_factory=list)
    ai_enemy: AIEnemyState = field(default_factory=AIEnemyState)
    diplomacy: Dict[str, NationRelation] = field(default_factory=dict)
    home_country_id: Optional[str] = None
    occupied_country_ids: List[str] = field(default_factory=list)  # player units present
    captured_country_ids: List[str] = field(default_factory=list)  # all defender bases destroyed
    struck_country_ids: List[str] = field(default_factory=list)
    missiles_in_flight: List[MissileInFlight] = field(default_factory=list)
    explosions: List[Explosion] = field(default_factory=list)
    logs: List[GameLog] = field(default_factory=list)  # newest first
    journal: List[GameLog] = field(default_factory=list, repr=False, compare=False)  # uncapped, drained by the engine
    next_log_id: int = 1
    last_retaliation_tick: int = 0

    @property
    def hq(self) -> Optional[Base]:
        for b in self.bases:
            if b.type == "hq" and b.faction == "player":
                return b
        return None

    def add_log(self, category: LogCategory, message: str,
                position: Optional[Coordinates] = None) -> GameLog:
        """Record a journal entry and mirror it to the process log."""
        entry = GameLog(id=self.next_log_id, tick=self.tick, category=category,
                        message=message, position=position)
        self.next_log_id += 1
        self.logs = [entry] + self.logs[:MAX_LOGS - 1]
        self.journal.append(entry)
        if category == "warning":
            logger.warning(message, tick=self.tick, category=category)
        else:
            logger.info(message, tick=self.tick, category=category)
        return entry

    def drain_journal(self) -> List[GameLog]:
        """Every entry recorded since the last drain, oldest first."""
        entries, self.journal = self.journal, []
        return entries
