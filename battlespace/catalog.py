from dataclasses import dataclass
from typing import Dict, Tuple
from .model import BaseType, MissileType, UnitDomain

@dataclass(frozen=True)
class UnitTemplate:
    """Template defining characteristics of a unit type"""
    type: str
    domain: UnitDomain
    name: str
    symbol: str  # NATO symbol code
    speed: float  # km/h
    range: float  # km
    attack: float
    defense: float
    cost: float
    production_time: int  # ticks
    required_base: Tuple[BaseType, ...]

@dataclass(frozen=True)
class BaseTemplate:
    name: str
    cost: float
    influence_radius: float  # km
    symbol: str

@dataclass(frozen=True)
class MissileTemplate:
    type: MissileType
    name: str
    range: float  # km
    damage: float
    cost: float
    flight_time: float  # seconds

def _t(type, domain, name, symbol, speed, range, attack, defense, cost, production_time, required_base):
    return UnitTemplate(type, domain, name, symbol, speed, range, attack, defense, cost,
                        production_time, tuple(required_base))

# Land speeds carry a 10x boost so ground campaigns stay playable
UNIT_TEMPLATES: Dict[str, UnitTemplate] = {t.type: t for t in [
    _t("infantry", "land", "Infantry Battalion", "INF", 300, 500, 40, 50, 100, 2, ["army", "hq"]),
    _t("armor", "land", "Armored Division", "ARM", 600, 400, 80, 70, 300, 4, ["army"]),
    _t("artillery", "land", "Artillery Battery", "ART", 250, 50, 90, 20, 200, 3, ["army"]),
    _t("air_defense", "land", "Air Defense System", "ADA", 400, 200, 70, 40, 250, 3, ["army", "airforce"]),
    _t("engineer", "land", "Engineer Corps", "ENG", 350, 300, 20, 30, 150, 2, ["army", "hq"]),
    _t("fighter", "air", "Fighter Squadron", "FTR", 2000, 1500, 85, 50, 400, 4, ["airforce"]),
    _t("bomber", "air", "Bomber Wing", "BMB", 900, 3000, 95, 30, 500, 5, ["airforce"]),
    _t("transport", "air", "Transport Squadron", "TRP", 700, 4000, 5, 20, 200, 3, ["airforce"]),
    _t("helicopter", "air", "Attack Helicopter", "HEL", 280, 500, 75, 40, 300, 3, ["airforce", "army"]),
    _t("drone", "air", "UAV Squadron", "UAV", 400, 1000, 60, 10, 150, 2, ["airforce", "intelligence"]),
    _t("destroyer", "naval", "Destroyer", "DDG", 55, 8000, 70, 60, 400, 5, ["navy"]),
    _t("carrier", "naval", "Aircraft Carrier", "CVN", 55, 12000, 40, 80, 1000, 10, ["navy"]),
    _t("submarine", "naval", "Attack Submarine", "SSN", 45, 10000, 85, 50, 500, 6, ["navy"]),
    _t("frigate", "naval", "Frigate", "FFG", 50, 6000, 55, 50, 300, 4, ["navy"]),
    _t("amphibious", "naval", "Amphibious Assault Ship", "LHD", 40, 9000, 30, 60, 600, 7, ["navy"]),
    _t("special_forces", "special", "Special Forces Team", "SOF", 500, 2000, 70, 40, 200, 3, ["army", "intelligence"]),
    _t("cyber_team", "cyber", "Cyber Operations Team", "CYB", 0, 10000, 50, 80, 300, 4, ["intelligence"]),
    _t("intel_team", "special", "Intelligence Cell", "INT", 400, 3000, 10, 30, 150, 2, ["intelligence", "hq"]),
]}

BASE_CONFIG: Dict[str, BaseTemplate] = {
    "hq": BaseTemplate(name="Headquarters", cost=0, influence_radius=100, symbol="HQ"),
    "army": BaseTemplate(name="Army Base", cost=500, influence_radius=75, symbol="ARMY"),
    "navy": BaseTemplate(name="Naval Base", cost=600, influence_radius=100, symbol="NAVY"),
    "airforce": BaseTemplate(name="Air Force Base", cost=700, influence_radius=150, symbol="AF"),
    "intelligence": BaseTemplate(name="Intelligence Center", cost=400, influence_radius=200, symbol="INTEL"),
    "missile": BaseTemplate(name="Missile Silo", cost=800, influence_radius=50, symbol="MSL"),
}

MISSILE_TEMPLATES: Dict[str, MissileTemplate] = {
    "tactical": MissileTemplate(type="tactical", name="Tactical Missile", range=500, damage=50, cost=100, flight_time=3),
    "cruise": MissileTemplate(type="cruise", name="Cruise Missile", range=2500, damage=80, cost=300, flight_time=5),
    "icbm": MissileTemplate(type="icbm", name="ICBM", range=12000, damage=100, cost=1000, flight_time=8),
}

UNIT_HEALTH = 100.0

def get_domain(unit_type: str) -> UnitDomain:
    """Movement domain for a unit type; unknown types move as land units."""
    template = UNIT_TEMPLATES.get(unit_type)
    return template.domain if template else "land"
