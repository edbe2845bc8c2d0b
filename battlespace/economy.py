from typing import Sequence
from .countries import get_country_power
from .model import Base, SimulationState

BASE_INCOME = 10_000_000
TERRITORY_INCOME_PER_POWER = 500_000
UNIT_UPKEEP = 10_000
BASE_UPKEEP = 100_000

# Static per-base yield shown alongside the treasury
BASE_YIELD = {"hq": 10, "army": 5, "navy": 5, "airforce": 5, "intelligence": 3}

def calculate_income(bases: Sequence[Base]) -> int:
    return sum(BASE_YIELD.get(b.type, 0) for b in bases)

def net_income(state: SimulationState) -> float:
    """Per-tick treasury change: HQ and captured-territory income minus upkeep."""
    speed = state.speed
    income = BASE_INCOME * speed if state.hq else 0
    for country_id in state.captured_country_ids:
        income += get_country_power(country_id) * TERRITORY_INCOME_PER_POWER * speed

    units = sum(1 for u in state.units if u.faction == "player")
    bases = sum(1 for b in state.bases if b.faction == "player")
    return income - units * UNIT_UPKEEP * speed - bases * BASE_UPKEEP * speed
