from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
from .geo import distance
from .model import AIEnemyState, Base, Coordinates, SimulationState, Unit

BORDER_RADIUS_KM = 500.0
STRIKE_RADIUS_KM = 100.0
REACTION_COOLDOWN_TICKS = 50

@dataclass
class AIReaction:
    type: str  # increase_alert | reveal_bases
    message: str
    alert_level: Optional[str] = None
    revealed_base_ids: List[str] = field(default_factory=list)

def check_border_violation(player_units: Sequence[Unit], enemy_bases: Sequence[Base],
                           radius_km: float = BORDER_RADIUS_KM) -> Tuple[Optional[Base], Optional[Unit]]:
    """First (base, unit) pair where a player unit is inside enemy territory."""
    for unit in player_units:
        if unit.faction != "player":
            continue
        for base in enemy_bases:
            if distance(unit.position, base.position) < radius_km:
                return base, unit
    return None, None

def check_missile_strikes(explosions: Sequence[Coordinates], enemy_bases: Sequence[Base],
                          radius_km: float = STRIKE_RADIUS_KM) -> List[Base]:
    struck: List[Base] = []
    for pos in explosions:
        for base in enemy_bases:
            if distance(pos, base.position) < radius_km and base not in struck:
                struck.append(base)
    return struck

def calculate_ai_reaction(ai: AIEnemyState, border_violation: bool, struck_bases: Sequence[Base],
                          current_tick: int) -> List[AIReaction]:
    reactions: List[AIReaction] = []
    if current_tick - ai.last_reaction_tick < REACTION_COOLDOWN_TICKS:
        return reactions

    if border_violation and ai.alert_level == "peace":
        reactions.append(AIReaction(
            type="increase_alert", alert_level="vigilant",
            message="ENEMY ALERT: Border incursion detected! Enemy forces mobilizing."))
        reactions.append(AIReaction(
            type="reveal_bases", message="Enemy base locations detected on radar.",
            revealed_base_ids=[b.id for b in ai.bases[:3]]))

    if struck_bases:
        reactions.append(AIReaction(
            type="reveal_bases",
            message="CRITICAL: Enemy infrastructure struck! All enemy positions now visible.",
            revealed_base_ids=[b.id for b in ai.bases]))
        reactions.append(AIReaction(
            type="increase_alert", alert_level="war",
            message="ENEMY DECLARATION: War status initiated. Expect retaliation."))
    return reactions

def has_intelligence_capability(player_bases: Sequence[Base]) -> bool:
    return any(b.type == "intelligence" and b.faction == "player" for b in player_bases)

def get_visible_enemy_entities(enemy_bases: Sequence[Base], enemy_units: Sequence[Unit],
                               revealed_base_ids: Sequence[str],
                               player_has_intel: bool) -> Tuple[List[Base], List[Unit]]:
    revealed = set(revealed_base_ids)
    visible_bases = [b for b in enemy_bases if b.id in revealed]
    visible_units = list(enemy_units) if player_has_intel else []
    return visible_bases, visible_units

def get_visible_enemy_bases(state: SimulationState) -> List[Base]:
    bases, _ = get_visible_enemy_entities(state.ai_enemy.bases, state.ai_enemy.units,
                                          state.ai_enemy.revealed_base_ids,
                                          has_intelligence_capability(state.bases))
    return bases

def get_visible_enemy_units(state: SimulationState) -> List[Unit]:
    _, units = get_visible_enemy_entities(state.ai_enemy.bases, state.ai_enemy.units,
                                          state.ai_enemy.revealed_base_ids,
                                          has_intelligence_capability(state.bases))
    return units
