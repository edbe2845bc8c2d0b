from dataclasses import dataclass, replace
from typing import Dict, List
import structlog
from .model import DiplomaticStatus, NationRelation

logger = structlog.get_logger()

OPINION_MODIFIERS: Dict[str, float] = {
    "border_violation": -20,
    "missile_strike": -50,
    "unit_killed": -10,
    "base_destroyed": -30,
    "peace_offer": 15,
}

WAR_TRIGGER_DELTA = -40

@dataclass
class OpinionChange:
    relation: NationRelation
    status_changed: bool
    new_status: DiplomaticStatus

def create_nation_relation(nation_id: str, nation_name: str) -> NationRelation:
    return NationRelation(nation_id=nation_id, nation_name=nation_name)

def status_from_opinion(relation: NationRelation) -> DiplomaticStatus:
    # War is sticky; only accept_peace ends it
    if relation.status == "war":
        return "war"
    if relation.opinion <= -75:
        return "hostile"
    if relation.opinion <= -40:
        return "tense"
    if relation.opinion >= 50:
        return "allied"
    return "peace"

def modify_opinion(relation: NationRelation, delta: float, reason: str) -> OpinionChange:
    """Apply an opinion delta clamped to [-100, 100].

    A single delta of -40 or worse is a catastrophic act and forces war.
    """
    logger.debug("Opinion modified", nation=relation.nation_id, delta=delta, reason=reason)
    old_status = relation.status
    updated = replace(relation, opinion=max(-100, min(100, relation.opinion + delta)))

    if delta <= WAR_TRIGGER_DELTA and old_status != "war":
        updated.status = "war"
        updated.war_score = 0
        return OpinionChange(relation=updated, status_changed=True, new_status="war")

    updated.status = status_from_opinion(updated)
    return OpinionChange(relation=updated, status_changed=old_status != updated.status,
                         new_status=updated.status)

def declare_war(relation: NationRelation) -> NationRelation:
    return replace(relation, status="war", opinion=-100, war_score=0, treaties_active=[])

def can_request_peace(relation: NationRelation) -> bool:
    return relation.status == "war" and (relation.war_score >= 50 or relation.opinion >= -30)

def accept_peace(relation: NationRelation) -> NationRelation:
    return replace(relation, status="tense", war_score=0,
                   opinion=max(-50, relation.opinion + 20))

def update_war_score(relation: NationRelation, kills: int, losses: int,
                     bases_destroyed: int, bases_lost: int) -> NationRelation:
    change = kills * 5 + bases_destroyed * 15 - losses * 3 - bases_lost * 10
    return replace(relation, war_score=max(0, min(100, relation.war_score + change)))

def get_opinion_change(event: str) -> float:
    return OPINION_MODIFIERS.get(event, 0)

def get_nations_at_war(relations: Dict[str, NationRelation]) -> List[str]:
    """Nations that will retaliate (at war or hostile)."""
    return [r.nation_id for r in relations.values() if r.status in ("war", "hostile")]

def get_diplomatic_summary(relations: Dict[str, NationRelation]) -> Dict[str, int]:
    values = list(relations.values())
    return {
        "at_war": sum(1 for r in values if r.status == "war"),
        "hostile": sum(1 for r in values if r.status == "hostile"),
        "tense": sum(1 for r in values if r.status == "tense"),
        "peaceful": sum(1 for r in values if r.status == "peace"),
        "allied": sum(1 for r in values if r.status == "allied"),
    }
