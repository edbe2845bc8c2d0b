from battlespace.diplomacy import (
    accept_peace,
    can_request_peace,
    create_nation_relation,
    declare_war,
    get_diplomatic_summary,
    get_nations_at_war,
    get_opinion_change,
    modify_opinion,
    update_war_score,
)


def test_zero_delta_is_idempotent():
    rel = create_nation_relation("840", "Testland")
    rel.opinion = -35
    for _ in range(5):
        change = modify_opinion(rel, 0, "nothing")
        assert change.relation == rel
        assert not change.status_changed


def test_opinion_stays_clamped():
    rel = create_nation_relation("840", "Testland")
    for delta in [-30, -30, -30, -30, 90, 90, 90, -5, -20]:
        rel = modify_opinion(rel, delta, "test").relation
        assert -100 <= rel.opinion <= 100


def test_status_thresholds():
    rel = create_nation_relation("840", "Testland")
    rel = modify_opinion(rel, -20, "border violation").relation
    assert rel.status == "peace"
    rel = modify_opinion(rel, -20, "border violation").relation
    assert rel.status == "tense"  # -40
    rel = modify_opinion(rel, -20, "border violation").relation
    rel = modify_opinion(rel, -20, "border violation").relation
    assert rel.status == "hostile"  # -80


def test_catastrophic_delta_forces_war():
    rel = create_nation_relation("840", "Testland")
    change = modify_opinion(rel, get_opinion_change("missile_strike"), "missile strike")
    assert change.status_changed
    assert change.new_status == "war"
    assert change.relation.opinion == -50


def test_war_is_sticky_under_positive_deltas():
    rel = declare_war(create_nation_relation("840", "Testland"))
    for _ in range(20):
        change = modify_opinion(rel, 15, "peace offer")
        rel = change.relation
        assert rel.status == "war"
    assert rel.opinion == 100


def test_peace_negotiation():
    rel = declare_war(create_nation_relation("840", "Testland"))
    assert not can_request_peace(rel)
    rel = update_war_score(rel, kills=10, losses=0, bases_destroyed=0, bases_lost=0)
    assert rel.war_score == 50
    assert can_request_peace(rel)

    rel = accept_peace(rel)
    assert rel.status == "tense"
    assert rel.war_score == 0
    assert rel.opinion == -50  # max(-50, -100 + 20)


def test_war_score_clamped():
    rel = declare_war(create_nation_relation("840", "Testland"))
    assert update_war_score(rel, 0, 5, 0, 2).war_score == 0
    assert update_war_score(rel, 0, 0, 10, 0).war_score == 100


def test_summary_and_war_list():
    relations = {
        "1": create_nation_relation("1", "A"),
        "2": declare_war(create_nation_relation("2", "B")),
        "3": create_nation_relation("3", "C"),
    }
    relations["3"].status = "hostile"
    assert get_nations_at_war(relations) == ["2", "3"]
    summary = get_diplomatic_summary(relations)
    assert summary == {"at_war": 1, "hostile": 1, "tense": 0, "peaceful": 1, "allied": 0}
