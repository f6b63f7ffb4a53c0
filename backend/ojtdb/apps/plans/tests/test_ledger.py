from __future__ import annotations

import pytest
from fastapi import HTTPException

from ojtdb.apps.library import models as library_models
from ojtdb.apps.plans import ledger
from ojtdb.apps.plans import models as plan_models
from ojtdb.apps.plans import router as plans_router


def test_baseline_levels_default_to_none(db_session, library):
    levels = ledger.baseline_levels(
        db_session,
        trainee_id=library.alex.id,
        topic_ids=[library.ppe.id, library.fod.id, library.ppe.id],
    )

    assert levels == {
        library.ppe.id: plan_models.KnowledgeLevel.NONE,
        library.fod.id: plan_models.KnowledgeLevel.NONE,
    }
    assert ledger.baseline_levels(db_session, trainee_id=library.alex.id, topic_ids=[]) == {}


def test_commit_level_inserts_then_overwrites(db_session, library, make_plan):
    plan = make_plan()
    day3, day4 = plan.days[2], plan.days[3]

    ledger.commit_level(
        db_session,
        trainee_id=library.alex.id,
        topic_id=library.ppe.id,
        level=plan_models.KnowledgeLevel.BASIC,
        source_plan_day_id=day3.id,
    )
    ledger.commit_level(
        db_session,
        trainee_id=library.alex.id,
        topic_id=library.ppe.id,
        level=plan_models.KnowledgeLevel.ADVANCED,
        source_plan_day_id=day4.id,
    )
    db_session.commit()

    rows = (
        db_session.query(plan_models.TraineeTopicKnowledge)
        .populate_existing()
        .all()
    )
    assert len(rows) == 1
    assert rows[0].current_level == plan_models.KnowledgeLevel.ADVANCED
    assert rows[0].source_plan_day_id == day4.id

    levels = ledger.baseline_levels(db_session, trainee_id=library.alex.id, topic_ids=[library.ppe.id])
    assert levels[library.ppe.id] == plan_models.KnowledgeLevel.ADVANCED


def test_commit_level_may_lower_a_level(db_session, library, make_plan):
    plan = make_plan()
    for level in (plan_models.KnowledgeLevel.ADVANCED, plan_models.KnowledgeLevel.BASIC):
        ledger.commit_level(
            db_session,
            trainee_id=library.alex.id,
            topic_id=library.fod.id,
            level=level,
            source_plan_day_id=plan.days[3].id,
        )
    db_session.commit()

    entry = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.fod.id)
    assert entry.current_level == plan_models.KnowledgeLevel.BASIC


def test_trainee_knowledge_is_ordered_by_topic_code(db_session, library, make_plan):
    plan = make_plan()
    for topic in (library.ppe, library.itar, library.fod):
        ledger.commit_level(
            db_session,
            trainee_id=library.alex.id,
            topic_id=topic.id,
            level=plan_models.KnowledgeLevel.BASIC,
            source_plan_day_id=plan.days[3].id,
        )
    db_session.commit()

    rows = plans_router.get_trainee_knowledge(trainee_id=library.alex.id, db=db_session)

    assert [row.topic.code for row in rows] == ["FOD", "ITAR", "PPE"]


def test_trainee_knowledge_for_unknown_trainee_is_not_found(db_session, library):
    with pytest.raises(HTTPException) as exc:
        plans_router.get_trainee_knowledge(trainee_id="ghost", db=db_session)

    assert exc.value.status_code == 404


def test_get_entry_only_returns_assessed_topics(db_session, library, make_plan):
    plan = make_plan()
    ledger.commit_level(
        db_session,
        trainee_id=library.alex.id,
        topic_id=library.itar.id,
        level=plan_models.KnowledgeLevel.INTERMEDIATE,
        source_plan_day_id=plan.days[3].id,
    )
    db_session.commit()

    entry = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.itar.id)
    topic = db_session.query(library_models.FacilityTopic).filter_by(id=entry.topic_id).one()
    assert topic.code == "ITAR"
    assert ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.ppe.id) is None
