from __future__ import annotations

import pytest
from fastapi import HTTPException

from ojtdb.apps.audit import models as audit_models
from ojtdb.apps.plans import day_runner, ledger
from ojtdb.apps.plans import models as plan_models
from ojtdb.apps.plans import services as plan_services
from ojtdb.apps.training import models as training_models


def _start(db_session, plan, day_number):
    outcome = day_runner.start_day(db_session, plan_id=plan.id, day_number=day_number)
    db_session.commit()
    return outcome


def _complete(db_session, plan, day_number):
    outcome = day_runner.complete_day(db_session, plan_id=plan.id, day_number=day_number)
    db_session.commit()
    return outcome


def _run_day(db_session, plan, day_number):
    _start(db_session, plan, day_number)
    return _complete(db_session, plan, day_number)


def _ledger_rows(db_session):
    return db_session.query(plan_models.TraineeTopicKnowledge).populate_existing().all()


def test_start_day_materializes_session_and_moves_plan_in_progress(db_session, library, make_plan):
    plan = make_plan()

    outcome = _start(db_session, plan, 1)

    assert outcome.created is True
    assert outcome.day.status == plan_models.PlanDayStatus.IN_PROGRESS
    assert plan_services.get_plan_or_404(db_session, plan.id).status == plan_models.TrainingPlanStatus.IN_PROGRESS

    session = outcome.session
    assert session.plan_day_id == outcome.day.id
    assert session.trainee_id == library.alex.id
    assert session.trainer_name == "Jordan"
    assert session.facility_topic_id == library.ppe.id
    assert len(session.task_blocks) == 1
    block = session.task_blocks[0]
    assert block.task_id == library.solder.id
    assert (block.step1, block.step2, block.step3, block.step4) == (False, False, False, False)


def test_start_day_twice_returns_same_session(db_session, make_plan):
    plan = make_plan()

    first = _start(db_session, plan, 1)
    second = _start(db_session, plan, 1)

    assert second.created is False
    assert second.session.id == first.session.id
    assert db_session.query(training_models.DailySession).count() == 1
    assert db_session.query(training_models.DailyTaskBlock).count() == 1


def test_start_day_without_topics_leaves_session_topic_empty(db_session, make_plan):
    plan = make_plan(topic_configs=[], task_ids=[])

    outcome = _start(db_session, plan, 1)

    assert outcome.session.facility_topic_id is None
    assert outcome.session.task_blocks == []


def test_start_day_uses_first_topic_of_that_day(db_session, library, make_plan):
    plan = make_plan(
        topic_configs=[
            {"topic_id": library.ppe.id, "days": [1]},
            {"topic_id": library.fod.id},
        ]
    )
    _run_day(db_session, plan, 1)

    outcome = _start(db_session, plan, 2)

    assert outcome.session.facility_topic_id == library.fod.id


def test_start_day_while_previous_day_in_progress(db_session, make_plan):
    plan = make_plan()
    _start(db_session, plan, 1)

    outcome = _start(db_session, plan, 2)

    assert outcome.created is True
    assert outcome.day.status == plan_models.PlanDayStatus.IN_PROGRESS
    day1 = plan_services.get_plan_day_or_404(db_session, plan_id=plan.id, day_number=1)
    assert day1.status == plan_models.PlanDayStatus.IN_PROGRESS
    assert db_session.query(training_models.DailySession).count() == 2


def test_start_later_day_on_fresh_plan_moves_plan_in_progress(db_session, make_plan):
    plan = make_plan()

    outcome = _start(db_session, plan, 3)

    assert outcome.created is True
    assert outcome.day.day_number == 3
    assert plan_services.get_plan_or_404(db_session, plan.id).status == plan_models.TrainingPlanStatus.IN_PROGRESS
    assert db_session.query(training_models.DailySession).count() == 1


def test_start_day_of_cancelled_plan_conflicts(db_session, make_plan):
    plan = make_plan()
    plan_services.update_plan_status(
        db_session, plan_id=plan.id, new_status=plan_models.TrainingPlanStatus.CANCELLED
    )
    db_session.commit()

    with pytest.raises(HTTPException) as exc:
        day_runner.start_day(db_session, plan_id=plan.id, day_number=1)

    assert exc.value.status_code == 409


def test_start_unknown_plan_or_day_is_not_found(db_session, make_plan):
    plan = make_plan()

    with pytest.raises(HTTPException) as exc:
        day_runner.start_day(db_session, plan_id="missing", day_number=1)
    assert exc.value.status_code == 404
    assert exc.value.detail == "Training plan not found."

    with pytest.raises(HTTPException) as exc:
        day_runner.start_day(db_session, plan_id=plan.id, day_number=5)
    assert exc.value.status_code == 404
    assert exc.value.detail == "Plan day not found."


def test_complete_pending_day_conflicts(db_session, make_plan):
    plan = make_plan()

    with pytest.raises(HTTPException) as exc:
        day_runner.complete_day(db_session, plan_id=plan.id, day_number=1)

    assert exc.value.status_code == 409
    day = plan_services.get_plan_day_or_404(db_session, plan_id=plan.id, day_number=1)
    assert day.status == plan_models.PlanDayStatus.PENDING


def test_completing_days_one_to_three_never_touches_ledger(db_session, make_plan):
    plan = make_plan()

    for day_number in (1, 2, 3):
        outcome = _run_day(db_session, plan, day_number)
        assert outcome.knowledge_updates == 0
        assert outcome.day.status == plan_models.PlanDayStatus.COMPLETED
        assert outcome.day.completed_at is not None
        assert _ledger_rows(db_session) == []

    assert plan_services.get_plan_or_404(db_session, plan.id).status == plan_models.TrainingPlanStatus.IN_PROGRESS


def test_completing_day_four_commits_target_levels_and_closes_plan(db_session, library, make_plan):
    plan = make_plan(
        topic_configs=[
            {"topic_id": library.ppe.id, "target_level": "advanced"},
            {"topic_id": library.fod.id, "target_level": "basic", "days": [4]},
        ]
    )
    for day_number in (1, 2, 3):
        _run_day(db_session, plan, day_number)

    outcome = _run_day(db_session, plan, 4)

    assert outcome.knowledge_updates == 2
    assert outcome.plan.status == plan_models.TrainingPlanStatus.COMPLETED
    assert outcome.plan.completed_at is not None

    day4 = plan_services.get_plan_day_or_404(db_session, plan_id=plan.id, day_number=4)
    ppe = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.ppe.id)
    fod = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.fod.id)
    assert ppe.current_level == plan_models.KnowledgeLevel.ADVANCED
    assert fod.current_level == plan_models.KnowledgeLevel.BASIC
    assert ppe.source_plan_day_id == day4.id
    assert ppe.assessed_at is not None


def test_completing_day_four_with_earlier_day_open_keeps_plan_open(db_session, make_plan):
    plan = make_plan()
    _run_day(db_session, plan, 1)
    _start(db_session, plan, 2)
    _run_day(db_session, plan, 3)
    _start(db_session, plan, 4)

    outcome = _complete(db_session, plan, 4)

    assert outcome.knowledge_updates == 1
    assert outcome.plan.status == plan_models.TrainingPlanStatus.IN_PROGRESS


def test_complete_already_completed_day_is_idempotent(db_session, library, make_plan):
    plan = make_plan()
    for day_number in (1, 2, 3, 4):
        _run_day(db_session, plan, day_number)
    entry = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.ppe.id)
    stamped = entry.assessed_at
    day4 = plan_services.get_plan_day_or_404(db_session, plan_id=plan.id, day_number=4)
    completed_at = day4.completed_at

    outcome = _complete(db_session, plan, 4)

    assert outcome.knowledge_updates == 0
    assert outcome.day.completed_at == completed_at
    entry = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.ppe.id)
    assert entry.assessed_at == stamped
    assert len(_ledger_rows(db_session)) == 1


def test_second_plan_updates_ledger_in_place(db_session, library, make_plan):
    first = make_plan()
    for day_number in (1, 2, 3, 4):
        _run_day(db_session, first, day_number)

    second = make_plan(
        title="Soldering II",
        topic_configs=[{"topic_id": library.ppe.id, "target_level": "advanced"}],
    )
    for day_number in (1, 2, 3, 4):
        _run_day(db_session, second, day_number)

    rows = _ledger_rows(db_session)
    assert len(rows) == 1
    assert rows[0].current_level == plan_models.KnowledgeLevel.ADVANCED

    # the first plan's baseline snapshot is untouched by later ledger writes
    first_day = plan_services.get_plan_day_or_404(db_session, plan_id=first.id, day_number=1)
    second_day = plan_services.get_plan_day_or_404(db_session, plan_id=second.id, day_number=1)
    assert first_day.topics[0].baseline_level == plan_models.KnowledgeLevel.NONE
    assert second_day.topics[0].baseline_level == plan_models.KnowledgeLevel.INTERMEDIATE


def test_full_scenario_walkthrough(db_session, library, make_plan):
    plan = make_plan()
    assert plan.status == plan_models.TrainingPlanStatus.DRAFT

    started = _start(db_session, plan, 1)
    assert started.created is True
    assert plan_services.get_plan_or_404(db_session, plan.id).status == plan_models.TrainingPlanStatus.IN_PROGRESS
    assert [b.task_id for b in started.session.task_blocks] == [library.solder.id]

    for day_number in (1, 2, 3):
        if day_number > 1:
            _start(db_session, plan, day_number)
        _complete(db_session, plan, day_number)
        assert _ledger_rows(db_session) == []

    _start(db_session, plan, 4)
    finished = _complete(db_session, plan, 4)

    entry = ledger.get_entry(db_session, trainee_id=library.alex.id, topic_id=library.ppe.id)
    assert entry.current_level == plan_models.KnowledgeLevel.INTERMEDIATE
    assert finished.plan.status == plan_models.TrainingPlanStatus.COMPLETED
    assert db_session.query(training_models.DailySession).count() == 4


def test_day_lifecycle_writes_audit_trail(db_session, make_plan):
    plan = make_plan()
    for day_number in (1, 2, 3, 4):
        _run_day(db_session, plan, day_number)

    actions = [
        (e.entity_type, e.action)
        for e in db_session.query(audit_models.AuditEvent)
        .filter(audit_models.AuditEvent.correlation_id == plan.id)
        .all()
    ]
    assert actions.count((day_runner.DAY_ENTITY, "start")) == 4
    assert actions.count((day_runner.DAY_ENTITY, "complete")) == 4
    assert (plan_services.PLAN_ENTITY, "create") in actions
