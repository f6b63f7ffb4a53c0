from __future__ import annotations

import pytest
from fastapi import HTTPException

from ojtdb.apps.library import models as library_models
from ojtdb.apps.training import models as training_models
from ojtdb.apps.training import services as training_services


def _seed(db_session):
    trainee = training_models.Trainee(name="Sam")
    tasks = [library_models.Task(name="Crimping"), library_models.Task(name="Stripping")]
    topic = library_models.FacilityTopic(code="CHEM", title="Chemical Handling")
    db_session.add_all([trainee, topic, *tasks])
    db_session.commit()
    return trainee, tasks, topic


def test_materialize_session_creates_session_and_blocks(db_session):
    trainee, tasks, topic = _seed(db_session)

    session, created = training_services.materialize_session(
        db_session,
        plan_day_id="day-1",
        trainee_id=trainee.id,
        trainer_name="Morgan",
        facility_topic_id=topic.id,
        task_ids=[t.id for t in tasks],
    )
    db_session.commit()

    assert created is True
    assert session.plan_day_id == "day-1"
    assert session.competency_attested is False
    assert [b.task_id for b in session.task_blocks] == [t.id for t in tasks]
    assert [b.sort_order for b in session.task_blocks] == [0, 1]
    assert not any(b.step1 or b.step2 or b.step3 or b.step4 for b in session.task_blocks)


def test_materialize_session_is_insert_if_absent(db_session):
    trainee, tasks, topic = _seed(db_session)

    first, first_created = training_services.materialize_session(
        db_session,
        plan_day_id="day-1",
        trainee_id=trainee.id,
        trainer_name="Morgan",
        facility_topic_id=topic.id,
        task_ids=[tasks[0].id],
    )
    second, second_created = training_services.materialize_session(
        db_session,
        plan_day_id="day-1",
        trainee_id=trainee.id,
        trainer_name="Someone Else",
        facility_topic_id=None,
        task_ids=[t.id for t in tasks],
    )
    db_session.commit()

    assert first_created is True
    assert second_created is False
    assert second.id == first.id
    assert second.trainer_name == "Morgan"
    assert db_session.query(training_models.DailySession).count() == 1
    assert db_session.query(training_models.DailyTaskBlock).count() == 1


def test_get_session_for_plan_day(db_session):
    trainee, tasks, _ = _seed(db_session)
    training_services.materialize_session(
        db_session,
        plan_day_id="day-2",
        trainee_id=trainee.id,
        trainer_name="Morgan",
        facility_topic_id=None,
        task_ids=[],
    )
    db_session.commit()

    assert training_services.get_session_for_plan_day(db_session, "day-2") is not None
    assert training_services.get_session_for_plan_day(db_session, "day-3") is None


def test_require_trainee(db_session):
    trainee, _, _ = _seed(db_session)

    assert training_services.require_trainee(db_session, trainee.id).name == "Sam"
    with pytest.raises(HTTPException) as exc:
        training_services.require_trainee(db_session, "missing")
    assert exc.value.status_code == 404
