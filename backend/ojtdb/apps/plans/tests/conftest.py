from __future__ import annotations

from types import SimpleNamespace

import pytest

from ojtdb.apps.library import models as library_models
from ojtdb.apps.plans import schemas as plan_schemas
from ojtdb.apps.plans import services as plan_services
from ojtdb.apps.training import models as training_models


@pytest.fixture()
def library(db_session):
    """
    A small shop: one department, a Solder Technician role with two required
    tasks and one optional task, three facility topics and one trainee.
    """
    dept = library_models.Department(name="Assembly")
    db_session.add(dept)
    db_session.flush()

    solder = library_models.Task(name="Hand soldering", department_id=dept.id)
    inspect = library_models.Task(name="Joint inspection", department_id=dept.id)
    rework = library_models.Task(name="Rework", department_id=dept.id)
    db_session.add_all([solder, inspect, rework])

    ppe = library_models.FacilityTopic(code="PPE", title="Personal Protective Equipment")
    fod = library_models.FacilityTopic(code="FOD", title="Foreign Object Debris")
    itar = library_models.FacilityTopic(code="ITAR", title="Export Control")
    db_session.add_all([ppe, fod, itar])

    role = library_models.Role(name="Solder Technician")
    db_session.add(role)
    db_session.flush()

    db_session.add_all(
        [
            library_models.RoleTask(role_id=role.id, task_id=inspect.id, sort_order=0, required=True),
            library_models.RoleTask(role_id=role.id, task_id=solder.id, sort_order=1, required=True),
            library_models.RoleTask(role_id=role.id, task_id=rework.id, sort_order=2, required=False),
        ]
    )

    alex = training_models.Trainee(name="Alex", role_id=role.id)
    db_session.add(alex)
    db_session.commit()

    return SimpleNamespace(
        department=dept,
        role=role,
        solder=solder,
        inspect=inspect,
        rework=rework,
        ppe=ppe,
        fod=fod,
        itar=itar,
        alex=alex,
    )


@pytest.fixture()
def make_plan(db_session, library):
    def _make_plan(**overrides):
        data = {
            "trainee_id": library.alex.id,
            "trainer_name": "Jordan",
            "title": "Soldering",
            "task_ids": [library.solder.id],
            "topic_configs": [{"topic_id": library.ppe.id, "target_level": "intermediate"}],
        }
        data.update(overrides)
        plan = plan_services.create_plan(db_session, plan_schemas.TrainingPlanCreate(**data))
        db_session.commit()
        return plan

    return _make_plan
