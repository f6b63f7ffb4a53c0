from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"

from ojtdb.database import Base  # noqa: E402
from ojtdb.apps.library import models as library_models  # noqa: E402
from ojtdb.apps.training import models as training_models  # noqa: E402
from ojtdb.apps.plans import models as plan_models  # noqa: E402
from ojtdb.apps.audit import models as audit_models  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(
        bind=engine,
        tables=[
            library_models.Department.__table__,
            library_models.Role.__table__,
            library_models.Task.__table__,
            library_models.RoleTask.__table__,
            library_models.FacilityTopic.__table__,
            training_models.Trainee.__table__,
            plan_models.TrainingPlan.__table__,
            plan_models.TrainingPlanDay.__table__,
            plan_models.TrainingPlanDayTask.__table__,
            plan_models.TrainingPlanDayTopic.__table__,
            plan_models.TraineeTopicKnowledge.__table__,
            training_models.DailySession.__table__,
            training_models.DailyTaskBlock.__table__,
            audit_models.AuditEvent.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
