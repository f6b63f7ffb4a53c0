from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ojtdb.database import WriteSessionLocal
from ojtdb.apps.library import models as library_models
from ojtdb.apps.plans import models as plan_models
from ojtdb.apps.plans import schemas as plan_schemas
from ojtdb.apps.plans import services as plan_services
from ojtdb.apps.training import models as training_models


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_or_create_department(db) -> library_models.Department:
    dept = db.query(library_models.Department).filter(library_models.Department.name == "Assembly").first()
    if dept:
        return dept
    dept = library_models.Department(name="Assembly")
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


def _get_or_create_tasks(db, dept: library_models.Department) -> List[library_models.Task]:
    names = ["Hand soldering", "Joint inspection", "Wire stripping", "Rework"]
    tasks = []
    for name in names:
        task = (
            db.query(library_models.Task)
            .filter(library_models.Task.department_id == dept.id, library_models.Task.name == name)
            .first()
        )
        if not task:
            task = library_models.Task(name=name, department_id=dept.id)
            db.add(task)
        tasks.append(task)
    db.commit()
    return tasks


def _get_or_create_topics(db) -> List[library_models.FacilityTopic]:
    catalog = [
        ("PPE", "Personal Protective Equipment"),
        ("FOD", "Foreign Object Debris"),
        ("ITAR", "Export Control"),
        ("CHEM", "Chemical Handling"),
        ("FIRE", "Fire Safety"),
        ("COUNTERFEIT", "Counterfeit Parts Prevention"),
    ]
    topics = []
    for code, title in catalog:
        topic = db.query(library_models.FacilityTopic).filter(library_models.FacilityTopic.code == code).first()
        if not topic:
            topic = library_models.FacilityTopic(code=code, title=title)
            db.add(topic)
        topics.append(topic)
    db.commit()
    return topics


def _get_or_create_role(db, tasks: List[library_models.Task]) -> library_models.Role:
    role = db.query(library_models.Role).filter(library_models.Role.name == "Solder Technician").first()
    if role:
        return role
    role = library_models.Role(name="Solder Technician", description="Through-hole and SMT hand soldering")
    db.add(role)
    db.flush()
    for index, task in enumerate(tasks):
        db.add(
            library_models.RoleTask(
                role_id=role.id,
                task_id=task.id,
                sort_order=index,
                required=task.name != "Rework",
            )
        )
    db.commit()
    db.refresh(role)
    return role


def _get_or_create_trainee(db, role: library_models.Role) -> training_models.Trainee:
    trainee = db.query(training_models.Trainee).filter(training_models.Trainee.name == "Alex").first()
    if trainee:
        return trainee
    trainee = training_models.Trainee(name="Alex", role_id=role.id)
    db.add(trainee)
    db.commit()
    db.refresh(trainee)
    return trainee


def _seed_plan(
    db,
    trainee: training_models.Trainee,
    topics: List[library_models.FacilityTopic],
) -> Optional[plan_models.TrainingPlan]:
    existing = (
        db.query(plan_models.TrainingPlan)
        .filter(plan_models.TrainingPlan.trainee_id == trainee.id, plan_models.TrainingPlan.title == "Soldering")
        .first()
    )
    if existing:
        return None
    by_code = {topic.code: topic for topic in topics}
    payload = plan_schemas.TrainingPlanCreate(
        trainee_id=trainee.id,
        trainer_name="Jordan",
        title="Soldering",
        start_date=_utcnow() + timedelta(days=1),
        include_role_tasks=True,
        topic_configs=[
            plan_schemas.TopicConfig(topic_id=by_code["PPE"].id, target_level="intermediate"),
            plan_schemas.TopicConfig(topic_id=by_code["FOD"].id, target_level="basic", days=[1, 3]),
        ],
    )
    plan = plan_services.create_plan(db, payload)
    db.commit()
    return plan


def main() -> None:
    db = WriteSessionLocal()
    try:
        dept = _get_or_create_department(db)
        tasks = _get_or_create_tasks(db, dept)
        topics = _get_or_create_topics(db)
        role = _get_or_create_role(db, tasks)
        trainee = _get_or_create_trainee(db, role)
        _seed_plan(db, trainee, topics)
    finally:
        db.close()


if __name__ == "__main__":
    main()
