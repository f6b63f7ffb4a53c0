from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Dict, List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..audit import services as audit_services
from ..library import services as library_services
from ..training import models as training_models
from ..training import schemas as training_schemas
from ..training import services as training_services
from . import ledger, models, schemas

logger = logging.getLogger(__name__)

PLAN_ENTITY = "training_plan"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_plan_or_404(db: Session, plan_id: str) -> models.TrainingPlan:
    plan = db.query(models.TrainingPlan).filter(models.TrainingPlan.id == plan_id).first()
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Training plan not found.",
        )
    return plan


def get_plan_day_or_404(db: Session, *, plan_id: str, day_number: int) -> models.TrainingPlanDay:
    day = (
        db.query(models.TrainingPlanDay)
        .filter(
            models.TrainingPlanDay.plan_id == plan_id,
            models.TrainingPlanDay.day_number == day_number,
        )
        .first()
    )
    if not day:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Plan day not found.",
        )
    return day


# ---------------------------------------------------------------------------
# PLAN BUILDER
# ---------------------------------------------------------------------------


def _resolve_task_ids(db: Session, payload: schemas.TrainingPlanCreate, role_id: Optional[str]) -> List[str]:
    task_ids = list(payload.task_ids)
    if payload.include_role_tasks and role_id:
        seen = set(task_ids)
        for task_id in library_services.list_role_task_ids(db, role_id):
            if task_id not in seen:
                task_ids.append(task_id)
                seen.add(task_id)

    found = library_services.get_tasks_by_ids(db, task_ids)
    missing = [task_id for task_id in dict.fromkeys(task_ids) if task_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": "task_ids", "reason": "unknown task ids", "missing": missing},
        )
    return task_ids


def _validate_topic_ids(db: Session, configs: Sequence[schemas.TopicConfig]) -> None:
    topic_ids = [config.topic_id for config in configs]
    found = library_services.get_topics_by_ids(db, topic_ids)
    missing = [topic_id for topic_id in dict.fromkeys(topic_ids) if topic_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": "topic_configs", "reason": "unknown facility topic ids", "missing": missing},
        )


def create_plan(db: Session, payload: schemas.TrainingPlanCreate) -> models.TrainingPlan:
    """
    Build a draft plan: the plan row, its four step-bound days, every task on
    every day, and each topic config on its selected days with a baseline
    snapshot from the trainee's ledger.

    All references are resolved before the first write, so a bad id rejects
    the whole plan. The caller commits.
    """
    trainee = training_services.require_trainee(db, payload.trainee_id)
    task_ids = _resolve_task_ids(db, payload, trainee.role_id)
    _validate_topic_ids(db, payload.topic_configs)
    baselines = ledger.baseline_levels(
        db,
        trainee_id=trainee.id,
        topic_ids=[config.topic_id for config in payload.topic_configs],
    )

    plan = models.TrainingPlan(
        trainee_id=trainee.id,
        trainer_name=payload.trainer_name,
        title=payload.title,
        start_date=payload.start_date,
        notes=payload.notes,
        status=models.TrainingPlanStatus.DRAFT,
    )
    db.add(plan)
    db.flush()

    days: Dict[int, models.TrainingPlanDay] = {}
    for day_number in models.DAY_NUMBERS:
        day = models.TrainingPlanDay(
            plan_id=plan.id,
            day_number=day_number,
            step_focus=models.step_focus_for(day_number),
            objectives=payload.day_objectives.get(day_number) or models.default_objectives_for(day_number),
            status=models.PlanDayStatus.PENDING,
        )
        db.add(day)
        days[day_number] = day
    db.flush()

    for day in days.values():
        for index, task_id in enumerate(task_ids):
            db.add(models.TrainingPlanDayTask(plan_day_id=day.id, task_id=task_id, sort_order=index))

    topic_counts = {day_number: 0 for day_number in days}
    for config in payload.topic_configs:
        for day_number in config.days or models.DAY_NUMBERS:
            db.add(
                models.TrainingPlanDayTopic(
                    plan_day_id=days[day_number].id,
                    facility_topic_id=config.topic_id,
                    sort_order=topic_counts[day_number],
                    baseline_level=baselines[config.topic_id],
                    target_level=config.target_level,
                    emphasis_notes=config.emphasis_notes,
                )
            )
            topic_counts[day_number] += 1
    db.flush()

    audit_services.log_event(
        db,
        actor_name=plan.trainer_name,
        entity_type=PLAN_ENTITY,
        entity_id=plan.id,
        action="create",
        after={
            "status": plan.status.value,
            "trainee_id": plan.trainee_id,
            "task_ids": task_ids,
            "topic_ids": [config.topic_id for config in payload.topic_configs],
        },
        correlation_id=plan.id,
        metadata={"module": "plans"},
    )
    logger.info(
        "Created training plan",
        extra={
            "plan_id": plan.id,
            "trainee_id": plan.trainee_id,
            "tasks_per_day": len(task_ids),
            "topic_configs": len(payload.topic_configs),
        },
    )
    return plan


# ---------------------------------------------------------------------------
# PLAN AGGREGATOR (read-only)
# ---------------------------------------------------------------------------


def list_plans(
    db: Session,
    *,
    status_filter: Optional[models.TrainingPlanStatus] = None,
    trainee_id: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
) -> Sequence[models.TrainingPlan]:
    q = db.query(models.TrainingPlan)
    if status_filter is not None:
        q = q.filter(models.TrainingPlan.status == status_filter)
    if trainee_id:
        q = q.filter(models.TrainingPlan.trainee_id == trainee_id)
    return (
        q.order_by(models.TrainingPlan.created_at.asc(), models.TrainingPlan.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_plan_detail(db: Session, plan_id: str) -> schemas.TrainingPlanDetail:
    plan = get_plan_or_404(db, plan_id)
    trainee = training_services.require_trainee(db, plan.trainee_id)

    day_ids = [day.id for day in plan.days]
    sessions = {
        session.plan_day_id: session
        for session in db.query(training_models.DailySession)
        .filter(training_models.DailySession.plan_day_id.in_(day_ids))
        .all()
    }

    days = []
    for day in plan.days:
        session = sessions.get(day.id)
        days.append(
            schemas.TrainingPlanDayDetail(
                **schemas.TrainingPlanDayRead.model_validate(day).model_dump(),
                tasks=[schemas.PlanDayTaskRead.model_validate(row) for row in day.tasks],
                topics=[schemas.PlanDayTopicRead.model_validate(row) for row in day.topics],
                session=training_schemas.DailySessionRead.model_validate(session) if session else None,
            )
        )

    return schemas.TrainingPlanDetail(
        **schemas.TrainingPlanRead.model_validate(plan).model_dump(),
        trainee=training_schemas.TraineeRead.model_validate(trainee),
        days=days,
    )


# ---------------------------------------------------------------------------
# ADMINISTRATION
# ---------------------------------------------------------------------------


def update_plan_status(
    db: Session,
    *,
    plan_id: str,
    new_status: models.TrainingPlanStatus,
) -> models.TrainingPlan:
    """
    Administrative override; any valid status is accepted. completed_at is
    stamped on completion and cleared when the plan leaves completed.
    """
    plan = get_plan_or_404(db, plan_id)
    before = {"status": plan.status.value}

    plan.status = new_status
    if new_status == models.TrainingPlanStatus.COMPLETED:
        plan.completed_at = _utcnow()
    else:
        plan.completed_at = None
    db.add(plan)
    db.flush()

    audit_services.log_event(
        db,
        actor_name=None,
        entity_type=PLAN_ENTITY,
        entity_id=plan.id,
        action="status_update",
        before=before,
        after={"status": plan.status.value, "completed_at": plan.completed_at},
        correlation_id=plan.id,
        metadata={"module": "plans"},
    )
    return plan


def update_day_objectives(
    db: Session,
    *,
    plan_id: str,
    day_number: int,
    objectives: Optional[str],
) -> models.TrainingPlanDay:
    get_plan_or_404(db, plan_id)
    day = get_plan_day_or_404(db, plan_id=plan_id, day_number=day_number)
    day.objectives = objectives
    db.add(day)
    db.flush()
    return day


def delete_plan(db: Session, *, plan_id: str) -> None:
    """
    Remove a plan and everything it owns: attachments, then days, then the
    plan. Sessions and ledger rows are not owned by the plan; their weak
    references to the deleted days are cleared instead.
    """
    plan = get_plan_or_404(db, plan_id)
    day_ids = [
        row.id
        for row in db.query(models.TrainingPlanDay.id)
        .filter(models.TrainingPlanDay.plan_id == plan.id)
        .all()
    ]

    if day_ids:
        db.query(training_models.DailySession).filter(
            training_models.DailySession.plan_day_id.in_(day_ids)
        ).update({training_models.DailySession.plan_day_id: None}, synchronize_session=False)
        db.query(models.TraineeTopicKnowledge).filter(
            models.TraineeTopicKnowledge.source_plan_day_id.in_(day_ids)
        ).update({models.TraineeTopicKnowledge.source_plan_day_id: None}, synchronize_session=False)

        db.query(models.TrainingPlanDayTask).filter(
            models.TrainingPlanDayTask.plan_day_id.in_(day_ids)
        ).delete(synchronize_session=False)
        db.query(models.TrainingPlanDayTopic).filter(
            models.TrainingPlanDayTopic.plan_day_id.in_(day_ids)
        ).delete(synchronize_session=False)
        db.query(models.TrainingPlanDay).filter(
            models.TrainingPlanDay.plan_id == plan.id
        ).delete(synchronize_session=False)

    db.query(models.TrainingPlan).filter(models.TrainingPlan.id == plan.id).delete(
        synchronize_session=False
    )

    audit_services.log_event(
        db,
        actor_name=None,
        entity_type=PLAN_ENTITY,
        entity_id=plan_id,
        action="delete",
        before={"status": plan.status.value, "trainee_id": plan.trainee_id, "day_ids": day_ids},
        correlation_id=plan_id,
        metadata={"module": "plans"},
        critical=True,
    )
    db.expunge(plan)
    logger.info("Deleted training plan", extra={"plan_id": plan_id, "days": len(day_ids)})
