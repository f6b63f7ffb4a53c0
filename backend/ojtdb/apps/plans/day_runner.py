# backend/ojtdb/apps/plans/day_runner.py
"""
Plan day lifecycle: pending -> in_progress -> completed.

Starting a day materializes the live daily session (one per day, ever) and
moves a draft/scheduled plan to in_progress. Completing day 4 credits the
trainee's ledger with each topic's target level and closes the plan once
every day is completed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..audit import services as audit_services
from ..training import models as training_models
from ..training import services as training_services
from . import ledger, models
from .services import get_plan_day_or_404, get_plan_or_404

logger = logging.getLogger(__name__)

DAY_ENTITY = "training_plan_day"

DAY_TRANSITIONS = {
    models.PlanDayStatus.PENDING: {models.PlanDayStatus.IN_PROGRESS},
    models.PlanDayStatus.IN_PROGRESS: {models.PlanDayStatus.COMPLETED},
    models.PlanDayStatus.COMPLETED: set(),
}

# Plan states in which a day may still be started.
STARTABLE_PLAN_STATUSES = {
    models.TrainingPlanStatus.DRAFT,
    models.TrainingPlanStatus.SCHEDULED,
    models.TrainingPlanStatus.IN_PROGRESS,
}

# Plan states that move to in_progress when their first day starts.
PRE_START_PLAN_STATUSES = {
    models.TrainingPlanStatus.DRAFT,
    models.TrainingPlanStatus.SCHEDULED,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DayStartOutcome:
    session: training_models.DailySession
    day: models.TrainingPlanDay
    created: bool


@dataclass
class DayCompleteOutcome:
    day: models.TrainingPlanDay
    plan: models.TrainingPlan
    knowledge_updates: int


def _ensure_valid_day_transition(
    day: models.TrainingPlanDay,
    new_status: models.PlanDayStatus,
) -> None:
    if day.status == new_status:
        return
    allowed = DAY_TRANSITIONS.get(day.status, set())
    if new_status not in allowed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid plan day transition {day.status.value} -> {new_status.value}.",
        )


def start_day(db: Session, *, plan_id: str, day_number: int) -> DayStartOutcome:
    """
    Start a plan day, or return its existing session if it was already
    started. The caller commits.
    """
    plan = get_plan_or_404(db, plan_id)
    day = get_plan_day_or_404(db, plan_id=plan.id, day_number=day_number)

    existing = training_services.get_session_for_plan_day(db, day.id)
    if existing is not None:
        return DayStartOutcome(session=existing, day=day, created=False)

    if plan.status not in STARTABLE_PLAN_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot start a day of a {plan.status.value} plan.",
        )
    _ensure_valid_day_transition(day, models.PlanDayStatus.IN_PROGRESS)

    # A session references one facility topic; the day's first topic is used.
    facility_topic_id = day.topics[0].facility_topic_id if day.topics else None

    session, created = training_services.materialize_session(
        db,
        plan_day_id=day.id,
        trainee_id=plan.trainee_id,
        trainer_name=plan.trainer_name,
        facility_topic_id=facility_topic_id,
        task_ids=[row.task_id for row in day.tasks],
    )
    if not created:
        # Another request started this day between our lookup and insert.
        return DayStartOutcome(session=session, day=day, created=False)

    before = {"status": day.status.value, "plan_status": plan.status.value}
    if plan.status in PRE_START_PLAN_STATUSES:
        plan.status = models.TrainingPlanStatus.IN_PROGRESS
        db.add(plan)
    day.status = models.PlanDayStatus.IN_PROGRESS
    db.add(day)
    db.flush()

    audit_services.log_event(
        db,
        actor_name=plan.trainer_name,
        entity_type=DAY_ENTITY,
        entity_id=day.id,
        action="start",
        before=before,
        after={
            "status": day.status.value,
            "plan_status": plan.status.value,
            "session_id": session.id,
        },
        correlation_id=plan.id,
        metadata={"module": "plans", "day_number": day.day_number},
    )
    logger.info(
        "Started plan day",
        extra={
            "plan_id": plan.id,
            "day_number": day.day_number,
            "session_id": session.id,
            "task_blocks": len(day.tasks),
        },
    )
    return DayStartOutcome(session=session, day=day, created=True)


def _close_plan_if_finished(db: Session, plan: models.TrainingPlan) -> bool:
    if len(plan.days) != models.PLAN_DAY_COUNT:
        return False
    if any(d.status != models.PlanDayStatus.COMPLETED for d in plan.days):
        return False
    plan.status = models.TrainingPlanStatus.COMPLETED
    plan.completed_at = _utcnow()
    db.add(plan)
    return True


def complete_day(db: Session, *, plan_id: str, day_number: int) -> DayCompleteOutcome:
    """
    Complete an in-progress plan day.

    Completing an already completed day is an idempotent success: nothing is
    re-stamped and the ledger is not written again. The caller commits.
    """
    plan = get_plan_or_404(db, plan_id)
    day = get_plan_day_or_404(db, plan_id=plan.id, day_number=day_number)

    if day.status == models.PlanDayStatus.COMPLETED:
        return DayCompleteOutcome(day=day, plan=plan, knowledge_updates=0)

    if plan.status == models.TrainingPlanStatus.CANCELLED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot complete a day of a cancelled plan.",
        )
    _ensure_valid_day_transition(day, models.PlanDayStatus.COMPLETED)

    completed_at = _utcnow()
    day.status = models.PlanDayStatus.COMPLETED
    day.completed_at = completed_at
    db.add(day)
    db.flush()

    knowledge_updates = 0
    plan_closed = False
    if day.day_number == models.PLAN_DAY_COUNT:
        for topic in day.topics:
            ledger.commit_level(
                db,
                trainee_id=plan.trainee_id,
                topic_id=topic.facility_topic_id,
                level=topic.target_level,
                source_plan_day_id=day.id,
                assessed_at=completed_at,
            )
            knowledge_updates += 1
        plan_closed = _close_plan_if_finished(db, plan)
        db.flush()

    audit_services.log_event(
        db,
        actor_name=plan.trainer_name,
        entity_type=DAY_ENTITY,
        entity_id=day.id,
        action="complete",
        before={"status": models.PlanDayStatus.IN_PROGRESS.value},
        after={
            "status": day.status.value,
            "completed_at": day.completed_at,
            "knowledge_updates": knowledge_updates,
            "plan_status": plan.status.value,
        },
        correlation_id=plan.id,
        metadata={"module": "plans", "day_number": day.day_number},
        critical=knowledge_updates > 0,
    )
    logger.info(
        "Completed plan day",
        extra={
            "plan_id": plan.id,
            "day_number": day.day_number,
            "knowledge_updates": knowledge_updates,
            "plan_closed": plan_closed,
        },
    )
    return DayCompleteOutcome(day=day, plan=plan, knowledge_updates=knowledge_updates)
