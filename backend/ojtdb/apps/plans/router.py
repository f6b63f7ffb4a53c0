from __future__ import annotations

from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ..audit import schemas as audit_schemas
from ..audit import services as audit_services
from ..training import schemas as training_schemas
from ..training import services as training_services
from . import day_runner, ledger
from . import models as plan_models
from . import schemas as plan_schemas
from . import services as plan_services

router = APIRouter(prefix="/training-plans", tags=["training-plans"])

_MAX_PAGE_SIZE = 1000  # hard ceiling for list endpoints to protect DB


def _normalize_pagination(limit: int, offset: int) -> Tuple[int, int]:
    """
    Clamp pagination parameters to safe bounds.
    """
    if limit <= 0:
        limit = 50
    if limit > _MAX_PAGE_SIZE:
        limit = _MAX_PAGE_SIZE
    if offset < 0:
        offset = 0
    return limit, offset


# ---------------------------------------------------------------------------
# PLANS
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=List[plan_schemas.TrainingPlanRead],
    summary="List training plans (oldest first)",
)
def list_plans(
    status_filter: Optional[plan_models.TrainingPlanStatus] = Query(None, alias="status"),
    trainee_id: Optional[str] = None,
    limit: int = 200,
    offset: int = 0,
    db: Session = Depends(get_read_db),
):
    limit, offset = _normalize_pagination(limit, offset)
    return plan_services.list_plans(
        db,
        status_filter=status_filter,
        trainee_id=trainee_id,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/trainees/{trainee_id}/knowledge",
    response_model=List[plan_schemas.TraineeTopicKnowledgeRead],
    summary="A trainee's current level on every assessed facility topic",
)
def get_trainee_knowledge(
    trainee_id: str,
    db: Session = Depends(get_read_db),
):
    training_services.require_trainee(db, trainee_id)
    return ledger.list_trainee_knowledge(db, trainee_id=trainee_id)


@router.get(
    "/{plan_id}",
    response_model=plan_schemas.TrainingPlanDetail,
    summary="Get a plan with its trainee and all four days expanded",
)
def get_plan(
    plan_id: str,
    db: Session = Depends(get_read_db),
):
    return plan_services.get_plan_detail(db, plan_id)


@router.post(
    "",
    response_model=plan_schemas.TrainingPlanRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a draft 4-day training plan",
)
def create_plan(
    payload: plan_schemas.TrainingPlanCreate,
    db: Session = Depends(get_db),
):
    plan = plan_services.create_plan(db, payload)
    db.commit()
    db.refresh(plan)
    return plan


@router.patch(
    "/{plan_id}/status",
    response_model=plan_schemas.TrainingPlanRead,
    summary="Set a plan's status directly (administrative)",
)
def update_plan_status(
    plan_id: str,
    payload: plan_schemas.TrainingPlanStatusUpdate,
    db: Session = Depends(get_db),
):
    plan = plan_services.update_plan_status(db, plan_id=plan_id, new_status=payload.status)
    db.commit()
    db.refresh(plan)
    return plan


@router.delete(
    "/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a plan with its days and attachments",
)
def delete_plan(
    plan_id: str,
    db: Session = Depends(get_db),
):
    plan_services.delete_plan(db, plan_id=plan_id)
    db.commit()
    return None


@router.get(
    "/{plan_id}/audit",
    response_model=List[audit_schemas.AuditEventRead],
    summary="Audit trail of a plan and its days (newest first)",
)
def list_plan_audit_events(
    plan_id: str,
    db: Session = Depends(get_read_db),
):
    return audit_services.list_audit_events(db, correlation_id=plan_id)


# ---------------------------------------------------------------------------
# DAYS
# ---------------------------------------------------------------------------


@router.patch(
    "/{plan_id}/days/{day_number}",
    response_model=plan_schemas.TrainingPlanDayRead,
    summary="Update a plan day's objectives",
)
def update_plan_day(
    plan_id: str,
    payload: plan_schemas.TrainingPlanDayUpdate,
    day_number: int = Path(..., ge=1, le=plan_models.PLAN_DAY_COUNT),
    db: Session = Depends(get_db),
):
    day = plan_services.update_day_objectives(
        db,
        plan_id=plan_id,
        day_number=day_number,
        objectives=payload.objectives,
    )
    db.commit()
    db.refresh(day)
    return day


@router.post(
    "/{plan_id}/days/{day_number}/start",
    response_model=plan_schemas.PlanDayStartResult,
    summary="Start a plan day and materialize its daily session",
)
def start_plan_day(
    plan_id: str,
    day_number: int = Path(..., ge=1, le=plan_models.PLAN_DAY_COUNT),
    db: Session = Depends(get_db),
):
    outcome = day_runner.start_day(db, plan_id=plan_id, day_number=day_number)
    db.commit()
    db.refresh(outcome.day)
    db.refresh(outcome.session)
    return plan_schemas.PlanDayStartResult(
        session=training_schemas.DailySessionRead.model_validate(outcome.session),
        day=plan_schemas.TrainingPlanDayRead.model_validate(outcome.day),
        created=outcome.created,
    )


@router.post(
    "/{plan_id}/days/{day_number}/complete",
    response_model=plan_schemas.PlanDayCompleteResult,
    summary="Complete a plan day; day 4 commits target levels to the ledger",
)
def complete_plan_day(
    plan_id: str,
    day_number: int = Path(..., ge=1, le=plan_models.PLAN_DAY_COUNT),
    db: Session = Depends(get_db),
):
    outcome = day_runner.complete_day(db, plan_id=plan_id, day_number=day_number)
    db.commit()
    db.refresh(outcome.day)
    db.refresh(outcome.plan)
    return plan_schemas.PlanDayCompleteResult(
        day=plan_schemas.TrainingPlanDayRead.model_validate(outcome.day),
        plan=plan_schemas.TrainingPlanRead.model_validate(outcome.plan),
        knowledge_updates=outcome.knowledge_updates,
    )
