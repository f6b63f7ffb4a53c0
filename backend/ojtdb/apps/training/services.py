from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional, Sequence, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ...utils.identifiers import generate_uuid7
from ...utils.sql import conflict_aware_insert
from . import models

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_trainee(db: Session, trainee_id: str) -> Optional[models.Trainee]:
    return db.query(models.Trainee).filter(models.Trainee.id == trainee_id).first()


def require_trainee(db: Session, trainee_id: str) -> models.Trainee:
    trainee = get_trainee(db, trainee_id)
    if trainee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trainee not found.",
        )
    return trainee


def get_session_for_plan_day(db: Session, plan_day_id: str) -> Optional[models.DailySession]:
    return (
        db.query(models.DailySession)
        .filter(models.DailySession.plan_day_id == plan_day_id)
        .first()
    )


def materialize_session(
    db: Session,
    *,
    plan_day_id: str,
    trainee_id: str,
    trainer_name: str,
    facility_topic_id: Optional[str],
    task_ids: Sequence[str],
) -> Tuple[models.DailySession, bool]:
    """
    Insert-if-absent a session for a plan day, keyed on the unique plan_day_id.

    Task blocks are only written by the caller that actually inserted the
    session, so two racing starts still end with one session and one set of
    blocks. Returns (session, created).
    """
    db.flush()
    values = {
        "id": generate_uuid7(),
        "trainee_id": trainee_id,
        "trainer_name": trainer_name,
        "session_date": _utcnow(),
        "facility_topic_id": facility_topic_id,
        "plan_day_id": plan_day_id,
    }

    insert = conflict_aware_insert(db, models.DailySession.__table__)
    if insert is not None:
        result = db.execute(
            insert.values(**values).on_conflict_do_nothing(index_elements=["plan_day_id"])
        )
        created = result.rowcount == 1
    else:
        created = get_session_for_plan_day(db, plan_day_id) is None
        if created:
            db.add(models.DailySession(**values))
            db.flush()

    session = (
        db.query(models.DailySession)
        .filter(models.DailySession.plan_day_id == plan_day_id)
        .populate_existing()
        .one()
    )
    if not created:
        return session, False

    for index, task_id in enumerate(task_ids):
        db.add(
            models.DailyTaskBlock(
                session_id=session.id,
                task_id=task_id,
                sort_order=index,
                step1=False,
                step2=False,
                step3=False,
                step4=False,
            )
        )
    db.flush()
    db.expire(session, ["task_blocks"])

    logger.info(
        "Materialized daily session",
        extra={
            "session_id": session.id,
            "plan_day_id": plan_day_id,
            "trainee_id": trainee_id,
            "task_blocks": len(task_ids),
        },
    )
    return session, True
