# backend/ojtdb/apps/plans/ledger.py
"""
Trainee knowledge ledger: current level per (trainee, facility topic).

Plan creation reads it to snapshot baselines; day 4 completion is the only
writer. Writes are single-statement upserts keyed on the
(trainee_id, topic_id) unique constraint.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ...utils.identifiers import generate_uuid7
from ...utils.sql import conflict_aware_insert
from ..library import models as library_models
from . import models

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_entry(db: Session, *, trainee_id: str, topic_id: str) -> Optional[models.TraineeTopicKnowledge]:
    return (
        db.query(models.TraineeTopicKnowledge)
        .filter(
            models.TraineeTopicKnowledge.trainee_id == trainee_id,
            models.TraineeTopicKnowledge.topic_id == topic_id,
        )
        .populate_existing()
        .first()
    )


def baseline_levels(
    db: Session,
    *,
    trainee_id: str,
    topic_ids: Iterable[str],
) -> Dict[str, models.KnowledgeLevel]:
    """
    Current level for each topic, defaulting to NONE where the trainee has
    never been assessed.
    """
    ids = list(dict.fromkeys(topic_ids))
    if not ids:
        return {}
    rows = (
        db.query(models.TraineeTopicKnowledge)
        .filter(
            models.TraineeTopicKnowledge.trainee_id == trainee_id,
            models.TraineeTopicKnowledge.topic_id.in_(ids),
        )
        .populate_existing()
        .all()
    )
    levels = {topic_id: models.KnowledgeLevel.NONE for topic_id in ids}
    levels.update({row.topic_id: row.current_level for row in rows})
    return levels


def list_trainee_knowledge(db: Session, *, trainee_id: str) -> List[models.TraineeTopicKnowledge]:
    return (
        db.query(models.TraineeTopicKnowledge)
        .join(
            library_models.FacilityTopic,
            library_models.FacilityTopic.id == models.TraineeTopicKnowledge.topic_id,
        )
        .filter(models.TraineeTopicKnowledge.trainee_id == trainee_id)
        .order_by(library_models.FacilityTopic.code.asc())
        .populate_existing()
        .all()
    )


def commit_level(
    db: Session,
    *,
    trainee_id: str,
    topic_id: str,
    level: models.KnowledgeLevel,
    source_plan_day_id: str,
    assessed_at: Optional[datetime] = None,
) -> None:
    """
    Assert a trainee's level on a topic, inserting the ledger row on first
    assessment and overwriting it in place afterwards.
    """
    assessed_at = assessed_at or _utcnow()
    table = models.TraineeTopicKnowledge.__table__

    insert = conflict_aware_insert(db, table)
    if insert is not None:
        stmt = insert.values(
            id=generate_uuid7(),
            trainee_id=trainee_id,
            topic_id=topic_id,
            current_level=level,
            assessed_at=assessed_at,
            source_plan_day_id=source_plan_day_id,
            created_at=assessed_at,
            updated_at=assessed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["trainee_id", "topic_id"],
            set_={
                "current_level": stmt.excluded.current_level,
                "assessed_at": stmt.excluded.assessed_at,
                "source_plan_day_id": stmt.excluded.source_plan_day_id,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        db.execute(stmt)
    else:
        entry = get_entry(db, trainee_id=trainee_id, topic_id=topic_id)
        if entry is None:
            entry = models.TraineeTopicKnowledge(trainee_id=trainee_id, topic_id=topic_id)
            db.add(entry)
        entry.current_level = level
        entry.assessed_at = assessed_at
        entry.source_plan_day_id = source_plan_day_id
        db.flush()

    logger.info(
        "Committed trainee topic level",
        extra={
            "trainee_id": trainee_id,
            "topic_id": topic_id,
            "level": level.value,
            "source_plan_day_id": source_plan_day_id,
        },
    )
