from __future__ import annotations

from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from . import models


def get_tasks_by_ids(db: Session, task_ids: Iterable[str]) -> Dict[str, models.Task]:
    ids = list(dict.fromkeys(task_ids))
    if not ids:
        return {}
    rows = db.query(models.Task).filter(models.Task.id.in_(ids)).all()
    return {row.id: row for row in rows}


def get_topics_by_ids(db: Session, topic_ids: Iterable[str]) -> Dict[str, models.FacilityTopic]:
    ids = list(dict.fromkeys(topic_ids))
    if not ids:
        return {}
    rows = db.query(models.FacilityTopic).filter(models.FacilityTopic.id.in_(ids)).all()
    return {row.id: row for row in rows}


def list_role_task_ids(db: Session, role_id: str, *, required_only: bool = True) -> List[str]:
    """
    Task ids for a role in curriculum order.
    """
    q = db.query(models.RoleTask.task_id).filter(models.RoleTask.role_id == role_id)
    if required_only:
        q = q.filter(models.RoleTask.required.is_(True))
    return [row.task_id for row in q.order_by(models.RoleTask.sort_order.asc(), models.RoleTask.id.asc()).all()]
