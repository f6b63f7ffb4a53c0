# backend/ojtdb/apps/library/models.py
"""
Content library tables the plan scheduler reads from.

Only the columns the scheduler and its read paths need live here; authoring
(work instructions, critical points, quiz banks) belongs to the content flow.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<Department {self.name}>"


class Role(Base):
    """
    Job role on the shop floor (e.g. 'Solder Technician').

    A role carries an ordered list of tasks a trainee in that role must be
    trained on; plans can derive their curriculum from it.
    """

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    role_tasks = relationship(
        "RoleTask",
        back_populates="role",
        order_by="RoleTask.sort_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False)
    department_id = Column(
        String(36),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<Task {self.name}>"


class RoleTask(Base):
    __tablename__ = "role_tasks"
    __table_args__ = (
        UniqueConstraint("role_id", "task_id", name="uq_role_tasks_role_task"),
        Index("idx_role_tasks_role_order", "role_id", "sort_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    required = Column(Boolean, nullable=False, default=True)

    role = relationship("Role", back_populates="role_tasks")


class FacilityTopic(Base):
    """
    Facility essentials module (PPE, FOD, ITAR, CHEM, FIRE, COUNTERFEIT ...).
    """

    __tablename__ = "facility_topics"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    code = Column(String(32), nullable=False, unique=True)
    title = Column(String(255), nullable=False)
    overview = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<FacilityTopic {self.code}>"
