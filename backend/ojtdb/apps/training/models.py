# backend/ojtdb/apps/training/models.py
"""
Training execution tables: trainees and the daily 4-step checklist sessions.

The plan scheduler creates sessions and task blocks when a plan day starts;
filling in the checklist and signatures afterwards belongs to the
execution flow.
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


class Trainee(Base):
    __tablename__ = "trainees"

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    name = Column(String(255), nullable=False)
    role_id = Column(
        String(36),
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    role = relationship("Role", lazy="joined")

    def __repr__(self) -> str:
        return f"<Trainee {self.name}>"


class DailySession(Base):
    """
    One live training encounter between a trainer and a trainee.

    plan_day_id is a weak back-reference to the plan day that materialized
    the session. It is unique so a plan day can never own two sessions.
    """

    __tablename__ = "daily_sessions"
    __table_args__ = (
        UniqueConstraint("plan_day_id", name="uq_daily_sessions_plan_day"),
        Index("idx_daily_sessions_trainee_date", "trainee_id", "session_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    trainee_id = Column(
        String(36),
        ForeignKey("trainees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trainer_name = Column(String(255), nullable=False)
    session_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    facility_topic_id = Column(
        String(36),
        ForeignKey("facility_topics.id", ondelete="SET NULL"),
        nullable=True,
    )
    plan_day_id = Column(
        String(36),
        ForeignKey("training_plan_days.id", ondelete="SET NULL"),
        nullable=True,
    )

    trainee_signature = Column(Text, nullable=True)
    trainer_signature = Column(Text, nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    competency_attested = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    task_blocks = relationship(
        "DailyTaskBlock",
        back_populates="session",
        order_by="DailyTaskBlock.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<DailySession {self.id} trainee={self.trainee_id}>"


class DailyTaskBlock(Base):
    """
    Checklist row for one task inside a session: the four step flags of the
    4-step method plus strength / opportunity / action coaching notes.
    """

    __tablename__ = "daily_task_blocks"
    __table_args__ = (
        Index("idx_daily_task_blocks_session_order", "session_id", "sort_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    session_id = Column(
        String(36),
        ForeignKey("daily_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    task_id = Column(
        String(36),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)

    step1 = Column(Boolean, nullable=False, default=False)
    step2 = Column(Boolean, nullable=False, default=False)
    step3 = Column(Boolean, nullable=False, default=False)
    step4 = Column(Boolean, nullable=False, default=False)

    strength = Column(Text, nullable=True)
    opportunity = Column(Text, nullable=True)
    action = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    session = relationship("DailySession", back_populates="task_blocks")
