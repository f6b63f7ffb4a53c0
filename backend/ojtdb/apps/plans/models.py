# backend/ojtdb/apps/plans/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
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


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class TrainingPlanStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PlanDayStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class KnowledgeLevel(str, enum.Enum):
    """
    Ordered for display only; the scheduler never computes level deltas.
    """

    NONE = "none"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


PLAN_DAY_COUNT = 4

# The 4-Step Competency Method. Index i is the focus of day i + 1.
STEP_FOCUS = (
    "Step 1: Trainer Does / Trainer Explains",
    "Step 2: Trainer Does / Trainee Explains",
    "Step 3: Trainee Does / Trainer Coaches",
    "Step 4: Trainee Does / Trainer Observes",
)

DAY_NUMBERS = tuple(range(1, PLAN_DAY_COUNT + 1))


def step_focus_for(day_number: int) -> str:
    return STEP_FOCUS[day_number - 1]


def default_objectives_for(day_number: int) -> str:
    return f"Focus on Step {day_number} for all assigned topics"


# ---------------------------------------------------------------------------
# TRAINING PLAN
# ---------------------------------------------------------------------------


class TrainingPlan(Base):
    """
    One trainee's structured 4-day engagement.

    Owns exactly four TrainingPlanDay rows (day_number 1..4), created in the
    same transaction as the plan itself.
    """

    __tablename__ = "training_plans"
    __table_args__ = (
        Index("idx_training_plans_trainee_status", "trainee_id", "status"),
        Index("idx_training_plans_created", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    trainee_id = Column(
        String(36),
        ForeignKey("trainees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trainer_name = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(
        Enum(TrainingPlanStatus, name="training_plan_status_enum"),
        nullable=False,
        default=TrainingPlanStatus.DRAFT,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    days = relationship(
        "TrainingPlanDay",
        back_populates="plan",
        order_by="TrainingPlanDay.day_number",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TrainingPlan {self.id} trainee={self.trainee_id} status={self.status}>"


class TrainingPlanDay(Base):
    """
    One stage of the 4-step method. day_number fixes step_focus at creation;
    days are never reordered or renumbered.
    """

    __tablename__ = "training_plan_days"
    __table_args__ = (
        UniqueConstraint("plan_id", "day_number", name="uq_training_plan_days_plan_day"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    plan_id = Column(
        String(36),
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_number = Column(Integer, nullable=False)
    step_focus = Column(String(255), nullable=False)
    objectives = Column(Text, nullable=True)

    status = Column(
        Enum(PlanDayStatus, name="training_plan_day_status_enum"),
        nullable=False,
        default=PlanDayStatus.PENDING,
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    plan = relationship("TrainingPlan", back_populates="days")
    tasks = relationship(
        "TrainingPlanDayTask",
        back_populates="plan_day",
        order_by="TrainingPlanDayTask.sort_order",
        lazy="selectin",
    )
    topics = relationship(
        "TrainingPlanDayTopic",
        back_populates="plan_day",
        order_by="TrainingPlanDayTopic.sort_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TrainingPlanDay plan={self.plan_id} day={self.day_number} status={self.status}>"


class TrainingPlanDayTask(Base):
    __tablename__ = "training_plan_day_tasks"
    __table_args__ = (
        Index("idx_training_plan_day_tasks_day_order", "plan_day_id", "sort_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    plan_day_id = Column(
        String(36),
        ForeignKey("training_plan_days.id", ondelete="CASCADE"),
        nullable=False,
    )
    task_id = Column(
        String(36),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)

    plan_day = relationship("TrainingPlanDay", back_populates="tasks")
    task = relationship("Task", lazy="joined")


class TrainingPlanDayTopic(Base):
    """
    Facility topic attached to a plan day.

    baseline_level is the ledger snapshot taken when the plan was created and
    is never rewritten; target_level is what day 4 completion commits.
    """

    __tablename__ = "training_plan_day_topics"
    __table_args__ = (
        Index("idx_training_plan_day_topics_day_order", "plan_day_id", "sort_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    plan_day_id = Column(
        String(36),
        ForeignKey("training_plan_days.id", ondelete="CASCADE"),
        nullable=False,
    )
    facility_topic_id = Column(
        String(36),
        ForeignKey("facility_topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)

    baseline_level = Column(
        Enum(KnowledgeLevel, name="knowledge_level_enum"),
        nullable=False,
        default=KnowledgeLevel.NONE,
    )
    target_level = Column(
        Enum(KnowledgeLevel, name="knowledge_level_enum"),
        nullable=False,
        default=KnowledgeLevel.BASIC,
    )
    emphasis_notes = Column(Text, nullable=True)

    plan_day = relationship("TrainingPlanDay", back_populates="topics")
    topic = relationship("FacilityTopic", lazy="joined")


# ---------------------------------------------------------------------------
# KNOWLEDGE LEDGER
# ---------------------------------------------------------------------------


class TraineeTopicKnowledge(Base):
    """
    Current proficiency of one trainee on one facility topic.

    One row per (trainee, topic), updated in place. Only day 4 completion of
    a plan writes here.
    """

    __tablename__ = "trainee_topic_knowledge"
    __table_args__ = (
        UniqueConstraint("trainee_id", "topic_id", name="uq_trainee_topic_knowledge_pair"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)
    trainee_id = Column(
        String(36),
        ForeignKey("trainees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    topic_id = Column(
        String(36),
        ForeignKey("facility_topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    current_level = Column(
        Enum(KnowledgeLevel, name="knowledge_level_enum"),
        nullable=False,
        default=KnowledgeLevel.NONE,
    )
    assessed_at = Column(DateTime(timezone=True), nullable=True)
    source_plan_day_id = Column(
        String(36),
        ForeignKey("training_plan_days.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    topic = relationship("FacilityTopic", lazy="joined")

    def __repr__(self) -> str:
        return f"<TraineeTopicKnowledge trainee={self.trainee_id} topic={self.topic_id} level={self.current_level}>"
