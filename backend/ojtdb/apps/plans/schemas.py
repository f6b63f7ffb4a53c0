# backend/ojtdb/apps/plans/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..library.schemas import FacilityTopicRead, TaskRead
from ..training.schemas import DailySessionRead, TraineeRead
from .models import DAY_NUMBERS, KnowledgeLevel, PlanDayStatus, TrainingPlanStatus


# ---------------------------------------------------------------------------
# CREATE
# ---------------------------------------------------------------------------


class TopicConfig(BaseModel):
    """
    Which facility topic to cover, to what level, and on which days.
    """

    topic_id: str = Field(..., min_length=1, description="FacilityTopic id.")
    target_level: KnowledgeLevel = Field(
        KnowledgeLevel.BASIC,
        description="Level committed to the trainee's ledger when day 4 completes.",
    )
    days: Optional[List[int]] = Field(
        None,
        description="Subset of day numbers (1-4) to attach the topic to. Omit for all four days.",
    )
    emphasis_notes: Optional[str] = None

    @field_validator("days")
    @classmethod
    def _days_in_range(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is None:
            return value
        bad = [d for d in value if d not in DAY_NUMBERS]
        if bad:
            raise ValueError(f"day numbers must be between 1 and 4, got {bad}")
        return sorted(set(value))


class TrainingPlanCreate(BaseModel):
    trainee_id: str = Field(..., min_length=1)
    trainer_name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    notes: Optional[str] = None

    task_ids: List[str] = Field(
        default_factory=list,
        description="Tasks trained progressively on all four days, in this order.",
    )
    include_role_tasks: bool = Field(
        False,
        description="Append the required tasks of the trainee's role after task_ids.",
    )
    topic_configs: List[TopicConfig] = Field(default_factory=list)
    day_objectives: Dict[int, str] = Field(
        default_factory=dict,
        description="Optional objectives per day number; others get the default step objective.",
    )

    @field_validator("trainee_id", "trainer_name", "title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("day_objectives")
    @classmethod
    def _objective_days_in_range(cls, value: Dict[int, str]) -> Dict[int, str]:
        bad = [d for d in value if d not in DAY_NUMBERS]
        if bad:
            raise ValueError(f"day numbers must be between 1 and 4, got {bad}")
        return value


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------


class TrainingPlanStatusUpdate(BaseModel):
    status: TrainingPlanStatus


class TrainingPlanDayUpdate(BaseModel):
    objectives: Optional[str] = None


# ---------------------------------------------------------------------------
# READ
# ---------------------------------------------------------------------------


class TrainingPlanRead(BaseModel):
    id: str
    trainee_id: str
    trainer_name: str
    title: str
    start_date: Optional[datetime] = None
    notes: Optional[str] = None
    status: TrainingPlanStatus
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TrainingPlanDayRead(BaseModel):
    id: str
    plan_id: str
    day_number: int
    step_focus: str
    objectives: Optional[str] = None
    status: PlanDayStatus
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PlanDayTaskRead(BaseModel):
    id: str
    plan_day_id: str
    task_id: str
    sort_order: int
    task: Optional[TaskRead] = None

    class Config:
        from_attributes = True


class PlanDayTopicRead(BaseModel):
    id: str
    plan_day_id: str
    facility_topic_id: str
    sort_order: int
    baseline_level: KnowledgeLevel
    target_level: KnowledgeLevel
    emphasis_notes: Optional[str] = None
    topic: Optional[FacilityTopicRead] = None

    class Config:
        from_attributes = True


class TrainingPlanDayDetail(TrainingPlanDayRead):
    tasks: List[PlanDayTaskRead] = []
    topics: List[PlanDayTopicRead] = []
    session: Optional[DailySessionRead] = None


class TrainingPlanDetail(TrainingPlanRead):
    """
    Plan with its trainee and all four days expanded.
    """

    trainee: Optional[TraineeRead] = None
    days: List[TrainingPlanDayDetail] = []


class PlanDayStartResult(BaseModel):
    session: DailySessionRead
    day: TrainingPlanDayRead
    created: bool = Field(..., description="False when the day had already been started.")


class PlanDayCompleteResult(BaseModel):
    day: TrainingPlanDayRead
    plan: TrainingPlanRead
    knowledge_updates: int = Field(0, description="Ledger rows written by this call.")


class TraineeTopicKnowledgeRead(BaseModel):
    id: str
    trainee_id: str
    topic_id: str
    current_level: KnowledgeLevel
    assessed_at: Optional[datetime] = None
    source_plan_day_id: Optional[str] = None
    updated_at: datetime
    topic: Optional[FacilityTopicRead] = None

    class Config:
        from_attributes = True
