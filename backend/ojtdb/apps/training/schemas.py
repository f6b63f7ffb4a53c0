from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class TraineeRead(BaseModel):
    id: str
    name: str
    role_id: Optional[str] = None

    class Config:
        from_attributes = True


class DailyTaskBlockRead(BaseModel):
    id: str
    session_id: str
    task_id: str
    sort_order: int
    step1: bool
    step2: bool
    step3: bool
    step4: bool
    strength: Optional[str] = None
    opportunity: Optional[str] = None
    action: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class DailySessionRead(BaseModel):
    id: str
    trainee_id: str
    trainer_name: str
    session_date: datetime
    facility_topic_id: Optional[str] = None
    plan_day_id: Optional[str] = None
    competency_attested: bool
    signed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    task_blocks: List[DailyTaskBlockRead] = []

    class Config:
        from_attributes = True
