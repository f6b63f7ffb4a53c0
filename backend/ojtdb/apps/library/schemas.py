from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class TaskRead(BaseModel):
    id: str
    name: str
    department_id: Optional[str] = None

    class Config:
        from_attributes = True


class FacilityTopicRead(BaseModel):
    id: str
    code: str
    title: str
    overview: Optional[str] = None

    class Config:
        from_attributes = True
