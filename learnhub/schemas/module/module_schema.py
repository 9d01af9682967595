from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnhub.schemas.module.quiz_schema import QuizOut
from learnhub.schemas.module.step_schema import StepAdminOut

ModuleStatus = Literal["not_started", "in_progress", "completed"]


class ModuleBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    order: int = 1
    published: bool = False


class ModuleCreate(ModuleBase):
    pass


class ModuleUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None
    published: Optional[bool] = None


class ModuleOut(ModuleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ModuleWithProgress(ModuleOut):
    status: ModuleStatus = "not_started"
    last_attempt_score: Optional[int] = None
    question_count: int = 0


class ModuleDetail(ModuleWithProgress):
    quiz: Optional[QuizOut] = None


class ModuleAdminDetail(ModuleOut):
    steps: List[StepAdminOut] = Field(default_factory=list)
    quiz: Optional[QuizOut] = None
