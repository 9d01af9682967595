from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt


class QuizQuestionIn(BaseModel):
    id: Optional[int] = None
    question: str = ""
    options: List[str] = Field(default_factory=list)
    correct_option_index: int = 0

    @property
    def is_complete(self) -> bool:
        return bool(self.question.strip()) and len(self.options) == 4


class QuizSaveIn(BaseModel):
    # Range is checked by the service so that an invalid value is a 400.
    passing_score: int
    questions: List[QuizQuestionIn] = Field(default_factory=list)


class QuizQuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    options: List[str]
    correct_option_index: Optional[int] = None
    order: int


class QuizOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    passing_score: int
    questions: List[QuizQuestionOut] = Field(default_factory=list)


class InlineAnswer(BaseModel):
    block_id: StrictInt
    selected_index: StrictInt
    correct: StrictBool


class QuizAttemptIn(BaseModel):
    module_id: int = Field(..., ge=1)
    quiz_id: int = Field(..., ge=1)
    # Left loose: a missing list or a non-integer entry is a 400, checked by the service.
    answers: Optional[List[Any]] = None
    inline_answers: Optional[List[InlineAnswer]] = None


class QuizResult(BaseModel):
    score: int
    quiz_score: int
    inline_score: Optional[int] = None
    passed: bool
    answers: List[int]
    inline_answers: Optional[List[InlineAnswer]] = None
    passing_score: int


class QuizAttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    quiz_id: int
    module_id: int
    score: int
    passed: bool
    answers: List[int]
    inline_answers: Optional[List[InlineAnswer]] = None
    inline_score: Optional[int] = None
    quiz_score: Optional[int] = None
    created_at: datetime


class AttemptUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AttemptModuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str


class QuizAttemptWithDetails(QuizAttemptOut):
    user: Optional[AttemptUserOut] = None
    module: Optional[AttemptModuleOut] = None
