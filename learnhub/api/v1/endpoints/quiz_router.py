from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_current_user, get_db
from learnhub.models.user.user_model import User
from learnhub.schemas.module import quiz_schema
from learnhub.services.errors import LearningError
from learnhub.services.module_service import ModuleCatalogService
from learnhub.services.quiz_service import QuizService

router = APIRouter()


@router.post("", response_model=quiz_schema.QuizResult)
def submit_quiz_attempt(
    payload: quiz_schema.QuizAttemptIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return QuizService(db, current_user.id).submit_attempt(payload)
    except LearningError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


@router.get("", response_model=List[quiz_schema.QuizAttemptOut])
def list_my_attempts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ModuleCatalogService(db, current_user).get_attempt_history()
