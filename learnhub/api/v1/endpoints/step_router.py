from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_current_user, get_db
from learnhub.crud import module_crud, step_crud
from learnhub.models.module.step_model import ModuleStep
from learnhub.models.user.user_model import User
from learnhub.schemas.module import step_schema
from learnhub.services.errors import LearningError
from learnhub.services.progression_service import ProgressionService
from learnhub.services.quiz_service import is_answer_index

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_unlocked_step(db: Session, service: ProgressionService, current_user: User, step_id: int) -> ModuleStep:
    """Resolve a step the caller may act on, or raise the matching HTTP error."""

    step = step_crud.get_step(db, step_id)
    if step is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step not found")

    module = module_crud.get_module(db, step.module_id)
    if module is None or (not module.published and not current_user.is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")

    if not service.is_step_unlocked(step):
        logger.warning("User %s tried to act on locked step %s", current_user.id, step_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Step is locked")
    return step


@router.post("/{step_id}/checkpoint", response_model=step_schema.CheckpointResult)
def submit_checkpoint(
    step_id: int,
    payload: step_schema.CheckpointSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    selected = payload.selected_answer_index
    if not is_answer_index(selected):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="selected_answer_index is required",
        )

    service = ProgressionService(db, current_user.id)
    _get_unlocked_step(db, service, current_user, step_id)
    try:
        return service.submit_step_checkpoint(step_id, selected, payload.checkpoint_id)
    except LearningError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


@router.post("/{step_id}/complete", response_model=step_schema.StepProgressOut)
def complete_step(
    step_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = ProgressionService(db, current_user.id)
    _get_unlocked_step(db, service, current_user, step_id)
    try:
        return service.mark_step_complete(step_id)
    except LearningError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
