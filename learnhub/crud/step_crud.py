from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from learnhub.models.module.step_model import ModuleStep, StepCheckpoint
from learnhub.models.progress.user_step_progress_model import UserStepProgress


def get_step(db: Session, step_id: int) -> Optional[ModuleStep]:
    return db.get(ModuleStep, step_id)


def get_module_steps(db: Session, module_id: int) -> list[ModuleStep]:
    return (
        db.query(ModuleStep)
        .filter(ModuleStep.module_id == module_id)
        .order_by(ModuleStep.order.asc(), ModuleStep.id.asc())
        .all()
    )


def get_step_checkpoints(db: Session, step_id: int) -> list[StepCheckpoint]:
    return (
        db.query(StepCheckpoint)
        .filter(StepCheckpoint.step_id == step_id)
        .order_by(StepCheckpoint.order.asc(), StepCheckpoint.id.asc())
        .all()
    )


def get_user_step_progress(db: Session, user_id: int, step_id: int) -> Optional[UserStepProgress]:
    return (
        db.query(UserStepProgress)
        .filter_by(user_id=user_id, step_id=step_id)
        .first()
    )


def get_user_module_progress(
    db: Session, user_id: int, step_ids: Iterable[int]
) -> dict[int, UserStepProgress]:
    """Return the user's progress rows for the given steps, keyed by step id."""
    ids = list(step_ids)
    if not ids:
        return {}
    rows = (
        db.query(UserStepProgress)
        .filter(UserStepProgress.user_id == user_id, UserStepProgress.step_id.in_(ids))
        .all()
    )
    return {row.step_id: row for row in rows}


def upsert_step_progress(
    db: Session,
    user_id: int,
    step_id: int,
    *,
    selected_answer_index: Optional[int] = None,
    is_correct: Optional[bool] = None,
) -> UserStepProgress:
    """Insert or overwrite the single (user, step) progress row."""
    progress = get_user_step_progress(db, user_id, step_id)
    if progress is None:
        progress = UserStepProgress(user_id=user_id, step_id=step_id)
        db.add(progress)

    progress.selected_answer_index = selected_answer_index
    progress.is_correct = is_correct
    progress.completed_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(progress)
    return progress
