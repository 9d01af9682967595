from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_current_user, get_db
from learnhub.models.user.user_model import User
from learnhub.schemas.module import module_schema, step_schema
from learnhub.services.errors import LearningError, NotFoundError
from learnhub.services.module_service import ModuleCatalogService
from learnhub.services.progression_service import ProgressionService

router = APIRouter()


@router.get("", response_model=List[module_schema.ModuleWithProgress])
def list_modules(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ModuleCatalogService(db, current_user).list_modules_with_progress()


@router.get("/{module_id}", response_model=module_schema.ModuleDetail)
def get_module(
    module_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return ModuleCatalogService(db, current_user).get_module_with_progress(module_id)
    except LearningError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


@router.get("/{module_id}/steps", response_model=step_schema.ModuleWithSteps)
def get_module_steps(
    module_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        view = ProgressionService(db, current_user.id).get_module_with_steps(module_id)
        if not view.published and not current_user.is_admin:
            raise NotFoundError("Module not found", code="module_not_found")
    except LearningError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return view
