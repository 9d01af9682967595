from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_current_user, get_db
from learnhub.models.user.user_model import User
from learnhub.schemas.pathway import pathway_schema
from learnhub.services.pathway_service import PathwayService

router = APIRouter()


@router.get("", response_model=List[pathway_schema.AssignedPathway])
def list_assigned_pathways(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PathwayService(db, current_user.id).get_user_assigned_pathways()
