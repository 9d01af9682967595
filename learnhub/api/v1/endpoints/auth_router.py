import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_current_user, get_db
from learnhub.core import security
from learnhub.core.config import settings
from learnhub.crud import user_crud
from learnhub.models.user.user_model import User
from learnhub.schemas.user import user_schema

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=user_schema.Token)
def login_for_access_token(
    response: Response,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    user = user_crud.get_user_by_username(db, username=form_data.username)
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        logger.warning("Rejected login for '%s'", form_data.username)
        raise HTTPException(status_code=401, detail="Incorrect username or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="inactive_user")

    access_token = security.create_access_token(subject=user.id)

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout")
def logout() -> JSONResponse:
    response = JSONResponse({"message": "Logout successful"})
    response.delete_cookie(
        key="access_token",
        path="/",
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
    )
    return response


@router.get("/user", response_model=user_schema.User)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
