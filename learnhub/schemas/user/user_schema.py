from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from learnhub.models.user.user_model import UserRole
from learnhub.schemas.module.quiz_schema import QuizAttemptOut


# --- Base ---
class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# --- Admin creation ---
class UserCreate(UserBase):
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER


class UserRoleUpdate(BaseModel):
    # Plain string so that an unknown role is reported as a 400.
    role: str


# --- API responses ---
# Never exposes the password hash.
class User(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None


class UserWithProgress(User):
    completed_modules: int = 0
    total_attempts: int = 0
    average_score: Optional[int] = None


class UserDetail(UserWithProgress):
    attempts: List[QuizAttemptOut] = Field(default_factory=list)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
