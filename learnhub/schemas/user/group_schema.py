from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnhub.schemas.user.user_schema import User


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    member_count: int = 0


class GroupMemberIn(BaseModel):
    user_id: int = Field(..., ge=1)


class GroupMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    group_id: int
    user_id: int
    created_at: Optional[datetime] = None


class GroupPathwayAssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    group_id: int
    pathway_id: int
    due_date: Optional[datetime] = None


class GroupDetail(GroupOut):
    members: List[User] = Field(default_factory=list)
    pathway_assignments: List[GroupPathwayAssignmentOut] = Field(default_factory=list)
