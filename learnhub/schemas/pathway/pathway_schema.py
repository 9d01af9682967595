from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from learnhub.schemas.module.module_schema import ModuleOut


class PathwayCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    published: bool = False
    module_ids: List[int] = Field(default_factory=list)


class PathwayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    published: Optional[bool] = None


class PathwayModulesIn(BaseModel):
    module_ids: List[int]

    @model_validator(mode="after")
    def _ensure_unique_modules(self) -> "PathwayModulesIn":
        if len(set(self.module_ids)) != len(self.module_ids):
            raise ValueError("duplicate_module")
        return self


class PathwayModuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    order: int
    module: ModuleOut


class PathwayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    published: bool
    created_at: Optional[datetime] = None
    modules: List[PathwayModuleOut] = Field(default_factory=list)


class AssignedPathway(PathwayOut):
    due_date: Optional[datetime] = None


class AssignGroupIn(BaseModel):
    group_id: int = Field(..., ge=1)
    due_date: Optional[datetime] = None


class AssignUserIn(BaseModel):
    user_id: int = Field(..., ge=1)
    due_date: Optional[datetime] = None


class PathwayAssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pathway_id: int
    group_id: Optional[int] = None
    user_id: Optional[int] = None
    due_date: Optional[datetime] = None
