from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnhub.api.v1.dependencies import get_db, require_admin
from learnhub.models.user.user_model import User
from learnhub.schemas.admin.stats_schema import AdminStats
from learnhub.schemas.module import module_schema, quiz_schema, step_schema
from learnhub.schemas.pathway import pathway_schema
from learnhub.schemas.user import group_schema, user_schema
from learnhub.services.admin_service import AdminService
from learnhub.services.errors import LearningError

router = APIRouter()


def _raise_http(exc: LearningError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
@router.get("/stats", response_model=AdminStats)
def get_stats(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).get_stats()


@router.get("/recent-attempts", response_model=List[quiz_schema.QuizAttemptWithDetails])
def get_recent_attempts(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_attempts(recent_only=True)


@router.get("/quiz-attempts", response_model=List[quiz_schema.QuizAttemptWithDetails])
def get_all_attempts(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_attempts()


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------
@router.get("/modules", response_model=List[module_schema.ModuleOut])
def list_modules(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_modules()


@router.post("/modules", response_model=module_schema.ModuleOut, status_code=status.HTTP_201_CREATED)
def create_module(
    payload: module_schema.ModuleCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return AdminService(db, admin).create_module(payload)


@router.get("/modules/{module_id}", response_model=module_schema.ModuleAdminDetail)
def get_module(module_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_module_tree(module_id)
    except LearningError as exc:
        _raise_http(exc)


@router.patch("/modules/{module_id}", response_model=module_schema.ModuleOut)
def update_module(
    module_id: int,
    payload: module_schema.ModuleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).update_module(module_id, payload)
    except LearningError as exc:
        _raise_http(exc)


@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(module_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        AdminService(db, admin).delete_module(module_id)
    except LearningError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/modules/{module_id}/steps", response_model=List[step_schema.StepAdminOut])
def get_module_steps(module_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_module_tree(module_id).steps
    except LearningError as exc:
        _raise_http(exc)


@router.put("/modules/{module_id}/steps", response_model=List[step_schema.StepAdminOut])
def save_module_steps(
    module_id: int,
    payload: step_schema.StepsSaveIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).save_module_steps(module_id, payload.steps)
    except LearningError as exc:
        _raise_http(exc)


@router.get("/modules/{module_id}/quiz", response_model=quiz_schema.QuizOut | None)
def get_module_quiz(module_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_module_quiz(module_id)
    except LearningError as exc:
        _raise_http(exc)


@router.put("/modules/{module_id}/quiz", response_model=quiz_schema.QuizOut)
def save_module_quiz(
    module_id: int,
    payload: quiz_schema.QuizSaveIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).save_module_quiz(module_id, payload)
    except LearningError as exc:
        _raise_http(exc)


@router.get("/modules/{module_id}/attempts", response_model=List[quiz_schema.QuizAttemptWithDetails])
def get_module_attempts(module_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).list_module_attempts(module_id)
    except LearningError as exc:
        _raise_http(exc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@router.get("/users", response_model=List[user_schema.UserWithProgress])
def list_users(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_users_with_progress()


@router.post("/users", response_model=user_schema.User, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: user_schema.UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).create_user(payload)
    except LearningError as exc:
        _raise_http(exc)


@router.get("/users/{user_id}", response_model=user_schema.UserDetail)
def get_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_user_detail(user_id)
    except LearningError as exc:
        _raise_http(exc)


@router.patch("/users/{user_id}/role", response_model=user_schema.User)
def update_user_role(
    user_id: int,
    payload: user_schema.UserRoleUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).update_user_role(user_id, payload.role)
    except LearningError as exc:
        _raise_http(exc)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
@router.get("/groups", response_model=List[group_schema.GroupOut])
def list_groups(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_groups()


@router.post("/groups", response_model=group_schema.GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    payload: group_schema.GroupCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return AdminService(db, admin).create_group(payload)


@router.get("/groups/{group_id}", response_model=group_schema.GroupDetail)
def get_group(group_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_group_detail(group_id)
    except LearningError as exc:
        _raise_http(exc)


@router.patch("/groups/{group_id}", response_model=group_schema.GroupOut)
def update_group(
    group_id: int,
    payload: group_schema.GroupUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).update_group(group_id, payload)
    except LearningError as exc:
        _raise_http(exc)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(group_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        AdminService(db, admin).delete_group(group_id)
    except LearningError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/groups/{group_id}/members",
    response_model=group_schema.GroupMemberOut,
    status_code=status.HTTP_201_CREATED,
)
def add_group_member(
    group_id: int,
    payload: group_schema.GroupMemberIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).add_group_member(group_id, payload.user_id)
    except LearningError as exc:
        _raise_http(exc)


@router.delete("/groups/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_group_member(
    group_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        AdminService(db, admin).remove_group_member(group_id, user_id)
    except LearningError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Pathways
# ---------------------------------------------------------------------------
@router.get("/pathways", response_model=List[pathway_schema.PathwayOut])
def list_pathways(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return AdminService(db, admin).list_pathways()


@router.post("/pathways", response_model=pathway_schema.PathwayOut, status_code=status.HTTP_201_CREATED)
def create_pathway(
    payload: pathway_schema.PathwayCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).create_pathway(payload)
    except LearningError as exc:
        _raise_http(exc)


@router.get("/pathways/{pathway_id}", response_model=pathway_schema.PathwayOut)
def get_pathway(pathway_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        return AdminService(db, admin).get_pathway(pathway_id)
    except LearningError as exc:
        _raise_http(exc)


@router.patch("/pathways/{pathway_id}", response_model=pathway_schema.PathwayOut)
def update_pathway(
    pathway_id: int,
    payload: pathway_schema.PathwayUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).update_pathway(pathway_id, payload)
    except LearningError as exc:
        _raise_http(exc)


@router.delete("/pathways/{pathway_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pathway(pathway_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    try:
        AdminService(db, admin).delete_pathway(pathway_id)
    except LearningError as exc:
        _raise_http(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/pathways/{pathway_id}/modules", response_model=pathway_schema.PathwayOut)
def set_pathway_modules(
    pathway_id: int,
    payload: pathway_schema.PathwayModulesIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).set_pathway_modules(pathway_id, payload.module_ids)
    except LearningError as exc:
        _raise_http(exc)


@router.post(
    "/pathways/{pathway_id}/assign-group",
    response_model=pathway_schema.PathwayAssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def assign_pathway_to_group(
    pathway_id: int,
    payload: pathway_schema.AssignGroupIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).assign_pathway_to_group(pathway_id, payload.group_id, payload.due_date)
    except LearningError as exc:
        _raise_http(exc)


@router.post(
    "/pathways/{pathway_id}/assign-user",
    response_model=pathway_schema.PathwayAssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def assign_pathway_to_user(
    pathway_id: int,
    payload: pathway_schema.AssignUserIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    try:
        return AdminService(db, admin).assign_pathway_to_user(pathway_id, payload.user_id, payload.due_date)
    except LearningError as exc:
        _raise_http(exc)


@router.delete("/pathways/{pathway_id}/assign-group/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_pathway_from_group(
    pathway_id: int,
    group_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    AdminService(db, admin).unassign_pathway_from_group(pathway_id, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/pathways/{pathway_id}/assign-user/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_pathway_from_user(
    pathway_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    AdminService(db, admin).unassign_pathway_from_user(pathway_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
