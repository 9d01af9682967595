from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from learnhub.models.pathway.pathway_model import (
    GroupPathwayAssignment,
    PathwayModule,
    TrainingPathway,
    UserPathwayAssignment,
)
from learnhub.schemas.pathway.pathway_schema import PathwayUpdate


def _with_modules(query):
    return query.options(selectinload(TrainingPathway.modules).selectinload(PathwayModule.module))


def list_pathways(db: Session) -> list[TrainingPathway]:
    return (
        _with_modules(db.query(TrainingPathway))
        .order_by(TrainingPathway.name.asc(), TrainingPathway.id.asc())
        .all()
    )


def get_pathway(db: Session, pathway_id: int) -> Optional[TrainingPathway]:
    return _with_modules(db.query(TrainingPathway)).filter(TrainingPathway.id == pathway_id).first()


def create_pathway(
    db: Session,
    *,
    name: str,
    description: Optional[str] = None,
    published: bool = False,
    module_ids: Sequence[int] = (),
) -> TrainingPathway:
    pathway = TrainingPathway(name=name, description=description, published=published)
    for index, module_id in enumerate(module_ids):
        pathway.modules.append(PathwayModule(module_id=module_id, order=index + 1))
    db.add(pathway)
    db.commit()
    db.refresh(pathway)
    return pathway


def update_pathway(db: Session, pathway: TrainingPathway, data: PathwayUpdate) -> TrainingPathway:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(pathway, field, value)
    db.add(pathway)
    db.commit()
    db.refresh(pathway)
    return pathway


def delete_pathway(db: Session, pathway: TrainingPathway) -> None:
    db.delete(pathway)
    db.commit()


def count_pathways(db: Session) -> int:
    return int(db.query(func.count(TrainingPathway.id)).scalar() or 0)


def replace_pathway_modules(
    db: Session, pathway: TrainingPathway, module_ids: Sequence[int]
) -> TrainingPathway:
    """Make the pathway contain exactly ``module_ids``, ordered as given."""
    wanted = {module_id: index + 1 for index, module_id in enumerate(module_ids)}
    current = {link.module_id: link for link in pathway.modules}

    for module_id, link in current.items():
        if module_id not in wanted:
            pathway.modules.remove(link)

    for module_id, order in wanted.items():
        link = current.get(module_id)
        if link is None:
            pathway.modules.append(PathwayModule(module_id=module_id, order=order))
        else:
            link.order = order

    db.add(pathway)
    db.commit()
    db.refresh(pathway)
    return pathway


def assign_to_group(
    db: Session, pathway_id: int, group_id: int, due_date: Optional[datetime] = None
) -> GroupPathwayAssignment:
    assignment = (
        db.query(GroupPathwayAssignment)
        .filter_by(pathway_id=pathway_id, group_id=group_id)
        .first()
    )
    if assignment is None:
        assignment = GroupPathwayAssignment(pathway_id=pathway_id, group_id=group_id)
        db.add(assignment)
    assignment.due_date = due_date
    db.commit()
    db.refresh(assignment)
    return assignment


def assign_to_user(
    db: Session, pathway_id: int, user_id: int, due_date: Optional[datetime] = None
) -> UserPathwayAssignment:
    assignment = (
        db.query(UserPathwayAssignment)
        .filter_by(pathway_id=pathway_id, user_id=user_id)
        .first()
    )
    if assignment is None:
        assignment = UserPathwayAssignment(pathway_id=pathway_id, user_id=user_id)
        db.add(assignment)
    assignment.due_date = due_date
    db.commit()
    db.refresh(assignment)
    return assignment


def remove_group_assignment(db: Session, pathway_id: int, group_id: int) -> bool:
    deleted = (
        db.query(GroupPathwayAssignment)
        .filter_by(pathway_id=pathway_id, group_id=group_id)
        .delete(synchronize_session="fetch")
    )
    db.commit()
    return bool(deleted)


def remove_user_assignment(db: Session, pathway_id: int, user_id: int) -> bool:
    deleted = (
        db.query(UserPathwayAssignment)
        .filter_by(pathway_id=pathway_id, user_id=user_id)
        .delete(synchronize_session="fetch")
    )
    db.commit()
    return bool(deleted)


def get_group_assignments(db: Session, group_ids: Iterable[int]) -> list[GroupPathwayAssignment]:
    ids = list(group_ids)
    if not ids:
        return []
    return (
        db.query(GroupPathwayAssignment)
        .filter(GroupPathwayAssignment.group_id.in_(ids))
        .all()
    )


def get_user_assignments(db: Session, user_id: int) -> list[UserPathwayAssignment]:
    return db.query(UserPathwayAssignment).filter(UserPathwayAssignment.user_id == user_id).all()
