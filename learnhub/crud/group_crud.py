from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from learnhub.models.user.group_model import GroupMember, UserGroup
from learnhub.schemas.user.group_schema import GroupCreate, GroupUpdate


def list_groups(db: Session) -> list[UserGroup]:
    return (
        db.query(UserGroup)
        .options(selectinload(UserGroup.members))
        .order_by(UserGroup.name.asc(), UserGroup.id.asc())
        .all()
    )


def get_group(db: Session, group_id: int) -> Optional[UserGroup]:
    return (
        db.query(UserGroup)
        .options(
            selectinload(UserGroup.members).selectinload(GroupMember.user),
            selectinload(UserGroup.pathway_assignments),
        )
        .filter(UserGroup.id == group_id)
        .first()
    )


def create_group(db: Session, data: GroupCreate) -> UserGroup:
    group = UserGroup(**data.model_dump())
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def update_group(db: Session, group: UserGroup, data: GroupUpdate) -> UserGroup:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(group, field, value)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def delete_group(db: Session, group: UserGroup) -> None:
    db.delete(group)
    db.commit()


def count_groups(db: Session) -> int:
    return int(db.query(func.count(UserGroup.id)).scalar() or 0)


def get_member(db: Session, group_id: int, user_id: int) -> Optional[GroupMember]:
    return db.query(GroupMember).filter_by(group_id=group_id, user_id=user_id).first()


def add_member(db: Session, group_id: int, user_id: int) -> GroupMember:
    """Add a user to a group; adding an existing member returns the current row."""
    member = get_member(db, group_id, user_id)
    if member is not None:
        return member
    member = GroupMember(group_id=group_id, user_id=user_id)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def remove_member(db: Session, group_id: int, user_id: int) -> bool:
    member = get_member(db, group_id, user_id)
    if member is None:
        return False
    db.delete(member)
    db.commit()
    return True


def get_user_group_ids(db: Session, user_id: int) -> list[int]:
    rows = db.query(GroupMember.group_id).filter(GroupMember.user_id == user_id).all()
    return [row[0] for row in rows]
