from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional

from learnhub.core.security import get_password_hash
from learnhub.models.user.user_model import User, UserRole
from learnhub.schemas.user.user_schema import UserCreate


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Fetch a user by username, ``None`` when unknown."""
    return db.query(User).filter(User.username == username).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def count_users(db: Session) -> int:
    return int(db.query(func.count(User.id)).scalar() or 0)


def create_user(db: Session, user: UserCreate) -> User:
    """Hash the password and persist a new account."""
    db_user = User(
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        hashed_password=get_password_hash(user.password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user_role(db: Session, user: User, role: UserRole) -> User:
    user.role = role
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
