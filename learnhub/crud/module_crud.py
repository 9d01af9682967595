from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from learnhub.core.config import settings
from learnhub.models.module.module_model import Module
from learnhub.models.module.quiz_model import Quiz
from learnhub.models.module.step_model import ModuleStep
from learnhub.schemas.module.module_schema import ModuleCreate, ModuleUpdate


def list_modules(db: Session, *, include_unpublished: bool = False) -> list[Module]:
    query = db.query(Module).options(selectinload(Module.quiz).selectinload(Quiz.questions))
    if not include_unpublished:
        query = query.filter(Module.published.is_(True))
    return query.order_by(Module.order.asc(), Module.id.asc()).all()


def get_module(db: Session, module_id: int) -> Optional[Module]:
    return db.get(Module, module_id)


def get_module_with_tree(db: Session, module_id: int) -> Optional[Module]:
    """Load a module with its steps, their blocks and checkpoints, and its quiz."""
    return (
        db.query(Module)
        .options(
            selectinload(Module.steps).selectinload(ModuleStep.content_blocks),
            selectinload(Module.steps).selectinload(ModuleStep.checkpoints),
            selectinload(Module.quiz).selectinload(Quiz.questions),
        )
        .filter(Module.id == module_id)
        .first()
    )


def create_module(db: Session, data: ModuleCreate) -> Module:
    """Create a module together with its (empty) final quiz."""
    module = Module(**data.model_dump())
    module.quiz = Quiz(passing_score=settings.DEFAULT_PASSING_SCORE)
    db.add(module)
    db.commit()
    db.refresh(module)
    return module


def update_module(db: Session, module: Module, data: ModuleUpdate) -> Module:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(module, field, value)
    db.add(module)
    db.commit()
    db.refresh(module)
    return module


def delete_module(db: Session, module: Module) -> None:
    db.delete(module)
    db.commit()


def count_modules(db: Session, *, published_only: bool = False) -> int:
    query = db.query(func.count(Module.id))
    if published_only:
        query = query.filter(Module.published.is_(True))
    return int(query.scalar() or 0)
