"""Seed a fresh LearnHub database with an administrator and demo modules.

Usage::

    python -m scripts.seed_modules --admin-username admin --admin-password secret

Seeding is skipped when modules already exist. Each demo module gets three
steps (text content plus a checkpoint) and a four-question final quiz.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sqlalchemy.orm import Session

sys.path.append(str(Path(__file__).resolve().parents[1]))
from learnhub.db.base import Base  # noqa: F401,E402 - registers every model
from learnhub.crud import module_crud, user_crud  # noqa: E402
from learnhub.core.security import get_password_hash  # noqa: E402
from learnhub.models.user.user_model import User, UserRole  # noqa: E402
from learnhub.schemas.module.module_schema import ModuleCreate  # noqa: E402
from learnhub.schemas.module.quiz_schema import QuizQuestionIn, QuizSaveIn  # noqa: E402
from learnhub.schemas.module.step_schema import CheckpointIn, ContentBlockIn, StepIn  # noqa: E402
from learnhub.services.admin_service import AdminService  # noqa: E402

logger = logging.getLogger(__name__)

DEMO_MODULES = [
    ("Module 1 - Introduction", "Core concepts and goals of the training programme."),
    ("Module 2 - Deep dive", "A closer look at the key topics."),
    ("Module 3 - Practice", "Apply what you learned through guided exercises."),
]

DEMO_STEPS = [
    ("Learning objectives", "<p>What you will learn in this module.</p>"),
    ("Main content", "<p>The detailed training content of the module.</p>"),
    ("Summary and next steps", "<p>Review the key ideas before taking the quiz.</p>"),
]


def get_or_create_admin(db: Session, username: str, password: str) -> User:
    admin = user_crud.get_user_by_username(db, username)
    if admin is None:
        logger.info("Creating administrator '%s'", username)
        admin = User(
            username=username,
            hashed_password=get_password_hash(password),
            role=UserRole.ADMIN,
            is_active=True,
        )
        db.add(admin)
    else:
        logger.info("Administrator '%s' exists, resetting role and password", username)
        admin.role = UserRole.ADMIN
        admin.hashed_password = get_password_hash(password)
    db.commit()
    db.refresh(admin)
    return admin


def _demo_steps() -> list[StepIn]:
    steps = []
    for index, (title, html) in enumerate(DEMO_STEPS, start=1):
        steps.append(
            StepIn(
                title=title,
                content_blocks=[ContentBlockIn(block_type="text", content=html)],
                checkpoints=[
                    CheckpointIn(
                        question=f"Checkpoint {index}: which statement is correct?",
                        options=["The first one", "The second one", "The third one"],
                        correct_option_index=0,
                        explanation="The first statement summarises this step.",
                    )
                ],
            )
        )
    return steps


def _demo_quiz() -> QuizSaveIn:
    return QuizSaveIn(
        passing_score=70,
        questions=[
            QuizQuestionIn(
                question=f"Question {number}",
                options=["Option A", "Option B", "Option C", "Option D"],
                correct_option_index=(number - 1) % 4,
            )
            for number in range(1, 5)
        ],
    )


def seed_demo_modules(db: Session, admin: User) -> int:
    """Create the demo modules, returning how many were created."""
    if module_crud.count_modules(db) > 0:
        logger.info("Modules already present, skipping demo content.")
        return 0

    service = AdminService(db, admin)
    for order, (title, description) in enumerate(DEMO_MODULES, start=1):
        module = service.create_module(
            ModuleCreate(title=title, description=description, order=order, published=True)
        )
        service.save_module_steps(module.id, _demo_steps())
        service.save_module_quiz(module.id, _demo_quiz())
    logger.info("Created %s demo modules", len(DEMO_MODULES))
    return len(DEMO_MODULES)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed LearnHub with demo content")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-password", required=True)
    parser.add_argument(
        "--skip-modules",
        action="store_true",
        help="Only create or reset the administrator account.",
    )
    args = parser.parse_args(argv)

    from learnhub.db import session as db_session

    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as db:
        admin = get_or_create_admin(db, args.admin_username, args.admin_password)
        if not args.skip_modules:
            seed_demo_modules(db, admin)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
