"""Utility helpers for test factories."""

from __future__ import annotations

from typing import Sequence

from learnhub.models.module.module_model import Module
from learnhub.models.module.quiz_model import Quiz, QuizQuestion
from learnhub.models.module.step_model import (
    ContentBlockType,
    ModuleStep,
    StepCheckpoint,
    StepContentBlock,
)
from learnhub.models.pathway.pathway_model import PathwayModule, TrainingPathway
from learnhub.models.user.group_model import GroupMember, UserGroup
from learnhub.models.user.user_model import User, UserRole

OPTIONS = ["A", "B", "C", "D"]


def create_user(db, **kwargs) -> User:
    defaults = {
        "username": "user",
        "email": None,
        "hashed_password": "x",
        "role": UserRole.USER,
        "is_active": True,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_admin(db, **kwargs) -> User:
    kwargs.setdefault("username", "admin")
    kwargs.setdefault("role", UserRole.ADMIN)
    return create_user(db, **kwargs)


def create_module_graph(
    db,
    *,
    title: str = "Module",
    published: bool = True,
    order: int = 1,
    checkpoint_keys: Sequence[int | None] = (0, 0, 0),
    is_evaluated: bool = True,
    quiz_keys: Sequence[int] = (),
    passing_score: int = 70,
) -> Module:
    """Build a module with one step per entry of ``checkpoint_keys``.

    A ``None`` key produces a pure content step without checkpoint.
    """
    module = Module(title=title, published=published, order=order)
    for index, key in enumerate(checkpoint_keys):
        step = ModuleStep(title=f"Step {index + 1}", order=index + 1)
        step.content_blocks.append(
            StepContentBlock(block_type=ContentBlockType.TEXT, content=f"<p>Step {index + 1}</p>", order=1)
        )
        if key is not None:
            step.checkpoints.append(
                StepCheckpoint(
                    question=f"Question {index + 1}",
                    options=list(OPTIONS),
                    correct_option_index=key,
                    explanation=f"Because of step {index + 1}",
                    is_evaluated=is_evaluated,
                    order=1,
                )
            )
        module.steps.append(step)

    module.quiz = Quiz(passing_score=passing_score)
    for index, key in enumerate(quiz_keys):
        module.quiz.questions.append(
            QuizQuestion(
                question=f"Quiz question {index + 1}",
                options=list(OPTIONS),
                correct_option_index=key,
                order=index + 1,
            )
        )

    db.add(module)
    db.commit()
    db.refresh(module)
    return module


def create_group(db, name: str = "Team", members: Sequence[User] = ()) -> UserGroup:
    group = UserGroup(name=name)
    for user in members:
        group.members.append(GroupMember(user_id=user.id))
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def create_pathway(db, name: str = "Onboarding", *, published: bool = True, modules: Sequence[Module] = ()) -> TrainingPathway:
    pathway = TrainingPathway(name=name, published=published)
    for index, module in enumerate(modules):
        pathway.modules.append(PathwayModule(module_id=module.id, order=index + 1))
    db.add(pathway)
    db.commit()
    db.refresh(pathway)
    return pathway
